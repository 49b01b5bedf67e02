"""JWT token utilities.

Tokens carry the invoicing profile id in the `profile_id` claim and are
signed with HS256.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import HTTPException, status

from ...config import env
from ...config.logging import get_logger

logger = get_logger("fabbilling.auth.jwt")

ALGORITHM = "HS256"


class JWTConfig:
  """JWT configuration management."""

  @staticmethod
  def get_jwt_secret() -> str:
    secret = env.JWT_SECRET_KEY
    if not secret:
      raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="JWT secret key is not set",
      )
    return secret


def create_jwt_token(profile_id: str, expiry_hours: Optional[int] = None) -> str:
  """Issue a token for an invoicing profile."""
  now = datetime.now(timezone.utc)
  payload = {
    "profile_id": profile_id,
    "iat": now,
    "exp": now + timedelta(hours=expiry_hours or env.JWT_EXPIRY_HOURS),
    "iss": env.JWT_ISSUER,
    "aud": env.JWT_AUDIENCE,
    "jti": str(uuid.uuid4()),
  }
  return jwt.encode(payload, JWTConfig.get_jwt_secret(), algorithm=ALGORITHM)


def verify_jwt_token(token: str) -> Optional[str]:
  """Verify a JWT token and return the profile_id if valid."""
  try:
    payload = jwt.decode(
      token,
      JWTConfig.get_jwt_secret(),
      algorithms=[ALGORITHM],
      issuer=env.JWT_ISSUER,
      audience=env.JWT_AUDIENCE,
    )
    return payload.get("profile_id")

  except jwt.ExpiredSignatureError:
    logger.info("JWT token verification failed: token expired")
    return None
  except jwt.InvalidTokenError as e:
    logger.warning(f"JWT token verification failed: {e}")
    return None
