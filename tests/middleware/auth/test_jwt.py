"""Tests for JWT token utilities."""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import jwt
import pytest
from fastapi import HTTPException

from fabbilling.config import env
from fabbilling.middleware.auth.jwt import (
  ALGORITHM,
  JWTConfig,
  create_jwt_token,
  verify_jwt_token,
)


class TestCreateToken:
  def test_claims(self):
    token = create_jwt_token("prof_123")

    payload = jwt.decode(
      token,
      env.JWT_SECRET_KEY,
      algorithms=[ALGORITHM],
      audience=env.JWT_AUDIENCE,
      issuer=env.JWT_ISSUER,
    )
    assert payload["profile_id"] == "prof_123"
    assert payload["jti"]
    assert payload["exp"] - payload["iat"] == env.JWT_EXPIRY_HOURS * 3600

  def test_custom_expiry(self):
    token = create_jwt_token("prof_123", expiry_hours=1)

    payload = jwt.decode(token, options={"verify_signature": False})
    assert payload["exp"] - payload["iat"] == 3600

  def test_tokens_are_unique(self):
    assert create_jwt_token("prof_123") != create_jwt_token("prof_123")

  def test_missing_secret(self):
    with patch.object(env, "JWT_SECRET_KEY", ""):
      with pytest.raises(HTTPException) as exc_info:
        JWTConfig.get_jwt_secret()

    assert exc_info.value.status_code == 500


class TestVerifyToken:
  def test_valid_token(self):
    assert verify_jwt_token(create_jwt_token("prof_123")) == "prof_123"

  def test_expired_token(self):
    now = datetime.now(timezone.utc)
    token = jwt.encode(
      {
        "profile_id": "prof_123",
        "iat": now - timedelta(hours=2),
        "exp": now - timedelta(hours=1),
        "iss": env.JWT_ISSUER,
        "aud": env.JWT_AUDIENCE,
      },
      env.JWT_SECRET_KEY,
      algorithm=ALGORITHM,
    )

    assert verify_jwt_token(token) is None

  def test_wrong_signature(self):
    token = jwt.encode(
      {"profile_id": "prof_123", "iss": env.JWT_ISSUER, "aud": env.JWT_AUDIENCE},
      "another-secret-key-with-at-least-32-characters",
      algorithm=ALGORITHM,
    )

    assert verify_jwt_token(token) is None

  def test_wrong_audience(self):
    token = jwt.encode(
      {"profile_id": "prof_123", "iss": env.JWT_ISSUER, "aud": "someone-else"},
      env.JWT_SECRET_KEY,
      algorithm=ALGORITHM,
    )

    assert verify_jwt_token(token) is None

  def test_garbage(self):
    assert verify_jwt_token("not.a.token") is None
