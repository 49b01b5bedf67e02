"""
Authentication dependencies for FastAPI.

The bearer token identifies an invoicing profile; staff routes additionally
check the profile's role.
"""

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from ...database import get_db_session
from ...logger import logger
from ...models.billing import InvoicingProfile
from .jwt import verify_jwt_token

BEARER = HTTPBearer(auto_error=False)


async def get_current_profile(
  request: Request,
  credentials: HTTPAuthorizationCredentials | None = Security(BEARER),
  db: Session = Depends(get_db_session),
) -> InvoicingProfile:
  """Resolve the authenticated invoicing profile or answer 401."""
  if credentials is None:
    raise HTTPException(
      status_code=status.HTTP_401_UNAUTHORIZED,
      detail="Authentication required",
      headers={"WWW-Authenticate": "Bearer"},
    )

  profile_id = verify_jwt_token(credentials.credentials)
  profile = InvoicingProfile.get_by_id(profile_id, db) if profile_id else None
  if profile is None:
    logger.info("Rejected request with an invalid or unknown token")
    raise HTTPException(
      status_code=status.HTTP_401_UNAUTHORIZED,
      detail="Invalid authentication credentials",
      headers={"WWW-Authenticate": "Bearer"},
    )

  request.state.profile_id = profile.id
  return profile


async def require_staff(
  profile: InvoicingProfile = Depends(get_current_profile),
) -> InvoicingProfile:
  """Admins and managers only."""
  if not profile.is_staff():
    raise HTTPException(
      status_code=status.HTTP_403_FORBIDDEN,
      detail="Staff privileges required",
    )
  return profile


async def require_admin(
  profile: InvoicingProfile = Depends(get_current_profile),
) -> InvoicingProfile:
  if not profile.is_admin():
    raise HTTPException(
      status_code=status.HTTP_403_FORBIDDEN,
      detail="Administrator privileges required",
    )
  return profile
