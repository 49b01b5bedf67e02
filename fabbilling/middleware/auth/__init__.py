"""Authentication for the billing API."""

from .dependencies import get_current_profile, require_admin, require_staff
from .jwt import create_jwt_token, verify_jwt_token

__all__ = [
  "create_jwt_token",
  "get_current_profile",
  "require_admin",
  "require_staff",
  "verify_jwt_token",
]
