"""Translate billing exceptions into HTTP errors."""

from fastapi import HTTPException, status

from ..exceptions import (
  ConfigurationError,
  EntityNotFoundError,
  FabBillingError,
  GatewayError,
  InvalidStateTransitionError,
  PaymentMethodMismatchError,
  PricingError,
  SettingLockedError,
  TypeMismatchError,
)
from ..logger import logger

STATUS_CODES = {
  EntityNotFoundError: status.HTTP_404_NOT_FOUND,
  PricingError: status.HTTP_422_UNPROCESSABLE_ENTITY,
  InvalidStateTransitionError: status.HTTP_422_UNPROCESSABLE_ENTITY,
  PaymentMethodMismatchError: status.HTTP_422_UNPROCESSABLE_ENTITY,
  SettingLockedError: status.HTTP_423_LOCKED,
  GatewayError: status.HTTP_502_BAD_GATEWAY,
  TypeMismatchError: status.HTTP_500_INTERNAL_SERVER_ERROR,
  ConfigurationError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def http_error(error: FabBillingError) -> HTTPException:
  """Build the HTTPException carrying the error's specific reason."""
  status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
  for error_type, code in STATUS_CODES.items():
    if isinstance(error, error_type):
      status_code = code
      break

  if status_code >= 500 and not isinstance(error, GatewayError):
    logger.error(f"{error.error_code}: {error.message}", exc_info=error)

  return HTTPException(status_code=status_code, detail=error.to_dict())
