"""
Custom Exception Types for FabBilling.

This module provides the hierarchy of exceptions raised by the billing core.
Each exception type carries an error code and additional details so that
routers can surface the specific reason to the caller.
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone


class FabBillingError(Exception):
  """
  Base exception for all FabBilling application errors.

  Attributes:
      message: Human-readable error message
      error_code: Application-specific error code for categorization
      details: Additional error context and metadata
      timestamp: When the error occurred
  """

  def __init__(
    self,
    message: str,
    error_code: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
  ):
    super().__init__(message)
    self.message = message
    self.error_code = error_code or self.__class__.__name__
    self.details = details or {}
    self.timestamp = datetime.now(timezone.utc).isoformat()

  def to_dict(self) -> Dict[str, Any]:
    """Convert exception to dictionary for API responses."""
    return {
      "error": self.error_code,
      "message": self.message,
      "details": self.details,
      "timestamp": self.timestamp,
    }


# ============================================================================
# Pricing Exceptions
# ============================================================================


class PricingError(FabBillingError):
  """Raised when a purchase cannot be priced from the given breakdown."""

  def __init__(self, reason: str, **kwargs):
    super().__init__(
      f"Unable to price purchase: {reason}",
      error_code="PRICING_ERROR",
      details={"reason": reason, **kwargs},
    )


class TypeMismatchError(FabBillingError, TypeError):
  """Raised when a line generator is invoked for the wrong kind of purchase.

  This is a programming error: callers dispatch on the purchase variant, so
  it can only happen when a new reservable kind is added without a
  generator.
  """

  def __init__(self, expected: str, actual: str):
    super().__init__(
      f"Expected a {expected} purchase, got {actual}",
      error_code="TYPE_MISMATCH",
      details={"expected": expected, "actual": actual},
    )


# ============================================================================
# Gateway Exceptions
# ============================================================================


class GatewayError(FabBillingError):
  """Raised when the payment processor rejects or fails a request.

  The processor's own message is kept verbatim so that it reaches the user
  who triggered the action.
  """

  def __init__(
    self,
    message: str,
    gateway: str = "stripe",
    operation: Optional[str] = None,
    gateway_code: Optional[str] = None,
  ):
    details: Dict[str, Any] = {"gateway": gateway}
    if operation:
      details["operation"] = operation
    if gateway_code:
      details["gateway_code"] = gateway_code
    super().__init__(message, error_code="GATEWAY_ERROR", details=details)
    self.gateway = gateway
    self.gateway_code = gateway_code


# ============================================================================
# Payment Schedule Exceptions
# ============================================================================


class InvalidStateTransitionError(FabBillingError):
  """Raised when a payment schedule deadline is not eligible for an action."""

  def __init__(
    self,
    item_id: Optional[int],
    current_state: str,
    target_state: str,
    reason: Optional[str] = None,
  ):
    message = (
      f"Cannot move payment schedule item {item_id} from '{current_state}' "
      f"to '{target_state}'"
    )
    if reason:
      message += f": {reason}"
    super().__init__(
      message,
      error_code="INVALID_STATE_TRANSITION",
      details={
        "item_id": item_id,
        "current_state": current_state,
        "target_state": target_state,
        "reason": reason,
      },
    )


class PaymentMethodMismatchError(FabBillingError):
  """Raised when an action does not apply to how the schedule is paid."""

  def __init__(self, schedule_id: Optional[int], payment_method: str, action: str):
    super().__init__(
      f"Cannot {action} payment schedule {schedule_id}: it is paid by {payment_method}",
      error_code="PAYMENT_METHOD_MISMATCH",
      details={
        "payment_schedule_id": schedule_id,
        "payment_method": payment_method,
        "action": action,
      },
    )


# ============================================================================
# Settings Exceptions
# ============================================================================


class SettingLockedError(FabBillingError):
  """Raised when writing a setting that the deployment has locked."""

  def __init__(self, name: str):
    super().__init__(
      f"Setting '{name}' is locked",
      error_code="SETTING_LOCKED",
      details={"name": name, "reason": "locked"},
    )


# ============================================================================
# Generic Exceptions
# ============================================================================


class EntityNotFoundError(FabBillingError):
  """Raised when a requested record does not exist."""

  def __init__(self, entity_id: Any, entity_type: str = "Entity"):
    super().__init__(
      f"{entity_type} '{entity_id}' not found",
      error_code="ENTITY_NOT_FOUND",
      details={"entity_id": entity_id, "entity_type": entity_type},
    )


class ConfigurationError(FabBillingError):
  """Raised when there are configuration issues."""

  def __init__(self, config_key: str, reason: str):
    super().__init__(
      f"Configuration error for '{config_key}': {reason}",
      error_code="CONFIGURATION_ERROR",
      details={"config_key": config_key, "reason": reason},
    )
