"""
Test custom exceptions module.

Errors carry a stable code and the specific reason, which the routers
return to the caller.
"""

import pytest

from fabbilling.exceptions import (
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
from fabbilling.routers.errors import http_error


class TestBaseException:
  def test_defaults(self):
    error = FabBillingError("Something failed")

    assert str(error) == "Something failed"
    assert error.error_code == "FabBillingError"
    assert error.details == {}
    assert error.timestamp

  def test_to_dict(self):
    error = FabBillingError("Something failed", "CUSTOM", {"key": "value"})

    data = error.to_dict()
    assert data["error"] == "CUSTOM"
    assert data["message"] == "Something failed"
    assert data["details"] == {"key": "value"}
    assert data["timestamp"] == error.timestamp


class TestBillingExceptions:
  def test_pricing_error(self):
    error = PricingError("no price for slot 3", slot_id=3)

    assert error.error_code == "PRICING_ERROR"
    assert error.details == {"reason": "no price for slot 3", "slot_id": 3}

  def test_type_mismatch_is_a_type_error(self):
    error = TypeMismatchError("subscription", "event")

    assert isinstance(error, TypeError)
    assert isinstance(error, FabBillingError)

  def test_gateway_error_keeps_message(self):
    error = GatewayError(
      "Your card was declined.", operation="create_subscription", gateway_code="card_declined"
    )

    assert error.message == "Your card was declined."
    assert error.details == {
      "gateway": "stripe",
      "operation": "create_subscription",
      "gateway_code": "card_declined",
    }

  def test_invalid_transition_message(self):
    error = InvalidStateTransitionError(5, "paid", "pending", "deadline already paid")

    assert "from 'paid' to 'pending'" in error.message
    assert error.message.endswith("deadline already paid")
    assert error.details["item_id"] == 5

  def test_setting_locked(self):
    assert SettingLockedError("stripe_secret_key").details["reason"] == "locked"


class TestHttpError:
  @pytest.mark.parametrize(
    "error, status_code",
    [
      (EntityNotFoundError(1, "Invoice"), 404),
      (PricingError("no price"), 422),
      (InvalidStateTransitionError(1, "paid", "paid"), 422),
      (PaymentMethodMismatchError(1, "check", "synchronize"), 422),
      (SettingLockedError("stripe_secret_key"), 423),
      (GatewayError("No such customer"), 502),
      (ConfigurationError("stripe_product_id", "missing"), 500),
      (FabBillingError("unknown"), 500),
    ],
  )
  def test_status_codes(self, error, status_code):
    exc = http_error(error)

    assert exc.status_code == status_code
    assert exc.detail == error.to_dict()
