"""Payment provider abstraction layer.

Billing code talks to the payment gateway only through this interface, so
that adding a processor (PayZen, ...) does not change business logic.
"""

from abc import ABC, abstractmethod
from datetime import UTC, datetime
from typing import Any, Dict, List, Optional

import stripe

from ...config.gateway import GatewayConfig
from ...exceptions import GatewayError
from ...logger import get_logger

logger = get_logger("fabbilling.gateway")


class PaymentProvider(ABC):
  """Abstract payment provider interface."""

  @abstractmethod
  def create_price(
    self,
    product_id: str,
    unit_amount: int,
    name: Optional[str] = None,
    monthly: bool = False,
  ) -> str:
    """Create a price for a product.

    Args:
        product_id: Provider product ID
        unit_amount: Amount in cents
        name: Optional nickname shown on the provider's dashboard
        monthly: Recurring every month when True, one-time otherwise

    Returns:
        price_id: Price ID in payment provider
    """
    pass

  @abstractmethod
  def create_subscription(
    self,
    customer_id: str,
    cancel_at: datetime,
    promotion_code: Optional[str],
    upfront_price_ids: List[str],
    recurring_price_id: str,
  ) -> str:
    """Create a subscription that ends at `cancel_at`.

    Args:
        customer_id: Provider customer ID
        cancel_at: When the provider stops charging
        promotion_code: Optional promotion code applied by the provider
        upfront_price_ids: One-time prices invoiced with the first deadline
        recurring_price_id: Monthly price charged on every deadline

    Returns:
        provider_subscription_id: Subscription ID in payment provider
    """
    pass

  @abstractmethod
  def retrieve_payment_intent(self, payment_intent_id: str) -> Dict[str, Any]:
    """Fetch the current status of a payment.

    Returns:
        Dict with keys: status, client_secret
    """
    pass


class StripePaymentProvider(PaymentProvider):
  """Stripe implementation of payment provider."""

  def __init__(self, config: GatewayConfig):
    """Initialize Stripe from an explicit gateway configuration.

    The key is passed on every call instead of being set globally.
    """
    self.config = config
    self.stripe = stripe
    logger.info("Initialized Stripe payment provider")

  def _request_options(self) -> Dict[str, Any]:
    options: Dict[str, Any] = {"api_key": self.config.secret_key}
    if self.config.api_version:
      options["stripe_version"] = self.config.api_version
    return options

  def create_price(
    self,
    product_id: str,
    unit_amount: int,
    name: Optional[str] = None,
    monthly: bool = False,
  ) -> str:
    """Create Stripe price."""
    params: Dict[str, Any] = {
      "product": product_id,
      "unit_amount": unit_amount,
      "currency": self.config.currency,
    }
    if name:
      params["nickname"] = name
    if monthly:
      params["recurring"] = {"interval": "month", "interval_count": 1}

    try:
      price = self.stripe.Price.create(**params, **self._request_options())
    except stripe.StripeError as e:
      logger.error(
        f"Failed to create Stripe price for product {product_id}: {e.user_message or e}",
        extra={"gateway_object_id": product_id, "amount": unit_amount},
      )
      raise GatewayError(
        e.user_message or str(e),
        operation="create_price",
        gateway_code=e.code,
      ) from e

    logger.info(
      f"Created Stripe price {price.id}",
      extra={
        "gateway_object_id": price.id,
        "product_id": product_id,
        "amount": unit_amount,
        "monthly": monthly,
      },
    )

    return price.id

  def create_subscription(
    self,
    customer_id: str,
    cancel_at: datetime,
    promotion_code: Optional[str],
    upfront_price_ids: List[str],
    recurring_price_id: str,
  ) -> str:
    """Create Stripe subscription for a payment schedule."""
    # Stored timestamps are naive UTC
    if cancel_at.tzinfo is None:
      cancel_at = cancel_at.replace(tzinfo=UTC)

    params: Dict[str, Any] = {
      "customer": customer_id,
      "cancel_at": int(cancel_at.timestamp()),
      "add_invoice_items": [{"price": price_id} for price_id in upfront_price_ids],
      "items": [{"price": recurring_price_id}],
    }
    if promotion_code:
      params["promotion_code"] = promotion_code

    try:
      subscription = self.stripe.Subscription.create(
        **params, **self._request_options()
      )
    except stripe.StripeError as e:
      logger.error(
        f"Failed to create Stripe subscription for customer {customer_id}: "
        f"{e.user_message or e}",
        extra={"customer_id": customer_id},
      )
      raise GatewayError(
        e.user_message or str(e),
        operation="create_subscription",
        gateway_code=e.code,
      ) from e

    logger.info(
      f"Created Stripe subscription {subscription.id}",
      extra={
        "gateway_object_id": subscription.id,
        "customer_id": customer_id,
        "upfront_items": len(upfront_price_ids),
      },
    )

    return subscription.id

  def retrieve_payment_intent(self, payment_intent_id: str) -> Dict[str, Any]:
    """Retrieve Stripe payment intent status."""
    try:
      intent = self.stripe.PaymentIntent.retrieve(
        payment_intent_id, **self._request_options()
      )
    except stripe.StripeError as e:
      logger.error(
        f"Failed to retrieve payment intent {payment_intent_id}: {e.user_message or e}",
        extra={"gateway_object_id": payment_intent_id},
      )
      raise GatewayError(
        e.user_message or str(e),
        operation="retrieve_payment_intent",
        gateway_code=e.code,
      ) from e

    logger.debug(
      f"Payment intent {payment_intent_id} is {intent.status}",
      extra={"gateway_object_id": payment_intent_id},
    )

    return {"status": intent.status, "client_secret": intent.client_secret}


def get_payment_provider(config: GatewayConfig) -> PaymentProvider:
  """Factory function to get the payment provider of the configured gateway.

  Raises:
      ValueError: Unknown gateway name
      NotImplementedError: Gateway not yet implemented
  """
  if config.gateway == "stripe":
    return StripePaymentProvider(config)
  elif config.gateway == "payzen":
    raise NotImplementedError("PayZen provider not yet implemented")
  else:
    raise ValueError(f"Unknown payment provider: {config.gateway}")
