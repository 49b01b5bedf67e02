"""
Invoice builder.

Builds an unsaved Invoice from a priced purchase. Persisting it and giving
it a reference is the job of InvoicesService.save.
"""

from dataclasses import dataclass
from typing import Optional

from ...config.gateway import GatewayConfig
from ...logger import get_logger
from ...models.billing import Invoice, InvoiceItem, InvoicingProfile
from .coupon_service import CouponService
from .pricing import PricedPurchase

logger = get_logger(__name__)


@dataclass(frozen=True)
class PaymentContext:
  """How the purchase was paid, when known at build time."""

  payment_method: Optional[str] = None
  gateway_object_id: Optional[str] = None
  gateway_object_type: Optional[str] = None


def resolve_payment_method(
  config: GatewayConfig,
  customer: InvoicingProfile,
  operator: InvoicingProfile,
  explicit: Optional[str] = None,
) -> Optional[str]:
  """Decide the payment method tag recorded on the invoice.

  None means the payment was collected at the counter by staff and is
  recorded later. Members, and managers buying for themselves, pay through
  the configured gateway.
  """
  if explicit:
    return explicit
  if operator.is_admin():
    return None
  if operator.is_manager() and operator.id != customer.id:
    return None
  return config.gateway


class InvoiceBuilder:
  """Assemble invoices from priced purchases."""

  def __init__(self, config: GatewayConfig, coupon_service: CouponService):
    self.config = config
    self.coupon_service = coupon_service

  def build(
    self,
    priced: PricedPurchase,
    customer: InvoicingProfile,
    operator: InvoicingProfile,
    context: Optional[PaymentContext] = None,
  ) -> Invoice:
    context = context or PaymentContext()

    items = [
      InvoiceItem(
        amount=element.amount,
        description=element.description,
        subscription_id=element.subscription_id,
      )
      for element in priced.elements
    ]

    total = priced.subtotal
    coupon = priced.coupon
    if coupon is not None:
      total = self.coupon_service.apply(total, coupon, customer.id)

    invoice = Invoice(
      invoicing_profile_id=customer.id,
      operator_profile_id=operator.id,
      payment_method=resolve_payment_method(
        self.config, customer, operator, context.payment_method
      ),
      gateway_object_id=context.gateway_object_id,
      gateway_object_type=context.gateway_object_type,
      invoice_items=items,
      total=total,
      coupon_id=coupon.id if coupon is not None else None,
    )

    logger.debug(
      f"Built invoice for {customer.id}: {len(items)} items, total {total}",
      extra={"profile_id": customer.id},
    )

    return invoice
