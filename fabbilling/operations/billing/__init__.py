"""Billing operations: pricing, invoices, payment schedules and the gateway."""

from .coupon_service import CouponService
from .documents import DocumentRenderer
from .invoice_builder import InvoiceBuilder, PaymentContext, resolve_payment_method
from .invoices_service import InvoicesService
from .listing import ListFilters, Page
from .payment_provider import (
  PaymentProvider,
  StripePaymentProvider,
  get_payment_provider,
)
from .payment_schedule_service import PaymentScheduleService
from .pricing import (
  EventPurchase,
  PlanSelection,
  PriceBreakdown,
  PricedElement,
  PricedPurchase,
  Reservable,
  ReservableKind,
  Slot,
  SlotPurchase,
  SubscriptionPurchase,
  price_purchase,
)

__all__ = [
  "CouponService",
  "DocumentRenderer",
  "EventPurchase",
  "InvoiceBuilder",
  "InvoicesService",
  "ListFilters",
  "Page",
  "PaymentContext",
  "PaymentProvider",
  "PaymentScheduleService",
  "PlanSelection",
  "PriceBreakdown",
  "PricedElement",
  "PricedPurchase",
  "Reservable",
  "ReservableKind",
  "Slot",
  "SlotPurchase",
  "StripePaymentProvider",
  "SubscriptionPurchase",
  "get_payment_provider",
  "price_purchase",
  "resolve_payment_method",
]
