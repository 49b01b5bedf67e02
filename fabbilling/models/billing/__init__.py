"""Billing models package."""

from .coupon import Coupon, CouponStatus, CouponValidity
from .invoice import Invoice, InvoiceItem
from .payment_schedule import (
  ALLOWED_TRANSITIONS,
  PaymentSchedule,
  PaymentScheduleItem,
  PaymentScheduleItemState,
  PaymentScheduleMethod,
)
from .plan import Plan, PlanInterval
from .profile import InvoicingProfile, ProfileRole
from .setting import Setting

__all__ = [
  "ALLOWED_TRANSITIONS",
  "Coupon",
  "CouponStatus",
  "CouponValidity",
  "Invoice",
  "InvoiceItem",
  "InvoicingProfile",
  "PaymentSchedule",
  "PaymentScheduleItem",
  "PaymentScheduleItemState",
  "PaymentScheduleMethod",
  "Plan",
  "PlanInterval",
  "ProfileRole",
  "Setting",
]
