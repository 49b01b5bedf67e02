from .billing import (
  Coupon,
  Invoice,
  InvoiceItem,
  InvoicingProfile,
  PaymentSchedule,
  PaymentScheduleItem,
  Plan,
  Setting,
)


__all__ = [
  "Coupon",  # Discount rules
  "Invoice",  # Billed record of a purchase
  "InvoiceItem",  # Invoice line item
  "InvoicingProfile",  # Customer/operator billing identity
  "PaymentSchedule",  # Subscription paid in monthly deadlines
  "PaymentScheduleItem",  # Single deadline
  "Plan",  # Subscription plan
  "Setting",  # Administrator-editable setting
]
