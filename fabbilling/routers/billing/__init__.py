"""Billing routers."""

from .invoices import router as invoices_router
from .payment_schedules import router as payment_schedules_router

__all__ = [
  "invoices_router",
  "payment_schedules_router",
]
