"""API routers."""

from .billing import invoices_router, payment_schedules_router
from .settings import router as settings_router

__all__ = [
  "invoices_router",
  "payment_schedules_router",
  "settings_router",
]
