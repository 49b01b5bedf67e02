"""Service factories injected into the routers."""

from fastapi import Depends
from sqlalchemy.orm import Session

from ..config.gateway import GatewayConfig
from ..database import get_db_session
from ..operations.billing import (
  DocumentRenderer,
  InvoicesService,
  PaymentScheduleService,
)
from ..operations.settings_service import SettingsService


def get_gateway_config(db: Session = Depends(get_db_session)) -> GatewayConfig:
  return GatewayConfig.from_settings(db)


def get_invoices_service(db: Session = Depends(get_db_session)) -> InvoicesService:
  return InvoicesService(db)


def get_payment_schedule_service(
  db: Session = Depends(get_db_session),
  config: GatewayConfig = Depends(get_gateway_config),
) -> PaymentScheduleService:
  return PaymentScheduleService(db, config)


def get_settings_service(db: Session = Depends(get_db_session)) -> SettingsService:
  return SettingsService(db)


def get_document_renderer(
  config: GatewayConfig = Depends(get_gateway_config),
) -> DocumentRenderer:
  return DocumentRenderer(currency=config.currency)
