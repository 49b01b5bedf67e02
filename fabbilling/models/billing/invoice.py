"""Invoice models - one invoice per completed purchase."""

from datetime import UTC, datetime
from typing import Optional

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Session, relationship

from ...database import Base
from ...logger import get_logger

logger = get_logger(__name__)


class Invoice(Base):
  """Durable billed record for a single completed transaction.

  Totals are final once the invoice is built; the only later change is
  attaching the gateway object that paid it.
  """

  __tablename__ = "invoices"

  id = Column(Integer, primary_key=True, autoincrement=True)

  reference = Column(String, unique=True, nullable=True)

  invoicing_profile_id = Column(
    String, ForeignKey("invoicing_profiles.id"), nullable=False
  )
  operator_profile_id = Column(
    String, ForeignKey("invoicing_profiles.id"), nullable=False
  )

  total = Column(Integer, nullable=False)
  coupon_id = Column(Integer, ForeignKey("coupons.id"), nullable=True)

  payment_method = Column(String, nullable=True)
  gateway_object_id = Column(String, nullable=True)
  gateway_object_type = Column(String, nullable=True)

  created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

  invoice_items = relationship(
    "InvoiceItem",
    back_populates="invoice",
    cascade="all, delete-orphan",
    order_by="InvoiceItem.id",
  )
  invoicing_profile = relationship(
    "InvoicingProfile", foreign_keys=[invoicing_profile_id]
  )
  operator_profile = relationship("InvoicingProfile", foreign_keys=[operator_profile_id])
  coupon = relationship("Coupon")

  __table_args__ = (
    Index("idx_invoice_profile", "invoicing_profile_id"),
    Index("idx_invoice_created_at", "created_at"),
    Index("idx_invoice_gateway_object", "gateway_object_id"),
  )

  def __repr__(self) -> str:
    return f"<Invoice {self.reference} total={self.total / 100:.2f}>"

  @classmethod
  def generate_reference(cls, session: Session) -> str:
    """Generate the next reference for the current month."""
    now = datetime.now(UTC)

    count = (
      session.query(cls)
      .filter(cls.reference.like(f"INV-{now.year}-{now.month:02d}-%"))
      .count()
      + 1
    )

    return f"INV-{now.year}-{now.month:02d}-{count:04d}"

  def attach_gateway_object(
    self, object_id: str, object_type: str, session: Session
  ) -> None:
    """Record the gateway payment object that settled this invoice."""
    self.gateway_object_id = object_id
    self.gateway_object_type = object_type

    session.commit()
    session.refresh(self)

    logger.info(
      f"Attached {object_type} {object_id} to invoice {self.reference}",
      extra={"invoice_id": self.id, "gateway_object_id": object_id},
    )

  @classmethod
  def get_by_id(cls, invoice_id: int, session: Session) -> Optional["Invoice"]:
    return session.query(cls).filter(cls.id == invoice_id).first()


class InvoiceItem(Base):
  """Line item of an invoice."""

  __tablename__ = "invoice_items"

  id = Column(Integer, primary_key=True, autoincrement=True)

  invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=False)

  amount = Column(Integer, nullable=False)
  description = Column(String, nullable=False)
  subscription_id = Column(Integer, nullable=True)

  invoice = relationship("Invoice", back_populates="invoice_items")

  __table_args__ = (Index("idx_invoice_item_invoice", "invoice_id"),)

  def __repr__(self) -> str:
    return f"<InvoiceItem {self.description!r} {self.amount / 100:.2f}>"
