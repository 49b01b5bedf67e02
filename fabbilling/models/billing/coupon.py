"""Coupon model - discount rules applied once to an invoice total."""

from datetime import UTC, datetime
from enum import Enum
from typing import Optional

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import Session

from ...database import Base


class CouponValidity(str, Enum):
  """How many times a single customer may use a coupon."""

  ONCE = "once"
  FOREVER = "forever"


class CouponStatus(str, Enum):
  """Result of checking a coupon against a customer and an amount."""

  ACTIVE = "active"
  DISABLED = "disabled"
  EXPIRED = "expired"
  SOLD_OUT = "sold_out"
  ALREADY_USED = "already_used"
  AMOUNT_EXCEEDED = "amount_exceeded"


class Coupon(Base):
  """A discount, either a percentage or a fixed amount in cents."""

  __tablename__ = "coupons"

  id = Column(Integer, primary_key=True, autoincrement=True)

  code = Column(String, unique=True, nullable=False)
  name = Column(String, nullable=False)

  percent_off = Column(Integer, nullable=True)
  amount_off = Column(Integer, nullable=True)

  validity_per_user = Column(
    String, default=CouponValidity.ONCE.value, nullable=False
  )
  valid_until = Column(DateTime, nullable=True)
  max_usages = Column(Integer, nullable=True)
  active = Column(Boolean, default=True, nullable=False)

  created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

  def __repr__(self) -> str:
    return f"<Coupon {self.code}>"

  def is_forever(self) -> bool:
    return self.validity_per_user == CouponValidity.FOREVER.value

  def status(
    self,
    customer_id: Optional[str] = None,
    amount: Optional[int] = None,
    session: Optional[Session] = None,
  ) -> CouponStatus:
    """Check whether the coupon can be applied.

    Usage-based checks (sold out, already used) need a session; without one
    only the coupon's own attributes are considered.
    """
    if not self.active:
      return CouponStatus.DISABLED

    if self.valid_until is not None:
      valid_until = self.valid_until
      if valid_until.tzinfo is None:
        valid_until = valid_until.replace(tzinfo=UTC)
      if valid_until < datetime.now(UTC):
        return CouponStatus.EXPIRED

    if session is not None:
      from .invoice import Invoice

      usages = session.query(Invoice).filter(Invoice.coupon_id == self.id)
      if self.max_usages is not None and usages.count() >= self.max_usages:
        return CouponStatus.SOLD_OUT

      if (
        customer_id is not None
        and self.validity_per_user == CouponValidity.ONCE.value
        and usages.filter(Invoice.invoicing_profile_id == customer_id).count() > 0
      ):
        return CouponStatus.ALREADY_USED

    if self.amount_off is not None and amount is not None and self.amount_off > amount:
      return CouponStatus.AMOUNT_EXCEEDED

    return CouponStatus.ACTIVE
