"""Coupon discount rules."""

from typing import Optional

from sqlalchemy.orm import Session

from ...logger import get_logger
from ...models.billing import Coupon, CouponStatus

logger = get_logger(__name__)


class CouponService:
  """Apply coupon discounts to amounts in cents."""

  def __init__(self, session: Optional[Session] = None):
    self.session = session

  def status(
    self, coupon: Coupon, customer_id: Optional[str], amount: int
  ) -> CouponStatus:
    return coupon.status(customer_id=customer_id, amount=amount, session=self.session)

  def discount(self, amount: int, coupon: Coupon) -> int:
    """Amount subtracted by the coupon, ignoring eligibility."""
    if coupon.percent_off is not None:
      return amount * coupon.percent_off // 100
    if coupon.amount_off is not None:
      return coupon.amount_off
    return 0

  def apply(
    self, amount: int, coupon: Optional[Coupon], customer_id: Optional[str] = None
  ) -> int:
    """Return `amount` after the coupon discount.

    An ineligible coupon leaves the amount untouched.
    """
    if coupon is None:
      return amount

    status = self.status(coupon, customer_id, amount)
    if status != CouponStatus.ACTIVE:
      logger.info(
        f"Coupon {coupon.code} not applied: {status.value}",
        extra={"profile_id": customer_id},
      )
      return amount

    return max(amount - self.discount(amount, coupon), 0)
