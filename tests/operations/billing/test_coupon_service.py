"""Tests for coupon discount rules."""

from datetime import datetime, timedelta

from fabbilling.models.billing import Coupon, CouponStatus, Invoice
from fabbilling.operations.billing import CouponService


class TestCouponDiscount:
  def test_no_coupon_keeps_amount(self):
    assert CouponService().apply(1000, None, "prof_1") == 1000

  def test_percent_off_rounds_discount_down(self):
    coupon = Coupon(code="P", name="P", percent_off=15, active=True)

    # floor(999 * 15 / 100) = 149
    assert CouponService().apply(999, coupon, "prof_1") == 850

  def test_amount_off(self):
    coupon = Coupon(code="A", name="A", amount_off=300, active=True)

    assert CouponService().apply(1000, coupon, "prof_1") == 700

  def test_amount_off_larger_than_amount_is_not_applied(self):
    coupon = Coupon(code="A", name="A", amount_off=3000, active=True)

    assert coupon.status(amount=1000) == CouponStatus.AMOUNT_EXCEEDED
    assert CouponService().apply(1000, coupon, "prof_1") == 1000

  def test_disabled_coupon_is_not_applied(self):
    coupon = Coupon(code="D", name="D", percent_off=50, active=False)

    assert CouponService().apply(1000, coupon, "prof_1") == 1000

  def test_expired_coupon_is_not_applied(self):
    coupon = Coupon(
      code="E",
      name="E",
      percent_off=50,
      active=True,
      valid_until=datetime(2000, 1, 1),
    )

    assert coupon.status() == CouponStatus.EXPIRED
    assert CouponService().apply(1000, coupon, "prof_1") == 1000


class TestCouponUsages:
  """Usage checks need the database."""

  def _use(self, db_session, coupon, profile):
    invoice = Invoice(
      invoicing_profile_id=profile.id,
      operator_profile_id=profile.id,
      total=100,
      coupon_id=coupon.id,
    )
    db_session.add(invoice)
    db_session.commit()

  def test_once_coupon_already_used_by_customer(
    self, db_session, percent_coupon, member, other_member
  ):
    self._use(db_session, percent_coupon, member)
    service = CouponService(db_session)

    assert service.apply(1000, percent_coupon, member.id) == 1000
    assert service.apply(1000, percent_coupon, other_member.id) == 900

  def test_forever_coupon_can_be_reused(self, db_session, forever_coupon, member):
    self._use(db_session, forever_coupon, member)

    assert CouponService(db_session).apply(5000, forever_coupon, member.id) == 4000

  def test_sold_out(self, db_session, percent_coupon, member, other_member):
    percent_coupon.max_usages = 1
    db_session.commit()
    self._use(db_session, percent_coupon, member)

    status = percent_coupon.status(other_member.id, 1000, db_session)

    assert status == CouponStatus.SOLD_OUT

  def test_valid_until_in_the_future(self, db_session, percent_coupon, member):
    percent_coupon.valid_until = datetime.now() + timedelta(days=30)
    db_session.commit()

    assert percent_coupon.status(member.id, 1000, db_session) == CouponStatus.ACTIVE
