"""Tests for paying, cashing and refreshing payment schedule deadlines."""

import pytest

from fabbilling.exceptions import GatewayError, InvalidStateTransitionError
from fabbilling.models.billing import (
  Invoice,
  PaymentScheduleItemState,
  PaymentScheduleMethod,
)


@pytest.fixture
def card_schedule(schedule_service, even_plan, member, start_at):
  return schedule_service.save(
    schedule_service.compute(even_plan, member, member, start_at)
  )


@pytest.fixture
def check_schedule(schedule_service, even_plan, member, admin, start_at):
  return schedule_service.save(
    schedule_service.compute(
      even_plan, member, admin, start_at, PaymentScheduleMethod.CHECK
    )
  )


class TestPayItem:
  def test_creates_linked_invoice(self, schedule_service, card_schedule, member):
    item = card_schedule.ordered_items[0]

    schedule_service.pay_item(item, "card", member)

    assert item.current_state == PaymentScheduleItemState.PAID
    assert item.payment_method == "card"
    invoice = item.invoice
    assert invoice.id is not None
    assert invoice.reference.startswith("INV-")
    assert invoice.total == 10000
    assert invoice.payment_method == "card"
    assert card_schedule.reference in invoice.invoice_items[0].description

  def test_paid_item_rejects_second_payment(
    self, schedule_service, db_session, card_schedule, member
  ):
    item = card_schedule.ordered_items[0]
    schedule_service.pay_item(item, "card", member)

    with pytest.raises(InvalidStateTransitionError):
      schedule_service.pay_item(item, "card", member)

    assert db_session.query(Invoice).count() == 1

  def test_failed_save_leaves_deadline_pending(
    self, schedule_service, db_session, card_schedule, member, monkeypatch
  ):
    item = card_schedule.ordered_items[0]

    def failing_commit():
      raise RuntimeError("database unavailable")

    monkeypatch.setattr(db_session, "commit", failing_commit)

    with pytest.raises(RuntimeError):
      schedule_service.pay_item(item, "card", member)

    assert item.current_state == PaymentScheduleItemState.PENDING
    assert item.invoice is None
    assert item.payment_method is None
    assert db_session.query(Invoice).count() == 0

  def test_once_coupon_only_on_first_deadline(
    self, schedule_service, even_plan, member, start_at, percent_coupon
  ):
    schedule = schedule_service.save(
      schedule_service.compute(even_plan, member, member, start_at, coupon=percent_coupon)
    )
    first, second, _ = schedule.ordered_items

    schedule_service.pay_item(first, "card", member)
    schedule_service.pay_item(second, "card", member)

    assert first.invoice.total == 9000
    assert first.invoice.coupon_id == percent_coupon.id
    assert second.invoice.total == 10000
    assert second.invoice.coupon_id is None

  def test_forever_coupon_on_every_deadline(
    self, schedule_service, even_plan, member, start_at, forever_coupon
  ):
    schedule = schedule_service.save(
      schedule_service.compute(even_plan, member, member, start_at, coupon=forever_coupon)
    )

    for item in schedule.ordered_items:
      schedule_service.pay_item(item, "card", member)

    assert [item.invoice.total for item in schedule.ordered_items] == [9000] * 3


class TestCashCheck:
  def test_cash_pending_deadline(self, schedule_service, check_schedule, admin):
    item = check_schedule.ordered_items[0]

    schedule_service.cash_check(item, admin)

    assert item.current_state == PaymentScheduleItemState.PAID
    assert item.payment_method == "check"
    assert item.invoice.payment_method == "check"
    assert item.invoice.operator_profile_id == admin.id

  def test_card_schedule_rejected(self, schedule_service, card_schedule, admin):
    item = card_schedule.ordered_items[0]

    with pytest.raises(InvalidStateTransitionError) as exc_info:
      schedule_service.cash_check(item, admin)

    assert "check" in exc_info.value.details["reason"]
    assert item.current_state == PaymentScheduleItemState.PENDING

  def test_paid_deadline_rejected(self, schedule_service, check_schedule, admin):
    item = check_schedule.ordered_items[0]
    schedule_service.cash_check(item, admin)

    with pytest.raises(InvalidStateTransitionError):
      schedule_service.cash_check(item, admin)

  def test_deadline_awaiting_action_rejected(
    self, schedule_service, check_schedule, admin
  ):
    item = check_schedule.ordered_items[0]
    item.transition_to(PaymentScheduleItemState.REQUIRE_ACTION)

    with pytest.raises(InvalidStateTransitionError):
      schedule_service.cash_check(item, admin)


class TestRefreshItem:
  @pytest.fixture
  def item(self, card_schedule, db_session):
    item = card_schedule.ordered_items[1]
    item.stripe_payment_intent_id = "pi_123"
    db_session.commit()
    return item

  def test_succeeded_marks_paid(self, schedule_service, mock_provider, item, member):
    mock_provider.retrieve_payment_intent.return_value = {
      "status": "succeeded",
      "client_secret": "secret",
    }

    schedule_service.refresh_item(item, member)

    mock_provider.retrieve_payment_intent.assert_called_once_with("pi_123")
    assert item.current_state == PaymentScheduleItemState.PAID
    assert item.payment_method == "card"
    assert item.invoice.gateway_object_id == "pi_123"
    assert item.invoice.gateway_object_type == "PaymentIntent"

  def test_requires_action_stores_client_secret(
    self, schedule_service, mock_provider, item, member
  ):
    mock_provider.retrieve_payment_intent.return_value = {
      "status": "requires_action",
      "client_secret": "pi_123_secret_abc",
    }

    schedule_service.refresh_item(item, member)

    assert item.current_state == PaymentScheduleItemState.REQUIRE_ACTION
    assert item.client_secret == "pi_123_secret_abc"
    assert item.invoice_id is None

  def test_requires_payment_method(self, schedule_service, mock_provider, item, member):
    mock_provider.retrieve_payment_intent.return_value = {
      "status": "requires_payment_method",
      "client_secret": None,
    }

    schedule_service.refresh_item(item, member)

    assert item.current_state == PaymentScheduleItemState.REQUIRE_PAYMENT_METHOD

  def test_authentication_failure_after_action_is_rejected(
    self, schedule_service, mock_provider, db_session, item, member
  ):
    item.state = PaymentScheduleItemState.REQUIRE_ACTION.value
    db_session.commit()
    mock_provider.retrieve_payment_intent.return_value = {
      "status": "requires_payment_method",
      "client_secret": None,
    }

    with pytest.raises(InvalidStateTransitionError) as exc_info:
      schedule_service.refresh_item(item, member)

    reason = exc_info.value.details["reason"]
    assert "pi_123" in reason
    assert "'requires_payment_method'" in reason
    assert item.current_state == PaymentScheduleItemState.REQUIRE_ACTION

  def test_other_status_leaves_state(self, schedule_service, mock_provider, item, member):
    mock_provider.retrieve_payment_intent.return_value = {
      "status": "processing",
      "client_secret": None,
    }

    schedule_service.refresh_item(item, member)

    assert item.current_state == PaymentScheduleItemState.PENDING

  def test_paid_item_rejected_without_gateway_call(
    self, schedule_service, mock_provider, item, member
  ):
    schedule_service.pay_item(item, "card", member)

    with pytest.raises(InvalidStateTransitionError):
      schedule_service.refresh_item(item, member)

    mock_provider.retrieve_payment_intent.assert_not_called()

  def test_item_without_payment_intent(
    self, schedule_service, mock_provider, card_schedule, member
  ):
    with pytest.raises(InvalidStateTransitionError):
      schedule_service.refresh_item(card_schedule.ordered_items[0], member)

    mock_provider.retrieve_payment_intent.assert_not_called()

  def test_gateway_error_propagates(self, schedule_service, mock_provider, item, member):
    mock_provider.retrieve_payment_intent.side_effect = GatewayError("Gateway down")

    with pytest.raises(GatewayError):
      schedule_service.refresh_item(item, member)

    assert item.current_state == PaymentScheduleItemState.PENDING


class TestAttachNewPaymentMethod:
  def test_back_to_pending(self, schedule_service, card_schedule):
    item = card_schedule.ordered_items[0]
    item.transition_to(PaymentScheduleItemState.REQUIRE_PAYMENT_METHOD)

    schedule_service.attach_new_payment_method(item)

    assert item.current_state == PaymentScheduleItemState.PENDING

  def test_only_from_require_payment_method(self, schedule_service, card_schedule):
    item = card_schedule.ordered_items[0]

    with pytest.raises(InvalidStateTransitionError):
      schedule_service.attach_new_payment_method(item)
