"""
Payment schedule service.

Splits subscription plans into monthly deadlines, mirrors schedules on the
payment gateway as subscriptions, and moves deadlines through their payment
states.
"""

from datetime import datetime
from typing import Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy.orm import Session, selectinload

from ...config.gateway import GatewayConfig
from ...exceptions import (
  ConfigurationError,
  EntityNotFoundError,
  InvalidStateTransitionError,
  PaymentMethodMismatchError,
  PricingError,
)
from ...logger import get_logger, log_billing_event
from ...models.billing import (
  Coupon,
  InvoicingProfile,
  PaymentSchedule,
  PaymentScheduleItem,
  PaymentScheduleItemState,
  PaymentScheduleMethod,
  Plan,
)
from .coupon_service import CouponService
from .invoice_builder import InvoiceBuilder, PaymentContext
from .invoices_service import InvoicesService
from .listing import ListFilters, Page, apply_filters, paginate, parse_order
from .payment_provider import PaymentProvider, get_payment_provider
from .pricing import PricedElement, PricedPurchase, format_long_date

logger = get_logger(__name__)

ORDER_COLUMNS = {
  "reference": PaymentSchedule.reference,
  "date": PaymentSchedule.created_at,
  "total": PaymentSchedule.total,
  "name": InvoicingProfile.first_name,
}

PAYMENT_INTENT_STATES = {
  "requires_action": PaymentScheduleItemState.REQUIRE_ACTION,
  "requires_payment_method": PaymentScheduleItemState.REQUIRE_PAYMENT_METHOD,
}


class PaymentScheduleService:
  """Build, synchronize and collect payment schedules."""

  def __init__(
    self,
    session: Session,
    config: GatewayConfig,
    provider: Optional[PaymentProvider] = None,
    coupon_service: Optional[CouponService] = None,
  ):
    self.session = session
    self.config = config
    self._provider = provider
    self.coupon_service = coupon_service or CouponService(session)

  @property
  def provider(self) -> PaymentProvider:
    """Gateway adapter, created on first use."""
    if self._provider is None:
      self._provider = get_payment_provider(self.config)
    return self._provider

  # ---------------------------------------------------------------------------
  # Building
  # ---------------------------------------------------------------------------

  def compute(
    self,
    plan: Plan,
    customer: InvoicingProfile,
    operator: InvoicingProfile,
    start_at: datetime,
    payment_method: PaymentScheduleMethod = PaymentScheduleMethod.CARD,
    coupon: Optional[Coupon] = None,
    other_items: int = 0,
  ) -> PaymentSchedule:
    """Split the plan price into monthly deadlines.

    Every deadline costs floor(amount / months). The rounding remainder and
    the price of anything bought along with the plan are charged on the
    first deadline, whose details record the three parts.
    """
    months = plan.duration_months
    if months < 1:
      raise PricingError(f"plan '{plan.name}' has no duration", plan=plan.name)

    recurring = plan.amount // months
    adjustment = plan.amount - recurring * months

    items = []
    for index in range(months):
      if index == 0:
        amount = recurring + adjustment + other_items
        details = {
          "recurring": recurring,
          "adjustment": adjustment,
          "other_items": other_items,
        }
      else:
        amount = recurring
        details = {"recurring": recurring}

      items.append(
        PaymentScheduleItem(
          due_date=start_at + relativedelta(months=index),
          amount=amount,
          details=details,
          state=PaymentScheduleItemState.PENDING.value,
        )
      )

    return PaymentSchedule(
      invoicing_profile_id=customer.id,
      invoicing_profile=customer,
      operator_profile_id=operator.id,
      operator_profile=operator,
      plan_id=plan.id,
      plan=plan,
      total=sum(item.amount for item in items),
      coupon_id=coupon.id if coupon is not None else None,
      coupon=coupon,
      payment_method=PaymentScheduleMethod(payment_method).value,
      start_at=start_at,
      expiration_date=start_at + relativedelta(months=months),
      items=items,
    )

  def save(self, schedule: PaymentSchedule) -> PaymentSchedule:
    """Assign a reference and persist a computed schedule."""
    if schedule.reference is None:
      schedule.reference = PaymentSchedule.generate_reference(self.session)

    self.session.add(schedule)
    self.session.commit()
    self.session.refresh(schedule)

    log_billing_event(
      logger,
      "payment_schedule_created",
      f"Created payment schedule {schedule.reference} "
      f"({len(schedule.items)} deadlines, {schedule.total} cents)",
      payment_schedule_id=schedule.id,
      profile_id=schedule.invoicing_profile_id,
    )

    return schedule

  # ---------------------------------------------------------------------------
  # Gateway synchronization
  # ---------------------------------------------------------------------------

  def sync_with_gateway(
    self,
    schedule: PaymentSchedule,
    reservable_gateway_product_id: Optional[str] = None,
  ) -> str:
    """Mirror the schedule on the gateway as a subscription.

    Returns the gateway subscription id. A schedule that already has one is
    returned as is, without any gateway call.

    Raises:
        GatewayError: The gateway rejected a request; the schedule keeps no
            subscription id.
        ConfigurationError: The plan or the customer is unknown to the gateway.
        PaymentMethodMismatchError: The schedule is not paid by card.
    """
    if schedule.is_synchronized():
      logger.info(
        f"Payment schedule {schedule.reference} already synchronized",
        extra={
          "payment_schedule_id": schedule.id,
          "gateway_object_id": schedule.stripe_subscription_id,
        },
      )
      return schedule.stripe_subscription_id

    # Check deadlines are collected at the counter
    if schedule.payment_method != PaymentScheduleMethod.CARD.value:
      raise PaymentMethodMismatchError(
        schedule.id, schedule.payment_method, "synchronize"
      )

    plan = schedule.plan
    customer = schedule.invoicing_profile
    if not plan.stripe_product_id:
      raise ConfigurationError(
        "stripe_product_id", f"plan '{plan.name}' has no gateway product"
      )
    if not customer.stripe_customer_id:
      raise ConfigurationError(
        "stripe_customer_id", f"profile {customer.id} has no gateway customer"
      )

    items = schedule.ordered_items
    first_item = items[0]
    recurring = first_item.details["recurring"]

    reference_amount = items[1].amount if len(items) > 1 else recurring
    uneven = first_item.amount != reference_amount
    adjustment = (first_item.details.get("adjustment") or 0) if uneven else 0
    other_items = (first_item.details.get("other_items") or 0) if uneven else 0
    if other_items and not reservable_gateway_product_id:
      raise ConfigurationError(
        "reservable_gateway_product_id",
        "required to invoice the reservations bought with the plan",
      )

    recurring_price_id = self.provider.create_price(
      plan.stripe_product_id, recurring, None, monthly=True
    )

    upfront_price_ids = []
    if adjustment:
      upfront_price_ids.append(
        self.provider.create_price(
          plan.stripe_product_id,
          adjustment,
          f"Price adjustment for payment schedule {schedule.id}",
        )
      )
    if other_items:
      upfront_price_ids.append(
        self.provider.create_price(
          reservable_gateway_product_id,
          other_items,
          f"Reservations for payment schedule {schedule.id}",
        )
      )

    subscription_id = self.provider.create_subscription(
      customer_id=customer.stripe_customer_id,
      cancel_at=schedule.expiration_date,
      promotion_code=schedule.coupon.code if schedule.coupon else None,
      upfront_price_ids=upfront_price_ids,
      recurring_price_id=recurring_price_id,
    )

    schedule.stripe_subscription_id = subscription_id
    self.session.commit()

    log_billing_event(
      logger,
      "payment_schedule_synchronized",
      f"Payment schedule {schedule.reference} synchronized as {subscription_id}",
      payment_schedule_id=schedule.id,
      gateway_object_id=subscription_id,
    )

    return subscription_id

  # ---------------------------------------------------------------------------
  # Deadlines
  # ---------------------------------------------------------------------------

  def _deadline_invoice_element(self, item: PaymentScheduleItem) -> PricedElement:
    schedule = item.payment_schedule
    return PricedElement(
      description=(
        f"{schedule.plan.name}\n"
        f"Payment schedule {schedule.reference}, deadline of "
        f"{format_long_date(item.due_date)}"
      ),
      amount=item.amount,
    )

  def _deadline_coupon(self, item: PaymentScheduleItem) -> Optional[Coupon]:
    """Coupon applicable to a deadline: the first one, or all for a forever coupon."""
    schedule = item.payment_schedule
    coupon = schedule.coupon
    if coupon is None:
      return None
    if coupon.is_forever() or item is schedule.ordered_items[0]:
      return coupon
    return None

  def pay_item(
    self,
    item: PaymentScheduleItem,
    payment_method: str,
    operator: InvoicingProfile,
  ) -> PaymentScheduleItem:
    """Invoice a deadline and mark it paid."""
    if not item.can_transition_to(PaymentScheduleItemState.PAID):
      raise InvalidStateTransitionError(
        item.id,
        item.current_state.value,
        PaymentScheduleItemState.PAID.value,
        "deadline already paid",
      )

    schedule = item.payment_schedule
    builder = InvoiceBuilder(self.config, self.coupon_service)
    gateway_context = (
      PaymentContext(
        payment_method=payment_method,
        gateway_object_id=item.stripe_payment_intent_id,
        gateway_object_type="PaymentIntent",
      )
      if item.stripe_payment_intent_id
      else PaymentContext(payment_method=payment_method)
    )
    invoice = builder.build(
      PricedPurchase(
        elements=(self._deadline_invoice_element(item),),
        coupon=self._deadline_coupon(item),
      ),
      customer=schedule.invoicing_profile,
      operator=operator,
      context=gateway_context,
    )

    try:
      item.transition_to(PaymentScheduleItemState.PAID)
      item.payment_method = payment_method
      item.invoice = invoice

      InvoicesService(self.session).save(invoice)
    except Exception:
      # Reloads the deadline as it was before this payment
      self.session.rollback()
      raise

    log_billing_event(
      logger,
      "payment_schedule_item_paid",
      f"Deadline {item.id} of {schedule.reference} paid by {payment_method}",
      item_id=item.id,
      payment_schedule_id=schedule.id,
      invoice_id=invoice.id,
      profile_id=operator.id,
    )

    return item

  def cash_check(
    self, item: PaymentScheduleItem, operator: InvoicingProfile
  ) -> PaymentScheduleItem:
    """Record a check received at the counter for a pending deadline."""
    schedule = item.payment_schedule
    if schedule.payment_method != PaymentScheduleMethod.CHECK.value:
      raise InvalidStateTransitionError(
        item.id,
        item.current_state.value,
        PaymentScheduleItemState.PAID.value,
        "payment schedule is not paid by check",
      )
    if item.current_state != PaymentScheduleItemState.PENDING:
      raise InvalidStateTransitionError(
        item.id,
        item.current_state.value,
        PaymentScheduleItemState.PAID.value,
        "only pending deadlines can be cashed",
      )

    return self.pay_item(item, PaymentScheduleMethod.CHECK.value, operator)

  def refresh_item(
    self, item: PaymentScheduleItem, operator: InvoicingProfile
  ) -> PaymentScheduleItem:
    """Update a deadline from the status of its gateway payment."""
    if item.current_state == PaymentScheduleItemState.PAID:
      raise InvalidStateTransitionError(
        item.id,
        item.current_state.value,
        item.current_state.value,
        "deadline already paid",
      )
    if not item.stripe_payment_intent_id:
      raise InvalidStateTransitionError(
        item.id,
        item.current_state.value,
        item.current_state.value,
        "no gateway payment to refresh",
      )

    intent = self.provider.retrieve_payment_intent(item.stripe_payment_intent_id)
    status = intent["status"]

    if status == "succeeded":
      return self.pay_item(item, PaymentScheduleMethod.CARD.value, operator)

    target = PAYMENT_INTENT_STATES.get(status)
    if target is None:
      logger.info(
        f"Deadline {item.id} left {item.state}: payment intent is {status}",
        extra={"item_id": item.id},
      )
      return item

    if item.current_state != target:
      item.transition_to(
        target,
        f"gateway reports payment intent {item.stripe_payment_intent_id} as "
        f"'{status}', which this deadline cannot move to",
      )
    if target == PaymentScheduleItemState.REQUIRE_ACTION:
      item.client_secret = intent.get("client_secret")

    self.session.commit()
    return item

  def attach_new_payment_method(self, item: PaymentScheduleItem) -> PaymentScheduleItem:
    """Put a deadline back to pending once the customer has a new card."""
    item.transition_to(PaymentScheduleItemState.PENDING, "new payment method attached")
    item.client_secret = None
    self.session.commit()
    return item

  # ---------------------------------------------------------------------------
  # Queries
  # ---------------------------------------------------------------------------

  def get(self, schedule_id: int) -> PaymentSchedule:
    schedule = PaymentSchedule.get_by_id(schedule_id, self.session)
    if schedule is None:
      raise EntityNotFoundError(schedule_id, "PaymentSchedule")
    return schedule

  def get_item(self, item_id: int) -> PaymentScheduleItem:
    item = PaymentScheduleItem.get_by_id(item_id, self.session)
    if item is None:
      raise EntityNotFoundError(item_id, "PaymentScheduleItem")
    return item

  def list(
    self,
    order_by: Optional[str] = None,
    page: int = 1,
    size: int = 20,
    filters: Optional[ListFilters] = None,
    profile_id: Optional[str] = None,
  ) -> Page:
    query = (
      self.session.query(PaymentSchedule)
      .join(
        InvoicingProfile,
        PaymentSchedule.invoicing_profile_id == InvoicingProfile.id,
      )
      .options(selectinload(PaymentSchedule.items))
    )
    if profile_id is not None:
      query = query.filter(PaymentSchedule.invoicing_profile_id == profile_id)

    query = apply_filters(query, PaymentSchedule, filters)

    column, descending = parse_order(order_by, ORDER_COLUMNS, PaymentSchedule.id)
    query = query.order_by(
      column.desc() if descending else column.asc(), PaymentSchedule.id
    )

    return paginate(query, page, size)
