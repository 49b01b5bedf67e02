"""Payment schedule models - subscriptions paid in monthly installments."""

from datetime import UTC, datetime
from enum import Enum
from typing import Optional

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Session, relationship

from ...database import Base
from ...exceptions import InvalidStateTransitionError
from ...logger import get_logger

logger = get_logger(__name__)


class PaymentScheduleMethod(str, Enum):
  """How the deadlines of a schedule are collected."""

  CARD = "card"
  CHECK = "check"


class PaymentScheduleItemState(str, Enum):
  """Payment state of a single deadline."""

  PENDING = "pending"
  REQUIRE_ACTION = "require_action"
  REQUIRE_PAYMENT_METHOD = "require_payment_method"
  PAID = "paid"


ALLOWED_TRANSITIONS = {
  PaymentScheduleItemState.PENDING: {
    PaymentScheduleItemState.PAID,
    PaymentScheduleItemState.REQUIRE_ACTION,
    PaymentScheduleItemState.REQUIRE_PAYMENT_METHOD,
  },
  PaymentScheduleItemState.REQUIRE_ACTION: {PaymentScheduleItemState.PAID},
  # Back to pending once the customer attached a new payment instrument
  PaymentScheduleItemState.REQUIRE_PAYMENT_METHOD: {
    PaymentScheduleItemState.PAID,
    PaymentScheduleItemState.PENDING,
  },
  PaymentScheduleItemState.PAID: set(),
}


class PaymentSchedule(Base):
  """A plan for collecting a subscription price across monthly deadlines."""

  __tablename__ = "payment_schedules"

  id = Column(Integer, primary_key=True, autoincrement=True)

  reference = Column(String, unique=True, nullable=True)

  invoicing_profile_id = Column(
    String, ForeignKey("invoicing_profiles.id"), nullable=False
  )
  operator_profile_id = Column(
    String, ForeignKey("invoicing_profiles.id"), nullable=False
  )
  plan_id = Column(Integer, ForeignKey("plans.id"), nullable=False)

  total = Column(Integer, nullable=False)
  coupon_id = Column(Integer, ForeignKey("coupons.id"), nullable=True)
  payment_method = Column(
    String, default=PaymentScheduleMethod.CARD.value, nullable=False
  )

  stripe_subscription_id = Column(String, unique=True, nullable=True)

  start_at = Column(DateTime, nullable=False)
  expiration_date = Column(DateTime, nullable=False)

  created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

  items = relationship(
    "PaymentScheduleItem",
    back_populates="payment_schedule",
    cascade="all, delete-orphan",
    order_by="PaymentScheduleItem.due_date",
  )
  invoicing_profile = relationship(
    "InvoicingProfile", foreign_keys=[invoicing_profile_id]
  )
  operator_profile = relationship("InvoicingProfile", foreign_keys=[operator_profile_id])
  plan = relationship("Plan")
  coupon = relationship("Coupon")

  __table_args__ = (
    Index("idx_payment_schedule_profile", "invoicing_profile_id"),
    Index("idx_payment_schedule_created_at", "created_at"),
  )

  def __repr__(self) -> str:
    return f"<PaymentSchedule {self.reference} total={self.total / 100:.2f}>"

  @property
  def ordered_items(self) -> list["PaymentScheduleItem"]:
    return sorted(self.items, key=lambda item: item.due_date)

  def is_synchronized(self) -> bool:
    """Whether the schedule already exists on the gateway."""
    return self.stripe_subscription_id is not None

  @classmethod
  def generate_reference(cls, session: Session) -> str:
    """Generate the next reference for the current month."""
    now = datetime.now(UTC)

    count = (
      session.query(cls)
      .filter(cls.reference.like(f"PS-{now.year}-{now.month:02d}-%"))
      .count()
      + 1
    )

    return f"PS-{now.year}-{now.month:02d}-{count:04d}"

  @classmethod
  def get_by_id(cls, schedule_id: int, session: Session) -> Optional["PaymentSchedule"]:
    return session.query(cls).filter(cls.id == schedule_id).first()


class PaymentScheduleItem(Base):
  """One deadline of a payment schedule."""

  __tablename__ = "payment_schedule_items"

  id = Column(Integer, primary_key=True, autoincrement=True)

  payment_schedule_id = Column(
    Integer, ForeignKey("payment_schedules.id"), nullable=False
  )

  due_date = Column(DateTime, nullable=False)
  amount = Column(Integer, nullable=False)
  # First deadline: {"recurring", "adjustment", "other_items"}; others: {"recurring"}
  details = Column(JSON, default=dict, nullable=False)

  state = Column(String, default=PaymentScheduleItemState.PENDING.value, nullable=False)
  payment_method = Column(String, nullable=True)
  invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=True)

  client_secret = Column(String, nullable=True)
  stripe_payment_intent_id = Column(String, nullable=True)

  payment_schedule = relationship("PaymentSchedule", back_populates="items")
  invoice = relationship("Invoice")

  __table_args__ = (
    Index("idx_payment_schedule_item_schedule", "payment_schedule_id"),
    Index("idx_payment_schedule_item_state", "state"),
  )

  def __repr__(self) -> str:
    return f"<PaymentScheduleItem {self.id} {self.due_date} {self.state}>"

  @property
  def current_state(self) -> PaymentScheduleItemState:
    return PaymentScheduleItemState(self.state or PaymentScheduleItemState.PENDING.value)

  def can_transition_to(self, target: PaymentScheduleItemState) -> bool:
    return target in ALLOWED_TRANSITIONS[self.current_state]

  def transition_to(
    self, target: PaymentScheduleItemState, reason: Optional[str] = None
  ) -> None:
    """Move the deadline to `target`, rejecting transitions the state machine forbids.

    Persisting the change is up to the caller.
    """
    current = self.current_state
    if not self.can_transition_to(target):
      raise InvalidStateTransitionError(self.id, current.value, target.value, reason)

    self.state = target.value

    logger.info(
      f"Payment schedule item {self.id}: {current.value} -> {target.value}",
      extra={"item_id": self.id, "payment_schedule_id": self.payment_schedule_id},
    )

  @classmethod
  def get_by_id(cls, item_id: int, session: Session) -> Optional["PaymentScheduleItem"]:
    return session.query(cls).filter(cls.id == item_id).first()
