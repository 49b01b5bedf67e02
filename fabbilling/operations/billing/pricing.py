"""
Pricing aggregator.

Turns a completed purchase and its price breakdown into the ordered list of
priced line elements that an invoice is built from. Pure functions: nothing
here touches the database or the gateway.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, assert_never

from ...exceptions import PricingError, TypeMismatchError


class ReservableKind(str, Enum):
  """What a reservation books."""

  EVENT = "event"
  SPACE = "space"
  MACHINE = "machine"
  TRAINING = "training"


GENERIC_KINDS = frozenset(
  {ReservableKind.SPACE, ReservableKind.MACHINE, ReservableKind.TRAINING}
)


@dataclass(frozen=True)
class Slot:
  """A booked time range."""

  start_at: datetime
  end_at: datetime


@dataclass(frozen=True)
class Reservable:
  """The thing being booked: an event, a space, a machine or a training."""

  kind: ReservableKind
  name: str
  id: int | None = None
  stripe_product_id: str | None = None


@dataclass(frozen=True)
class PlanSelection:
  """A plan bought alone or together with a reservation."""

  name: str
  plan_id: int | None = None
  subscription_id: int | None = None


@dataclass(frozen=True)
class EventPurchase:
  reservable: Reservable
  slots: tuple[Slot, ...]
  plan: PlanSelection | None = None


@dataclass(frozen=True)
class SlotPurchase:
  """Reservation of a space, a machine or a training."""

  reservable: Reservable
  slots: tuple[Slot, ...]
  plan: PlanSelection | None = None


@dataclass(frozen=True)
class SubscriptionPurchase:
  plan: PlanSelection | None


Purchase = EventPurchase | SlotPurchase | SubscriptionPurchase


@dataclass(frozen=True)
class PriceBreakdown:
  """Prices computed upstream for a purchase.

  `slots` maps each slot start time to its price in cents; `plan` is the
  price of the plan, if one is bought.
  """

  slots: dict[datetime, int] = field(default_factory=dict)
  plan: int | None = None
  coupon: Any | None = None


@dataclass(frozen=True)
class PricedElement:
  """One future invoice line."""

  description: str
  amount: int
  slot: Slot | None = None
  subscription_id: int | None = None


@dataclass(frozen=True)
class PricedPurchase:
  elements: tuple[PricedElement, ...]
  coupon: Any | None = None

  @property
  def subtotal(self) -> int:
    return sum(element.amount for element in self.elements)


def format_long_date(value: datetime) -> str:
  """March 5, 2024"""
  return f"{value.strftime('%B')} {value.day}, {value.year}"


def format_hour_minute(value: datetime) -> str:
  return value.strftime("%H:%M")


def describe_event_slot(name: str, slot: Slot) -> str:
  """Describe an event slot, on two lines when it spans several days."""
  if slot.start_at.date() != slot.end_at.date():
    return (
      f"{name}\n"
      f"from {format_long_date(slot.start_at)} to {format_long_date(slot.end_at)}\n"
      f"from {format_hour_minute(slot.start_at)} to {format_hour_minute(slot.end_at)}"
    )

  return (
    f"{name}\n"
    f"{format_long_date(slot.start_at)} {format_hour_minute(slot.start_at)}"
    f" - {format_hour_minute(slot.end_at)}"
  )


def describe_generic_slot(name: str, slot: Slot) -> str:
  return (
    f"{name} {format_long_date(slot.start_at)} {format_hour_minute(slot.start_at)}"
    f" - {format_hour_minute(slot.end_at)}"
  )


def _slot_price(slot: Slot, breakdown: PriceBreakdown) -> int:
  price = breakdown.slots.get(slot.start_at)
  if price is None:
    raise PricingError(
      f"no price for slot starting at {slot.start_at.isoformat()}",
      slot_start=slot.start_at.isoformat(),
    )
  return price


def event_elements(
  purchase: EventPurchase, breakdown: PriceBreakdown
) -> list[PricedElement]:
  reservable = purchase.reservable
  if reservable.kind != ReservableKind.EVENT:
    raise TypeMismatchError("event", reservable.kind.value)

  return [
    PricedElement(
      description=describe_event_slot(reservable.name, slot),
      amount=_slot_price(slot, breakdown),
      slot=slot,
    )
    for slot in purchase.slots
  ]


def generic_elements(
  purchase: SlotPurchase, breakdown: PriceBreakdown
) -> list[PricedElement]:
  reservable = purchase.reservable
  if reservable.kind not in GENERIC_KINDS:
    raise TypeMismatchError("space, machine or training", reservable.kind.value)

  return [
    PricedElement(
      description=describe_generic_slot(reservable.name, slot),
      amount=_slot_price(slot, breakdown),
      slot=slot,
    )
    for slot in purchase.slots
  ]


def subscription_element(
  plan: PlanSelection | None, breakdown: PriceBreakdown
) -> PricedElement:
  if plan is None:
    raise TypeMismatchError("subscription", "purchase without plan")
  if breakdown.plan is None:
    raise PricingError(f"no price for plan '{plan.name}'", plan=plan.name)

  return PricedElement(
    description=plan.name,
    amount=breakdown.plan,
    subscription_id=plan.subscription_id,
  )


def price_purchase(purchase: Purchase, breakdown: PriceBreakdown) -> PricedPurchase:
  """Build the priced elements of a purchase.

  A reservation bought together with a plan yields its slot lines followed
  by one subscription line.

  Raises:
      TypeMismatchError: The reservable does not match the purchase variant.
      PricingError: A slot or the plan has no price in the breakdown.
  """
  elements: list[PricedElement]

  if isinstance(purchase, EventPurchase):
    elements = event_elements(purchase, breakdown)
    if purchase.plan is not None:
      elements.append(subscription_element(purchase.plan, breakdown))
  elif isinstance(purchase, SlotPurchase):
    elements = generic_elements(purchase, breakdown)
    if purchase.plan is not None:
      elements.append(subscription_element(purchase.plan, breakdown))
  elif isinstance(purchase, SubscriptionPurchase):
    elements = [subscription_element(purchase.plan, breakdown)]
  else:
    assert_never(purchase)

  return PricedPurchase(elements=tuple(elements), coupon=breakdown.coupon)
