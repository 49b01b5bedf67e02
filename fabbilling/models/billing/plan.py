"""Subscription plan model."""

from datetime import UTC, datetime
from enum import Enum

from sqlalchemy import Column, DateTime, Integer, String

from ...database import Base


class PlanInterval(str, Enum):
  """Billing interval of a plan."""

  MONTH = "month"
  YEAR = "year"


class Plan(Base):
  """A subscription plan.

  `amount` is the price of the whole plan duration, in cents. Payment
  schedules split it into monthly deadlines.
  """

  __tablename__ = "plans"

  id = Column(Integer, primary_key=True, autoincrement=True)

  name = Column(String, nullable=False)
  amount = Column(Integer, nullable=False)
  interval = Column(String, default=PlanInterval.MONTH.value, nullable=False)
  interval_count = Column(Integer, default=1, nullable=False)

  stripe_product_id = Column(String, nullable=True)

  created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

  def __repr__(self) -> str:
    return f"<Plan {self.name} {self.amount / 100:.2f} every {self.interval_count} {self.interval}>"

  @property
  def duration_months(self) -> int:
    months_per_interval = 12 if self.interval == PlanInterval.YEAR.value else 1
    return self.interval_count * months_per_interval
