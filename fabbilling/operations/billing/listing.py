"""Shared ordering, filtering and pagination for billing document lists."""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Query

from ...models.billing import InvoicingProfile


@dataclass(frozen=True)
class ListFilters:
  """Filters accepted by invoice and payment schedule lists.

  `number` is a reference prefix, `customer` a case-insensitive substring of
  the customer's first or last name, `date` an ISO-8601 date or datetime
  whose day is matched against the creation timestamp.
  """

  number: Optional[str] = None
  customer: Optional[str] = None
  date: Optional[str] = None


@dataclass(frozen=True)
class Page:
  items: list[Any]
  total_count: int
  page: int
  size: int

  @property
  def has_more(self) -> bool:
    return self.page * self.size < self.total_count


def parse_order(order_by: Optional[str], columns: dict[str, Any], default: Any):
  """Parse `column` / `-column` into (sql column, descending).

  Unknown keys fall back to `default`.
  """
  if not order_by:
    return default, False

  descending = order_by.startswith("-")
  key = order_by[1:] if descending else order_by
  return columns.get(key, default), descending


def parse_day(value: str) -> date:
  """Accept `2024-03-05` as well as a full ISO-8601 timestamp.

  Timestamps with an offset are matched on their UTC day; naive ones are
  taken as UTC.
  """
  try:
    return date.fromisoformat(value)
  except ValueError:
    moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if moment.tzinfo is not None:
      moment = moment.astimezone(timezone.utc)
    return moment.date()


def apply_filters(
  query: Query, model: Any, filters: Optional[ListFilters]
) -> Query:
  """Filter a query over `model`, already joined to its invoicing profile."""
  if filters is None:
    return query

  if filters.number:
    query = query.filter(model.reference.like(f"{filters.number}%"))

  if filters.customer:
    pattern = f"%{filters.customer}%"
    query = query.filter(
      or_(
        InvoicingProfile.first_name.ilike(pattern),
        InvoicingProfile.last_name.ilike(pattern),
      )
    )

  if filters.date:
    day = parse_day(filters.date)
    day_start = datetime.combine(day, time.min)
    query = query.filter(
      model.created_at >= day_start,
      model.created_at < day_start + timedelta(days=1),
    )

  return query


def paginate(query: Query, page: int, size: int) -> Page:
  page = max(page, 1)
  total_count = query.order_by(None).count()
  items = query.offset((page - 1) * size).limit(size).all()
  return Page(items=items, total_count=total_count, page=page, size=size)
