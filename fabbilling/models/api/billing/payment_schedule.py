"""Payment schedule API models."""

from typing import Any

from pydantic import BaseModel, Field


class PaymentScheduleItemResponse(BaseModel):
  """One deadline of a payment schedule."""

  id: int = Field(..., description="Deadline ID")
  due_date: str = Field(..., description="Due date (ISO format)")
  amount: int = Field(..., description="Amount in cents")
  state: str = Field(
    ...,
    description="Payment state (pending, require_action, require_payment_method, paid)",
  )
  details: dict[str, Any] = Field(default_factory=dict, description="Amount breakdown")
  payment_method: str | None = Field(None, description="Method used to pay")
  invoice_id: int | None = Field(None, description="Invoice of the paid deadline")
  client_secret: str | None = Field(
    None, description="Gateway client secret when customer action is required"
  )


class PaymentScheduleResponse(BaseModel):
  """Payment schedule information."""

  id: int = Field(..., description="Payment schedule ID")
  reference: str | None = Field(None, description="Payment schedule reference")
  created_at: str = Field(..., description="Creation date (ISO format)")
  customer_id: str = Field(..., description="Customer invoicing profile ID")
  customer_name: str = Field(..., description="Customer full name")
  plan_id: int = Field(..., description="Subscribed plan ID")
  total: int = Field(..., description="Sum of all deadlines in cents")
  coupon_id: int | None = Field(None, description="Coupon ID")
  payment_method: str = Field(..., description="card or check")
  gateway_subscription_id: str | None = Field(
    None, description="Gateway subscription ID once synchronized"
  )
  start_at: str = Field(..., description="First due date (ISO format)")
  expiration_date: str = Field(..., description="End of the subscription (ISO format)")
  items: list[PaymentScheduleItemResponse] = Field(
    ..., description="Deadlines ordered by due date"
  )


class PaymentSchedulesResponse(BaseModel):
  """Response for payment schedule list."""

  payment_schedules: list[PaymentScheduleResponse] = Field(
    ..., description="Page of payment schedules"
  )
  total_count: int = Field(..., description="Total number of matching schedules")
  page: int = Field(..., description="Current page")
  size: int = Field(..., description="Page size")
  has_more: bool = Field(..., description="Whether more schedules are available")


class SyncPaymentScheduleRequest(BaseModel):
  """Synchronize a payment schedule with the gateway."""

  reservable_gateway_product_id: str | None = Field(
    None,
    description="Gateway product invoicing the reservations bought with the plan",
  )


class SyncPaymentScheduleResponse(BaseModel):
  payment_schedule_id: int = Field(..., description="Payment schedule ID")
  gateway_subscription_id: str = Field(..., description="Gateway subscription ID")
