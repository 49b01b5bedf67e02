"""Invoice API models."""

from pydantic import BaseModel, Field


class InvoiceItemResponse(BaseModel):
  """Invoice line item."""

  id: int = Field(..., description="Invoice item ID")
  description: str = Field(..., description="Line item description")
  amount: int = Field(..., description="Amount in cents")
  subscription_id: int | None = Field(None, description="Linked subscription ID")


class InvoiceResponse(BaseModel):
  """Invoice information."""

  id: int = Field(..., description="Invoice ID")
  reference: str | None = Field(None, description="Invoice reference number")
  created_at: str = Field(..., description="Creation date (ISO format)")
  customer_id: str = Field(..., description="Customer invoicing profile ID")
  customer_name: str = Field(..., description="Customer full name")
  operator_id: str = Field(..., description="Operator invoicing profile ID")
  total: int = Field(..., description="Total in cents, coupon applied")
  coupon_id: int | None = Field(None, description="Applied coupon ID")
  payment_method: str | None = Field(
    None, description="Payment method, empty when collected at the counter"
  )
  gateway_object_id: str | None = Field(None, description="Gateway payment object ID")
  gateway_object_type: str | None = Field(
    None, description="Gateway payment object type"
  )
  items: list[InvoiceItemResponse] = Field(..., description="Invoice line items")


class InvoicesResponse(BaseModel):
  """Response for invoice list."""

  invoices: list[InvoiceResponse] = Field(..., description="Page of invoices")
  total_count: int = Field(..., description="Total number of matching invoices")
  page: int = Field(..., description="Current page")
  size: int = Field(..., description="Page size")
  has_more: bool = Field(..., description="Whether more invoices are available")
