"""Invoice listing and download endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from ...config import env
from ...exceptions import FabBillingError
from ...logger import get_logger
from ...middleware.auth.dependencies import get_current_profile
from ...models.api.billing.invoice import (
  InvoiceItemResponse,
  InvoiceResponse,
  InvoicesResponse,
)
from ...models.billing import Invoice, InvoicingProfile
from ...operations.billing import DocumentRenderer, InvoicesService, ListFilters
from ..dependencies import get_document_renderer, get_invoices_service
from ..errors import http_error

logger = get_logger(__name__)

router = APIRouter(prefix="/api/invoices", tags=["Invoices"])


def invoice_response(invoice: Invoice) -> InvoiceResponse:
  return InvoiceResponse(
    id=invoice.id,
    reference=invoice.reference,
    created_at=invoice.created_at.isoformat(),
    customer_id=invoice.invoicing_profile_id,
    customer_name=invoice.invoicing_profile.full_name,
    operator_id=invoice.operator_profile_id,
    total=invoice.total,
    coupon_id=invoice.coupon_id,
    payment_method=invoice.payment_method,
    gateway_object_id=invoice.gateway_object_id,
    gateway_object_type=invoice.gateway_object_type,
    items=[
      InvoiceItemResponse(
        id=item.id,
        description=item.description,
        amount=item.amount,
        subscription_id=item.subscription_id,
      )
      for item in invoice.invoice_items
    ],
  )


@router.get(
  "",
  response_model=InvoicesResponse,
  summary="List Invoices",
  description="""List invoices, paginated and optionally filtered.

Staff see every invoice; members only see their own.

**Ordering:** `reference`, `date`, `total` or `name`, prefixed with `-` for
descending order.""",
  operation_id="listInvoices",
)
async def list_invoices(
  page: int = Query(1, ge=1, description="Page number"),
  size: int = Query(
    env.DEFAULT_PAGE_SIZE, ge=1, le=env.MAX_PAGE_SIZE, description="Page size"
  ),
  order_by: str | None = Query(None, description="Ordering column"),
  number: str | None = Query(None, description="Reference prefix"),
  customer: str | None = Query(None, description="Part of the customer's name"),
  date: str | None = Query(None, description="Creation day (ISO-8601)"),
  current_profile: InvoicingProfile = Depends(get_current_profile),
  service: InvoicesService = Depends(get_invoices_service),
):
  try:
    result = service.list(
      order_by=order_by,
      page=page,
      size=size,
      filters=ListFilters(number=number, customer=customer, date=date),
      profile_id=None if current_profile.is_staff() else current_profile.id,
    )

    return InvoicesResponse(
      invoices=[invoice_response(invoice) for invoice in result.items],
      total_count=result.total_count,
      page=result.page,
      size=result.size,
      has_more=result.has_more,
    )

  except HTTPException:
    raise
  except ValueError as e:
    raise HTTPException(status_code=422, detail=f"Invalid date filter: {e}")
  except FabBillingError as e:
    raise http_error(e)
  except Exception as e:
    logger.error(f"Failed to list invoices: {e}", exc_info=True)
    raise HTTPException(status_code=500, detail="Failed to retrieve invoices")


@router.get(
  "/{invoice_id}/download",
  summary="Download Invoice",
  description="Render the invoice as a PDF document.",
  operation_id="downloadInvoice",
  response_class=Response,
)
async def download_invoice(
  invoice_id: int,
  current_profile: InvoicingProfile = Depends(get_current_profile),
  service: InvoicesService = Depends(get_invoices_service),
  renderer: DocumentRenderer = Depends(get_document_renderer),
):
  try:
    invoice = service.get(invoice_id)
    if (
      not current_profile.is_staff()
      and invoice.invoicing_profile_id != current_profile.id
    ):
      raise HTTPException(status_code=403, detail="Not allowed to read this invoice")

    pdf = renderer.invoice_pdf(invoice)
    return Response(
      content=pdf,
      media_type="application/pdf",
      headers={
        "Content-Disposition": f'attachment; filename="{invoice.reference}.pdf"'
      },
    )

  except HTTPException:
    raise
  except FabBillingError as e:
    raise http_error(e)
  except Exception as e:
    logger.error(f"Failed to render invoice {invoice_id}: {e}", exc_info=True)
    raise HTTPException(status_code=500, detail="Failed to render invoice")
