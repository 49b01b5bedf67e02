"""Payment schedule endpoints: listing, documents, gateway sync and deadlines."""

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response

from ...config import env
from ...exceptions import FabBillingError
from ...logger import get_logger
from ...middleware.auth.dependencies import get_current_profile, require_staff
from ...models.api.billing.payment_schedule import (
  PaymentScheduleItemResponse,
  PaymentScheduleResponse,
  PaymentSchedulesResponse,
  SyncPaymentScheduleRequest,
  SyncPaymentScheduleResponse,
)
from ...models.billing import InvoicingProfile, PaymentSchedule, PaymentScheduleItem
from ...operations.billing import (
  DocumentRenderer,
  ListFilters,
  PaymentScheduleService,
)
from ..dependencies import get_document_renderer, get_payment_schedule_service
from ..errors import http_error

logger = get_logger(__name__)

router = APIRouter(prefix="/api/payment_schedules", tags=["Payment Schedules"])


def item_response(item: PaymentScheduleItem) -> PaymentScheduleItemResponse:
  return PaymentScheduleItemResponse(
    id=item.id,
    due_date=item.due_date.isoformat(),
    amount=item.amount,
    state=item.state,
    details=item.details or {},
    payment_method=item.payment_method,
    invoice_id=item.invoice_id,
    client_secret=item.client_secret,
  )


def schedule_response(schedule: PaymentSchedule) -> PaymentScheduleResponse:
  return PaymentScheduleResponse(
    id=schedule.id,
    reference=schedule.reference,
    created_at=schedule.created_at.isoformat(),
    customer_id=schedule.invoicing_profile_id,
    customer_name=schedule.invoicing_profile.full_name,
    plan_id=schedule.plan_id,
    total=schedule.total,
    coupon_id=schedule.coupon_id,
    payment_method=schedule.payment_method,
    gateway_subscription_id=schedule.stripe_subscription_id,
    start_at=schedule.start_at.isoformat(),
    expiration_date=schedule.expiration_date.isoformat(),
    items=[item_response(item) for item in schedule.ordered_items],
  )


def _check_owner(profile: InvoicingProfile, schedule: PaymentSchedule) -> None:
  if not profile.is_staff() and schedule.invoicing_profile_id != profile.id:
    raise HTTPException(
      status_code=403, detail="Not allowed to access this payment schedule"
    )


@router.get(
  "",
  response_model=PaymentSchedulesResponse,
  summary="List Payment Schedules",
  description="""List payment schedules, paginated and optionally filtered.

Staff see every schedule; members only see their own.""",
  operation_id="listPaymentSchedules",
)
async def list_payment_schedules(
  page: int = Query(1, ge=1, description="Page number"),
  size: int = Query(
    env.DEFAULT_PAGE_SIZE, ge=1, le=env.MAX_PAGE_SIZE, description="Page size"
  ),
  order_by: str | None = Query(None, description="Ordering column"),
  reference: str | None = Query(None, description="Reference prefix"),
  customer: str | None = Query(None, description="Part of the customer's name"),
  date: str | None = Query(None, description="Creation day (ISO-8601)"),
  current_profile: InvoicingProfile = Depends(get_current_profile),
  service: PaymentScheduleService = Depends(get_payment_schedule_service),
):
  try:
    result = service.list(
      order_by=order_by,
      page=page,
      size=size,
      filters=ListFilters(number=reference, customer=customer, date=date),
      profile_id=None if current_profile.is_staff() else current_profile.id,
    )

    return PaymentSchedulesResponse(
      payment_schedules=[schedule_response(s) for s in result.items],
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
    logger.error(f"Failed to list payment schedules: {e}", exc_info=True)
    raise HTTPException(status_code=500, detail="Failed to retrieve payment schedules")


@router.get(
  "/{schedule_id}/download",
  summary="Download Payment Schedule",
  description="Render the payment schedule as a PDF document.",
  operation_id="downloadPaymentSchedule",
  response_class=Response,
)
async def download_payment_schedule(
  schedule_id: int,
  current_profile: InvoicingProfile = Depends(get_current_profile),
  service: PaymentScheduleService = Depends(get_payment_schedule_service),
  renderer: DocumentRenderer = Depends(get_document_renderer),
):
  try:
    schedule = service.get(schedule_id)
    _check_owner(current_profile, schedule)

    pdf = renderer.payment_schedule_pdf(schedule)
    return Response(
      content=pdf,
      media_type="application/pdf",
      headers={
        "Content-Disposition": f'attachment; filename="{schedule.reference}.pdf"'
      },
    )

  except HTTPException:
    raise
  except FabBillingError as e:
    raise http_error(e)
  except Exception as e:
    logger.error(f"Failed to render payment schedule {schedule_id}: {e}", exc_info=True)
    raise HTTPException(status_code=500, detail="Failed to render payment schedule")


@router.post(
  "/{schedule_id}/sync",
  response_model=SyncPaymentScheduleResponse,
  summary="Synchronize Payment Schedule",
  description="""Create the gateway subscription of a payment schedule.

Synchronizing an already synchronized schedule returns its existing
subscription without contacting the gateway.

**Requirements:**
- Administrator or manager
- The schedule is paid by card""",
  operation_id="syncPaymentSchedule",
)
async def sync_payment_schedule(
  schedule_id: int,
  request: SyncPaymentScheduleRequest | None = Body(None),
  current_profile: InvoicingProfile = Depends(require_staff),
  service: PaymentScheduleService = Depends(get_payment_schedule_service),
):
  try:
    schedule = service.get(schedule_id)
    subscription_id = service.sync_with_gateway(
      schedule,
      request.reservable_gateway_product_id if request else None,
    )
    return SyncPaymentScheduleResponse(
      payment_schedule_id=schedule.id,
      gateway_subscription_id=subscription_id,
    )

  except HTTPException:
    raise
  except FabBillingError as e:
    raise http_error(e)
  except Exception as e:
    logger.error(f"Failed to synchronize payment schedule {schedule_id}: {e}", exc_info=True)
    raise HTTPException(status_code=500, detail="Failed to synchronize payment schedule")


@router.post(
  "/items/{item_id}/cash_check",
  response_model=PaymentScheduleItemResponse,
  summary="Cash Check",
  description="""Record the check received for a pending deadline.

**Requirements:**
- Administrator or manager
- The schedule is paid by check""",
  operation_id="cashPaymentScheduleCheck",
)
async def cash_check(
  item_id: int,
  current_profile: InvoicingProfile = Depends(require_staff),
  service: PaymentScheduleService = Depends(get_payment_schedule_service),
):
  try:
    item = service.get_item(item_id)
    return item_response(service.cash_check(item, current_profile))

  except HTTPException:
    raise
  except FabBillingError as e:
    raise http_error(e)
  except Exception as e:
    logger.error(f"Failed to cash check for deadline {item_id}: {e}", exc_info=True)
    raise HTTPException(status_code=500, detail="Failed to cash check")


@router.post(
  "/items/{item_id}/refresh_item",
  response_model=PaymentScheduleItemResponse,
  summary="Refresh Deadline",
  description="Update a deadline from the status of its gateway payment.",
  operation_id="refreshPaymentScheduleItem",
)
async def refresh_item(
  item_id: int,
  current_profile: InvoicingProfile = Depends(get_current_profile),
  service: PaymentScheduleService = Depends(get_payment_schedule_service),
):
  try:
    item = service.get_item(item_id)
    _check_owner(current_profile, item.payment_schedule)
    return item_response(service.refresh_item(item, current_profile))

  except HTTPException:
    raise
  except FabBillingError as e:
    raise http_error(e)
  except Exception as e:
    logger.error(f"Failed to refresh deadline {item_id}: {e}", exc_info=True)
    raise HTTPException(status_code=500, detail="Failed to refresh deadline")
