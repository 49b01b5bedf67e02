"""Invoice persistence and listing."""

from typing import Optional

from sqlalchemy.orm import Session, selectinload

from ...exceptions import EntityNotFoundError
from ...logger import get_logger, log_billing_event
from ...models.billing import Invoice, InvoicingProfile
from .listing import ListFilters, Page, apply_filters, paginate, parse_order

logger = get_logger(__name__)

ORDER_COLUMNS = {
  "reference": Invoice.reference,
  "date": Invoice.created_at,
  "total": Invoice.total,
  "name": InvoicingProfile.first_name,
}


class InvoicesService:
  """Save, fetch and list invoices."""

  def __init__(self, session: Session):
    self.session = session

  @staticmethod
  def parse_order(order_by: Optional[str]):
    return parse_order(order_by, ORDER_COLUMNS, Invoice.id)

  def save(self, invoice: Invoice) -> Invoice:
    """Assign a reference and persist a built invoice."""
    if invoice.reference is None:
      invoice.reference = Invoice.generate_reference(self.session)

    self.session.add(invoice)
    self.session.commit()
    self.session.refresh(invoice)

    log_billing_event(
      logger,
      "invoice_created",
      f"Created invoice {invoice.reference} ({invoice.total} cents)",
      invoice_id=invoice.id,
      profile_id=invoice.invoicing_profile_id,
    )

    return invoice

  def get(self, invoice_id: int) -> Invoice:
    invoice = Invoice.get_by_id(invoice_id, self.session)
    if invoice is None:
      raise EntityNotFoundError(invoice_id, "Invoice")
    return invoice

  def list(
    self,
    order_by: Optional[str] = None,
    page: int = 1,
    size: int = 20,
    filters: Optional[ListFilters] = None,
    profile_id: Optional[str] = None,
  ) -> Page:
    """Return one page of invoices.

    Restricted to `profile_id`'s invoices when given.
    """
    query = (
      self.session.query(Invoice)
      .join(InvoicingProfile, Invoice.invoicing_profile_id == InvoicingProfile.id)
      .options(selectinload(Invoice.invoice_items))
    )
    if profile_id is not None:
      query = query.filter(Invoice.invoicing_profile_id == profile_id)

    query = apply_filters(query, Invoice, filters)

    column, descending = self.parse_order(order_by)
    query = query.order_by(column.desc() if descending else column.asc(), Invoice.id)

    return paginate(query, page, size)
