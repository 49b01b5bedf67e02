"""PDF rendering of invoices and payment schedules."""

from jinja2 import Environment, PackageLoader, select_autoescape

from ...logger import get_logger
from ...models.billing import Invoice, PaymentSchedule
from .pricing import format_long_date

logger = get_logger(__name__)


def format_amount(cents: int, currency: str = "eur") -> str:
  return f"{cents / 100:.2f} {currency.upper()}"


class DocumentRenderer:
  """Render billing documents from the package templates."""

  def __init__(self, currency: str = "eur"):
    self.currency = currency
    self.env = Environment(
      loader=PackageLoader("fabbilling.operations.billing", "templates"),
      autoescape=select_autoescape(["html"]),
    )
    self.env.filters["amount"] = lambda cents: format_amount(cents, self.currency)
    self.env.filters["long_date"] = format_long_date

  def render_html(self, template_name: str, **context) -> str:
    return self.env.get_template(template_name).render(**context)

  def to_pdf(self, html: str) -> bytes:
    # weasyprint loads native libraries on import
    from weasyprint import HTML

    return HTML(string=html).write_pdf()

  def invoice_html(self, invoice: Invoice) -> str:
    return self.render_html("invoice.html", invoice=invoice)

  def invoice_pdf(self, invoice: Invoice) -> bytes:
    pdf = self.to_pdf(self.invoice_html(invoice))
    logger.debug(
      f"Rendered invoice {invoice.reference} ({len(pdf)} bytes)",
      extra={"invoice_id": invoice.id},
    )
    return pdf

  def payment_schedule_html(self, schedule: PaymentSchedule) -> str:
    return self.render_html("payment_schedule.html", schedule=schedule)

  def payment_schedule_pdf(self, schedule: PaymentSchedule) -> bytes:
    pdf = self.to_pdf(self.payment_schedule_html(schedule))
    logger.debug(
      f"Rendered payment schedule {schedule.reference} ({len(pdf)} bytes)",
      extra={"payment_schedule_id": schedule.id},
    )
    return pdf
