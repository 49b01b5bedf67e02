"""Tests for invoice and payment schedule documents."""

import sys
from unittest.mock import MagicMock, patch

import pytest

from fabbilling.operations.billing import InvoicesService
from fabbilling.operations.billing.documents import DocumentRenderer, format_amount
from fabbilling.models.billing import Invoice, InvoiceItem


@pytest.fixture
def renderer():
  return DocumentRenderer("eur")


@pytest.fixture
def invoice(db_session, member, percent_coupon):
  return InvoicesService(db_session).save(
    Invoice(
      invoicing_profile_id=member.id,
      operator_profile_id=member.id,
      total=2700,
      coupon_id=percent_coupon.id,
      payment_method="card",
      invoice_items=[
        InvoiceItem(amount=3000, description="Laser cutter reservation\nMarch 5, 2024"),
      ],
    )
  )


@pytest.fixture
def fake_weasyprint():
  module = MagicMock()
  module.HTML.return_value.write_pdf.return_value = b"%PDF-1.7"
  with patch.dict(sys.modules, {"weasyprint": module}):
    yield module


def test_format_amount():
  assert format_amount(120005) == "1200.05 EUR"
  assert format_amount(5, "usd") == "0.05 USD"


class TestInvoiceDocument:
  def test_html_lists_items_and_total(self, renderer, invoice):
    html = renderer.invoice_html(invoice)

    assert invoice.reference in html
    assert "Marie Curie" in html
    assert "Laser cutter reservation" in html
    assert "30.00 EUR" in html
    assert "27.00 EUR" in html
    assert "Coupon WELCOME10 applied" in html
    assert "Paid by card" in html

  def test_descriptions_are_escaped(self, renderer, db_session, member):
    invoice = InvoicesService(db_session).save(
      Invoice(
        invoicing_profile_id=member.id,
        operator_profile_id=member.id,
        total=100,
        invoice_items=[InvoiceItem(amount=100, description="<b>Workshop</b>")],
      )
    )

    html = renderer.invoice_html(invoice)

    assert "&lt;b&gt;Workshop&lt;/b&gt;" in html
    assert "Paid by" not in html

  def test_pdf(self, renderer, invoice, fake_weasyprint):
    pdf = renderer.invoice_pdf(invoice)

    assert pdf == b"%PDF-1.7"
    html = fake_weasyprint.HTML.call_args.kwargs["string"]
    assert invoice.reference in html


class TestPaymentScheduleDocument:
  def test_html_lists_deadlines(
    self, renderer, schedule_service, yearly_plan, member, start_at
  ):
    schedule = schedule_service.save(
      schedule_service.compute(yearly_plan, member, member, start_at)
    )

    html = renderer.payment_schedule_html(schedule)

    assert schedule.reference in html
    assert "Yearly membership" in html
    assert "January 31, 2024" in html
    assert "February 29, 2024" in html
    assert "100.05 EUR" in html
    assert html.count("100.00 EUR") == 11
    assert "1200.05 EUR" in html

  def test_pdf(self, renderer, schedule_service, even_plan, member, start_at, fake_weasyprint):
    schedule = schedule_service.save(
      schedule_service.compute(even_plan, member, member, start_at)
    )

    assert renderer.payment_schedule_pdf(schedule) == b"%PDF-1.7"
