import json
import logging
import sys

import pytest

from fabbilling.config.env import EnvConfig
from fabbilling.config.logging import (
  StructuredFormatter,
  TieredLogFilter,
  get_logger,
  get_logging_config,
  log_api_request,
  log_billing_event,
  log_error,
  setup_logging,
)


def _make_record(level: int) -> logging.LogRecord:
  return logging.LogRecord(
    name="test",
    level=level,
    pathname=__file__,
    lineno=0,
    msg="message",
    args=(),
    exc_info=None,
  )


def test_structured_formatter_includes_billing_fields():
  formatter = StructuredFormatter()
  record = logging.LogRecord(
    name="fabbilling.test",
    level=logging.INFO,
    pathname=__file__,
    lineno=10,
    msg="Deadline %s paid",
    args=(3,),
    exc_info=None,
  )
  record.component = "billing"
  record.action = "payment_schedule_item_paid"
  record.profile_id = "prof_1"
  record.invoice_id = 12
  record.payment_schedule_id = 4
  record.item_id = 3
  record.gateway_object_id = "pi_123"
  record.request_id = "req-123"

  payload = json.loads(formatter.format(record))

  assert payload["message"] == "Deadline 3 paid"
  assert payload["component"] == "billing"
  assert payload["action"] == "payment_schedule_item_paid"
  assert payload["profile_id"] == "prof_1"
  assert payload["invoice_id"] == 12
  assert payload["payment_schedule_id"] == 4
  assert payload["item_id"] == 3
  assert payload["gateway_object_id"] == "pi_123"
  assert payload["request_id"] == "req-123"
  assert payload["timestamp"].endswith("Z")


def test_structured_formatter_includes_error_details():
  formatter = StructuredFormatter()

  try:
    raise ValueError("boom")
  except ValueError:
    record = logging.LogRecord(
      name="fabbilling.test",
      level=logging.ERROR,
      pathname=__file__,
      lineno=50,
      msg="Failure occurred",
      args=(),
      exc_info=None,
    )
    record.exc_info = sys.exc_info()
    record.error_category = "gateway"

  payload = json.loads(formatter.format(record))

  assert payload["level"] == "ERROR"
  assert payload["error_category"] == "gateway"
  assert payload["error"]["type"] == "ValueError"
  assert payload["error"]["message"] == "boom"
  assert any("ValueError: boom" in line for line in payload["error"]["traceback"])


@pytest.mark.parametrize(
  "tier,level,should_pass",
  [
    ("critical", logging.ERROR, True),
    ("critical", logging.INFO, False),
    ("operational", logging.INFO, True),
    ("operational", logging.ERROR, False),
    ("debug", logging.DEBUG, True),
    ("debug", logging.INFO, False),
  ],
)
def test_tiered_log_filter(tier, level, should_pass):
  assert TieredLogFilter(tier).filter(_make_record(level)) is should_pass


def test_get_logging_config_prod_has_expected_handlers(monkeypatch):
  monkeypatch.setattr(EnvConfig, "LOG_LEVEL", "INFO")
  config = get_logging_config("prod")

  assert "debug" not in config["handlers"]
  assert config["loggers"]["fabbilling"]["handlers"] == ["critical", "operational"]
  assert config["loggers"]["stripe"]["level"] == "WARNING"


def test_get_logging_config_staging_adds_debug_handler(monkeypatch):
  monkeypatch.setattr(EnvConfig, "LOG_LEVEL", "INFO")
  config = get_logging_config("staging")

  assert "debug" in config["loggers"]["fabbilling.gateway"]["handlers"]
  assert config["handlers"]["debug"]["level"] == "DEBUG"


def test_get_logging_config_dev_uses_console(monkeypatch):
  monkeypatch.setattr(EnvConfig, "LOG_LEVEL", "DEBUG")
  config = get_logging_config("dev")

  assert config["handlers"]["console"]["formatter"] == "simple"
  assert config["loggers"]["fabbilling"]["handlers"] == ["console"]


def test_setup_logging_invokes_dict_config(monkeypatch):
  captured = {}

  def fake_dict_config(value):
    captured["config"] = value

  monkeypatch.setattr(logging.config, "dictConfig", fake_dict_config)
  setup_logging("test")

  assert captured["config"]["root"]["level"] == "WARNING"


def test_log_api_request_captures_structured_fields(caplog):
  logger = get_logger("tests.config.logging.api")

  with caplog.at_level(logging.INFO, logger=logger.name):
    log_api_request(
      logger,
      method="GET",
      path="/api/invoices",
      status_code=200,
      duration_ms=12.3,
      profile_id="prof_1",
      request_id="req-9",
    )

  record = caplog.records[-1]
  assert record.component == "api"
  assert record.status_code == 200
  assert record.profile_id == "prof_1"
  assert record.message == "GET /api/invoices - 200 (12.30ms)"


def test_log_billing_event(caplog):
  logger = get_logger("tests.config.logging.billing")

  with caplog.at_level(logging.INFO, logger=logger.name):
    log_billing_event(logger, "invoice_created", "Created invoice", invoice_id=7)

  record = caplog.records[-1]
  assert record.component == "billing"
  assert record.action == "invoice_created"
  assert record.invoice_id == 7


def test_log_error_keeps_traceback(caplog):
  logger = get_logger("tests.config.logging.errors")

  with caplog.at_level(logging.ERROR, logger=logger.name):
    try:
      raise RuntimeError("gateway down")
    except RuntimeError as error:
      log_error(logger, error, "gateway", "create_price", error_category="gateway")

  record = caplog.records[-1]
  assert record.error_category == "gateway"
  assert record.exc_info is not None
  assert "gateway.create_price" in record.message
