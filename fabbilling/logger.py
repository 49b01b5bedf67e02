"""
FabBilling Logging

Unified logging interface on top of the structured logging configuration.
Importing this module configures logging once for the process.
"""

import logging
from typing import Optional, Dict, Any

from .config import env
from .config.logging import (
  setup_logging,
  get_logger,
  log_api_request,
  log_billing_event,
  log_error,
)

setup_logging()

logger = get_logger("fabbilling")

if env.is_development():
  logging.getLogger("httpx").setLevel(logging.WARNING)
  logging.getLogger("httpcore").setLevel(logging.WARNING)
  logging.getLogger("urllib3").setLevel(logging.WARNING)

api_logger = get_logger("fabbilling.api")


def log_api(
  method: str,
  path: str,
  status_code: int,
  duration_ms: float,
  profile_id: Optional[str] = None,
  request_id: Optional[str] = None,
) -> None:
  """Log API requests with structured data."""
  log_api_request(
    api_logger, method, path, status_code, duration_ms, profile_id, request_id
  )


def log_app_error(
  error: Exception,
  component: str,
  action: str,
  error_category: str = "application",
  profile_id: Optional[str] = None,
  metadata: Optional[Dict[str, Any]] = None,
) -> None:
  """Log application errors with context."""
  log_error(logger, error, component, action, error_category, profile_id, metadata)


__all__ = [
  "logger",
  "api_logger",
  "log_api",
  "log_app_error",
  "log_billing_event",
  "log_error",
  "get_logger",
]
