"""
Logging middleware for structured API request logging.

Every request is logged with its timing, the authenticated profile when
known and a request id that is echoed back in the X-Request-ID header.
"""

import time
import uuid
from typing import Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..logger import log_api, log_app_error


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
  """Log all API requests with structured data."""

  def __init__(self, app, exclude_paths: Optional[list] = None):
    super().__init__(app)
    self.exclude_paths = exclude_paths or [
      "/health",
      "/docs",
      "/redoc",
      "/openapi.json",
      "/favicon.ico",
    ]

  async def dispatch(self, request: Request, call_next: Callable) -> Response:
    if any(request.url.path.startswith(path) for path in self.exclude_paths):
      return await call_next(request)

    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    start_time = time.time()

    try:
      response = await call_next(request)
    except Exception as e:
      duration_ms = (time.time() - start_time) * 1000
      profile_id = getattr(request.state, "profile_id", None)

      error_category = "application"
      if isinstance(e, PermissionError):
        error_category = "authorization"
      elif "database" in str(e).lower() or "connection" in str(e).lower():
        error_category = "database"

      log_app_error(
        error=e,
        component="api_middleware",
        action="request_processing",
        error_category=error_category,
        profile_id=profile_id,
        metadata={
          "method": request.method,
          "path": request.url.path,
          "duration_ms": duration_ms,
          "request_id": request_id,
        },
      )
      raise

    duration_ms = (time.time() - start_time) * 1000
    profile_id = getattr(request.state, "profile_id", None)

    # Paths only: query strings may carry tokens
    log_api(
      method=request.method,
      path=request.url.path,
      status_code=response.status_code,
      duration_ms=duration_ms,
      profile_id=profile_id,
      request_id=request_id,
    )

    response.headers["X-Request-ID"] = request_id

    return response
