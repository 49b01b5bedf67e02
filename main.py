"""FabBilling Service API main application module."""

import argparse
from datetime import datetime, timezone
from importlib.metadata import version as pkg_version

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from fabbilling.config import env
from fabbilling.config.logging import get_logger
from fabbilling.config.validation import EnvValidator
from fabbilling.middleware.database import DatabaseSessionMiddleware
from fabbilling.middleware.logging import StructuredLoggingMiddleware
from fabbilling.routers import (
  invoices_router,
  payment_schedules_router,
  settings_router,
)

logger = get_logger("fabbilling.api")


def create_app() -> FastAPI:
  """
  Create the FastAPI app and include the routers.

  Returns:
      FastAPI: The configured FastAPI application.
  """
  app = FastAPI(
    title="FabBilling API",
    version=pkg_version("fabbilling-service"),
    description="Invoices and payment schedules of a fab lab",
    openapi_url="/openapi.json",
  )

  app.state.current_time = datetime.now(timezone.utc)

  @app.on_event("startup")
  async def startup_event():
    """Validate configuration on startup."""
    logger.info("Starting FabBilling API...")

    try:
      EnvValidator.validate_required_vars(env)
      config_summary = EnvValidator.get_config_summary(env)
      logger.info(f"Configuration validated successfully: {config_summary}")
    except Exception as e:
      logger.error(f"Configuration validation failed: {e}")
      if env.is_production():
        raise
      logger.warning("Continuing with invalid configuration (development mode)")

    logger.info("FabBilling API startup complete")

  @app.get("/health", include_in_schema=False)
  async def health():
    return {"status": "ok", "started_at": app.state.current_time.isoformat()}

  app.add_middleware(
    CORSMiddleware,
    allow_origins=env.get_cors_origins(),
    allow_credentials=env.CORS_ALLOW_CREDENTIALS,
    allow_methods=["GET", "POST", "PUT", "OPTIONS"],
    allow_headers=["Accept", "Content-Type", "Authorization", "X-Requested-With"],
    expose_headers=["X-Request-ID", "Content-Disposition"],
    max_age=3600,
  )

  # First added = outermost layer
  app.add_middleware(StructuredLoggingMiddleware)
  app.add_middleware(DatabaseSessionMiddleware)

  @app.exception_handler(Exception)
  async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unhandled errors and answer a generic 500 with the request ID."""
    request_id = getattr(request.state, "request_id", None)

    logger.error("Unhandled exception", extra={"request_id": request_id}, exc_info=exc)

    return JSONResponse(
      status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
      content={"detail": "Internal server error", "request_id": request_id},
    )

  app.include_router(invoices_router)
  app.include_router(payment_schedules_router)
  app.include_router(settings_router)

  return app


app = create_app()


def run():
  """Run the API with uvicorn."""
  parser = argparse.ArgumentParser(description="FabBilling API Server")
  parser.add_argument("--host", default=env.HOST, help="Host to bind to")
  parser.add_argument("--port", type=int, default=env.PORT, help="Port to bind to")
  parser.add_argument("--workers", type=int, default=1, help="Number of workers")
  args = parser.parse_args()

  uvicorn.run(
    "main:app" if args.workers > 1 else app,
    host=args.host,
    port=args.port,
    workers=args.workers,
    log_level=env.LOG_LEVEL.lower(),
    access_log=False,
  )


if __name__ == "__main__":
  run()
