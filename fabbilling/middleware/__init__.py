"""Request middlewares and FastAPI dependencies."""

from .database import DatabaseSessionMiddleware
from .logging import StructuredLoggingMiddleware

__all__ = ["DatabaseSessionMiddleware", "StructuredLoggingMiddleware"]
