"""
Centralized configuration package for the FabBilling service.
"""

# Import env first to avoid circular dependencies
from .env import EnvConfig, env
from .gateway import SUPPORTED_GATEWAYS, GatewayConfig
from .validation import ConfigValidationError, EnvValidator

__all__ = [
  "ConfigValidationError",
  "EnvConfig",
  "EnvValidator",
  "GatewayConfig",
  "SUPPORTED_GATEWAYS",
  "env",
]
