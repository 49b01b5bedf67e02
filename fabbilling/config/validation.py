"""
Environment variable validation for startup checks.

This module provides validation functions to ensure all required
environment variables are properly configured at application startup.
"""

from typing import List, Dict, Any
import logging

from .gateway import SUPPORTED_GATEWAYS

logger = logging.getLogger(__name__)


class ConfigValidationError(Exception):
  """Raised when configuration validation fails."""

  pass


class EnvValidator:
  """Validates environment configuration at startup."""

  @staticmethod
  def validate_required_vars(env_config) -> None:
    """
    Validate that all required environment variables are set.

    Args:
        env_config: The EnvConfig instance to validate

    Raises:
        ConfigValidationError: If validation fails
    """
    errors = []
    warnings = []

    if env_config.ENVIRONMENT == "prod":
      required_prod_vars = {
        "DATABASE_URL": "PostgreSQL connection string",
        "JWT_SECRET_KEY": "JWT signing key",
      }

      for var_name, description in required_prod_vars.items():
        value = getattr(env_config, var_name, None)
        if not value:
          errors.append(f"{var_name}: {description} is required in production")
        elif var_name == "JWT_SECRET_KEY" and len(str(value)) < 32:
          errors.append(f"{var_name}: Must be at least 32 characters for security")

    gateway = getattr(env_config, "PAYMENT_GATEWAY", "")
    if gateway not in SUPPORTED_GATEWAYS:
      errors.append(
        f"PAYMENT_GATEWAY: Must be one of {', '.join(SUPPORTED_GATEWAYS)}, got {gateway!r}"
      )

    if gateway == "stripe":
      value = getattr(env_config, "STRIPE_SECRET_KEY", None)
      if not value:
        warnings.append(
          "STRIPE_SECRET_KEY: Not configured - payment schedules will not synchronize"
        )
      elif value.startswith("sk_test_") and env_config.ENVIRONMENT == "prod":
        errors.append(
          "STRIPE_SECRET_KEY: Cannot use test key (sk_test_) in production environment"
        )
      elif not value.startswith(("sk_live_", "sk_test_", "rk_live_", "rk_test_")):
        errors.append("STRIPE_SECRET_KEY: Must be a valid Stripe secret key")

    currency = getattr(env_config, "STRIPE_CURRENCY", "")
    if len(currency) != 3 or not currency.isalpha():
      errors.append(f"STRIPE_CURRENCY: Must be an ISO 4217 code, got {currency!r}")

    EnvValidator._validate_numeric_ranges(env_config, errors)
    EnvValidator._validate_urls(env_config, errors)

    if warnings:
      for warning in warnings:
        logger.warning(f"Config validation warning: {warning}")

    if errors:
      logger.error("Configuration validation failed:")
      for error in errors:
        logger.error(f"  - {error}")
      raise ConfigValidationError(
        f"Configuration validation failed with {len(errors)} errors. "
        "Please check environment variables."
      )

    logger.info("Configuration validation passed")

  @staticmethod
  def _validate_numeric_ranges(env_config, errors: List[str]) -> None:
    """Validate numeric configuration values are within reasonable ranges."""
    validations = [
      ("DATABASE_POOL_SIZE", 1, 500, "Database pool size"),
      ("JWT_EXPIRY_HOURS", 1, 720, "JWT expiry"),
      ("DEFAULT_PAGE_SIZE", 1, 1000, "Default page size"),
      ("MAX_PAGE_SIZE", 1, 1000, "Maximum page size"),
    ]

    for var_name, min_val, max_val, description in validations:
      value = getattr(env_config, var_name, None)
      if value is not None:
        if not (min_val <= value <= max_val):
          errors.append(
            f"{var_name}: {description} must be between {min_val} and {max_val}, got {value}"
          )

  @staticmethod
  def _validate_urls(env_config, errors: List[str]) -> None:
    """Validate the database URL format."""
    value = getattr(env_config, "DATABASE_URL", None)
    if value and not value.startswith(("postgresql://", "postgres://", "sqlite://")):
      errors.append(f"DATABASE_URL: Invalid URL format - {value}")

  @staticmethod
  def validate_startup(env_config) -> bool:
    """
    Perform startup validation and return success status.

    Returns:
        bool: True if validation passed, False otherwise
    """
    try:
      EnvValidator.validate_required_vars(env_config)
      return True
    except ConfigValidationError as e:
      logger.error(f"Startup validation failed: {e}")
      return False

  @staticmethod
  def get_config_summary(env_config) -> Dict[str, Any]:
    """Get a summary of the current configuration for logging."""
    return {
      "environment": env_config.ENVIRONMENT,
      "debug": env_config.DEBUG,
      "database": {
        "configured": bool(env_config.DATABASE_URL),
      },
      "gateway": {
        "name": env_config.PAYMENT_GATEWAY,
        "currency": env_config.STRIPE_CURRENCY,
        "secret_key_configured": bool(env_config.STRIPE_SECRET_KEY),
      },
      "locked_settings": list(env_config.LOCKED_SETTINGS),
    }
