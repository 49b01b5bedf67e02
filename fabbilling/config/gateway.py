"""Payment gateway configuration.

The gateway settings are resolved once (settings table first, environment
second) and handed to the gateway adapter and the invoice builder, so that
billing code never reads global configuration while it computes.
"""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from .env import env

SUPPORTED_GATEWAYS = ("stripe", "payzen")


@dataclass(frozen=True)
class GatewayConfig:
  """Configuration shared by the gateway adapter and the invoice builder."""

  gateway: str
  secret_key: str
  currency: str
  api_version: Optional[str] = None

  @classmethod
  def from_env(cls) -> "GatewayConfig":
    """Build the configuration from environment variables only."""
    return cls(
      gateway=env.PAYMENT_GATEWAY,
      secret_key=env.STRIPE_SECRET_KEY,
      currency=env.STRIPE_CURRENCY,
      api_version=env.STRIPE_API_VERSION,
    )

  @classmethod
  def from_settings(cls, session: Session) -> "GatewayConfig":
    """Build the configuration, letting stored settings override the environment.

    Secret keys are never read from the settings table.
    """
    from ..models.billing.setting import Setting

    return cls(
      gateway=Setting.get_value("payment_gateway", session, env.PAYMENT_GATEWAY),
      secret_key=env.STRIPE_SECRET_KEY,
      currency=Setting.get_value("stripe_currency", session, env.STRIPE_CURRENCY),
      api_version=env.STRIPE_API_VERSION,
    )
