"""Alembic environment configuration."""

from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool

from alembic import context

# Import every model so that autogenerate sees all tables
from fabbilling.database import Model, get_database_url
from fabbilling.models.billing.coupon import Coupon  # noqa: F401
from fabbilling.models.billing.invoice import Invoice, InvoiceItem  # noqa: F401
from fabbilling.models.billing.payment_schedule import (  # noqa: F401
  PaymentSchedule,
  PaymentScheduleItem,
)
from fabbilling.models.billing.plan import Plan  # noqa: F401
from fabbilling.models.billing.profile import InvoicingProfile  # noqa: F401
from fabbilling.models.billing.setting import Setting  # noqa: F401

config = context.config

if config.config_file_name is not None:
  fileConfig(config.config_file_name)

# Database URL from the environment, with SSL configuration
database_url = get_database_url()
if database_url:
  config.set_main_option("sqlalchemy.url", database_url)

target_metadata = Model.metadata


def run_migrations_offline() -> None:
  """Run migrations in 'offline' mode, emitting SQL without a DBAPI."""
  url = config.get_main_option("sqlalchemy.url")
  context.configure(
    url=url,
    target_metadata=target_metadata,
    literal_binds=True,
    dialect_opts={"paramstyle": "named"},
  )

  with context.begin_transaction():
    context.run_migrations()


def run_migrations_online() -> None:
  """Run migrations in 'online' mode against a live connection."""
  connectable = engine_from_config(
    config.get_section(config.config_ini_section, {}),
    prefix="sqlalchemy.",
    poolclass=pool.NullPool,
  )

  with connectable.connect() as connection:
    context.configure(connection=connection, target_metadata=target_metadata)

    with context.begin_transaction():
      context.run_migrations()


if context.is_offline_mode():
  run_migrations_offline()
else:
  run_migrations_online()
