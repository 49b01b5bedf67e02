"""create billing tables

Revision ID: 3f9c1d2e8a10
Revises:
Create Date: 2026-10-19 09:12:44.508311

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "3f9c1d2e8a10"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
  op.create_table(
    "invoicing_profiles",
    sa.Column("id", sa.String(), nullable=False),
    sa.Column("first_name", sa.String(), nullable=False),
    sa.Column("last_name", sa.String(), nullable=False),
    sa.Column("email", sa.String(), nullable=False),
    sa.Column("role", sa.String(), nullable=False),
    sa.Column("stripe_customer_id", sa.String(), nullable=True),
    sa.Column("created_at", sa.DateTime(), nullable=False),
    sa.PrimaryKeyConstraint("id"),
    sa.UniqueConstraint("email"),
    sa.UniqueConstraint("stripe_customer_id"),
  )
  op.create_index(
    "idx_invoicing_profile_first_name", "invoicing_profiles", ["first_name"]
  )
  op.create_index("idx_invoicing_profile_last_name", "invoicing_profiles", ["last_name"])

  op.create_table(
    "plans",
    sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
    sa.Column("name", sa.String(), nullable=False),
    sa.Column("amount", sa.Integer(), nullable=False),
    sa.Column("interval", sa.String(), nullable=False),
    sa.Column("interval_count", sa.Integer(), nullable=False),
    sa.Column("stripe_product_id", sa.String(), nullable=True),
    sa.Column("created_at", sa.DateTime(), nullable=False),
    sa.PrimaryKeyConstraint("id"),
  )

  op.create_table(
    "coupons",
    sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
    sa.Column("code", sa.String(), nullable=False),
    sa.Column("name", sa.String(), nullable=False),
    sa.Column("percent_off", sa.Integer(), nullable=True),
    sa.Column("amount_off", sa.Integer(), nullable=True),
    sa.Column("validity_per_user", sa.String(), nullable=False),
    sa.Column("valid_until", sa.DateTime(), nullable=True),
    sa.Column("max_usages", sa.Integer(), nullable=True),
    sa.Column("active", sa.Boolean(), nullable=False),
    sa.Column("created_at", sa.DateTime(), nullable=False),
    sa.PrimaryKeyConstraint("id"),
    sa.UniqueConstraint("code"),
  )

  op.create_table(
    "settings",
    sa.Column("name", sa.String(), nullable=False),
    sa.Column("value", sa.String(), nullable=True),
    sa.Column("updated_at", sa.DateTime(), nullable=False),
    sa.PrimaryKeyConstraint("name"),
  )

  op.create_table(
    "invoices",
    sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
    sa.Column("reference", sa.String(), nullable=True),
    sa.Column("invoicing_profile_id", sa.String(), nullable=False),
    sa.Column("operator_profile_id", sa.String(), nullable=False),
    sa.Column("total", sa.Integer(), nullable=False),
    sa.Column("coupon_id", sa.Integer(), nullable=True),
    sa.Column("payment_method", sa.String(), nullable=True),
    sa.Column("gateway_object_id", sa.String(), nullable=True),
    sa.Column("gateway_object_type", sa.String(), nullable=True),
    sa.Column("created_at", sa.DateTime(), nullable=False),
    sa.ForeignKeyConstraint(["coupon_id"], ["coupons.id"]),
    sa.ForeignKeyConstraint(["invoicing_profile_id"], ["invoicing_profiles.id"]),
    sa.ForeignKeyConstraint(["operator_profile_id"], ["invoicing_profiles.id"]),
    sa.PrimaryKeyConstraint("id"),
    sa.UniqueConstraint("reference"),
  )
  op.create_index("idx_invoice_profile", "invoices", ["invoicing_profile_id"])
  op.create_index("idx_invoice_created_at", "invoices", ["created_at"])
  op.create_index("idx_invoice_gateway_object", "invoices", ["gateway_object_id"])

  op.create_table(
    "invoice_items",
    sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
    sa.Column("invoice_id", sa.Integer(), nullable=False),
    sa.Column("amount", sa.Integer(), nullable=False),
    sa.Column("description", sa.String(), nullable=False),
    sa.Column("subscription_id", sa.Integer(), nullable=True),
    sa.ForeignKeyConstraint(["invoice_id"], ["invoices.id"]),
    sa.PrimaryKeyConstraint("id"),
  )
  op.create_index("idx_invoice_item_invoice", "invoice_items", ["invoice_id"])

  op.create_table(
    "payment_schedules",
    sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
    sa.Column("reference", sa.String(), nullable=True),
    sa.Column("invoicing_profile_id", sa.String(), nullable=False),
    sa.Column("operator_profile_id", sa.String(), nullable=False),
    sa.Column("plan_id", sa.Integer(), nullable=False),
    sa.Column("total", sa.Integer(), nullable=False),
    sa.Column("coupon_id", sa.Integer(), nullable=True),
    sa.Column("payment_method", sa.String(), nullable=False),
    sa.Column("stripe_subscription_id", sa.String(), nullable=True),
    sa.Column("start_at", sa.DateTime(), nullable=False),
    sa.Column("expiration_date", sa.DateTime(), nullable=False),
    sa.Column("created_at", sa.DateTime(), nullable=False),
    sa.ForeignKeyConstraint(["coupon_id"], ["coupons.id"]),
    sa.ForeignKeyConstraint(["invoicing_profile_id"], ["invoicing_profiles.id"]),
    sa.ForeignKeyConstraint(["operator_profile_id"], ["invoicing_profiles.id"]),
    sa.ForeignKeyConstraint(["plan_id"], ["plans.id"]),
    sa.PrimaryKeyConstraint("id"),
    sa.UniqueConstraint("reference"),
    sa.UniqueConstraint("stripe_subscription_id"),
  )
  op.create_index(
    "idx_payment_schedule_profile", "payment_schedules", ["invoicing_profile_id"]
  )
  op.create_index(
    "idx_payment_schedule_created_at", "payment_schedules", ["created_at"]
  )

  op.create_table(
    "payment_schedule_items",
    sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
    sa.Column("payment_schedule_id", sa.Integer(), nullable=False),
    sa.Column("due_date", sa.DateTime(), nullable=False),
    sa.Column("amount", sa.Integer(), nullable=False),
    sa.Column("details", sa.JSON(), nullable=False),
    sa.Column("state", sa.String(), nullable=False),
    sa.Column("payment_method", sa.String(), nullable=True),
    sa.Column("invoice_id", sa.Integer(), nullable=True),
    sa.Column("client_secret", sa.String(), nullable=True),
    sa.Column("stripe_payment_intent_id", sa.String(), nullable=True),
    sa.ForeignKeyConstraint(["invoice_id"], ["invoices.id"]),
    sa.ForeignKeyConstraint(["payment_schedule_id"], ["payment_schedules.id"]),
    sa.PrimaryKeyConstraint("id"),
  )
  op.create_index(
    "idx_payment_schedule_item_schedule",
    "payment_schedule_items",
    ["payment_schedule_id"],
  )
  op.create_index("idx_payment_schedule_item_state", "payment_schedule_items", ["state"])


def downgrade() -> None:
  op.drop_index("idx_payment_schedule_item_state", table_name="payment_schedule_items")
  op.drop_index(
    "idx_payment_schedule_item_schedule", table_name="payment_schedule_items"
  )
  op.drop_table("payment_schedule_items")
  op.drop_index("idx_payment_schedule_created_at", table_name="payment_schedules")
  op.drop_index("idx_payment_schedule_profile", table_name="payment_schedules")
  op.drop_table("payment_schedules")
  op.drop_index("idx_invoice_item_invoice", table_name="invoice_items")
  op.drop_table("invoice_items")
  op.drop_index("idx_invoice_gateway_object", table_name="invoices")
  op.drop_index("idx_invoice_created_at", table_name="invoices")
  op.drop_index("idx_invoice_profile", table_name="invoices")
  op.drop_table("invoices")
  op.drop_table("settings")
  op.drop_table("coupons")
  op.drop_table("plans")
  op.drop_index("idx_invoicing_profile_last_name", table_name="invoicing_profiles")
  op.drop_index("idx_invoicing_profile_first_name", table_name="invoicing_profiles")
  op.drop_table("invoicing_profiles")
