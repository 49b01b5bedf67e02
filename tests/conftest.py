import os

# Must be set before fabbilling is imported: the engine is built at import time
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-with-at-least-32-characters"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_fabbilling"
os.environ["LOCKED_SETTINGS"] = "stripe_secret_key"

from datetime import datetime
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from fabbilling.config.gateway import GatewayConfig
from fabbilling.database import Base, SessionFactory, engine, get_db_session
from fabbilling.middleware.auth.jwt import create_jwt_token
from fabbilling.models.billing import (
  Coupon,
  CouponValidity,
  InvoicingProfile,
  Plan,
  PlanInterval,
  ProfileRole,
)
from fabbilling.operations.billing import (
  CouponService,
  PaymentProvider,
  PaymentScheduleService,
)


@pytest.fixture
def db_session():
  """A fresh in-memory database per test."""
  Base.metadata.create_all(bind=engine)
  session = SessionFactory()
  try:
    yield session
  finally:
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def gateway_config():
  return GatewayConfig(
    gateway="stripe",
    secret_key="sk_test_fabbilling",
    currency="eur",
    api_version="2024-11-20.acacia",
  )


@pytest.fixture
def admin(db_session):
  return InvoicingProfile.create(
    "Ada", "Admin", "admin@fablab.test", db_session, role=ProfileRole.ADMIN
  )


@pytest.fixture
def manager(db_session):
  return InvoicingProfile.create(
    "Max", "Manager", "manager@fablab.test", db_session, role=ProfileRole.MANAGER
  )


@pytest.fixture
def member(db_session):
  return InvoicingProfile.create(
    "Marie",
    "Curie",
    "marie@fablab.test",
    db_session,
    stripe_customer_id="cus_marie",
  )


@pytest.fixture
def other_member(db_session):
  return InvoicingProfile.create(
    "John", "Doe", "john@fablab.test", db_session, stripe_customer_id="cus_john"
  )


@pytest.fixture
def yearly_plan(db_session):
  """12 monthly deadlines of 100.00, with 0.05 left over."""
  plan = Plan(
    name="Yearly membership",
    amount=120005,
    interval=PlanInterval.YEAR.value,
    interval_count=1,
    stripe_product_id="prod_plan",
  )
  db_session.add(plan)
  db_session.commit()
  return plan


@pytest.fixture
def even_plan(db_session):
  plan = Plan(
    name="Quarterly membership",
    amount=30000,
    interval=PlanInterval.MONTH.value,
    interval_count=3,
    stripe_product_id="prod_quarter",
  )
  db_session.add(plan)
  db_session.commit()
  return plan


@pytest.fixture
def percent_coupon(db_session):
  coupon = Coupon(code="WELCOME10", name="Welcome", percent_off=10)
  db_session.add(coupon)
  db_session.commit()
  return coupon


@pytest.fixture
def forever_coupon(db_session):
  coupon = Coupon(
    code="STUDENT",
    name="Student",
    amount_off=1000,
    validity_per_user=CouponValidity.FOREVER.value,
  )
  db_session.add(coupon)
  db_session.commit()
  return coupon


@pytest.fixture
def mock_provider():
  provider = Mock(spec=PaymentProvider)
  provider.create_price.side_effect = lambda product_id, amount, name=None, monthly=False: (
    f"price_{product_id}_{amount}"
  )
  provider.create_subscription.return_value = "sub_123"
  return provider


@pytest.fixture
def schedule_service(db_session, gateway_config, mock_provider):
  return PaymentScheduleService(
    db_session,
    gateway_config,
    provider=mock_provider,
    coupon_service=CouponService(db_session),
  )


@pytest.fixture
def start_at():
  return datetime(2024, 1, 31, 10, 0)


@pytest.fixture
def auth_headers():
  """Bearer header for a profile."""

  def headers(profile: InvoicingProfile) -> dict:
    return {"Authorization": f"Bearer {create_jwt_token(profile.id)}"}

  return headers


@pytest.fixture
def client(db_session):
  """Test client sharing the test's database session."""
  from main import app

  def override_get_db():
    yield db_session

  app.dependency_overrides[get_db_session] = override_get_db

  yield TestClient(app)

  app.dependency_overrides = {}
