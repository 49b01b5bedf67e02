"""Invoicing profile model - the billing identity of customers and operators."""

from datetime import UTC, datetime
from enum import Enum
from typing import Optional

from sqlalchemy import Column, DateTime, Index, String
from sqlalchemy.orm import Session

from ...database import Base
from ...logger import get_logger
from ...utils.ulid import generate_prefixed_ulid

logger = get_logger(__name__)


class ProfileRole(str, Enum):
  """Roles a profile may hold."""

  ADMIN = "admin"
  MANAGER = "manager"
  MEMBER = "member"


class InvoicingProfile(Base):
  """Billing identity of a fab-lab user.

  The same profile is used as the customer of an invoice and as the
  operator that triggered it (the customer themselves, a manager or an
  administrator).
  """

  __tablename__ = "invoicing_profiles"

  id = Column(String, primary_key=True, default=lambda: generate_prefixed_ulid("prof"))

  first_name = Column(String, nullable=False)
  last_name = Column(String, nullable=False)
  email = Column(String, unique=True, nullable=False)
  role = Column(String, default=ProfileRole.MEMBER.value, nullable=False)

  stripe_customer_id = Column(String, unique=True, nullable=True)

  created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

  __table_args__ = (
    Index("idx_invoicing_profile_first_name", "first_name"),
    Index("idx_invoicing_profile_last_name", "last_name"),
  )

  def __repr__(self) -> str:
    return f"<InvoicingProfile {self.id} {self.full_name} role={self.role}>"

  @property
  def full_name(self) -> str:
    return f"{self.first_name} {self.last_name}"

  def is_admin(self) -> bool:
    return self.role == ProfileRole.ADMIN.value

  def is_manager(self) -> bool:
    return self.role == ProfileRole.MANAGER.value

  def is_staff(self) -> bool:
    """Admins and managers can act on behalf of other members."""
    return self.is_admin() or self.is_manager()

  @classmethod
  def create(
    cls,
    first_name: str,
    last_name: str,
    email: str,
    session: Session,
    role: ProfileRole = ProfileRole.MEMBER,
    stripe_customer_id: Optional[str] = None,
  ) -> "InvoicingProfile":
    """Create a new invoicing profile."""
    profile = cls(
      first_name=first_name,
      last_name=last_name,
      email=email,
      role=role.value,
      stripe_customer_id=stripe_customer_id,
    )
    session.add(profile)
    session.commit()
    session.refresh(profile)

    logger.info(f"Created invoicing profile {profile.id} ({role.value})")

    return profile

  @classmethod
  def get_by_id(cls, profile_id: str, session: Session) -> Optional["InvoicingProfile"]:
    return session.query(cls).filter(cls.id == profile_id).first()
