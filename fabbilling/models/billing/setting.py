"""Setting model - administrator-editable billing settings."""

from datetime import UTC, datetime
from typing import Optional

from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import Session

from ...config import env
from ...database import Base


class Setting(Base):
  """A named setting stored as a string.

  Settings listed in LOCKED_SETTINGS are fixed by the deployment and cannot
  be changed through the API.
  """

  __tablename__ = "settings"

  name = Column(String, primary_key=True)
  value = Column(String, nullable=True)

  updated_at = Column(
    DateTime,
    default=lambda: datetime.now(UTC),
    onupdate=lambda: datetime.now(UTC),
    nullable=False,
  )

  def __repr__(self) -> str:
    return f"<Setting {self.name}={self.value!r}>"

  @property
  def locked(self) -> bool:
    return self.is_locked(self.name)

  @staticmethod
  def is_locked(name: str) -> bool:
    return name in env.LOCKED_SETTINGS

  @classmethod
  def get_by_name(cls, name: str, session: Session) -> Optional["Setting"]:
    return session.query(cls).filter(cls.name == name).first()

  @classmethod
  def get_value(
    cls, name: str, session: Session, default: Optional[str] = None
  ) -> Optional[str]:
    """Return the stored value, or `default` when unset or empty."""
    setting = cls.get_by_name(name, session)
    if setting is None or setting.value in (None, ""):
      return default
    return setting.value
