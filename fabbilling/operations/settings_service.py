"""Settings read and update operations."""

from typing import Optional, Tuple

from sqlalchemy.orm import Session

from ..exceptions import EntityNotFoundError, SettingLockedError
from ..logger import get_logger
from ..models.billing import Setting

logger = get_logger(__name__)


class SettingsService:
  """Read and update administrator settings."""

  def __init__(self, session: Session):
    self.session = session

  def get(self, name: str) -> Setting:
    setting = Setting.get_by_name(name, self.session)
    if setting is None:
      raise EntityNotFoundError(name, "Setting")
    return setting

  def update(
    self, name: str, value: Optional[str], operator_id: Optional[str] = None
  ) -> Tuple[Setting, bool]:
    """Store a new value.

    Returns the setting and whether its value changed.

    Raises:
        SettingLockedError: The deployment locked this setting.
    """
    if Setting.is_locked(name):
      logger.warning(
        f"Refused update of locked setting {name}",
        extra={"profile_id": operator_id},
      )
      raise SettingLockedError(name)

    setting = Setting.get_by_name(name, self.session)
    if setting is not None and setting.value == value:
      return setting, False

    if setting is None:
      setting = Setting(name=name, value=value)
      self.session.add(setting)
    else:
      setting.value = value

    self.session.commit()
    self.session.refresh(setting)

    logger.info(
      f"Setting {name} updated",
      extra={"profile_id": operator_id, "action": "setting_updated"},
    )

    return setting, True
