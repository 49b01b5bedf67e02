"""Settings endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Response, status

from ..exceptions import FabBillingError
from ..logger import get_logger
from ..middleware.auth.dependencies import require_admin
from ..models.api.setting import SettingResponse, SettingUpdateRequest
from ..models.billing import InvoicingProfile, Setting
from ..operations.settings_service import SettingsService
from .dependencies import get_settings_service
from .errors import http_error

logger = get_logger(__name__)

router = APIRouter(prefix="/api/settings", tags=["Settings"])


def setting_response(setting: Setting) -> SettingResponse:
  return SettingResponse(
    name=setting.name,
    value=setting.value,
    locked=setting.locked,
    updated_at=setting.updated_at.isoformat(),
  )


@router.get(
  "/{name}",
  response_model=SettingResponse,
  summary="Get Setting",
  operation_id="getSetting",
)
async def get_setting(
  name: str,
  current_profile: InvoicingProfile = Depends(require_admin),
  service: SettingsService = Depends(get_settings_service),
):
  try:
    return setting_response(service.get(name))

  except HTTPException:
    raise
  except FabBillingError as e:
    raise http_error(e)
  except Exception as e:
    logger.error(f"Failed to read setting {name}: {e}", exc_info=True)
    raise HTTPException(status_code=500, detail="Failed to read setting")


@router.put(
  "/{name}",
  response_model=SettingResponse,
  summary="Update Setting",
  description="""Update a setting.

Answers 423 when the deployment locked the setting and 304 when the value is
unchanged.

**Requirements:**
- Administrator""",
  operation_id="updateSetting",
  responses={304: {"description": "Value unchanged"}, 423: {"description": "Locked"}},
)
async def update_setting(
  name: str,
  request: SettingUpdateRequest,
  current_profile: InvoicingProfile = Depends(require_admin),
  service: SettingsService = Depends(get_settings_service),
):
  try:
    setting, changed = service.update(name, request.value, current_profile.id)
    if not changed:
      return Response(status_code=status.HTTP_304_NOT_MODIFIED)
    return setting_response(setting)

  except HTTPException:
    raise
  except FabBillingError as e:
    raise http_error(e)
  except Exception as e:
    logger.error(f"Failed to update setting {name}: {e}", exc_info=True)
    raise HTTPException(status_code=500, detail="Failed to update setting")
