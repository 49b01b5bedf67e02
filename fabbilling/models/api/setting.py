"""Setting API models."""

from pydantic import BaseModel, Field


class SettingResponse(BaseModel):
  name: str = Field(..., description="Setting name")
  value: str | None = Field(None, description="Setting value")
  locked: bool = Field(..., description="Whether the deployment locked this setting")
  updated_at: str = Field(..., description="Last update (ISO format)")


class SettingUpdateRequest(BaseModel):
  value: str | None = Field(None, description="New value")
