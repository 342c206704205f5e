"""News API request schemas"""

from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class InteractionRequest(BaseModel):
    """Body for like and view endpoints. A missing device id is rejected with 400 by the route."""
    model_config = ConfigDict(populate_by_name=True)

    device_id: Optional[str] = Field(
        default=None,
        max_length=255,
        validation_alias=AliasChoices("device_id", "deviceId"),
        description="Stable identifier of the client device"
    )


class DeviceRegistrationRequest(BaseModel):
    """Push registration. Re-registering a token overwrites its subscription."""
    token: Optional[str] = Field(default=None, max_length=512, description="FCM registration token")
    categories: Optional[List[str]] = Field(default=None, description="Subscribed categories, empty or null means all")
    platform: Optional[str] = Field(default=None, max_length=50, description="Client platform, web when omitted")
    language: Optional[str] = Field(default=None, max_length=10)
