# federation_portal/schemas/settings/sms.py
from pydantic import BaseModel, Field
from typing import Optional, Dict, Any


class SmsSettingsRequest(BaseModel):
    federationId: Optional[int] = Field(None, description="Federation the settings belong to")
    provider: Optional[str] = None
    apiKey: Optional[str] = None
    apiUrl: Optional[str] = None
    sender: Optional[str] = None
    enabled: Optional[bool] = None


class SmsSettingsResponse(BaseModel):
    success: bool = True
    settings: Dict[str, Any]
    providers: Dict[str, Any]
