# federation_portal/schemas/auth/auth.py
from pydantic import BaseModel, Field, field_validator
from typing import Optional, Dict, Any

DELIVERY_METHODS = ("auto", "telegram", "sms")


class SendPinRequest(BaseModel):
    phone: Optional[str] = Field(None, description="Phone number, international or local format")
    method: Optional[str] = Field("auto", description="Delivery channel: auto, telegram or sms")

    @field_validator("method")
    @classmethod
    def validate_method(cls, v):
        if v is None:
            return "auto"
        v = v.strip().lower()
        if v not in DELIVERY_METHODS:
            raise ValueError('Method must be one of "auto", "telegram", "sms"')
        return v


class SendPinResponse(BaseModel):
    success: bool = True
    message: str
    method: str
    expiresAt: str


class VerifyPinRequest(BaseModel):
    phone: Optional[str] = Field(None, description="Phone number the PIN was sent to")
    code: Optional[str] = Field(None, description="PIN received over Telegram or SMS")


class FederationSummary(BaseModel):
    id: int
    code: str
    name: str
    domain: Optional[str] = None


class UserSummary(BaseModel):
    id: int
    name: str
    phone: Optional[str] = None
    type: str
    federation: Optional[FederationSummary] = None


class VerifyPinResponse(BaseModel):
    success: bool = True
    user: UserSummary
    isNew: bool
    redirectUrl: str


class CurrentUserResponse(BaseModel):
    success: bool = True
    user: Dict[str, Any]
