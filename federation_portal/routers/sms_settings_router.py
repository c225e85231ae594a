import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..application.ports.sms_settings_repo import SmsSettingsUpdate
from ..application.services.session_service import SessionClaims
from ..application.services.sms_settings_service import SMS_PROVIDERS, SmsSettingsService
from ..dependencies import get_sms_settings_service, require_admin
from ..schemas import MessageResponse, SmsSettingsRequest, SmsSettingsResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/settings/sms", tags=["Settings"])


def check_federation_access(admin: SessionClaims, federation_id: Optional[int], service: SmsSettingsService) -> int:
    """Superadmins manage every federation, federation admins only their own."""
    if federation_id is None:
        raise HTTPException(status_code=400, detail="Federation ID is required")
    if admin.federation_id is not None and admin.federation_id != federation_id:
        raise HTTPException(status_code=403, detail="Access to this federation is not allowed")
    if not service.repo.federation_exists(federation_id):
        raise HTTPException(status_code=404, detail="Federation not found")
    return federation_id


@router.get("", response_model=SmsSettingsResponse)
def get_sms_settings(
    federationId: Optional[int] = Query(None),
    admin: SessionClaims = Depends(require_admin),
    service: SmsSettingsService = Depends(get_sms_settings_service),
):
    federation_id = check_federation_access(admin, federationId, service)
    return SmsSettingsResponse(success=True, settings=service.get_masked(federation_id), providers=SMS_PROVIDERS)


@router.post("", response_model=MessageResponse)
def save_sms_settings(
    payload: SmsSettingsRequest,
    admin: SessionClaims = Depends(require_admin),
    service: SmsSettingsService = Depends(get_sms_settings_service),
):
    federation_id = check_federation_access(admin, payload.federationId, service)
    try:
        service.save(federation_id, SmsSettingsUpdate(
            provider=payload.provider,
            api_key=payload.apiKey,
            api_url=payload.apiUrl,
            sender=payload.sender,
            enabled=payload.enabled,
        ))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return MessageResponse(success=True, message="SMS settings saved successfully")


@router.delete("", response_model=MessageResponse)
def clear_sms_settings(
    federationId: Optional[int] = Query(None),
    admin: SessionClaims = Depends(require_admin),
    service: SmsSettingsService = Depends(get_sms_settings_service),
):
    federation_id = check_federation_access(admin, federationId, service)
    service.clear(federation_id)
    logger.info(f"SMS API key cleared for federation {federation_id} by user {admin.user_id}")
    return MessageResponse(success=True, message="SMS API key cleared")
