import logging
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, Response

from ..application.ports.user_repo import UserRepository
from ..application.results import Err
from ..application.services.activity_service import ActivityRecorder
from ..application.services.auth_service import AuthService
from ..application.services.session_service import IssuedSession, SessionClaims
from ..config import settings
from ..dependencies import (
    get_activity_recorder,
    get_auth_service,
    get_current_user,
    get_optional_user,
    get_user_repository,
    verify_rate_limit,
)
from ..exceptions import APIException
from ..schemas import (
    CurrentUserResponse,
    FederationSummary,
    MessageResponse,
    SendPinRequest,
    SendPinResponse,
    UserSummary,
    VerifyPinRequest,
    VerifyPinResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def request_locale(request: Request) -> str:
    return (
        request.headers.get("x-locale")
        or getattr(request.state, "locale", None)
        or settings.DEFAULT_LOCALE
    )


def set_session_cookie(response: Response, session: IssuedSession) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=session.token,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        max_age=session.max_age,
        path="/",
    )


@router.post("/send-pin", response_model=SendPinResponse)
async def send_pin(payload: SendPinRequest, request: Request, auth_service: AuthService = Depends(get_auth_service)):
    """
    Issue a login PIN and deliver it over Telegram or SMS
    """
    if not payload.phone:
        raise APIException(status_code=400, detail="Phone number is required")

    try:
        result = await auth_service.send_pin(payload.phone, payload.method, request_locale(request))
    except Exception as e:
        logger.error(f"Send PIN error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

    if isinstance(result, Err):
        raise APIException.from_error(result)

    dispatch = result.value
    return SendPinResponse(
        success=True,
        message=dispatch.message,
        method=dispatch.method,
        expiresAt=dispatch.expires_at.isoformat().replace("+00:00", "Z"),
    )


@router.post("/verify-pin", response_model=VerifyPinResponse, dependencies=[Depends(verify_rate_limit)])
def verify_pin(
    payload: VerifyPinRequest,
    response: Response,
    background_tasks: BackgroundTasks,
    auth_service: AuthService = Depends(get_auth_service),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """
    Verify a login PIN, set the session cookie and tell the client where to land
    """
    if not payload.phone or not payload.code:
        raise APIException(status_code=400, detail="Phone and code are required")

    try:
        result = auth_service.verify_pin(payload.phone, payload.code)
    except Exception as e:
        logger.error(f"Verify PIN error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

    if isinstance(result, Err):
        raise APIException.from_error(result)

    login = result.value
    user = login.user
    set_session_cookie(response, login.session)

    background_tasks.add_task(
        recorder.record,
        user.id,
        "auth",
        "User logged in via PIN",
        {"method": "pin", "isNew": login.is_new, "userType": user.type},
    )

    return VerifyPinResponse(
        success=True,
        user=UserSummary(
            id=user.id,
            name=user.name,
            phone=user.phone,
            type=user.type,
            federation=FederationSummary(**asdict(user.federation)) if user.federation else None,
        ),
        isNew=login.is_new,
        redirectUrl=login.session.redirect_url,
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    background_tasks: BackgroundTasks,
    claims: Optional[SessionClaims] = Depends(get_optional_user),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """
    Clear the session cookie; a valid session is recorded in the activity log
    """
    if claims is not None:
        background_tasks.add_task(recorder.record, claims.user_id, "auth", "User logged out")

    response.delete_cookie(settings.SESSION_COOKIE_NAME, path="/")
    return MessageResponse(success=True, message="Logged out successfully")


@router.get("/me", response_model=CurrentUserResponse)
def me(claims: SessionClaims = Depends(get_current_user), user_repo: UserRepository = Depends(get_user_repository)):
    user = user_repo.get_by_id(claims.user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    return CurrentUserResponse(success=True, user={
        "id": user.id,
        "name": user.name,
        "phone": user.phone,
        "email": user.email,
        "type": user.type,
        "entityId": user.entity_id,
        "federationId": user.federation_id,
        "lastLoginAt": user.last_login_at.isoformat() if user.last_login_at else None,
        "federation": asdict(user.federation) if user.federation else None,
    })
