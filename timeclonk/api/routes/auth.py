"""Login, logout and registration endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from timeclonk.api.dispatch import respond
from timeclonk.auth.service import OrgAuthService, RegistrationData
from timeclonk.core.auth import RequestUserContext, get_current_user_context, get_optional_user_context
from timeclonk.core.config import get_settings
from timeclonk.core.exceptions import AuthenticationError, TimeclonkError
from timeclonk.core.logging import get_logger
from timeclonk.db.dependencies import get_db_session
from timeclonk.schemas.messages import ServerResponse
from timeclonk.schemas.project import UserInviteData
from timeclonk.services.user_callbacks import timeclonk_callbacks

router = APIRouter(prefix="/auth", tags=["auth"])

logger = get_logger(__name__)

TOKEN_COOKIE = "token"


class LoginPayload(BaseModel):
    uid: str = Field(min_length=1)
    pwd: str = Field(min_length=1)


class RegisterPayload(BaseModel):
    uid: str = Field(min_length=1)
    pwd: str = Field(min_length=1)
    email: str = ""
    invite: UserInviteData | None = None


@router.post("/login", response_model=ServerResponse)
def login(payload: LoginPayload, response: Response, db: Session = Depends(get_db_session)) -> ServerResponse:
    service = OrgAuthService(db)
    try:
        token = service.login(payload.uid, payload.pwd)
    except AuthenticationError:
        return respond("invalid user or pwd")
    user = service.read_user_by_token(token)
    response.set_cookie(
        TOKEN_COOKIE,
        token,
        httponly=True,
        samesite="lax",
        max_age=get_settings().login_token_expiration_ms // 1000,
    )
    return respond("logged in", {"userid": user.id, "name": user.name, "token": token})


@router.post("/logout", response_model=ServerResponse)
def logout(
    response: Response,
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> ServerResponse:
    OrgAuthService(db).logout(context.token)
    response.delete_cookie(TOKEN_COOKIE)
    return respond("logged out")


@router.post("/register", response_model=ServerResponse)
def register(
    payload: RegisterPayload,
    context: RequestUserContext | None = Depends(get_optional_user_context),
    db: Session = Depends(get_db_session),
) -> ServerResponse:
    """Create an account; a logged-in caller may attach an invite."""

    invite = payload.invite.model_dump_json() if payload.invite is not None else None
    creator_id = context.user_id if context is not None else None
    service = OrgAuthService(db, timeclonk_callbacks())
    try:
        user_id = service.new_user(
            RegistrationData(uid=payload.uid, pwd=payload.pwd, email=payload.email),
            invite,
            creator_id,
        )
    except TimeclonkError as exc:
        logger.warning("registration failed", name=payload.uid, error=str(exc))
        return respond("server error", str(exc))
    return respond("registered", {"id": user_id, "name": payload.uid})
