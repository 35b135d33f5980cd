"""Logged-in message endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from timeclonk.api.dispatch import USER_HANDLERS, dispatch
from timeclonk.core.auth import RequestUserContext, get_current_user_context
from timeclonk.core.logging import bind_user_context, clear_request_context
from timeclonk.db.dependencies import get_db_session
from timeclonk.schemas.messages import ServerResponse, UserMessage

router = APIRouter(tags=["messages"])


@router.post("/user", response_model=ServerResponse)
def user_message(
    message: UserMessage,
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> ServerResponse:
    clear_request_context()
    bind_user_context(context.user_id, message.what)
    return dispatch(USER_HANDLERS, message.what, db, context, message.data)
