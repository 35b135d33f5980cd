"""Message endpoint for callers without a login."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from timeclonk.api.dispatch import PUBLIC_HANDLERS, dispatch
from timeclonk.core.logging import clear_request_context
from timeclonk.db.dependencies import get_db_session
from timeclonk.schemas.messages import PublicMessage, ServerResponse

router = APIRouter(tags=["messages"])


@router.post("/public", response_model=ServerResponse)
def public_message(message: PublicMessage, db: Session = Depends(get_db_session)) -> ServerResponse:
    clear_request_context()
    return dispatch(PUBLIC_HANDLERS, message.what, db, message.data)
