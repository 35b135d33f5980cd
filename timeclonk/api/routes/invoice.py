"""Invoice PDF endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Cookie, Depends, Header, HTTPException, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from timeclonk.core.auth import RequestUserContext, get_current_user_context
from timeclonk.core.config import get_settings
from timeclonk.core.exceptions import AuthenticationError, InvoiceRenderError
from timeclonk.db.dependencies import get_db_session
from timeclonk.schemas.invoice import PrintInvoice
from timeclonk.services.invoice_service import InvoiceRenderer

router = APIRouter(tags=["invoice"])


def require_login(
    authorization: str | None = Header(default=None),
    token: str | None = Cookie(default=None),
    db: Session = Depends(get_db_session),
) -> RequestUserContext:
    try:
        return get_current_user_context(authorization, token, db)
    except AuthenticationError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc


@router.post("/invoice", response_class=FileResponse)
def invoice(payload: PrintInvoice, context: RequestUserContext = Depends(require_login)) -> FileResponse:
    try:
        pdf_path = InvoiceRenderer(get_settings()).render(payload)
    except InvoiceRenderError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
    return FileResponse(pdf_path, media_type="application/pdf", filename=pdf_path.name)
