"""``what``-code dispatch for the JSON message endpoints.

Every message answers with a ``ServerResponse``; failures become response
codes rather than HTTP errors:

* ``AuthorizationError`` -> ``<tag>_denied`` with null content,
* anything else -> ``server error`` with the message as content.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, TypeAdapter, ValidationError
from sqlalchemy.orm import Session

from timeclonk.core.auth import RequestUserContext
from timeclonk.core.exceptions import AuthorizationError, MalformedInputError, TimeclonkError
from timeclonk.core.logging import get_logger
from timeclonk.schemas.ledger import SaveProjectTime
from timeclonk.schemas.messages import ServerResponse
from timeclonk.schemas.project import SaveProjectEdit, SaveProjectInvoice
from timeclonk.services.ledger_service import LedgerService
from timeclonk.services.project_service import ProjectService

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

UserHandler = Callable[[Session, RequestUserContext, Any], ServerResponse]
PublicHandler = Callable[[Session, Any], ServerResponse]

_project_id = TypeAdapter(int)


def respond(what: str, content: Any = None) -> ServerResponse:
    return ServerResponse(what=what, content=jsonable_encoder(content))


def parse_data(model: type[ModelT], data: Any) -> ModelT:
    if data is None:
        raise MalformedInputError("malformed json data")
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise MalformedInputError(f"malformed json data: {exc}") from exc


def parse_project_id(data: Any) -> int:
    if data is None:
        raise MalformedInputError("malformed json data")
    try:
        return _project_id.validate_python(data)
    except ValidationError as exc:
        raise MalformedInputError(f"expected a project id: {exc}") from exc


# ---------- Logged-in messages ----------
def _get_project_list(db: Session, user: RequestUserContext, data: Any) -> ServerResponse:
    return respond("projectlist", ProjectService(db).project_list(user.user_id))


def _save_project_edit(db: Session, user: RequestUserContext, data: Any) -> ServerResponse:
    edit = parse_data(SaveProjectEdit, data)
    return respond("savedprojectedit", ProjectService(db).save_project_edit(user.user_id, edit))


def _get_project_edit(db: Session, user: RequestUserContext, data: Any) -> ServerResponse:
    project_id = parse_project_id(data)
    return respond("projectedit", ProjectService(db).read_project_edit(user.user_id, project_id))


def _get_project_time(db: Session, user: RequestUserContext, data: Any) -> ServerResponse:
    project_id = parse_project_id(data)
    return respond("projecttime", ProjectService(db).read_project_time(user.user_id, project_id))


def _save_project_time(db: Session, user: RequestUserContext, data: Any) -> ServerResponse:
    batch = parse_data(SaveProjectTime, data)
    return respond("projecttime", LedgerService(db).save_project_time(user.user_id, batch))


def _get_all_members(db: Session, user: RequestUserContext, data: Any) -> ServerResponse:
    return respond("allmembers", ProjectService(db).all_members())


def _save_project_invoice(db: Session, user: RequestUserContext, data: Any) -> ServerResponse:
    invoice = parse_data(SaveProjectInvoice, data)
    return respond("savedprojectinvoice", ProjectService(db).save_project_invoice(user.user_id, invoice))


def _get_user_time(db: Session, user: RequestUserContext, data: Any) -> ServerResponse:
    return respond("usertime", ProjectService(db).user_time(user.user_id))


USER_HANDLERS: dict[str, UserHandler] = {
    "GetProjectList": _get_project_list,
    "SaveProjectEdit": _save_project_edit,
    "GetProjectEdit": _get_project_edit,
    "GetProjectTime": _get_project_time,
    "SaveProjectTime": _save_project_time,
    "GetAllMembers": _get_all_members,
    "SaveProjectInvoice": _save_project_invoice,
    "GetUserTime": _get_user_time,
}


# ---------- Public messages ----------
def _public_project_time(db: Session, data: Any) -> ServerResponse:
    project_id = parse_project_id(data)
    return respond("projecttime", ProjectService(db).read_project_time(None, project_id))


PUBLIC_HANDLERS: dict[str, PublicHandler] = {
    "GetProjectTime": _public_project_time,
}


def dispatch(handlers: dict[str, Callable[..., ServerResponse]], what: str, *args: Any) -> ServerResponse:
    """Run the handler registered for ``what`` and map its failures."""

    logger.info("message received", what=what)
    try:
        handler = handlers.get(what)
        if handler is None:
            raise MalformedInputError(f"invalid 'what' code:'{what}'")
        return handler(*args)
    except AuthorizationError as exc:
        return respond(f"{exc.tag}_denied")
    except TimeclonkError as exc:
        logger.warning("message failed", what=what, error=str(exc), error_type=type(exc).__name__)
        return respond("server error", str(exc))
    except Exception as exc:
        logger.exception("message crashed", what=what)
        return respond("server error", str(exc))
