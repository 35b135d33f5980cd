"""Authentication context extraction and project role permissions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from fastapi import Cookie, Depends, Header
from sqlalchemy.orm import Session

from timeclonk.auth.service import OrgAuthService
from timeclonk.core.config import get_settings
from timeclonk.core.exceptions import AuthenticationError
from timeclonk.db.dependencies import get_db_session


class Role(str, Enum):
    """Per-project member role, stored by name in ``projectmember.role``."""

    ADMIN = "Admin"
    MEMBER = "Member"
    OBSERVER = "Observer"


class Operation(str, Enum):
    CREATE_PROJECT = "create_project"
    EDIT_PROJECT = "edit_project"
    VIEW_PROJECT = "view_project"
    SAVE_PROJECT_TIME = "save_project_time"
    DELETE_PROJECT_ENTRIES = "delete_project_entries"
    SAVE_PROJECT_INVOICE = "save_project_invoice"


ROLE_PERMISSIONS: dict[Role, frozenset[Operation]] = {
    Role.ADMIN: frozenset(Operation),
    Role.MEMBER: frozenset(
        {
            Operation.CREATE_PROJECT,
            Operation.VIEW_PROJECT,
            Operation.SAVE_PROJECT_TIME,
            Operation.DELETE_PROJECT_ENTRIES,
            Operation.SAVE_PROJECT_INVOICE,
        }
    ),
    Role.OBSERVER: frozenset({Operation.CREATE_PROJECT, Operation.VIEW_PROJECT}),
}

# Operations open to users with no role on the project.
NON_MEMBER_PERMISSIONS: frozenset[Operation] = frozenset({Operation.CREATE_PROJECT})


def parse_role(value: str) -> Role | None:
    """Role for a stored name, or None when the name is not a known role."""

    try:
        return Role(value)
    except ValueError:
        return None


def is_allowed(role: Role | None, operation: Operation) -> bool:
    """Whether ``role`` may perform ``operation``; ``None`` means not a member."""

    if role is None:
        return operation in NON_MEMBER_PERMISSIONS
    return operation in ROLE_PERMISSIONS[role]


@dataclass(frozen=True)
class RequestUserContext:
    """Authenticated request actor resolved from the login token."""

    user_id: int
    name: str
    token: str


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() != "bearer" or not credentials.strip():
        return None
    return credentials.strip()


def get_current_user_context(
    authorization: str | None = Header(default=None),
    token: str | None = Cookie(default=None),
    db: Session = Depends(get_db_session),
) -> RequestUserContext:
    """Resolve the logged-in user from a bearer header or the ``token`` cookie.

    Raises ``AuthenticationError``; the app answers it with a
    ``not logged in`` message rather than an HTTP error.
    """

    resolved = _bearer_token(authorization) or token
    if not resolved:
        raise AuthenticationError("no login token")

    user = OrgAuthService(db).read_user_by_token(resolved, get_settings().login_token_expiration_ms)
    return RequestUserContext(user_id=user.id, name=user.name, token=resolved)


def get_optional_user_context(
    authorization: str | None = Header(default=None),
    token: str | None = Cookie(default=None),
    db: Session = Depends(get_db_session),
) -> RequestUserContext | None:
    """Like ``get_current_user_context`` but None when no token is sent."""

    if not (_bearer_token(authorization) or token):
        return None
    return get_current_user_context(authorization, token, db)
