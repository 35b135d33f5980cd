"""Hooks the auth collaborator calls on user creation and deletion."""

from __future__ import annotations

from pydantic import ValidationError
from sqlalchemy.orm import Session

from timeclonk.auth.service import AuthCallbacks, RegistrationData
from timeclonk.core.auth import Role
from timeclonk.core.exceptions import MalformedInputError
from timeclonk.core.logging import get_logger
from timeclonk.repositories.store import Store
from timeclonk.schemas.project import UserInviteData

logger = get_logger(__name__)


def on_new_user(
    session: Session,
    registration: RegistrationData,
    data: str | None,
    creator: int | None,
    user_id: int,
) -> None:
    """Grant the project memberships named in an invite.

    Only projects where the inviting user is Admin are granted; the rest are
    dropped.
    """

    if data is None or creator is None:
        return
    try:
        invite = UserInviteData.model_validate_json(data)
    except ValidationError as exc:
        raise MalformedInputError(f"invalid invite data: {exc}") from exc

    store = Store(session)
    for project in invite.projects:
        if store.member_role(creator, project.id) is Role.ADMIN:
            store.save_member(project.id, user_id, project.role)
            logger.info("invite granted", user_id=user_id, project_id=project.id, role=project.role.value)
        else:
            logger.info("invite grant dropped", user_id=user_id, project_id=project.id, creator=creator)


def on_delete_user(session: Session, user_id: int) -> bool:
    return True


def timeclonk_callbacks() -> AuthCallbacks:
    return AuthCallbacks(on_new_user=on_new_user, on_delete_user=on_delete_user)
