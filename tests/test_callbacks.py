from __future__ import annotations

from collections.abc import Callable

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session

from timeclonk.auth.service import OrgAuthService
from timeclonk.core.auth import Role
from timeclonk.core.exceptions import AuthenticationError, MalformedInputError
from timeclonk.models.entities import OrgauthUser
from timeclonk.repositories.store import Store
from timeclonk.schemas.project import SaveProject, UserInviteData, UserInviteProject
from timeclonk.services.user_callbacks import timeclonk_callbacks


def _invite(*grants: tuple[int, Role]) -> str:
    return UserInviteData(projects=[UserInviteProject(id=pid, role=role) for pid, role in grants]).model_dump_json()


def test_invite_grants_only_where_creator_is_admin(db_session: Session, make_user: Callable[..., int]) -> None:
    alice = make_user("alice")
    bob = make_user("bob")
    store = Store(db_session)
    owned = store.save_project(alice, SaveProject(name="Owned")).id
    shared = store.save_project(bob, SaveProject(name="Shared")).id
    store.save_member(shared, alice, Role.MEMBER)

    carol = make_user("carol", invite=_invite((owned, Role.OBSERVER), (shared, Role.ADMIN)), creator=alice)

    assert store.member_role(carol, owned) is Role.OBSERVER
    assert store.member_role(carol, shared) is None


def test_invite_without_creator_grants_nothing(db_session: Session, make_user: Callable[..., int]) -> None:
    alice = make_user("alice")
    store = Store(db_session)
    project_id = store.save_project(alice, SaveProject(name="Owned")).id

    carol = make_user("carol", invite=_invite((project_id, Role.ADMIN)))

    assert store.project_list(carol) == []


def test_bad_invite_aborts_registration(db_session: Session, make_user: Callable[..., int]) -> None:
    alice = make_user("alice")

    with pytest.raises(MalformedInputError):
        make_user("carol", invite="{not json", creator=alice)

    assert db_session.scalar(select(OrgauthUser.id).where(OrgauthUser.name == "carol")) is None
    db_session.commit()


def test_user_deletion_is_allowed(db_session: Session, make_user: Callable[..., int]) -> None:
    carol = make_user("carol")
    service = OrgAuthService(db_session, timeclonk_callbacks())
    token = service.login("carol", "secret")

    assert service.delete_user(carol) is True
    assert db_session.get(OrgauthUser, carol) is None
    with pytest.raises(AuthenticationError):
        service.read_user_by_token(token)
