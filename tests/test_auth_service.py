from __future__ import annotations

from collections.abc import Callable

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from timeclonk.auth.service import OrgAuthService, RegistrationData
from timeclonk.core.exceptions import AuthenticationError, MalformedInputError
from timeclonk.models.entities import OrgauthToken, OrgauthUser


def _stale_token(db_session: Session, user_id: int, token: str) -> None:
    db_session.add(OrgauthToken(user_id=user_id, token=token, tokendate=0))
    db_session.commit()


def test_login_round_trip(db_session: Session, make_user: Callable[..., int]) -> None:
    alice = make_user("alice", password="hunter2")
    service = OrgAuthService(db_session)

    token = service.login("alice", "hunter2")

    assert service.read_user_by_token(token, 60_000).id == alice
    service.logout(token)
    with pytest.raises(AuthenticationError):
        service.read_user_by_token(token)


def test_password_is_hashed(db_session: Session, make_user: Callable[..., int]) -> None:
    alice = make_user("alice", password="hunter2")

    user = db_session.get(OrgauthUser, alice)
    assert user is not None
    assert user.hashwd.startswith("$argon2")
    assert "hunter2" not in user.hashwd


@pytest.mark.parametrize(("name", "password"), [("alice", "wrong"), ("nobody", "hunter2")])
def test_bad_credentials_are_rejected(
    db_session: Session,
    make_user: Callable[..., int],
    name: str,
    password: str,
) -> None:
    make_user("alice", password="hunter2")

    with pytest.raises(AuthenticationError):
        OrgAuthService(db_session).login(name, password)


def test_duplicate_user_name_is_rejected(db_session: Session, make_user: Callable[..., int]) -> None:
    make_user("alice")

    with pytest.raises(MalformedInputError):
        OrgAuthService(db_session).new_user(RegistrationData(uid="alice", pwd="other"))


def test_expired_token_is_rejected(db_session: Session, make_user: Callable[..., int]) -> None:
    alice = make_user("alice")
    _stale_token(db_session, alice, "stale")
    service = OrgAuthService(db_session)

    with pytest.raises(AuthenticationError):
        service.read_user_by_token("stale", 60_000)
    assert service.read_user_by_token("stale").id == alice


def test_purge_drops_only_expired_tokens(db_session: Session, make_user: Callable[..., int]) -> None:
    alice = make_user("alice")
    _stale_token(db_session, alice, "stale")
    service = OrgAuthService(db_session)
    fresh = service.login("alice", "secret")

    assert service.purge_expired_tokens(60_000, email_expiration_ms=60_000, reset_expiration_ms=60_000) == 1

    remaining = db_session.scalars(select(OrgauthToken.token)).all()
    db_session.commit()
    assert remaining == [fresh]
    assert db_session.scalar(select(func.count()).select_from(OrgauthUser)) == 1
    db_session.commit()
