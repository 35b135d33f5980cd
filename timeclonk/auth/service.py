"""Reference user/token collaborator ("orgauth").

Owns the ``orgauth_*`` tables. The application plugs into user creation and
deletion through ``AuthCallbacks``; everything else about accounts stays in
here.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from dataclasses import dataclass, field

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from timeclonk.core.clock import now_ms
from timeclonk.core.exceptions import AuthenticationError, MalformedInputError
from timeclonk.core.logging import get_logger
from timeclonk.db.transaction import transaction
from timeclonk.models.entities import OrgauthNewEmail, OrgauthNewPassword, OrgauthToken, OrgauthUser

logger = get_logger(__name__)

_hasher = PasswordHasher()


@dataclass(slots=True)
class RegistrationData:
    uid: str
    pwd: str
    email: str = ""


NewUserCallback = Callable[[Session, RegistrationData, str | None, int | None, int], None]
DeleteUserCallback = Callable[[Session, int], bool]


def _no_new_user_hook(
    session: Session,
    registration: RegistrationData,
    data: str | None,
    creator: int | None,
    user_id: int,
) -> None:
    return None


def _allow_delete(session: Session, user_id: int) -> bool:
    return True


@dataclass(slots=True)
class AuthCallbacks:
    """Hooks the application supplies.

    ``on_new_user`` runs after the account row exists and before the
    registration commits. ``on_delete_user`` may veto a deletion by
    returning False.
    """

    on_new_user: NewUserCallback = field(default=_no_new_user_hook)
    on_delete_user: DeleteUserCallback = field(default=_allow_delete)


class OrgAuthService:
    """Accounts and login tokens."""

    def __init__(self, db: Session, callbacks: AuthCallbacks | None = None) -> None:
        self.db = db
        self.callbacks = callbacks or AuthCallbacks()

    def read_user_by_token(self, token: str, expiration_ms: int | None = None) -> OrgauthUser:
        with transaction(self.db):
            row = self.db.execute(
                select(OrgauthUser, OrgauthToken.tokendate)
                .join(OrgauthToken, OrgauthToken.user_id == OrgauthUser.id)
                .where(OrgauthToken.token == token)
            ).first()
        if row is None:
            raise AuthenticationError("invalid token")
        user, tokendate = row
        if expiration_ms is not None and tokendate + expiration_ms < now_ms():
            raise AuthenticationError("login expired")
        if not user.active:
            raise AuthenticationError("user is not active")
        return user

    def login(self, name: str, password: str) -> str:
        with transaction(self.db):
            user = self.db.scalar(select(OrgauthUser).where(OrgauthUser.name == name))
            if user is None or not user.active or not _verify(user.hashwd, password):
                logger.info("login rejected", name=name)
                raise AuthenticationError("invalid user or password")
            token = str(uuid.uuid4())
            self.db.add(OrgauthToken(user_id=user.id, token=token, tokendate=now_ms()))
        logger.info("login", user_id=user.id)
        return token

    def logout(self, token: str) -> None:
        with transaction(self.db):
            self.db.execute(delete(OrgauthToken).where(OrgauthToken.token == token))

    def new_user(
        self,
        registration: RegistrationData,
        invite_data: str | None = None,
        creator_id: int | None = None,
    ) -> int:
        """Create an account, then let the application attach its own data."""

        if not registration.uid or not registration.pwd:
            raise MalformedInputError("user name and password are required")

        with transaction(self.db):
            taken = self.db.scalar(select(OrgauthUser.id).where(OrgauthUser.name == registration.uid))
            if taken is not None:
                raise MalformedInputError(f"user name '{registration.uid}' is taken")
            user = OrgauthUser(
                name=registration.uid,
                hashwd=_hasher.hash(registration.pwd),
                # argon2 hashes carry their own salt.
                salt="",
                email=registration.email,
                registration_key=None,
                createdate=now_ms(),
                active=True,
                admin=False,
            )
            self.db.add(user)
            self.db.flush()
            self.callbacks.on_new_user(self.db, registration, invite_data, creator_id, user.id)
        logger.info("user created", user_id=user.id, creator_id=creator_id)
        return user.id

    def delete_user(self, user_id: int) -> bool:
        with transaction(self.db):
            if not self.callbacks.on_delete_user(self.db, user_id):
                logger.info("user deletion vetoed", user_id=user_id)
                return False
            for table in (OrgauthToken, OrgauthNewEmail, OrgauthNewPassword):
                self.db.execute(delete(table).where(table.user_id == user_id))
            self.db.execute(delete(OrgauthUser).where(OrgauthUser.id == user_id))
        logger.info("user deleted", user_id=user_id)
        return True

    def purge_expired_tokens(
        self,
        login_expiration_ms: int,
        *,
        email_expiration_ms: int | None = None,
        reset_expiration_ms: int | None = None,
    ) -> int:
        """Delete login tokens (and optionally email/reset tokens) past their window."""

        now = now_ms()
        windows = [(OrgauthToken, login_expiration_ms)]
        if email_expiration_ms is not None:
            windows.append((OrgauthNewEmail, email_expiration_ms))
        if reset_expiration_ms is not None:
            windows.append((OrgauthNewPassword, reset_expiration_ms))

        purged = 0
        with transaction(self.db):
            for table, window in windows:
                result = self.db.execute(delete(table).where(table.tokendate < now - window))
                purged += result.rowcount or 0
        logger.info("expired tokens purged", count=purged)
        return purged


def _verify(hashwd: str, password: str) -> bool:
    try:
        return _hasher.verify(hashwd, password)
    except (VerificationError, InvalidHashError):
        return False
