from __future__ import annotations

from collections.abc import Callable, Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from timeclonk.auth.service import OrgAuthService, RegistrationData
from timeclonk.core.config import Settings, get_settings
from timeclonk.db.dependencies import get_db_session
from timeclonk.db.session import create_db_engine, get_engine, get_session_factory
from timeclonk.main import create_app
from timeclonk.migrations import initialize
from timeclonk.services.user_callbacks import timeclonk_callbacks


@pytest.fixture()
def settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Settings, None, None]:
    monkeypatch.setenv("DB_PATH", str(tmp_path / "timeclonk.db"))
    monkeypatch.setenv("INVOICE_DIR", str(tmp_path / "invoices"))
    monkeypatch.setenv("DB_BUSY_TIMEOUT_SECONDS", "1")
    get_settings.cache_clear()
    yield get_settings()
    get_session_factory.cache_clear()
    get_engine.cache_clear()
    get_settings.cache_clear()


@pytest.fixture()
def db_path(settings: Settings) -> Path:
    initialize(settings.db_path)
    return settings.db_path


@pytest.fixture()
def db_session(db_path: Path) -> Generator[Session, None, None]:
    engine = create_db_engine(db_path)
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture()
def client(db_session: Session) -> Generator[TestClient, None, None]:
    app = create_app()

    def override_db() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[get_db_session] = override_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., int]:
    """Register a user through the auth collaborator; returns the user id."""

    def factory(name: str, password: str = "secret", invite: str | None = None, creator: int | None = None) -> int:
        service = OrgAuthService(db_session, timeclonk_callbacks())
        return service.new_user(RegistrationData(uid=name, pwd=password, email=f"{name}@test.local"), invite, creator)

    return factory


@pytest.fixture()
def login_headers(db_session: Session) -> Callable[..., dict[str, str]]:
    def factory(name: str, password: str = "secret") -> dict[str, str]:
        token = OrgAuthService(db_session).login(name, password)
        return {"Authorization": f"Bearer {token}"}

    return factory
