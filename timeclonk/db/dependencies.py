"""Database dependencies for FastAPI endpoints."""

from collections.abc import Generator

from sqlalchemy.orm import Session

from timeclonk.core.config import get_settings
from timeclonk.db.session import get_session_factory


def get_db_session() -> Generator[Session, None, None]:
    """Yield a session bound to the configured database for one request."""

    session = get_session_factory(str(get_settings().db_path))()
    try:
        yield session
    finally:
        session.close()
