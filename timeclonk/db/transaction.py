"""Transaction scope shared by the store and the auth collaborator."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session

from timeclonk.core.exceptions import StorageError, StoreTimeoutError

_ACTIVE = "timeclonk.transaction"


def _is_lock_timeout(exc: OperationalError) -> bool:
    return "database is locked" in str(exc.orig)


def storage_error(exc: SQLAlchemyError) -> StorageError:
    """Translate a SQLAlchemy failure into the store's error types."""

    if isinstance(exc, PoolTimeoutError):
        return StoreTimeoutError(f"no database connection available: {exc}")
    if isinstance(exc, OperationalError) and _is_lock_timeout(exc):
        return StoreTimeoutError(f"database busy: {exc.orig}")
    orig = getattr(exc, "orig", None)
    return StorageError(str(orig) if orig is not None else str(exc))


@contextmanager
def transaction(session: Session) -> Iterator[Session]:
    """Run the block as one unit of work.

    Commits on success, reads included, so no SQLite lock outlives the
    block. Rolls back on any error; SQLAlchemy errors surface as
    ``StorageError``. A block opened inside another one joins it and
    leaves commit and rollback to the outermost block.
    """

    if session.info.get(_ACTIVE):
        yield session
        return

    session.info[_ACTIVE] = True
    try:
        yield session
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        raise storage_error(exc) from exc
    except Exception:
        session.rollback()
        raise
    finally:
        session.info.pop(_ACTIVE, None)
