"""Schema migration runner.

The database records how many steps have been applied as the
``migration_level`` row of ``singlevalue``. At startup every step above that
level runs in ascending order; each step and its level bump commit in one
transaction, so an interrupted upgrade resumes at the first step that did not
commit and never repeats one that did.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from sqlalchemy import Connection, Engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from timeclonk.auth.service import OrgAuthService
from timeclonk.core.exceptions import MigrationError
from timeclonk.core.logging import get_logger
from timeclonk.db.session import create_db_engine
from timeclonk.migrations.versions import STEP_MODULES

logger = get_logger(__name__)

MIGRATION_LEVEL = "migration_level"


@dataclass(frozen=True)
class Migration:
    level: int
    name: str
    upgrade: Callable[[Connection], None]


def _load_migrations() -> tuple[Migration, ...]:
    migrations = tuple(
        Migration(level=module.level, name=module.__name__.rsplit(".", 1)[-1], upgrade=module.upgrade)
        for module in STEP_MODULES
    )
    levels = [migration.level for migration in migrations]
    if levels != list(range(len(migrations))):
        raise RuntimeError(f"migration levels must run 0..n without gaps, got {levels}")
    return migrations


MIGRATIONS = _load_migrations()
LATEST_LEVEL = MIGRATIONS[-1].level


def get_single_value(conn: Connection, name: str) -> str | None:
    return conn.execute(
        text('SELECT "value" FROM "singlevalue" WHERE "name" = :name'),
        {"name": name},
    ).scalar_one_or_none()


def set_single_value(conn: Connection, name: str, value: str) -> None:
    conn.execute(
        text(
            'INSERT INTO "singlevalue" ("name", "value") VALUES (:name, :value) '
            'ON CONFLICT ("name") DO UPDATE SET "value" = excluded."value"'
        ),
        {"name": name, "value": value},
    )


def read_migration_level(conn: Connection) -> int:
    """Stored level; absent or unreadable values count as 0."""

    try:
        stored = get_single_value(conn, MIGRATION_LEVEL)
    except SQLAlchemyError:
        logger.warning("migration level unreadable, assuming 0", exc_info=True)
        return 0
    if stored is None:
        return 0
    try:
        return int(stored)
    except ValueError:
        logger.warning("migration level unparseable, assuming 0", stored=stored)
        return 0


def apply_migration(engine: Engine, migration: Migration) -> None:
    """Run one step and record its level, all or nothing."""

    logger.info("applying migration", level=migration.level, name=migration.name)
    try:
        with engine.begin() as conn:
            migration.upgrade(conn)
            set_single_value(conn, MIGRATION_LEVEL, str(migration.level))
    except SQLAlchemyError as exc:
        logger.error("migration failed", level=migration.level, name=migration.name, error=str(exc))
        raise MigrationError(migration.level, exc) from exc


def migrate(engine: Engine, *, fresh: bool) -> int:
    """Bring the database behind ``engine`` up to the latest level."""

    if fresh:
        apply_migration(engine, MIGRATIONS[0])

    with engine.connect() as conn:
        level = read_migration_level(conn)

    if level > LATEST_LEVEL:
        raise MigrationError(
            level,
            RuntimeError(f"database level {level} is newer than this release ({LATEST_LEVEL})"),
        )

    for migration in MIGRATIONS[level + 1 :]:
        apply_migration(engine, migration)

    logger.info("database up to date", level=LATEST_LEVEL, previous_level=level)
    return LATEST_LEVEL


def initialize(
    db_path: Path | str,
    token_expiration_ms: int | None = None,
    *,
    email_token_expiration_ms: int | None = None,
    reset_token_expiration_ms: int | None = None,
) -> int:
    """Create or upgrade the database file, then purge expired tokens.

    Safe to call on every startup. Raises ``MigrationError`` if any step
    fails; the caller must not serve requests in that case.
    """

    path = Path(db_path)
    fresh = not path.exists()
    if fresh:
        logger.info("creating database", path=str(path))
        path.parent.mkdir(parents=True, exist_ok=True)

    # Rebuilds need foreign key checking off, so migrations get their own engine.
    engine = create_db_engine(path, foreign_keys=False)
    try:
        level = migrate(engine, fresh=fresh)
    finally:
        engine.dispose()

    if token_expiration_ms is not None:
        store_engine = create_db_engine(path)
        try:
            with Session(store_engine) as session:
                OrgAuthService(session).purge_expired_tokens(
                    token_expiration_ms,
                    email_expiration_ms=email_token_expiration_ms,
                    reset_expiration_ms=reset_token_expiration_ms,
                )
        finally:
            store_engine.dispose()

    return level
