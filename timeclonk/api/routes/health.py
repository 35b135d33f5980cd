"""Liveness and schema level."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from timeclonk.db.dependencies import get_db_session
from timeclonk.db.transaction import transaction
from timeclonk.migrations import LATEST_LEVEL
from timeclonk.migrations.runner import read_migration_level

router = APIRouter()


@router.get("/health")
def health(db: Session = Depends(get_db_session)) -> dict[str, object]:
    with transaction(db):
        level = read_migration_level(db.connection())
    return {"status": "ok" if level == LATEST_LEVEL else "migrating", "migration_level": level}
