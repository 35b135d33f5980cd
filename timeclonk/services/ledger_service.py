"""Batched saves and deletes against one project's time ledger."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from sqlalchemy.orm import Session

from timeclonk.core.auth import Operation, is_allowed
from timeclonk.core.exceptions import (
    AuthorizationError,
    MalformedInputError,
    NotFoundError,
    TimeclonkError,
)
from timeclonk.core.logging import get_logger
from timeclonk.repositories.store import Store
from timeclonk.schemas.ledger import ProjectTime, SaveProjectTime

logger = get_logger(__name__)

DENIAL_TAG = "projecttime"


class LedgerService:
    """Applies a ``SaveProjectTime`` batch.

    Items are independent: each runs in its own transaction and a failing
    item is logged and skipped while the rest still apply.
    """

    def __init__(self, db: Session) -> None:
        self.db = db
        self.store = Store(db)

    def save_project_time(self, user_id: int, batch: SaveProjectTime) -> ProjectTime:
        project_id = batch.project
        role = self.store.member_role(user_id, project_id)
        if not is_allowed(role, Operation.SAVE_PROJECT_TIME):
            logger.info(
                "ledger save denied",
                user_id=user_id,
                project_id=project_id,
                role=role.value if role else None,
            )
            raise AuthorizationError(DENIAL_TAG)
        may_delete = is_allowed(role, Operation.DELETE_PROJECT_ENTRIES)

        # Saves before deletes, time before pay before allocations.
        steps = (
            ("timeentry", batch.savetimeentries, batch.deletetimeentries,
             self.store.save_time_entry, self.store.delete_time_entry),
            ("payentry", batch.savepayentries, batch.deletepayentries,
             self.store.save_pay_entry, self.store.delete_pay_entry),
            ("allocation", batch.saveallocations, batch.deleteallocations,
             self.store.save_allocation, self.store.delete_allocation),
        )

        applied = 0
        skipped = 0
        for kind, saves, deletes, save, remove in steps:
            for item in saves:
                if self._attempt(kind, item.id, project_id, lambda: self._save_item(user_id, project_id, item, save)):
                    applied += 1
                else:
                    skipped += 1
            for entry_id in deletes:
                if self._attempt(
                    kind,
                    entry_id,
                    project_id,
                    lambda: self._delete_item(kind, project_id, entry_id, remove, may_delete),
                ):
                    applied += 1
                else:
                    skipped += 1

        logger.info("ledger batch applied", user_id=user_id, project_id=project_id, applied=applied, skipped=skipped)
        return self.store.read_project_time(project_id)

    @staticmethod
    def _attempt(kind: str, key: int | None, project_id: int, action: Callable[[], Any]) -> bool:
        try:
            action()
        except TimeclonkError as exc:
            logger.warning("ledger item skipped", kind=kind, item=key, project_id=project_id, error=str(exc))
            return False
        return True

    @staticmethod
    def _save_item(user_id: int, project_id: int, item: Any, save: Callable[[int, Any], int]) -> int:
        if item.project != project_id:
            raise MalformedInputError(f"item belongs to project {item.project}, batch is for {project_id}")
        return save(user_id, item)

    @staticmethod
    def _delete_item(
        kind: str,
        project_id: int,
        entry_id: int,
        remove: Callable[[int, int | None], bool],
        may_delete: bool,
    ) -> None:
        if not may_delete:
            raise AuthorizationError(DENIAL_TAG)
        if not remove(entry_id, project_id):
            raise NotFoundError(f"{kind} {entry_id} not found in project {project_id}")
