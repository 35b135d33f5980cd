"""Application service for project reads, edits and invoice state."""

from __future__ import annotations

from sqlalchemy.orm import Session

from timeclonk.core.auth import Operation, Role, is_allowed
from timeclonk.core.exceptions import AuthorizationError
from timeclonk.core.logging import get_logger
from timeclonk.repositories.store import Store
from timeclonk.schemas.ledger import ProjectTime, TimeEntry
from timeclonk.schemas.project import (
    ListProject,
    Project,
    ProjectEdit,
    SavedProjectEdit,
    SaveProjectEdit,
    SaveProjectInvoice,
    User,
)

logger = get_logger(__name__)


class ProjectService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.store = Store(db)

    def require(self, user_id: int | None, project_id: int, operation: Operation, tag: str) -> Role | None:
        """Member role of ``user_id`` on the project, or AuthorizationError."""

        role = self.store.member_role(user_id, project_id) if user_id is not None else None
        if not is_allowed(role, operation):
            logger.info(
                "operation denied",
                user_id=user_id,
                project_id=project_id,
                operation=operation.value,
                role=role.value if role else None,
            )
            raise AuthorizationError(tag)
        return role

    def project_list(self, user_id: int) -> list[ListProject]:
        return self.store.project_list(user_id)

    def all_members(self) -> list[User]:
        return self.store.user_list()

    def user_time(self, user_id: int) -> list[TimeEntry]:
        return self.store.user_time(user_id)

    def read_project_edit(self, user_id: int, project_id: int) -> ProjectEdit:
        self.require(user_id, project_id, Operation.VIEW_PROJECT, "projectedit")
        return ProjectEdit(
            project=self.store.read_project(project_id),
            members=self.store.member_list(project_id),
        )

    def save_project_edit(self, user_id: int, edit: SaveProjectEdit) -> SavedProjectEdit:
        """Create a project or edit one, then apply member changes in order.

        Creation is open to any user, who becomes the project's Admin; edits
        need EDIT_PROJECT on the existing project.
        """

        if edit.project.id is None:
            if not is_allowed(None, Operation.CREATE_PROJECT):
                raise AuthorizationError("saveprojectedit")
        else:
            self.require(user_id, edit.project.id, Operation.EDIT_PROJECT, "saveprojectedit")

        saved = self.store.save_project(user_id, edit.project)
        for member in edit.members:
            if member.delete:
                self.store.delete_member(saved.id, member.id)
            else:
                self.store.save_member(saved.id, member.id, member.role)

        return SavedProjectEdit(
            project=self.store.read_project(saved.id),
            members=self.store.member_list(saved.id),
        )

    def save_project_invoice(self, user_id: int, invoice: SaveProjectInvoice) -> Project:
        self.require(user_id, invoice.id, Operation.SAVE_PROJECT_INVOICE, "saveprojectinvoice")
        return self.store.save_project_invoice(invoice)

    def read_project_time(self, user_id: int | None, project_id: int) -> ProjectTime:
        """Full ledger of a project; public projects are readable by anyone.

        ``user_id`` is None for anonymous callers. A missing project is
        denied like a private one.
        """

        if not self.store.is_public_project(project_id):
            self.require(user_id, project_id, Operation.VIEW_PROJECT, "projecttime")
        return self.store.read_project_time(project_id)
