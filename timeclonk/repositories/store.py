"""Store: typed reads and writes over the migrated schema.

Every write is its own transaction: it commits on success and rolls back on
failure, with SQL errors surfacing as ``StorageError``. Authorization is the
caller's job.
"""

from __future__ import annotations

import json
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from timeclonk.core.auth import Role, parse_role
from timeclonk.core.clock import now_ms
from timeclonk.core.exceptions import MalformedInputError, NotFoundError
from timeclonk.core.logging import get_logger
from timeclonk.db.transaction import transaction
from timeclonk.models.entities import (
    Allocation,
    OrgauthUser,
    PayEntry,
    Project,
    ProjectMember,
    TimeEntry,
)
from timeclonk.schemas import ledger as ledger_schemas
from timeclonk.schemas import project as project_schemas

logger = get_logger(__name__)


def dump_extra_fields(fields: list[project_schemas.ExtraField]) -> str:
    """Serialize as a JSON list of ``{n, v}`` pairs, one per name.

    A repeated name keeps its first position and its last value.
    """

    by_name = {field.n: field.v for field in fields}
    return json.dumps([{"n": name, "v": value} for name, value in by_name.items()])


def load_extra_fields(raw: str | None) -> list[project_schemas.ExtraField]:
    """Parse stored extra fields; unreadable text reads back empty."""

    if not raw:
        return []
    try:
        parsed: Any = json.loads(raw)
    except ValueError:
        logger.warning("unreadable extra_fields", raw=raw)
        return []

    # Also accept a plain name -> value object.
    if isinstance(parsed, dict):
        return [project_schemas.ExtraField(n=str(name), v=str(value)) for name, value in parsed.items()]
    if isinstance(parsed, list):
        return [
            project_schemas.ExtraField(n=str(item["n"]), v=str(item["v"]))
            for item in parsed
            if isinstance(item, dict) and "n" in item and "v" in item
        ]
    return []


class Store:
    """Persistence operations for projects, members and the time ledger."""

    def __init__(self, db: Session) -> None:
        self.db = db

    # ---------- Projects ----------
    def project_list(self, user_id: int) -> list[project_schemas.ListProject]:
        """Member projects, most recently clocked first, then never-clocked ones."""

        latest = (
            select(TimeEntry.project_id.label("project"), func.max(TimeEntry.startdate).label("sd"))
            .where(TimeEntry.user_id == user_id)
            .group_by(TimeEntry.project_id)
            .subquery()
        )
        has_entries = (
            select(TimeEntry.id)
            .where(TimeEntry.project_id == Project.id, TimeEntry.user_id == user_id)
            .exists()
        )

        with transaction(self.db):
            clocked = self.db.execute(
                select(Project.id, Project.name, ProjectMember.role)
                .join(ProjectMember, ProjectMember.project_id == Project.id)
                .join(latest, latest.c.project == Project.id)
                .where(ProjectMember.user_id == user_id)
                .order_by(latest.c.sd.desc())
            ).all()
            unclocked = self.db.execute(
                select(Project.id, Project.name, ProjectMember.role)
                .join(ProjectMember, ProjectMember.project_id == Project.id)
                .where(ProjectMember.user_id == user_id, ~has_entries)
                .order_by(Project.id)
            ).all()

        return [
            # Display only: an unknown stored role shows as Observer.
            project_schemas.ListProject(id=pid, name=name, role=parse_role(role) or Role.OBSERVER)
            for pid, name, role in [*clocked, *unclocked]
        ]

    def save_project(self, user_id: int, project: project_schemas.SaveProject) -> project_schemas.SavedProject:
        """Insert a project with its creator as Admin, or update one in place.

        Updates never touch ``createdate`` or ``invoice_seq``.
        """

        now = now_ms()
        with transaction(self.db):
            if project.id is None:
                row = Project(
                    createdate=now,
                    changeddate=now,
                    invoice_seq=project.invoice_seq,
                    **self._project_values(project),
                )
                self.db.add(row)
                self.db.flush()
                self.db.add(ProjectMember(project_id=row.id, user_id=user_id, role=Role.ADMIN.value))
                logger.info("project created", project_id=row.id, user_id=user_id)
            else:
                row = self._get_project(project.id)
                for key, value in self._project_values(project).items():
                    setattr(row, key, value)
                row.changeddate = now
            self.db.flush()
            return project_schemas.SavedProject(id=row.id, changeddate=now)

    def save_project_invoice(self, invoice: project_schemas.SaveProjectInvoice) -> project_schemas.Project:
        """Advance the invoice sequence and store the invoice extra fields."""

        with transaction(self.db):
            row = self._get_project(invoice.id)
            if invoice.invoice_seq < row.invoice_seq:
                raise MalformedInputError(
                    f"invoice_seq {invoice.invoice_seq} is behind the stored value {row.invoice_seq}"
                )
            row.invoice_seq = invoice.invoice_seq
            row.extra_fields = dump_extra_fields(invoice.extra_fields)
            row.changeddate = now_ms()
        return self.read_project(invoice.id)

    def is_public_project(self, project_id: int) -> bool:
        """False for private projects and for ids with no project."""

        with transaction(self.db):
            public = self.db.scalar(select(Project.public).where(Project.id == project_id))
        return bool(public)

    def read_project(self, project_id: int) -> project_schemas.Project:
        with transaction(self.db):
            row = self._get_project(project_id)
            return self.serialize_project(row)

    # ---------- Members ----------
    def member_list(self, project_id: int) -> list[project_schemas.ProjectMember]:
        with transaction(self.db):
            self._get_project(project_id)
            rows = self.db.execute(
                select(OrgauthUser.id, OrgauthUser.name, ProjectMember.role)
                .join(ProjectMember, ProjectMember.user_id == OrgauthUser.id)
                .where(ProjectMember.project_id == project_id)
                .order_by(OrgauthUser.id)
            ).all()

        members: list[project_schemas.ProjectMember] = []
        for user_id, name, stored_role in rows:
            role = parse_role(stored_role)
            if role is None:
                logger.warning(
                    "skipping member with unknown role",
                    project_id=project_id,
                    user_id=user_id,
                    role=stored_role,
                )
                continue
            members.append(project_schemas.ProjectMember(id=user_id, name=name, role=role))
        return members

    def save_member(self, project_id: int, user_id: int, role: Role) -> None:
        """Add a member or change the role of an existing one."""

        stmt = sqlite_insert(ProjectMember.__table__).values(project=project_id, user=user_id, role=role.value)
        stmt = stmt.on_conflict_do_update(index_elements=["project", "user"], set_={"role": stmt.excluded.role})
        with transaction(self.db):
            self.db.execute(stmt)

    def delete_member(self, project_id: int, user_id: int) -> None:
        with transaction(self.db):
            self.db.execute(
                delete(ProjectMember).where(ProjectMember.project_id == project_id, ProjectMember.user_id == user_id)
            )

    def user_list(self) -> list[project_schemas.User]:
        with transaction(self.db):
            rows = self.db.execute(select(OrgauthUser.id, OrgauthUser.name).order_by(OrgauthUser.id)).all()
        return [project_schemas.User(id=user_id, name=name) for user_id, name in rows]

    def member_role(self, user_id: int, project_id: int) -> Role | None:
        """Role for authorization; a missing row or unknown role is None."""

        with transaction(self.db):
            stored = self.db.scalar(
                select(ProjectMember.role).where(
                    ProjectMember.project_id == project_id, ProjectMember.user_id == user_id
                )
            )
        if stored is None:
            return None
        role = parse_role(stored)
        if role is None:
            logger.warning("unknown stored role", project_id=project_id, user_id=user_id, role=stored)
        return role

    def is_project_member(self, user_id: int, project_id: int) -> bool:
        with transaction(self.db):
            found = self.db.scalar(
                select(ProjectMember.project_id).where(
                    ProjectMember.project_id == project_id, ProjectMember.user_id == user_id
                )
            )
        return found is not None

    # ---------- Time entries ----------
    def time_entries(self, project_id: int) -> list[ledger_schemas.TimeEntry]:
        with transaction(self.db):
            rows = self.db.scalars(
                select(TimeEntry).where(TimeEntry.project_id == project_id).order_by(TimeEntry.startdate)
            ).all()
            return [self.serialize_time_entry(row) for row in rows]

    def user_time(self, user_id: int) -> list[ledger_schemas.TimeEntry]:
        with transaction(self.db):
            rows = self.db.scalars(
                select(TimeEntry).where(TimeEntry.user_id == user_id).order_by(TimeEntry.startdate)
            ).all()
            return [self.serialize_time_entry(row) for row in rows]

    def save_time_entry(self, user_id: int, entry: ledger_schemas.SaveTimeEntry) -> int:
        return self._save_entry(
            TimeEntry,
            entry.id,
            user_id,
            entry.project,
            user_id=entry.user,
            description=entry.description,
            startdate=entry.startdate,
            enddate=entry.enddate,
            ignore=entry.ignore,
        )

    def delete_time_entry(self, entry_id: int, project_id: int | None = None) -> bool:
        return self._delete_entry(TimeEntry, entry_id, project_id)

    # ---------- Pay entries ----------
    def pay_entries(self, project_id: int) -> list[ledger_schemas.PayEntry]:
        with transaction(self.db):
            rows = self.db.scalars(
                select(PayEntry).where(PayEntry.project_id == project_id).order_by(PayEntry.paymentdate)
            ).all()
            return [self.serialize_pay_entry(row) for row in rows]

    def save_pay_entry(self, user_id: int, entry: ledger_schemas.SavePayEntry) -> int:
        return self._save_entry(
            PayEntry,
            entry.id,
            user_id,
            entry.project,
            user_id=entry.user,
            description=entry.description,
            duration=entry.duration,
            paytype=entry.paytype.to_column(),
            paymentdate=entry.paymentdate,
        )

    def delete_pay_entry(self, entry_id: int, project_id: int | None = None) -> bool:
        return self._delete_entry(PayEntry, entry_id, project_id)

    # ---------- Allocations ----------
    def allocations(self, project_id: int) -> list[ledger_schemas.Allocation]:
        with transaction(self.db):
            rows = self.db.scalars(
                select(Allocation)
                .where(Allocation.project_id == project_id)
                .order_by(Allocation.allocationdate)
            ).all()
            return [self.serialize_allocation(row) for row in rows]

    def save_allocation(self, user_id: int, allocation: ledger_schemas.SaveAllocation) -> int:
        return self._save_entry(
            Allocation,
            allocation.id,
            user_id,
            allocation.project,
            description=allocation.description,
            duration=allocation.duration,
            allocationdate=allocation.allocationdate,
        )

    def delete_allocation(self, allocation_id: int, project_id: int | None = None) -> bool:
        return self._delete_entry(Allocation, allocation_id, project_id)

    # ---------- Composite reads ----------
    def read_project_time(self, project_id: int) -> ledger_schemas.ProjectTime:
        return ledger_schemas.ProjectTime(
            project=self.read_project(project_id),
            members=self.member_list(project_id),
            timeentries=self.time_entries(project_id),
            payentries=self.pay_entries(project_id),
            allocations=self.allocations(project_id),
        )

    # ---------- Internals ----------
    def _get_project(self, project_id: int) -> Project:
        row = self.db.get(Project, project_id)
        if row is None:
            raise NotFoundError(f"project {project_id} not found")
        return row

    @staticmethod
    def _project_values(project: project_schemas.SaveProject) -> dict[str, Any]:
        return {
            "name": project.name,
            "description": project.description,
            "public": project.public,
            "rate": project.rate,
            "currency": project.currency,
            "due_days": project.due_days,
            "extra_fields": dump_extra_fields(project.extra_fields),
            "invoice_id_template": project.invoice_id_template,
            "payer": project.payer,
            "payee": project.payee,
            "generic_task": project.generic_task,
        }

    def _save_entry(
        self,
        model: type[Any],
        entry_id: int | None,
        creator_id: int,
        project_id: int,
        **values: Any,
    ) -> int:
        """Insert (stamping creator) or update by id within ``project_id``.

        An update never moves a row between projects and never rewrites its
        creator.
        """

        now = now_ms()
        with transaction(self.db):
            if entry_id is None:
                row = model(createdate=now, changeddate=now, creator=creator_id, project_id=project_id, **values)
                self.db.add(row)
            else:
                row = self.db.scalar(select(model).where(model.id == entry_id, model.project_id == project_id))
                if row is None:
                    raise NotFoundError(f"{model.__tablename__} {entry_id} not found in project {project_id}")
                for key, value in values.items():
                    setattr(row, key, value)
                row.changeddate = now
            self.db.flush()
            return row.id

    def _delete_entry(self, model: type[Any], entry_id: int, project_id: int | None) -> bool:
        stmt = delete(model).where(model.id == entry_id)
        if project_id is not None:
            stmt = stmt.where(model.project_id == project_id)
        with transaction(self.db):
            result = self.db.execute(stmt)
        return bool(result.rowcount)

    # ---------- Serialization ----------
    @staticmethod
    def serialize_project(row: Project) -> project_schemas.Project:
        return project_schemas.Project(
            id=row.id,
            name=row.name,
            description=row.description,
            public=row.public,
            rate=row.rate,
            currency=row.currency,
            due_days=row.due_days,
            extra_fields=load_extra_fields(row.extra_fields),
            invoice_id_template=row.invoice_id_template,
            invoice_seq=row.invoice_seq,
            payer=row.payer,
            payee=row.payee,
            generic_task=row.generic_task,
            createdate=row.createdate,
            changeddate=row.changeddate,
        )

    @staticmethod
    def serialize_time_entry(row: TimeEntry) -> ledger_schemas.TimeEntry:
        return ledger_schemas.TimeEntry(
            id=row.id,
            project=row.project_id,
            user=row.user_id,
            description=row.description,
            startdate=row.startdate,
            enddate=row.enddate,
            ignore=row.ignore,
            createdate=row.createdate,
            changeddate=row.changeddate,
            creator=row.creator,
        )

    @staticmethod
    def serialize_pay_entry(row: PayEntry) -> ledger_schemas.PayEntry:
        return ledger_schemas.PayEntry(
            id=row.id,
            project=row.project_id,
            user=row.user_id,
            duration=row.duration,
            paytype=ledger_schemas.PayType.from_column(row.paytype),
            paymentdate=row.paymentdate,
            description=row.description,
            createdate=row.createdate,
            changeddate=row.changeddate,
            creator=row.creator,
        )

    @staticmethod
    def serialize_allocation(row: Allocation) -> ledger_schemas.Allocation:
        return ledger_schemas.Allocation(
            id=row.id,
            project=row.project_id,
            duration=row.duration,
            allocationdate=row.allocationdate,
            description=row.description,
            createdate=row.createdate,
            changeddate=row.changeddate,
            creator=row.creator,
        )
