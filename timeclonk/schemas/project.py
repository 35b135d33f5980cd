"""Project, membership and user payloads."""

from __future__ import annotations

from pydantic import BaseModel, Field

from timeclonk.core.auth import Role


class ExtraField(BaseModel):
    """One invoice template field; ``n`` is the name, ``v`` the value."""

    n: str
    v: str


class User(BaseModel):
    id: int
    name: str


class ListProject(BaseModel):
    id: int
    name: str
    role: Role


class SaveProject(BaseModel):
    id: int | None = None
    name: str = Field(min_length=1)
    description: str = ""
    public: bool = False
    rate: float | None = None
    currency: str | None = None
    due_days: int | None = None
    extra_fields: list[ExtraField] = Field(default_factory=list)
    invoice_id_template: str = ""
    # Initial value for new projects; updates keep the stored sequence.
    invoice_seq: int = 0
    payer: str = ""
    payee: str = ""
    generic_task: str = ""


class SavedProject(BaseModel):
    id: int
    changeddate: int


class SaveProjectMember(BaseModel):
    id: int
    role: Role = Role.MEMBER
    delete: bool = False


class SaveProjectEdit(BaseModel):
    project: SaveProject
    members: list[SaveProjectMember] = Field(default_factory=list)


class SaveProjectInvoice(BaseModel):
    id: int
    invoice_seq: int
    extra_fields: list[ExtraField] = Field(default_factory=list)


class Project(BaseModel):
    id: int
    name: str
    description: str
    public: bool
    rate: float | None = None
    currency: str | None = None
    due_days: int | None = None
    extra_fields: list[ExtraField] = Field(default_factory=list)
    invoice_id_template: str = ""
    invoice_seq: int = 0
    payer: str = ""
    payee: str = ""
    generic_task: str = ""
    createdate: int
    changeddate: int


class ProjectMember(BaseModel):
    id: int
    name: str
    role: Role


class ProjectEdit(BaseModel):
    project: Project
    members: list[ProjectMember]


class SavedProjectEdit(BaseModel):
    project: Project
    members: list[ProjectMember]


class UserInviteProject(BaseModel):
    id: int
    role: Role


class UserInviteData(BaseModel):
    """Invite payload handed to the auth collaborator as JSON text."""

    projects: list[UserInviteProject] = Field(default_factory=list)
