"""Time, payment and allocation payloads."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from timeclonk.schemas.project import Project, ProjectMember


class PayType(str, Enum):
    """Stored as ``payentry.type``: 0 for Invoiced, anything else is Paid."""

    INVOICED = "Invoiced"
    PAID = "Paid"

    @classmethod
    def from_column(cls, value: int) -> PayType:
        return cls.INVOICED if value == 0 else cls.PAID

    def to_column(self) -> int:
        return 0 if self is PayType.INVOICED else 1


class TimeEntry(BaseModel):
    id: int
    project: int
    user: int
    description: str
    startdate: int
    enddate: int
    ignore: bool
    createdate: int
    changeddate: int
    creator: int


class SaveTimeEntry(BaseModel):
    id: int | None = None
    project: int
    user: int
    description: str = ""
    startdate: int
    enddate: int
    ignore: bool = False


class PayEntry(BaseModel):
    id: int
    project: int
    user: int
    duration: int
    paytype: PayType
    paymentdate: int
    description: str
    createdate: int
    changeddate: int
    creator: int


class SavePayEntry(BaseModel):
    id: int | None = None
    project: int
    user: int
    duration: int
    paytype: PayType = PayType.PAID
    paymentdate: int
    description: str = ""


class Allocation(BaseModel):
    id: int
    project: int
    duration: int
    allocationdate: int
    description: str
    createdate: int
    changeddate: int
    creator: int


class SaveAllocation(BaseModel):
    id: int | None = None
    project: int
    duration: int
    allocationdate: int
    description: str = ""


class SaveProjectTime(BaseModel):
    """One ledger batch; each list is applied item by item."""

    project: int
    savetimeentries: list[SaveTimeEntry] = Field(default_factory=list)
    deletetimeentries: list[int] = Field(default_factory=list)
    savepayentries: list[SavePayEntry] = Field(default_factory=list)
    deletepayentries: list[int] = Field(default_factory=list)
    saveallocations: list[SaveAllocation] = Field(default_factory=list)
    deleteallocations: list[int] = Field(default_factory=list)


class ProjectTime(BaseModel):
    project: Project
    members: list[ProjectMember]
    timeentries: list[TimeEntry]
    payentries: list[PayEntry]
    allocations: list[Allocation]
