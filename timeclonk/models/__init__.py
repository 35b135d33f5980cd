"""ORM model package."""

from timeclonk.models.entities import (
    Allocation,
    OrgauthNewEmail,
    OrgauthNewPassword,
    OrgauthToken,
    OrgauthUser,
    PayEntry,
    Project,
    ProjectMember,
    SingleValue,
    TimeEntry,
)

__all__ = [
    "Allocation",
    "OrgauthNewEmail",
    "OrgauthNewPassword",
    "OrgauthToken",
    "OrgauthUser",
    "PayEntry",
    "Project",
    "ProjectMember",
    "SingleValue",
    "TimeEntry",
]
