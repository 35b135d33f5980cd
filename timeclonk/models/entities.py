"""ORM entities mapped onto the schema built by ``timeclonk.migrations``.

Tables are created and altered only by migration steps; these mappings must
follow the column names those steps produce.
"""

from __future__ import annotations

from sqlalchemy import Boolean, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from timeclonk.db.base import Base


class SingleValue(Base):
    __tablename__ = "singlevalue"

    name: Mapped[str] = mapped_column(String, primary_key=True)
    value: Mapped[str] = mapped_column(String, nullable=False)


class OrgauthUser(Base):
    __tablename__ = "orgauth_user"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    hashwd: Mapped[str] = mapped_column(String, nullable=False)
    salt: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str] = mapped_column(String, nullable=False)
    registration_key: Mapped[str | None] = mapped_column(String, nullable=True)
    createdate: Mapped[int] = mapped_column(Integer, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    remote_url: Mapped[str | None] = mapped_column(String, nullable=True)


class OrgauthToken(Base):
    __tablename__ = "orgauth_token"

    user_id: Mapped[int] = mapped_column("user", ForeignKey("orgauth_user.id"), primary_key=True)
    token: Mapped[str] = mapped_column(String, primary_key=True)
    tokendate: Mapped[int] = mapped_column(Integer, nullable=False)
    prevtoken: Mapped[str | None] = mapped_column(String, nullable=True)


class OrgauthNewEmail(Base):
    __tablename__ = "orgauth_newemail"

    user_id: Mapped[int] = mapped_column("user", ForeignKey("orgauth_user.id"), primary_key=True)
    email: Mapped[str] = mapped_column(String, nullable=False)
    token: Mapped[str] = mapped_column(String, primary_key=True)
    tokendate: Mapped[int] = mapped_column(Integer, nullable=False)


class OrgauthNewPassword(Base):
    __tablename__ = "orgauth_newpassword"

    user_id: Mapped[int] = mapped_column("user", ForeignKey("orgauth_user.id"), primary_key=True)
    token: Mapped[str] = mapped_column(String, primary_key=True)
    tokendate: Mapped[int] = mapped_column(Integer, nullable=False)


class Project(Base):
    __tablename__ = "project"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(String, nullable=False)
    public: Mapped[bool] = mapped_column(Boolean, nullable=False)
    rate: Mapped[float | None] = mapped_column(Float, nullable=True)
    currency: Mapped[str | None] = mapped_column(String, nullable=True)
    due_days: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # JSON object text; see Store for (de)serialization.
    extra_fields: Mapped[str | None] = mapped_column(String, nullable=True)
    invoice_id_template: Mapped[str] = mapped_column(String, nullable=False)
    invoice_seq: Mapped[int] = mapped_column(Integer, nullable=False)
    payer: Mapped[str] = mapped_column(String, nullable=False)
    payee: Mapped[str] = mapped_column(String, nullable=False)
    generic_task: Mapped[str] = mapped_column(String, nullable=False)
    createdate: Mapped[int] = mapped_column(Integer, nullable=False)
    changeddate: Mapped[int] = mapped_column(Integer, nullable=False)


class ProjectMember(Base):
    __tablename__ = "projectmember"
    __table_args__ = (UniqueConstraint("project", "user", name="unq"),)

    project_id: Mapped[int] = mapped_column("project", ForeignKey("project.id"), primary_key=True)
    user_id: Mapped[int] = mapped_column("user", ForeignKey("orgauth_user.id"), primary_key=True)
    # Role name as text; parsed by the caller so bad values can be tolerated.
    role: Mapped[str] = mapped_column(String, nullable=False)


class TimeEntry(Base):
    __tablename__ = "timeentry"
    __table_args__ = (UniqueConstraint("user", "startdate", name="timeentryunq"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    project_id: Mapped[int] = mapped_column("project", ForeignKey("project.id"), nullable=False)
    user_id: Mapped[int] = mapped_column("user", ForeignKey("orgauth_user.id"), nullable=False)
    description: Mapped[str] = mapped_column(String, nullable=False)
    startdate: Mapped[int] = mapped_column(Integer, nullable=False)
    enddate: Mapped[int] = mapped_column(Integer, nullable=False)
    ignore: Mapped[bool] = mapped_column(Boolean, nullable=False)
    createdate: Mapped[int] = mapped_column(Integer, nullable=False)
    changeddate: Mapped[int] = mapped_column(Integer, nullable=False)
    creator: Mapped[int] = mapped_column(ForeignKey("orgauth_user.id"), nullable=False)


class PayEntry(Base):
    __tablename__ = "payentry"
    __table_args__ = (UniqueConstraint("user", "paymentdate", name="payentryunq"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    project_id: Mapped[int] = mapped_column("project", ForeignKey("project.id"), nullable=False)
    user_id: Mapped[int] = mapped_column("user", ForeignKey("orgauth_user.id"), nullable=False)
    description: Mapped[str] = mapped_column(String, nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    paytype: Mapped[int] = mapped_column("type", Integer, nullable=False)
    paymentdate: Mapped[int] = mapped_column(Integer, nullable=False)
    createdate: Mapped[int] = mapped_column(Integer, nullable=False)
    changeddate: Mapped[int] = mapped_column(Integer, nullable=False)
    creator: Mapped[int] = mapped_column(ForeignKey("orgauth_user.id"), nullable=False)


class Allocation(Base):
    __tablename__ = "allocation"
    __table_args__ = (UniqueConstraint("creator", "allocationdate", name="allocationunq"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    project_id: Mapped[int] = mapped_column("project", ForeignKey("project.id"), nullable=False)
    description: Mapped[str] = mapped_column(String, nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    allocationdate: Mapped[int] = mapped_column(Integer, nullable=False)
    createdate: Mapped[int] = mapped_column(Integer, nullable=False)
    changeddate: Mapped[int] = mapped_column(Integer, nullable=False)
    creator: Mapped[int] = mapped_column(ForeignKey("orgauth_user.id"), nullable=False)
