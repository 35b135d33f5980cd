"""move users to the auth module's tables and re-point every user foreign key

Copies user, token, newemail and newpassword rows into the orgauth tables,
rebuilds projectmember, payentry, timeentry, allocation and project so their
foreign keys reference orgauth_user, then drops the local user tables. The
runner applies the whole step in one transaction.
"""

from __future__ import annotations

from sqlalchemy import Connection

from timeclonk.auth import migrations as auth_migrations
from timeclonk.migrations.rebuild import TableRebuild, execute_all, rebuild_table

level = 5

_FK = "REFERENCES {parent} (\"id\") ON UPDATE RESTRICT ON DELETE RESTRICT"
PROJECT_FK = _FK.format(parent='"project"')
USER_FK = _FK.format(parent='"orgauth_user"')

PROJECTMEMBER = TableRebuild(
    table="projectmember",
    create_sql=f"""
        CREATE TABLE {{table}} (
          "project" INTEGER NOT NULL {PROJECT_FK},
          "user" INTEGER NOT NULL {USER_FK})
    """,
    copy_columns=("project", "user"),
    indexes=('CREATE UNIQUE INDEX "unq" ON "projectmember" ("project", "user")',),
)

PAYENTRY = TableRebuild(
    table="payentry",
    create_sql=f"""
        CREATE TABLE {{table}} (
          "id" INTEGER PRIMARY KEY NOT NULL,
          "project" INTEGER NOT NULL {PROJECT_FK},
          "user" INTEGER NOT NULL {USER_FK},
          "description" TEXT NOT NULL,
          "duration" INTEGER NOT NULL,
          "paymentdate" INTEGER NOT NULL,
          "createdate" INTEGER NOT NULL,
          "changeddate" INTEGER NOT NULL,
          "creator" INTEGER NOT NULL {USER_FK})
    """,
    copy_columns=(
        "id",
        "project",
        "user",
        "description",
        "duration",
        "paymentdate",
        "createdate",
        "changeddate",
        "creator",
    ),
    indexes=('CREATE UNIQUE INDEX "payentryunq" ON "payentry" ("user", "paymentdate")',),
)

TIMEENTRY = TableRebuild(
    table="timeentry",
    create_sql=f"""
        CREATE TABLE {{table}} (
          "id" INTEGER PRIMARY KEY NOT NULL,
          "project" INTEGER NOT NULL {PROJECT_FK},
          "user" INTEGER NOT NULL {USER_FK},
          "description" TEXT NOT NULL,
          "startdate" INTEGER NOT NULL,
          "enddate" INTEGER NOT NULL,
          "ignore" BOOLEAN NOT NULL,
          "createdate" INTEGER NOT NULL,
          "changeddate" INTEGER NOT NULL,
          "creator" INTEGER NOT NULL {USER_FK})
    """,
    copy_columns=(
        "id",
        "project",
        "user",
        "description",
        "startdate",
        "enddate",
        "ignore",
        "createdate",
        "changeddate",
        "creator",
    ),
    indexes=('CREATE UNIQUE INDEX "timeentryunq" ON "timeentry" ("user", "startdate")',),
)

ALLOCATION = TableRebuild(
    table="allocation",
    create_sql=f"""
        CREATE TABLE {{table}} (
          "id" INTEGER PRIMARY KEY NOT NULL,
          "project" INTEGER NOT NULL {PROJECT_FK},
          "description" TEXT NOT NULL,
          "duration" INTEGER NOT NULL,
          "allocationdate" INTEGER NOT NULL,
          "createdate" INTEGER NOT NULL,
          "changeddate" INTEGER NOT NULL,
          "creator" INTEGER NOT NULL {USER_FK})
    """,
    copy_columns=(
        "id",
        "project",
        "description",
        "duration",
        "allocationdate",
        "createdate",
        "changeddate",
        "creator",
    ),
    indexes=('CREATE UNIQUE INDEX "allocationunq" ON "allocation" ("creator", "allocationdate")',),
)

PROJECT = TableRebuild(
    table="project",
    create_sql="""
        CREATE TABLE {table} (
          "id" INTEGER PRIMARY KEY NOT NULL,
          "name" TEXT NOT NULL,
          "description" TEXT NOT NULL,
          "public" BOOLEAN NOT NULL,
          "rate" REAL,
          "currency" TEXT,
          "createdate" INTEGER NOT NULL,
          "changeddate" INTEGER NOT NULL)
    """,
    copy_columns=("id", "name", "description", "public", "rate", "currency", "createdate", "changeddate"),
)


def upgrade(conn: Connection) -> None:
    auth_migrations.upgrade(conn, 1)

    execute_all(
        conn,
        [
            """
            INSERT INTO "orgauth_user" ("id", "name", "hashwd", "salt", "email", "registration_key", "createdate")
            SELECT "id", "name", "hashwd", "salt", "email", "registration_key", "createdate" FROM "user"
            """,
            """
            INSERT INTO "orgauth_token" ("user", "token", "tokendate")
            SELECT "user", "token", "tokendate" FROM "token"
            """,
            """
            INSERT INTO "orgauth_newemail" ("user", "email", "token", "tokendate")
            SELECT "user", "email", "token", "tokendate" FROM "newemail"
            """,
            """
            INSERT INTO "orgauth_newpassword" ("user", "token", "tokendate")
            SELECT "user", "token", "tokendate" FROM "newpassword"
            """,
        ],
    )

    for rebuild in (PROJECTMEMBER, PAYENTRY, TIMEENTRY, ALLOCATION, PROJECT):
        rebuild_table(conn, rebuild)

    execute_all(
        conn,
        [
            'DROP TABLE "user"',
            'DROP TABLE "token"',
            'DROP TABLE "newemail"',
            'DROP TABLE "newpassword"',
        ],
    )
