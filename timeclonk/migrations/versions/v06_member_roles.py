"""add role to project members; existing members become Admin"""

from __future__ import annotations

from sqlalchemy import Connection

from timeclonk.migrations.rebuild import TableRebuild, rebuild_table

level = 6

PROJECTMEMBER = TableRebuild(
    table="projectmember",
    create_sql="""
        CREATE TABLE {table} (
          "project" INTEGER NOT NULL REFERENCES "project" ("id") ON UPDATE RESTRICT ON DELETE RESTRICT,
          "user" INTEGER NOT NULL REFERENCES "orgauth_user" ("id") ON UPDATE RESTRICT ON DELETE RESTRICT,
          "role" TEXT NOT NULL)
    """,
    copy_columns=("project", "user"),
    new_columns={"role": "'Admin'"},
    indexes=('CREATE UNIQUE INDEX "unq" ON "projectmember" ("project", "user")',),
)


def upgrade(conn: Connection) -> None:
    rebuild_table(conn, PROJECTMEMBER)
