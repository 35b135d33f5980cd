"""add the ignore flag to time entries"""

from __future__ import annotations

from sqlalchemy import Connection

from timeclonk.migrations.rebuild import TableRebuild, rebuild_table

level = 2

TIMEENTRY = TableRebuild(
    table="timeentry",
    create_sql="""
        CREATE TABLE {table} (
          "id" INTEGER PRIMARY KEY NOT NULL,
          "project" INTEGER NOT NULL REFERENCES "project" ("id") ON UPDATE RESTRICT ON DELETE RESTRICT,
          "user" INTEGER NOT NULL REFERENCES "user" ("id") ON UPDATE RESTRICT ON DELETE RESTRICT,
          "description" TEXT NOT NULL,
          "startdate" INTEGER NOT NULL,
          "enddate" INTEGER NOT NULL,
          "ignore" BOOLEAN NOT NULL,
          "createdate" INTEGER NOT NULL,
          "changeddate" INTEGER NOT NULL,
          "creator" INTEGER NOT NULL REFERENCES "user" ("id") ON UPDATE RESTRICT ON DELETE RESTRICT)
    """,
    copy_columns=(
        "id",
        "project",
        "user",
        "description",
        "startdate",
        "enddate",
        "createdate",
        "changeddate",
        "creator",
    ),
    new_columns={"ignore": "0"},
    indexes=('CREATE UNIQUE INDEX "timeentryunq" ON "timeentry" ("user", "startdate")',),
)


def upgrade(conn: Connection) -> None:
    rebuild_table(conn, TIMEENTRY)
