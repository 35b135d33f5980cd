"""add hourly rate and currency to projects"""

from __future__ import annotations

from sqlalchemy import Connection

from timeclonk.migrations.rebuild import TableRebuild, rebuild_table

level = 4

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
    copy_columns=("id", "name", "description", "public", "createdate", "changeddate"),
    new_columns={"rate": "NULL", "currency": "NULL"},
)


def upgrade(conn: Connection) -> None:
    rebuild_table(conn, PROJECT)
