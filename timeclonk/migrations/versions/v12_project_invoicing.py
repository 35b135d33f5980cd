"""invoice settings on projects"""

from __future__ import annotations

from sqlalchemy import Connection

from timeclonk.migrations.rebuild import TableRebuild, rebuild_table

level = 12

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
          "due_days" INTEGER,
          "extra_fields" TEXT,
          "invoice_id_template" TEXT NOT NULL,
          "invoice_seq" INTEGER NOT NULL,
          "payer" TEXT NOT NULL,
          "payee" TEXT NOT NULL,
          "generic_task" TEXT NOT NULL,
          "createdate" INTEGER NOT NULL,
          "changeddate" INTEGER NOT NULL)
    """,
    copy_columns=("id", "name", "description", "public", "rate", "currency", "createdate", "changeddate"),
    new_columns={
        "due_days": "NULL",
        "extra_fields": "NULL",
        "invoice_id_template": "''",
        "invoice_seq": "0",
        "payer": "''",
        "payee": "''",
        "generic_task": "''",
    },
)


def upgrade(conn: Connection) -> None:
    rebuild_table(conn, PROJECT)
