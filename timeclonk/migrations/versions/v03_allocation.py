"""allocation table: budget granted to a project"""

from __future__ import annotations

from sqlalchemy import Connection

from timeclonk.migrations.rebuild import execute_all

level = 3


def upgrade(conn: Connection) -> None:
    execute_all(
        conn,
        [
            """
            CREATE TABLE "allocation" (
              "id" INTEGER PRIMARY KEY NOT NULL,
              "project" INTEGER NOT NULL REFERENCES "project" ("id") ON UPDATE RESTRICT ON DELETE RESTRICT,
              "description" TEXT NOT NULL,
              "duration" INTEGER NOT NULL,
              "allocationdate" INTEGER NOT NULL,
              "createdate" INTEGER NOT NULL,
              "changeddate" INTEGER NOT NULL,
              "creator" INTEGER NOT NULL REFERENCES "user" ("id") ON UPDATE RESTRICT ON DELETE RESTRICT)
            """,
            'CREATE UNIQUE INDEX "allocationunq" ON "allocation" ("creator", "allocationdate")',
        ],
    )
