"""project, membership, time entry and pay entry tables"""

from __future__ import annotations

from sqlalchemy import Connection

from timeclonk.migrations.rebuild import execute_all

level = 1


def upgrade(conn: Connection) -> None:
    execute_all(
        conn,
        [
            """
            CREATE TABLE "project" (
              "id" INTEGER PRIMARY KEY NOT NULL,
              "name" TEXT NOT NULL,
              "description" TEXT NOT NULL,
              "public" BOOLEAN NOT NULL,
              "createdate" INTEGER NOT NULL,
              "changeddate" INTEGER NOT NULL)
            """,
            """
            CREATE TABLE "projectmember" (
              "project" INTEGER NOT NULL REFERENCES "project" ("id") ON UPDATE RESTRICT ON DELETE RESTRICT,
              "user" INTEGER NOT NULL REFERENCES "user" ("id") ON UPDATE RESTRICT ON DELETE RESTRICT)
            """,
            'CREATE UNIQUE INDEX "unq" ON "projectmember" ("project", "user")',
            """
            CREATE TABLE "timeentry" (
              "id" INTEGER PRIMARY KEY NOT NULL,
              "project" INTEGER NOT NULL REFERENCES "project" ("id") ON UPDATE RESTRICT ON DELETE RESTRICT,
              "user" INTEGER NOT NULL REFERENCES "user" ("id") ON UPDATE RESTRICT ON DELETE RESTRICT,
              "description" TEXT NOT NULL,
              "startdate" INTEGER NOT NULL,
              "enddate" INTEGER NOT NULL,
              "createdate" INTEGER NOT NULL,
              "changeddate" INTEGER NOT NULL,
              "creator" INTEGER NOT NULL REFERENCES "user" ("id") ON UPDATE RESTRICT ON DELETE RESTRICT)
            """,
            'CREATE UNIQUE INDEX "timeentryunq" ON "timeentry" ("user", "startdate")',
            """
            CREATE TABLE "payentry" (
              "id" INTEGER PRIMARY KEY NOT NULL,
              "project" INTEGER NOT NULL REFERENCES "project" ("id") ON UPDATE RESTRICT ON DELETE RESTRICT,
              "user" INTEGER NOT NULL REFERENCES "user" ("id") ON UPDATE RESTRICT ON DELETE RESTRICT,
              "description" TEXT NOT NULL,
              "duration" INTEGER NOT NULL,
              "paymentdate" INTEGER NOT NULL,
              "createdate" INTEGER NOT NULL,
              "changeddate" INTEGER NOT NULL,
              "creator" INTEGER NOT NULL REFERENCES "user" ("id") ON UPDATE RESTRICT ON DELETE RESTRICT)
            """,
            'CREATE UNIQUE INDEX "payentryunq" ON "payentry" ("user", "paymentdate")',
        ],
    )
