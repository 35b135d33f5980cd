"""initial database: single values and local user tables"""

from __future__ import annotations

from sqlalchemy import Connection

from timeclonk.migrations.rebuild import execute_all

level = 0


def upgrade(conn: Connection) -> None:
    execute_all(
        conn,
        [
            # migration level lives here.
            """
            CREATE TABLE "singlevalue" (
              "name" TEXT NOT NULL UNIQUE,
              "value" TEXT NOT NULL)
            """,
            """
            CREATE TABLE "user" (
              "id" INTEGER PRIMARY KEY NOT NULL,
              "name" TEXT NOT NULL UNIQUE,
              "hashwd" TEXT NOT NULL,
              "salt" TEXT NOT NULL,
              "email" TEXT NOT NULL,
              "registration_key" TEXT,
              "createdate" INTEGER NOT NULL)
            """,
            # several tokens per user: one per browser or device.
            """
            CREATE TABLE "token" (
              "user" INTEGER NOT NULL REFERENCES "user" ("id") ON UPDATE RESTRICT ON DELETE RESTRICT,
              "token" TEXT NOT NULL,
              "tokendate" INTEGER NOT NULL)
            """,
            'CREATE UNIQUE INDEX "tokenunq" ON "token" ("user", "token")',
            """
            CREATE TABLE "newemail" (
              "user" INTEGER NOT NULL REFERENCES "user" ("id") ON UPDATE RESTRICT ON DELETE RESTRICT,
              "email" TEXT NOT NULL,
              "token" TEXT NOT NULL,
              "tokendate" INTEGER NOT NULL)
            """,
            'CREATE UNIQUE INDEX "newemailunq" ON "newemail" ("user", "token")',
            """
            CREATE TABLE "newpassword" (
              "user" INTEGER NOT NULL REFERENCES "user" ("id") ON UPDATE RESTRICT ON DELETE RESTRICT,
              "token" TEXT NOT NULL,
              "tokendate" INTEGER NOT NULL)
            """,
            'CREATE UNIQUE INDEX "resetpasswordunq" ON "newpassword" ("user", "token")',
        ],
    )
