"""Schema steps owned by the auth module.

The application's migration runner decides when each step runs (see
``timeclonk.migrations.versions``); the auth module only knows how.
"""

from __future__ import annotations

from collections.abc import Callable

from sqlalchemy import Connection

from timeclonk.migrations.rebuild import execute_all


def _step1(conn: Connection) -> None:
    execute_all(
        conn,
        [
            """
            CREATE TABLE "orgauth_user" (
              "id" INTEGER PRIMARY KEY NOT NULL,
              "name" TEXT NOT NULL UNIQUE,
              "hashwd" TEXT NOT NULL,
              "salt" TEXT NOT NULL,
              "email" TEXT NOT NULL,
              "registration_key" TEXT,
              "createdate" INTEGER NOT NULL)
            """,
            """
            CREATE TABLE "orgauth_token" (
              "user" INTEGER NOT NULL REFERENCES "orgauth_user" ("id") ON UPDATE RESTRICT ON DELETE RESTRICT,
              "token" TEXT NOT NULL,
              "tokendate" INTEGER NOT NULL)
            """,
            'CREATE UNIQUE INDEX "orgauth_tokenunq" ON "orgauth_token" ("user", "token")',
            """
            CREATE TABLE "orgauth_newemail" (
              "user" INTEGER NOT NULL REFERENCES "orgauth_user" ("id") ON UPDATE RESTRICT ON DELETE RESTRICT,
              "email" TEXT NOT NULL,
              "token" TEXT NOT NULL,
              "tokendate" INTEGER NOT NULL)
            """,
            'CREATE UNIQUE INDEX "orgauth_newemailunq" ON "orgauth_newemail" ("user", "token")',
            """
            CREATE TABLE "orgauth_newpassword" (
              "user" INTEGER NOT NULL REFERENCES "orgauth_user" ("id") ON UPDATE RESTRICT ON DELETE RESTRICT,
              "token" TEXT NOT NULL,
              "tokendate" INTEGER NOT NULL)
            """,
            'CREATE UNIQUE INDEX "orgauth_resetpasswordunq" ON "orgauth_newpassword" ("user", "token")',
        ],
    )


def _step2(conn: Connection) -> None:
    conn.exec_driver_sql('ALTER TABLE "orgauth_user" ADD COLUMN "active" BOOLEAN NOT NULL DEFAULT 1')


def _step3(conn: Connection) -> None:
    conn.exec_driver_sql('ALTER TABLE "orgauth_user" ADD COLUMN "admin" BOOLEAN NOT NULL DEFAULT 0')


def _step4(conn: Connection) -> None:
    execute_all(
        conn,
        [
            """
            CREATE TABLE "orgauth_user_invite" (
              "id" INTEGER PRIMARY KEY NOT NULL,
              "token" TEXT NOT NULL UNIQUE,
              "email" TEXT,
              "data" TEXT,
              "creator" INTEGER NOT NULL REFERENCES "orgauth_user" ("id") ON UPDATE RESTRICT ON DELETE RESTRICT,
              "tokendate" INTEGER NOT NULL)
            """,
        ],
    )


def _step5(conn: Connection) -> None:
    conn.exec_driver_sql('ALTER TABLE "orgauth_token" ADD COLUMN "prevtoken" TEXT')


def _step6(conn: Connection) -> None:
    conn.exec_driver_sql('ALTER TABLE "orgauth_user" ADD COLUMN "remote_url" TEXT')


def _step7(conn: Connection) -> None:
    conn.exec_driver_sql('CREATE INDEX "orgauth_tokendate" ON "orgauth_token" ("tokendate")')


STEPS: dict[int, Callable[[Connection], None]] = {
    1: _step1,
    2: _step2,
    3: _step3,
    4: _step4,
    5: _step5,
    6: _step6,
    7: _step7,
}


def upgrade(conn: Connection, step: int) -> None:
    try:
        apply = STEPS[step]
    except KeyError as exc:
        raise ValueError(f"unknown auth schema step {step}") from exc
    apply(conn)
