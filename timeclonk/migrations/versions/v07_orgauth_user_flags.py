"""auth module steps 2 to 4: user active/admin flags and the invite table"""

from __future__ import annotations

from sqlalchemy import Connection

from timeclonk.auth import migrations as auth_migrations

level = 7


def upgrade(conn: Connection) -> None:
    for step in (2, 3, 4):
        auth_migrations.upgrade(conn, step)
