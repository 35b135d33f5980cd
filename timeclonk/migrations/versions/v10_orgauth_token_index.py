"""auth module step 7: index token dates for purging"""

from __future__ import annotations

from sqlalchemy import Connection

from timeclonk.auth import migrations as auth_migrations

level = 10


def upgrade(conn: Connection) -> None:
    auth_migrations.upgrade(conn, 7)
