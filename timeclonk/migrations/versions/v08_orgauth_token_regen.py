"""auth module step 5: previous token column for login token regeneration"""

from __future__ import annotations

from sqlalchemy import Connection

from timeclonk.auth import migrations as auth_migrations

level = 8


def upgrade(conn: Connection) -> None:
    auth_migrations.upgrade(conn, 5)
