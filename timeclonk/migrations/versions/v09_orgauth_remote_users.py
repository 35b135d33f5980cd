"""auth module step 6: remote_url on users"""

from __future__ import annotations

from sqlalchemy import Connection

from timeclonk.auth import migrations as auth_migrations

level = 9


def upgrade(conn: Connection) -> None:
    auth_migrations.upgrade(conn, 6)
