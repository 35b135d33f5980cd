"""drop the projecttemp work table older releases left behind after step 12"""

from __future__ import annotations

from sqlalchemy import Connection

level = 13


def upgrade(conn: Connection) -> None:
    conn.exec_driver_sql('DROP TABLE IF EXISTS "projecttemp"')
