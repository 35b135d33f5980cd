"""split pay entries into Invoiced and Paid records

Every existing row becomes Paid (type 1) and gets a derived Invoiced row
(type 0) one millisecond before its payment date. Not reversible.
"""

from __future__ import annotations

from sqlalchemy import Connection

from timeclonk.migrations.rebuild import TableRebuild, rebuild_table

level = 11

PAYENTRY = TableRebuild(
    table="payentry",
    create_sql="""
        CREATE TABLE {table} (
          "id" INTEGER PRIMARY KEY NOT NULL,
          "project" INTEGER NOT NULL REFERENCES "project" ("id") ON UPDATE RESTRICT ON DELETE RESTRICT,
          "user" INTEGER NOT NULL REFERENCES "orgauth_user" ("id") ON UPDATE RESTRICT ON DELETE RESTRICT,
          "description" TEXT NOT NULL,
          "duration" INTEGER NOT NULL,
          "type" INTEGER NOT NULL,
          "paymentdate" INTEGER NOT NULL,
          "createdate" INTEGER NOT NULL,
          "changeddate" INTEGER NOT NULL,
          "creator" INTEGER NOT NULL REFERENCES "orgauth_user" ("id") ON UPDATE RESTRICT ON DELETE RESTRICT)
    """,
    copy_columns=(
        "id",
        "project",
        "user",
        "description",
        "duration",
        "paymentdate",
        "createdate",
        "changeddate",
        "creator",
    ),
    # 0 = invoiced, 1 = paid
    new_columns={"type": "1"},
    indexes=('CREATE UNIQUE INDEX "payentryunq" ON "payentry" ("user", "paymentdate")',),
)


def upgrade(conn: Connection) -> None:
    rebuild_table(conn, PAYENTRY)

    conn.exec_driver_sql(
        """
        INSERT INTO "payentry" ("project", "user", "description", "duration", "type",
                                "paymentdate", "createdate", "changeddate", "creator")
        SELECT "project", "user", "description", "duration", 0,
               "paymentdate" - 1, "createdate", "changeddate", "creator"
        FROM "payentry" WHERE "type" = 1
        """
    )
