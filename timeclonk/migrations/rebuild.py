"""In-place table rebuild for SQLite schema changes.

SQLite cannot add a NOT NULL column, change a foreign key or rework a unique
index with ALTER TABLE, so such steps rebuild the table:

1. create ``<table>temp`` with the new shape,
2. copy the old rows into it, supplying values for the new columns,
3. drop the old table and create it again under its name with the new shape,
   re-declaring the unique indexes (dropping a table drops its indexes),
4. copy the rows back and drop the temp table.

Must run on a connection with foreign key checking off.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from sqlalchemy import Connection


def quote(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def column_list(columns: Sequence[str]) -> str:
    return ", ".join(quote(column) for column in columns)


@dataclass(frozen=True)
class TableRebuild:
    """Description of one table rebuild.

    ``create_sql`` is a ``CREATE TABLE`` statement with a ``{table}``
    placeholder for the (quoted) table name. ``new_columns`` maps each added
    column to the SQL expression that fills it for existing rows.
    """

    table: str
    create_sql: str
    copy_columns: tuple[str, ...]
    new_columns: Mapping[str, str] = field(default_factory=dict)
    indexes: tuple[str, ...] = ()

    @property
    def temp_table(self) -> str:
        return f"{self.table}temp"

    @property
    def final_columns(self) -> tuple[str, ...]:
        return self.copy_columns + tuple(self.new_columns)


def rebuild_table(conn: Connection, rebuild: TableRebuild) -> None:
    table = quote(rebuild.table)
    temp = quote(rebuild.temp_table)

    conn.exec_driver_sql(rebuild.create_sql.format(table=temp))

    source = [quote(column) for column in rebuild.copy_columns]
    source.extend(rebuild.new_columns.values())
    conn.exec_driver_sql(
        f"INSERT INTO {temp} ({column_list(rebuild.final_columns)}) "
        f"SELECT {', '.join(source)} FROM {table}"
    )

    conn.exec_driver_sql(f"DROP TABLE {table}")
    conn.exec_driver_sql(rebuild.create_sql.format(table=table))
    for index_sql in rebuild.indexes:
        conn.exec_driver_sql(index_sql)

    columns = column_list(rebuild.final_columns)
    conn.exec_driver_sql(f"INSERT INTO {table} ({columns}) SELECT {columns} FROM {temp}")
    conn.exec_driver_sql(f"DROP TABLE {temp}")


def execute_all(conn: Connection, statements: Sequence[str]) -> None:
    for statement in statements:
        conn.exec_driver_sql(statement)
