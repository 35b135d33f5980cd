"""Versioned SQLite schema migrations."""

from timeclonk.migrations.runner import LATEST_LEVEL, MIGRATIONS, Migration, initialize

__all__ = ["LATEST_LEVEL", "MIGRATIONS", "Migration", "initialize"]
