import sqlite3
from typing import Optional

from core.config import ROOTED_DB_PATH


class Database:
    """
    Handle on the Rooted SQLite store.

    Constructed once at startup and passed to each component. Every
    operation opens its own connection, so a handle is safe to share
    between the request threads and the background reminder workers.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = path or ROOTED_DB_PATH

    def connect(self) -> sqlite3.Connection:
        """
        Return a sqlite3 connection with row access by column name.
        """
        conn = sqlite3.connect(self.path, timeout=30)
        conn.row_factory = sqlite3.Row
        return conn

    def init_schema(self) -> bool:
        """Apply any pending migrations to this store."""
        from utils.run_migrations import run

        return run(db=self, quiet=True)

    def __repr__(self) -> str:
        return f"Database({self.path!r})"

