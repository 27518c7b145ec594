import sqlite3
import threading
from pathlib import Path
from sqlite3 import Connection


class SqliteClient:
    """SQLite database client with connection management."""

    def __init__(self, connection_string: str):
        self.connection_string = connection_string
        if connection_string != ":memory:":
            Path(connection_string).parent.mkdir(parents=True, exist_ok=True)
        # The API serves requests from a worker thread pool
        self._connection = sqlite3.connect(self.connection_string, check_same_thread=False)
        self._connection.execute("PRAGMA foreign_keys = ON")
        self._lock = threading.Lock()

    @property
    def connection(self) -> Connection:
        """Get the database connection."""
        return self._connection

    def execute_query(self, query: str, params=None):
        """Execute a query and return all results."""
        with self._lock:
            cursor = self._connection.cursor()
            try:
                if params:
                    cursor.execute(query, params)
                else:
                    cursor.execute(query)

                # Commit for write operations (INSERT, UPDATE, DELETE)
                if query.strip().upper().startswith(("INSERT", "UPDATE", "DELETE")):
                    self._connection.commit()

                return cursor.fetchall()
            finally:
                cursor.close()

    def close(self):
        """Close the database connection."""
        with self._lock:
            self._connection.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit with cleanup."""
        self.close()
        return False
