import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional, Tuple, Union

from finance_dashboard.logging_setup import get_logger

logger = get_logger(__name__)

Connection = sqlite3.Connection

MEMORY_DB = ":memory:"
SCHEMA_PATH = Path(__file__).parent / "schema.sql"


class DatabaseConfig:
    """Where the SQLite database lives. ':memory:' keeps it in-process."""

    def __init__(self, db_path: Union[Path, str] = "data/finance.db"):
        self.in_memory = str(db_path) == MEMORY_DB
        self.db_path = Path(db_path)
        if not self.in_memory:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def connection_string(self) -> str:
        return MEMORY_DB if self.in_memory else str(self.db_path.absolute())


def configure_connection(conn: Connection) -> None:
    """Name-addressable rows and enforced constraints for every connection"""
    conn.execute("PRAGMA foreign_keys = ON")
    conn.row_factory = sqlite3.Row


class DatabaseManager:
    """
    Owns the one SQLite connection a store works through.

    The connection is opened lazily. Multi-statement writes go through
    transaction() so they land together or not at all.
    """

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self._connection: Optional[Connection] = None

    def get_connection(self) -> Connection:
        if self._connection is None:
            logger.debug("Opening database %s", self.config.connection_string)
            self._connection = sqlite3.connect(
                self.config.connection_string,
                check_same_thread=False,
            )
            configure_connection(self._connection)
        return self._connection

    def initialize(self, schema_path: Path = SCHEMA_PATH) -> Optional[Tuple[int, str]]:
        """Create any missing tables and return the resulting schema version"""
        conn = self.get_connection()
        execute_schema(conn, schema_path)
        return schema_version(conn)

    def close(self) -> None:
        if self._connection:
            self._connection.close()
            self._connection = None

    @contextmanager
    def transaction(self) -> Generator[Connection, None, None]:
        """
        Commit on success, roll back on any exception.

        Usage:
            with db_manager.transaction() as conn:
                conn.execute("DELETE FROM rules")
                conn.executemany("INSERT INTO rules ...", params)
        """
        conn = self.get_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    def __enter__(self) -> "DatabaseManager":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def execute_schema(conn: Connection, schema_path: Path = SCHEMA_PATH) -> None:
    """Run a .sql script. The bundled schema is idempotent."""
    conn.executescript(Path(schema_path).read_text())
    conn.commit()


def schema_version(conn: Connection) -> Optional[Tuple[int, str]]:
    """Latest (version, description) recorded in schema_version, if any"""
    row = conn.execute(
        "SELECT version, description FROM schema_version ORDER BY version DESC LIMIT 1"
    ).fetchone()
    if row is None:
        return None
    return row["version"], row["description"]
