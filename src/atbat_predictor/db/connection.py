import sqlite3
from collections.abc import Iterator
from pathlib import Path

_MIGRATIONS_DIR = Path(__file__).parent / "migrations"

DEFAULT_BUSY_TIMEOUT_MS = 5000

_SCHEMA_VERSION_DDL = """CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY,
    applied_at TEXT NOT NULL DEFAULT (datetime('now'))
)"""


def create_connection(
    path: str | Path,
    *,
    check_same_thread: bool = True,
    busy_timeout_ms: int = DEFAULT_BUSY_TIMEOUT_MS,
    migrations_dir: Path | None = None,
) -> sqlite3.Connection:
    """Open the prediction database and bring its schema up to date.

    File databases get their parent directory created and run in WAL mode so
    the sync thread and CLI callers can read while a resolution write is in
    flight. Lock waits are bounded by *busy_timeout_ms*.
    """
    in_memory = str(path) == ":memory:"
    if not in_memory:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path), check_same_thread=check_same_thread)
    conn.row_factory = sqlite3.Row
    conn.execute(f"PRAGMA busy_timeout={int(busy_timeout_ms)}")
    if not in_memory:
        conn.execute("PRAGMA journal_mode=WAL")
    migrate(conn, migrations_dir or _MIGRATIONS_DIR)
    return conn


def get_schema_version(conn: sqlite3.Connection) -> int:
    """Return the current schema version, or 0 if no migrations have run."""
    try:
        row = conn.execute("SELECT MAX(version) FROM schema_version").fetchone()
    except sqlite3.OperationalError:
        return 0
    return row[0] if row and row[0] is not None else 0


def migrate(conn: sqlite3.Connection, migrations_dir: Path) -> int:
    """Apply every numbered ``NNN_name.sql`` file newer than the stored version. Returns the new version."""
    conn.execute(_SCHEMA_VERSION_DDL)
    conn.commit()
    for version, statements in _pending(migrations_dir, get_schema_version(conn)):
        _apply(conn, version, statements)
    return get_schema_version(conn)


def _pending(migrations_dir: Path, current_version: int) -> Iterator[tuple[int, list[str]]]:
    for migration_file in sorted(migrations_dir.glob("*.sql")):
        version = int(migration_file.stem.split("_", 1)[0])
        if version > current_version:
            yield version, [s.strip() for s in migration_file.read_text().split(";") if s.strip()]


def _apply(conn: sqlite3.Connection, version: int, statements: list[str]) -> None:
    # Pool connections may migrate a fresh file concurrently; re-check under the write lock.
    saved_isolation = conn.isolation_level
    conn.isolation_level = None
    try:
        conn.execute("BEGIN IMMEDIATE")
        if get_schema_version(conn) >= version:
            conn.execute("ROLLBACK")
            return
        for statement in statements:
            conn.execute(statement)
        conn.execute("INSERT INTO schema_version (version) VALUES (?)", (version,))
        conn.execute("COMMIT")
    except Exception:
        conn.execute("ROLLBACK")
        raise
    finally:
        conn.isolation_level = saved_isolation
