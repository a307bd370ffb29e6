import sqlite3
from pathlib import Path

import pytest

from atbat_predictor.db.connection import create_connection, get_schema_version, migrate


class TestCreateConnection:
    def test_returns_connection(self, tmp_path: Path) -> None:
        conn = create_connection(tmp_path / "test.db")
        assert isinstance(conn, sqlite3.Connection)
        conn.close()

    def test_creates_parent_directory(self, tmp_path: Path) -> None:
        db_path = tmp_path / "nested" / "dir" / "test.db"
        conn = create_connection(db_path)
        assert db_path.parent.is_dir()
        conn.close()

    def test_enables_wal_mode(self, tmp_path: Path) -> None:
        conn = create_connection(tmp_path / "test.db")
        result = conn.execute("PRAGMA journal_mode").fetchone()
        assert result is not None
        assert result[0] == "wal"
        conn.close()

    def test_sets_busy_timeout(self, tmp_path: Path) -> None:
        conn = create_connection(tmp_path / "test.db", busy_timeout_ms=1234)
        result = conn.execute("PRAGMA busy_timeout").fetchone()
        assert result is not None
        assert result[0] == 1234
        conn.close()

    def test_rows_are_addressable_by_name(self) -> None:
        conn = create_connection(":memory:")
        row = conn.execute("SELECT 1 AS answer").fetchone()
        assert row["answer"] == 1
        conn.close()

    def test_creates_all_tables(self, tmp_path: Path) -> None:
        conn = create_connection(tmp_path / "test.db")
        tables = {
            row[0]
            for row in conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"
            ).fetchall()
        }
        assert {"schema_version", "at_bat_predictions", "sync_log", "resolution_log", "game_state"} <= tables
        conn.close()

    def test_idempotent_reopen(self, tmp_path: Path) -> None:
        db_path = tmp_path / "test.db"
        conn1 = create_connection(db_path)
        version = get_schema_version(conn1)
        conn1.close()
        conn2 = create_connection(db_path)
        assert get_schema_version(conn2) == version
        assert conn2.execute("SELECT COUNT(*) FROM schema_version").fetchone()[0] == version
        conn2.close()


class TestMigrations:
    def test_applies_pending_migrations_in_order(self, tmp_path: Path) -> None:
        migrations = tmp_path / "migrations"
        migrations.mkdir()
        (migrations / "001_first.sql").write_text("CREATE TABLE a (id INTEGER PRIMARY KEY);")
        (migrations / "002_second.sql").write_text("ALTER TABLE a ADD COLUMN name TEXT;")

        conn = create_connection(":memory:", migrations_dir=migrations)

        assert get_schema_version(conn) == 2
        columns = [row["name"] for row in conn.execute("PRAGMA table_info(a)").fetchall()]
        assert columns == ["id", "name"]
        conn.close()

    def test_failed_migration_rolls_back(self, tmp_path: Path) -> None:
        migrations = tmp_path / "migrations"
        migrations.mkdir()
        (migrations / "001_first.sql").write_text("CREATE TABLE a (id INTEGER PRIMARY KEY);")
        (migrations / "002_broken.sql").write_text("CREATE TABLE b (id INTEGER);\nNOT SQL AT ALL;")
        db_path = tmp_path / "test.db"

        with pytest.raises(sqlite3.OperationalError):
            create_connection(db_path, migrations_dir=migrations)

        conn = sqlite3.connect(db_path)
        assert get_schema_version(conn) == 1
        tables = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()}
        assert "b" not in tables
        conn.close()

    def test_schema_version_zero_without_table(self) -> None:
        conn = sqlite3.connect(":memory:")
        assert get_schema_version(conn) == 0
        conn.close()

    def test_migrate_returns_new_version(self, tmp_path: Path) -> None:
        migrations = tmp_path / "migrations"
        migrations.mkdir()
        (migrations / "003_only.sql").write_text("CREATE TABLE c (id INTEGER PRIMARY KEY);")
        conn = sqlite3.connect(":memory:")
        assert migrate(conn, migrations) == 3
        assert migrate(conn, migrations) == 3
        conn.close()
