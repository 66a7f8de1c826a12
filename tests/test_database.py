import sqlite3

import pytest

from app.db.database import DB_VERSION, Database, DatabaseNotInitializedError


def test_queries_before_setup_fail(tmp_path):
    db = Database(str(tmp_path / "fresh.db"))

    with pytest.raises(DatabaseNotInitializedError):
        db.execute_query("SELECT 1")
    assert not db.is_healthy()


def test_setup_creates_directory_and_schema(tmp_path):
    db = Database(str(tmp_path / "nested" / "app.db"))

    db.setup()

    tables = {row["name"] for row in db.execute_query("SELECT name FROM sqlite_master WHERE type = 'table'")}
    assert {"db_version", "users"} <= tables
    assert db.execute_query("SELECT version FROM db_version")[0]["version"] == DB_VERSION
    assert db.is_healthy()


def test_setup_discards_database_from_other_version(tmp_path):
    path = tmp_path / "old.db"
    conn = sqlite3.connect(path)
    conn.execute("CREATE TABLE db_version (version INTEGER NOT NULL)")
    conn.execute("INSERT INTO db_version (version) VALUES (?)", (DB_VERSION + 1,))
    conn.execute("CREATE TABLE leftovers (id TEXT)")
    conn.commit()
    conn.close()

    db = Database(str(path))
    db.setup()

    tables = {row["name"] for row in db.execute_query("SELECT name FROM sqlite_master WHERE type = 'table'")}
    assert "leftovers" not in tables


def test_transaction_is_rolled_back_on_error(database, user_id):
    with pytest.raises(sqlite3.IntegrityError):
        database.execute_in_transaction([
            ("UPDATE users SET name = ? WHERE id = ?", ("Changed", user_id)),
            ("INSERT INTO users (id, name, email, bio, created_at, updated_at) VALUES (?, ?, ?, NULL, ?, ?)",
             ("user-2", "Dup", "grace@example.com", "2024-01-01", "2024-01-01")),
        ])

    assert database.execute_query("SELECT name FROM users WHERE id = ?", (user_id,))[0]["name"] == "Grace"
