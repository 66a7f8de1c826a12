from datetime import datetime, timezone

from app.db.database import Database, register_schema_sql
from app.models.memory.models import MemoryEntry
from utils import not_none


@register_schema_sql
def _create_memory_entries_table() -> str:
    return """
        CREATE TABLE IF NOT EXISTS memory_entries (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            key TEXT NOT NULL,
            value TEXT NOT NULL,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            UNIQUE (user_id, key),
            FOREIGN KEY (user_id) REFERENCES users(id)
        )
    """


class MemoryRepo:
    """Repository for the per-user key-value memory store"""

    def __init__(self, db: Database) -> None:
        self.db = db

    def list_entries(self, user_id: str, limit: int | None = None) -> list[MemoryEntry]:
        """List entries, most recently updated first"""
        query = """
            SELECT id, user_id, key, value, created_at, updated_at
            FROM memory_entries
            WHERE user_id = ?
            ORDER BY updated_at DESC
        """
        params: tuple = (user_id,)
        if limit is not None:
            query += " LIMIT ?"
            params = (user_id, limit)

        rows = self.db.execute_query(query, params)
        return [self._row_to_entry(row) for row in rows]

    def get_entry(self, user_id: str, key: str) -> MemoryEntry | None:
        rows = self.db.execute_query(
            """
            SELECT id, user_id, key, value, created_at, updated_at
            FROM memory_entries
            WHERE user_id = ? AND key = ?
            """,
            (user_id, key),
        )
        return self._row_to_entry(rows[0]) if rows else None

    def upsert_entry(self, entry_id: str, user_id: str, key: str, value: str) -> MemoryEntry:
        now = datetime.now(timezone.utc).isoformat()
        self.db.execute_update(
            """
            INSERT INTO memory_entries (id, user_id, key, value, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT (user_id, key) DO UPDATE SET
                value = excluded.value,
                updated_at = excluded.updated_at
            """,
            (entry_id, user_id, key, value, now, now),
        )
        return not_none(self.get_entry(user_id, key), "memory entry")

    def delete_entry(self, user_id: str, key: str) -> bool:
        deleted = self.db.execute_update(
            "DELETE FROM memory_entries WHERE user_id = ? AND key = ?",
            (user_id, key),
        )
        return deleted > 0

    def clear_entries(self, user_id: str) -> int:
        return self.db.execute_update(
            "DELETE FROM memory_entries WHERE user_id = ?",
            (user_id,),
        )

    def _row_to_entry(self, row) -> MemoryEntry:
        return MemoryEntry(
            id=row["id"],
            user_id=row["user_id"],
            key=row["key"],
            value=row["value"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
