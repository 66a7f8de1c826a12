from datetime import datetime, timezone
from app.db.database import Database, register_schema_sql
from app.models.access_key import AccessKey


@register_schema_sql
def _create_access_keys_table() -> str:
    return """
        CREATE TABLE IF NOT EXISTS access_keys (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            key_hash TEXT UNIQUE NOT NULL,
            name TEXT NOT NULL,
            created_at TEXT NOT NULL,
            deleted_at TEXT,
            FOREIGN KEY (user_id) REFERENCES users(id)
        )
    """


@register_schema_sql
def _create_access_keys_user_index() -> str:
    return """
        CREATE INDEX IF NOT EXISTS idx_access_keys_user_id
        ON access_keys(user_id)
    """


_SELECT_COLUMNS = "SELECT id, user_id, key_hash, name, created_at, deleted_at FROM access_keys"


class AccessKeyRepo:
    def __init__(self, db: Database) -> None:
        self.db = db

    def get_access_key_by_hash(self, key_hash: str) -> AccessKey | None:
        rows = self.db.execute_query(f"{_SELECT_COLUMNS} WHERE key_hash = ?", (key_hash,))
        return self._row_to_access_key(rows[0]) if rows else None

    def get_access_key_by_id(self, key_id: str) -> AccessKey | None:
        rows = self.db.execute_query(f"{_SELECT_COLUMNS} WHERE id = ?", (key_id,))
        return self._row_to_access_key(rows[0]) if rows else None

    def list_access_keys_by_user(self, user_id: str, include_deleted: bool = False) -> list[AccessKey]:
        if include_deleted:
            query = f"{_SELECT_COLUMNS} WHERE user_id = ? ORDER BY created_at DESC"
        else:
            query = f"{_SELECT_COLUMNS} WHERE user_id = ? AND deleted_at IS NULL ORDER BY created_at DESC"

        rows = self.db.execute_query(query, (user_id,))
        return [self._row_to_access_key(row) for row in rows]

    def create_access_key(self, key_id: str, user_id: str, key_hash: str, name: str) -> AccessKey:
        created_at = datetime.now(timezone.utc)
        self.db.execute_update(
            "INSERT INTO access_keys (id, user_id, key_hash, name, created_at, deleted_at) VALUES (?, ?, ?, ?, ?, NULL)",
            (key_id, user_id, key_hash, name, created_at.isoformat())
        )

        return AccessKey(
            id=key_id,
            user_id=user_id,
            key_hash=key_hash,
            name=name,
            created_at=created_at,
        )

    def soft_delete_access_key(self, key_id: str) -> None:
        self.db.execute_update(
            "UPDATE access_keys SET deleted_at = ? WHERE id = ? AND deleted_at IS NULL",
            (datetime.now(timezone.utc).isoformat(), key_id)
        )

    def _row_to_access_key(self, row) -> AccessKey:
        return AccessKey(
            id=row["id"],
            user_id=row["user_id"],
            key_hash=row["key_hash"],
            name=row["name"],
            created_at=datetime.fromisoformat(row["created_at"]),
            deleted_at=datetime.fromisoformat(row["deleted_at"]) if row["deleted_at"] else None,
        )
