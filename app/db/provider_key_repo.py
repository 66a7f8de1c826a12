import json
from datetime import datetime, timezone

from app.db.database import Database, register_schema_sql
from app.models.provider import Provider
from app.models.provider_key.models import ProviderKey
from utils import not_none


@register_schema_sql
def _create_provider_keys_table() -> str:
    return """
        CREATE TABLE IF NOT EXISTS provider_keys (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            provider TEXT NOT NULL,
            secret TEXT NOT NULL,
            is_valid INTEGER NOT NULL,
            models TEXT NOT NULL,
            last_validated TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            UNIQUE (user_id, provider),
            FOREIGN KEY (user_id) REFERENCES users(id)
        )
    """


_SELECT_COLUMNS = """
    SELECT id, user_id, provider, secret, is_valid, models, last_validated, created_at, updated_at
    FROM provider_keys
"""


class ProviderKeyRepo:
    """Repository for per-user provider credentials (one per user and provider)"""

    def __init__(self, db: Database) -> None:
        self.db = db

    def get_key(self, user_id: str, provider: Provider) -> ProviderKey | None:
        rows = self.db.execute_query(
            f"{_SELECT_COLUMNS} WHERE user_id = ? AND provider = ?",
            (user_id, provider.value),
        )
        return self._row_to_key(rows[0]) if rows else None

    def list_keys_by_user(self, user_id: str) -> list[ProviderKey]:
        rows = self.db.execute_query(
            f"{_SELECT_COLUMNS} WHERE user_id = ? ORDER BY provider ASC",
            (user_id,),
        )
        return [self._row_to_key(row) for row in rows]

    def upsert_key(self, key_id: str, user_id: str, provider: Provider, secret: str) -> ProviderKey:
        """Insert or replace the secret; a stored key keeps its cached models"""
        now = datetime.now(timezone.utc).isoformat()
        self.db.execute_update(
            """
            INSERT INTO provider_keys
            (id, user_id, provider, secret, is_valid, models, last_validated, created_at, updated_at)
            VALUES (?, ?, ?, ?, 1, '[]', ?, ?, ?)
            ON CONFLICT (user_id, provider) DO UPDATE SET
                secret = excluded.secret,
                is_valid = 1,
                last_validated = excluded.last_validated,
                updated_at = excluded.updated_at
            """,
            (key_id, user_id, provider.value, secret, now, now, now),
        )
        return not_none(self.get_key(user_id, provider), "provider key")

    def update_models(self, user_id: str, provider: Provider, models: list[str]) -> ProviderKey | None:
        now = datetime.now(timezone.utc).isoformat()
        updated = self.db.execute_update(
            "UPDATE provider_keys SET models = ?, last_validated = ?, updated_at = ? WHERE user_id = ? AND provider = ?",
            (json.dumps(models), now, now, user_id, provider.value),
        )
        if updated == 0:
            return None
        return self.get_key(user_id, provider)

    def set_validity(self, user_id: str, provider: Provider, is_valid: bool) -> None:
        now = datetime.now(timezone.utc).isoformat()
        self.db.execute_update(
            "UPDATE provider_keys SET is_valid = ?, last_validated = ?, updated_at = ? WHERE user_id = ? AND provider = ?",
            (1 if is_valid else 0, now, now, user_id, provider.value),
        )

    def delete_key(self, user_id: str, provider: Provider) -> bool:
        deleted = self.db.execute_update(
            "DELETE FROM provider_keys WHERE user_id = ? AND provider = ?",
            (user_id, provider.value),
        )
        return deleted > 0

    def _row_to_key(self, row) -> ProviderKey:
        return ProviderKey(
            id=row["id"],
            user_id=row["user_id"],
            provider=Provider(row["provider"]),
            secret=row["secret"],
            is_valid=bool(row["is_valid"]),
            models=json.loads(row["models"] or "[]"),
            last_validated=datetime.fromisoformat(row["last_validated"]) if row["last_validated"] else None,
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
