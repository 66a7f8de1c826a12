from datetime import datetime, timezone

from app.db.database import Database, register_schema_sql
from app.models.user.models import User


@register_schema_sql
def _create_users_table() -> str:
    return """
        CREATE TABLE IF NOT EXISTS users (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            email TEXT UNIQUE NOT NULL,
            bio TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
    """


class UserRepo:
    """Repository for user data access"""

    def __init__(self, db: Database) -> None:
        self.db = db

    def get_user_by_id(self, user_id: str) -> User | None:
        rows = self.db.execute_query(
            "SELECT id, name, email, bio, created_at, updated_at FROM users WHERE id = ?",
            (user_id,)
        )

        if not rows:
            return None
        return self._row_to_user(rows[0])

    def get_user_by_email(self, email: str) -> User | None:
        rows = self.db.execute_query(
            "SELECT id, name, email, bio, created_at, updated_at FROM users WHERE email = ?",
            (email,)
        )

        if not rows:
            return None
        return self._row_to_user(rows[0])

    def create_user(self, user_id: str, name: str, email: str) -> User:
        now = datetime.now(timezone.utc)
        self.db.execute_update(
            "INSERT INTO users (id, name, email, bio, created_at, updated_at) VALUES (?, ?, ?, NULL, ?, ?)",
            (user_id, name, email, now.isoformat(), now.isoformat())
        )

        return User(id=user_id, name=name, email=email, bio=None, created_at=now, updated_at=now)

    def update_user(self, user_id: str, name: str | None = None, bio: str | None = None) -> User | None:
        updates = []
        params: list = []

        if name is not None:
            updates.append("name = ?")
            params.append(name)

        if bio is not None:
            updates.append("bio = ?")
            params.append(bio)

        if updates:
            updates.append("updated_at = ?")
            params.append(datetime.now(timezone.utc).isoformat())
            params.append(user_id)
            self.db.execute_update(
                f"UPDATE users SET {', '.join(updates)} WHERE id = ?",
                tuple(params),
            )

        return self.get_user_by_id(user_id)

    def delete_user(self, user_id: str) -> None:
        """Delete a user together with everything they own"""
        self.db.execute_in_transaction([
            ("DELETE FROM memory_entries WHERE user_id = ?", (user_id,)),
            ("DELETE FROM chat_histories WHERE user_id = ?", (user_id,)),
            ("DELETE FROM provider_keys WHERE user_id = ?", (user_id,)),
            ("DELETE FROM access_keys WHERE user_id = ?", (user_id,)),
            ("DELETE FROM users WHERE id = ?", (user_id,)),
        ])

    def _row_to_user(self, row) -> User:
        return User(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            bio=row["bio"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
