import json
from datetime import datetime, timezone

from app.db.database import Database, register_schema_sql
from app.models.chat.models import ChatMessage, SavedChat


@register_schema_sql
def _create_chat_histories_table() -> str:
    return """
        CREATE TABLE IF NOT EXISTS chat_histories (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            title TEXT NOT NULL,
            provider TEXT NOT NULL,
            model TEXT NOT NULL,
            messages TEXT NOT NULL,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            deleted_at TEXT,
            FOREIGN KEY (user_id) REFERENCES users(id)
        )
    """


@register_schema_sql
def _create_chat_histories_user_index() -> str:
    return """
        CREATE INDEX IF NOT EXISTS idx_chat_histories_user_id
        ON chat_histories(user_id, updated_at)
    """


class ChatRepo:
    """Repository for saved chat histories"""

    def __init__(self, db: Database) -> None:
        self.db = db

    def create_chat(
        self,
        chat_id: str,
        user_id: str,
        title: str,
        provider: str,
        model: str,
        messages: list[ChatMessage],
        created_at: datetime,
    ) -> SavedChat:
        self.db.execute_update(
            """
            INSERT INTO chat_histories
            (id, user_id, title, provider, model, messages, created_at, updated_at, deleted_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, NULL)
            """,
            (
                chat_id,
                user_id,
                title,
                provider,
                model,
                json.dumps([m.to_dict() for m in messages]),
                created_at.isoformat(),
                created_at.isoformat(),
            ),
        )

        return SavedChat(
            id=chat_id,
            user_id=user_id,
            title=title,
            provider=provider,
            model=model,
            created_at=created_at,
            updated_at=created_at,
            messages=list(messages),
        )

    def get_chat(self, chat_id: str, user_id: str) -> SavedChat | None:
        """Get a chat with its messages (only if the user owns it and it is not deleted)"""
        rows = self.db.execute_query(
            """
            SELECT id, user_id, title, provider, model, messages, created_at, updated_at, deleted_at
            FROM chat_histories
            WHERE id = ? AND user_id = ? AND deleted_at IS NULL
            """,
            (chat_id, user_id),
        )

        if not rows:
            return None
        return self._row_to_chat(rows[0], with_messages=True)

    def list_chats(self, user_id: str, limit: int, offset: int) -> list[SavedChat]:
        """List chat summaries (without messages), most recently updated first"""
        rows = self.db.execute_query(
            """
            SELECT id, user_id, title, provider, model, created_at, updated_at, deleted_at
            FROM chat_histories
            WHERE user_id = ? AND deleted_at IS NULL
            ORDER BY updated_at DESC
            LIMIT ? OFFSET ?
            """,
            (user_id, limit, offset),
        )
        return [self._row_to_chat(row, with_messages=False) for row in rows]

    def list_chats_with_messages(self, user_id: str) -> list[SavedChat]:
        rows = self.db.execute_query(
            """
            SELECT id, user_id, title, provider, model, messages, created_at, updated_at, deleted_at
            FROM chat_histories
            WHERE user_id = ? AND deleted_at IS NULL
            ORDER BY updated_at DESC
            """,
            (user_id,),
        )
        return [self._row_to_chat(row, with_messages=True) for row in rows]

    def count_chats(self, user_id: str) -> int:
        rows = self.db.execute_query(
            "SELECT COUNT(*) AS total FROM chat_histories WHERE user_id = ? AND deleted_at IS NULL",
            (user_id,),
        )
        return rows[0]["total"]

    def search_chats(self, user_id: str, query: str, limit: int) -> list[SavedChat]:
        """Case-insensitive substring search over titles"""
        escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        rows = self.db.execute_query(
            """
            SELECT id, user_id, title, provider, model, created_at, updated_at, deleted_at
            FROM chat_histories
            WHERE user_id = ? AND deleted_at IS NULL AND title LIKE ? ESCAPE '\\'
            ORDER BY updated_at DESC
            LIMIT ?
            """,
            (user_id, f"%{escaped}%", limit),
        )
        return [self._row_to_chat(row, with_messages=False) for row in rows]

    def soft_delete_chat(self, chat_id: str, user_id: str) -> bool:
        updated = self.db.execute_update(
            "UPDATE chat_histories SET deleted_at = ? WHERE id = ? AND user_id = ? AND deleted_at IS NULL",
            (datetime.now(timezone.utc).isoformat(), chat_id, user_id),
        )
        return updated > 0

    def _row_to_chat(self, row, with_messages: bool) -> SavedChat:
        messages = []
        if with_messages:
            messages = [ChatMessage.from_dict(m) for m in json.loads(row["messages"])]

        return SavedChat(
            id=row["id"],
            user_id=row["user_id"],
            title=row["title"],
            provider=row["provider"],
            model=row["model"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
            deleted_at=datetime.fromisoformat(row["deleted_at"]) if row["deleted_at"] else None,
            messages=messages,
        )
