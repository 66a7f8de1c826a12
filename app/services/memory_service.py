import logging
import uuid
from collections.abc import Sequence
from datetime import datetime, timezone

from app.db.memory_repo import MemoryRepo
from app.models.chat.models import ChatMessage
from app.models.memory.models import MemoryEntry
from prompts.chat_prompts import MEMORY_CONTEXT_TEMPLATE, MEMORY_ENTRY_TEMPLATE

logger = logging.getLogger(__name__)


class MemoryLimitExceeded(Exception):
    def __init__(self, total_bytes: int, max_bytes: int) -> None:
        super().__init__(f"Memory size limit exceeded ({total_bytes} of {max_bytes} bytes)")
        self.total_bytes = total_bytes
        self.max_bytes = max_bytes


class MemoryService:
    """Per-user key-value memory and the chat context built from it"""

    def __init__(self, memory_repo: MemoryRepo, max_bytes: int, context_limit: int) -> None:
        self.memory_repo = memory_repo
        self.max_bytes = max_bytes
        self.context_limit = context_limit

    def list_entries(self, user_id: str) -> list[MemoryEntry]:
        return self.memory_repo.list_entries(user_id)

    def total_bytes(self, user_id: str) -> int:
        return sum(e.size_bytes for e in self.memory_repo.list_entries(user_id))

    def set_entry(self, user_id: str, key: str, value: str) -> MemoryEntry:
        """
        Insert or overwrite the value for `key`.
        Raises MemoryLimitExceeded if the user's values would exceed `max_bytes` in total.
        """
        entries = self.memory_repo.list_entries(user_id)
        # The stored value for the same key is replaced, so it does not count
        total = sum(e.size_bytes for e in entries if e.key != key) + len(value.encode("utf-8"))
        if total > self.max_bytes:
            raise MemoryLimitExceeded(total, self.max_bytes)

        return self.memory_repo.upsert_entry(str(uuid.uuid4()), user_id, key, value)

    def delete_entry(self, user_id: str, key: str) -> bool:
        return self.memory_repo.delete_entry(user_id, key)

    def clear(self, user_id: str) -> int:
        return self.memory_repo.clear_entries(user_id)

    def augment(self, user_id: str, messages: Sequence[ChatMessage]) -> list[ChatMessage]:
        """
        Return a new message list with the user's memory prepended as a system message.
        Only the `context_limit` most recently updated entries are used.
        """
        entries = self.memory_repo.list_entries(user_id, limit=self.context_limit)
        if not entries:
            return list(messages)

        memory = "\n".join(MEMORY_ENTRY_TEMPLATE.format(key=e.key, value=e.value) for e in entries)
        context_message = ChatMessage(
            id=str(uuid.uuid4()),
            role="system",
            content=MEMORY_CONTEXT_TEMPLATE.format(memory=memory),
            timestamp=datetime.now(timezone.utc),
        )
        logger.debug("Memory context added", extra={"user_id": user_id, "entries": len(entries)})
        return [context_message, *messages]
