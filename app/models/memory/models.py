from dataclasses import dataclass
from datetime import datetime

from app.models.memory.responses import MemoryEntryResponse


@dataclass
class MemoryEntry:
    id: str
    user_id: str
    key: str
    value: str
    created_at: datetime
    updated_at: datetime

    @property
    def size_bytes(self) -> int:
        return len(self.value.encode("utf-8"))

    def to_response(self) -> MemoryEntryResponse:
        return MemoryEntryResponse(
            id=self.id,
            key=self.key,
            value=self.value,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
