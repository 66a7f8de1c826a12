from datetime import datetime

from pydantic import BaseModel


class MemoryEntryResponse(BaseModel):
    id: str
    key: str
    value: str
    created_at: datetime
    updated_at: datetime


class MemoryListResponse(BaseModel):
    entries: list[MemoryEntryResponse]
    total_bytes: int
    max_bytes: int


class MemoryDeletedResponse(BaseModel):
    message: str
