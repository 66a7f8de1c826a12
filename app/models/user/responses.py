from datetime import datetime

from pydantic import BaseModel, Field

from app.models.chat.responses import SavedChatResponse
from app.models.memory.responses import MemoryEntryResponse


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    bio: str | None
    created_at: datetime
    updated_at: datetime


class RegisterUserResponse(BaseModel):
    """Returned once on registration; the access key is not retrievable later"""
    user: UserResponse
    access_key: str = Field(..., description="Access key for the X-API-Key header (only shown once)")


class UserExportResponse(BaseModel):
    user: UserResponse
    chat_histories: list[SavedChatResponse]
    memory_entries: list[MemoryEntryResponse]


class DeleteAccountResponse(BaseModel):
    message: str
