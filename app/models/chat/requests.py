from datetime import datetime, timezone
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, Field

from app.models.chat.models import ChatMessage
from app.models.provider import Provider

MAX_MESSAGE_LENGTH = 32000


class ChatMessageInput(BaseModel):
    id: str | None = Field(None, description="Client-side message ID, generated if omitted")
    role: Literal["user", "assistant", "system"]
    content: str = Field(..., min_length=1, max_length=MAX_MESSAGE_LENGTH)
    timestamp: datetime | None = None
    model: str | None = None

    def to_chat_message(self) -> ChatMessage:
        return ChatMessage(
            id=self.id or str(uuid4()),
            role=self.role,
            content=self.content,
            timestamp=self.timestamp or datetime.now(timezone.utc),
            model=self.model,
        )


class ChatRequest(BaseModel):
    messages: list[ChatMessageInput] = Field(..., min_length=1, description="Conversation, oldest first")
    provider: Provider
    model: str = Field(..., min_length=1, description="Provider-specific model ID")
    use_memory: bool = Field(False, description="Prepend the user's memory entries as context")


class SaveChatRequest(BaseModel):
    title: str | None = Field(None, max_length=200, description="Defaults to the start of the first message")
    messages: list[ChatMessageInput] = Field(..., min_length=1)
    provider: Provider
    model: str = Field(..., min_length=1)
