from dataclasses import dataclass, field
from datetime import datetime

from app.models.chat.responses import (
    ChatCompletionResponse,
    ChatMessageResponse,
    SavedChatResponse,
    SavedChatSummaryResponse,
    TokenUsageResponse,
)


@dataclass(frozen=True)
class ChatMessage:
    id: str
    role: str  # "user", "assistant" or "system"
    content: str
    timestamp: datetime
    model: str | None = None

    def to_response(self) -> ChatMessageResponse:
        return ChatMessageResponse(
            id=self.id,
            role=self.role,
            content=self.content,
            timestamp=self.timestamp,
            model=self.model,
        )

    def to_dict(self) -> dict:
        """JSON-ready form used for chat history storage"""
        data = {
            "id": self.id,
            "role": self.role,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.model is not None:
            data["model"] = self.model
        return data

    @staticmethod
    def from_dict(data: dict) -> "ChatMessage":
        return ChatMessage(
            id=data["id"],
            role=data["role"],
            content=data["content"],
            timestamp=datetime.fromisoformat(data["timestamp"]),
            model=data.get("model"),
        )


@dataclass(frozen=True)
class TokenUsage:
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int

    @staticmethod
    def from_counts(prompt_tokens: int, completion_tokens: int) -> "TokenUsage":
        # Total is always recomputed, whatever the provider reports
        return TokenUsage(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
        )

    def to_response(self) -> TokenUsageResponse:
        return TokenUsageResponse(
            prompt_tokens=self.prompt_tokens,
            completion_tokens=self.completion_tokens,
            total_tokens=self.total_tokens,
        )


@dataclass(frozen=True)
class ChatResponse:
    """One assistant reply produced by a provider adapter"""
    message: ChatMessage
    usage: TokenUsage | None = None

    def to_response(self) -> ChatCompletionResponse:
        return ChatCompletionResponse(
            message=self.message.to_response(),
            usage=self.usage.to_response() if self.usage else None,
        )


@dataclass
class SavedChat:
    id: str
    user_id: str
    title: str
    provider: str
    model: str
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None
    messages: list[ChatMessage] = field(default_factory=list)

    def to_summary_response(self) -> SavedChatSummaryResponse:
        return SavedChatSummaryResponse(
            id=self.id,
            title=self.title,
            provider=self.provider,
            model=self.model,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    def to_response(self) -> SavedChatResponse:
        return SavedChatResponse(
            id=self.id,
            title=self.title,
            provider=self.provider,
            model=self.model,
            created_at=self.created_at,
            updated_at=self.updated_at,
            messages=[m.to_response() for m in self.messages],
        )
