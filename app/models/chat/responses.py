from datetime import datetime
from pydantic import BaseModel


class ChatMessageResponse(BaseModel):
    id: str
    role: str
    content: str
    timestamp: datetime
    model: str | None = None


class TokenUsageResponse(BaseModel):
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


class ChatCompletionResponse(BaseModel):
    message: ChatMessageResponse
    usage: TokenUsageResponse | None = None


class SavedChatSummaryResponse(BaseModel):
    id: str
    title: str
    provider: str
    model: str
    created_at: datetime
    updated_at: datetime


class SavedChatResponse(SavedChatSummaryResponse):
    messages: list[ChatMessageResponse]


class PaginationResponse(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class ChatHistoryPageResponse(BaseModel):
    chats: list[SavedChatSummaryResponse]
    pagination: PaginationResponse


class DeleteChatResponse(BaseModel):
    id: str
    message: str
