import logging
import math
from datetime import datetime, timezone
from uuid import uuid4

from app.db.chat_repo import ChatRepo
from app.models.chat.models import ChatResponse, SavedChat
from app.models.chat.requests import ChatRequest, SaveChatRequest
from app.models.chat.responses import ChatHistoryPageResponse, PaginationResponse
from app.services.llm.llm_service import LlmService
from app.services.memory_service import MemoryService
from app.services.provider_key_service import ProviderKeyService

logger = logging.getLogger(__name__)

HISTORY_PAGE_SIZE = 20
SEARCH_RESULT_LIMIT = 20
DEFAULT_TITLE_LENGTH = 50
UNTITLED_CHAT_TITLE = "Untitled Chat"


class ChatService:
    def __init__(
        self,
        llm_service: LlmService,
        chat_repo: ChatRepo,
        provider_key_service: ProviderKeyService,
        memory_service: MemoryService,
    ) -> None:
        self._llm_service = llm_service
        self._chat_repo = chat_repo
        self._provider_key_service = provider_key_service
        self._memory_service = memory_service

    async def chat(self, user_id: str, request: ChatRequest) -> ChatResponse:
        """
        Run one chat turn with the caller's stored key for the requested provider.

        Raises ProviderKeyNotUsable when there is no valid key, and lets provider
        errors propagate for the route to map.
        """
        key = self._provider_key_service.get_usable_key(user_id, request.provider)

        messages = [m.to_chat_message() for m in request.messages]
        if request.use_memory:
            messages = self._memory_service.augment(user_id, messages)

        return await self._llm_service.chat(request.provider, key.secret, request.model, messages)

    async def save_chat(self, user_id: str, request: SaveChatRequest) -> SavedChat:
        messages = [m.to_chat_message() for m in request.messages]
        title = request.title or messages[0].content[:DEFAULT_TITLE_LENGTH] or UNTITLED_CHAT_TITLE

        chat = self._chat_repo.create_chat(
            chat_id=str(uuid4()),
            user_id=user_id,
            title=title,
            provider=request.provider.value,
            model=request.model,
            messages=messages,
            created_at=datetime.now(timezone.utc),
        )
        logger.info("Chat saved", extra={"user_id": user_id, "chat_id": chat.id})
        return chat

    async def get_history(self, user_id: str, page: int) -> ChatHistoryPageResponse:
        total = self._chat_repo.count_chats(user_id)
        chats = self._chat_repo.list_chats(
            user_id,
            limit=HISTORY_PAGE_SIZE,
            offset=(page - 1) * HISTORY_PAGE_SIZE,
        )

        return ChatHistoryPageResponse(
            chats=[c.to_summary_response() for c in chats],
            pagination=PaginationResponse(
                page=page,
                limit=HISTORY_PAGE_SIZE,
                total=total,
                total_pages=math.ceil(total / HISTORY_PAGE_SIZE),
            ),
        )

    async def get_chat(self, user_id: str, chat_id: str) -> SavedChat | None:
        return self._chat_repo.get_chat(chat_id, user_id)

    async def search(self, user_id: str, query: str) -> list[SavedChat]:
        return self._chat_repo.search_chats(user_id, query, SEARCH_RESULT_LIMIT)

    async def delete_chat(self, user_id: str, chat_id: str) -> bool:
        return self._chat_repo.soft_delete_chat(chat_id, user_id)
