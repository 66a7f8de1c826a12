from fastapi import APIRouter, HTTPException, Query, status

from app.api.dependencies import AuthContextDep, ChatRateLimitedContextDep, ChatServiceDep
from app.api.error_handlers import provider_error_to_http
from app.models.chat.requests import ChatRequest, SaveChatRequest
from app.models.chat.responses import (
    ChatCompletionResponse,
    ChatHistoryPageResponse,
    DeleteChatResponse,
    SavedChatResponse,
    SavedChatSummaryResponse,
)
from app.services.llm.errors import ProviderError
from app.services.provider_key_service import ProviderKeyNotUsable

router = APIRouter(
    prefix="/chat",
    tags=["chat"],
)


@router.post("", response_model=ChatCompletionResponse, response_model_exclude_none=True)
async def chat(
    request_body: ChatRequest,
    context: ChatRateLimitedContextDep,
    chat_service: ChatServiceDep,
) -> ChatCompletionResponse:
    """
    Send a conversation to the requested provider using the caller's stored key.

    `usage` is omitted when the provider does not report token counts.
    """
    try:
        response = await chat_service.chat(context.user_id, request_body)
    except ProviderKeyNotUsable as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or missing API key for this provider",
        ) from e
    except ProviderError as e:
        raise provider_error_to_http(e) from e

    return response.to_response()


@router.post("/save", response_model=SavedChatResponse, status_code=status.HTTP_201_CREATED)
async def save_chat(
    request_body: SaveChatRequest,
    context: AuthContextDep,
    chat_service: ChatServiceDep,
) -> SavedChatResponse:
    return (await chat_service.save_chat(context.user_id, request_body)).to_response()


@router.get("/history", response_model=ChatHistoryPageResponse)
async def get_history(
    context: AuthContextDep,
    chat_service: ChatServiceDep,
    page: int = Query(1, ge=1, description="1-based page number"),
) -> ChatHistoryPageResponse:
    return await chat_service.get_history(context.user_id, page)


@router.get("/search", response_model=list[SavedChatSummaryResponse])
async def search_chats(
    context: AuthContextDep,
    chat_service: ChatServiceDep,
    query: str = Query(..., min_length=1, description="Substring to look for in chat titles"),
) -> list[SavedChatSummaryResponse]:
    chats = await chat_service.search(context.user_id, query)
    return [c.to_summary_response() for c in chats]


@router.get("/{chat_id}", response_model=SavedChatResponse)
async def get_chat(
    chat_id: str,
    context: AuthContextDep,
    chat_service: ChatServiceDep,
) -> SavedChatResponse:
    chat = await chat_service.get_chat(context.user_id, chat_id)
    if chat:
        return chat.to_response()

    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Chat not found",
    )


@router.delete("/{chat_id}", response_model=DeleteChatResponse)
async def delete_chat(
    chat_id: str,
    context: AuthContextDep,
    chat_service: ChatServiceDep,
) -> DeleteChatResponse:
    if not await chat_service.delete_chat(context.user_id, chat_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Chat not found",
        )

    return DeleteChatResponse(id=chat_id, message="Chat deleted successfully")
