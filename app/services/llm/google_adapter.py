from collections.abc import Sequence
from urllib.parse import quote
from uuid import uuid4

import httpx

from app.models.chat.models import ChatMessage, ChatResponse
from app.models.provider import Provider
from app.services.llm.catalog import GOOGLE_MODELS, GOOGLE_PROBE_MODEL
from app.services.llm.errors import EmptyCompletionError, InvalidConversation, InvalidCredential, UpstreamError
from app.services.llm.llm_service_base import ProviderAdapter
from app.services.llm.message_mappers import build_google_history, extract_system


class GoogleAdapter(ProviderAdapter):
    """
    Gemini `generateContent` used as a chat session: earlier turns are history,
    the last turn is the new user input and the system prompt becomes
    `systemInstruction`. This path reports no token usage.
    """

    provider = Provider.GOOGLE

    def __init__(
        self,
        base_url: str,
        timeout: float,
        max_output_tokens: int,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(base_url, timeout, transport)
        self._max_output_tokens = max_output_tokens

    def _path(self, model: str) -> str:
        model_id = model.removeprefix("models/")
        return f"/models/{quote(model_id, safe='')}:generateContent"

    async def chat(self, credential: str, model: str, messages: Sequence[ChatMessage]) -> ChatResponse:
        conversation = extract_system(messages)
        if not conversation.turns:
            raise InvalidConversation("Conversation has no user or assistant turns to send")

        *history, last = conversation.turns
        payload = {
            "contents": [
                *build_google_history(history),
                {"role": "user", "parts": [{"text": last.content}]},
            ],
            "generationConfig": {"maxOutputTokens": self._max_output_tokens},
        }
        if conversation.system is not None:
            payload["systemInstruction"] = {"parts": [{"text": conversation.system}]}

        data = await self._request_json(
            "POST",
            self._path(model),
            {"x-goog-api-key": credential},
            payload,
        )

        # A blocked prompt comes back as a 200 with no candidates
        candidates = data.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            raise EmptyCompletionError(self.provider.value, 200, str(data))

        parts = (candidates[0].get("content") or {}).get("parts") or []
        text = "".join(part.get("text", "") for part in parts if isinstance(part, dict))

        return ChatResponse(
            message=self._assistant_message(
                text,
                model,
                data.get("responseId") or f"gemini-{uuid4().hex}",
            ),
        )

    async def validate_key(self, raw_key: str) -> list[str]:
        try:
            await self._request_json(
                "POST",
                self._path(GOOGLE_PROBE_MODEL),
                {"x-goog-api-key": raw_key},
                {
                    "contents": [{"role": "user", "parts": [{"text": "Hi"}]}],
                    "generationConfig": {"maxOutputTokens": 1},
                },
            )
        except UpstreamError as e:
            raise InvalidCredential(self.provider.value, e.body) from e

        return list(GOOGLE_MODELS)
