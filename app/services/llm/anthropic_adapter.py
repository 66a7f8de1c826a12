from collections.abc import Sequence

import httpx

from app.models.chat.models import ChatMessage, ChatResponse, TokenUsage
from app.models.provider import Provider
from app.services.llm.catalog import ANTHROPIC_API_VERSION, ANTHROPIC_MODELS, ANTHROPIC_PROBE_MODEL
from app.services.llm.errors import EmptyCompletionError, InvalidCredential, UpstreamError
from app.services.llm.llm_service_base import ProviderAdapter
from app.services.llm.message_mappers import build_anthropic_messages, extract_system


class AnthropicAdapter(ProviderAdapter):
    """Anthropic Messages API; the system prompt travels in the top-level `system` field"""

    provider = Provider.ANTHROPIC

    def __init__(
        self,
        base_url: str,
        timeout: float,
        max_tokens: int,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(base_url, timeout, transport)
        self._max_tokens = max_tokens

    def _headers(self, api_key: str) -> dict[str, str]:
        return {
            "x-api-key": api_key,
            "anthropic-version": ANTHROPIC_API_VERSION,
        }

    async def chat(self, credential: str, model: str, messages: Sequence[ChatMessage]) -> ChatResponse:
        conversation = extract_system(messages)
        payload = {
            "model": model,
            "messages": build_anthropic_messages(conversation.turns),
            "max_tokens": self._max_tokens,
        }
        if conversation.system is not None:
            payload["system"] = conversation.system

        data = await self._request_json("POST", "/messages", self._headers(credential), payload)

        content = data.get("content")
        if not isinstance(content, list) or not content:
            raise EmptyCompletionError(self.provider.value, 200, str(data))

        first_block = content[0] if isinstance(content[0], dict) else {}
        text = first_block.get("text") or ""

        usage = data.get("usage")
        return ChatResponse(
            message=self._assistant_message(text, model, data.get("id")),
            usage=TokenUsage.from_counts(
                prompt_tokens=usage.get("input_tokens") or 0,
                completion_tokens=usage.get("output_tokens") or 0,
            ) if isinstance(usage, dict) else None,
        )

    async def validate_key(self, raw_key: str) -> list[str]:
        try:
            await self._request_json(
                "POST",
                "/messages",
                self._headers(raw_key),
                {
                    "model": ANTHROPIC_PROBE_MODEL,
                    "messages": [{"role": "user", "content": "Hi"}],
                    "max_tokens": 1,
                },
            )
        except UpstreamError as e:
            raise InvalidCredential(self.provider.value, e.body) from e

        return list(ANTHROPIC_MODELS)
