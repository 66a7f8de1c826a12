from collections.abc import Sequence

from openai import APIError, APIStatusError, AsyncOpenAI

from app.models.chat.models import ChatMessage, ChatResponse, TokenUsage
from app.models.provider import Provider
from app.services.llm.catalog import OPENAI_CHAT_MODEL_PREFIX, OPENROUTER_MODEL_LIMIT
from app.services.llm.errors import EmptyCompletionError, InvalidCredential, UpstreamError
from app.services.llm.llm_service_base import ProviderAdapter
from app.services.llm.message_mappers import build_inline_messages


class OpenAiCompatibleAdapter(ProviderAdapter):
    """Chat completions through the OpenAI SDK; system messages stay inline"""

    def _client(self, api_key: str) -> AsyncOpenAI:
        return AsyncOpenAI(
            api_key=api_key,
            base_url=self._base_url,
            timeout=self._timeout,
            max_retries=0,
            http_client=self._http_client(),
        )

    async def chat(self, credential: str, model: str, messages: Sequence[ChatMessage]) -> ChatResponse:
        try:
            async with self._client(credential) as client:
                completion = await client.chat.completions.create(
                    model=model,
                    messages=build_inline_messages(messages),
                )
        except APIStatusError as e:
            raise UpstreamError(self.provider.value, e.status_code, e.response.text) from e
        except APIError as e:
            raise UpstreamError(self.provider.value, getattr(e, "status_code", None), e.message) from e

        # OpenRouter reports some upstream failures as a 200 without choices
        choices = getattr(completion, "choices", None)
        if not choices or getattr(choices[0], "message", None) is None:
            raise EmptyCompletionError(self.provider.value, 200, repr(completion))

        usage = getattr(completion, "usage", None)
        return ChatResponse(
            message=self._assistant_message(
                content=choices[0].message.content or "",
                model=model,
                message_id=getattr(completion, "id", None),
            ),
            usage=TokenUsage.from_counts(
                prompt_tokens=usage.prompt_tokens or 0,
                completion_tokens=usage.completion_tokens or 0,
            ) if usage else None,
        )


class OpenAiAdapter(OpenAiCompatibleAdapter):
    provider = Provider.OPENAI

    async def validate_key(self, raw_key: str) -> list[str]:
        try:
            async with self._client(raw_key) as client:
                page = await client.models.list()
        except APIError as e:
            raise InvalidCredential(self.provider.value, e.message) from e

        models = [m.id for m in page.data if m.id.startswith(OPENAI_CHAT_MODEL_PREFIX)]
        if not models:
            raise InvalidCredential(self.provider.value, "No chat models are available for this key")
        return models


class OpenRouterAdapter(OpenAiCompatibleAdapter):
    provider = Provider.OPENROUTER

    async def validate_key(self, raw_key: str) -> list[str]:
        try:
            data = await self._request_json(
                "GET",
                "/models",
                headers={"Authorization": f"Bearer {raw_key}"},
            )
            models = [m["id"] for m in data["data"][:OPENROUTER_MODEL_LIMIT]]
        except UpstreamError as e:
            raise InvalidCredential(self.provider.value, e.body) from e
        except (KeyError, TypeError) as e:
            raise InvalidCredential(self.provider.value, f"Malformed model list: {e}") from e

        if not models:
            raise InvalidCredential(self.provider.value, "No models are available for this key")
        return models
