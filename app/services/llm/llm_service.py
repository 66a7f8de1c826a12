import logging
import time
from collections.abc import Sequence
from typing import assert_never

import httpx

from app.models.chat.models import ChatMessage, ChatResponse
from app.models.provider import Provider
from app.services.llm.anthropic_adapter import AnthropicAdapter
from app.services.llm.errors import InvalidConversation, InvalidCredential, UnsupportedProvider, UpstreamError
from app.services.llm.google_adapter import GoogleAdapter
from app.services.llm.llm_service_base import ProviderAdapter
from app.services.llm.openai_compatible import OpenAiAdapter, OpenRouterAdapter
from app.settings import Settings

logger = logging.getLogger(__name__)


def parse_provider(value: str | Provider) -> Provider:
    """Turn a provider token into a Provider, raising UnsupportedProvider for anything else"""
    if isinstance(value, Provider):
        return value
    try:
        return Provider(value)
    except ValueError as e:
        raise UnsupportedProvider(value) from e


class LlmService:
    """Single entry point for provider calls; picks the adapter for a provider"""

    def __init__(
        self,
        openrouter: ProviderAdapter,
        openai: ProviderAdapter,
        anthropic: ProviderAdapter,
        google: ProviderAdapter,
    ) -> None:
        self._openrouter = openrouter
        self._openai = openai
        self._anthropic = anthropic
        self._google = google

    @staticmethod
    def from_settings(
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "LlmService":
        timeout = settings.provider_timeout_seconds
        return LlmService(
            openrouter=OpenRouterAdapter(settings.openrouter_base_url, timeout, transport),
            openai=OpenAiAdapter(settings.openai_base_url, timeout, transport),
            anthropic=AnthropicAdapter(
                settings.anthropic_base_url,
                timeout,
                max_tokens=settings.anthropic_max_tokens,
                transport=transport,
            ),
            google=GoogleAdapter(
                settings.google_base_url,
                timeout,
                max_output_tokens=settings.google_max_output_tokens,
                transport=transport,
            ),
        )

    def _adapter_for(self, provider: Provider) -> ProviderAdapter:
        match provider:
            case Provider.OPENROUTER:
                return self._openrouter
            case Provider.OPENAI:
                return self._openai
            case Provider.ANTHROPIC:
                return self._anthropic
            case Provider.GOOGLE:
                return self._google
            case _:
                assert_never(provider)

    async def chat(
        self,
        provider: str | Provider,
        credential: str,
        model: str,
        messages: Sequence[ChatMessage],
    ) -> ChatResponse:
        """
        Send a conversation to a provider and return exactly one assistant reply.

        The input sequence is never modified; adapters get a tuple snapshot of it.
        Raises UnsupportedProvider, UpstreamError or EmptyCompletionError.
        """
        adapter = self._adapter_for(parse_provider(provider))
        if not messages:
            raise InvalidConversation("At least one message is required")

        started = time.monotonic()
        try:
            response = await adapter.chat(credential, model, tuple(messages))
        except UpstreamError as e:
            logger.warning(
                "Provider call failed",
                extra={
                    "provider": adapter.provider.value,
                    "model": model,
                    "status_code": e.status_code,
                    "duration_ms": round((time.monotonic() - started) * 1000),
                },
            )
            raise

        logger.info(
            "Provider call completed",
            extra={
                "provider": adapter.provider.value,
                "model": model,
                "duration_ms": round((time.monotonic() - started) * 1000),
                "total_tokens": response.usage.total_tokens if response.usage else None,
            },
        )
        return response

    async def validate_key(self, provider: str | Provider, raw_key: str) -> list[str]:
        """Probe a raw key and return the models it can use. Raises InvalidCredential."""
        adapter = self._adapter_for(parse_provider(provider))
        try:
            models = await adapter.validate_key(raw_key)
        except UpstreamError as e:
            raise InvalidCredential(adapter.provider.value, e.body) from e

        logger.info(
            "Provider key validated",
            extra={"provider": adapter.provider.value, "model_count": len(models)},
        )
        return models
