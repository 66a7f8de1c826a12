from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

import httpx

from app.models.chat.models import ChatMessage, ChatResponse
from app.models.provider import Provider
from app.services.llm.errors import UpstreamError


class ProviderAdapter(ABC):
    """Translates chat requests to and from one provider's wire format.

    Adapters are stateless: each call builds its own HTTP client, performs
    exactly one request and closes the client again. `transport` lets tests
    replace the network with an `httpx.MockTransport`.
    """

    provider: Provider

    def __init__(
        self,
        base_url: str,
        timeout: float,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @abstractmethod
    async def chat(self, credential: str, model: str, messages: Sequence[ChatMessage]) -> ChatResponse:
        """
        Send the conversation to the provider and return a single assistant reply.
        The reply is tagged with the requested `model`, not the one the provider echoes.
        Raises UpstreamError (or EmptyCompletionError) on failure.
        """
        pass

    @abstractmethod
    async def validate_key(self, raw_key: str) -> list[str]:
        """
        Probe the provider with a raw key at minimal cost and return usable model IDs.
        Raises InvalidCredential when the probe does not succeed.
        """
        pass

    def _http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def _request_json(
        self,
        method: str,
        path: str,
        headers: dict[str, str],
        payload: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Perform one request and return the decoded JSON object of a 2xx reply"""
        try:
            async with self._http_client() as client:
                response = await client.request(method, f"{self._base_url}{path}", headers=headers, json=payload)
        except httpx.HTTPError as e:
            raise UpstreamError(self.provider.value, None, str(e) or type(e).__name__) from e

        if not response.is_success:
            raise UpstreamError(self.provider.value, response.status_code, response.text)

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(self.provider.value, response.status_code, response.text) from e

        if not isinstance(data, dict):
            raise UpstreamError(self.provider.value, response.status_code, response.text)
        return data

    @staticmethod
    def _assistant_message(content: str, model: str, message_id: str | None) -> ChatMessage:
        return ChatMessage(
            id=message_id or str(uuid4()),
            role="assistant",
            content=content,
            timestamp=datetime.now(timezone.utc),
            model=model,
        )
