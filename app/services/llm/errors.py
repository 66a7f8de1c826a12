"""Errors raised by provider adapters.

Adapters never retry or recover; every failure propagates to the caller as one
of these types so the caller can pick between retrying and surfacing it.
"""

import re

_TOKEN_LIMIT_RE = re.compile(r"(?i)token|context[ _]length|too long|max_tokens")


class ProviderError(Exception):
    """Base class for provider adapter failures"""


class UnsupportedProvider(ProviderError):
    def __init__(self, provider: object) -> None:
        super().__init__(f"Unsupported provider: {provider}")
        self.provider = provider


class UpstreamError(ProviderError):
    """The provider call failed. `status_code` is None when no HTTP response arrived."""

    def __init__(self, provider: str, status_code: int | None, body: str) -> None:
        status = status_code if status_code is not None else "no response"
        super().__init__(f"{provider} error ({status}): {body}")
        self.provider = provider
        self.status_code = status_code
        self.body = body

    @property
    def is_rate_limited(self) -> bool:
        return self.status_code == 429

    @property
    def is_token_limit(self) -> bool:
        return self.status_code in (400, 413) and bool(_TOKEN_LIMIT_RE.search(self.body))


class EmptyCompletionError(UpstreamError):
    """The provider answered successfully but with no usable completion"""

    def __init__(self, provider: str, status_code: int, body: str) -> None:
        super().__init__(provider, status_code, body)


class InvalidCredential(ProviderError):
    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"Invalid API key: {message}")
        self.provider = provider
        self.message = message


class InvalidConversation(ProviderError):
    """The message list cannot be sent as-is (empty, or nothing but system messages)"""
