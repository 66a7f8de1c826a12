from datetime import datetime, timezone
from uuid import uuid4

import httpx
import pytest

from app.models.chat.models import ChatMessage
from app.models.provider import Provider
from app.services.llm.catalog import ANTHROPIC_MODELS, GOOGLE_MODELS
from app.services.llm.errors import (
    EmptyCompletionError,
    InvalidConversation,
    InvalidCredential,
    UnsupportedProvider,
    UpstreamError,
)
from app.services.llm.llm_service import parse_provider


def make_message(role: str, content: str) -> ChatMessage:
    return ChatMessage(id=str(uuid4()), role=role, content=content, timestamp=datetime.now(timezone.utc))


def openai_completion(content: str | None = "Hello!", usage: dict | None = None) -> dict:
    body = {
        "id": "chatcmpl-123",
        "object": "chat.completion",
        "created": 1700000000,
        "model": "gpt-4o-2024-08-06",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
    }
    if usage is not None:
        body["usage"] = usage
    return body


ANTHROPIC_REPLY = {
    "id": "msg_01",
    "type": "message",
    "role": "assistant",
    "model": "claude-3-5-haiku-20241022",
    "content": [{"type": "text", "text": "Hi from Claude"}],
    "usage": {"input_tokens": 10, "output_tokens": 5},
}

GOOGLE_REPLY = {
    "candidates": [
        {"content": {"role": "model", "parts": [{"text": "Hi "}, {"text": "from Gemini"}]}},
    ],
    "responseId": "resp-1",
}

PROVIDER_REPLIES = {
    Provider.OPENAI: openai_completion(usage={"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15}),
    Provider.OPENROUTER: openai_completion(usage={"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15}),
    Provider.ANTHROPIC: ANTHROPIC_REPLY,
    Provider.GOOGLE: GOOGLE_REPLY,
}

FOUR_MESSAGES = [
    ("system", "S"),
    ("user", "U1"),
    ("assistant", "A1"),
    ("user", "U2"),
]


def conversation(pairs: list[tuple[str, str]]) -> list[ChatMessage]:
    return [make_message(role, content) for role, content in pairs]


@pytest.mark.parametrize("provider", list(Provider))
async def test_chat_returns_assistant_message_tagged_with_requested_model(llm_service, provider_stub, provider):
    provider_stub.respond_with(200, PROVIDER_REPLIES[provider])

    response = await llm_service.chat(provider, "secret", "my-model", [make_message("user", "Hello")])

    assert response.message.role == "assistant"
    assert response.message.model == "my-model"
    assert response.message.content
    assert len(provider_stub.requests) == 1


@pytest.mark.parametrize("provider", list(Provider))
async def test_chat_does_not_mutate_input(llm_service, provider_stub, provider):
    provider_stub.respond_with(200, PROVIDER_REPLIES[provider])
    messages = conversation(FOUR_MESSAGES)
    snapshot = list(messages)

    await llm_service.chat(provider, "secret", "my-model", messages)

    assert messages == snapshot


@pytest.mark.parametrize("provider", list(Provider))
async def test_chat_is_deterministic_apart_from_id_and_timestamp(llm_service, provider_stub, provider):
    provider_stub.respond_with(200, PROVIDER_REPLIES[provider])
    messages = [make_message("user", "Hello")]

    first = await llm_service.chat(provider, "secret", "my-model", messages)
    second = await llm_service.chat(provider, "secret", "my-model", messages)

    assert first.message.content == second.message.content
    assert first.message.role == second.message.role
    assert first.message.model == second.message.model
    assert first.usage == second.usage


@pytest.mark.parametrize("provider", ["mistral", "", "OPENAI"])
async def test_unknown_provider_fails_without_network_call(llm_service, provider_stub, provider):
    with pytest.raises(UnsupportedProvider):
        await llm_service.chat(provider, "secret", "my-model", [make_message("user", "Hello")])

    with pytest.raises(UnsupportedProvider):
        await llm_service.validate_key(provider, "secret")

    assert provider_stub.requests == []


def test_parse_provider_accepts_known_tokens():
    assert parse_provider("openrouter") is Provider.OPENROUTER
    assert parse_provider(Provider.GOOGLE) is Provider.GOOGLE


async def test_empty_message_list_is_rejected(llm_service, provider_stub):
    with pytest.raises(InvalidConversation):
        await llm_service.chat(Provider.OPENAI, "secret", "gpt-4o", [])

    assert provider_stub.requests == []


class TestOpenAiCompatible:
    @pytest.mark.parametrize("provider, host", [
        (Provider.OPENAI, "api.openai.com"),
        (Provider.OPENROUTER, "openrouter.ai"),
    ])
    async def test_inline_messages_are_passed_through(self, llm_service, provider_stub, provider, host):
        provider_stub.respond_with(200, openai_completion())

        await llm_service.chat(provider, "sk-test", "gpt-4o", conversation(FOUR_MESSAGES))

        request = provider_stub.requests[0]
        assert request.url.host == host
        assert request.url.path.endswith("/chat/completions")
        assert request.headers["authorization"] == "Bearer sk-test"
        assert provider_stub.last_json["model"] == "gpt-4o"
        assert provider_stub.last_json["messages"] == [
            {"role": role, "content": content} for role, content in FOUR_MESSAGES
        ]

    async def test_usage_total_is_recomputed(self, llm_service, provider_stub):
        provider_stub.respond_with(
            200,
            openai_completion(usage={"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 99}),
        )

        response = await llm_service.chat(Provider.OPENAI, "sk-test", "gpt-4o", [make_message("user", "Hi")])

        assert response.usage is not None
        assert response.usage.prompt_tokens == 10
        assert response.usage.completion_tokens == 5
        assert response.usage.total_tokens == 15

    async def test_missing_usage_is_absent(self, llm_service, provider_stub):
        provider_stub.respond_with(200, openai_completion())

        response = await llm_service.chat(Provider.OPENROUTER, "sk-test", "openai/gpt-4o", [make_message("user", "Hi")])

        assert response.usage is None

    async def test_provider_message_id_is_used(self, llm_service, provider_stub):
        provider_stub.respond_with(200, openai_completion())

        response = await llm_service.chat(Provider.OPENAI, "sk-test", "gpt-4o", [make_message("user", "Hi")])

        assert response.message.id == "chatcmpl-123"

    async def test_null_content_becomes_empty_string(self, llm_service, provider_stub):
        provider_stub.respond_with(200, openai_completion(content=None))

        response = await llm_service.chat(Provider.OPENAI, "sk-test", "gpt-4o", [make_message("user", "Hi")])

        assert response.message.content == ""

    async def test_no_choices_is_empty_completion(self, llm_service, provider_stub):
        body = openai_completion()
        body["choices"] = []
        provider_stub.respond_with(200, body)

        with pytest.raises(EmptyCompletionError):
            await llm_service.chat(Provider.OPENROUTER, "sk-test", "openai/gpt-4o", [make_message("user", "Hi")])

    async def test_rate_limit_is_a_single_attempt(self, llm_service, provider_stub):
        provider_stub.respond_with(429, {"error": {"message": "Rate limit reached", "type": "requests"}})

        with pytest.raises(UpstreamError) as exc_info:
            await llm_service.chat(Provider.OPENAI, "sk-test", "gpt-4o", [make_message("user", "Hi")])

        assert not isinstance(exc_info.value, EmptyCompletionError)
        assert exc_info.value.status_code == 429
        assert exc_info.value.is_rate_limited
        assert len(provider_stub.requests) == 1

    async def test_transport_failure_is_upstream_error_without_status(self, llm_service, provider_stub):
        def fail(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        provider_stub.responder = fail

        with pytest.raises(UpstreamError) as exc_info:
            await llm_service.chat(Provider.OPENAI, "sk-test", "gpt-4o", [make_message("user", "Hi")])

        assert exc_info.value.status_code is None

    async def test_openai_validation_keeps_gpt_models(self, llm_service, provider_stub):
        provider_stub.respond_with(200, {
            "object": "list",
            "data": [
                {"id": "gpt-4o", "object": "model", "created": 1, "owned_by": "openai"},
                {"id": "text-embedding-3-small", "object": "model", "created": 1, "owned_by": "openai"},
                {"id": "gpt-4o-mini", "object": "model", "created": 1, "owned_by": "openai"},
            ],
        })

        models = await llm_service.validate_key(Provider.OPENAI, "sk-test")

        assert models == ["gpt-4o", "gpt-4o-mini"]
        assert provider_stub.requests[0].url.path.endswith("/models")

    async def test_openrouter_validation_returns_first_twenty_models(self, llm_service, provider_stub):
        provider_stub.respond_with(200, {"data": [{"id": f"vendor/model-{i}"} for i in range(30)]})

        models = await llm_service.validate_key(Provider.OPENROUTER, "sk-or-test")

        assert models == [f"vendor/model-{i}" for i in range(20)]
        assert provider_stub.requests[0].headers["authorization"] == "Bearer sk-or-test"

    async def test_openrouter_malformed_model_list_is_invalid(self, llm_service, provider_stub):
        provider_stub.respond_with(200, {"models": []})

        with pytest.raises(InvalidCredential):
            await llm_service.validate_key(Provider.OPENROUTER, "sk-or-test")


class TestAnthropic:
    async def test_system_message_is_hoisted(self, llm_service, provider_stub):
        provider_stub.respond_with(200, ANTHROPIC_REPLY)

        await llm_service.chat(Provider.ANTHROPIC, "sk-ant", "claude-3-5-haiku-latest", conversation(FOUR_MESSAGES))

        request = provider_stub.requests[0]
        assert request.url.path.endswith("/messages")
        assert request.headers["x-api-key"] == "sk-ant"
        assert request.headers["anthropic-version"] == "2023-06-01"
        body = provider_stub.last_json
        assert body["system"] == "S"
        assert body["max_tokens"] == 4096
        assert body["messages"] == [
            {"role": "user", "content": "U1"},
            {"role": "assistant", "content": "A1"},
            {"role": "user", "content": "U2"},
        ]

    async def test_only_first_system_message_is_hoisted(self, llm_service, provider_stub):
        provider_stub.respond_with(200, ANTHROPIC_REPLY)

        await llm_service.chat(
            Provider.ANTHROPIC,
            "sk-ant",
            "claude-3-5-haiku-latest",
            conversation([("system", "S1"), ("system", "S2"), ("user", "U")]),
        )

        body = provider_stub.last_json
        assert body["system"] == "S1"
        assert body["messages"] == [{"role": "user", "content": "U"}]

    async def test_no_system_field_without_system_message(self, llm_service, provider_stub):
        provider_stub.respond_with(200, ANTHROPIC_REPLY)

        await llm_service.chat(Provider.ANTHROPIC, "sk-ant", "claude", [make_message("user", "Hi")])

        assert "system" not in provider_stub.last_json

    async def test_usage_is_normalized(self, llm_service, provider_stub):
        provider_stub.respond_with(200, ANTHROPIC_REPLY)

        response = await llm_service.chat(Provider.ANTHROPIC, "sk-ant", "claude", [make_message("user", "Hi")])

        assert response.message.content == "Hi from Claude"
        assert response.message.id == "msg_01"
        assert response.usage is not None
        assert response.usage.total_tokens == 15

    async def test_empty_content_is_empty_completion(self, llm_service, provider_stub):
        provider_stub.respond_with(200, {**ANTHROPIC_REPLY, "content": []})

        with pytest.raises(EmptyCompletionError):
            await llm_service.chat(Provider.ANTHROPIC, "sk-ant", "claude", [make_message("user", "Hi")])

    async def test_upstream_error_keeps_status_and_body(self, llm_service, provider_stub):
        provider_stub.respond_with(400, {"type": "error", "error": {"message": "prompt is too long: 250000 tokens"}})

        with pytest.raises(UpstreamError) as exc_info:
            await llm_service.chat(Provider.ANTHROPIC, "sk-ant", "claude", [make_message("user", "Hi")])

        assert exc_info.value.status_code == 400
        assert "prompt is too long" in exc_info.value.body
        assert exc_info.value.is_token_limit

    async def test_validation_returns_static_models(self, llm_service, provider_stub):
        provider_stub.respond_with(200, ANTHROPIC_REPLY)

        models = await llm_service.validate_key(Provider.ANTHROPIC, "sk-ant")

        assert models == ANTHROPIC_MODELS
        assert provider_stub.last_json["max_tokens"] == 1


class TestGoogle:
    async def test_history_and_system_instruction(self, llm_service, provider_stub):
        provider_stub.respond_with(200, GOOGLE_REPLY)

        await llm_service.chat(Provider.GOOGLE, "AIza-test", "gemini-2.0-flash", conversation(FOUR_MESSAGES))

        request = provider_stub.requests[0]
        assert request.url.path.endswith("/models/gemini-2.0-flash:generateContent")
        assert request.headers["x-goog-api-key"] == "AIza-test"
        body = provider_stub.last_json
        assert body["systemInstruction"] == {"parts": [{"text": "S"}]}
        assert body["contents"] == [
            {"role": "user", "parts": [{"text": "U1"}]},
            {"role": "model", "parts": [{"text": "A1"}]},
            {"role": "user", "parts": [{"text": "U2"}]},
        ]

    async def test_only_first_system_message_is_hoisted(self, llm_service, provider_stub):
        provider_stub.respond_with(200, GOOGLE_REPLY)

        await llm_service.chat(
            Provider.GOOGLE,
            "AIza-test",
            "gemini-2.0-flash",
            conversation([("system", "S1"), ("system", "S2"), ("user", "U")]),
        )

        body = provider_stub.last_json
        assert body["systemInstruction"] == {"parts": [{"text": "S1"}]}
        assert body["contents"] == [{"role": "user", "parts": [{"text": "U"}]}]

    async def test_reply_text_is_joined_and_usage_absent(self, llm_service, provider_stub):
        provider_stub.respond_with(200, GOOGLE_REPLY)

        response = await llm_service.chat(Provider.GOOGLE, "AIza-test", "gemini-2.0-flash", [make_message("user", "Hi")])

        assert response.message.content == "Hi from Gemini"
        assert response.message.id == "resp-1"
        assert response.usage is None

    async def test_models_prefix_is_stripped(self, llm_service, provider_stub):
        provider_stub.respond_with(200, GOOGLE_REPLY)

        await llm_service.chat(Provider.GOOGLE, "AIza-test", "models/gemini-2.5-pro", [make_message("user", "Hi")])

        assert provider_stub.requests[0].url.path.endswith("/models/gemini-2.5-pro:generateContent")

    async def test_no_candidates_is_empty_completion(self, llm_service, provider_stub):
        provider_stub.respond_with(200, {"promptFeedback": {"blockReason": "SAFETY"}})

        with pytest.raises(EmptyCompletionError):
            await llm_service.chat(Provider.GOOGLE, "AIza-test", "gemini-2.0-flash", [make_message("user", "Hi")])

    async def test_only_system_messages_is_rejected(self, llm_service, provider_stub):
        with pytest.raises(InvalidConversation):
            await llm_service.chat(Provider.GOOGLE, "AIza-test", "gemini-2.0-flash", [make_message("system", "S")])

        assert provider_stub.requests == []

    async def test_validation_returns_static_models(self, llm_service, provider_stub):
        provider_stub.respond_with(200, GOOGLE_REPLY)

        models = await llm_service.validate_key(Provider.GOOGLE, "AIza-test")

        assert models == GOOGLE_MODELS
        assert provider_stub.last_json["generationConfig"] == {"maxOutputTokens": 1}


@pytest.mark.parametrize("provider", list(Provider))
@pytest.mark.parametrize("status_code", [401, 403])
async def test_rejected_key_is_invalid_credential(llm_service, provider_stub, provider, status_code):
    provider_stub.respond_with(status_code, {"error": {"message": "invalid x-api-key"}})

    with pytest.raises(InvalidCredential) as exc_info:
        await llm_service.validate_key(provider, "bad-key")

    assert str(exc_info.value).startswith("Invalid API key:")
