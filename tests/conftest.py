import json
from collections.abc import Callable

import httpx
import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import (
    get_agent_service,
    get_chat_service,
    get_database,
    get_memory_service,
    get_provider_key_service,
    get_rate_limiters,
)
from app.db.chat_repo import ChatRepo
from app.db.memory_repo import MemoryRepo
from app.db.provider_key_repo import ProviderKeyRepo
from app.db.user_repo import UserRepo
from app.services.agent_service import AgentService
from app.services.chat_service import ChatService
from app.services.llm.llm_service import LlmService
from app.services.memory_service import MemoryService
from app.services.provider_key_service import ProviderKeyService
from app.settings import settings
from main import app as fastapi_app


class ProviderStub:
    """Stands in for every provider HTTP API; records requests and answers with `responder`"""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.responder: Callable[[httpx.Request], httpx.Response] = lambda request: httpx.Response(
            500, json={"error": "no responder configured"}
        )

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    def respond_with(self, status_code: int, body: dict | str) -> None:
        if isinstance(body, dict):
            self.responder = lambda request: httpx.Response(status_code, json=body)
        else:
            self.responder = lambda request: httpx.Response(status_code, text=body)

    @property
    def last_json(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture()
def provider_stub() -> ProviderStub:
    return ProviderStub()


@pytest.fixture()
def llm_service(provider_stub) -> LlmService:
    return LlmService.from_settings(settings, transport=httpx.MockTransport(provider_stub.handler))


@pytest.fixture()
def database(tmp_path, monkeypatch):
    db = get_database()
    monkeypatch.setattr(db, "db_path", str(tmp_path / "test.db"))
    monkeypatch.setattr(db, "_initialized", False)
    db.setup()
    return db


@pytest.fixture(autouse=True)
def reset_rate_limits():
    for limiter in get_rate_limiters():
        limiter.reset()
    yield


@pytest.fixture()
def memory_service(database) -> MemoryService:
    return MemoryService(MemoryRepo(database), max_bytes=settings.memory_max_bytes, context_limit=10)


@pytest.fixture()
def provider_key_service(database, llm_service) -> ProviderKeyService:
    return ProviderKeyService(ProviderKeyRepo(database), llm_service)


@pytest.fixture()
def client(database, llm_service, memory_service, provider_key_service):
    chat_service = ChatService(
        llm_service=llm_service,
        chat_repo=ChatRepo(database),
        provider_key_service=provider_key_service,
        memory_service=memory_service,
    )
    agent_service = AgentService(llm_service=llm_service, provider_key_service=provider_key_service)

    fastapi_app.dependency_overrides[get_memory_service] = lambda: memory_service
    fastapi_app.dependency_overrides[get_provider_key_service] = lambda: provider_key_service
    fastapi_app.dependency_overrides[get_chat_service] = lambda: chat_service
    fastapi_app.dependency_overrides[get_agent_service] = lambda: agent_service
    try:
        with TestClient(fastapi_app) as test_client:
            yield test_client
    finally:
        fastapi_app.dependency_overrides.clear()


@pytest.fixture()
def register_user(client) -> Callable[..., dict]:
    def _register(email: str = "ada@example.com", name: str = "Ada") -> dict:
        response = client.post("/users", json={"name": name, "email": email})
        assert response.status_code == 201, response.text
        return response.json()

    return _register


@pytest.fixture()
def registered_user(register_user) -> dict:
    return register_user()


@pytest.fixture()
def auth_headers(registered_user) -> dict[str, str]:
    return {"X-API-Key": registered_user["access_key"]}


@pytest.fixture()
def user_id(database) -> str:
    """A user stored directly in the database, for service-level tests"""
    return UserRepo(database).create_user("user-1", "Grace", "grace@example.com").id
