from app.api.dependencies import get_rate_limiters
from app.models.provider import Provider

ANTHROPIC_REPLY = {"id": "msg_1", "content": [{"type": "text", "text": "H"}], "usage": {"input_tokens": 1, "output_tokens": 1}}


class TestProviderKeyStore:
    def test_add_and_list_without_secret(self, client, auth_headers):
        response = client.post("/keys", json={"provider": "openai", "secret": "sk-secret"}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["is_valid"] is True
        assert response.json()["models"] == []

        listing = client.get("/keys", headers=auth_headers)
        assert [k["provider"] for k in listing.json()["keys"]] == ["openai"]
        assert "sk-secret" not in listing.text

    def test_re_adding_replaces_secret_and_keeps_models(self, client, auth_headers, provider_key_service, registered_user):
        client.post("/keys", json={"provider": "openai", "secret": "sk-old"}, headers=auth_headers)
        client.patch("/keys/openai/models", json={"models": ["gpt-4o"]}, headers=auth_headers)
        provider_key_service.mark_invalid(registered_user["user"]["id"], Provider.OPENAI)

        response = client.post("/keys", json={"provider": "openai", "secret": "sk-new"}, headers=auth_headers)

        assert response.json()["models"] == ["gpt-4o"]
        assert response.json()["is_valid"] is True
        stored = provider_key_service.get_key(registered_user["user"]["id"], Provider.OPENAI)
        assert stored.secret == "sk-new"
        assert len(client.get("/keys", headers=auth_headers).json()["keys"]) == 1

    def test_update_models_of_missing_key_is_404(self, client, auth_headers):
        response = client.patch("/keys/google/models", json={"models": ["gemini-2.0-flash"]}, headers=auth_headers)

        assert response.status_code == 404

    def test_delete(self, client, auth_headers):
        client.post("/keys", json={"provider": "anthropic", "secret": "sk-ant"}, headers=auth_headers)

        assert client.delete("/keys/anthropic", headers=auth_headers).status_code == 200
        assert client.delete("/keys/anthropic", headers=auth_headers).status_code == 404
        assert client.get("/keys", headers=auth_headers).json()["keys"] == []

    def test_unknown_provider_is_rejected(self, client, auth_headers):
        response = client.post("/keys", json={"provider": "mistral", "secret": "x"}, headers=auth_headers)

        assert response.status_code == 422


class TestValidation:
    def test_valid_key_returns_models_and_is_not_stored(self, client, auth_headers, provider_stub):
        provider_stub.respond_with(200, ANTHROPIC_REPLY)

        response = client.post("/keys/validate", json={"provider": "anthropic", "api_key": "sk-ant"}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["is_valid"] is True
        assert response.json()["models"]
        assert client.get("/keys", headers=auth_headers).json()["keys"] == []

    def test_rejected_key_reports_error(self, client, auth_headers, provider_stub):
        provider_stub.respond_with(401, {"error": {"message": "invalid x-api-key"}})

        response = client.post("/keys/validate", json={"provider": "anthropic", "api_key": "bad"}, headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["is_valid"] is False
        assert body["models"] == []
        assert body["error"].startswith("Invalid API key:")

    def test_validation_is_rate_limited(self, client, auth_headers, provider_stub, monkeypatch):
        _, _, validation_limiter = get_rate_limiters()
        monkeypatch.setattr(validation_limiter.config, "max_requests", 2)
        provider_stub.respond_with(200, ANTHROPIC_REPLY)
        body = {"provider": "anthropic", "api_key": "sk-ant"}

        assert client.post("/keys/validate", json=body, headers=auth_headers).status_code == 200
        assert client.post("/keys/validate", json=body, headers=auth_headers).status_code == 200
        response = client.post("/keys/validate", json=body, headers=auth_headers)

        assert response.status_code == 429
        assert len(provider_stub.requests) == 2
