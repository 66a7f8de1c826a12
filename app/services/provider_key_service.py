import logging
import uuid

from app.db.provider_key_repo import ProviderKeyRepo
from app.models.provider import Provider
from app.models.provider_key.models import ProviderKey
from app.services.llm.llm_service import LlmService

logger = logging.getLogger(__name__)


class ProviderKeyNotUsable(Exception):
    """The user has no stored key for the provider, or the stored key is marked invalid"""

    def __init__(self, provider: Provider) -> None:
        super().__init__(f"No usable {provider.value} key")
        self.provider = provider


class ProviderKeyService:
    def __init__(self, provider_key_repo: ProviderKeyRepo, llm_service: LlmService) -> None:
        self.provider_key_repo = provider_key_repo
        self.llm_service = llm_service

    def add_key(self, user_id: str, provider: Provider, secret: str) -> ProviderKey:
        """Store a key as given, replacing an earlier one for the same provider"""
        key = self.provider_key_repo.upsert_key(str(uuid.uuid4()), user_id, provider, secret)
        logger.info("Provider key stored", extra={"user_id": user_id, "provider": provider.value})
        return key

    def list_keys(self, user_id: str) -> list[ProviderKey]:
        return self.provider_key_repo.list_keys_by_user(user_id)

    def get_key(self, user_id: str, provider: Provider) -> ProviderKey | None:
        return self.provider_key_repo.get_key(user_id, provider)

    def get_usable_key(self, user_id: str, provider: Provider) -> ProviderKey:
        key = self.provider_key_repo.get_key(user_id, provider)
        if key is None or not key.is_valid:
            raise ProviderKeyNotUsable(provider)
        return key

    def delete_key(self, user_id: str, provider: Provider) -> bool:
        return self.provider_key_repo.delete_key(user_id, provider)

    def update_models(self, user_id: str, provider: Provider, models: list[str]) -> ProviderKey | None:
        return self.provider_key_repo.update_models(user_id, provider, models)

    def mark_invalid(self, user_id: str, provider: Provider) -> None:
        self.provider_key_repo.set_validity(user_id, provider, False)

    async def validate_key(self, provider: Provider, raw_key: str) -> list[str]:
        """Probe a raw key with the provider. Nothing is stored. Raises InvalidCredential."""
        return await self.llm_service.validate_key(provider, raw_key)
