from dataclasses import dataclass, field
from datetime import datetime

from app.models.provider import Provider
from app.models.provider_key.responses import ProviderKeyResponse


@dataclass
class ProviderKey:
    """A user's credential for one provider. `secret` is opaque and forwarded as-is."""
    id: str
    user_id: str
    provider: Provider
    secret: str
    is_valid: bool
    created_at: datetime
    updated_at: datetime
    models: list[str] = field(default_factory=list)
    last_validated: datetime | None = None

    def to_response(self) -> ProviderKeyResponse:
        return ProviderKeyResponse(
            id=self.id,
            provider=self.provider,
            is_valid=self.is_valid,
            models=self.models,
            last_validated=self.last_validated,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
