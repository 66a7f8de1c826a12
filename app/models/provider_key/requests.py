from pydantic import BaseModel, Field

from app.models.provider import Provider


class AddProviderKeyRequest(BaseModel):
    provider: Provider
    secret: str = Field(..., min_length=1, description="Provider API key, stored as given")


class ValidateProviderKeyRequest(BaseModel):
    provider: Provider
    api_key: str = Field(..., min_length=1, description="Raw provider API key to probe")


class UpdateProviderModelsRequest(BaseModel):
    models: list[str] = Field(..., description="Cached model IDs for this provider")
