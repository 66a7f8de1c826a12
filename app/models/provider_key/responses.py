from datetime import datetime

from pydantic import BaseModel, Field

from app.models.provider import Provider


class ProviderKeyResponse(BaseModel):
    """Stored provider key metadata; the secret itself is never returned"""
    id: str
    provider: Provider
    is_valid: bool
    models: list[str]
    last_validated: datetime | None
    created_at: datetime
    updated_at: datetime


class ListProviderKeysResponse(BaseModel):
    keys: list[ProviderKeyResponse]


class ValidateProviderKeyResponse(BaseModel):
    is_valid: bool
    models: list[str] = Field(default_factory=list)
    error: str | None = None


class DeleteProviderKeyResponse(BaseModel):
    provider: Provider
    message: str
