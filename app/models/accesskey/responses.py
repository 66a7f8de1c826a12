from datetime import datetime
from pydantic import BaseModel, Field


class AccessKeyResponse(BaseModel):
    """Access key information (without the actual key)"""
    id: str = Field(..., description="Unique access key ID")
    name: str = Field(..., description="Name of the access key")
    created_at: datetime = Field(..., description="When the key was created")
    deleted_at: datetime | None = Field(None, description="When the key was revoked, if applicable")


class CreateAccessKeyResponse(BaseModel):
    """Returned when creating a new access key (includes the plaintext key)"""
    id: str = Field(..., description="Unique access key ID")
    name: str = Field(..., description="Name of the access key")
    key: str = Field(..., description="The actual access key (only shown once)")
    created_at: datetime = Field(..., description="When the key was created")


class ListAccessKeysResponse(BaseModel):
    keys: list[AccessKeyResponse] = Field(..., description="List of access keys")


class DeleteAccessKeyResponse(BaseModel):
    id: str = Field(..., description="ID of the revoked access key")
    message: str = Field(..., description="Confirmation message")
