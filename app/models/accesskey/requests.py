from pydantic import BaseModel, Field


class CreateAccessKeyRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Name for the access key")
