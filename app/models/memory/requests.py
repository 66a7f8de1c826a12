from pydantic import BaseModel, Field


class SetMemoryRequest(BaseModel):
    key: str = Field(..., min_length=1, max_length=100, description="Memory key, unique per user")
    value: str = Field(..., min_length=1, max_length=10240, description="Memory value")
