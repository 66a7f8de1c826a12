from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from app.models.provider import Provider


class HealthResponse(BaseModel):
    status: Literal["ok", "degraded"]
    version: str
    timestamp: datetime
    database: bool = Field(..., description="Whether the database answered a trivial query")
    providers: list[Provider] = Field(..., description="Providers this server can route chats to")
