from dataclasses import dataclass
from datetime import datetime

from app.models.accesskey.responses import AccessKeyResponse


@dataclass
class AccessKey:
    id: str
    user_id: str
    key_hash: str
    name: str
    created_at: datetime
    deleted_at: datetime | None = None

    def to_response(self) -> AccessKeyResponse:
        return AccessKeyResponse(
            id=self.id,
            name=self.name,
            created_at=self.created_at,
            deleted_at=self.deleted_at,
        )
