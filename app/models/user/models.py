from dataclasses import dataclass
from datetime import datetime

from app.models.user.responses import UserResponse


@dataclass
class User:
    id: str
    name: str
    email: str
    bio: str | None
    created_at: datetime
    updated_at: datetime

    def to_response(self) -> UserResponse:
        return UserResponse(
            id=self.id,
            name=self.name,
            email=self.email,
            bio=self.bio,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
