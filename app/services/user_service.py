import logging
import uuid

from app.db.chat_repo import ChatRepo
from app.db.memory_repo import MemoryRepo
from app.db.user_repo import UserRepo
from app.models.user.models import User
from app.models.user.responses import RegisterUserResponse, UserExportResponse
from app.services.access_key_service import AccessKeyService

logger = logging.getLogger(__name__)

FIRST_ACCESS_KEY_NAME = "default"


class EmailAlreadyRegistered(Exception):
    def __init__(self, email: str) -> None:
        super().__init__(f"A user with email '{email}' already exists")
        self.email = email


class UserService:
    """Service for user registration, profiles and account-level operations"""

    def __init__(
        self,
        user_repo: UserRepo,
        chat_repo: ChatRepo,
        memory_repo: MemoryRepo,
        access_key_service: AccessKeyService,
    ) -> None:
        self.user_repo = user_repo
        self.chat_repo = chat_repo
        self.memory_repo = memory_repo
        self.access_key_service = access_key_service

    def register(self, name: str, email: str) -> RegisterUserResponse:
        """Create a user and their first access key. The plaintext key is returned only here."""
        if self.user_repo.get_user_by_email(email) is not None:
            raise EmailAlreadyRegistered(email)

        user = self.user_repo.create_user(str(uuid.uuid4()), name, email)
        access_key = self.access_key_service.create_access_key(user.id, FIRST_ACCESS_KEY_NAME)

        logger.info("User registered", extra={"user_id": user.id})
        return RegisterUserResponse(
            user=user.to_response(),
            access_key=access_key.plaintext_key,
        )

    def get_user(self, user_id: str) -> User | None:
        return self.user_repo.get_user_by_id(user_id)

    def update_profile(self, user_id: str, name: str | None, bio: str | None) -> User | None:
        return self.user_repo.update_user(user_id, name=name, bio=bio)

    def delete_account(self, user_id: str) -> None:
        self.user_repo.delete_user(user_id)
        logger.info("User deleted", extra={"user_id": user_id})

    def export_data(self, user_id: str) -> UserExportResponse | None:
        """Everything stored for a user except credentials: profile, live chats and memory"""
        user = self.user_repo.get_user_by_id(user_id)
        if user is None:
            return None

        return UserExportResponse(
            user=user.to_response(),
            chat_histories=[c.to_response() for c in self.chat_repo.list_chats_with_messages(user_id)],
            memory_entries=[e.to_response() for e in self.memory_repo.list_entries(user_id)],
        )
