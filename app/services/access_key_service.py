import hashlib
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime

from app.db.access_key_repo import AccessKeyRepo
from app.models.access_key import AccessKey


@dataclass
class AccessKeyCreationResult:
    key_id: str
    plaintext_key: str
    name: str
    created_at: datetime


class AccessKeyService:
    def __init__(self, access_key_repo: AccessKeyRepo) -> None:
        self.access_key_repo = access_key_repo

    def hash_key(self, plaintext_key: str) -> str:
        """Hash an access key using SHA-256"""
        return hashlib.sha256(plaintext_key.encode()).hexdigest()

    def generate_access_key(self) -> str:
        return f"pg_{secrets.token_urlsafe(32)}"

    def create_access_key(self, user_id: str, name: str) -> AccessKeyCreationResult:
        plaintext_key = self.generate_access_key()

        access_key = self.access_key_repo.create_access_key(
            key_id=str(uuid.uuid4()),
            user_id=user_id,
            key_hash=self.hash_key(plaintext_key),
            name=name,
        )

        return AccessKeyCreationResult(
            key_id=access_key.id,
            plaintext_key=plaintext_key,
            name=access_key.name,
            created_at=access_key.created_at,
        )

    def validate_access_key(self, plaintext_key: str) -> tuple[AccessKey | None, str | None]:
        access_key = self.access_key_repo.get_access_key_by_hash(self.hash_key(plaintext_key))

        if access_key is None:
            return None, "Invalid access key"

        if access_key.deleted_at is not None:
            return None, "Access key has been revoked"

        return access_key, None

    def delete_access_key(self, key_id: str) -> None:
        self.access_key_repo.soft_delete_access_key(key_id)

    def list_user_access_keys(self, user_id: str, include_deleted: bool = False) -> list[AccessKey]:
        return self.access_key_repo.list_access_keys_by_user(user_id, include_deleted)

    def get_access_key_by_id(self, key_id: str) -> AccessKey | None:
        return self.access_key_repo.get_access_key_by_id(key_id)
