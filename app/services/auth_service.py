from fastapi import HTTPException, status, Request

from app.request_context import RequestContext
from app.services.access_key_service import AccessKeyService


class AuthService:
    """Service for handling authentication and creating request contexts"""

    def __init__(self, access_key_service: AccessKeyService):
        self.access_key_service = access_key_service

    def authenticate(self, request: Request) -> RequestContext:
        """
        Authenticate a request by its X-API-Key header.

        Raises:
            HTTPException: 401 if the header is missing or the key is unknown or revoked
        """
        access_key = request.headers.get("X-API-Key")
        if not access_key:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Missing API key",
            )

        validated_key, error = self.access_key_service.validate_access_key(access_key)
        if validated_key is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=error or "Invalid access key",
            )

        return RequestContext(
            user_id=validated_key.user_id,
            access_key_id=validated_key.id,
        )
