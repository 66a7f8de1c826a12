from fastapi import APIRouter, HTTPException, status

from app.api.dependencies import AccessKeyServiceDep, AuthContextDep
from app.models.accesskey.requests import CreateAccessKeyRequest
from app.models.accesskey.responses import (
    CreateAccessKeyResponse,
    DeleteAccessKeyResponse,
    ListAccessKeysResponse,
)


router = APIRouter(
    prefix="/access-keys",
    tags=["access-keys"],
)


@router.post("", response_model=CreateAccessKeyResponse, status_code=status.HTTP_201_CREATED)
async def create_access_key(
    request_body: CreateAccessKeyRequest,
    context: AuthContextDep,
    access_key_service: AccessKeyServiceDep,
) -> CreateAccessKeyResponse:
    """
    Create a new access key for the authenticated user.

    **Warning**: The access key is only shown once. Save it securely.
    """
    result = access_key_service.create_access_key(
        user_id=context.user_id,
        name=request_body.name,
    )

    return CreateAccessKeyResponse(
        id=result.key_id,
        name=result.name,
        key=result.plaintext_key,
        created_at=result.created_at,
    )


@router.get("", response_model=ListAccessKeysResponse)
async def list_access_keys(
    context: AuthContextDep,
    access_key_service: AccessKeyServiceDep,
    include_deleted: bool = False,
) -> ListAccessKeysResponse:
    """List the caller's access keys, newest first. Revoked keys are hidden by default."""
    access_keys = access_key_service.list_user_access_keys(context.user_id, include_deleted)
    return ListAccessKeysResponse(keys=[key.to_response() for key in access_keys])


@router.delete("/{key_id}", response_model=DeleteAccessKeyResponse)
async def delete_access_key(
    key_id: str,
    context: AuthContextDep,
    access_key_service: AccessKeyServiceDep,
) -> DeleteAccessKeyResponse:
    """
    Revoke an access key.

    The key used to authenticate this request cannot be revoked.
    """
    if key_id == context.access_key_id:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Cannot revoke the access key currently being used for authentication",
        )

    access_key = access_key_service.get_access_key_by_id(key_id)
    if not access_key:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Access key not found",
        )

    if access_key.user_id != context.user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have permission to revoke this access key",
        )

    if access_key.deleted_at is None:
        access_key_service.delete_access_key(key_id)

    return DeleteAccessKeyResponse(
        id=key_id,
        message=f"Access key '{access_key.name}' has been revoked",
    )
