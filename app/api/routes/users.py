from fastapi import APIRouter, HTTPException, status

from app.api.dependencies import AuthContextDep, UserServiceDep
from app.models.user.requests import RegisterUserRequest, UpdateProfileRequest
from app.models.user.responses import (
    DeleteAccountResponse,
    RegisterUserResponse,
    UserExportResponse,
    UserResponse,
)
from app.services.user_service import EmailAlreadyRegistered

router = APIRouter(
    prefix="/users",
    tags=["users"],
)


def _user_not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="User not found",
    )


@router.post("", response_model=RegisterUserResponse, status_code=status.HTTP_201_CREATED)
async def register_user(
    request_body: RegisterUserRequest,
    user_service: UserServiceDep,
) -> RegisterUserResponse:
    """
    Register a user and issue their first access key.

    **Warning**: The access key is only shown once. Save it securely.
    """
    try:
        return user_service.register(request_body.name, request_body.email)
    except EmailAlreadyRegistered as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User already exists",
        ) from e


@router.get("/me", response_model=UserResponse)
async def get_profile(
    context: AuthContextDep,
    user_service: UserServiceDep,
) -> UserResponse:
    user = user_service.get_user(context.user_id)
    if user is None:
        raise _user_not_found()
    return user.to_response()


@router.patch("/me", response_model=UserResponse)
async def update_profile(
    request_body: UpdateProfileRequest,
    context: AuthContextDep,
    user_service: UserServiceDep,
) -> UserResponse:
    user = user_service.update_profile(context.user_id, request_body.name, request_body.bio)
    if user is None:
        raise _user_not_found()
    return user.to_response()


@router.delete("/me", response_model=DeleteAccountResponse)
async def delete_account(
    context: AuthContextDep,
    user_service: UserServiceDep,
) -> DeleteAccountResponse:
    """Delete the account and everything stored for it, including all access keys"""
    user_service.delete_account(context.user_id)
    return DeleteAccountResponse(message="Account deleted successfully")


@router.get("/me/export", response_model=UserExportResponse)
async def export_data(
    context: AuthContextDep,
    user_service: UserServiceDep,
) -> UserExportResponse:
    """Export profile, saved chats and memory. Provider keys and access keys are not included."""
    export = user_service.export_data(context.user_id)
    if export is None:
        raise _user_not_found()
    return export
