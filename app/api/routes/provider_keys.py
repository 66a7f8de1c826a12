import logging

from fastapi import APIRouter, HTTPException, status

from app.api.dependencies import AuthContextDep, KeyValidationRateLimitedContextDep, ProviderKeyServiceDep
from app.models.provider import Provider
from app.models.provider_key.requests import (
    AddProviderKeyRequest,
    UpdateProviderModelsRequest,
    ValidateProviderKeyRequest,
)
from app.models.provider_key.responses import (
    DeleteProviderKeyResponse,
    ListProviderKeysResponse,
    ProviderKeyResponse,
    ValidateProviderKeyResponse,
)
from app.services.llm.errors import InvalidCredential

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/keys",
    tags=["provider-keys"],
)


@router.get("", response_model=ListProviderKeysResponse)
async def list_provider_keys(
    context: AuthContextDep,
    provider_key_service: ProviderKeyServiceDep,
) -> ListProviderKeysResponse:
    """List the caller's provider keys. Secrets are never returned."""
    keys = provider_key_service.list_keys(context.user_id)
    return ListProviderKeysResponse(keys=[k.to_response() for k in keys])


@router.post("", response_model=ProviderKeyResponse)
async def add_provider_key(
    request_body: AddProviderKeyRequest,
    context: AuthContextDep,
    provider_key_service: ProviderKeyServiceDep,
) -> ProviderKeyResponse:
    """
    Store a provider key, replacing any earlier key for the same provider.

    The key is marked valid and keeps previously cached models.
    """
    key = provider_key_service.add_key(context.user_id, request_body.provider, request_body.secret)
    return key.to_response()


@router.post("/validate", response_model=ValidateProviderKeyResponse)
async def validate_provider_key(
    request_body: ValidateProviderKeyRequest,
    context: KeyValidationRateLimitedContextDep,
    provider_key_service: ProviderKeyServiceDep,
) -> ValidateProviderKeyResponse:
    """Probe a raw key with the provider without storing it"""
    try:
        models = await provider_key_service.validate_key(request_body.provider, request_body.api_key)
    except InvalidCredential as e:
        logger.info(
            "Provider key rejected",
            extra={"user_id": context.user_id, "provider": request_body.provider.value},
        )
        return ValidateProviderKeyResponse(is_valid=False, models=[], error=str(e))

    return ValidateProviderKeyResponse(is_valid=True, models=models)


@router.delete("/{provider}", response_model=DeleteProviderKeyResponse)
async def delete_provider_key(
    provider: Provider,
    context: AuthContextDep,
    provider_key_service: ProviderKeyServiceDep,
) -> DeleteProviderKeyResponse:
    if not provider_key_service.delete_key(context.user_id, provider):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="API key not found",
        )

    return DeleteProviderKeyResponse(provider=provider, message="API key deleted successfully")


@router.patch("/{provider}/models", response_model=ProviderKeyResponse)
async def update_provider_models(
    provider: Provider,
    request_body: UpdateProviderModelsRequest,
    context: AuthContextDep,
    provider_key_service: ProviderKeyServiceDep,
) -> ProviderKeyResponse:
    key = provider_key_service.update_models(context.user_id, provider, request_body.models)
    if key is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="API key not found",
        )

    return key.to_response()
