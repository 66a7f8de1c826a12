import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from app.services.llm.errors import (
    InvalidConversation,
    InvalidCredential,
    ProviderError,
    UnsupportedProvider,
    UpstreamError,
)

logger = logging.getLogger(__name__)

# Upstream bodies can be whole HTML error pages
MAX_UPSTREAM_DETAIL_LENGTH = 500


def provider_error_to_http(error: ProviderError) -> HTTPException:
    """Map a provider failure to the HTTP error returned to the caller"""
    if isinstance(error, UpstreamError):
        if error.is_rate_limited:
            return HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Rate limit exceeded. Please try again later.",
            )
        if error.is_token_limit:
            return HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Token limit exceeded. Please reduce message length.",
            )
        upstream_status = error.status_code if error.status_code is not None else "no response"
        return HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"{error.provider} API error ({upstream_status}): {error.body[:MAX_UPSTREAM_DETAIL_LENGTH]}",
        )

    if isinstance(error, (UnsupportedProvider, InvalidCredential, InvalidConversation)):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))

    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(error))


async def _provider_error_handler(request: Request, exc: ProviderError) -> JSONResponse:
    http_error = provider_error_to_http(exc)
    logger.warning(
        "Unhandled provider error",
        extra={"path": request.url.path, "status_code": http_error.status_code},
    )
    return JSONResponse(status_code=http_error.status_code, content={"detail": http_error.detail})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ProviderError, _provider_error_handler)
