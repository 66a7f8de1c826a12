from typing import Annotated, Callable

from fastapi import Depends, HTTPException, Request, status

from app.request_context import RequestContext
from app.db.access_key_repo import AccessKeyRepo
from app.db.chat_repo import ChatRepo
from app.db.database import Database
from app.db.memory_repo import MemoryRepo
from app.db.provider_key_repo import ProviderKeyRepo
from app.db.user_repo import UserRepo
from app.services.access_key_service import AccessKeyService
from app.services.agent_service import AgentService
from app.services.auth_service import AuthService
from app.services.chat_service import ChatService
from app.services.llm.llm_service import LlmService
from app.services.memory_service import MemoryService
from app.services.provider_key_service import ProviderKeyService
from app.services.rate_limiter import RateLimitConfig, RateLimiter
from app.services.user_service import UserService
from app.settings import settings

# Singleton instances
_database_instance = Database()
_user_repo_instance = UserRepo(_database_instance)
_access_key_repo_instance = AccessKeyRepo(_database_instance)
_provider_key_repo_instance = ProviderKeyRepo(_database_instance)
_memory_repo_instance = MemoryRepo(_database_instance)
_chat_repo_instance = ChatRepo(_database_instance)
_llm_service_instance = LlmService.from_settings(settings)
_access_key_service_instance = AccessKeyService(_access_key_repo_instance)
_auth_service_instance = AuthService(_access_key_service_instance)
_user_service_instance = UserService(
    user_repo=_user_repo_instance,
    chat_repo=_chat_repo_instance,
    memory_repo=_memory_repo_instance,
    access_key_service=_access_key_service_instance,
)
_provider_key_service_instance = ProviderKeyService(
    provider_key_repo=_provider_key_repo_instance,
    llm_service=_llm_service_instance,
)
_memory_service_instance = MemoryService(
    memory_repo=_memory_repo_instance,
    max_bytes=settings.memory_max_bytes,
    context_limit=settings.memory_context_limit,
)
_chat_service_instance = ChatService(
    llm_service=_llm_service_instance,
    chat_repo=_chat_repo_instance,
    provider_key_service=_provider_key_service_instance,
    memory_service=_memory_service_instance,
)
_agent_service_instance = AgentService(
    llm_service=_llm_service_instance,
    provider_key_service=_provider_key_service_instance,
)

# Rate limiters
_general_rate_limiter = RateLimiter(RateLimitConfig(
    max_requests=settings.requests_per_minute,
    window_seconds=60,
    message="Too many requests, please try again later.",
))
_chat_rate_limiter = RateLimiter(RateLimitConfig(
    max_requests=settings.chat_requests_per_minute,
    window_seconds=60,
    message="Too many chat requests, please slow down.",
))
_key_validation_rate_limiter = RateLimiter(RateLimitConfig(
    max_requests=settings.key_validations_per_hour,
    window_seconds=60 * 60,
    message="Too many API key validation attempts, please try again later.",
))


def get_database() -> Database:
    """Get the singleton Database instance"""
    return _database_instance


def get_llm_service() -> LlmService:
    """Get the singleton LlmService instance"""
    return _llm_service_instance


def get_access_key_service() -> AccessKeyService:
    """Get the singleton AccessKeyService instance"""
    return _access_key_service_instance


def get_auth_service() -> AuthService:
    """Get the singleton AuthService instance"""
    return _auth_service_instance


def get_user_service() -> UserService:
    """Get the singleton UserService instance"""
    return _user_service_instance


def get_provider_key_service() -> ProviderKeyService:
    """Get the singleton ProviderKeyService instance"""
    return _provider_key_service_instance


def get_memory_service() -> MemoryService:
    """Get the singleton MemoryService instance"""
    return _memory_service_instance


def get_chat_service() -> ChatService:
    """Get the singleton ChatService instance"""
    return _chat_service_instance


def get_agent_service() -> AgentService:
    """Get the singleton AgentService instance"""
    return _agent_service_instance


def get_rate_limiters() -> list[RateLimiter]:
    return [_general_rate_limiter, _chat_rate_limiter, _key_validation_rate_limiter]


def _enforce(limiter: RateLimiter, scope: str, user_id: str) -> None:
    if not limiter.allow(f"{scope}:{user_id}"):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=limiter.config.message,
        )


def get_auth_context(
    request: Request,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> RequestContext:
    """
    Authenticate request by its X-API-Key header and return context.
    Every authenticated request counts against the general rate limit.
    """
    context = auth_service.authenticate(request)
    _enforce(_general_rate_limiter, "general", context.user_id)
    return context


def rate_limited(limiter: RateLimiter, scope: str) -> Callable[..., RequestContext]:
    """Authenticated context that also counts against a scope-specific limit"""

    def _rate_limited_inner(
        context: Annotated[RequestContext, Depends(get_auth_context)],
    ) -> RequestContext:
        _enforce(limiter, scope, context.user_id)
        return context

    return _rate_limited_inner


# Type annotations for dependencies
AccessKeyServiceDep = Annotated[AccessKeyService, Depends(get_access_key_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
ProviderKeyServiceDep = Annotated[ProviderKeyService, Depends(get_provider_key_service)]
MemoryServiceDep = Annotated[MemoryService, Depends(get_memory_service)]
ChatServiceDep = Annotated[ChatService, Depends(get_chat_service)]
AgentServiceDep = Annotated[AgentService, Depends(get_agent_service)]
AuthContextDep = Annotated[RequestContext, Depends(get_auth_context)]
ChatRateLimitedContextDep = Annotated[RequestContext, Depends(rate_limited(_chat_rate_limiter, "chat"))]
KeyValidationRateLimitedContextDep = Annotated[
    RequestContext,
    Depends(rate_limited(_key_validation_rate_limiter, "key-validation")),
]
