from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.dependencies import get_database
from app.api.error_handlers import register_exception_handlers
from app.api.routes.access_keys import router as access_keys_router
from app.api.routes.agent import router as agent_router
from app.api.routes.chat import router as chat_router
from app.api.routes.health import router as health_router
from app.api.routes.memory import router as memory_router
from app.api.routes.provider_keys import router as provider_keys_router
from app.api.routes.users import router as users_router
from app.logging_config import configure_logging
from app.settings import settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    get_database().setup()
    yield


def create_app() -> FastAPI:
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Chat and agents over your own OpenRouter, OpenAI, Anthropic and Google API keys",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(users_router)
    app.include_router(access_keys_router)
    app.include_router(provider_keys_router)
    app.include_router(memory_router)
    app.include_router(chat_router)
    app.include_router(agent_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
