from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "AI Playground"
    app_version: str = "0.1.0"
    db_path: str = "data/playground.db"
    preserve_old_db: bool = False
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:5173"]

    # Provider endpoints
    openai_base_url: str = "https://api.openai.com/v1"
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    anthropic_base_url: str = "https://api.anthropic.com/v1"
    google_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    provider_timeout_seconds: float = 60.0
    anthropic_max_tokens: int = 4096
    google_max_output_tokens: int = 4096

    # Memory
    memory_max_bytes: int = 10240
    memory_context_limit: int = 10

    # Rate limits
    requests_per_minute: int = 100
    chat_requests_per_minute: int = 30
    key_validations_per_hour: int = 10

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
