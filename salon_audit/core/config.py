from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Gemini (OpenAI-compatible endpoint)
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"
    gemini_api_url: str = "https://generativelanguage.googleapis.com/v1beta/openai/chat/completions"
    gemini_temperature: float = 0.3
    gemini_max_tokens: int = 2048
    gemini_timeout: float = 60.0  # seconds per call

    # Redis (Celery broker + result backend)
    redis_url: str = "redis://localhost:6379/0"

    # Audit jobs
    audit_max_retries: int = 3
    audit_retry_base_delay: int = 30  # seconds, doubled on each attempt
    audit_queue: str = "audits"
    audit_result_ttl: int = 86400  # seconds a terminal result stays in Redis

    # App
    app_env: str = "development"
    app_debug: bool = True

    # Logging
    log_level: str = "INFO"
    log_json: bool = False  # set True in production for structured JSON logs

    # Sentry
    sentry_dsn: str = ""  # leave empty to disable


settings = Settings()


def validate_settings_for_production() -> None:
    """Validate critical settings. Called on worker startup in non-test environments."""
    errors: list[str] = []

    if not settings.gemini_api_key:
        errors.append("GEMINI_API_KEY must be set")

    if settings.app_env == "production":
        if settings.app_debug:
            errors.append("APP_DEBUG must be false in production")
        if settings.redis_url.startswith("redis://localhost"):
            errors.append("REDIS_URL must point to a shared broker in production")

    if errors:
        raise SystemExit("Configuration errors:\n  - " + "\n  - ".join(errors))
