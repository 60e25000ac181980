from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # AI (Gemini). Optional at startup, required on first generation call.
    gemini_api_key: str = ""
    text_model: str = "gemini-3-flash-preview"
    image_model_standard: str = "gemini-2.5-flash-image"
    image_model_high_res: str = "gemini-3-pro-image-preview"
    thinking_budget: int = 1024
    image_aspect_ratio: str = "4:3"

    # Generation resilience
    generation_timeout_seconds: float = 120.0
    generation_max_retries: int = 2
    generation_retry_backoff_seconds: float = 1.0

    # Uploads
    max_upload_size_mb: int = 10
    max_image_dimension: int = 2048

    # Wizard sessions idle longer than this are evicted
    wizard_session_ttl_seconds: int = 3600

    # Redis (rate limiting)
    redis_url: str = "redis://localhost:6379/0"
    rate_limit_max_requests: int = 10
    rate_limit_window_seconds: int = 60

    # App
    brand_name: str = "RenovateProAI"
    app_base_url: str = "http://localhost:5173"
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache()
def get_settings() -> Settings:
    return Settings()
