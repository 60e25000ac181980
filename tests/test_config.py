"""Tests for configuration loading."""
import os

os.environ.setdefault("GEMINI_API_KEY", "test-key")
os.environ.setdefault("GENERATION_RETRY_BACKOFF_SECONDS", "0")

from renovatepro.config import Settings, get_settings


class TestConfig:
    def test_model_defaults(self):
        settings = get_settings()
        assert settings.text_model == "gemini-3-flash-preview"
        assert settings.image_model_standard == "gemini-2.5-flash-image"
        assert settings.image_model_high_res == "gemini-3-pro-image-preview"
        assert settings.thinking_budget == 1024
        assert settings.image_aspect_ratio == "4:3"

    def test_resilience_defaults(self):
        settings = Settings(_env_file=None)
        assert settings.generation_timeout_seconds == 120.0
        assert settings.generation_max_retries == 2
        assert settings.rate_limit_max_requests == 10
        assert settings.rate_limit_window_seconds == 60
        assert settings.wizard_session_ttl_seconds == 3600

    def test_gemini_key_loaded_from_env(self):
        settings = get_settings()
        assert settings.gemini_api_key

    def test_key_is_optional_at_startup(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        settings = Settings(_env_file=None)
        assert settings.gemini_api_key == ""
        assert settings.brand_name == "RenovateProAI"
