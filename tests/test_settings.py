"""Tests for configuration."""

from pathlib import Path

from investtrack.config import (
    AppSettings,
    GeminiSettings,
    StorageSettings,
    validate_all_settings,
)


class TestSettings:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("GEMINI_MODEL_NAME", raising=False)
        app = AppSettings(_env_file=None)
        assert app.currency_symbol == "Rs"
        assert app.currency_code == "PKR"
        assert app.min_password_length == 6
        assert app.pin_length == 4
        assert app.idle_check_interval_seconds == 5
        assert app.income_stream_months == 6
        assert app.supported_formats_list == ["jpg", "jpeg", "png", "webp"]
        assert GeminiSettings(_env_file=None).model_name == "gemini-2.5-flash"

    def test_storage_from_environment(self, monkeypatch):
        monkeypatch.setenv("INVESTTRACK_STORAGE_DATA_DIR", "~/tracker-data")
        storage = StorageSettings(_env_file=None)
        assert storage.data_dir == Path("~/tracker-data").expanduser()
        assert storage.data_key_prefix == "investTrack_data_"

    def test_missing_api_key_reported(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "")
        status = validate_all_settings()
        assert status["gemini"] is False
        assert "GEMINI_API_KEY" in status["gemini_error"]
        assert status["storage"] is True

    def test_api_key_reported(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "test-key")
        assert validate_all_settings()["gemini"] is True
