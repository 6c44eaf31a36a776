"""Tests for environment-driven settings and identity helpers."""

from datetime import timezone

import pytest

from growthboard.config import DEFAULT_CORS_ORIGINS, load_settings
from growthboard.core.identity import new_id, parse_timestamp, utc_now_iso


class TestLoadSettings:
    """Tests for load_settings."""

    def test_defaults(self):
        settings = load_settings({})

        assert settings.mode == "mock"
        assert settings.is_mock is True
        assert settings.db_path.endswith("growthboard.db")
        assert settings.require_result_on_complete is False
        assert settings.cors_origins == list(DEFAULT_CORS_ORIGINS)

    def test_live_mode(self):
        settings = load_settings({"GROWTHBOARD_MODE": " LIVE ", "GROWTHBOARD_DB_PATH": "/tmp/x.db"})

        assert settings.mode == "live"
        assert settings.is_mock is False
        assert settings.db_path == "/tmp/x.db"

    def test_invalid_mode(self):
        with pytest.raises(ValueError, match="GROWTHBOARD_MODE"):
            load_settings({"GROWTHBOARD_MODE": "staging"})

    @pytest.mark.parametrize("raw,expected", [("1", True), ("true", True), ("no", False)])
    def test_require_result(self, raw, expected):
        settings = load_settings({"GROWTHBOARD_REQUIRE_RESULT": raw})
        assert settings.require_result_on_complete is expected

    def test_cors_origins(self):
        settings = load_settings({"GROWTHBOARD_CORS_ORIGINS": "https://a.example, ,https://b.example"})
        assert settings.cors_origins == ["https://a.example", "https://b.example"]


class TestIdentity:
    """Tests for identifier and timestamp helpers."""

    def test_new_id_shape(self):
        value = new_id()
        assert len(value) == 12
        assert value.isalnum() and value == value.lower()

    def test_new_id_unique(self):
        assert len({new_id() for _ in range(200)}) == 200

    def test_timestamp_round_trip(self):
        stamp = utc_now_iso()
        assert parse_timestamp(stamp).tzinfo is not None

    def test_trailing_z(self):
        parsed = parse_timestamp("2024-03-01T12:00:00Z")
        assert parsed.utcoffset() == timezone.utc.utcoffset(None)
        assert parsed.hour == 12

    def test_naive_is_utc(self):
        assert parse_timestamp("2024-03-01T12:00:00").tzinfo == timezone.utc
