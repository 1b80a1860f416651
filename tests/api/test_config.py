"""Tests for configuration classes."""

import dataclasses
import os
from unittest.mock import patch

import pytest

from config import (
    AppConfig,
    CORSConfig,
    RateLimitConfig,
    RedisConfig,
    SessionConfig,
    TrackerConfig,
    _parse_cors_origins,
)


class TestCORSConfig:
    """Tests for CORSConfig class."""

    def test_cors_default_origins(self):
        with patch.dict(os.environ, {}, clear=True):
            assert CORSConfig().allowed_origins == ["http://localhost:8000"]

    def test_cors_parses_env_var_with_whitespace(self):
        """Origins are split on commas and stripped."""
        env_origins = "  http://example.com  ,http://localhost:3000,, "
        with patch.dict(os.environ, {"CORS_ORIGINS": env_origins}):
            assert _parse_cors_origins() == ["http://example.com", "http://localhost:3000"]

    def test_cors_allows_credentials(self):
        assert CORSConfig().allow_credentials is True


class TestRateLimitConfig:
    """Tests for RateLimitConfig class."""

    def test_rate_limit_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            config = RateLimitConfig()
            assert config.enabled is True
            assert config.requests_per_minute == 60

    def test_rate_limit_from_env(self):
        with patch.dict(os.environ, {"RATE_LIMIT_ENABLED": "FALSE", "RATE_LIMIT_RPM": "120"}):
            config = RateLimitConfig()
            assert config.enabled is False
            assert config.requests_per_minute == 120
            assert config.limit == "120/minute"

    @pytest.mark.parametrize("value", ["false", "0", "no", "off"])
    def test_only_true_enables(self, value):
        with patch.dict(os.environ, {"RATE_LIMIT_ENABLED": value}):
            assert RateLimitConfig().enabled is False


class TestSessionConfig:
    """Tests for SessionConfig class."""

    def test_secret_key_auto_generates(self):
        with patch.dict(os.environ, {}, clear=True):
            config = SessionConfig()
            assert len(config.secret_key) > 0
            assert config.ttl == 3600

    def test_empty_secret_key_is_replaced(self):
        with patch.dict(os.environ, {"SECRET_KEY": ""}):
            assert SessionConfig().secret_key != ""

    def test_from_env(self):
        env = {"SECRET_KEY": "my-super-secret-key-12345", "SESSION_TTL": "600"}
        with patch.dict(os.environ, env):
            config = SessionConfig()
            assert config.secret_key == "my-super-secret-key-12345"
            assert config.ttl == 600


class TestRedisConfig:
    """Tests for RedisConfig class."""

    def test_redis_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            config = RedisConfig()
            assert config.enabled is True
            assert config.url == "redis://localhost:6379/0"
            assert config.password is None

    def test_redis_from_env(self):
        env = {
            "REDIS_ENABLED": "false",
            "REDIS_HOST": "redis.example.com",
            "REDIS_PORT": "6380",
            "REDIS_DB": "1",
            "REDIS_PASSWORD": "secret123",
        }
        with patch.dict(os.environ, env):
            config = RedisConfig()
            assert config.enabled is False
            assert config.url == "redis://:secret123@redis.example.com:6380/1"


class TestTrackerConfig:
    """Tests for TrackerConfig class."""

    def test_tracker_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            config = TrackerConfig()
            assert config.default_decks == 1
            assert (config.min_decks, config.max_decks) == (1, 8)
            assert config.bust_scores == (13, 14, 15, 16, 17)

    def test_default_decks_from_env(self):
        with patch.dict(os.environ, {"DEFAULT_DECKS": "6"}):
            assert TrackerConfig().default_decks == 6

    @pytest.mark.parametrize("value", ["0", "9"])
    def test_default_decks_out_of_range(self, value):
        with patch.dict(os.environ, {"DEFAULT_DECKS": value}):
            with pytest.raises(ValueError):
                TrackerConfig()

    def test_tracker_config_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            TrackerConfig().default_decks = 8


class TestAppConfig:
    """Tests for AppConfig class."""

    def test_app_config_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            config = AppConfig()
            assert config.debug is False
            assert config.host == "0.0.0.0"
            assert config.port == 8000
            assert config.log_level == "INFO"
            assert config.session.ttl == 3600

    def test_app_config_from_env(self):
        with patch.dict(os.environ, {"DEBUG": "true", "LOG_LEVEL": "debug", "PORT": "9000"}):
            config = AppConfig()
            assert config.debug is True
            assert config.log_level == "DEBUG"
            assert config.port == 9000

    def test_app_config_has_nested_configs(self):
        config = AppConfig()
        assert isinstance(config.redis, RedisConfig)
        assert isinstance(config.tracker, TrackerConfig)
        assert isinstance(config.cors, CORSConfig)
        assert isinstance(config.rate_limit, RateLimitConfig)
        assert isinstance(config.session, SessionConfig)
