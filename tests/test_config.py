"""
Unit tests for engine configuration.
"""

import logging

import pytest

from windzone.core.config import EngineConfig, ZoningPolicy, configure_logging
from windzone.core.errors import ValidationError


ENV_VARS = (
    "WINDZONE_CACHE_MAX_ENTRIES", "WINDZONE_CACHE_TTL", "WINDZONE_HISTORY_LIMIT",
    "WINDZONE_PROGRESS_INTERVAL", "WINDZONE_PROGRESS_STEP", "WINDZONE_CORNER_CAP",
    "WINDZONE_PERIMETER_CAP", "WINDZONE_MIN_ZONE_SIZE", "WINDZONE_REENTRANT_GCP",
    "WINDZONE_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    # setenv first so teardown also removes values loaded from .env files
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


class TestEngineConfig:

    def test_defaults(self):
        config = EngineConfig()

        assert config.cache_max_entries == 50
        assert config.cache_default_ttl == 3600.0
        assert config.history_limit == 50
        assert config.corner_cap == 3.0
        assert config.perimeter_cap == 10.0
        assert config.reentrant_gcp == -3.0

    @pytest.mark.parametrize("kwargs", [
        {"cache_max_entries": 0},
        {"cache_default_ttl": -1.0},
        {"history_limit": -1},
        {"progress_interval": 0.0},
        {"progress_step": 0.0},
        {"log_level": "LOUD"},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            EngineConfig(**kwargs)

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("WINDZONE_CACHE_MAX_ENTRIES", "10")
        monkeypatch.setenv("WINDZONE_CACHE_TTL", "120")
        monkeypatch.setenv("WINDZONE_REENTRANT_GCP", "-3.5")
        monkeypatch.setenv("WINDZONE_LOG_LEVEL", "debug")

        config = EngineConfig.from_env()

        assert config.cache_max_entries == 10
        assert config.cache_default_ttl == 120.0
        assert config.reentrant_gcp == -3.5
        assert config.log_level == "DEBUG"

    def test_from_env_file(self, tmp_path, monkeypatch):
        env_file = tmp_path / ".env"
        env_file.write_text("WINDZONE_PERIMETER_CAP=6\nWINDZONE_HISTORY_LIMIT=5\n")

        config = EngineConfig.from_env(str(env_file))

        assert config.perimeter_cap == 6.0
        assert config.history_limit == 5

    def test_missing_env_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            EngineConfig.from_env(str(tmp_path / "missing.env"))

    def test_unparseable_value(self, monkeypatch):
        monkeypatch.setenv("WINDZONE_CACHE_MAX_ENTRIES", "many")
        with pytest.raises(ValueError):
            EngineConfig.from_env()

    def test_zoning_policy(self):
        policy = EngineConfig(corner_cap=4.0, min_zone_size=2.0).zoning_policy()

        assert policy.corner_cap == 4.0
        assert policy.min_zone_size == 2.0
        assert policy.perimeter_cap == 10.0


class TestZoningPolicy:

    def test_positive_reentrant_gcp_rejected(self):
        with pytest.raises(ValidationError):
            ZoningPolicy(reentrant_gcp=1.0)

    def test_non_positive_cap_rejected(self):
        with pytest.raises(ValidationError):
            ZoningPolicy(corner_cap=0.0)


def test_configure_logging(caplog):
    configure_logging("DEBUG")
    with caplog.at_level(logging.INFO, logger="windzone"):
        logging.getLogger("windzone.test").info("hello")
    assert "hello" in caplog.text
