"""Tests for environment driven settings."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest
from pydantic import ValidationError

from quorumvault.config import Settings, get_settings
from quorumvault.errors import InvalidThreshold
from quorumvault.types import ExecutionPolicy

from tests.conftest import DEV_PRIVATE_KEY, OWNER_A, OWNER_B, OWNER_C

if TYPE_CHECKING:
    from _pytest.monkeypatch import MonkeyPatch


def test_defaults() -> None:
    settings = Settings()

    assert settings.owners == []
    assert settings.threshold == 1
    assert settings.execution_policy == ExecutionPolicy.CONSUME
    assert settings.log_level == "INFO"


def test_owners_from_comma_separated_env(monkeypatch: MonkeyPatch) -> None:
    monkeypatch.setenv("QUORUMVAULT_OWNERS", f"{OWNER_A}, {OWNER_B},{OWNER_C}")
    monkeypatch.setenv("QUORUMVAULT_THRESHOLD", "2")

    settings = Settings()

    assert settings.owners == [OWNER_A, OWNER_B, OWNER_C]
    config = settings.owner_config()
    assert config.threshold == 2
    assert config.owners == (OWNER_A, OWNER_B, OWNER_C)


def test_owners_from_json_env(monkeypatch: MonkeyPatch) -> None:
    monkeypatch.setenv("QUORUMVAULT_OWNERS", json.dumps([OWNER_A, OWNER_B]))
    monkeypatch.setenv("QUORUMVAULT_EXECUTION_POLICY", "revert")

    settings = Settings()

    assert settings.owners == [OWNER_A, OWNER_B]
    assert settings.execution_policy == ExecutionPolicy.REVERT


def test_malformed_owner_rejected(monkeypatch: MonkeyPatch) -> None:
    monkeypatch.setenv("QUORUMVAULT_OWNERS", "alice,bob")
    with pytest.raises(ValidationError):
        Settings()


def test_private_key_length_checked() -> None:
    assert Settings(pool_private_key=DEV_PRIVATE_KEY).pool_private_key == DEV_PRIVATE_KEY
    with pytest.raises(ValidationError):
        Settings(pool_private_key="0x1234")


def test_log_level_normalised() -> None:
    assert Settings(log_level="debug").log_level == "DEBUG"
    with pytest.raises(ValidationError):
        Settings(log_level="chatty")


def test_owner_config_surfaces_engine_errors() -> None:
    """Threshold bounds are enforced by the owner config, not the settings."""
    settings = Settings(owners=[OWNER_A], threshold=2)
    with pytest.raises(InvalidThreshold):
        settings.owner_config()


def test_get_settings_is_cached(monkeypatch: MonkeyPatch) -> None:
    get_settings.cache_clear()
    monkeypatch.setenv("QUORUMVAULT_THRESHOLD", "3")
    try:
        assert get_settings() is get_settings()
        assert get_settings().threshold == 3
    finally:
        get_settings.cache_clear()
