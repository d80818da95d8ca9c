"""Tests for vana_cli.config.settings."""

from pathlib import Path

import pytest

from vana_cli.config.settings import VanaSettings


def test_defaults() -> None:
    settings: VanaSettings = VanaSettings()
    assert settings.config_filename == "cli.config.toml"
    assert settings.request_timeout is None


def test_env_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("VANA_CONFIG_DIR", str(tmp_path))
    monkeypatch.setenv("VANA_REQUEST_TIMEOUT", "2.5")
    monkeypatch.setenv("VANA_KEYRING_SERVICE", "vana-dev")

    settings: VanaSettings = VanaSettings()

    assert settings.config_path == tmp_path / "cli.config.toml"
    assert settings.request_timeout == 2.5
    assert settings.keyring_service == "vana-dev"
