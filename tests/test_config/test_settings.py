"""Tests for settings from environment variables."""

from pathlib import Path

import pytest

from labcoat.config import Config, Settings


class TestSettings:
    """Environment parsing."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for key in ("LABCOAT_TRANSPORT", "LABCOAT_NIX_WORKERS", "LABCOAT_CONFIG"):
            monkeypatch.delenv(key, raising=False)

        settings = Settings.from_env()

        assert settings.transport == "http"
        assert settings.http_host == "127.0.0.1"
        assert settings.http_port == 8000
        assert settings.nix_workers == 2
        assert settings.nix_timeout == 30.0
        assert settings.hover_delay == 0.5
        assert not settings.config_required
        assert settings.config_path.parts[-2:] == ("labcoat", "config.toml")

    def test_values_from_env(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("LABCOAT_FLAKE_PATH", str(tmp_path))
        monkeypatch.setenv("LABCOAT_TRANSPORT", "STDIO")
        monkeypatch.setenv("LABCOAT_NIX_WORKERS", "4")
        monkeypatch.setenv("LABCOAT_NIX_TIMEOUT", "2.5")
        monkeypatch.setenv("LABCOAT_LOG_LEVEL", "debug")
        monkeypatch.setenv("LABCOAT_ENABLE_UI", "yes")

        settings = Settings.from_env()

        assert settings.flake_path == tmp_path
        assert settings.transport == "stdio"
        assert settings.nix_workers == 4
        assert settings.nix_timeout == 2.5
        assert settings.log_level == "DEBUG"
        assert settings.enable_ui

    def test_invalid_values_fall_back(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LABCOAT_TRANSPORT", "carrier-pigeon")
        monkeypatch.setenv("LABCOAT_HTTP_PORT", "eighty")
        monkeypatch.setenv("LABCOAT_HOVER_DELAY", "soon")

        settings = Settings.from_env()

        assert settings.transport == "http"
        assert settings.http_port == 8000
        assert settings.hover_delay == 0.5

    def test_explicit_config_path_is_required(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        monkeypatch.setenv("LABCOAT_CONFIG", str(tmp_path / "missing.toml"))

        settings = Settings.from_env()
        assert settings.config_required

        with pytest.raises(FileNotFoundError):
            Config.from_env()

    def test_xdg_config_home(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.delenv("LABCOAT_CONFIG", raising=False)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))

        assert Settings.from_env().config_path == tmp_path / "labcoat" / "config.toml"
