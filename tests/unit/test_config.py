"""Tests for settings and resolved watch configuration."""

from __future__ import annotations

from pathlib import Path

import pytest

from pumlwatch.config import Settings, get_settings, reset_settings
from pumlwatch.core.config import OUTPUT_FORMATS, POLL_INTERVAL, WatchConfig
from pumlwatch.core.errors import ConfigError


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    for var in ["PUMLWATCH_INPUT_DIR", "PUMLWATCH_OUTPUT_DIR", "PUMLWATCH_PORT", "PUMLWATCH_PLANTUML_PATH"]:
        monkeypatch.delenv(var, raising=False)
    reset_settings()
    yield
    reset_settings()


class TestSettings:
    def test_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        settings = Settings()
        assert settings.input_dir == Path("input")
        assert settings.output_dir == Path("output")
        assert settings.plantuml_path == Path("plantuml.jar")
        assert settings.port == 8080

    def test_env_overrides(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("PUMLWATCH_INPUT_DIR", "/srv/diagrams")
        monkeypatch.setenv("PUMLWATCH_PORT", "9000")
        settings = Settings()
        assert settings.input_dir == Path("/srv/diagrams")
        assert settings.port == 9000

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()


class TestWatchConfig:
    def test_paths_are_absolute(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = WatchConfig.from_paths("in", "out")
        assert config.input_dir == tmp_path.resolve() / "in"
        assert config.output_dir == tmp_path.resolve() / "out"
        assert config.poll_interval == POLL_INTERVAL
        assert config.formats == OUTPUT_FORMATS

    def test_same_directory_rejected(self, tmp_path):
        with pytest.raises(ConfigError, match="must differ"):
            WatchConfig.from_paths(tmp_path, tmp_path)

    def test_output_inside_input_rejected(self, tmp_path):
        with pytest.raises(ConfigError, match="inside input"):
            WatchConfig.from_paths(tmp_path, tmp_path / "out")

    def test_input_inside_output_rejected(self, tmp_path):
        with pytest.raises(ConfigError, match="inside output"):
            WatchConfig.from_paths(tmp_path / "in", tmp_path)

    def test_unknown_format_rejected(self, tmp_path):
        with pytest.raises(ConfigError, match="unsupported"):
            WatchConfig.from_paths(tmp_path / "in", tmp_path / "out", formats=("svg", "pdf"))

    def test_from_settings(self, tmp_path):
        settings = Settings(
            input_dir=tmp_path / "src",
            output_dir=tmp_path / "dst",
            plantuml_path=Path("/opt/plantuml.jar"),
            java_path="java21",
        )
        config = WatchConfig.from_settings(settings)
        assert config.input_dir == (tmp_path / "src").resolve()
        assert config.plantuml_path == Path("/opt/plantuml.jar")
        assert config.java_path == "java21"
