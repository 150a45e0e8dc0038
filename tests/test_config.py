"""Unit tests for tool Settings (stackcraft.config).

Tests cover:
- Settings defaults
- save/load
- from_env, including boolean parsing
"""

from __future__ import annotations

from pathlib import Path

import pytest

from stackcraft.config import DEFAULT_TEMPLATES_DIR, Settings


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


class TestSettingsDefaults:
    @pytest.mark.unit
    def test_defaults(self):
        settings = Settings()
        assert settings.templates_dir == DEFAULT_TEMPLATES_DIR
        assert settings.strict_templates is False
        assert settings.verbose is False
        assert settings.config_filename == "stackcraft.json"
        assert settings.write_config is True

    @pytest.mark.unit
    def test_bundled_templates_exist(self):
        assert (DEFAULT_TEMPLATES_DIR / "base").is_dir()


class TestSettingsPersistence:
    @pytest.mark.unit
    def test_save_and_load(self, tmp_path: Path):
        settings = Settings(templates_dir=tmp_path / "tpl", strict_templates=True)
        path = settings.save(tmp_path / "nested" / "settings.json")
        assert path.exists()

        loaded = Settings.load(path)
        assert loaded.templates_dir == tmp_path / "tpl"
        assert loaded.strict_templates is True


class TestSettingsFromEnv:
    @pytest.mark.unit
    def test_no_env_gives_defaults(self):
        assert Settings.from_env() == Settings()

    @pytest.mark.unit
    def test_reads_all_variables(self, monkeypatch, tmp_path: Path):
        monkeypatch.setenv("STACKCRAFT_TEMPLATES_DIR", str(tmp_path))
        monkeypatch.setenv("STACKCRAFT_STRICT_TEMPLATES", "true")
        monkeypatch.setenv("STACKCRAFT_VERBOSE", "1")
        monkeypatch.setenv("STACKCRAFT_CONFIG_FILENAME", "stack.json")

        settings = Settings.from_env()
        assert settings.templates_dir == tmp_path
        assert settings.strict_templates is True
        assert settings.verbose is True
        assert settings.config_filename == "stack.json"

    @pytest.mark.unit
    @pytest.mark.parametrize("raw", ["0", "false", "no", "off"])
    def test_falsy_flags(self, monkeypatch, raw):
        monkeypatch.setenv("STACKCRAFT_STRICT_TEMPLATES", raw)
        assert Settings.from_env().strict_templates is False

    @pytest.mark.unit
    def test_empty_flag_is_ignored(self, monkeypatch):
        monkeypatch.setenv("STACKCRAFT_VERBOSE", "")
        assert Settings.from_env().verbose is False
