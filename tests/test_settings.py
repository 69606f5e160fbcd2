"""Tests for Settings validation."""

from pathlib import Path

import pytest
from pydantic import ValidationError


class TestSettingsDefaults:
    def test_settings_created_with_temp_paths(self, settings, tmp_path):
        assert settings.library_dir == tmp_path / "library"
        assert settings.log_dir == tmp_path / "logs"

    def test_code_defaults(self, monkeypatch):
        from config.settings import Settings
        for name in ("LIBRARY_DIR", "SCAN_MAX_DEPTH", "SCAN_MAX_DIRECTORIES",
                     "ADVANCED_CHAPTER_THRESHOLD", "DEFAULT_AUTHOR", "LOG_DIR"):
            monkeypatch.delenv(f"FOLIO_{name}", raising=False)
        # Use _env_file=None to test code defaults without .env overrides
        s = Settings(_env_file=None)
        assert s.library_dir == Path("./data/library")
        assert s.scan_max_depth == 3
        assert s.scan_max_directories == 600
        assert s.advanced_chapter_threshold == 6
        assert s.default_author == "Autor"

    def test_env_prefix(self, monkeypatch, tmp_path):
        from config.settings import Settings
        monkeypatch.setenv("FOLIO_SCAN_MAX_DEPTH", "5")
        monkeypatch.setenv("FOLIO_LIBRARY_DIR", str(tmp_path / "lib"))
        s = Settings(_env_file=None)
        assert s.scan_max_depth == 5
        assert s.library_dir == tmp_path / "lib"


class TestSettingsValidation:
    def test_negative_depth_raises(self):
        from config.settings import Settings
        with pytest.raises(ValidationError, match="scan_max_depth"):
            Settings(_env_file=None, scan_max_depth=-1)

    def test_zero_depth_allowed(self):
        from config.settings import Settings
        assert Settings(_env_file=None, scan_max_depth=0).scan_max_depth == 0

    def test_zero_directories_raises(self):
        from config.settings import Settings
        with pytest.raises(ValidationError, match=">= 1"):
            Settings(_env_file=None, scan_max_directories=0)

    def test_zero_threshold_raises(self):
        from config.settings import Settings
        with pytest.raises(ValidationError, match=">= 1"):
            Settings(_env_file=None, advanced_chapter_threshold=0)

    def test_blank_author_raises(self):
        from config.settings import Settings
        with pytest.raises(ValidationError, match="default_author"):
            Settings(_env_file=None, default_author="   ")

    def test_author_is_trimmed(self):
        from config.settings import Settings
        assert Settings(_env_file=None, default_author="  Ana ").default_author == "Ana"


class TestGetSettings:
    def test_cached_instance(self, monkeypatch):
        import config.settings as settings_module
        monkeypatch.setattr(settings_module, "_settings_instance", None)
        first = settings_module.get_settings()
        assert settings_module.get_settings() is first
