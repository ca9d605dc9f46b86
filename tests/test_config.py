"""
tests/test_config.py — YAML Configuration Loader Tests
=======================================================
"""

from __future__ import annotations

import textwrap

import pytest

from inkwell.config import load_config
from inkwell.errors import ConfigurationError


def _write(tmp_path, body: str):
    path = tmp_path / "config.yaml"
    path.write_text(textwrap.dedent(body), encoding="utf-8")
    return path


class TestLoadConfig:
    def test_defaults_to_builtin_catalog(self, tmp_path):
        cfg = load_config(_write(tmp_path, """
            app_name: Inkwell
            api_port: "8080"
        """))
        assert cfg.app_name == "Inkwell"
        assert cfg.api_port == 8080
        assert cfg.log_level == "INFO"
        assert len(cfg.achievements) == 5

    def test_custom_catalog(self, tmp_path):
        cfg = load_config(_write(tmp_path, """
            app_name: Inkwell
            api_port: 8000
            log_level: debug
            achievements:
              - {code: BIG, metric: TOTAL_ENTRIES, threshold: 100, points: 500}
              - {code: START, metric: TOTAL_ENTRIES, threshold: 1, points: 5}
        """))
        assert cfg.log_level == "DEBUG"
        assert cfg.achievements.codes() == ["START", "BIG"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="config.yaml.example"):
            load_config(tmp_path / "nope.yaml")

    def test_missing_required_key(self, tmp_path):
        with pytest.raises(KeyError):
            load_config(_write(tmp_path, "app_name: Inkwell\n"))

    def test_duplicate_achievement_is_fatal(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Duplicate"):
            load_config(_write(tmp_path, """
                app_name: Inkwell
                api_port: 8000
                achievements:
                  - {code: A, metric: STREAK_DAYS, threshold: 3, points: 25}
                  - {code: A, metric: STREAK_DAYS, threshold: 7, points: 75}
            """))

    def test_achievements_must_be_a_list(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config(_write(tmp_path, """
                app_name: Inkwell
                api_port: 8000
                achievements:
                  FIRST_ENTRY: 10
            """))

    def test_bad_log_level(self, tmp_path):
        with pytest.raises(ConfigurationError, match="log_level"):
            load_config(_write(tmp_path, """
                app_name: Inkwell
                api_port: 8000
                log_level: LOUD
            """))
