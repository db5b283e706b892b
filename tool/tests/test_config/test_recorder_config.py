"""
Config テスト — レコーダー設定の読み込み

環境変数からの設定読み込みとビューポート指定の解析を検証する。
"""

from __future__ import annotations

from pathlib import Path

import pytest

from steprec.config import RecorderConfig, _parse_bool, load_config_from_env, parse_viewport


class TestRecorderConfigDefaults:
    """RecorderConfig のデフォルト値テスト。"""

    def test_defaults(self):
        config = RecorderConfig()
        assert config.store_path == Path(".steprec") / "session.yaml"
        assert config.export_dir == Path("exports")
        assert config.headed is True
        assert config.screenshot_timeout == 5.0
        assert (config.viewport_width, config.viewport_height) == (1280, 720)
        assert config.language == "en"

    def test_empty_env_gives_defaults(self):
        assert load_config_from_env({}) == RecorderConfig()


class TestParseBool:
    """_parse_bool のテスト。"""

    @pytest.mark.parametrize("value", ["true", "TRUE", "1", "yes"])
    def test_truthy(self, value):
        assert _parse_bool(value) is True

    @pytest.mark.parametrize("value", ["false", "0", "no", ""])
    def test_falsy(self, value):
        assert _parse_bool(value) is False


class TestLoadConfigFromEnv:
    """load_config_from_env のテスト。"""

    def test_all_values(self):
        config = load_config_from_env({
            "STEPREC_STORE": "/tmp/rec/session.yaml",
            "STEPREC_EXPORT_DIR": "out",
            "STEPREC_HEADED": "false",
            "STEPREC_SCREENSHOT_TIMEOUT": "2.5",
            "STEPREC_VIEWPORT_WIDTH": "1920",
            "STEPREC_VIEWPORT_HEIGHT": "1080",
            "STEPREC_LANGUAGE": "fr",
        })
        assert config.store_path == Path("/tmp/rec/session.yaml")
        assert config.export_dir == Path("out")
        assert config.headed is False
        assert config.screenshot_timeout == 2.5
        assert (config.viewport_width, config.viewport_height) == (1920, 1080)
        assert config.language == "fr"

    @pytest.mark.parametrize(("key", "value"), [
        ("STEPREC_SCREENSHOT_TIMEOUT", "soon"),
        ("STEPREC_SCREENSHOT_TIMEOUT", "0"),
        ("STEPREC_VIEWPORT_WIDTH", "wide"),
        ("STEPREC_VIEWPORT_HEIGHT", "-1"),
        ("STEPREC_LANGUAGE", "ja"),
    ])
    def test_invalid_values_fall_back(self, key, value, caplog):
        config = load_config_from_env({key: value})
        assert config == RecorderConfig()
        assert key in caplog.text


class TestParseViewport:
    """parse_viewport のテスト。"""

    def test_valid(self):
        assert parse_viewport("1024x768") == (1024, 768)
        assert parse_viewport("800X600") == (800, 600)

    @pytest.mark.parametrize("value", ["1024", "axb", "1x2x3", ""])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_viewport(value)
