"""
レコーダー設定 — 環境変数・CLI オプションからの設定読み込み

CLI オプション > 環境変数 > デフォルト値 の優先順位で適用される。

環境変数一覧:
  STEPREC_STORE             : セッション保存先 YAML（デフォルト: .steprec/session.yaml）
  STEPREC_EXPORT_DIR        : エクスポート・録画の出力先（デフォルト: exports）
  STEPREC_HEADED            : ブラウザ表示モード（true/false, デフォルト: true）
  STEPREC_SCREENSHOT_TIMEOUT: スクリーンショット待ちの上限秒数（デフォルト: 5.0）
  STEPREC_VIEWPORT_WIDTH    : ビューポート幅（デフォルト: 1280）
  STEPREC_VIEWPORT_HEIGHT   : ビューポート高さ（デフォルト: 720）
  STEPREC_LANGUAGE          : 記録時の表示言語（デフォルト: en）
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from .capture.screenshot import DEFAULT_CAPTURE_TIMEOUT
from .capture.translations import DEFAULT_LANGUAGE, supported_languages

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# 環境変数キー定数
# ---------------------------------------------------------------------------

_ENV_STORE = "STEPREC_STORE"
_ENV_EXPORT_DIR = "STEPREC_EXPORT_DIR"
_ENV_HEADED = "STEPREC_HEADED"
_ENV_SCREENSHOT_TIMEOUT = "STEPREC_SCREENSHOT_TIMEOUT"
_ENV_VIEWPORT_WIDTH = "STEPREC_VIEWPORT_WIDTH"
_ENV_VIEWPORT_HEIGHT = "STEPREC_VIEWPORT_HEIGHT"
_ENV_LANGUAGE = "STEPREC_LANGUAGE"


# ---------------------------------------------------------------------------
# 設定データクラス
# ---------------------------------------------------------------------------

@dataclass
class RecorderConfig:
    """レコーダーの実行時設定。

    Attributes:
        store_path: セッション保存先 YAML ファイル
        export_dir: エクスポート・録画の出力先ディレクトリ
        headed: ブラウザ表示モード（True=表示, False=ヘッドレス）
        screenshot_timeout: スクリーンショット待ちの上限（秒）
        viewport_width: ビューポート幅
        viewport_height: ビューポート高さ
        language: 記録時の表示言語
    """

    store_path: Path = field(default_factory=lambda: Path(".steprec") / "session.yaml")
    export_dir: Path = field(default_factory=lambda: Path("exports"))
    headed: bool = True
    screenshot_timeout: float = DEFAULT_CAPTURE_TIMEOUT
    viewport_width: int = 1280
    viewport_height: int = 720
    language: str = DEFAULT_LANGUAGE


# ---------------------------------------------------------------------------
# 環境変数からの読み込み
# ---------------------------------------------------------------------------

def _parse_bool(value: str) -> bool:
    """文字列を bool に変換する。

    Args:
        value: "true", "1", "yes" → True、それ以外 → False

    Returns:
        変換結果
    """
    return value.lower() in ("true", "1", "yes")


def _parse_positive_int(env: Mapping[str, str], key: str) -> Optional[int]:
    try:
        value = int(env[key])
    except ValueError:
        logger.warning("%s の値が不正です: %s", key, env[key])
        return None
    if value <= 0:
        logger.warning("%s は正の整数で指定してください: %s", key, env[key])
        return None
    return value


def load_config_from_env(env: Optional[Mapping[str, str]] = None) -> RecorderConfig:
    """環境変数から RecorderConfig を生成する。

    設定されていない・不正な環境変数はデフォルト値を使用する。

    Args:
        env: 環境変数の辞書（None で os.environ）

    Returns:
        環境変数から読み込んだ設定
    """
    env = os.environ if env is None else env
    config = RecorderConfig()

    if _ENV_STORE in env:
        config.store_path = Path(env[_ENV_STORE])

    if _ENV_EXPORT_DIR in env:
        config.export_dir = Path(env[_ENV_EXPORT_DIR])

    if _ENV_HEADED in env:
        config.headed = _parse_bool(env[_ENV_HEADED])

    if _ENV_SCREENSHOT_TIMEOUT in env:
        try:
            timeout = float(env[_ENV_SCREENSHOT_TIMEOUT])
        except ValueError:
            logger.warning(
                "%s の値が不正です: %s", _ENV_SCREENSHOT_TIMEOUT, env[_ENV_SCREENSHOT_TIMEOUT],
            )
        else:
            if timeout > 0:
                config.screenshot_timeout = timeout
            else:
                logger.warning("%s は正の数で指定してください: %s", _ENV_SCREENSHOT_TIMEOUT, timeout)

    if _ENV_VIEWPORT_WIDTH in env:
        width = _parse_positive_int(env, _ENV_VIEWPORT_WIDTH)
        if width is not None:
            config.viewport_width = width

    if _ENV_VIEWPORT_HEIGHT in env:
        height = _parse_positive_int(env, _ENV_VIEWPORT_HEIGHT)
        if height is not None:
            config.viewport_height = height

    if _ENV_LANGUAGE in env:
        language = env[_ENV_LANGUAGE]
        if language in supported_languages():
            config.language = language
        else:
            logger.warning("%s は未対応の言語です: %s", _ENV_LANGUAGE, language)

    logger.debug("設定を読み込みました: %s", config)
    return config


def parse_viewport(value: str) -> tuple[int, int]:
    """WIDTHxHEIGHT 形式の文字列をビューポートサイズに変換する。

    Raises:
        ValueError: 形式が不正な場合
    """
    width, height = value.lower().split("x")
    return int(width), int(height)
