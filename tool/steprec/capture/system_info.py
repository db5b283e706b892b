"""
環境情報の収集 — ブラウザ・OS・解像度・日時

User-Agent 文字列と画面サイズから SystemInfo を組み立てる。
ブラウザが無い場合（CLI 単体実行など）は Python 実行環境から推定する。
"""

from __future__ import annotations

import platform
import re
from datetime import datetime
from typing import Optional

from .models import SystemInfo

UNKNOWN_OS = "Unknown OS"

# (User-Agent に含まれる目印, 表示名, バージョン抽出パターン) を判定順に並べる
_BROWSER_PATTERNS = (
    ("Chrome", "Chrome", re.compile(r"Chrome/(\d+\.\d+)")),
    ("Firefox", "Firefox", re.compile(r"Firefox/(\d+\.\d+)")),
    ("Edge", "Edge", re.compile(r"Edge/(\d+\.\d+)")),
)

_OS_MARKERS = (
    ("Win", "Windows"),
    ("Mac", "MacOS"),
    ("Linux", "Linux"),
    ("Android", "Android"),
    ("iOS", "iOS"),
)

_PLATFORM_NAMES = {
    "Windows": "Windows",
    "Darwin": "MacOS",
    "Linux": "Linux",
}


def format_datetime(moment: datetime) -> str:
    """ロケール形式の日時文字列を返す。"""
    return moment.strftime("%x %X")


def detect_browser(user_agent: str) -> str:
    """User-Agent からブラウザ名とバージョンを推定する。

    該当なしの場合は User-Agent をそのまま返す。
    """
    for marker, name, pattern in _BROWSER_PATTERNS:
        if marker in user_agent:
            match = pattern.search(user_agent)
            if match:
                return f"{name} {match.group(1)}"
            return name
    return user_agent or "Unknown"


def detect_os(user_agent: str) -> str:
    for marker, name in _OS_MARKERS:
        if marker in user_agent:
            return name
    return UNKNOWN_OS


def collect_system_info(
    user_agent: str,
    screen_width: int,
    screen_height: int,
    now: Optional[datetime] = None,
) -> SystemInfo:
    """ブラウザから取得した値で SystemInfo を作る。

    Args:
        user_agent: navigator.userAgent
        screen_width: screen.width
        screen_height: screen.height
        now: 記録日時（None で現在時刻）

    Returns:
        SystemInfo
    """
    moment = now or datetime.now()
    return SystemInfo(
        browser=detect_browser(user_agent),
        os=detect_os(user_agent),
        resolution=f"{screen_width}x{screen_height}",
        timestamp=format_datetime(moment),
    )


def local_system_info(now: Optional[datetime] = None) -> SystemInfo:
    """ブラウザ情報が得られない場合に実行環境から SystemInfo を作る。"""
    moment = now or datetime.now()
    return SystemInfo(
        browser="Unknown",
        os=_PLATFORM_NAMES.get(platform.system(), UNKNOWN_OS),
        resolution="unknown",
        timestamp=format_datetime(moment),
    )
