"""
browser パッケージ — Playwright による実ブラウザでの記録

主な構成:
  - session: ブラウザの起動・終了・トレース
  - capture: スクリーンショット / 画面録画（トレース）の実装
  - bridge: 注入スクリプトからのイベントをページコンテキストへ配送
  - recorder: 起動から停止までの記録フロー
"""

from __future__ import annotations

from .bridge import PageBridge, to_raw_event
from .capture import PageScreenshotter, TracingCapture
from .recorder import record
from .session import BrowserSession, BrowserState

__all__ = [
    "BrowserSession",
    "BrowserState",
    "PageBridge",
    "PageScreenshotter",
    "TracingCapture",
    "record",
    "to_raw_event",
]
