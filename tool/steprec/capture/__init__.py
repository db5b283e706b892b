"""
capture パッケージ — 操作の取得からセッションへの記録まで

主な構成:
  - translations: 操作名の翻訳テーブル
  - models: Step / RecordingOptions / SystemInfo / RecordingSession
  - normalizer: イベント → Step の正規化
  - frame_relay: iframe からトップレベルへの中継
  - context: ページコンテキスト（トップ文書 / iframe）
  - session: 記録セッションのコーディネーター
  - store: 永続化ストア
  - screenshot / screen: スクリーンショットと画面録画
  - system_info: 環境情報の収集
"""

from __future__ import annotations

from .channel import MessageChannel
from .context import PageContext
from .events import RawEvent
from .models import ActionKind, RecordingOptions, RecordingSession, Selectors, Step, SystemInfo
from .session import RecordingStateError, SessionCoordinator, SessionState
from .store import KeyValueStore, MemoryStore, YamlFileStore
from .translations import translate

__all__ = [
    "ActionKind",
    "KeyValueStore",
    "MemoryStore",
    "MessageChannel",
    "PageContext",
    "RawEvent",
    "RecordingOptions",
    "RecordingSession",
    "RecordingStateError",
    "Selectors",
    "SessionCoordinator",
    "SessionState",
    "Step",
    "SystemInfo",
    "YamlFileStore",
    "translate",
]
