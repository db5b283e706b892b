"""
イベント配送 — document / window 相当のリスナー登録先

ブラウザのイベント配送のうち、記録に必要な部分だけを再現する:
  - capture フェーズのリスナーは bubble フェーズのリスナーより先に呼ばれる
  - bubble フェーズで stop_propagation() されても capture リスナーには届く
  - リスナーの例外は記録して次のリスナーへ進む
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, Union

from ..dom.element import ElementLike
from .screenshot import Region

logger = logging.getLogger(__name__)

EVENT_CLICK = "click"
EVENT_CHANGE = "change"
EVENT_BEFORE_UNLOAD = "beforeunload"


@dataclass
class RawEvent:
    """ページから届いた未加工のイベント。

    Attributes:
        type: click / change / beforeunload
        target: イベント対象要素（beforeunload では None）
        url: イベント発生時の document URL
        region: 対象要素の領域またはポインタ位置
    """

    type: str
    target: Optional[ElementLike] = None
    url: str = ""
    region: Optional[Region] = None
    propagation_stopped: bool = field(default=False, init=False)

    def stop_propagation(self) -> None:
        self.propagation_stopped = True


Listener = Callable[[RawEvent], Union[Awaitable[Any], Any]]


class EventTargetRegistry:
    """イベント種別ごとのリスナー登録先。

    Attributes:
        name: ログ表示用の名前（document / window 等）
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._listeners: list[tuple[str, Listener, bool]] = []

    def add_listener(self, event_type: str, listener: Listener, *, capture: bool = False) -> None:
        """リスナーを登録する。同じ組み合わせの二重登録は無視する。"""
        entry = (event_type, listener, capture)
        if entry not in self._listeners:
            self._listeners.append(entry)

    def remove_listener(self, event_type: str, listener: Listener, *, capture: bool = False) -> None:
        """リスナーを解除する。未登録なら何もしない。"""
        entry = (event_type, listener, capture)
        if entry in self._listeners:
            self._listeners.remove(entry)

    def listener_count(self, event_type: Optional[str] = None) -> int:
        if event_type is None:
            return len(self._listeners)
        return sum(1 for t, _, _ in self._listeners if t == event_type)

    async def dispatch(self, event: RawEvent) -> None:
        """イベントを capture → bubble の順に配送する。

        Args:
            event: 配送するイベント
        """
        snapshot = [e for e in self._listeners if e[0] == event.type]
        capturing = [listener for _, listener, capture in snapshot if capture]
        bubbling = [listener for _, listener, capture in snapshot if not capture]

        for listener in capturing:
            await self._invoke(listener, event)

        for listener in bubbling:
            if event.propagation_stopped:
                logger.debug("%s の %s は伝播が停止されました", self.name, event.type)
                break
            await self._invoke(listener, event)

    async def _invoke(self, listener: Listener, event: RawEvent) -> None:
        try:
            result = listener(event)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("%s の %s リスナーでエラーが発生しました", self.name, event.type)
