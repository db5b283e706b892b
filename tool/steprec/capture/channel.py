"""
MessageChannel — コンテキスト間のメッセージ配送

送りっぱなし（fire-and-forget）の配送路。送信者ごとの順序だけを保証する。
ハンドラがコルーチンを返した場合はタスクとして実行し、
送信側はその完了を待たない。ハンドラの失敗はログに残すのみ。
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Callable, Mapping

logger = logging.getLogger(__name__)

MessageHandler = Callable[[Mapping[str, Any]], Any]


class MessageChannel:
    """購読者にプレーンなデータを配送するチャネル。"""

    def __init__(self, name: str = "frames") -> None:
        self.name = name
        self._handlers: list[MessageHandler] = []
        self._pending: set[asyncio.Task[Any]] = set()

    def subscribe(self, handler: MessageHandler) -> Callable[[], None]:
        """ハンドラを登録し、解除用の関数を返す。"""
        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def post(self, payload: Mapping[str, Any]) -> None:
        """メッセージを全購読者に配送する。"""
        for handler in list(self._handlers):
            try:
                result = handler(payload)
            except Exception:
                logger.exception("チャネル %s のハンドラでエラーが発生しました", self.name)
                continue
            if inspect.isawaitable(result):
                task = asyncio.ensure_future(result)
                self._pending.add(task)
                task.add_done_callback(self._on_done)

    async def drain(self) -> None:
        """配送中のハンドラが全て終わるまで待つ。"""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _on_done(self, task: asyncio.Task[Any]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "チャネル %s のハンドラでエラーが発生しました", self.name,
                exc_info=(type(exc), exc, exc.__traceback__),
            )
