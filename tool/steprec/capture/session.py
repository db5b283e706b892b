"""
SessionCoordinator — 記録セッションの状態管理と単一書き込み

記録の開始・停止を全ページコンテキストへ配り、
各コンテキストから届いた Step を永続化ストアのステップ列へ追記する。

主な機能:
  - 記録状態（idle / recording）の管理
  - ページコンテキストの登録・解除と開始/停止の一斉配信
  - asyncio.Queue を介した単一ライタによるステップ追記・クリア
  - 画面録画の開始・停止と成果物パスの保存

ストアのステップ列は読み込み→追記→書き戻しで更新されるため、
更新は必ずライタタスク 1 本で直列化する。複数タブからほぼ同時に
届いたステップでも取りこぼしは起きない。
"""

from __future__ import annotations

import asyncio
import enum
import logging
from datetime import datetime
from typing import TYPE_CHECKING, Callable, Optional, Union

from .models import (
    KEY_IS_RECORDING,
    KEY_OPTIONS,
    KEY_SCREEN_RECORDING,
    KEY_STEPS,
    KEY_SYSTEM_INFO,
    SESSION_KEYS,
    RecordingOptions,
    RecordingSession,
    Step,
    SystemInfo,
)
from .store import KeyValueStore
from .system_info import format_datetime, local_system_info

if TYPE_CHECKING:
    from .context import PageContext
    from .screen import ScreenRecorder

logger = logging.getLogger(__name__)

StepListener = Callable[[Step], None]


# ---------------------------------------------------------------------------
# 状態・例外
# ---------------------------------------------------------------------------

class SessionState(enum.Enum):
    """記録セッションの状態。"""

    IDLE = "idle"
    RECORDING = "recording"


class RecordingStateError(RuntimeError):
    """記録中に開始を要求されたなど、状態に合わない操作。"""


class _ClearSteps:
    """ライタキューに積むクリア要求。"""


_CLEAR = _ClearSteps()

_WriteOp = Union[Step, _ClearSteps]


# ---------------------------------------------------------------------------
# SessionCoordinator 本体
# ---------------------------------------------------------------------------

class SessionCoordinator:
    """唯一の正となる記録セッションを保持するコーディネーター。

    ページコンテキストは開始時に配られたオプションのコピーだけを持ち、
    ステップは submit() でここに送る。

    Attributes:
        store: 永続化ストア
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        screen_recorder: Optional[ScreenRecorder] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.store = store
        self._screen_recorder = screen_recorder
        self._clock = clock
        self._state = SessionState.IDLE
        self._options = RecordingOptions()
        self._contexts: dict[str, PageContext] = {}
        self._listeners: list[StepListener] = []
        self._queue: Optional[asyncio.Queue[_WriteOp]] = None
        self._writer: Optional[asyncio.Task[None]] = None

    # ----- 状態 -----

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_recording(self) -> bool:
        return self._state == SessionState.RECORDING

    @property
    def options(self) -> RecordingOptions:
        """現在（または直前）の記録オプション。"""
        return self._options

    @property
    def contexts(self) -> list[PageContext]:
        return list(self._contexts.values())

    def initialize(self) -> RecordingSession:
        """ストアを初期状態に整える。

        ステップ列が無ければ空で作成する。前回のプロセスが記録中のまま
        終了していた場合、その記録フラグは引き継がず idle に戻す。

        Returns:
            初期化後のセッション
        """
        record = self.store.get(SESSION_KEYS)
        updates: dict[str, object] = {}
        if KEY_STEPS not in record:
            updates[KEY_STEPS] = []
        if record.get(KEY_IS_RECORDING):
            logger.warning("前回の記録が停止されていなかったため idle に戻します")
            updates[KEY_IS_RECORDING] = False
        if updates:
            self.store.set(updates)

        session = self.load_session()
        self._options = session.options
        return session

    def load_session(self) -> RecordingSession:
        return RecordingSession.from_record(self.store.get(SESSION_KEYS))

    def steps(self) -> list[Step]:
        return self.load_session().steps

    # ----- ページコンテキスト -----

    def register(self, context: PageContext) -> None:
        """ページコンテキストを登録する。記録中なら即座に開始させる。"""
        self._contexts[context.context_id] = context
        if self.is_recording:
            context.on_start(self._options)
        logger.debug("ページコンテキストを登録しました: %s", context.context_id)

    def unregister(self, context_id: str) -> None:
        context = self._contexts.pop(context_id, None)
        if context is None:
            return
        context.close()
        logger.debug("ページコンテキストを解除しました: %s", context_id)

    def add_listener(self, listener: StepListener) -> None:
        """ステップがストアへ追記された後に呼ばれるリスナーを登録する。"""
        self._listeners.append(listener)

    # ----- 開始・停止 -----

    async def start(
        self,
        options: Optional[RecordingOptions] = None,
        system_info: Optional[SystemInfo] = None,
    ) -> None:
        """記録を開始する。

        Args:
            options: 記録オプション（None で既定値）
            system_info: ブラウザから取得した環境情報（None で保存済みの値）

        Raises:
            RecordingStateError: 既に記録中の場合
        """
        if self.is_recording:
            raise RecordingStateError("既に記録中です。先に stop() を呼んでください。")

        self._options = options or RecordingOptions()
        info = system_info or self.load_session().system_info or local_system_info(self._clock())
        info = info.model_copy(update={"timestamp": format_datetime(self._clock())})

        self.store.set({
            KEY_IS_RECORDING: True,
            KEY_OPTIONS: self._options.to_record(),
            KEY_SYSTEM_INFO: info.to_record(),
        })
        self._state = SessionState.RECORDING

        for context in self.contexts:
            context.on_start(self._options)

        if self._options.record_screen and self._screen_recorder is not None:
            try:
                await self._screen_recorder.start()
            except Exception:
                logger.warning("画面録画を開始できませんでした", exc_info=True)
                await self._screen_recorder.stop()

        logger.info(
            "記録を開始しました (language=%s, screenshots=%s, selectors=%s)",
            self._options.language,
            self._options.capture_screenshots,
            self._options.capture_selectors,
        )

    async def stop(self) -> None:
        """記録を停止する。idle 状態で呼んでも何もしない。"""
        if not self.is_recording:
            logger.debug("記録中ではないため停止要求を無視しました")
            return

        self._state = SessionState.IDLE
        for context in self.contexts:
            context.on_stop()
        self.store.set({KEY_IS_RECORDING: False})

        if self._screen_recorder is not None and self._screen_recorder.is_active:
            artifacts = await self._screen_recorder.stop()
            if artifacts:
                self.store.set({KEY_SCREEN_RECORDING: artifacts[-1]})

        await self.flush()
        logger.info("記録を停止しました")

    # ----- ステップの追記・クリア -----

    def submit(self, step: Step) -> bool:
        """ステップの追記を要求する。

        記録中でなければ破棄する。追記はライタタスクで非同期に行われる。

        Returns:
            キューに積んだ場合 True
        """
        if not self.is_recording:
            logger.debug("記録中ではないためステップを破棄しました: %s", step.description)
            return False
        self._enqueue(step)
        return True

    async def clear(self) -> None:
        """ステップ列を空にする。何度呼んでも結果は同じ。"""
        self._enqueue(_CLEAR)
        await self.flush()

    async def flush(self) -> None:
        """キューに積まれた更新が全てストアへ反映されるまで待つ。"""
        if self._queue is not None:
            await self._queue.join()

    async def close(self) -> None:
        """記録を停止し、ライタタスクを終了する。"""
        await self.stop()
        await self.flush()
        for context_id in list(self._contexts):
            self.unregister(context_id)
        if self._writer is not None:
            self._writer.cancel()
            try:
                await self._writer
            except asyncio.CancelledError:
                pass
            self._writer = None

    # ----- ライタ -----

    def _enqueue(self, op: _WriteOp) -> None:
        if self._queue is None:
            self._queue = asyncio.Queue()
        if self._writer is None or self._writer.done():
            self._writer = asyncio.ensure_future(self._run_writer())
        self._queue.put_nowait(op)

    async def _run_writer(self) -> None:
        assert self._queue is not None
        while True:
            op = await self._queue.get()
            try:
                self._apply(op)
            except Exception:
                logger.exception("ストアへの書き込みに失敗しました")
            finally:
                self._queue.task_done()

    def _apply(self, op: _WriteOp) -> None:
        if isinstance(op, _ClearSteps):
            self.store.set({KEY_STEPS: []})
            logger.info("ステップをクリアしました")
            return

        record = self.store.get([KEY_STEPS])
        raw_steps = record.get(KEY_STEPS)
        steps = list(raw_steps) if isinstance(raw_steps, list) else []
        steps.append(op.to_record())
        self.store.set({KEY_STEPS: steps})
        logger.debug("ステップ %d を追記しました: %s", len(steps), op.description)

        for listener in list(self._listeners):
            try:
                listener(op)
            except Exception:
                logger.exception("ステップリスナーでエラーが発生しました")
