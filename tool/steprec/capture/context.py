"""
PageContext — 1 つのブラウジングコンテキスト（トップ文書または iframe）

各コンテキストは自分のリスナーと記録状態のコピーを持ち、
他のコンテキストとはメモリを共有しない。
トップレベルは EventNormalizer と中継受信側を、iframe は FrameRelay を持つ。
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from .channel import MessageChannel
from .events import EVENT_BEFORE_UNLOAD, EventTargetRegistry, RawEvent
from .frame_relay import FrameRelay, TopFrameReceiver
from .models import RecordingOptions
from .normalizer import CaptureState, EventNormalizer, StepSink
from .screenshot import DEFAULT_CAPTURE_TIMEOUT, ScreenshotCapability

logger = logging.getLogger(__name__)


class PageContext:
    """記録対象のブラウジングコンテキスト。

    Attributes:
        context_id: コンテキスト ID（iframe では中継メッセージの sender になる）
        is_top: トップレベル文書かどうか
        state: 記録状態のキャッシュ
        document: document 相当のリスナー登録先
        window: window 相当のリスナー登録先
    """

    def __init__(
        self,
        context_id: str,
        *,
        is_top: bool,
        channel: MessageChannel,
        emit: StepSink,
        screenshots: Optional[ScreenshotCapability] = None,
        screenshot_timeout: float = DEFAULT_CAPTURE_TIMEOUT,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.context_id = context_id
        self.is_top = is_top
        self.state = CaptureState()
        self.document = EventTargetRegistry(f"{context_id}:document")
        self.window = EventTargetRegistry(f"{context_id}:window")

        self.normalizer: Optional[EventNormalizer] = None
        self.receiver: Optional[TopFrameReceiver] = None
        self.relay: Optional[FrameRelay] = None

        if is_top:
            self.normalizer = EventNormalizer(
                self.state, self.document, self.window, emit,
                screenshots=screenshots,
                screenshot_timeout=screenshot_timeout,
                clock=clock,
            )
            self.receiver = TopFrameReceiver(self.normalizer, channel)
        else:
            self.relay = FrameRelay(context_id, self.state, self.document, channel)

    def on_start(self, options: RecordingOptions) -> None:
        if self.normalizer is not None:
            self.normalizer.on_start(options)
        if self.relay is not None:
            self.relay.on_start(options)

    def on_stop(self) -> None:
        if self.normalizer is not None:
            self.normalizer.on_stop()
        if self.relay is not None:
            self.relay.on_stop()

    async def dispatch(self, event: RawEvent) -> None:
        """イベントを種別に応じて window または document に配送する。"""
        if event.type == EVENT_BEFORE_UNLOAD:
            await self.window.dispatch(event)
        else:
            await self.document.dispatch(event)

    def close(self) -> None:
        self.on_stop()
        if self.receiver is not None:
            self.receiver.close()
