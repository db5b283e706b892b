"""
FrameRelay — iframe 内の操作をトップレベルのコンテキストへ中継する

iframe（ネストしたブラウジングコンテキスト）では Step を確定せず、
要素情報をプレーンなデータとしてトップレベルへ送る。
要素そのものはフレーム境界を越えられないため、送るのは説明文とロケーターだけ。

トップレベル側（TopFrameReceiver）はメッセージの形を検証してから、
同一フレームの操作と同じ組み立て処理で Step を作り、説明文に " (in iframe)" を付ける。

中継するのは click と input のみ。iframe 内のページ遷移は記録しない。
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .channel import MessageChannel
from .events import EVENT_CHANGE, EVENT_CLICK, EventTargetRegistry, RawEvent
from .models import ElementInfo, RecordingOptions, Step
from .normalizer import CaptureState, EventNormalizer, element_info, input_value_of
from .screenshot import Region

logger = logging.getLogger(__name__)

FRAME_EVENT_TOPIC = "steprec.frame-event"
IFRAME_SUFFIX = " (in iframe)"


# ---------------------------------------------------------------------------
# メッセージスキーマ
# ---------------------------------------------------------------------------

class Position(BaseModel):
    """iframe 内でのポインタ位置。"""

    model_config = ConfigDict(frozen=True, extra="forbid")

    x: float = 0.0
    y: float = 0.0


class FrameEventMessage(BaseModel):
    """iframe からトップレベルへ送る操作メッセージ。

    Attributes:
        topic: メッセージ種別（固定値）
        sender: 送信元コンテキストの ID
        event_type: click または input
        element_info: 説明文とロケーター
        position: click 時のポインタ位置
        value: input 時の値（パスワードは送信元でマスク済み）
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    topic: Literal["steprec.frame-event"]
    sender: str = Field(..., min_length=1)
    event_type: Literal["click", "input"] = Field(..., alias="eventType")
    element_info: ElementInfo = Field(..., alias="elementInfo")
    position: Optional[Position] = None
    value: Optional[str] = None

    @model_validator(mode="after")
    def _check_event_payload(self) -> FrameEventMessage:
        if self.event_type == "input" and self.value is None:
            raise ValueError("input メッセージには value が必要です")
        if self.event_type == "click" and self.value is not None:
            raise ValueError("click メッセージに value は指定できません")
        return self

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# iframe 側
# ---------------------------------------------------------------------------

class FrameRelay:
    """ネストしたコンテキストで操作を拾い、トップレベルへ送る。

    Attributes:
        sender: このコンテキストの ID
        state: このコンテキストの記録状態
    """

    def __init__(
        self,
        sender: str,
        state: CaptureState,
        document: EventTargetRegistry,
        channel: MessageChannel,
    ) -> None:
        self.sender = sender
        self.state = state
        self._document = document
        self._channel = channel

    def on_start(self, options: RecordingOptions) -> None:
        self.state.is_recording = True
        self.state.options = options
        self._document.add_listener(EVENT_CLICK, self.on_click, capture=True)
        self._document.add_listener(EVENT_CHANGE, self.on_input, capture=True)

    def on_stop(self) -> None:
        self.state.is_recording = False
        self._document.remove_listener(EVENT_CLICK, self.on_click, capture=True)
        self._document.remove_listener(EVENT_CHANGE, self.on_input, capture=True)

    def on_click(self, event: RawEvent) -> Optional[dict[str, Any]]:
        if not self.state.is_recording:
            return None
        position = None
        if event.region is not None:
            position = Position(x=event.region.x, y=event.region.y)
        message = FrameEventMessage(
            topic=FRAME_EVENT_TOPIC,
            sender=self.sender,
            event_type="click",
            element_info=element_info(event.target),
            position=position,
        )
        return self._post(message)

    def on_input(self, event: RawEvent) -> Optional[dict[str, Any]]:
        if not self.state.is_recording:
            return None
        message = FrameEventMessage(
            topic=FRAME_EVENT_TOPIC,
            sender=self.sender,
            event_type="input",
            element_info=element_info(event.target),
            value=input_value_of(event.target),
        )
        return self._post(message)

    def _post(self, message: FrameEventMessage) -> dict[str, Any]:
        payload = message.to_payload()
        logger.debug("iframe %s から %s を中継します", self.sender, message.event_type)
        self._channel.post(payload)
        return payload


# ---------------------------------------------------------------------------
# トップレベル側
# ---------------------------------------------------------------------------

class TopFrameReceiver:
    """トップレベルで中継メッセージを受け取り、Step に組み立てる。"""

    def __init__(self, normalizer: EventNormalizer, channel: MessageChannel) -> None:
        self._normalizer = normalizer
        self._unsubscribe: Optional[Callable[[], None]] = channel.subscribe(self.handle)

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def handle(self, payload: Mapping[str, Any]) -> Optional[Step]:
        """中継メッセージを検証し、Step を確定・送出する。

        Args:
            payload: チャネルで受け取ったデータ

        Returns:
            送出した Step。無視・破棄した場合は None
        """
        if not self._normalizer.state.is_recording:
            return None

        if isinstance(payload, Mapping) and payload.get("topic") != FRAME_EVENT_TOPIC:
            logger.debug("対象外のトピックを無視しました: %r", payload.get("topic"))
            return None

        try:
            message = FrameEventMessage.model_validate(payload)
        except ValidationError as exc:
            logger.warning("不正な iframe メッセージを破棄しました: %s", exc)
            return None

        if message.event_type == "click":
            draft = self._normalizer.build_click_draft(message.element_info, IFRAME_SUFFIX)
            region = None
            if message.position is not None:
                region = Region(x=message.position.x, y=message.position.y)
        else:
            draft = self._normalizer.build_input_draft(
                message.element_info, message.value or "", IFRAME_SUFFIX,
            )
            region = None

        return await self._normalizer.finalize(draft, region)
