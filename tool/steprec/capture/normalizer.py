"""
EventNormalizer — ページのイベントを Step に正規化する

click / change / beforeunload を capture フェーズで受け取り、
要素説明・ロケーター・翻訳文言を組み合わせて Step を作る。

ステップは二段階で組み立てる:
  1. StepDraft を作る（説明文とロケーター）
  2. 必要ならスクリーンショットで補完し、commit() で不変の Step に確定する

確定前のドラフトはセッションに見えないため、半端なステップが公開されることはない。
スクリーンショットが無効な場合は await を挟まずに即座に確定・送出する。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional

from ..dom.describer import describe
from ..dom.element import ElementLike
from ..dom.locator import generate_css_selector, generate_xpath
from .events import (
    EVENT_BEFORE_UNLOAD,
    EVENT_CHANGE,
    EVENT_CLICK,
    EventTargetRegistry,
    RawEvent,
)
from .models import PASSWORD_MASK, ActionKind, ElementInfo, RecordingOptions, Selectors, Step
from .screenshot import DEFAULT_CAPTURE_TIMEOUT, Region, ScreenshotCapability, capture_with_timeout
from .translations import translate

logger = logging.getLogger(__name__)

# 戻り値は使わない（SessionCoordinator.submit は受理可否を返す）
StepSink = Callable[[Step], Any]


# ---------------------------------------------------------------------------
# ページコンテキストごとの記録状態
# ---------------------------------------------------------------------------

@dataclass
class CaptureState:
    """ページコンテキストが保持する記録状態のコピー。

    正となる状態はセッションコーディネーターが持ち、
    開始時に配られたオプションをここにキャッシュする。
    """

    is_recording: bool = False
    options: RecordingOptions = field(default_factory=RecordingOptions)


# ---------------------------------------------------------------------------
# 要素情報
# ---------------------------------------------------------------------------

def element_info(element: Optional[ElementLike]) -> ElementInfo:
    """要素の説明文と XPath / CSS セレクタをまとめて取得する。"""
    return ElementInfo(
        description=describe(element),
        xpath=generate_xpath(element),
        css=generate_css_selector(element),
    )


def input_value_of(element: Optional[ElementLike]) -> str:
    """入力確定時の値を返す。パスワード欄は固定のマスク文字列に置き換える。"""
    if element is None:
        return ""
    try:
        input_type = (element.attributes.get("type") or "").lower()
        if input_type == "password":
            return PASSWORD_MASK
        return element.value or ""
    except Exception:
        logger.warning("入力値を読み取れないため空として扱います", exc_info=True)
        return ""


# ---------------------------------------------------------------------------
# ドラフト
# ---------------------------------------------------------------------------

@dataclass
class StepDraft:
    """確定前のステップ。commit() するまでセッションには送られない。"""

    kind: ActionKind
    action: str
    description: str
    selectors: Optional[Selectors] = None
    screenshot: Optional[str] = None

    def commit(self, timestamp: str) -> Step:
        return Step(
            action=self.action,
            description=self.description,
            kind=self.kind,
            selectors=self.selectors,
            screenshot=self.screenshot,
            timestamp=timestamp,
        )


# ---------------------------------------------------------------------------
# EventNormalizer 本体
# ---------------------------------------------------------------------------

class EventNormalizer:
    """トップレベルのページコンテキストでイベントを Step に変換する。

    Attributes:
        state: このページコンテキストの記録状態
    """

    def __init__(
        self,
        state: CaptureState,
        document: EventTargetRegistry,
        window: EventTargetRegistry,
        emit: StepSink,
        screenshots: Optional[ScreenshotCapability] = None,
        screenshot_timeout: float = DEFAULT_CAPTURE_TIMEOUT,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.state = state
        self._document = document
        self._window = window
        self._emit = emit
        self._screenshots = screenshots
        self._screenshot_timeout = screenshot_timeout
        self._clock = clock

    # ----- ライフサイクル -----

    def on_start(self, options: RecordingOptions) -> None:
        """記録を開始し、capture フェーズのリスナーを登録する。"""
        self.state.is_recording = True
        self.state.options = options
        self._document.add_listener(EVENT_CLICK, self.on_click, capture=True)
        self._document.add_listener(EVENT_CHANGE, self.on_input, capture=True)
        self._window.add_listener(EVENT_BEFORE_UNLOAD, self.on_navigate, capture=True)
        logger.debug("イベントリスナーを登録しました (language=%s)", options.language)

    def on_stop(self) -> None:
        """記録を停止し、全リスナーを解除する。"""
        self.state.is_recording = False
        self._document.remove_listener(EVENT_CLICK, self.on_click, capture=True)
        self._document.remove_listener(EVENT_CHANGE, self.on_input, capture=True)
        self._window.remove_listener(EVENT_BEFORE_UNLOAD, self.on_navigate, capture=True)
        logger.debug("イベントリスナーを解除しました")

    # ----- イベントハンドラ -----

    async def on_click(self, event: RawEvent) -> Optional[Step]:
        if not self.state.is_recording:
            return None
        draft = self.build_click_draft(element_info(event.target))
        return await self.finalize(draft, event.region)

    async def on_input(self, event: RawEvent) -> Optional[Step]:
        if not self.state.is_recording:
            return None
        draft = self.build_input_draft(element_info(event.target), input_value_of(event.target))
        return await self.finalize(draft, event.region)

    def on_navigate(self, event: RawEvent) -> Optional[Step]:
        # ページが閉じる前に同期的に送出する（スクリーンショット・セレクタ無し）
        if not self.state.is_recording:
            return None
        action = self._translate("navigate")
        draft = StepDraft(
            kind=ActionKind.NAVIGATE,
            action=action,
            description=f"{action} {event.url}",
        )
        return self._commit(draft)

    # ----- ドラフト生成（iframe 中継からも使用） -----

    def build_click_draft(self, info: ElementInfo, suffix: str = "") -> StepDraft:
        action = self._translate("click")
        return StepDraft(
            kind=ActionKind.CLICK,
            action=action,
            description=f"{action} {self._translate('on')} {info.description}{suffix}",
            selectors=self._selectors_for(info),
        )

    def build_input_draft(self, info: ElementInfo, value: str, suffix: str = "") -> StepDraft:
        action = self._translate("input")
        return StepDraft(
            kind=ActionKind.INPUT,
            action=action,
            description=f'{action} "{value}" {self._translate("on")} {info.description}{suffix}',
            selectors=self._selectors_for(info),
        )

    async def finalize(self, draft: StepDraft, region: Optional[Region]) -> Optional[Step]:
        """ドラフトを必要に応じて補完し、確定・送出する。

        スクリーンショット取得中に記録が停止された場合はドラフトを破棄する。

        Args:
            draft: 確定前のステップ
            region: スクリーンショットの領域ヒント

        Returns:
            送出した Step。破棄した場合は None
        """
        if not self.state.options.capture_screenshots:
            return self._commit(draft)

        draft.screenshot = await capture_with_timeout(
            self._screenshots, region, self._screenshot_timeout,
        )
        if not self.state.is_recording:
            logger.info("記録停止後に完了したスクリーンショットのステップを破棄しました")
            return None
        return self._commit(draft)

    # ----- 内部ヘルパー -----

    def _commit(self, draft: StepDraft) -> Step:
        step = draft.commit(self._clock().strftime("%X"))
        logger.debug("ステップを確定しました: %s", step.description)
        self._emit(step)
        return step

    def _selectors_for(self, info: ElementInfo) -> Optional[Selectors]:
        if not self.state.options.capture_selectors:
            return None
        return info.to_selectors()

    def _translate(self, key: str) -> str:
        return translate(key, self.state.options.language)
