"""
PageBridge — 実ブラウザのイベントを記録パイプラインへ渡す

ページに JavaScript を注入して click / change / beforeunload を捕捉し、
expose_binding 経由で Python 側に送る。送られてきた祖先チェーンを
ElementSnapshot に復元し、フレームごとの PageContext へ配送する。

主な機能:
  - 注入スクリプトとバインディングの登録（全ページ・全フレーム）
  - フレーム → PageContext の対応付け（トップ文書 / iframe）
  - ページ・フレーム終了時のコンテキスト解除
  - ブラウザからの環境情報の取得
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional

from ..capture.channel import MessageChannel
from ..capture.context import PageContext
from ..capture.events import EVENT_BEFORE_UNLOAD, EVENT_CHANGE, EVENT_CLICK, RawEvent
from ..capture.models import SystemInfo
from ..capture.screenshot import DEFAULT_CAPTURE_TIMEOUT, Region
from ..capture.session import SessionCoordinator
from ..capture.system_info import collect_system_info
from ..dom.element import ElementSnapshot
from .capture import PageScreenshotter

if TYPE_CHECKING:
    from playwright.async_api import BrowserContext, Frame, Page

logger = logging.getLogger(__name__)

BINDING_NAME = "__steprec_emit"

# 注入スクリプトのパス
_INJECTED_JS_PATH = Path(__file__).parent / "injected.js"

_EVENT_TYPES = (EVENT_CLICK, EVENT_CHANGE, EVENT_BEFORE_UNLOAD)

_SYSTEM_INFO_JS = (
    "() => ({userAgent: navigator.userAgent, width: screen.width, height: screen.height})"
)


def to_raw_event(payload: Any) -> Optional[RawEvent]:
    """注入スクリプトから届いたデータを RawEvent に変換する。

    Args:
        payload: {type, url, chain, region}

    Returns:
        RawEvent。形式が不正な場合は None
    """
    if not isinstance(payload, Mapping):
        logger.debug("辞書ではないイベントデータを無視しました: %r", payload)
        return None

    event_type = payload.get("type")
    if event_type not in _EVENT_TYPES:
        logger.debug("対象外のイベント種別を無視しました: %r", event_type)
        return None

    chain = payload.get("chain")
    target = ElementSnapshot.from_chain(chain) if isinstance(chain, list) else None

    region = None
    raw_region = payload.get("region")
    if isinstance(raw_region, Mapping):
        try:
            region = Region(
                x=float(raw_region.get("x", 0)),
                y=float(raw_region.get("y", 0)),
                width=float(raw_region.get("width", 0)),
                height=float(raw_region.get("height", 0)),
            )
        except (TypeError, ValueError):
            logger.debug("領域情報を解釈できません: %r", raw_region)

    return RawEvent(
        type=event_type,
        target=target,
        url=str(payload.get("url") or ""),
        region=region,
    )


async def read_system_info(page: Page) -> Optional[SystemInfo]:
    """ページの navigator / screen から環境情報を取得する。取得できなければ None。"""
    try:
        data = await page.evaluate(_SYSTEM_INFO_JS)
        return collect_system_info(
            str(data.get("userAgent", "")),
            int(data.get("width", 0)),
            int(data.get("height", 0)),
        )
    except Exception:
        logger.warning("ブラウザから環境情報を取得できませんでした", exc_info=True)
        return None


class PageBridge:
    """BrowserContext 内の全ページ・全フレームを記録対象にする。

    フレームごとに PageContext を作り、SessionCoordinator に登録する。
    iframe のイベントは同じページのトップ文書へ MessageChannel で中継される。
    """

    def __init__(
        self,
        coordinator: SessionCoordinator,
        *,
        screenshot_timeout: float = DEFAULT_CAPTURE_TIMEOUT,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._coordinator = coordinator
        self._screenshot_timeout = screenshot_timeout
        self._clock = clock
        self._frames: dict[Frame, PageContext] = {}
        self._channels: dict[Page, MessageChannel] = {}
        self._counter = 0

    async def attach(self, context: BrowserContext) -> None:
        """バインディングと注入スクリプトを登録する。

        以降に開かれたページ・フレームにも自動で適用される。
        """
        await context.expose_binding(BINDING_NAME, self._on_binding)
        await context.add_init_script(path=str(_INJECTED_JS_PATH))
        context.on("page", self._watch_page)
        for page in context.pages:
            self._watch_page(page)
        logger.info("ブラウザコンテキストに記録スクリプトを登録しました")

    def context_for(self, frame: Frame) -> PageContext:
        """フレームに対応する PageContext を返す（無ければ作成して登録する）。"""
        existing = self._frames.get(frame)
        if existing is not None:
            return existing

        page = frame.page
        is_top = frame.parent_frame is None
        if not is_top:
            # 中継の受信側を先に用意しておく
            self.context_for(page.main_frame)

        channel = self._channels.get(page)
        if channel is None:
            channel = MessageChannel(f"page-{len(self._channels) + 1}")
            self._channels[page] = channel

        self._counter += 1
        context = PageContext(
            f"{'page' if is_top else 'frame'}-{self._counter}",
            is_top=is_top,
            channel=channel,
            emit=self._coordinator.submit,
            screenshots=PageScreenshotter(page) if is_top else None,
            screenshot_timeout=self._screenshot_timeout,
            clock=self._clock,
        )
        self._frames[frame] = context
        self._coordinator.register(context)
        return context

    async def _on_binding(self, source: Mapping[str, Any], payload: Any) -> None:
        frame = source.get("frame")
        if frame is None:
            return
        event = to_raw_event(payload)
        if event is None:
            return
        await self.context_for(frame).dispatch(event)

    def _watch_page(self, page: Page) -> None:
        page.on("framedetached", self._forget_frame)
        page.on("close", self._forget_page)

    def _forget_frame(self, frame: Frame) -> None:
        context = self._frames.pop(frame, None)
        if context is not None:
            self._coordinator.unregister(context.context_id)

    def _forget_page(self, page: Page) -> None:
        for frame in [f for f in self._frames if f.page is page]:
            self._forget_frame(frame)
        self._channels.pop(page, None)
        logger.debug("ページを記録対象から外しました: %s", page.url)
