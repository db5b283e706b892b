"""
ブラウザ記録の実行 — 起動から停止までを 1 つの流れにまとめる

ブラウザを起動して URL を開き、記録を開始する。
最初のページが閉じられるか stop_event がセットされるまで記録を続け、
終了時は記録停止・画面録画の保存・ブラウザ終了を必ず行う。
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from ..capture.models import RecordingOptions, RecordingSession, Step
from ..capture.screen import ScreenRecorder
from ..capture.session import SessionCoordinator
from ..capture.store import YamlFileStore
from ..config import RecorderConfig
from .bridge import PageBridge, read_system_info
from .capture import TracingCapture
from .session import BrowserSession

logger = logging.getLogger(__name__)


async def record(
    url: str,
    config: RecorderConfig,
    options: RecordingOptions,
    *,
    on_step: Optional[Callable[[Step], None]] = None,
    stop_event: Optional[asyncio.Event] = None,
) -> RecordingSession:
    """ブラウザを起動して操作を記録する。

    Args:
        url: 記録開始 URL
        config: レコーダー設定
        options: 記録オプション
        on_step: ステップが保存されるたびに呼ばれるコールバック
        stop_event: セットされたら記録を終了するイベント

    Returns:
        記録終了後のセッション
    """
    browser = BrowserSession()
    coordinator = SessionCoordinator(
        YamlFileStore(config.store_path),
        screen_recorder=ScreenRecorder(TracingCapture(browser, config.export_dir)),
    )
    coordinator.initialize()
    if on_step is not None:
        coordinator.add_listener(on_step)

    await browser.launch(
        headed=config.headed,
        viewport_width=config.viewport_width,
        viewport_height=config.viewport_height,
    )
    try:
        context = browser.context
        page = browser.page
        assert context is not None and page is not None

        bridge = PageBridge(coordinator, screenshot_timeout=config.screenshot_timeout)
        await bridge.attach(context)

        await page.goto(url)
        await page.wait_for_load_state("domcontentloaded")

        await coordinator.start(options, await read_system_info(page))
        logger.info("記録開始: %s", url)
        logger.info("操作を記録中... ブラウザを閉じると記録が終了します。")

        closed = asyncio.Event()
        page.on("close", lambda _: closed.set())
        waiters = [asyncio.ensure_future(closed.wait())]
        if stop_event is not None:
            waiters.append(asyncio.ensure_future(stop_event.wait()))
        try:
            await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for waiter in waiters:
                waiter.cancel()
    finally:
        await coordinator.close()
        await browser.close()

    session = coordinator.load_session()
    logger.info("記録終了: %d ステップ", len(session.steps))
    return session
