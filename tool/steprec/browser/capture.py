"""
Playwright によるキャプチャ機能 — スクリーンショットと画面録画（トレース）

capture パッケージが定義する ScreenshotCapability / MediaCapture を
Playwright の Page / BrowserSession で実装する。
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from ..capture.screen import MediaTrack
from ..capture.screenshot import Region, to_data_uri

if TYPE_CHECKING:
    from playwright.async_api import Page

    from .session import BrowserSession

logger = logging.getLogger(__name__)


class PageScreenshotter:
    """Page のスクリーンショットを data URI で返す。"""

    def __init__(self, page: Page) -> None:
        self._page = page

    async def capture(self, region: Optional[Region]) -> Optional[str]:
        """表示中の画面を撮影する。領域ヒントがあればその範囲に切り抜く。"""
        if self._page.is_closed():
            return None

        kwargs: dict = {"type": "png"}
        if region is not None and not region.is_empty:
            kwargs["clip"] = {
                "x": max(region.x, 0.0),
                "y": max(region.y, 0.0),
                "width": region.width,
                "height": region.height,
            }
        data = await self._page.screenshot(**kwargs)
        return to_data_uri(data, "image/png")


class TracingTrack:
    """1 回分のトレース記録。停止時に zip を保存する。"""

    def __init__(self, session: BrowserSession, path: Path) -> None:
        self._session = session
        self.path = path

    async def stop(self) -> Optional[str]:
        saved = await self._session.stop_tracing(self.path)
        return str(saved) if saved is not None else None


class TracingCapture:
    """BrowserSession のトレースを画面録画トラックとして提供する。

    Attributes:
        output_dir: トレース zip の保存先ディレクトリ
    """

    def __init__(self, session: BrowserSession, output_dir: Path) -> None:
        self._session = session
        self.output_dir = Path(output_dir)

    async def acquire(self) -> list[MediaTrack]:
        await self._session.start_tracing()
        name = f"recording_{datetime.now().strftime('%Y%m%d_%H%M%S')}.zip"
        return [TracingTrack(self._session, self.output_dir / name)]
