"""
BrowserSession — 記録対象ブラウザの起動と後片付け

記録中に操作してもらうブラウザを 1 つだけ持つ。
Playwright ドライバ・Browser・BrowserContext・最初の Page をまとめて保持し、
トレース（画面録画の代替）もこの BrowserContext 上で行う。

主な機能:
  - 表示/ヘッドレスを選んだ Chromium の起動
  - 記録用ページとコンテキストの提供
  - トレースの開始と zip への保存
  - 途中で失敗しても必ず行う後片付け
"""

from __future__ import annotations

import enum
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from playwright.async_api import Browser, BrowserContext, Page, Playwright

logger = logging.getLogger(__name__)


class BrowserState(enum.Enum):
    """記録用ブラウザの状態。"""

    IDLE = "idle"
    LAUNCHING = "launching"
    ACTIVE = "active"
    CLOSING = "closing"
    CLOSED = "closed"


class BrowserSession:
    """記録用ブラウザのライフサイクル。

    使用例::

        browser = BrowserSession()
        await browser.launch(headed=True)
        try:
            await browser.page.goto(url)
        finally:
            await browser.close()
    """

    def __init__(self) -> None:
        self._state = BrowserState.IDLE
        self._driver: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None
        self._tracing = False

    @property
    def state(self) -> BrowserState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state == BrowserState.ACTIVE

    @property
    def context(self) -> Optional[BrowserContext]:
        """記録スクリプトを登録する BrowserContext。起動前・終了後は None。"""
        return self._context if self.is_active else None

    @property
    def page(self) -> Optional[Page]:
        """起動時に開いた記録開始ページ。起動前・終了後は None。"""
        return self._page if self.is_active else None

    async def launch(
        self,
        headed: bool = True,
        viewport_width: int = 1280,
        viewport_height: int = 720,
    ) -> None:
        """Chromium を起動して記録開始ページを開く。

        Args:
            headed: False でヘッドレス起動
            viewport_width: ページの表示幅
            viewport_height: ページの表示高さ

        Raises:
            RuntimeError: 起動済みの場合
        """
        if self.is_active:
            raise RuntimeError("記録用ブラウザは既に起動しています。")

        self._state = BrowserState.LAUNCHING
        logger.info("記録用ブラウザを起動します (headed=%s, viewport=%dx%d)",
                    headed, viewport_width, viewport_height)
        try:
            from playwright.async_api import async_playwright

            self._driver = await async_playwright().start()
            self._browser = await self._driver.chromium.launch(headless=not headed)
            self._context = await self._browser.new_context(
                viewport={"width": viewport_width, "height": viewport_height},
            )
            self._page = await self._context.new_page()
        except Exception:
            logger.exception("記録用ブラウザを起動できませんでした")
            self._state = BrowserState.IDLE
            raise
        self._state = BrowserState.ACTIVE

    async def start_tracing(self) -> None:
        """画面録画としてトレースを開始する。

        Raises:
            RuntimeError: ブラウザが起動していない場合
        """
        if self.context is None:
            raise RuntimeError("ブラウザが起動していないためトレースを開始できません。")
        await self.context.tracing.start(screenshots=True, snapshots=True)
        self._tracing = True
        logger.info("トレースを開始しました")

    async def stop_tracing(self, path: Path) -> Optional[Path]:
        """トレースを止めて zip に保存する。

        Returns:
            保存先パス。トレース中でなければ None
        """
        if not self._tracing or self._context is None:
            return None
        self._tracing = False
        path.parent.mkdir(parents=True, exist_ok=True)
        await self._context.tracing.stop(path=str(path))
        logger.info("トレースを保存しました: %s", path)
        return path

    async def close(self) -> None:
        """ブラウザとドライバを終了する。何度呼んでもよい。"""
        if self._state in (BrowserState.CLOSING, BrowserState.CLOSED):
            return

        self._state = BrowserState.CLOSING
        try:
            if self._browser is not None:
                await self._browser.close()
            if self._driver is not None:
                await self._driver.stop()
        except Exception:
            logger.exception("記録用ブラウザの終了時にエラーが発生しました")
        finally:
            self._release()
        logger.info("記録用ブラウザを終了しました")

    def _release(self) -> None:
        self._page = None
        self._context = None
        self._browser = None
        self._driver = None
        self._tracing = False
        self._state = BrowserState.CLOSED
