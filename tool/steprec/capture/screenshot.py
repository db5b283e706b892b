"""
スクリーンショット取得 — 外部のキャプチャ機能を呼び出すための境界

キャプチャ機能は非同期で失敗しうる（None を返す・例外・無応答）。
どの失敗も「スクリーンショット無し」として扱い、ステップ記録を止めない。
"""

from __future__ import annotations

import asyncio
import base64
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

logger = logging.getLogger(__name__)

DEFAULT_CAPTURE_TIMEOUT = 5.0


@dataclass(frozen=True)
class Region:
    """撮影対象の領域ヒント（ページ座標、px）。"""

    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


class ScreenshotCapability(Protocol):
    """スクリーンショット取得機能。失敗時は None を返してよい。"""

    async def capture(self, region: Optional[Region]) -> Optional[str]: ...


async def capture_with_timeout(
    capability: Optional[ScreenshotCapability],
    region: Optional[Region],
    timeout: float = DEFAULT_CAPTURE_TIMEOUT,
) -> Optional[str]:
    """待ち時間の上限付きでスクリーンショットを取得する。

    Args:
        capability: キャプチャ機能（None の場合は即座に None）
        region: 領域ヒント
        timeout: 待ち時間の上限（秒）

    Returns:
        画像（data URI）。失敗・タイムアウト時は None
    """
    if capability is None:
        return None

    try:
        image = await asyncio.wait_for(capability.capture(region), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("スクリーンショットが %.1f 秒以内に取得できませんでした", timeout)
        return None
    except Exception:
        logger.warning("スクリーンショットの取得に失敗しました", exc_info=True)
        return None

    if not image:
        logger.debug("キャプチャ機能が画像を返しませんでした")
        return None
    return image


def to_data_uri(data: bytes, mime_type: str = "image/png") -> str:
    """画像バイト列を data URI に変換する。"""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"
