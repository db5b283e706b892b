"""
ScreenRecorder — 画面録画リソースのライフサイクル管理

録画はステップ記録とは独立したリソース。開始時に取得したトラックは、
停止が利用者操作でもエラー経由でも、必ず全て解放する。
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class MediaTrack(Protocol):
    """取得済みの録画トラック。stop() は成果物の保存先を返してよい。"""

    async def stop(self) -> Optional[str]: ...


class MediaCapture(Protocol):
    """録画トラックを取得する外部機能。"""

    async def acquire(self) -> list[MediaTrack]: ...


class ScreenRecorder:
    """MediaCapture から取得したトラックの開始・停止を管理する。"""

    def __init__(self, capture: MediaCapture) -> None:
        self._capture = capture
        self._tracks: list[MediaTrack] = []

    @property
    def is_active(self) -> bool:
        return bool(self._tracks)

    async def start(self) -> None:
        """トラックを取得して録画を開始する。

        Raises:
            RuntimeError: 既に録画中の場合
        """
        if self._tracks:
            raise RuntimeError("既に画面録画中です。先に stop() を呼んでください。")

        self._tracks = list(await self._capture.acquire())
        logger.info("画面録画を開始しました (tracks=%d)", len(self._tracks))

    async def stop(self) -> list[str]:
        """全トラックを停止・解放する。

        1 つのトラックの停止に失敗しても残りのトラックは停止する。

        Returns:
            保存された録画成果物のパス
        """
        tracks, self._tracks = self._tracks, []
        artifacts: list[str] = []
        for track in tracks:
            try:
                artifact = await track.stop()
            except Exception:
                logger.warning("録画トラックの停止に失敗しました", exc_info=True)
                continue
            if artifact:
                artifacts.append(artifact)

        if tracks:
            logger.info("画面録画を停止しました (artifacts=%d)", len(artifacts))
        return artifacts
