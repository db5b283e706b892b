"""
ScreenRecorder テスト — 録画トラックの取得と解放
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from steprec.capture.screen import ScreenRecorder


def _track(result="rec.zip", error=None):
    track = MagicMock()
    track.stop = AsyncMock(return_value=result, side_effect=error)
    return track


def _capture(*tracks):
    capture = MagicMock()
    capture.acquire = AsyncMock(return_value=list(tracks))
    return capture


class TestScreenRecorder:
    """ScreenRecorder のテスト。"""

    @pytest.mark.asyncio
    async def test_start_and_stop(self):
        recorder = ScreenRecorder(_capture(_track("a.zip")))
        await recorder.start()
        assert recorder.is_active
        assert await recorder.stop() == ["a.zip"]
        assert not recorder.is_active

    @pytest.mark.asyncio
    async def test_double_start_raises(self):
        recorder = ScreenRecorder(_capture(_track()))
        await recorder.start()
        with pytest.raises(RuntimeError):
            await recorder.start()

    @pytest.mark.asyncio
    async def test_all_tracks_released_even_if_one_fails(self):
        broken = _track(error=RuntimeError("device lost"))
        video = _track("video.zip")
        audio = _track(None)
        recorder = ScreenRecorder(_capture(broken, video, audio))

        await recorder.start()
        artifacts = await recorder.stop()

        broken.stop.assert_awaited_once()
        video.stop.assert_awaited_once()
        audio.stop.assert_awaited_once()
        assert artifacts == ["video.zip"]

    @pytest.mark.asyncio
    async def test_stop_without_start(self):
        assert await ScreenRecorder(_capture()).stop() == []
