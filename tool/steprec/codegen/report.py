"""
セッションレポート — 記録内容をそのまま書き出すテキストレポート

コード生成とは別に、各ステップの操作名・説明・セレクタ・時刻を
一覧にしたレポートを作る。記録直後の確認・共有用。
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from jinja2 import Environment

from ..capture.models import Step, SystemInfo
from ..capture.system_info import local_system_info
from .generator import create_environment

logger = logging.getLogger(__name__)


def build_session_report(
    steps: Sequence[Step],
    system_info: Optional[SystemInfo] = None,
    env: Optional[Environment] = None,
) -> str:
    """セッションレポートのテキストを作る。

    Args:
        steps: 記録済みステップ
        system_info: 環境情報（None の場合は実行環境から補う）
        env: Jinja2 環境（省略時は既定の環境）

    Returns:
        レポート本文
    """
    env = env or create_environment()
    template = env.get_template("session_report.txt.j2")
    text = template.render(system_info=system_info or local_system_info(), steps=steps)
    logger.debug("セッションレポートを作成しました (steps=%d)", len(steps))
    return text
