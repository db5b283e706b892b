"""
エクスポート — 生成テキストを日時付きのファイル名で保存する
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

from .formats import TargetFormat
from .generator import GeneratedCode

logger = logging.getLogger(__name__)


def export_filename(target: Union[TargetFormat, str], now: Optional[datetime] = None) -> str:
    """TestCase_<YYYY-MM-DDTHH-MM-SS>.<拡張子> 形式のファイル名を返す。

    Args:
        target: 出力形式、または拡張子そのもの
        now: ファイル名に使う日時（None で現在の UTC 時刻）
    """
    extension = target.extension if isinstance(target, TargetFormat) else target
    moment = now or datetime.now(timezone.utc)
    return f"TestCase_{moment.strftime('%Y-%m-%dT%H-%M-%S')}.{extension}"


def export_code(
    generated: GeneratedCode,
    directory: Path,
    now: Optional[datetime] = None,
) -> Path:
    """生成テキストをファイルに書き出す。

    Args:
        generated: 生成結果
        directory: 出力先ディレクトリ（無ければ作成）
        now: ファイル名に使う日時（None で現在の UTC 時刻）

    Returns:
        書き出したファイルのパス
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    output_path = directory / export_filename(generated.extension, now)
    output_path.write_text(generated.text, encoding="utf-8")
    logger.info("エクスポートしました: %s", output_path)
    return output_path
