"""
KeyValueStore — 記録セッションの永続化ストア

ステップ列・記録フラグ・オプション・環境情報を保存するキー・バリューストア。
get() は要求したキーのうち存在するものだけを返し、
欠落キーの既定値は呼び出し側（RecordingSession.from_record）で補う。

主な構成:
  - KeyValueStore: get / set のプロトコル
  - MemoryStore: プロセス内メモリストア（テスト用）
  - YamlFileStore: ruamel.yaml による YAML ファイルストア
"""

from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any, Iterable, Mapping, Protocol

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """永続化ストアのインターフェース。"""

    def get(self, keys: Iterable[str]) -> dict[str, Any]:
        """指定キーのうち存在するものだけを含む部分レコードを返す。"""
        ...

    def set(self, record: Mapping[str, Any]) -> None:
        """部分レコードを書き込む（未指定のキーは保持される）。"""
        ...


# ---------------------------------------------------------------------------
# メモリストア
# ---------------------------------------------------------------------------

class MemoryStore:
    """プロセス内の辞書に保存するストア。"""

    def __init__(self, initial: Mapping[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(dict(initial or {}))

    def get(self, keys: Iterable[str]) -> dict[str, Any]:
        return {k: copy.deepcopy(self._data[k]) for k in keys if k in self._data}

    def set(self, record: Mapping[str, Any]) -> None:
        for key, value in record.items():
            self._data[key] = copy.deepcopy(value)


# ---------------------------------------------------------------------------
# YAML ファイルストア
# ---------------------------------------------------------------------------

class YamlFileStore:
    """1 つの YAML ファイルにセッション全体を保存するストア。

    読み込みに失敗した場合は空のレコードとして扱い、例外は送出しない。
    書き込みは一時ファイル経由で置き換え、途中で失敗しても既存内容を壊さない。

    Attributes:
        path: 保存先 YAML ファイル
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._yaml = YAML(typ="safe")
        self._yaml.default_flow_style = False
        self._yaml.allow_unicode = True

    def get(self, keys: Iterable[str]) -> dict[str, Any]:
        data = self._load()
        return {k: data[k] for k in keys if k in data}

    def set(self, record: Mapping[str, Any]) -> None:
        data = self._load()
        data.update(record)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            self._yaml.dump(data, f)
        tmp_path.replace(self.path)
        logger.debug("ストアに書き込みました: %s (%s)", self.path, ", ".join(record))

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = self._yaml.load(f)
        except (OSError, YAMLError) as exc:
            logger.warning("ストアを読み込めないため空として扱います: %s (%s)", self.path, exc)
            return {}

        if not isinstance(data, dict):
            if data is not None:
                logger.warning("ストアの内容が辞書ではないため空として扱います: %s", self.path)
            return {}
        return data
