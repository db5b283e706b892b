"""
要素インターフェース — ロケーター生成・要素説明が依存する最小限の DOM 抽象

ロケーター生成（locator）と要素説明（describer）は生の DOM ではなく、
ここで定義する ElementLike プロトコルだけに依存する。
実ブラウザが無くても合成ツリーでテストできるようにするための境界。

主な構成:
  - ElementLike: tag_name / attributes / parent / 同タグ先行兄弟数 /
    text_content / class_name / value を提供するプロトコル
  - DomElement: 子要素を持つ可変の合成ツリー（テスト・変換用）
  - ElementSnapshot: 注入スクリプトが送る祖先チェーンから復元した不変ノード
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Protocol, Sequence, runtime_checkable

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# プロトコル定義
# ---------------------------------------------------------------------------

@runtime_checkable
class ElementLike(Protocol):
    """ロケーター生成・要素説明に必要な要素の読み取り専用ビュー。

    Attributes:
        tag_name: DOM が返すタグ名（HTML 要素は大文字）
        attributes: 属性名 → 値の辞書
        parent: 親要素。ルートまたは切り離された要素では None
        previous_same_tag_siblings: 自分より前にある同じタグの兄弟要素数
        text_content: 子孫を含むテキスト内容
        class_name: class 属性の文字列。SVG 等で文字列でない場合は None
        value: フォーム要素の現在値（該当しない場合は None）
    """

    @property
    def tag_name(self) -> str: ...

    @property
    def attributes(self) -> Mapping[str, str]: ...

    @property
    def parent(self) -> Optional[ElementLike]: ...

    @property
    def previous_same_tag_siblings(self) -> int: ...

    @property
    def text_content(self) -> str: ...

    @property
    def class_name(self) -> Optional[str]: ...

    @property
    def value(self) -> Optional[str]: ...


# ---------------------------------------------------------------------------
# 合成ツリー
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class DomElement:
    """子要素リストを持つ合成 DOM ノード。

    同タグ先行兄弟数は親の children から都度計算する。
    eq=False のため比較は同一性で行われる（同じ内容の兄弟を区別するため）。

    Attributes:
        tag: タグ名（大文字小文字は問わない）
        attrs: 属性辞書
        text: この要素直下のテキスト
        current_value: フォーム要素の現在値
        svg: True の場合 class_name は文字列でない（SVGAnimatedString 相当）
        children: 子要素リスト
    """

    tag: str
    attrs: dict[str, str] = field(default_factory=dict)
    text: str = ""
    current_value: Optional[str] = None
    svg: bool = False
    children: list[DomElement] = field(default_factory=list, repr=False)
    _parent: Optional[DomElement] = field(default=None, repr=False)

    def append_child(self, child: DomElement) -> DomElement:
        """子要素を末尾に追加し、追加した子要素を返す。"""
        child._parent = self
        self.children.append(child)
        return child

    def remove(self) -> None:
        """親から切り離す。切り離し後も自身の部分木は保持される。"""
        if self._parent is not None:
            self._parent.children = [c for c in self._parent.children if c is not self]
            self._parent = None

    @property
    def tag_name(self) -> str:
        return self.tag.upper()

    @property
    def attributes(self) -> Mapping[str, str]:
        return self.attrs

    @property
    def parent(self) -> Optional[DomElement]:
        return self._parent

    @property
    def previous_same_tag_siblings(self) -> int:
        if self._parent is None:
            return 0
        count = 0
        for sibling in self._parent.children:
            if sibling is self:
                break
            if sibling.tag_name == self.tag_name:
                count += 1
        return count

    @property
    def text_content(self) -> str:
        return self.text + "".join(child.text_content for child in self.children)

    @property
    def class_name(self) -> Optional[str]:
        if self.svg:
            return None
        return self.attrs.get("class", "")

    @property
    def value(self) -> Optional[str]:
        if self.current_value is not None:
            return self.current_value
        return self.attrs.get("value")


# ---------------------------------------------------------------------------
# 祖先チェーンからの復元
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ElementSnapshot:
    """注入スクリプトがシリアライズした要素情報から復元した不変ノード。

    兄弟要素そのものは持たず、同タグ先行兄弟数だけを保持する。
    """

    tag_name: str
    attributes: Mapping[str, str] = field(default_factory=dict)
    parent: Optional[ElementSnapshot] = None
    previous_same_tag_siblings: int = 0
    text_content: str = ""
    class_name: Optional[str] = ""
    value: Optional[str] = None

    @classmethod
    def from_chain(cls, chain: Sequence[Mapping[str, Any]]) -> Optional[ElementSnapshot]:
        """祖先チェーン（対象要素 → ルートの順）からノードを復元する。

        各エントリのキー:
          tag, attributes, className, text, sameTagBefore, value

        tag を持たないエントリ以降は切り離されたものとして扱い、
        そこでチェーンを打ち切る。

        Args:
            chain: 対象要素から document ルートまでの要素情報リスト

        Returns:
            対象要素のスナップショット。チェーンが空なら None
        """
        usable: list[Mapping[str, Any]] = []
        for entry in chain:
            if not isinstance(entry, Mapping) or not entry.get("tag"):
                logger.debug("祖先チェーンの不正なエントリで打ち切り: %r", entry)
                break
            usable.append(entry)

        node: Optional[ElementSnapshot] = None
        for entry in reversed(usable):
            raw_attrs = entry.get("attributes") or {}
            attrs = {str(k): str(v) for k, v in raw_attrs.items() if v is not None}
            class_name = entry.get("className", attrs.get("class", ""))
            raw_value = entry.get("value")
            node = cls(
                tag_name=str(entry["tag"]),
                attributes=attrs,
                parent=node,
                previous_same_tag_siblings=_as_count(entry.get("sameTagBefore")),
                text_content=str(entry.get("text") or ""),
                class_name=class_name if isinstance(class_name, str) else None,
                value=None if raw_value is None else str(raw_value),
            )
        return node


def _as_count(raw: Any) -> int:
    """兄弟数として解釈できない値は 0 とみなす。"""
    try:
        return max(int(raw), 0)
    except (TypeError, ValueError):
        return 0


def depth_of(element: Optional[ElementLike]) -> int:
    """要素から document ルートまでの階層数（要素自身を含む）を返す。"""
    depth = 0
    current = element
    while current is not None:
        depth += 1
        current = current.parent
    return depth
