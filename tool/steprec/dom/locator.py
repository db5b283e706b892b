"""
LocatorGenerator — 要素から XPath / CSS セレクタを生成する

記録した要素を後から再生できるよう、決定的なロケーターを 2 種類生成する。

主な機能:
  - generate_xpath(): id があれば //*[@id="..."]、無ければルートからの絶対パス
  - generate_css_selector(): id があれば #id、無ければ " > " 区切りのパス

兄弟位置の数え方は両者で共通:
  位置 = 1 + 自分より前にある同タグ兄弟数。位置が 2 以上のときだけ修飾子を付ける。
"""

from __future__ import annotations

import logging
from typing import Iterator, Optional

from .element import ElementLike

logger = logging.getLogger(__name__)

# 親参照が循環したアダプタでも停止させるための上限
_MAX_DEPTH = 512


# ---------------------------------------------------------------------------
# パブリック API
# ---------------------------------------------------------------------------

def generate_xpath(element: Optional[ElementLike]) -> str:
    """要素の XPath を生成する。

    Args:
        element: 対象要素（None 可）

    Returns:
        XPath 文字列。None や読み取り失敗時は空文字列
    """
    if element is None:
        return ""

    try:
        element_id = _id_of(element)
        if element_id:
            return f'//*[@id="{element_id}"]'

        parts: list[str] = []
        for node in _walk_up(element):
            part = node.tag_name.lower()
            position = _position_of(node)
            if position > 1:
                part += f"[{position}]"
            parts.append(part)
    except Exception:
        logger.warning("XPath の生成に失敗しました", exc_info=True)
        return ""

    parts.reverse()
    return "//" + "/".join(parts)


def generate_css_selector(element: Optional[ElementLike]) -> str:
    """要素の CSS セレクタを生成する。

    祖先に id を持つ要素があれば "tag#id" を先頭にしてそこで打ち切る。

    Args:
        element: 対象要素（None 可）

    Returns:
        CSS セレクタ文字列。None や読み取り失敗時は空文字列
    """
    if element is None:
        return ""

    try:
        element_id = _id_of(element)
        if element_id:
            return f"#{element_id}"

        path: list[str] = []
        for node in _walk_up(element):
            selector = node.tag_name.lower()

            node_id = _id_of(node)
            if node_id:
                path.append(f"{selector}#{node_id}")
                break

            classes = class_tokens(node)
            if classes:
                selector += "." + ".".join(classes)

            position = _position_of(node)
            if position > 1:
                selector += f":nth-of-type({position})"

            path.append(selector)
    except Exception:
        logger.warning("CSS セレクタの生成に失敗しました", exc_info=True)
        return ""

    path.reverse()
    return " > ".join(path)


def class_tokens(element: ElementLike) -> list[str]:
    """class 属性を空白区切りのトークンに分割する。

    文字列でない className（SVG 要素など）は class 無しとして扱う。
    """
    class_name = element.class_name
    if not isinstance(class_name, str):
        return []
    return class_name.split()


# ---------------------------------------------------------------------------
# 内部ヘルパー
# ---------------------------------------------------------------------------

def _id_of(element: ElementLike) -> str:
    value = element.attributes.get("id")
    if isinstance(value, str):
        return value
    return ""


def _position_of(element: ElementLike) -> int:
    return 1 + max(element.previous_same_tag_siblings, 0)


def _walk_up(element: ElementLike) -> Iterator[ElementLike]:
    """要素自身から document ルートまでを順に返す。"""
    current: Optional[ElementLike] = element
    depth = 0
    while current is not None and depth < _MAX_DEPTH:
        yield current
        current = current.parent
        depth += 1
    if current is not None:
        logger.warning("祖先の探索が上限 %d 階層に達したため打ち切りました", _MAX_DEPTH)
