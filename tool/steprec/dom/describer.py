"""
ElementDescriber — 要素の人間向け説明文を生成する

優先順位付きのルールを上から順に評価し、最初に一致したものを採用する。
再生時の安定性を優先して識別子ベースの説明を先に、
テキストベースの説明は素のタグ名の直前の手段として扱う。
"""

from __future__ import annotations

import logging
from typing import Optional

from .element import ElementLike

logger = logging.getLogger(__name__)


def describe(element: Optional[ElementLike]) -> str:
    """要素の説明文を返す。

    ルール（優先順）:
      1. id 属性        → 'div with id "main"'
      2. name 属性      → 'input with name "email"'
      3. class 属性     → 'span with class "badge red"'
      4. テキスト付きリンク  → 'link with text "Home"'
      5. テキスト付きボタン  → 'button with text "Save"'
      6. type 属性付き input → 'checkbox input field'
      7. テキスト付きラベル  → 'label with text "Email"'
      8. それ以外       → タグ名のみ

    Args:
        element: 対象要素（None 可）

    Returns:
        説明文。None の場合は空文字列
    """
    if element is None:
        return ""

    try:
        return _apply_rules(element)
    except Exception:
        logger.warning("要素説明の生成に失敗しました", exc_info=True)
        return _safe_tag(element)


def _apply_rules(element: ElementLike) -> str:
    tag_upper = element.tag_name.upper()
    tag = element.tag_name.lower()
    attrs = element.attributes

    element_id = attrs.get("id")
    if element_id:
        return f'{tag} with id "{element_id}"'

    name = attrs.get("name")
    if name:
        return f'{tag} with name "{name}"'

    class_name = element.class_name
    if isinstance(class_name, str) and class_name.strip():
        return f'{tag} with class "{class_name}"'

    text = element.text_content or ""

    if tag_upper == "A" and text.strip():
        return f'link with text "{text.strip()}"'

    if tag_upper == "BUTTON" and text.strip():
        return f'button with text "{text.strip()}"'

    input_type = attrs.get("type")
    if tag_upper == "INPUT" and input_type:
        return f"{input_type} input field"

    if tag_upper == "LABEL" and text:
        return f'label with text "{text.strip()}"'

    return tag


def _safe_tag(element: ElementLike) -> str:
    try:
        return str(element.tag_name).lower()
    except Exception:
        return ""
