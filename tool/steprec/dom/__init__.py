"""
dom パッケージ — 要素の抽象化・ロケーター生成・要素説明

主要エクスポート:
  - ElementLike / DomElement / ElementSnapshot: 要素インターフェースと実装
  - generate_xpath / generate_css_selector: ロケーター生成
  - describe: 要素の説明文生成
"""

from __future__ import annotations

from .describer import describe
from .element import DomElement, ElementLike, ElementSnapshot, depth_of
from .locator import generate_css_selector, generate_xpath

__all__ = [
    "DomElement",
    "ElementLike",
    "ElementSnapshot",
    "depth_of",
    "describe",
    "generate_css_selector",
    "generate_xpath",
]
