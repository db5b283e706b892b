"""
ElementDescriber テスト — 要素説明ルールの優先順位を検証する
"""

from __future__ import annotations

import pytest

from steprec.dom.describer import describe
from steprec.dom.element import DomElement


def _el(tag: str, text: str = "", svg: bool = False, **attrs: str) -> DomElement:
    return DomElement(tag, dict(attrs), text=text, svg=svg)


class TestDescribe:
    """describe のルールごとのテスト。"""

    def test_none_returns_empty(self):
        assert describe(None) == ""

    def test_id_rule(self):
        assert describe(_el("div", id="main")) == 'div with id "main"'

    def test_id_wins_over_class(self):
        """id と class の両方がある場合は id ベースの説明になること。"""
        element = _el("span", id="badge", **{"class": "red big"})
        assert describe(element) == 'span with id "badge"'

    def test_name_rule(self):
        assert describe(_el("input", name="email", type="text")) == 'input with name "email"'

    def test_class_rule(self):
        assert describe(_el("span", **{"class": "badge red"})) == 'span with class "badge red"'

    def test_blank_class_is_skipped(self):
        assert describe(_el("p", **{"class": "   "})) == "p"

    def test_svg_class_is_skipped(self):
        assert describe(_el("svg", svg=True, **{"class": "icon"})) == "svg"

    def test_link_with_text(self):
        assert describe(_el("a", text="  Home ")) == 'link with text "Home"'

    def test_link_without_text_falls_back_to_tag(self):
        assert describe(_el("a", text="   ")) == "a"

    def test_button_with_text(self):
        assert describe(_el("button", text="Save")) == 'button with text "Save"'

    def test_button_text_includes_descendants(self):
        button = _el("button")
        button.append_child(_el("span", text="Sub"))
        button.append_child(_el("b", text="mit"))
        assert describe(button) == 'button with text "Submit"'

    @pytest.mark.parametrize("input_type", ["checkbox", "password", "email", "submit"])
    def test_input_type_rule(self, input_type):
        assert describe(_el("input", type=input_type)) == f"{input_type} input field"

    def test_label_with_text(self):
        assert describe(_el("label", text=" Email ")) == 'label with text "Email"'

    def test_bare_tag_is_lower_case(self):
        assert describe(_el("SECTION")) == "section"

    def test_name_wins_over_text(self):
        assert describe(_el("button", text="Go", name="go-btn")) == 'button with name "go-btn"'


class _ExplodingElement:
    """tag_name 以外の読み取りで例外を送出する要素。"""

    tag_name = "DIV"

    @property
    def attributes(self):
        raise RuntimeError("detached")


def test_broken_element_falls_back_to_tag():
    assert describe(_ExplodingElement()) == "div"
