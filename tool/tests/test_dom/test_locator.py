"""
LocatorGenerator テスト — XPath / CSS セレクタ生成の単体テスト

合成 DOM ツリーに対して、id の有無・兄弟位置・class・SVG 要素・
切り離された要素での挙動を検証する。
"""

from __future__ import annotations

from hypothesis import given, settings
from hypothesis import strategies as st

from conftest import build_chain, make_identifier_strategy, make_tag_path_strategy
from steprec.dom.element import DomElement, ElementSnapshot, depth_of
from steprec.dom.locator import class_tokens, generate_css_selector, generate_xpath


# ---------------------------------------------------------------------------
# XPath
# ---------------------------------------------------------------------------

class TestGenerateXPath:
    """generate_xpath のテスト。"""

    def test_none_returns_empty(self):
        assert generate_xpath(None) == ""

    def test_id_gives_single_segment(self, login_page):
        assert generate_xpath(login_page["app"]) == '//*[@id="app"]'

    def test_absolute_path_without_id(self, login_page):
        assert generate_xpath(login_page["menu"]) == "//html/body/ul"

    def test_ancestor_id_is_not_used_as_anchor(self, login_page):
        """XPath は祖先の id で打ち切らず、ルートからの絶対パスになること。"""
        assert generate_xpath(login_page["submit"]) == "//html/body/div/form/button"

    def test_first_sibling_has_no_position(self, login_page):
        assert generate_xpath(login_page["item1"]) == "//html/body/ul/li"

    def test_later_siblings_have_position(self, login_page):
        assert generate_xpath(login_page["item2"]) == "//html/body/ul/li[2]"
        assert generate_xpath(login_page["item3"]) == "//html/body/ul/li[3]"

    def test_position_counts_same_tag_only(self, login_page):
        """異なるタグの兄弟は位置に数えないこと。"""
        assert generate_xpath(login_page["password"]) == "//html/body/div/form/input[2]"

    def test_detached_element_uses_remaining_path(self, login_page):
        item = login_page["item2"]
        item.remove()
        assert generate_xpath(item) == "//li"

    def test_snapshot_chain(self):
        chain = [
            {"tag": "SPAN", "attributes": {}, "sameTagBefore": 2},
            {"tag": "DIV", "attributes": {}, "sameTagBefore": 0},
            {"tag": "HTML", "attributes": {}},
        ]
        snapshot = ElementSnapshot.from_chain(chain)
        assert generate_xpath(snapshot) == "//html/div/span[3]"

    @given(tags=make_tag_path_strategy(), identifier=make_identifier_strategy())
    @settings(max_examples=50)
    def test_identifier_is_single_segment_at_any_depth(self, tags, identifier):
        leaf = build_chain(tags, {"id": identifier})
        assert generate_xpath(leaf) == f'//*[@id="{identifier}"]'

    @given(tags=make_tag_path_strategy())
    @settings(max_examples=50)
    def test_segment_count_equals_depth(self, tags):
        leaf = build_chain(tags)
        xpath = generate_xpath(leaf)
        assert xpath.startswith("//")
        assert len(xpath[2:].split("/")) == depth_of(leaf)


# ---------------------------------------------------------------------------
# CSS セレクタ
# ---------------------------------------------------------------------------

class TestGenerateCssSelector:
    """generate_css_selector のテスト。"""

    def test_none_returns_empty(self):
        assert generate_css_selector(None) == ""

    def test_id_gives_hash_selector(self, login_page):
        assert generate_css_selector(login_page["app"]) == "#app"

    def test_stops_at_ancestor_with_id(self, login_page):
        assert (
            generate_css_selector(login_page["submit"])
            == "div#app > form.login-form > button"
        )

    def test_nth_of_type_for_later_siblings(self, login_page):
        assert generate_css_selector(login_page["item1"]) == "html > body > ul > li"
        assert (
            generate_css_selector(login_page["item3"])
            == "html > body > ul > li:nth-of-type(3)"
        )

    def test_classes_keep_order(self):
        leaf = build_chain(["main"], {"class": "card  primary\twide"})
        assert generate_css_selector(leaf) == "html > main.card.primary.wide"

    def test_svg_class_name_is_ignored(self):
        html = DomElement("html")
        svg = html.append_child(DomElement("svg", {"class": "icon"}, svg=True))
        assert generate_css_selector(svg) == "html > svg"
        assert class_tokens(svg) == []

    @given(tags=make_tag_path_strategy(), identifier=make_identifier_strategy())
    @settings(max_examples=50)
    def test_identifier_is_single_segment_at_any_depth(self, tags, identifier):
        leaf = build_chain(tags, {"id": identifier})
        assert generate_css_selector(leaf) == f"#{identifier}"

    @given(tags=make_tag_path_strategy())
    @settings(max_examples=50)
    def test_segment_count_equals_depth(self, tags):
        leaf = build_chain(tags)
        assert len(generate_css_selector(leaf).split(" > ")) == depth_of(leaf)


# ---------------------------------------------------------------------------
# 壊れた要素
# ---------------------------------------------------------------------------

class _BrokenElement:
    """属性の読み取りで例外を送出する要素。"""

    tag_name = "DIV"
    parent = None
    previous_same_tag_siblings = 0
    text_content = ""
    class_name = ""
    value = None

    @property
    def attributes(self):
        raise RuntimeError("element is gone")


class TestBrokenElements:
    """読み取りに失敗する要素でも例外を送出しないこと。"""

    def test_xpath_returns_empty(self):
        assert generate_xpath(_BrokenElement()) == ""

    def test_css_returns_empty(self):
        assert generate_css_selector(_BrokenElement()) == ""

    @given(st.integers(min_value=-5, max_value=-1))
    def test_negative_sibling_count_is_clamped(self, count):
        node = ElementSnapshot(tag_name="P", previous_same_tag_siblings=count)
        assert generate_xpath(node) == "//p"
