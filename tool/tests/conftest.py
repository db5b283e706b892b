"""
テスト共通フィクスチャ・Hypothesis ストラテジー定義

合成 DOM ツリー（DomElement）の組み立てと、
記録パイプラインのテストで使うスタブを提供する。
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Optional

import pytest
from hypothesis import strategies as st

from steprec.capture.models import SystemInfo
from steprec.capture.screenshot import Region
from steprec.dom.element import DomElement

FIXED_NOW = datetime(2024, 3, 1, 9, 30, 15)


# ---------------------------------------------------------------------------
# 合成 DOM の組み立て
# ---------------------------------------------------------------------------

def build_chain(tags: list[str], leaf_attrs: Optional[dict[str, str]] = None) -> DomElement:
    """html から順にネストした要素列を作り、最下層の要素を返す。

    Args:
        tags: ルート直下からのタグ名（html は自動で先頭に付く）
        leaf_attrs: 最下層の要素に付ける属性

    Returns:
        最下層の要素
    """
    node = DomElement("html")
    for tag in tags:
        node = node.append_child(DomElement(tag))
    if leaf_attrs:
        node.attrs.update(leaf_attrs)
    return node


@pytest.fixture
def login_page() -> dict[str, DomElement]:
    """ログインフォームを持つ合成ページ。

    html > body > div#app > form.login-form > (input[name=email], input[type=password],
    button "Sign in")、body 直下に 3 つの li を持つ ul も置く。
    """
    html = DomElement("html")
    body = html.append_child(DomElement("body"))
    app = body.append_child(DomElement("div", {"id": "app"}))
    form = app.append_child(DomElement("form", {"class": "login-form"}))
    email = form.append_child(DomElement("input", {"type": "email", "name": "email"}))
    password = form.append_child(DomElement("input", {"type": "password"}))
    submit = form.append_child(DomElement("button", text="Sign in"))
    menu = body.append_child(DomElement("ul"))
    items = [menu.append_child(DomElement("li", text=f"item {i}")) for i in range(3)]
    return {
        "html": html,
        "body": body,
        "app": app,
        "form": form,
        "email": email,
        "password": password,
        "submit": submit,
        "menu": menu,
        "item1": items[0],
        "item2": items[1],
        "item3": items[2],
    }


@pytest.fixture
def system_info() -> SystemInfo:
    return SystemInfo(
        browser="Chrome 120.0",
        os="Linux",
        resolution="1920x1080",
        timestamp="03/01/24 09:30:15",
    )


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def store_path(tmp_path: Path) -> Path:
    return tmp_path / "state" / "session.yaml"


# ---------------------------------------------------------------------------
# スタブ
# ---------------------------------------------------------------------------

class StubScreenshots:
    """固定の画像を返すスクリーンショット機能。"""

    def __init__(self, image: Optional[str] = "data:image/png;base64,AAAA") -> None:
        self.image = image
        self.regions: list[Optional[Region]] = []

    async def capture(self, region: Optional[Region]) -> Optional[str]:
        self.regions.append(region)
        return self.image


@pytest.fixture
def screenshots() -> StubScreenshots:
    return StubScreenshots()


# ---------------------------------------------------------------------------
# Hypothesis ストラテジー（ファクトリ関数）
# ---------------------------------------------------------------------------

def make_tag_strategy():
    """id を持たない要素のタグ名を生成する。"""
    return st.sampled_from(["div", "span", "section", "ul", "li", "p", "main", "article"])


def make_tag_path_strategy(max_depth: int = 12):
    """ルート直下からのタグ名列を生成する。"""
    return st.lists(make_tag_strategy(), min_size=0, max_size=max_depth)


def make_identifier_strategy():
    """id 属性値を生成する。"""
    return st.from_regex(r"[a-z][a-z0-9_-]{0,15}", fullmatch=True)
