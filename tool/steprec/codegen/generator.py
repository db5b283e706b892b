"""
CodeGenerator — 記録ステップ列からテストケース/スクリプトを生成する

主な機能:
  - 手動テストケース（プレーンテキスト）の生成
  - Puppeteer スクリプト（async/await 形式）の生成
  - 未実装形式に対するプレースホルダーの返却

生成は途中で例外を送出しない。形の崩れたステップは
そのステップだけをコメントに置き換え、残りのステップの生成を続ける。
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Union

from jinja2 import Environment, FileSystemLoader

from ..capture.models import ActionKind, Step, SystemInfo
from ..capture.system_info import local_system_info
from ..capture.translations import TRANSLATIONS, reverse_lookup
from .formats import PLACEHOLDERS, TargetFormat

logger = logging.getLogger(__name__)

# テンプレートディレクトリのパス
_TEMPLATES_DIR = Path(__file__).parent.parent / "templates"

_QUOTED_VALUE = re.compile(r'"([^"]*)"')

UNKNOWN_TARGET_PLACEHOLDER = "// Code generation for this target is not implemented yet"

StepLike = Union[Step, Mapping[str, Any]]


def create_environment() -> Environment:
    """テキスト出力用の Jinja2 環境を作る（HTML エスケープは行わない）。"""
    return Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
    )


# ---------------------------------------------------------------------------
# 生成結果
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GeneratedCode:
    """生成されたコード。

    Attributes:
        text: 生成テキスト
        target: 出力形式（未知の形式名だった場合は None）
        is_placeholder: 未実装形式のプレースホルダーかどうか
    """

    text: str
    target: Optional[TargetFormat]
    is_placeholder: bool = False

    @property
    def extension(self) -> str:
        return self.target.extension if self.target is not None else "txt"


# ---------------------------------------------------------------------------
# ステップの読み取り
# ---------------------------------------------------------------------------

@dataclass
class StepView:
    """テンプレートに渡す 1 ステップ分の読み取り結果。"""

    number: int
    action: str = ""
    description: str = ""
    kind: Optional[ActionKind] = None
    xpath: Optional[str] = None
    css: Optional[str] = None
    has_selectors: bool = False
    lines: list[str] = field(default_factory=list)


def infer_kind(action: str) -> Optional[ActionKind]:
    """翻訳済みの操作名から操作種別を逆引きする。"""
    for kind in ActionKind:
        if reverse_lookup(action, kind.value) is not None:
            return kind
    return None


def read_step(number: int, item: StepLike) -> StepView:
    """Step または保存済みの辞書を StepView に読み替える。

    Raises:
        TypeError: Step でも辞書でもない場合
    """
    if isinstance(item, Step):
        record: Mapping[str, Any] = item.model_dump(mode="json")
    elif isinstance(item, Mapping):
        record = item
    else:
        raise TypeError(f"ステップの形式が不正です: {type(item).__name__}")

    action = str(record.get("action") or "")
    view = StepView(
        number=number,
        action=action,
        description=str(record.get("description") or ""),
    )

    raw_kind = record.get("kind")
    if raw_kind:
        view.kind = ActionKind(raw_kind)
    else:
        view.kind = infer_kind(action)

    selectors = record.get("selectors")
    if isinstance(selectors, Mapping):
        view.has_selectors = True
        view.xpath = str(selectors.get("xpath") or "")
        view.css = str(selectors.get("css") or "")
    return view


def extract_url(view: StepView) -> Optional[str]:
    """Navigate ステップの説明文から URL を取り出す。

    記録時の言語の "Navigate to " 相当の接頭辞で分割する。
    """
    prefixes = [view.action] if view.action else []
    prefixes += [text for text in TRANSLATIONS["navigate"].values() if text not in prefixes]
    for prefix in prefixes:
        marker = f"{prefix} "
        if marker in view.description:
            url = view.description.split(marker, 1)[1].strip()
            if url:
                return url
    return None


def extract_input_value(description: str) -> str:
    """説明文中の最初の "..." を入力値として取り出す。"""
    match = _QUOTED_VALUE.search(description)
    return match.group(1) if match else ""


def _escape_js(s: str) -> str:
    """JavaScript のシングルクォート文字列リテラル用にエスケープする。"""
    return (
        s.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )


def _single_line(s: str) -> str:
    return " ".join(s.splitlines())


# ---------------------------------------------------------------------------
# CodeGenerator 本体
# ---------------------------------------------------------------------------

class CodeGenerator:
    """記録ステップ列を指定形式のテキストに変換する。

    使用例::

        generator = CodeGenerator()
        result = generator.render(steps, system_info, TargetFormat.JS_PUPPETEER)
    """

    def __init__(self, env: Optional[Environment] = None) -> None:
        self._env = env or create_environment()

    def render(
        self,
        steps: Iterable[StepLike],
        system_info: Optional[SystemInfo],
        target: Union[TargetFormat, str],
    ) -> GeneratedCode:
        """ステップ列からコードを生成する。

        Args:
            steps: 記録済みステップ（Step または保存済み辞書）
            system_info: 環境情報（None の場合は実行環境から補う）
            target: 出力形式

        Returns:
            GeneratedCode
        """
        try:
            target = TargetFormat(target)
        except ValueError:
            logger.warning("未知の出力形式のためプレースホルダーを返します: %s", target)
            return GeneratedCode(UNKNOWN_TARGET_PLACEHOLDER, None, is_placeholder=True)

        if target in PLACEHOLDERS:
            logger.info("未実装の出力形式のためプレースホルダーを返します: %s", target.value)
            return GeneratedCode(PLACEHOLDERS[target], target, is_placeholder=True)

        info = system_info or local_system_info()
        items = list(steps)
        if target == TargetFormat.MANUAL:
            text = self._render_manual(items, info)
        else:
            text = self._render_puppeteer(items, info)

        logger.debug("%s を生成しました (steps=%d)", target.value, len(items))
        return GeneratedCode(text, target)

    # ----- 手動テストケース -----

    def _render_manual(self, items: list[StepLike], info: SystemInfo) -> str:
        entries: list[StepView] = []
        for number, item in enumerate(items, start=1):
            try:
                entries.append(read_step(number, item))
            except (TypeError, ValueError) as exc:
                logger.warning("ステップ %d を読み取れません: %s", number, exc)
                entries.append(StepView(number=number, description=f"[unreadable step: {exc}]"))

        template = self._env.get_template("manual_report.txt.j2")
        return template.render(system_info=info, entries=entries)

    # ----- Puppeteer -----

    def _render_puppeteer(self, items: list[StepLike], info: SystemInfo) -> str:
        blocks: list[StepView] = []
        for number, item in enumerate(items, start=1):
            try:
                view = read_step(number, item)
                view.lines = self._puppeteer_lines(view)
            except (TypeError, ValueError) as exc:
                logger.warning("ステップ %d のコードを生成できません: %s", number, exc)
                view = StepView(number=number, description=f"Step {number}")
                view.lines = [f"// Step {number} could not be generated: {_single_line(str(exc))}"]
            view.description = _single_line(view.description)
            blocks.append(view)

        template = self._env.get_template("puppeteer.js.j2")
        return template.render(
            environment=f"{info.browser}, {info.os}",
            date=info.timestamp,
            blocks=blocks,
        )

    def _puppeteer_lines(self, view: StepView) -> list[str]:
        if view.kind == ActionKind.NAVIGATE:
            url = extract_url(view)
            if url is None:
                return ["// Could not determine the URL for this navigation"]
            return [f"await page.goto('{_escape_js(url)}', {{ waitUntil: 'networkidle2' }});"]

        if view.kind == ActionKind.CLICK:
            if not view.css:
                return ["// Missing selector: add one for the click action"]
            css = _escape_js(view.css)
            return [
                f"await page.waitForSelector('{css}');",
                f"await page.click('{css}');",
            ]

        if view.kind == ActionKind.INPUT:
            if not view.css:
                return ["// Missing selector: add one for the input action"]
            css = _escape_js(view.css)
            value = _escape_js(extract_input_value(view.description))
            return [
                f"await page.waitForSelector('{css}');",
                f"await page.type('{css}', '{value}');",
            ]

        return [f"// Unsupported action: {_single_line(view.action) or '(none)'}"]


def generate(
    steps: Iterable[StepLike],
    system_info: Optional[SystemInfo],
    target: Union[TargetFormat, str],
) -> str:
    """ステップ列から指定形式のテキストを生成する。"""
    return CodeGenerator().render(steps, system_info, target).text
