"""
CodeGenerator テスト — 手動テストケース / Puppeteer / プレースホルダー
"""

from __future__ import annotations

import pytest

from steprec.codegen import PLACEHOLDERS, CodeGenerator, TargetFormat, generate
from steprec.codegen.generator import (
    UNKNOWN_TARGET_PLACEHOLDER,
    extract_input_value,
    extract_url,
    infer_kind,
    read_step,
)
from steprec.capture.models import ActionKind, Selectors, Step


def _navigate(url: str, action: str = "Navigate to") -> Step:
    return Step(action=action, description=f"{action} {url}", kind=ActionKind.NAVIGATE)


def _click(css: str, description: str = "Click on button") -> Step:
    return Step(
        action="Click",
        description=description,
        kind=ActionKind.CLICK,
        selectors=Selectors(xpath="//button", css=css),
    )


def _input(css: str, value: str) -> Step:
    return Step(
        action="Input",
        description=f'Input "{value}" on input with name "name"',
        kind=ActionKind.INPUT,
        selectors=Selectors(xpath="//input", css=css),
    )


# ---------------------------------------------------------------------------
# 手動テストケース
# ---------------------------------------------------------------------------

class TestManualReport:
    """手動テストケースの生成。"""

    def test_empty_steps(self, system_info):
        text = generate([], system_info, "manual")
        assert text == (
            "=== TEST CASE ===\n"
            "\n"
            "-- Environment --\n"
            "Browser: Chrome 120.0\n"
            "OS: Linux\n"
            "Resolution: 1920x1080\n"
            "Date: 03/01/24 09:30:15\n"
            "\n"
            "-- Steps to Reproduce --\n"
            "\n"
            "-- End of Test Case --"
        )

    def test_numbered_entries_with_selectors(self, system_info):
        steps = [_navigate("https://example.com"), _click("#submit", "Click on button with id \"submit\"")]
        text = generate(steps, system_info, TargetFormat.MANUAL)

        assert "1. Navigate to https://example.com\n\n2. Click on button" in text
        assert "   Element: XPath: //button\n   Element: CSS: #submit\n" in text
        assert text.endswith("-- End of Test Case --")
        # セレクタの無いステップには Element 行が無い
        assert text.count("Element: XPath") == 1

    def test_missing_system_info_is_filled(self):
        text = generate([], None, "manual")
        assert "Browser: " in text
        assert "-- Steps to Reproduce --" in text

    def test_unreadable_step_does_not_abort(self, system_info):
        text = generate(["garbage", _click("#ok")], system_info, "manual")
        assert "1. [unreadable step" in text
        assert "2. Click on button" in text


# ---------------------------------------------------------------------------
# Puppeteer
# ---------------------------------------------------------------------------

class TestPuppeteer:
    """Puppeteer スクリプトの生成。"""

    def test_steps_in_order(self, system_info):
        steps = [
            _navigate("https://example.com"),
            _click("#submit"),
            _input("#name", "hello"),
        ]
        text = generate(steps, system_info, "js-puppeteer")

        goto = text.index("await page.goto('https://example.com', { waitUntil: 'networkidle2' });")
        click = text.index("await page.click('#submit');")
        type_ = text.index("await page.type('#name', 'hello');")
        assert goto < click < type_
        assert text.index("await page.waitForSelector('#submit');") < click
        assert text.index("await page.waitForSelector('#name');") < type_

    def test_script_structure(self, system_info):
        text = generate([_click("#a")], system_info, "js-puppeteer")
        assert text.startswith("// Generated Puppeteer Test Script\n// Environment: Chrome 120.0, Linux\n")
        assert "const puppeteer = require('puppeteer');" in text
        assert "  try {\n\n    // Click on button\n" in text
        assert "console.log('Test completed successfully');" in text
        assert "console.error('Test failed:', error);" in text
        assert text.rstrip().endswith("await browser.close();\n  }\n})();")

    def test_missing_selector_gives_comment(self, system_info):
        step = Step(action="Click", description="Click on div", kind=ActionKind.CLICK)
        text = generate([step, _click("#next")], system_info, "js-puppeteer")
        assert "// Missing selector: add one for the click action" in text
        assert "await page.click('#next');" in text

    def test_legacy_step_without_kind(self, system_info):
        """kind の無い保存済みステップは action から種別を推定すること。"""
        records = [
            {"action": "Navigieren zu", "description": "Navigieren zu https://example.de"},
            {"action": "Eingabe", "description": 'Eingabe "Grüße" auf input', "selectors": {"xpath": "//input", "css": "input"}},
        ]
        text = generate(records, system_info, "js-puppeteer")
        assert "await page.goto('https://example.de'" in text
        assert "await page.type('input', 'Grüße');" in text

    def test_strings_are_escaped(self, system_info):
        step = _input("input[name='q']", "it's")
        text = generate([step], system_info, "js-puppeteer")
        assert "await page.type('input[name=\\'q\\']', 'it\\'s');" in text

    def test_multiline_description_stays_in_comment(self, system_info):
        step = Step(action="Click", description="Click on\nlabel", kind=ActionKind.CLICK)
        text = generate([step], system_info, "js-puppeteer")
        assert "    // Click on label\n" in text

    def test_malformed_steps_become_comments(self, system_info):
        records = [
            {"action": "Click", "description": "x", "kind": "drag"},
            {"action": "Scroll", "description": "Scroll down"},
            _click("#still-here"),
        ]
        text = generate(records, system_info, "js-puppeteer")
        assert "// Step 1 could not be generated" in text
        assert "// Unsupported action: Scroll" in text
        assert "await page.click('#still-here');" in text

    def test_navigation_without_url(self, system_info):
        step = Step(action="Navigate to", description="Navigate to", kind=ActionKind.NAVIGATE)
        text = generate([step], system_info, "js-puppeteer")
        assert "// Could not determine the URL for this navigation" in text


# ---------------------------------------------------------------------------
# プレースホルダー・CodeGenerator
# ---------------------------------------------------------------------------

class TestPlaceholders:
    """未実装形式のテスト。"""

    @pytest.mark.parametrize("target", list(PLACEHOLDERS))
    def test_placeholder_is_flagged(self, target, system_info):
        result = CodeGenerator().render([_click("#a")], system_info, target)
        assert result.is_placeholder
        assert result.text == PLACEHOLDERS[target]
        assert "not implemented yet" in result.text

    def test_python_uses_hash_comment(self, system_info):
        assert generate([], system_info, "python-selenium").startswith("# ")

    @pytest.mark.parametrize("target", [TargetFormat.MANUAL, TargetFormat.JS_PUPPETEER])
    def test_real_generators_are_not_placeholders(self, target, system_info):
        result = CodeGenerator().render([], system_info, target)
        assert not result.is_placeholder
        assert result.extension == target.extension

    def test_unknown_target_gives_placeholder(self, system_info):
        result = CodeGenerator().render([_click("#a")], system_info, "ruby-watir")
        assert result.is_placeholder
        assert result.target is None
        assert result.text == UNKNOWN_TARGET_PLACEHOLDER
        assert result.extension == "txt"

    def test_generate_unknown_target_does_not_raise(self, system_info):
        assert "not implemented yet" in generate([], system_info, "ruby-watir")


class TestTargetFormat:
    """TargetFormat のテスト。"""

    @pytest.mark.parametrize(("target", "extension"), [
        ("manual", "txt"),
        ("js-puppeteer", "js"),
        ("js-playwright", "js"),
        ("python-selenium", "py"),
        ("java-selenium", "java"),
        ("csharp-selenium", "cs"),
    ])
    def test_extensions(self, target, extension):
        assert TargetFormat.parse(target).extension == extension

    def test_parse_error_lists_choices(self):
        with pytest.raises(ValueError, match="js-puppeteer"):
            TargetFormat.parse("cobol")


# ---------------------------------------------------------------------------
# 読み取りヘルパー
# ---------------------------------------------------------------------------

class TestHelpers:
    """説明文の解析ヘルパー。"""

    def test_infer_kind(self):
        assert infer_kind("Klick") == ActionKind.CLICK
        assert infer_kind("输入") == ActionKind.INPUT
        assert infer_kind("Naviguer vers") == ActionKind.NAVIGATE
        assert infer_kind("Drag") is None

    def test_extract_url_uses_any_language_prefix(self):
        view = read_step(1, {"action": "", "description": "导航至 https://example.cn"})
        assert extract_url(view) == "https://example.cn"

    def test_extract_input_value_first_quote(self):
        assert extract_input_value('Input "a" on label with text "b"') == "a"
        assert extract_input_value("Input on div") == ""
