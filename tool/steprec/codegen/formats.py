"""
出力形式の定義 — 生成対象のコード形式と拡張子・未実装プレースホルダー
"""

from __future__ import annotations

import enum


class TargetFormat(str, enum.Enum):
    """コード生成の対象形式。"""

    MANUAL = "manual"
    JS_PUPPETEER = "js-puppeteer"
    JS_PLAYWRIGHT = "js-playwright"
    PYTHON_SELENIUM = "python-selenium"
    JAVA_SELENIUM = "java-selenium"
    CSHARP_SELENIUM = "csharp-selenium"

    @property
    def extension(self) -> str:
        """エクスポート時のファイル拡張子。"""
        return _EXTENSIONS[self]

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def is_implemented(self) -> bool:
        return self not in PLACEHOLDERS

    @classmethod
    def parse(cls, value: str) -> TargetFormat:
        """文字列から TargetFormat を得る。

        Raises:
            ValueError: 未知の形式名の場合
        """
        try:
            return cls(value)
        except ValueError:
            choices = ", ".join(f.value for f in cls)
            raise ValueError(f"未知の出力形式です: {value!r}（指定可能: {choices}）") from None


_EXTENSIONS = {
    TargetFormat.MANUAL: "txt",
    TargetFormat.JS_PUPPETEER: "js",
    TargetFormat.JS_PLAYWRIGHT: "js",
    TargetFormat.PYTHON_SELENIUM: "py",
    TargetFormat.JAVA_SELENIUM: "java",
    TargetFormat.CSHARP_SELENIUM: "cs",
}

_LABELS = {
    TargetFormat.MANUAL: "Manual test case",
    TargetFormat.JS_PUPPETEER: "JavaScript (Puppeteer)",
    TargetFormat.JS_PLAYWRIGHT: "JavaScript (Playwright)",
    TargetFormat.PYTHON_SELENIUM: "Python (Selenium)",
    TargetFormat.JAVA_SELENIUM: "Java (Selenium)",
    TargetFormat.CSHARP_SELENIUM: "C# (Selenium)",
}

# 未実装の形式はその言語のコメント構文で 1 行だけ返す
PLACEHOLDERS = {
    TargetFormat.JS_PLAYWRIGHT: "// Playwright code generation not implemented yet",
    TargetFormat.PYTHON_SELENIUM: "# Python Selenium code generation not implemented yet",
    TargetFormat.JAVA_SELENIUM: "// Java Selenium code generation not implemented yet",
    TargetFormat.CSHARP_SELENIUM: "// C# Selenium code generation not implemented yet",
}
