"""
翻訳テーブル — 操作キーと言語コードから表示文言を引く

言語を追加するときはテーブルに 1 列追加するだけでよく、呼び出し側は変更しない。
"""

from __future__ import annotations

from typing import Optional

DEFAULT_LANGUAGE = "en"

TRANSLATIONS: dict[str, dict[str, str]] = {
    "click": {
        "en": "Click",
        "de": "Klick",
        "fr": "Clic",
        "es": "Clic",
        "zh": "点击",
    },
    "input": {
        "en": "Input",
        "de": "Eingabe",
        "fr": "Saisie",
        "es": "Entrada",
        "zh": "输入",
    },
    "navigate": {
        "en": "Navigate to",
        "de": "Navigieren zu",
        "fr": "Naviguer vers",
        "es": "Navegar a",
        "zh": "导航至",
    },
    "on": {
        "en": "on",
        "de": "auf",
        "fr": "sur",
        "es": "en",
        "zh": "在",
    },
}


def translate(action_key: str, language: str = DEFAULT_LANGUAGE) -> str:
    """操作キーを指定言語の文言に変換する。

    未対応の言語は英語にフォールバックし、未知のキーはそのまま返す。

    Args:
        action_key: click / input / navigate / on
        language: 言語コード（en, de, fr, es, zh 等）

    Returns:
        翻訳済みの文言
    """
    row = TRANSLATIONS.get(action_key)
    if row is None:
        return action_key
    return row.get(language) or row.get(DEFAULT_LANGUAGE) or action_key


def supported_languages() -> list[str]:
    """全キーで翻訳が揃っている言語コードの一覧を返す。"""
    languages: Optional[set[str]] = None
    for row in TRANSLATIONS.values():
        languages = set(row) if languages is None else languages & set(row)
    return sorted(languages or ())


def reverse_lookup(text: str, action_key: str) -> Optional[str]:
    """文言から言語コードを逆引きする。該当が無ければ None。"""
    for language, translated in TRANSLATIONS.get(action_key, {}).items():
        if translated == text:
            return language
    return None
