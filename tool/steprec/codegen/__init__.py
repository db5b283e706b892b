"""
codegen パッケージ — 記録ステップ列からテストケース・スクリプトを生成する

主要エクスポート:
  - TargetFormat: 出力形式
  - CodeGenerator / generate: コード生成
  - build_session_report: セッションレポート
  - export_code: 日時付きファイル名での保存
"""

from __future__ import annotations

from .export import export_code, export_filename
from .formats import PLACEHOLDERS, TargetFormat
from .generator import CodeGenerator, GeneratedCode, generate
from .report import build_session_report

__all__ = [
    "CodeGenerator",
    "GeneratedCode",
    "PLACEHOLDERS",
    "TargetFormat",
    "build_session_report",
    "export_code",
    "export_filename",
    "generate",
]
