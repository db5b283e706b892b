"""
steprec — ブラウザ操作の記録とテストケース/スクリプト生成

ユーザーの Web ページ操作（クリック・入力・遷移）を Step として記録し、
手動テストケースのレポートや自動化スクリプトに変換する。

主な構成:
  - dom: 要素の抽象インターフェース、ロケーター生成、要素説明
  - capture: イベント正規化、iframe 中継、記録セッション管理
  - codegen: Step 列からのレポート/スクリプト生成
  - browser: Playwright を使った実ブラウザからのイベント取り込み
  - cli: typer ベースのコマンドラインインターフェース
"""

from __future__ import annotations

__version__ = "0.3.0"
