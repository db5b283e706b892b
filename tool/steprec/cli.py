"""
CLI エントリポイント — Typer ベースのコマンドラインインターフェース

steprec コマンドとして以下のサブコマンドを提供する:
  - record: ブラウザを開いて操作を記録
  - steps: 記録済みステップの一覧
  - generate: テストケース / スクリプトの生成（標準出力）
  - export: 生成結果を日時付きファイルに保存
  - report: セッションレポートの出力
  - clear: 記録済みステップの削除
  - formats: 出力形式の一覧
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer

from .capture.models import RecordingOptions, RecordingSession, Step
from .capture.session import SessionCoordinator
from .capture.store import YamlFileStore
from .capture.translations import supported_languages
from .codegen import CodeGenerator, TargetFormat, build_session_report, export_code
from .config import RecorderConfig, load_config_from_env, parse_viewport

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Typer アプリ定義
# ---------------------------------------------------------------------------

app = typer.Typer(
    help=(
        "steprec — ブラウザ操作を記録してテストケースを作るツール\n\n"
        "基本の流れ:\n"
        "  1. steprec record URL          操作を記録（ブラウザが開きます）\n"
        "  2. steprec generate -f manual  手動テストケースを表示\n"
        "  3. steprec export -f js-puppeteer  スクリプトをファイルに保存\n\n"
        "詳しくは各コマンドに --help を付けてください。"
    ),
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    store: Optional[Path] = typer.Option(
        None, "--store", help="セッション保存先 YAML（デフォルト: STEPREC_STORE または .steprec/session.yaml）",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="詳細ログを表示する"),
) -> None:
    """共通オプションを処理する。"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    config = load_config_from_env()
    if store is not None:
        config.store_path = store
    ctx.obj = config


def _config(ctx: typer.Context) -> RecorderConfig:
    if isinstance(ctx.obj, RecorderConfig):
        return ctx.obj
    return load_config_from_env()


def _coordinator(config: RecorderConfig) -> SessionCoordinator:
    return SessionCoordinator(YamlFileStore(config.store_path))


def _load_session(config: RecorderConfig) -> RecordingSession:
    return _coordinator(config).load_session()


def _parse_format(value: str) -> TargetFormat:
    try:
        return TargetFormat.parse(value)
    except ValueError as exc:
        typer.echo(f"エラー: {exc}", err=True)
        raise typer.Exit(code=1)


# ---------------------------------------------------------------------------
# record コマンド
# ---------------------------------------------------------------------------

@app.command()
def record(
    ctx: typer.Context,
    url: str = typer.Argument(..., help="記録対象の URL"),
    screenshots: bool = typer.Option(
        True, "--screenshots/--no-screenshots", help="各ステップのスクリーンショットを取得する",
    ),
    selectors: bool = typer.Option(
        True, "--selectors/--no-selectors", help="XPath / CSS セレクタを記録する",
    ),
    record_screen: bool = typer.Option(
        False, "--record-screen", help="画面録画（Playwright トレース）を保存する",
    ),
    language: Optional[str] = typer.Option(
        None, "--language", "-l", help="記録時の表示言語（en / de / fr / es / zh）",
    ),
    headed: Optional[bool] = typer.Option(
        None, "--headed/--headless", help="ブラウザ表示モード（デフォルト: 表示）",
    ),
    viewport: Optional[str] = typer.Option(
        None, "--viewport", help="ビューポートサイズ (WIDTHxHEIGHT)",
    ),
) -> None:
    """ブラウザを開いて操作を記録する。ブラウザを閉じると記録が終了します。"""
    config = _config(ctx)

    if language is not None:
        if language not in supported_languages():
            typer.echo(
                f"エラー: 未対応の言語です: {language}（指定可能: {', '.join(supported_languages())}）",
                err=True,
            )
            raise typer.Exit(code=1)
        config.language = language
    if headed is not None:
        config.headed = headed
    if viewport is not None:
        try:
            config.viewport_width, config.viewport_height = parse_viewport(viewport)
        except ValueError:
            typer.echo(f"エラー: --viewport の形式が不正です: {viewport} (WIDTHxHEIGHT)", err=True)
            raise typer.Exit(code=1)

    options = RecordingOptions(
        capture_screenshots=screenshots,
        record_screen=record_screen,
        capture_selectors=selectors,
        language=config.language,
    )

    def on_step(step: Step) -> None:
        typer.echo(f"  + {step.description}")

    from .browser import record as record_browser

    typer.echo(f"URL: {url}")
    typer.echo("ブラウザを閉じると記録が終了します。\n")
    try:
        session = asyncio.run(record_browser(url, config, options, on_step=on_step))
    except KeyboardInterrupt:
        typer.echo("記録を中断しました。")
        raise typer.Exit(code=0)
    except Exception as exc:
        typer.echo(f"エラー: {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"\n記録完了: {len(session.steps)} ステップ ({config.store_path})")
    if session.screen_recording:
        typer.echo(f"画面録画: {session.screen_recording}")


# ---------------------------------------------------------------------------
# 参照系コマンド
# ---------------------------------------------------------------------------

@app.command()
def steps(ctx: typer.Context) -> None:
    """記録済みステップを一覧表示する。"""
    session = _load_session(_config(ctx))
    if not session.steps:
        typer.echo("ステップはまだ記録されていません。")
        return

    for index, step in enumerate(session.steps, start=1):
        typer.echo(f"Step {index}: {step.action}  [{step.timestamp}]")
        typer.echo(f"  {step.description}")
        if step.selectors is not None:
            typer.echo(f"  XPath: {step.selectors.xpath}")
            typer.echo(f"  CSS: {step.selectors.css}")
        if step.screenshot:
            typer.echo("  (screenshot)")


@app.command()
def generate(
    ctx: typer.Context,
    target: str = typer.Option("manual", "--format", "-f", help="出力形式（steprec formats で一覧）"),
) -> None:
    """記録済みステップからテストケース / スクリプトを生成して表示する。"""
    target_format = _parse_format(target)
    session = _load_session(_config(ctx))
    result = CodeGenerator().render(session.steps, session.system_info, target_format)
    if result.is_placeholder:
        typer.echo(f"注意: {target_format.label} のコード生成は未実装です。", err=True)
    typer.echo(result.text)


@app.command()
def export(
    ctx: typer.Context,
    target: str = typer.Option("manual", "--format", "-f", help="出力形式（steprec formats で一覧）"),
    output_dir: Optional[Path] = typer.Option(
        None, "--output-dir", "-o", help="出力先ディレクトリ（デフォルト: STEPREC_EXPORT_DIR または exports）",
    ),
) -> None:
    """生成結果を TestCase_<日時>.<拡張子> として保存する。"""
    target_format = _parse_format(target)
    config = _config(ctx)
    session = _load_session(config)
    result = CodeGenerator().render(session.steps, session.system_info, target_format)
    try:
        path = export_code(result, output_dir or config.export_dir)
    except OSError as exc:
        typer.echo(f"エラー: {exc}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"エクスポート完了: {path}")


@app.command()
def report(
    ctx: typer.Context,
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="出力先ファイル（省略時は標準出力）"),
) -> None:
    """記録内容のセッションレポートを出力する。"""
    session = _load_session(_config(ctx))
    text = build_session_report(session.steps, session.system_info)
    if output is None:
        typer.echo(text, nl=False)
        return

    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text, encoding="utf-8")
    except OSError as exc:
        typer.echo(f"エラー: {exc}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"レポートを出力しました: {output}")


@app.command()
def clear(ctx: typer.Context) -> None:
    """記録済みステップを全て削除する。"""
    coordinator = _coordinator(_config(ctx))

    async def _clear() -> None:
        await coordinator.clear()
        await coordinator.close()

    asyncio.run(_clear())
    typer.echo("ステップをクリアしました。")


@app.command()
def formats() -> None:
    """指定可能な出力形式を一覧表示する。"""
    for target in TargetFormat:
        note = "" if target.is_implemented else "  (未実装)"
        typer.echo(f"{target.value:<16} .{target.extension:<5} {target.label}{note}")
