"""
記録データモデル — Step / RecordingOptions / SystemInfo / RecordingSession

Pydantic v2 モデルで記録データを表現する。
永続化ストアには従来どおり camelCase のキー（captureScreenshots 等）で保存し、
Python 側の属性名は snake_case で扱う。

Step は frozen（不変）であり、一度確定したステップは編集されない。
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

# 永続化ストアで使用するキー
KEY_STEPS = "steps"
KEY_IS_RECORDING = "isRecording"
KEY_OPTIONS = "recordingOptions"
KEY_SYSTEM_INFO = "systemInfo"
KEY_SCREEN_RECORDING = "screenRecording"

SESSION_KEYS = (
    KEY_STEPS,
    KEY_IS_RECORDING,
    KEY_OPTIONS,
    KEY_SYSTEM_INFO,
    KEY_SCREEN_RECORDING,
)

PASSWORD_MASK = "********"


# ---------------------------------------------------------------------------
# ステップ
# ---------------------------------------------------------------------------

class ActionKind(str, enum.Enum):
    """言語に依存しない操作種別。"""

    CLICK = "click"
    INPUT = "input"
    NAVIGATE = "navigate"


class Selectors(BaseModel):
    """要素のロケーター組。"""

    model_config = ConfigDict(frozen=True)

    xpath: str = Field(default="", description="XPath ロケーター")
    css: str = Field(default="", description="CSS セレクタ")


class ElementInfo(BaseModel):
    """要素の説明文とロケーターの組（iframe 中継ではこの形で送られる）。"""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    description: str = ""
    xpath: str = ""
    css: str = Field(default="", alias="cssSelector")

    def to_selectors(self) -> Selectors:
        return Selectors(xpath=self.xpath, css=self.css)


class Step(BaseModel):
    """記録された 1 操作。

    Attributes:
        action: 翻訳済みの操作名（Click / Eingabe / Navigate to 等）
        description: 操作・対象・入力値をまとめた説明文
        kind: 言語非依存の操作種別（旧データでは欠落していることがある）
        selectors: ロケーター組（セレクタ取得が有効な場合のみ）
        screenshot: data URI 形式のスクリーンショット（取得成功時のみ）
        timestamp: 記録時刻（ロケール形式）
    """

    model_config = ConfigDict(frozen=True)

    action: str
    description: str
    kind: Optional[ActionKind] = None
    selectors: Optional[Selectors] = None
    screenshot: Optional[str] = None
    timestamp: str = ""

    def to_record(self) -> dict[str, Any]:
        """ストア保存用の辞書に変換する。None の項目は含めない。"""
        return self.model_dump(mode="json", exclude_none=True)


# ---------------------------------------------------------------------------
# 記録オプション・環境情報
# ---------------------------------------------------------------------------

class RecordingOptions(BaseModel):
    """記録開始時に決まり、そのセッションの全ステップに適用されるオプション。"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    capture_screenshots: bool = Field(default=True, alias="captureScreenshots")
    record_screen: bool = Field(default=False, alias="recordScreen")
    capture_selectors: bool = Field(default=True, alias="captureSelectors")
    language: str = Field(default="en", description="表示言語コード")

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class SystemInfo(BaseModel):
    """レポート/スクリプトのヘッダーに添える環境情報。"""

    model_config = ConfigDict(frozen=True)

    browser: str = ""
    os: str = ""
    resolution: str = ""
    timestamp: str = ""

    def to_record(self) -> dict[str, Any]:
        return self.model_dump()


# ---------------------------------------------------------------------------
# セッション
# ---------------------------------------------------------------------------

class RecordingSession(BaseModel):
    """ストア上のセッション状態のスナップショット。"""

    model_config = ConfigDict(populate_by_name=True)

    is_recording: bool = Field(default=False, alias=KEY_IS_RECORDING)
    options: RecordingOptions = Field(default_factory=RecordingOptions, alias=KEY_OPTIONS)
    steps: list[Step] = Field(default_factory=list)
    system_info: Optional[SystemInfo] = Field(default=None, alias=KEY_SYSTEM_INFO)
    screen_recording: Optional[str] = Field(default=None, alias=KEY_SCREEN_RECORDING)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> RecordingSession:
        """ストアから読んだ部分レコードをセッションに変換する。

        欠落キーは既定値とし、壊れた項目は警告を出して読み飛ばす。
        1 件の不正なステップで記録済みの他のステップを失わないようにするため。

        Args:
            record: KeyValueStore.get() の戻り値

        Returns:
            RecordingSession
        """
        steps = parse_steps(record.get(KEY_STEPS))

        options = RecordingOptions()
        raw_options = record.get(KEY_OPTIONS)
        if isinstance(raw_options, Mapping):
            try:
                options = RecordingOptions.model_validate(dict(raw_options))
            except ValidationError as exc:
                logger.warning("記録オプションが不正なため既定値を使用します: %s", exc)

        system_info = None
        raw_info = record.get(KEY_SYSTEM_INFO)
        if isinstance(raw_info, Mapping):
            try:
                system_info = SystemInfo.model_validate(dict(raw_info))
            except ValidationError as exc:
                logger.warning("環境情報が不正なため無視します: %s", exc)

        screen_recording = record.get(KEY_SCREEN_RECORDING)

        return cls(
            is_recording=bool(record.get(KEY_IS_RECORDING, False)),
            options=options,
            steps=steps,
            system_info=system_info,
            screen_recording=str(screen_recording) if screen_recording else None,
        )


def parse_steps(raw: Any) -> list[Step]:
    """ストア上のステップ配列を Step リストに変換する。"""
    if not isinstance(raw, list):
        return []

    steps: list[Step] = []
    for index, item in enumerate(raw):
        if isinstance(item, Step):
            steps.append(item)
            continue
        if not isinstance(item, Mapping):
            logger.warning("ステップ %d が辞書ではないため読み飛ばします", index + 1)
            continue
        try:
            steps.append(Step.model_validate(dict(item)))
        except ValidationError as exc:
            logger.warning("ステップ %d が不正なため読み飛ばします: %s", index + 1, exc)
    return steps
