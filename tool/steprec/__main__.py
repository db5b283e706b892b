"""python -m steprec で CLI を起動する。"""

from __future__ import annotations

from .cli import app

app(prog_name="steprec")
