from __future__ import annotations

from pathlib import Path
from typing import List
import json


BASE_DIR = Path(__file__).resolve().parents[1]
OUT_DIR = BASE_DIR / "out"
STYLE_PRESET_PATH = Path(__file__).resolve().parent / "assets" / "report_style.json"

REPORT_NAME = "Weekly Report"
REPORT_TITLE = "WEEKLY TASK REPORT"

RULE_WIDTH = 60
DEFAULT_RANGE_DAYS = 7

EMPTY_MESSAGE = "No tasks found for this period."

CONCLUSION_LINES: List[str] = [
    "Small tasks finished every day add up to a productive week.",
    "Carry pending tasks forward and plan the next week with them in mind.",
]


def load_style_preset() -> dict:
    with STYLE_PRESET_PATH.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def set_out_dir(path: Path) -> None:
    global OUT_DIR
    OUT_DIR = path
