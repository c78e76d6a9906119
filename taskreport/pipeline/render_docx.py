from __future__ import annotations

import io
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence, Tuple, Union

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Pt, RGBColor

from ..config import EMPTY_MESSAGE, REPORT_TITLE
from ..models import ArtifactKind, ReportData, ReportGenerationError
from .aggregate import iter_days
from .formatting import format_long_date, format_timestamp

DONE_COLOR = "52BE80"
PENDING_COLOR = "FF9800"


@dataclass(frozen=True)
class Run:
    text: str
    bold: bool = False
    italic: bool = False
    strike: bool = False
    color: Optional[str] = None


@dataclass(frozen=True)
class Heading:
    text: str
    level: int
    centered: bool = False
    space_before: float = 0
    space_after: float = 10


@dataclass(frozen=True)
class Paragraph:
    runs: Tuple[Run, ...]
    space_after: float = 0

    @property
    def text(self) -> str:
        return "".join(run.text for run in self.runs)


@dataclass(frozen=True)
class KeyValueTable:
    rows: Tuple[Tuple[str, str], ...]
    bordered: bool = True


Block = Union[Heading, Paragraph, KeyValueTable]


def _plain(text: str, space_after: float = 0, italic: bool = False) -> Paragraph:
    return Paragraph(runs=(Run(text, italic=italic),), space_after=space_after)


def _task_paragraph(title: str, completed: bool) -> Paragraph:
    if completed:
        marker = Run("[DONE] ", bold=True, color=DONE_COLOR)
    else:
        marker = Run("[PENDING] ", bold=True, color=PENDING_COLOR)
    return Paragraph(runs=(marker, Run(title, strike=completed)), space_after=2.5)


def build_document(report: ReportData, now: datetime) -> List[Block]:
    """Render the report into an ordered list of document blocks."""
    period = f"Report Period: {format_long_date(report.start_date)} - {format_long_date(report.end_date)}"
    blocks: List[Block] = [
        Heading(REPORT_TITLE, level=1, centered=True),
        _plain(period, space_after=5),
        _plain(f"Generated: {format_timestamp(now)}", space_after=20),
        Heading("Summary", level=2),
        KeyValueTable(
            rows=(
                ("Total Tasks", str(report.total_tasks)),
                ("Completed", str(report.total_completed)),
                ("Pending", str(report.pending)),
                ("Completion Rate", f"{report.completion_rate}%"),
            )
        ),
        _plain("", space_after=20),
        Heading("Daily Breakdown", level=2),
    ]

    if report.is_empty:
        blocks.append(_plain(EMPTY_MESSAGE, italic=True))

    for day in iter_days(report):
        blocks.append(Heading(format_long_date(day.date), level=3, space_before=10, space_after=5))
        for task in report.tasks[day.date]:
            blocks.append(_task_paragraph(task.title, task.completed))
        blocks.append(
            _plain(
                f"Day Summary: {day.completed} of {day.total} tasks completed",
                space_after=10,
                italic=True,
            )
        )
    return blocks


def _apply_run(paragraph, run: Run) -> None:
    out = paragraph.add_run(run.text)
    out.bold = run.bold or None
    out.italic = run.italic or None
    if run.strike:
        out.font.strike = True
    if run.color:
        out.font.color.rgb = RGBColor.from_string(run.color)


def _add_table(document, block: KeyValueTable) -> None:
    table = document.add_table(rows=len(block.rows), cols=2)
    if block.bordered:
        table.style = "Table Grid"
    for index, (key, value) in enumerate(block.rows):
        key_cell, value_cell = table.rows[index].cells
        key_cell.paragraphs[0].add_run(key).bold = True
        value_cell.paragraphs[0].add_run(value)


def assemble_docx(blocks: Sequence[Block]) -> bytes:
    """
    Turn document blocks into a packaged .docx payload.

    Any failure while assembling or packaging is raised as
    ReportGenerationError so callers never receive a partial document.
    """
    buffer = io.BytesIO()
    try:
        document = Document()
        for block in blocks:
            if isinstance(block, Heading):
                heading = document.add_heading(block.text, level=block.level)
                if block.centered:
                    heading.alignment = WD_ALIGN_PARAGRAPH.CENTER
                heading.paragraph_format.space_before = Pt(block.space_before)
                heading.paragraph_format.space_after = Pt(block.space_after)
            elif isinstance(block, Paragraph):
                paragraph = document.add_paragraph()
                for run in block.runs:
                    _apply_run(paragraph, run)
                paragraph.paragraph_format.space_after = Pt(block.space_after)
            elif isinstance(block, KeyValueTable):
                _add_table(document, block)
            else:
                raise TypeError(f"Unsupported block: {type(block).__name__}")
        document.save(buffer)
        return buffer.getvalue()
    except Exception as exc:
        raise ReportGenerationError(ArtifactKind.DOCUMENT, "DOCX_ASSEMBLY_FAILED", str(exc)) from exc
    finally:
        buffer.close()


def render_docx(report: ReportData, now: datetime) -> bytes:
    return assemble_docx(build_document(report, now))
