from __future__ import annotations

import io
import logging
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, LETTER
from reportlab.pdfgen import canvas

from ..config import CONCLUSION_LINES, EMPTY_MESSAGE, REPORT_TITLE, load_style_preset
from ..models import ArtifactKind, DayStats, ReportData, ReportGenerationError, Task
from .aggregate import average_daily_completion, iter_days
from .formatting import format_long_date, format_short_date, format_timestamp
from .insight import performance_insight
from .layout import DrawOp, Page, PageCursor, wrap_words

logger = logging.getLogger(__name__)

PAGE_SIZES: Dict[str, Tuple[float, float]] = {
    "A4": A4,
    "LETTER": LETTER,
}

WHITE = "#FFFFFF"


def _hex(value: str, default=colors.black) -> colors.Color:
    if not value:
        return default
    try:
        return colors.HexColor("#" + str(value).lstrip("#"))
    except ValueError:
        return default


def _s(style: dict, key: str, default):
    return style.get(key, default)


def _f(style: dict, key: str, default: float) -> float:
    return float(_s(style, key, default))


def _page_size(style: dict) -> Tuple[float, float]:
    name = str(_s(style, "page_size", "A4")).upper()
    return PAGE_SIZES.get(name, A4)


def _draw_title_banner(cursor: PageCursor, style: dict) -> None:
    bar_h = _f(style, "title_bar_h", 28)
    size = _f(style, "title_size", 16)
    cursor.reserve(bar_h)
    cursor.rect(cursor.margin - 2, cursor.content_width + 4, bar_h, str(_s(style, "primary_color", "#1E4696")))
    cursor.text(
        cursor.margin + 8,
        REPORT_TITLE,
        str(_s(style, "font_bold", "Helvetica-Bold")),
        size,
        WHITE,
        offset=(bar_h + size * 0.7) / 2,
    )
    cursor.advance(bar_h + 8)


def _draw_meta(cursor: PageCursor, style: dict, report: ReportData, now: datetime) -> None:
    font = str(_s(style, "font_name", "Helvetica"))
    size = _f(style, "meta_size", 8)
    row = _f(style, "meta_h", 11)
    muted = str(_s(style, "muted_color", "#646464"))
    lines = [
        f"Period: {format_long_date(report.start_date)} to {format_long_date(report.end_date)}",
        f"Generated: {format_timestamp(now)}",
    ]
    for line in lines:
        cursor.reserve(row)
        cursor.text(cursor.margin, line, font, size, muted)
        cursor.advance(row)
    cursor.advance(_f(style, "section_gap", 10))


def _draw_section_title(cursor: PageCursor, style: dict, title: str, keep_with_next: float = 0.0) -> None:
    row = _f(style, "section_h", 18)
    cursor.reserve(row + keep_with_next)
    cursor.text(
        cursor.margin,
        title,
        str(_s(style, "font_bold", "Helvetica-Bold")),
        _f(style, "section_size", 11),
        str(_s(style, "accent_color", "#196EC8")),
    )
    cursor.advance(row)


def _draw_metric_boxes(cursor: PageCursor, style: dict, report: ReportData) -> None:
    bold = str(_s(style, "font_bold", "Helvetica-Bold"))
    font = str(_s(style, "font_name", "Helvetica"))
    box_h = _f(style, "box_h", 48)
    gutter = _f(style, "gutter", 12)
    radius = _f(style, "box_radius", 6)
    label_size = _f(style, "label_size", 9)
    value_size = _f(style, "value_size", 18)
    palette: List[str] = list(_s(style, "metric_colors", ["#1E4696", "#52BE80", "#FF9800", "#196EC8"]))

    metrics = [
        ("Total Tasks", str(report.total_tasks)),
        ("Completed", str(report.total_completed)),
        ("Pending", str(report.pending)),
        ("Completion Rate", f"{report.completion_rate}%"),
    ]

    box_w = (cursor.content_width - gutter) / 2
    _draw_section_title(cursor, style, "KEY METRICS", keep_with_next=box_h)
    for index, (label, value) in enumerate(metrics):
        col = index % 2
        if col == 0:
            cursor.reserve(box_h)
        x = cursor.margin + col * (box_w + gutter)
        cursor.rect(x, box_w, box_h, palette[index % len(palette)], radius=radius)
        cursor.text(x + 10, label, font, label_size, WHITE, offset=6 + label_size)
        cursor.text(x + 10, value, bold, value_size, WHITE, offset=box_h - 10)
        if col == 1 or index == len(metrics) - 1:
            cursor.advance(box_h + gutter)
    cursor.advance(_f(style, "section_gap", 10) - gutter)


def _draw_insight(cursor: PageCursor, style: dict, report: ReportData) -> None:
    row = _f(style, "row_h", 12)
    _draw_section_title(cursor, style, "PERFORMANCE INSIGHT", keep_with_next=row)
    cursor.reserve(row)
    cursor.text(
        cursor.margin + 2,
        performance_insight(report.completion_rate, report.pending),
        str(_s(style, "font_italic", "Helvetica-Oblique")),
        _f(style, "body_size", 9),
        str(_s(style, "insight_color", "#323232")),
    )
    cursor.advance(row)
    cursor.advance(_f(style, "section_gap", 10))


def _draw_task(cursor: PageCursor, style: dict, task: Task) -> None:
    font = str(_s(style, "font_name", "Helvetica"))
    bold = str(_s(style, "font_bold", "Helvetica-Bold"))
    size = _f(style, "task_size", 9)
    row = _f(style, "row_h", 12)

    task_x = cursor.margin + _f(style, "tag_w", 44)
    max_width = cursor.width - task_x - cursor.margin
    lines = wrap_words(task.title, font, size, max_width)

    # tag and every wrapped line move to the next page together; only a
    # task taller than a whole page falls back to breaking between lines
    cursor.reserve(min(row * len(lines), cursor.usable_height))

    if task.completed:
        tag, tag_color = "[DONE]", str(_s(style, "done_color", "#52BE80"))
    else:
        tag, tag_color = "[TODO]", str(_s(style, "todo_color", "#FF9800"))
    cursor.text(cursor.margin + 4, tag, bold, size, tag_color)

    text_color = str(_s(style, "text_color", "#000000"))
    for index, line in enumerate(lines):
        if index:
            cursor.reserve(row)
        cursor.text(task_x, line, font, size, text_color)
        cursor.advance(row)


def _draw_day(cursor: PageCursor, style: dict, report: ReportData, day: DayStats) -> None:
    date_h = _f(style, "date_h", 15)
    divider_gap = _f(style, "divider_gap", 5)
    row = _f(style, "row_h", 12)

    # date header, divider and first task stay on one page
    cursor.reserve(date_h + divider_gap + row)
    cursor.text(
        cursor.margin + 2,
        f"{format_short_date(day.date)} ({day.completed}/{day.total} - {day.rate}%)",
        str(_s(style, "font_bold", "Helvetica-Bold")),
        _f(style, "date_size", 10),
        str(_s(style, "accent_color", "#196EC8")),
    )
    cursor.advance(date_h - 3)
    cursor.line(cursor.margin, cursor.width - cursor.margin, str(_s(style, "grid_color", "#D1D5DB")), line_width=0.8)
    cursor.advance(divider_gap + 3)

    for task in report.tasks[day.date]:
        _draw_task(cursor, style, task)
    cursor.advance(_f(style, "day_gap", 6))


def _draw_breakdown(cursor: PageCursor, style: dict, report: ReportData) -> None:
    row = _f(style, "row_h", 12)
    _draw_section_title(cursor, style, "DAILY BREAKDOWN", keep_with_next=row)
    if report.is_empty:
        cursor.reserve(row)
        cursor.text(
            cursor.margin + 2,
            EMPTY_MESSAGE,
            str(_s(style, "font_italic", "Helvetica-Oblique")),
            _f(style, "body_size", 9),
            str(_s(style, "muted_color", "#646464")),
        )
        cursor.advance(row)
    for day in iter_days(report):
        _draw_day(cursor, style, report, day)
    cursor.advance(_f(style, "section_gap", 10))


def _draw_conclusion(cursor: PageCursor, style: dict, report: ReportData) -> None:
    font = str(_s(style, "font_name", "Helvetica"))
    italic = str(_s(style, "font_italic", "Helvetica-Oblique"))
    size = _f(style, "body_size", 9)
    row = _f(style, "row_h", 12)
    text_color = str(_s(style, "text_color", "#000000"))
    muted = str(_s(style, "muted_color", "#646464"))

    _draw_section_title(cursor, style, "CONCLUSION", keep_with_next=row)
    stats = [
        f"Overall Completion: {report.completion_rate}%",
        f"Average Daily Completion: {average_daily_completion(report)}%",
        f"Days Tracked: {len(report.dates)}",
    ]
    for line in stats:
        cursor.reserve(row)
        cursor.text(cursor.margin + 2, line, font, size, text_color)
        cursor.advance(row)

    cursor.advance(row / 2)
    for sentence in CONCLUSION_LINES:
        for line in wrap_words(sentence, italic, size, cursor.content_width - 2):
            cursor.reserve(row)
            cursor.text(cursor.margin + 2, line, italic, size, muted)
            cursor.advance(row)


def _draw_footers(pages: Sequence[Page], style: dict) -> None:
    font = str(_s(style, "font_name", "Helvetica"))
    size = _f(style, "footer_size", 8)
    muted = str(_s(style, "muted_color", "#646464"))
    margin = _f(style, "margin", 36)
    total = len(pages)
    for page in pages:
        page.ops.append(
            DrawOp(
                "text",
                page.width - margin,
                page.height - margin / 2,
                text=f"Page {page.number} of {total}",
                font=font,
                size=size,
                color=muted,
                align="right",
            )
        )


def render_pages(report: ReportData, now: datetime, style: Optional[dict] = None) -> List[Page]:
    """Lay the report out onto fixed-size pages. Pure function of its inputs."""
    style = dict(style) if style is not None else load_style_preset()
    width, height = _page_size(style)
    cursor = PageCursor(width, height, _f(style, "margin", 36))

    _draw_title_banner(cursor, style)
    _draw_meta(cursor, style, report, now)
    _draw_metric_boxes(cursor, style, report)
    _draw_insight(cursor, style, report)
    _draw_breakdown(cursor, style, report)
    _draw_conclusion(cursor, style, report)
    _draw_footers(cursor.pages, style)

    logger.info("Laid out %s tasks over %d page(s)", report.total_tasks, len(cursor.pages))
    return cursor.pages


def _draw_op(canv: canvas.Canvas, op: DrawOp, page_h: float) -> None:
    if op.kind == "text":
        canv.setFillColor(_hex(op.color))
        canv.setFont(op.font, op.size)
        y = page_h - op.y
        if op.align == "center":
            canv.drawCentredString(op.x, y, op.text)
        elif op.align == "right":
            canv.drawRightString(op.x, y, op.text)
        else:
            canv.drawString(op.x, y, op.text)
    elif op.kind == "rect":
        canv.setFillColor(_hex(op.color))
        y = page_h - op.y - op.height
        if op.radius:
            canv.roundRect(op.x, y, op.width, op.height, radius=op.radius, stroke=0, fill=1)
        else:
            canv.rect(op.x, y, op.width, op.height, stroke=0, fill=1)
    elif op.kind == "line":
        canv.setStrokeColor(_hex(op.color))
        canv.setLineWidth(op.line_width)
        canv.line(op.x, page_h - op.y, op.x2, page_h - op.y2)
    else:
        raise ValueError(f"Unknown draw op: {op.kind}")


def write_pdf(pages: Sequence[Page], title: str = REPORT_TITLE) -> bytes:
    """Replay laid-out pages onto a reportlab canvas and return the PDF bytes."""
    if not pages:
        raise ReportGenerationError(ArtifactKind.CANVAS, "PDF_DRAW_FAILED", "no pages to draw")

    buffer = io.BytesIO()
    try:
        first = pages[0]
        canv = canvas.Canvas(buffer, pagesize=(first.width, first.height), invariant=1)
        canv.setTitle(title)
        for page in pages:
            canv.setPageSize((page.width, page.height))
            for op in page.ops:
                _draw_op(canv, op, page.height)
            canv.showPage()
        canv.save()
        return buffer.getvalue()
    except Exception as exc:
        raise ReportGenerationError(ArtifactKind.CANVAS, "PDF_DRAW_FAILED", str(exc)) from exc
    finally:
        buffer.close()


def render_pdf(report: ReportData, now: datetime) -> bytes:
    return write_pdf(render_pages(report, now))
