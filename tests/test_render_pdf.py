from __future__ import annotations

import re

import pymupdf
import pytest

from taskreport.config import EMPTY_MESSAGE, load_style_preset
from taskreport.models import ArtifactKind, ReportGenerationError, Task
from taskreport.pipeline.aggregate import aggregate
from taskreport.pipeline.layout import DrawOp, Page, wrap_words
from taskreport.pipeline.render_pdf import render_pages, render_pdf, write_pdf


STYLE = load_style_preset()
MARGIN = float(STYLE["margin"])
ROW_H = float(STYLE["row_h"])
TAG_W = float(STYLE["tag_w"])
DAY_HEADER = re.compile(r"^[A-Z][a-z]{2} \d{1,2}, \d{4} \(\d+/\d+ - \d+%\)$")


def _title_with_lines(count: int, page_width: float) -> str:
    max_width = page_width - 2 * MARGIN - TAG_W
    words: list = []
    i = 0
    while len(wrap_words(" ".join(words), STYLE["font_name"], STYLE["task_size"], max_width)) < count:
        words.append(f"milestone{i}")
        i += 1
    return " ".join(words)


def _body_ops(page: Page):
    return [op for op in page.ops if not (op.kind == "text" and op.text.startswith("Page "))]


def test_three_line_title_advances_three_rows(now) -> None:
    pages = render_pages(aggregate({}, "2024-01-10", "2024-01-10"), now)
    width = pages[0].width
    title = _title_with_lines(3, width)
    assert len(wrap_words(title, STYLE["font_name"], STYLE["task_size"], width - 2 * MARGIN - TAG_W)) == 3

    tasks = {"2024-01-10": [Task("a", title, True, "2024-01-10"), Task("b", "Next task", False, "2024-01-10")]}
    page = render_pages(aggregate(tasks, "2024-01-10", "2024-01-10"), now)[0]

    done = page.find_text("[DONE]")
    todo = page.find_text("[TODO]")
    assert todo.y - done.y == pytest.approx(3 * ROW_H)

    title_lines = [op for op in page.ops if op.kind == "text" and op.x == pytest.approx(MARGIN + TAG_W)]
    assert [op.y for op in title_lines[:3]] == pytest.approx([done.y, done.y + ROW_H, done.y + 2 * ROW_H])


def test_task_lines_never_split_across_pages(now) -> None:
    width = render_pages(aggregate({}, "2024-01-01", "2024-01-01"), now)[0].width
    long_title = _title_with_lines(4, width)
    tasks = {}
    for day in range(1, 8):
        date = f"2024-01-{day:02d}"
        tasks[date] = [
            Task(f"{date}-{i}", long_title if i % 3 == 0 else f"Task {i}", i % 2 == 0, date)
            for i in range(25)
        ]
    report = aggregate(tasks, "2024-01-01", "2024-01-07")
    pages = render_pages(report, now)
    assert len(pages) > 1

    seen_tags = 0
    for page in pages:
        for op in page.ops:
            if op.kind == "text" and op.text in ("[DONE]", "[TODO]"):
                seen_tags += 1
                first_line = [
                    o for o in page.ops
                    if o.kind == "text" and o.x == pytest.approx(MARGIN + TAG_W) and o.y == pytest.approx(op.y)
                ]
                assert len(first_line) == 1
    assert seen_tags == report.total_tasks

    # a wrapped task keeps all of its lines with its tag
    for page in pages:
        texts = page.texts()
        for index, text in enumerate(texts):
            if text.startswith("milestone0 "):
                block = texts[index:index + 4]
                assert all(t.startswith("milestone") for t in block)


def test_nothing_drawn_past_the_margins(now) -> None:
    tasks = {f"2024-03-{d:02d}": [Task(f"{d}-{i}", f"Item {i}", bool(i % 2), f"2024-03-{d:02d}") for i in range(30)]
             for d in range(1, 6)}
    for page in render_pages(aggregate(tasks, "2024-03-01", "2024-03-05"), now):
        bottom = page.height - MARGIN
        for op in _body_ops(page):
            assert op.y >= MARGIN
            if op.kind == "rect":
                assert op.y + op.height <= bottom + 1e-6
            else:
                assert op.y <= bottom + 1e-6


def test_dates_render_in_order(now) -> None:
    tasks = {
        "2024-01-12": [Task("c", "c", False, "2024-01-12")],
        "2024-01-10": [Task("a", "a", True, "2024-01-10")],
        "2024-01-11": [Task("b", "b", True, "2024-01-11"), Task("b2", "b2", False, "2024-01-11")],
    }
    pages = render_pages(aggregate(tasks, "2024-01-10", "2024-01-12"), now)
    headers = [text for page in pages for text in page.texts() if DAY_HEADER.match(text)]
    assert headers == [
        "Jan 10, 2024 (1/1 - 100%)",
        "Jan 11, 2024 (1/2 - 50%)",
        "Jan 12, 2024 (0/1 - 0%)",
    ]


def test_metric_boxes_form_two_by_two_grid(sample_report, now) -> None:
    page = render_pages(sample_report, now)[0]
    boxes = [op for op in page.ops if op.kind == "rect" and op.radius]
    assert len(boxes) == 4

    content_width = page.width - 2 * MARGIN
    expected_width = (content_width - float(STYLE["gutter"])) / 2
    assert all(box.width == pytest.approx(expected_width) for box in boxes)
    assert boxes[0].y == boxes[1].y < boxes[2].y == boxes[3].y
    assert boxes[0].x == boxes[2].x == pytest.approx(MARGIN)
    assert boxes[1].x == boxes[3].x == pytest.approx(MARGIN + expected_width + float(STYLE["gutter"]))

    texts = page.texts()
    for label, value in [("Total Tasks", "3"), ("Completed", "2"), ("Pending", "1"), ("Completion Rate", "67%")]:
        assert texts[texts.index(label) + 1] == value


def test_sections_in_order(sample_report, now) -> None:
    texts = [t for page in render_pages(sample_report, now) for t in page.texts()]
    order = ["WEEKLY TASK REPORT", "KEY METRICS", "PERFORMANCE INSIGHT", "DAILY BREAKDOWN", "CONCLUSION"]
    assert [texts.index(name) for name in order] == sorted(texts.index(name) for name in order)
    assert "Fair progress. 1 task need attention." in texts


def test_conclusion_keeps_both_rates(now) -> None:
    tasks = {
        "2024-01-10": [Task("a", "a", True, "2024-01-10")],
        "2024-01-11": [Task(f"b{i}", "b", False, "2024-01-11") for i in range(3)],
    }
    texts = [t for page in render_pages(aggregate(tasks, "2024-01-10", "2024-01-11"), now) for t in page.texts()]
    assert "Overall Completion: 25%" in texts
    assert "Average Daily Completion: 50%" in texts
    assert "Days Tracked: 2" in texts


def test_empty_report_renders_one_page(now) -> None:
    pages = render_pages(aggregate({}, "2024-01-09", "2024-01-15"), now)
    assert len(pages) == 1
    texts = pages[0].texts()
    assert EMPTY_MESSAGE in texts
    assert "Review priorities. 0 pending tasks." in texts
    assert "Days Tracked: 0" in texts
    assert "Page 1 of 1" in texts


def test_page_footers_count_pages(now) -> None:
    tasks = {"2024-01-10": [Task(str(i), f"Task {i}", False, "2024-01-10") for i in range(200)]}
    pages = render_pages(aggregate(tasks, "2024-01-10", "2024-01-10"), now)
    total = len(pages)
    assert total > 2
    for page in pages:
        assert f"Page {page.number} of {total}" in page.texts()


def test_pdf_bytes_match_layout(sample_report, now) -> None:
    pages = render_pages(sample_report, now)
    data = render_pdf(sample_report, now)
    assert data.startswith(b"%PDF")
    assert render_pdf(sample_report, now) == data

    with pymupdf.open(stream=data, filetype="pdf") as doc:
        assert doc.page_count == len(pages)
        text = doc.load_page(0).get_text()
    assert "KEY METRICS" in text
    assert text.index("Jan 14, 2024") < text.index("Jan 15, 2024")


def test_draw_failure_is_tagged() -> None:
    with pytest.raises(ReportGenerationError) as excinfo:
        write_pdf([Page(number=1, width=100, height=100, ops=[DrawOp("circle", 0, 0)])])
    assert excinfo.value.kind is ArtifactKind.CANVAS
    assert excinfo.value.code == "PDF_DRAW_FAILED"

    with pytest.raises(ReportGenerationError):
        write_pdf([])
