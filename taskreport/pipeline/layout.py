from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from reportlab.pdfbase.pdfmetrics import stringWidth


@dataclass
class DrawOp:
    """
    One drawing primitive on a page.

    Coordinates are measured from the top-left corner of the page. For text,
    `y` is the baseline; for rectangles it is the top edge.
    """

    kind: str  # text | rect | line
    x: float
    y: float
    text: str = ""
    font: str = "Helvetica"
    size: float = 0.0
    color: str = "#000000"
    align: str = "left"  # left | center | right
    width: float = 0.0
    height: float = 0.0
    radius: float = 0.0
    x2: float = 0.0
    y2: float = 0.0
    line_width: float = 1.0


@dataclass
class Page:
    number: int
    width: float
    height: float
    ops: List[DrawOp] = field(default_factory=list)

    def texts(self) -> List[str]:
        return [op.text for op in self.ops if op.kind == "text"]

    def find_text(self, text: str) -> Optional[DrawOp]:
        for op in self.ops:
            if op.kind == "text" and op.text == text:
                return op
        return None


def text_width(text: str, font_name: str, font_size: float) -> float:
    return stringWidth(text, font_name, font_size)


def _split_word(word: str, font_name: str, font_size: float, max_width: float) -> List[str]:
    pieces: List[str] = []
    cur = ""
    for ch in word:
        if cur and text_width(cur + ch, font_name, font_size) > max_width:
            pieces.append(cur)
            cur = ch
        else:
            cur += ch
    if cur:
        pieces.append(cur)
    return pieces


def wrap_words(text: str, font_name: str, font_size: float, max_width: float) -> List[str]:
    """
    Word wrap by measured string width.

    A single word wider than max_width is split across lines by character.
    """
    words = (text or "").split()
    if not words:
        return [""]

    lines: List[str] = []
    cur: List[str] = []

    for w in words:
        test = " ".join(cur + [w])
        if text_width(test, font_name, font_size) <= max_width:
            cur.append(w)
            continue

        if cur:
            lines.append(" ".join(cur))
            cur = []

        if text_width(w, font_name, font_size) <= max_width:
            cur = [w]
        else:
            pieces = _split_word(w, font_name, font_size, max_width)
            lines.extend(pieces[:-1])
            cur = [pieces[-1]]

    if cur:
        lines.append(" ".join(cur))

    return lines


class PageCursor:
    """
    Vertical layout state over a sequence of fixed-size pages.

    Drawing primitives place ops on the current page relative to `y`;
    `reserve` is the single place that decides when a new page starts.
    """

    def __init__(self, width: float, height: float, margin: float) -> None:
        self.width = float(width)
        self.height = float(height)
        self.margin = float(margin)
        self.pages: List[Page] = []
        self.y = self.margin
        self.page = self.new_page()

    @property
    def top(self) -> float:
        return self.margin

    @property
    def bottom(self) -> float:
        return self.height - self.margin

    @property
    def content_width(self) -> float:
        return self.width - 2 * self.margin

    @property
    def usable_height(self) -> float:
        return self.bottom - self.top

    def new_page(self) -> Page:
        page = Page(number=len(self.pages) + 1, width=self.width, height=self.height)
        self.pages.append(page)
        self.page = page
        self.y = self.top
        return page

    def fits(self, needed: float) -> bool:
        return self.y + needed <= self.bottom

    def reserve(self, needed: float) -> bool:
        """Start a new page unless `needed` points fit below the cursor. Returns True on a break."""
        if self.fits(needed):
            return False
        self.new_page()
        return True

    def advance(self, height: float) -> None:
        self.y += height

    def text(
        self,
        x: float,
        text: str,
        font: str,
        size: float,
        color: str,
        offset: Optional[float] = None,
        align: str = "left",
    ) -> DrawOp:
        baseline = self.y + (size if offset is None else offset)
        op = DrawOp("text", x, baseline, text=text, font=font, size=size, color=color, align=align)
        self.page.ops.append(op)
        return op

    def rect(self, x: float, width: float, height: float, color: str, dy: float = 0.0, radius: float = 0.0) -> DrawOp:
        op = DrawOp("rect", x, self.y + dy, color=color, width=width, height=height, radius=radius)
        self.page.ops.append(op)
        return op

    def line(self, x1: float, x2: float, color: str, dy: float = 0.0, line_width: float = 1.0) -> DrawOp:
        y = self.y + dy
        op = DrawOp("line", x1, y, color=color, x2=x2, y2=y, line_width=line_width)
        self.page.ops.append(op)
        return op
