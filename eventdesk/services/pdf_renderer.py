"""Paginated PDF layout of summary blocks and fixed-width tables."""

import io
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Sequence

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from eventdesk.errors import RenderError

logger = logging.getLogger(__name__)

PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN = 40
CONTENT_WIDTH = PAGE_WIDTH - 2 * MARGIN
FOOTER_HEIGHT = 20
BOTTOM = MARGIN + FOOTER_HEIGHT

ROW_HEIGHT = 16
SECTION_GAP = 14
CELL_PADDING = 4

BASE_FONT = "Helvetica"
BOLD_FONT = "Helvetica-Bold"
ITALIC_FONT = "Helvetica-Oblique"
BODY_SIZE = 9
MUTED = colors.HexColor("#6B7280")
RULE = colors.HexColor("#D1D5DB")
HEADER_FILL = colors.HexColor("#F3F4F6")


@dataclass(frozen=True)
class Column:
    """Fixed-width table column."""

    title: str
    width: float
    align: str = "left"


@dataclass
class TableSection:
    """Titled table of pre-formatted cell strings."""

    title: str
    columns: list[Column]
    rows: list[list[str]] = field(default_factory=list)

    def __post_init__(self) -> None:
        width = sum(column.width for column in self.columns)
        if width > CONTENT_WIDTH + 0.5:
            raise ValueError(
                f"Section {self.title!r} is {width:.0f}pt wide, "
                f"page content is {CONTENT_WIDTH:.0f}pt"
            )


@dataclass(frozen=True)
class RenderResult:
    content: bytes
    pages: int
    cancelled: bool = False


def fit_text(text: str, width: float, font: str = BASE_FONT, size: float = BODY_SIZE) -> str:
    """Truncate ``text`` with an ellipsis so it fits in ``width`` points."""
    if stringWidth(text, font, size) <= width:
        return text
    ellipsis = "..."
    while text and stringWidth(text + ellipsis, font, size) > width:
        text = text[:-1]
    return text + ellipsis


class NumberedCanvas(canvas.Canvas):
    """Canvas that defers page output so every footer can show the page total."""

    def __init__(self, *args, footer_text: str = "", **kwargs):
        super().__init__(*args, **kwargs)
        self._saved_page_states: list[dict] = []
        self.footer_text = footer_text
        self.page_count = 0

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        total = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self._draw_footer(total)
            super().showPage()
        self.page_count = total
        super().save()

    def _draw_footer(self, total: int) -> None:
        self.saveState()
        self.setFont(BASE_FONT, 8)
        self.setFillColor(MUTED)
        self.drawString(MARGIN, MARGIN - 10, self.footer_text)
        self.drawRightString(
            PAGE_WIDTH - MARGIN,
            MARGIN - 10,
            f"Page {self.getPageNumber()} of {total}",
        )
        self.restoreState()


class ReportRenderer:
    """
    Lays out a report on A4 pages.

    The document is built in memory. A set ``cancel_event`` stops further
    rows from being drawn; the partial document is still finalized in the
    buffer and the result is flagged as cancelled so nothing gets sent.
    """

    def __init__(
        self,
        title: str,
        author: str,
        generated_at: datetime,
        subtitle: str | None = None,
    ):
        self.title = title
        self.author = author
        self.generated_at = generated_at
        self.subtitle = subtitle
        self._canvas: NumberedCanvas | None = None
        self._y = 0.0

    def render(
        self,
        summary: Sequence[tuple[str, str]],
        sections: Sequence[TableSection],
        notes: Sequence[str] = (),
        cancel_event: threading.Event | None = None,
    ) -> RenderResult:
        """
        Render the document.

        Raises:
            RenderError: If reportlab fails to produce the document.
        """
        buffer = io.BytesIO()
        cancelled = False

        try:
            self._canvas = NumberedCanvas(
                buffer,
                pagesize=A4,
                footer_text=f"{self.title} | Generated {self.generated_at:%d %b %Y %H:%M}",
            )
            self._canvas.setTitle(self.title)
            self._canvas.setAuthor(self.author)
            self._canvas.setCreator(self.author)

            self._start_page()
            self._draw_header()
            self._draw_summary(summary, notes)

            for section in sections:
                if not self._draw_section(section, cancel_event):
                    cancelled = True
                    break

            self._canvas.showPage()
            self._canvas.save()
        except Exception as exc:
            logger.error(f"Error generating PDF '{self.title}': {exc}", exc_info=True)
            raise RenderError("Error generating PDF report") from exc

        content = buffer.getvalue()
        if cancelled:
            logger.info(f"PDF generation for '{self.title}' stopped after client disconnect")
        else:
            logger.info(
                f"PDF '{self.title}' generated: {self._canvas.page_count} pages, "
                f"{len(content)} bytes"
            )
        return RenderResult(content=content, pages=self._canvas.page_count, cancelled=cancelled)

    # Layout primitives

    def _start_page(self) -> None:
        self._y = PAGE_HEIGHT - MARGIN

    def _new_page(self) -> None:
        self._canvas.showPage()
        self._start_page()

    def _ensure_space(self, height: float) -> bool:
        """Break the page if ``height`` does not fit; True when a break happened."""
        if self._y - height < BOTTOM:
            self._new_page()
            return True
        return False

    def _rule(self, color=RULE, width: float = 0.5) -> None:
        self._canvas.saveState()
        self._canvas.setStrokeColor(color)
        self._canvas.setLineWidth(width)
        self._canvas.line(MARGIN, self._y, PAGE_WIDTH - MARGIN, self._y)
        self._canvas.restoreState()

    def _draw_header(self) -> None:
        c = self._canvas
        self._y -= 18
        c.setFont(BOLD_FONT, 18)
        c.drawString(MARGIN, self._y, fit_text(self.title, CONTENT_WIDTH, BOLD_FONT, 18))

        if self.subtitle:
            self._y -= 16
            c.setFont(BASE_FONT, 11)
            c.drawString(MARGIN, self._y, self.subtitle)

        self._y -= 14
        c.setFont(BASE_FONT, 8)
        c.setFillColor(MUTED)
        c.drawString(MARGIN, self._y, f"Generated on {self.generated_at:%d %B %Y %H:%M}")
        c.setFillColor(colors.black)

        self._y -= 8
        self._rule(colors.black, 1)
        self._y -= SECTION_GAP

    def _draw_summary(self, summary: Sequence[tuple[str, str]], notes: Sequence[str]) -> None:
        if not summary and not notes:
            return

        c = self._canvas
        self._ensure_space(ROW_HEIGHT * 2)
        c.setFont(BOLD_FONT, 12)
        c.drawString(MARGIN, self._y, "Summary")
        self._y -= ROW_HEIGHT

        for label, value in summary:
            self._ensure_space(ROW_HEIGHT)
            c.setFont(BASE_FONT, 10)
            c.drawString(MARGIN, self._y, f"{label}:")
            c.setFont(BOLD_FONT, 10)
            c.drawString(MARGIN + 180, self._y, value)
            self._y -= ROW_HEIGHT

        for note in notes:
            self._ensure_space(ROW_HEIGHT)
            c.setFont(ITALIC_FONT, 9)
            c.setFillColor(MUTED)
            c.drawString(MARGIN, self._y, fit_text(note, CONTENT_WIDTH, ITALIC_FONT, 9))
            c.setFillColor(colors.black)
            self._y -= ROW_HEIGHT

        self._y -= SECTION_GAP / 2

    def _draw_section_title(self, title: str) -> None:
        self._canvas.setFont(BOLD_FONT, 12)
        self._canvas.drawString(MARGIN, self._y, title)
        self._y -= ROW_HEIGHT

    def _draw_cells(self, columns: Sequence[Column], cells: Sequence[str], font: str) -> None:
        c = self._canvas
        c.setFont(font, BODY_SIZE)
        x = MARGIN
        baseline = self._y - ROW_HEIGHT + 5
        for column, cell in zip(columns, cells):
            text = fit_text(str(cell), column.width - 2 * CELL_PADDING, font)
            if column.align == "right":
                c.drawRightString(x + column.width - CELL_PADDING, baseline, text)
            else:
                c.drawString(x + CELL_PADDING, baseline, text)
            x += column.width
        self._y -= ROW_HEIGHT

    def _draw_table_header(self, section: TableSection) -> None:
        c = self._canvas
        width = sum(column.width for column in section.columns)
        c.saveState()
        c.setFillColor(HEADER_FILL)
        c.rect(MARGIN, self._y - ROW_HEIGHT, width, ROW_HEIGHT, stroke=0, fill=1)
        c.restoreState()
        self._draw_cells(section.columns, [col.title for col in section.columns], BOLD_FONT)
        self._rule(colors.black, 0.75)

    def _draw_section(
        self,
        section: TableSection,
        cancel_event: threading.Event | None,
    ) -> bool:
        """Draw one table; False if cancelled part-way."""
        # Title, header and at least one row stay together
        self._ensure_space(ROW_HEIGHT * 3)
        self._draw_section_title(section.title)
        self._draw_table_header(section)

        if not section.rows:
            self._canvas.setFont(ITALIC_FONT, BODY_SIZE)
            self._canvas.drawString(
                MARGIN + CELL_PADDING, self._y - ROW_HEIGHT + 5, "No data for this period."
            )
            self._y -= ROW_HEIGHT

        for row in section.rows:
            if cancel_event is not None and cancel_event.is_set():
                return False

            if self._ensure_space(ROW_HEIGHT):
                self._draw_section_title(f"{section.title} (continued)")
                self._draw_table_header(section)

            self._draw_cells(section.columns, row, BASE_FONT)
            self._rule()

        self._y -= SECTION_GAP
        return True
