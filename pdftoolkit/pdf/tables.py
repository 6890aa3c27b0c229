"""
PDF Tables Module.

Cell builders, two-level table headers, column width scaling and multi-page
table output for Project Reports.

Column widths are given in pixels, matching the on-screen tables they mirror,
and are rescaled to points so the table fills the page layout width.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence
from xml.sax.saxutils import escape

import pandas as pd
from reportlab.lib import colors
from reportlab.lib.colors import Color
from reportlab.lib.styles import ParagraphStyle
from reportlab.platypus import Paragraph, Table, TableStyle

from pdftoolkit.config import Config
from pdftoolkit.exceptions import ColumnCoverageError, PdfError, TableRenderError
from pdftoolkit.models.results import RenderResult
from .document import Page, PdfDocument, Point
from .fonts import Font, PdfFonts
from .styles import (
    Align,
    ColorPair,
    TABLE_HEADER_COLORS,
    TABLE_LABEL_COLORS,
    get_page_geometry,
    page_size_for,
)


logger = logging.getLogger("PdfToolkit.Tables")

DATA_HAS_0_HEADER_ROWS = 0
DATA_HAS_1_HEADER_ROWS = 1
DATA_HAS_2_HEADER_ROWS = 2

BORDER_WIDTH = 0.5
MIN_COLUMN_WIDTH = 12.0


# ============================================================================
# CELLS
# ============================================================================

@dataclass
class Cell:
    """One table cell; `covered` marks a placeholder under a span to its left."""
    text: str
    font: Font
    background: Color = colors.white
    foreground: Color = colors.black
    col_span: int = 1
    align: Align = Align.CENTER
    padding: float = field(default_factory=lambda: Config.PDF_CELL_PADDING)
    bottom_padding: Optional[float] = None
    borders: bool = True
    width: Optional[float] = None
    covered: bool = False


def add_table_cell(
    row_data: List[Cell],
    font: Font,
    background: Color,
    foreground: Color,
    cell_value: str,
    *,
    col_span: int = 1,
    align: Align = Align.CENTER,
    paint_borders: bool = True,
) -> Cell:
    """Append a stylized table cell to a row and return it.

    Borderless cells also drop their bottom padding so that stacked
    information rows read as continuous text.
    """
    cell = Cell(
        text=cell_value,
        font=font,
        background=background,
        foreground=foreground,
        col_span=col_span,
        align=align,
    )

    if not paint_borders:
        cell.borders = False
        cell.bottom_padding = 0.0

    row_data.append(cell)
    return cell


def add_data_cell(
    row_data: List[Cell],
    fonts: PdfFonts,
    cell_value: str,
    *,
    align: Align = Align.CENTER,
    paint_borders: bool = True,
    background: Color = colors.white,
    foreground: Color = colors.black,
) -> Cell:
    """Append a body cell using the report's table cell font."""
    return add_table_cell(
        row_data,
        fonts.table_cell_font,
        background,
        foreground,
        cell_value,
        align=align,
        paint_borders=paint_borders,
    )


def add_covered_cells(
    row_data: List[Cell],
    count: int,
    font: Font,
    cell_colors: ColorPair,
) -> None:
    """Append placeholders for the columns a span covers; they add no width."""
    for _ in range(count):
        row_data.append(Cell(
            text="",
            font=font,
            background=cell_colors.background,
            foreground=cell_colors.foreground,
            width=0.0,
            covered=True,
        ))


# ============================================================================
# COLUMN COVERAGE
# ============================================================================

def row_coverage(row_data: Sequence[Cell]) -> int:
    """Number of columns the row's own cells span."""
    return sum(cell.col_span for cell in row_data if not cell.covered)


def validate_column_coverage(row_data: Sequence[Cell], number_of_columns: int) -> None:
    """Assert the row has one cell for every declared column.

    Every span must be followed by placeholders for the columns it covers, and
    no span may run past the last column.

    Raises:
        ColumnCoverageError: describing the first violation found.
    """
    if len(row_data) != number_of_columns:
        raise ColumnCoverageError(
            f"Row has {len(row_data)} cells for {number_of_columns} columns"
        )

    index = 0
    while index < number_of_columns:
        cell = row_data[index]
        if cell.covered:
            raise ColumnCoverageError(f"Column {index} is a placeholder outside of any span")
        if cell.col_span < 1:
            raise ColumnCoverageError(f"Column {index} has span {cell.col_span}")

        end = index + cell.col_span
        if end > number_of_columns:
            raise ColumnCoverageError(
                f"Span at column {index} covers {cell.col_span} columns, "
                f"only {number_of_columns - index} remain"
            )
        for covered_index in range(index + 1, end):
            if not row_data[covered_index].covered:
                raise ColumnCoverageError(
                    f"Column {covered_index} overlaps the span starting at column {index}"
                )
        index = end


def append_missing_cells(table_data: List[List[Cell]], font: Font) -> None:
    """Pad short rows to the width of the first row.

    The last real cell of a short row is widened to span the padding.
    """
    if not table_data:
        return

    number_of_columns = len(table_data[0])
    for row in table_data:
        missing = number_of_columns - len(row)
        if missing <= 0:
            continue

        if not row:
            row.append(Cell(text="", font=font, col_span=number_of_columns))
            add_covered_cells(row, number_of_columns - 1, font, ColorPair(colors.white, colors.black))
            continue

        last = next(cell for cell in reversed(row) if not cell.covered)
        last.col_span += missing
        add_covered_cells(row, missing, font, ColorPair(last.background, last.foreground))


# ============================================================================
# COLUMN WIDTHS
# ============================================================================

def get_column_width_scale_factor(
    column_widths_in_pixels: Optional[Sequence[float]],
    landscape_mode: bool = False,
) -> float:
    """Scale factor from pixel column widths to points on the page layout.

    The layout width already accounts for margins and orientation. Absent or
    non-positive totals give a neutral factor of 1.
    """
    table_width_pixels = float(sum(column_widths_in_pixels)) if column_widths_in_pixels else 0.0

    page_width = get_page_geometry(landscape_mode).layout_width
    if table_width_pixels > 0.0:
        return page_width / table_width_pixels
    return 1.0


def set_column_widths(
    row_data: List[Cell],
    column_widths_in_pixels: Optional[Sequence[float]],
    landscape_mode: bool = False,
    scale_factor: Optional[float] = None,
) -> None:
    """Set each cell width from its pixel width preference, scaled to points."""
    if column_widths_in_pixels is None:
        return

    if len(column_widths_in_pixels) > len(row_data):
        raise ColumnCoverageError(
            f"{len(column_widths_in_pixels)} column widths for a row of {len(row_data)} cells"
        )

    if scale_factor is None:
        scale_factor = get_column_width_scale_factor(column_widths_in_pixels, landscape_mode)

    for cell, column_width in zip(row_data, column_widths_in_pixels):
        cell.width = column_width * scale_factor


# ============================================================================
# TABLE DATA
# ============================================================================

def create_information_table_data(
    borderless_table_fonts: PdfFonts,
    align: Align,
    information: Sequence[str],
) -> List[List[Cell]]:
    """One borderless single-column row per information line."""
    information_table_data = []
    for element in information:
        information_row_data: List[Cell] = []
        add_data_cell(information_row_data, borderless_table_fonts, element,
                      align=align, paint_borders=False)
        information_table_data.append(information_row_data)
    return information_table_data


def rows_from_dataframe(
    frame: pd.DataFrame,
    fonts: PdfFonts,
    align: Align = Align.CENTER,
) -> List[List[Cell]]:
    """Convert a DataFrame's rows to table data rows (no header row).

    Missing values render as empty cells.
    """
    rows = []
    for record in frame.itertuples(index=False, name=None):
        row_data: List[Cell] = []
        for value in record:
            text = "" if pd.isna(value) else str(value)
            add_data_cell(row_data, fonts, text, align=align)
        rows.append(row_data)
    return rows


def _build_span_headers(
    fonts: PdfFonts,
    span_names: Sequence[str],
    span_lengths: Sequence[int],
    label_colors: ColorPair,
    number_of_columns: int,
    column_widths_in_pixels: Optional[Sequence[float]],
    scale_factor: float,
) -> List[Cell]:
    if len(span_names) != len(span_lengths):
        raise ColumnCoverageError(
            f"{len(span_names)} span names for {len(span_lengths)} span lengths"
        )

    span_headers: List[Cell] = []
    column_index = 0
    for span_name, column_span in zip(span_names, span_lengths):
        cell = add_table_cell(
            span_headers,
            fonts.table_label_font,
            label_colors.background,
            label_colors.foreground,
            span_name,
            col_span=column_span,
        )

        if column_widths_in_pixels is not None:
            span_pixels = column_widths_in_pixels[column_index:column_index + column_span]
            cell.width = sum(span_pixels) * scale_factor

        add_covered_cells(span_headers, column_span - 1, fonts.table_header_font, label_colors)
        column_index += column_span

    if column_index > number_of_columns:
        raise ColumnCoverageError(
            f"Spans cover {column_index} columns of a {number_of_columns}-column table"
        )

    # Columns that no span covers still need a cell of their own.
    for _ in range(number_of_columns - column_index):
        add_table_cell(
            span_headers,
            fonts.table_header_font,
            label_colors.background,
            label_colors.foreground,
            "",
        )

    return span_headers


def _build_column_headers(
    fonts: PdfFonts,
    column_names: Sequence[str],
    number_of_columns: int,
    column_widths_in_pixels: Optional[Sequence[float]],
    scale_factor: float,
) -> List[Cell]:
    header_colors = TABLE_HEADER_COLORS
    column_headers: List[Cell] = []

    if len(column_names) == number_of_columns:
        for column_name in column_names:
            add_table_cell(
                column_headers,
                fonts.table_header_font,
                header_colors.background,
                header_colors.foreground,
                column_name,
            )
        set_column_widths(column_headers, column_widths_in_pixels, scale_factor=scale_factor)
        return column_headers

    if not column_names or len(column_names) > number_of_columns:
        raise ColumnCoverageError(
            f"{len(column_names)} column names for {number_of_columns} columns"
        )

    # Only the final column header may span multiple columns.
    number_of_single_column_headers = len(column_names) - 1
    for column_name in column_names[:-1]:
        add_table_cell(
            column_headers,
            fonts.table_header_font,
            header_colors.background,
            header_colors.foreground,
            column_name,
        )

    multi_column_span = number_of_columns - number_of_single_column_headers
    add_table_cell(
        column_headers,
        fonts.table_header_font,
        header_colors.background,
        header_colors.foreground,
        column_names[-1],
        col_span=multi_column_span,
    )
    add_covered_cells(column_headers, multi_column_span - 1, fonts.table_header_font, header_colors)

    return column_headers


def create_table(
    table_data: List[List[Cell]],
    fonts: PdfFonts,
    column_names: Optional[Sequence[str]],
    *,
    span_names: Optional[Sequence[str]] = None,
    span_lengths: Optional[Sequence[int]] = None,
    label_colors: ColorPair = TABLE_LABEL_COLORS,
    number_of_columns: Optional[int] = None,
    column_widths_in_pixels: Optional[Sequence[float]] = None,
    landscape_mode: bool = False,
) -> "PdfTable":
    """Create a table and write its header rows to the front of `table_data`.

    Args:
        table_data: Rows of the table; header rows are inserted first
        fonts: Report fonts
        column_names: Per-column labels (lower header row)
        span_names: Group labels spanning several columns (upper header row)
        span_lengths: Number of columns each group label spans
        label_colors: Colors of the group label row
        number_of_columns: Declared column count, defaults to len(column_names)
        column_widths_in_pixels: Optional pixel width preference per column
        landscape_mode: Page orientation used to scale the widths

    Returns:
        PdfTable whose header_row_count is the number of header rows written

    Raises:
        ColumnCoverageError: if a header row cannot cover the declared columns,
            or the column widths do not match them
    """
    table = PdfTable()

    if span_names is None and column_names is None:
        return table

    if number_of_columns is None:
        number_of_columns = (
            len(column_names) if column_names is not None else sum(span_lengths or ())
        )

    if column_widths_in_pixels is not None and len(column_widths_in_pixels) != number_of_columns:
        raise ColumnCoverageError(
            f"{len(column_widths_in_pixels)} column widths for {number_of_columns} columns"
        )

    column_width_scale_factor = get_column_width_scale_factor(
        column_widths_in_pixels, landscape_mode
    )

    header_rows = []
    if span_names is not None and span_lengths is not None:
        header_rows.append(_build_span_headers(
            fonts,
            span_names,
            span_lengths,
            label_colors,
            number_of_columns,
            column_widths_in_pixels,
            column_width_scale_factor,
        ))

    if column_names is not None:
        header_rows.append(_build_column_headers(
            fonts,
            column_names,
            number_of_columns,
            column_widths_in_pixels,
            column_width_scale_factor,
        ))

    for header_row in header_rows:
        validate_column_coverage(header_row, number_of_columns)

    table_data[0:0] = header_rows
    table.header_row_count = len(header_rows)

    return table


# ============================================================================
# TABLE PRIMITIVE
# ============================================================================

class PdfTable:
    """A table that renders itself across as many pages as it needs.

    Each draw_on() call renders the rows that fit on the given page, below the
    current position on the first page and below the top margin afterwards.
    Header rows repeat on every page.
    """

    def __init__(self):
        self.header_row_count = 0
        self.x = 0.0
        self.y = 0.0
        self.rendered_pages = 0
        self._rows: List[List[Cell]] = []
        self._number_of_header_rows = 0
        self._no_cell_borders = False
        self._wrap_cell_text = False
        self._auto_widths: Optional[List[float]] = None
        self._remaining: Optional[Table] = None
        self._more_data = False

    @property
    def number_of_columns(self) -> int:
        return len(self._rows[0]) if self._rows else 0

    def set_data(self, table_data: List[List[Cell]], number_of_header_rows: int = 0) -> None:
        """Set the rows to render.

        Raises:
            ColumnCoverageError: if any row does not cover the first row's columns
        """
        if number_of_header_rows > len(table_data):
            raise TableRenderError(
                f"{number_of_header_rows} header rows for {len(table_data)} rows"
            )

        number_of_columns = len(table_data[0]) if table_data else 0
        for row_index, row_data in enumerate(table_data):
            try:
                validate_column_coverage(row_data, number_of_columns)
            except ColumnCoverageError as e:
                raise ColumnCoverageError(f"Row {row_index}: {e}") from e

        self._rows = table_data
        self._number_of_header_rows = number_of_header_rows
        self._auto_widths = None
        self.reset_rendered_pages_count()

    def set_no_cell_borders(self) -> None:
        self._no_cell_borders = True

    def wrap_around_cell_text(self) -> None:
        """Word-wrap cell text instead of letting it overflow the column."""
        self._wrap_cell_text = True

    def set_position(self, x: float, y: float) -> None:
        self.x = x
        self.y = y

    def auto_adjust_column_widths(self) -> None:
        """Size each column to its widest single-column cell."""
        natural = [0.0] * self.number_of_columns
        for row_data in self._rows:
            for column_index, cell in enumerate(row_data):
                if cell.covered or cell.col_span != 1:
                    continue
                lines = cell.text.splitlines() or [""]
                text_width = max(cell.font.string_width(line) for line in lines)
                natural[column_index] = max(natural[column_index], text_width + 2 * cell.padding)
        self._auto_widths = [max(width, MIN_COLUMN_WIDTH) for width in natural]

    def has_more_data(self) -> bool:
        return self._more_data

    def reset_rendered_pages_count(self) -> None:
        """Allow the table to be drawn again from its first row."""
        self.rendered_pages = 0
        self._remaining = None
        self._more_data = False

    # -- layout ---------------------------------------------------------

    def _available_width(self, page: Page) -> float:
        return page.width - self.x - page.geometry.right_margin

    def _column_widths(self, available_width: float) -> List[float]:
        if self._auto_widths is not None:
            total = sum(self._auto_widths)
            if total > available_width:
                return [width * available_width / total for width in self._auto_widths]
            return list(self._auto_widths)

        widths: List[Optional[float]] = [None] * self.number_of_columns
        for row_data in self._rows:
            for column_index, cell in enumerate(row_data):
                if widths[column_index] is None and not cell.covered \
                        and cell.col_span == 1 and cell.width:
                    widths[column_index] = cell.width

        unsized = widths.count(None)
        if unsized:
            leftover = available_width - sum(width for width in widths if width is not None)
            share = max(leftover / unsized, MIN_COLUMN_WIDTH)
            widths = [share if width is None else width for width in widths]
        return widths

    def _cell_content(self, cell: Cell):
        if not self._wrap_cell_text:
            return cell.text
        style = ParagraphStyle(
            "TableCell",
            fontName=cell.font.name,
            fontSize=cell.font.size,
            leading=cell.font.leading,
            textColor=cell.foreground,
            alignment=cell.align.paragraph_alignment,
        )
        return Paragraph(escape(cell.text).replace("\n", "<br/>"), style)

    def _build_flowable(self, available_width: float) -> Table:
        data = []
        commands = [("VALIGN", (0, 0), (-1, -1), "MIDDLE")]
        for row_index, row_data in enumerate(self._rows):
            data.append([self._cell_content(cell) for cell in row_data])
            for column_index, cell in enumerate(row_data):
                if cell.covered:
                    continue
                start = (column_index, row_index)
                end = (column_index + cell.col_span - 1, row_index)
                bottom_padding = cell.padding if cell.bottom_padding is None else cell.bottom_padding
                commands.extend([
                    ("BACKGROUND", start, end, cell.background),
                    ("TEXTCOLOR", start, end, cell.foreground),
                    ("FONT", start, end, cell.font.name, cell.font.size, cell.font.leading),
                    ("ALIGN", start, end, cell.align.table_alignment),
                    ("LEFTPADDING", start, end, cell.padding),
                    ("RIGHTPADDING", start, end, cell.padding),
                    ("TOPPADDING", start, end, cell.padding),
                    ("BOTTOMPADDING", start, end, bottom_padding),
                ])
                if cell.col_span > 1:
                    commands.append(("SPAN", start, end))
                if cell.borders and not self._no_cell_borders:
                    commands.append(("BOX", start, end, BORDER_WIDTH, colors.black))

        return Table(
            data,
            colWidths=self._column_widths(available_width),
            repeatRows=self._number_of_header_rows,
            style=TableStyle(commands),
            hAlign="LEFT",
        )

    def get_number_of_pages(self, page: Page) -> int:
        """Pages needed to render the table from its position on `page`.

        Continuation pages are assumed to share the first page's size.
        """
        if not self._rows:
            return 1

        geometry = page.geometry
        available_width = self._available_width(page)
        flowable = self._build_flowable(available_width)

        y = self.y
        number_of_pages = 1
        while True:
            available_height = page.height - geometry.bottom_margin - y
            _, height = flowable.wrap(available_width, available_height)
            if height <= available_height:
                return number_of_pages

            parts = flowable.split(available_width, available_height)
            if len(parts) >= 2:
                flowable = parts[1]
            elif y <= geometry.top_margin:
                raise TableRenderError("A table row is taller than the page layout")

            number_of_pages += 1
            y = geometry.top_margin

    def draw_on(self, page: Page) -> Point:
        """Render the rows that fit on `page` and return the cursor below them."""
        if not self._rows:
            self._more_data = False
            return Point(self.x, self.y)

        geometry = page.geometry
        available_width = self._available_width(page)

        if self.rendered_pages == 0:
            self._remaining = self._build_flowable(available_width)
            y = self.y
        else:
            y = geometry.top_margin

        canvas = page.canvas
        available_height = page.height - geometry.bottom_margin - y
        self.rendered_pages += 1

        _, height = self._remaining.wrapOn(canvas, available_width, available_height)
        if height <= available_height:
            self._remaining.drawOn(canvas, self.x, page.to_canvas_y(y + height))
            self._remaining = None
            self._more_data = False
            return Point(self.x, y + height)

        parts = self._remaining.split(available_width, available_height)
        if len(parts) < 2:
            if y <= geometry.top_margin:
                raise TableRenderError("A table row is taller than the page layout")
            # Nothing fits below the cursor; continue on the next page.
            self._more_data = True
            return Point(self.x, y)

        head, self._remaining = parts[0], parts[1]
        _, height = head.wrapOn(canvas, available_width, available_height)
        head.drawOn(canvas, self.x, page.to_canvas_y(y + height))
        self._more_data = True
        return Point(self.x, y + height)


# ============================================================================
# MULTI-PAGE OUTPUT
# ============================================================================

def write_table(
    document: PdfDocument,
    first_page: Page,
    fonts: PdfFonts,
    table: PdfTable,
    landscape_mode: bool = False,
) -> RenderResult[Point]:
    """Draw a table across as many pages as required.

    Every page that the table continues past gets a "Page x of N" label just
    below the last row drawn on it. The table's page counter is reset once the
    last row is drawn, so the same table can be rendered again later.

    Returns:
        RenderResult with the cursor below the table on its last page
    """
    page = first_page
    try:
        number_of_pages = table.get_number_of_pages(page)
        page_number = 1

        while True:
            point = table.draw_on(page)

            if not table.has_more_data():
                table.reset_rendered_pages_count()
                logger.debug("Table written on %d page(s)", page_number)
                return RenderResult.success(point)

            page_counter = f"Page {page_number} of {number_of_pages}"
            page.draw_string(
                fonts.footer_font, page_counter, point.x, point.y + fonts.footer_font.leading
            )

            page = Page(document, page_size_for(landscape_mode))
            page_number += 1
    except PdfError as e:
        logger.error("Table output failed: %s", e)
        return RenderResult.failure(e)
    except Exception as e:
        logger.error("Table output failed: %s", e)
        error = TableRenderError(f"Cannot render table: {e}")
        error.__cause__ = e
        return RenderResult.failure(error)


def write_table_data(
    document: PdfDocument,
    page: Page,
    point: Point,
    fonts: PdfFonts,
    table_data: List[List[Cell]],
    table: PdfTable,
    number_of_header_rows: Optional[int] = None,
    auto_adjust_column_widths: bool = True,
    landscape_mode: bool = False,
) -> RenderResult[Point]:
    """Set data on a table, lay it out at `point` and write it to the report.

    Args:
        number_of_header_rows: Defaults to the header rows create_table wrote
    """
    if number_of_header_rows is None:
        number_of_header_rows = table.header_row_count

    try:
        table.set_data(table_data, number_of_header_rows)
    except PdfError as e:
        logger.error("Invalid table data: %s", e)
        return RenderResult.failure(e)

    if auto_adjust_column_widths:
        table.auto_adjust_column_widths()

    # Wrap on word boundaries so the table doesn't clip on the page.
    table.wrap_around_cell_text()

    table.set_position(point.x, point.y)

    return write_table(document, page, fonts, table, landscape_mode)


def write_information_table(
    document: PdfDocument,
    page: Page,
    initial_point: Point,
    borderless_table_fonts: PdfFonts,
    align: Align,
    information: Sequence[str],
) -> RenderResult[Point]:
    """Write a borderless single-column Information Table."""
    information_table_data = create_information_table_data(
        borderless_table_fonts, align, information
    )
    return write_information_table_data(
        document, page, initial_point, borderless_table_fonts, information_table_data
    )


def write_information_table_data(
    document: PdfDocument,
    page: Page,
    initial_point: Point,
    borderless_table_fonts: PdfFonts,
    information_table_data: List[List[Cell]],
) -> RenderResult[Point]:
    information_table = PdfTable()

    # Borderless, to match the on-screen look and feel.
    information_table.set_no_cell_borders()

    return write_table_data(
        document,
        page,
        Point(initial_point.x, initial_point.y),
        borderless_table_fonts,
        information_table_data,
        information_table,
        DATA_HAS_0_HEADER_ROWS,
        True,
        False,
    )
