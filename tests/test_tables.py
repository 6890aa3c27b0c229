"""Tests for pdftoolkit/pdf/tables.py — cells, headers, widths and multi-page tables."""

import pytest
import pandas as pd
from reportlab.lib import colors

from pdftoolkit.exceptions import ColumnCoverageError, TableRenderError
from pdftoolkit.pdf.document import Page, Point
from pdftoolkit.pdf.styles import (
    Align,
    LANDSCAPE_PAGE_LAYOUT_WIDTH,
    PORTRAIT_BOTTOM_MARGIN,
    PORTRAIT_LEFT_MARGIN,
    PORTRAIT_PAGE_LAYOUT_WIDTH,
    PORTRAIT_TOP_MARGIN,
    TABLE_HEADER_COLORS,
    TABLE_LABEL_COLORS,
)
from pdftoolkit.pdf.tables import (
    Cell,
    DATA_HAS_1_HEADER_ROWS,
    PdfTable,
    add_covered_cells,
    add_data_cell,
    add_table_cell,
    append_missing_cells,
    create_information_table_data,
    create_table,
    get_column_width_scale_factor,
    row_coverage,
    rows_from_dataframe,
    set_column_widths,
    validate_column_coverage,
    write_table,
    write_table_data,
)


def _data_rows(fonts, count, columns=2):
    rows = []
    for i in range(count):
        row = []
        for column in range(columns):
            add_data_cell(row, fonts, f"Item {i}.{column}")
        rows.append(row)
    return rows


# =========================================================================
# Column width scaling
# =========================================================================

class TestColumnWidthScaleFactor:
    @pytest.mark.parametrize("widths", [None, [], [0, 0, 0]])
    def test_neutral_factor_without_widths(self, widths):
        assert get_column_width_scale_factor(widths) == 1.0
        assert get_column_width_scale_factor(widths, landscape_mode=True) == 1.0

    def test_portrait_factor(self):
        factor = get_column_width_scale_factor([100, 200, 100])
        assert factor == pytest.approx(PORTRAIT_PAGE_LAYOUT_WIDTH / 400)

    def test_landscape_uses_wider_layout(self):
        portrait = get_column_width_scale_factor([100, 100])
        landscape = get_column_width_scale_factor([100, 100], landscape_mode=True)
        assert landscape == pytest.approx(LANDSCAPE_PAGE_LAYOUT_WIDTH / 200)
        assert landscape > portrait

    @pytest.mark.parametrize("widths", [[1], [37, 91, 12.5], [300] * 9])
    def test_scaled_widths_fill_layout(self, fonts, widths):
        row = []
        for _ in widths:
            add_data_cell(row, fonts, "x")
        set_column_widths(row, widths)
        assert sum(cell.width for cell in row) == pytest.approx(PORTRAIT_PAGE_LAYOUT_WIDTH)

    def test_set_column_widths_none_leaves_cells(self, fonts):
        row = []
        add_data_cell(row, fonts, "x")
        set_column_widths(row, None)
        assert row[0].width is None

    def test_too_many_widths_rejected(self, fonts):
        row = []
        add_data_cell(row, fonts, "x")
        with pytest.raises(ColumnCoverageError):
            set_column_widths(row, [10, 20])


# =========================================================================
# Cells
# =========================================================================

class TestCells:
    def test_table_cell_defaults(self, fonts):
        row = []
        cell = add_table_cell(row, fonts.table_header_font, colors.blue, colors.white, "Name")
        assert row == [cell]
        assert cell.col_span == 1
        assert cell.align is Align.CENTER
        assert cell.borders
        assert cell.bottom_padding is None

    def test_borderless_cell_drops_bottom_padding(self, fonts):
        row = []
        cell = add_data_cell(row, fonts, "info", align=Align.LEFT, paint_borders=False)
        assert not cell.borders
        assert cell.bottom_padding == 0.0
        assert cell.font == fonts.table_cell_font

    def test_covered_cells_take_no_width(self, fonts):
        row = []
        add_covered_cells(row, 3, fonts.table_cell_font, TABLE_LABEL_COLORS)
        assert len(row) == 3
        assert all(cell.covered and cell.width == 0.0 for cell in row)
        assert row_coverage(row) == 0

    def test_information_rows(self, document):
        from pdftoolkit.pdf.fonts import PdfFonts
        borderless = PdfFonts(document, need_borderless_table_fonts=True)

        rows = create_information_table_data(borderless, Align.LEFT, ["Line A", "Line B"])
        assert [row[0].text for row in rows] == ["Line A", "Line B"]
        assert all(len(row) == 1 and not row[0].borders for row in rows)
        assert rows[0][0].font.size == 6.0


# =========================================================================
# Column coverage
# =========================================================================

class TestColumnCoverage:
    def test_valid_span_row(self, fonts):
        row = []
        add_data_cell(row, fonts, "a")
        add_table_cell(row, fonts.table_cell_font, colors.white, colors.black, "b", col_span=3)
        add_covered_cells(row, 2, fonts.table_cell_font, TABLE_HEADER_COLORS)
        validate_column_coverage(row, 4)
        assert row_coverage(row) == 4

    def test_missing_cell(self, fonts):
        row = []
        add_data_cell(row, fonts, "a")
        with pytest.raises(ColumnCoverageError, match="1 cells for 2 columns"):
            validate_column_coverage(row, 2)

    def test_span_without_placeholders(self, fonts):
        row = []
        add_table_cell(row, fonts.table_cell_font, colors.white, colors.black, "a", col_span=2)
        add_data_cell(row, fonts, "b")
        with pytest.raises(ColumnCoverageError, match="overlaps"):
            validate_column_coverage(row, 2)

    def test_span_past_last_column(self, fonts):
        row = []
        add_data_cell(row, fonts, "a")
        add_table_cell(row, fonts.table_cell_font, colors.white, colors.black, "b", col_span=2)
        with pytest.raises(ColumnCoverageError):
            validate_column_coverage(row, 2)

    def test_stray_placeholder(self, fonts):
        row = []
        add_covered_cells(row, 1, fonts.table_cell_font, TABLE_HEADER_COLORS)
        add_data_cell(row, fonts, "a")
        with pytest.raises(ColumnCoverageError, match="placeholder"):
            validate_column_coverage(row, 2)

    def test_append_missing_cells_widens_last_cell(self, fonts):
        table_data = _data_rows(fonts, 1, columns=3)
        short = []
        add_data_cell(short, fonts, "only")
        table_data.append(short)
        table_data.append([])

        append_missing_cells(table_data, fonts.table_cell_font)

        for row in table_data:
            validate_column_coverage(row, 3)
        assert short[0].col_span == 3
        assert table_data[2][0].col_span == 3


# =========================================================================
# Headers
# =========================================================================

class TestCreateTable:
    def test_one_header_per_column(self, fonts):
        table_data = []
        table = create_table(table_data, fonts, ["A", "B", "C"], column_widths_in_pixels=[50, 50, 100])

        assert table.header_row_count == 1
        header = table_data[0]
        assert [cell.text for cell in header] == ["A", "B", "C"]
        assert all(cell.col_span == 1 for cell in header)
        assert header[0].background == TABLE_HEADER_COLORS.background
        assert header[0].font == fonts.table_header_font
        assert sum(cell.width for cell in header) == pytest.approx(PORTRAIT_PAGE_LAYOUT_WIDTH)

    @pytest.mark.parametrize("names,columns", [
        (["A"], 4),
        (["A", "B"], 5),
        (["A", "B", "Group"], 7),
    ])
    def test_fewer_names_final_header_spans_rest(self, fonts, names, columns):
        table_data = []
        create_table(table_data, fonts, names, number_of_columns=columns)

        header = table_data[0]
        spanning = [cell for cell in header if not cell.covered and cell.col_span > 1]
        assert len(spanning) == 1
        assert spanning[0].text == names[-1]
        assert row_coverage(header) == columns
        assert len(header) == columns

    def test_more_names_than_columns(self, fonts):
        with pytest.raises(ColumnCoverageError):
            create_table([], fonts, ["A", "B", "C"], number_of_columns=2)

    def test_no_names_for_columns(self, fonts):
        with pytest.raises(ColumnCoverageError):
            create_table([], fonts, [], number_of_columns=3)

    def test_two_level_header(self, fonts):
        table_data = _data_rows(fonts, 2, columns=5)
        table = create_table(
            table_data,
            fonts,
            ["In 1", "In 2", "Out 1", "Out 2", "Notes"],
            span_names=["Inputs", "Outputs"],
            span_lengths=[2, 2],
        )

        assert table.header_row_count == 2
        assert len(table_data) == 4
        span_row, column_row = table_data[0], table_data[1]

        assert [cell.text for cell in span_row if not cell.covered] == ["Inputs", "Outputs", ""]
        assert span_row[0].font == fonts.table_label_font
        assert span_row[0].background == TABLE_LABEL_COLORS.background
        assert len(span_row) == 5
        assert row_coverage(span_row) == 5
        # The uncovered final column still gets its own blank cell.
        assert not span_row[4].covered and span_row[4].text == ""
        assert [cell.text for cell in column_row] == ["In 1", "In 2", "Out 1", "Out 2", "Notes"]

    def test_span_widths_sum_covered_columns(self, fonts):
        table_data = []
        create_table(
            table_data,
            fonts,
            ["a", "b", "c"],
            span_names=["ab"],
            span_lengths=[2],
            column_widths_in_pixels=[100, 100, 200],
        )
        assert table_data[0][0].width == pytest.approx(PORTRAIT_PAGE_LAYOUT_WIDTH / 2)

    def test_spans_overrun_columns(self, fonts):
        with pytest.raises(ColumnCoverageError):
            create_table([], fonts, ["a", "b"], span_names=["abc"], span_lengths=[3])

    def test_mismatched_span_lengths(self, fonts):
        with pytest.raises(ColumnCoverageError):
            create_table([], fonts, ["a", "b"], span_names=["x", "y"], span_lengths=[2])

    @pytest.mark.parametrize("widths", [[100, 100], [100, 100, 100, 100]])
    def test_width_count_must_match_columns(self, fonts, widths):
        with pytest.raises(ColumnCoverageError, match="column widths for 3 columns"):
            create_table([], fonts, ["A", "B", "C"], column_widths_in_pixels=widths)

    def test_explicit_widths_stay_within_layout(self, document, fonts, page):
        table_data = _data_rows(fonts, 3, columns=3)
        table = create_table(table_data, fonts, ["A", "B", "C"], column_widths_in_pixels=[100, 100, 200])

        result = write_table_data(
            document, page, Point(PORTRAIT_LEFT_MARGIN, PORTRAIT_TOP_MARGIN), fonts,
            table_data, table, auto_adjust_column_widths=False,
        )
        assert result.ok
        widths = table._column_widths(table._available_width(page))
        assert sum(widths) == pytest.approx(PORTRAIT_PAGE_LAYOUT_WIDTH)

    def test_no_headers(self, fonts):
        table_data = _data_rows(fonts, 1)
        table = create_table(table_data, fonts, None)
        assert table.header_row_count == 0
        assert len(table_data) == 1


# =========================================================================
# DataFrame rows
# =========================================================================

class TestRowsFromDataFrame:
    def test_values_and_missing(self, fonts):
        frame = pd.DataFrame({"name": ["Left", "Right"], "delay": [1.5, None]})
        rows = rows_from_dataframe(frame, fonts, Align.RIGHT)

        assert [[cell.text for cell in row] for row in rows] == [["Left", "1.5"], ["Right", ""]]
        assert all(cell.align is Align.RIGHT for row in rows for cell in row)


# =========================================================================
# PdfTable
# =========================================================================

class TestPdfTable:
    def test_set_data_rejects_ragged_rows(self, fonts):
        table_data = _data_rows(fonts, 2, columns=3)
        table_data[1].pop()
        with pytest.raises(ColumnCoverageError, match="Row 1"):
            PdfTable().set_data(table_data)

    def test_set_data_rejects_excess_header_rows(self, fonts):
        with pytest.raises(TableRenderError):
            PdfTable().set_data(_data_rows(fonts, 1), number_of_header_rows=2)

    def test_auto_widths_shrink_to_page(self, fonts, page):
        table_data = [[Cell(text="W" * 200, font=fonts.table_cell_font)] * 2]
        table = PdfTable()
        table.set_data(table_data)
        table.auto_adjust_column_widths()
        table.set_position(PORTRAIT_LEFT_MARGIN, PORTRAIT_TOP_MARGIN)

        widths = table._column_widths(table._available_width(page))
        assert sum(widths) == pytest.approx(PORTRAIT_PAGE_LAYOUT_WIDTH)

    def test_single_page_table(self, fonts, page):
        table = PdfTable()
        table.set_data(_data_rows(fonts, 3))
        table.set_position(PORTRAIT_LEFT_MARGIN, 100.0)

        assert table.get_number_of_pages(page) == 1
        point = table.draw_on(page)
        assert not table.has_more_data()
        assert point.y > 100.0

    def test_long_table_spans_pages(self, document, fonts, page):
        table_data = _data_rows(fonts, 150)
        table = create_table(table_data, fonts, ["Name", "Value"])
        table.set_data(table_data, DATA_HAS_1_HEADER_ROWS)
        table.auto_adjust_column_widths()
        table.set_position(PORTRAIT_LEFT_MARGIN, PORTRAIT_TOP_MARGIN)

        expected_pages = table.get_number_of_pages(page)
        assert expected_pages > 1

        result = write_table(document, page, fonts, table)

        assert result.ok
        assert document.page_count == expected_pages
        assert result.value.y <= page.height - PORTRAIT_BOTTOM_MARGIN
        assert table.rendered_pages == 0
        assert not table.has_more_data()

    def test_row_taller_than_page(self, document, fonts, page):
        row = []
        add_data_cell(row, fonts, "\n".join(["line"] * 200))
        table = PdfTable()
        table.set_data([row])
        table.wrap_around_cell_text()
        table.set_position(PORTRAIT_LEFT_MARGIN, PORTRAIT_TOP_MARGIN)

        result = write_table(document, page, fonts, table)
        assert not result.ok
        assert isinstance(result.error, TableRenderError)


# =========================================================================
# Paginator
# =========================================================================

class FakeTable:
    """Table double that needs a fixed number of pages."""

    def __init__(self, pages, fail_on_page=None):
        self.pages = pages
        self.fail_on_page = fail_on_page
        self.drawn = []
        self.reset_calls = 0
        self._more = False

    def get_number_of_pages(self, page):
        return self.pages

    def draw_on(self, page):
        number = len(self.drawn) + 1
        if number == self.fail_on_page:
            raise RuntimeError("engine failure")
        self._more = number < self.pages
        self.drawn.append((page, self._more))
        return Point(PORTRAIT_LEFT_MARGIN, 100.0 + number)

    def has_more_data(self):
        return self._more

    def reset_rendered_pages_count(self):
        self.reset_calls += 1


@pytest.fixture
def stamps(monkeypatch):
    recorded = []

    def record(self, font, text, x, y, color=None):
        recorded.append((self.number, text, y))

    monkeypatch.setattr(Page, "draw_string", record)
    return recorded


class TestWriteTable:
    @pytest.mark.parametrize("pages", [1, 2, 5])
    def test_only_last_page_has_no_more_data(self, document, fonts, page, stamps, pages):
        table = FakeTable(pages)
        result = write_table(document, page, fonts, table)

        assert result.ok
        flags = [more for _, more in table.drawn]
        assert flags == [True] * (pages - 1) + [False]
        assert document.page_count == pages
        assert len({id(drawn_page) for drawn_page, _ in table.drawn}) == pages
        assert table.reset_calls == 1
        assert result.value == Point(PORTRAIT_LEFT_MARGIN, 100.0 + pages)

    def test_page_counter_stamps(self, document, fonts, page, stamps):
        write_table(document, page, fonts, FakeTable(3))

        assert [text for _, text, _ in stamps] == ["Page 1 of 3", "Page 2 of 3"]
        assert [number for number, _, _ in stamps] == [1, 2]
        assert stamps[0][2] == pytest.approx(101.0 + fonts.footer_font.leading)

    def test_landscape_continuation_pages(self, document, fonts, page, stamps):
        table = FakeTable(2)
        write_table(document, page, fonts, table, landscape_mode=True)
        assert table.drawn[1][0].landscape

    def test_engine_failure_is_wrapped(self, document, fonts, page, stamps):
        result = write_table(document, page, fonts, FakeTable(3, fail_on_page=2))

        assert not result.ok
        assert isinstance(result.error, TableRenderError)
        assert isinstance(result.error.__cause__, RuntimeError)
        with pytest.raises(TableRenderError):
            result.unwrap()


class TestWriteTableData:
    def test_header_rows_default_from_create_table(self, document, fonts, page):
        table_data = _data_rows(fonts, 5)
        table = create_table(table_data, fonts, ["Name", "Value"])

        result = write_table_data(
            document, page, Point(PORTRAIT_LEFT_MARGIN, PORTRAIT_TOP_MARGIN), fonts, table_data, table
        )
        assert result.ok
        assert table._number_of_header_rows == 1
        assert document.page_count == 1

    def test_invalid_data_is_a_failure(self, document, fonts, page):
        table_data = _data_rows(fonts, 2, columns=3)
        table_data[1].pop()

        result = write_table_data(
            document, page, Point(PORTRAIT_LEFT_MARGIN, PORTRAIT_TOP_MARGIN), fonts, table_data, PdfTable()
        )
        assert not result.ok
        assert isinstance(result.error, ColumnCoverageError)
