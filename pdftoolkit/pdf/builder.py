"""
PDF Builder Module.

Orchestrates the construction of a complete Project Report:

1. Front page (title, Project Properties, notes, footer)
2. One page per visualization, with optional information lines below it
3. One section per data table, paginated as needed

No layout arithmetic here - only document assembly.
"""
from dataclasses import dataclass, field
from io import BytesIO
from pathlib import Path
import logging
from typing import Any, List, Optional, Sequence, Union

import pandas as pd

from pdftoolkit.models.project import ProductBranding, ProjectProperties
from .document import Compliance, Page, Point, get_project_document
from .fonts import PdfFonts
from .layout import CHART_LABEL_OFFSET, write_front_page, write_section_header, write_visualization
from .styles import Align, PORTRAIT_PAGE_SIZE, get_page_geometry, page_size_for
from .tables import Cell, add_data_cell, create_table, rows_from_dataframe, write_information_table, write_table_data


# Setup logger
logger = logging.getLogger("PdfToolkit.PDFBuilder")

# Gap between a section header and the table below it
SECTION_SPACING = 8.0


@dataclass
class ReportConfig:
    """Configuration for Project Report generation."""
    compliance: Optional[Compliance] = None  # None: Config.PDF_COMPLIANCE
    need_medium_table_fonts: bool = False
    need_small_table_fonts: bool = False
    locale: Optional[str] = None
    export_project_properties: bool = True


@dataclass
class VisualizationSection:
    chart_label: Optional[str]
    layout_width: float
    chart1: Any = None
    chart2: Any = None
    chart_legend: Any = None
    information: List[str] = field(default_factory=list)


@dataclass
class TableSection:
    title: str
    column_names: Sequence[str]
    rows: Union[pd.DataFrame, Sequence[Sequence[Any]]]
    span_names: Optional[Sequence[str]] = None
    span_lengths: Optional[Sequence[int]] = None
    number_of_columns: Optional[int] = None
    column_widths_in_pixels: Optional[Sequence[float]] = None
    landscape_mode: bool = False


def _table_rows(section: TableSection, fonts: PdfFonts) -> List[List[Cell]]:
    if isinstance(section.rows, pd.DataFrame):
        return rows_from_dataframe(section.rows, fonts)

    rows = []
    for values in section.rows:
        row_data: List[Cell] = []
        for value in values:
            add_data_cell(row_data, fonts, "" if value is None else str(value))
        rows.append(row_data)
    return rows


def build_project_report(
    product_branding: ProductBranding,
    report_subtitle: str,
    properties: ProjectProperties,
    visualizations: Sequence[VisualizationSection] = (),
    tables: Sequence[TableSection] = (),
    output_path: Optional[str] = None,
    config: Optional[ReportConfig] = None,
) -> bytes:
    """Build a complete Project Report.

    Args:
        product_branding: Exporting product, used for the title and footer
        report_subtitle: Report kind, appended to the product name in the title
        properties: Project Properties for the front page and metadata
        visualizations: Chart pages, in order
        tables: Data table sections, in order
        output_path: Optional file path to save the PDF
        config: Report configuration

    Returns:
        PDF bytes

    Raises:
        PdfError: if any section fails to render
    """
    config = config or ReportConfig()
    buffer = BytesIO()

    document = get_project_document(
        buffer,
        product_branding,
        report_subtitle,
        properties.project_name,
        properties.designer,
        config.compliance,
    )

    fonts = PdfFonts(
        document,
        need_medium_table_fonts=config.need_medium_table_fonts,
        need_small_table_fonts=config.need_small_table_fonts,
    )
    borderless_fonts = PdfFonts(document, need_borderless_table_fonts=True)

    # === FRONT PAGE ===
    write_front_page(
        document,
        fonts,
        product_branding,
        report_subtitle,
        properties if config.export_project_properties else None,
        config.locale,
    )

    # === VISUALIZATIONS ===
    for section in visualizations:
        page = Page(document, PORTRAIT_PAGE_SIZE)
        layout = write_visualization(
            document,
            page,
            fonts,
            section.chart_label,
            section.layout_width,
            section.chart1,
            section.chart2,
            section.chart_legend,
        )
        for name, error in layout.failures.items():
            logger.warning("Visualization %r: %s failed: %s", section.chart_label, name, error)

        if section.information:
            geometry = get_page_geometry(False)
            label_offset = CHART_LABEL_OFFSET if section.chart_label is not None else 0.0
            information_point = Point(
                geometry.left_margin,
                geometry.top_margin + label_offset + layout.extent + SECTION_SPACING,
            )
            write_information_table(
                document, page, information_point, borderless_fonts, Align.LEFT, section.information
            ).unwrap()

    # === DATA TABLES ===
    for section in tables:
        page = Page(document, page_size_for(section.landscape_mode))
        geometry = page.geometry

        cursor = write_section_header(
            page, Point(geometry.left_margin, geometry.top_margin), fonts, section.title
        ).unwrap()

        table_data: List[List[Cell]] = []
        table = create_table(
            table_data,
            fonts,
            section.column_names,
            span_names=section.span_names,
            span_lengths=section.span_lengths,
            number_of_columns=section.number_of_columns,
            column_widths_in_pixels=section.column_widths_in_pixels,
            landscape_mode=section.landscape_mode,
        )
        table_data.extend(_table_rows(section, fonts))

        write_table_data(
            document,
            page,
            Point(cursor.x, cursor.y + SECTION_SPACING),
            fonts,
            table_data,
            table,
            auto_adjust_column_widths=section.column_widths_in_pixels is None,
            landscape_mode=section.landscape_mode,
        ).unwrap()
        logger.debug("Table section %r written", section.title)

    pdf_bytes = document.close()

    # Save to file if path provided
    if output_path:
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'wb') as f:
            f.write(pdf_bytes)
        logger.info("PDF saved to: %s", output_path)

    return pdf_bytes
