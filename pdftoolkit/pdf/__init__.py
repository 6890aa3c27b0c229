"""
PDF Report Toolkit.

Report-formatting helpers over ReportLab: font bundles, color roles, table
cells and headers, multi-page tables, front page and visualization layout.

Module Structure:
- styles.py: Page geometry, alignment, color roles
- fonts.py: Font roles resolved against a live document
- document.py: Documents, pages, image snapshots
- tables.py: Cells, headers, column widths, multi-page tables
- layout.py: Front page, section headers, visualizations
- builder.py: Complete Project Report assembly

Usage:
    from pdftoolkit.pdf import build_project_report, ReportConfig

    pdf_bytes = build_project_report(branding, "Project Report", properties)
"""
from .styles import Align, COLORS, ColorPair, ROLE_COLORS, get_role_colors
from .fonts import Font, PdfFonts
from .document import (
    Compliance,
    Page,
    PdfDocument,
    PdfImage,
    Point,
    get_document,
    get_image_snapshot,
    get_project_document,
)
from .branding import get_privacy_clause, get_report_title, get_saved_from
from .tables import (
    Cell,
    PdfTable,
    add_data_cell,
    add_table_cell,
    append_missing_cells,
    create_information_table_data,
    create_table,
    get_column_width_scale_factor,
    set_column_widths,
    validate_column_coverage,
    write_information_table,
    write_table,
    write_table_data,
)
from .layout import (
    TextParagraph,
    compute_visualization_layout,
    write_footer,
    write_front_page,
    write_header,
    write_project_properties,
    write_section_header,
    write_visualization,
)
from .builder import ReportConfig, TableSection, VisualizationSection, build_project_report


__all__ = [
    # Main API
    "build_project_report",
    "ReportConfig",
    "TableSection",
    "VisualizationSection",
    # Document
    "Compliance",
    "PdfDocument",
    "Page",
    "PdfImage",
    "Point",
    "get_document",
    "get_project_document",
    "get_image_snapshot",
    # Styles and fonts
    "Align",
    "COLORS",
    "ColorPair",
    "ROLE_COLORS",
    "get_role_colors",
    "Font",
    "PdfFonts",
    # Branding
    "get_privacy_clause",
    "get_report_title",
    "get_saved_from",
    # Tables
    "Cell",
    "PdfTable",
    "add_data_cell",
    "add_table_cell",
    "append_missing_cells",
    "create_information_table_data",
    "create_table",
    "get_column_width_scale_factor",
    "set_column_widths",
    "validate_column_coverage",
    "write_information_table",
    "write_table",
    "write_table_data",
    # Layout
    "TextParagraph",
    "compute_visualization_layout",
    "write_footer",
    "write_front_page",
    "write_header",
    "write_project_properties",
    "write_section_header",
    "write_visualization",
]
