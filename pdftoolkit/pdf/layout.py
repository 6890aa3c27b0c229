"""
PDF Layout Module.

Front page, header, footer and Project Properties text, section headers and
visualization (chart + legend) placement for Project Reports.

Text sections are built as an ordered list of TextParagraph entries and laid
out in a single text frame.
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
from xml.sax.saxutils import escape

from reportlab.lib.styles import ParagraphStyle
from reportlab.platypus import Frame, Paragraph

from pdftoolkit.exceptions import PdfError
from pdftoolkit.models.project import ProductBranding, ProjectProperties
from pdftoolkit.models.results import RenderResult
from .branding import get_privacy_clause, get_report_title, get_saved_from
from .document import Page, PdfDocument, PdfImage, Point, get_image_snapshot
from .fonts import Font, PdfFonts
from .styles import (
    Align,
    PORTRAIT_LEFT_MARGIN,
    PORTRAIT_PAGE_LAYOUT_HEIGHT,
    PORTRAIT_PAGE_LAYOUT_WIDTH,
    PORTRAIT_PAGE_SIZE,
    PORTRAIT_TOP_MARGIN,
)


logger = logging.getLogger("PdfToolkit.Layout")

# Vertical room reserved for a chart label above the charts
CHART_LABEL_OFFSET = 30.0


# ============================================================================
# PARAGRAPHS
# ============================================================================

@dataclass(frozen=True)
class TextParagraph:
    alignment: Align
    font: Font
    text: str


def add_paragraph(paragraphs: List[TextParagraph], alignment: Align, font: Font, text: str) -> None:
    paragraphs.append(TextParagraph(alignment, font, text))


def add_empty_lines(
    paragraphs: List[TextParagraph],
    alignment: Align,
    font: Font,
    number_of_lines: int,
) -> None:
    for _ in range(number_of_lines):
        add_paragraph(paragraphs, alignment, font, "")


def to_flowable(paragraph: TextParagraph) -> Paragraph:
    font = paragraph.font
    style = ParagraphStyle(
        "TextParagraph",
        fontName=font.name,
        fontSize=font.size,
        leading=font.leading,
        alignment=paragraph.alignment.paragraph_alignment,
    )
    # An empty line still takes up one line of height.
    text = escape(paragraph.text) if paragraph.text else "&nbsp;"
    return Paragraph(text, style)


def draw_text_frame(
    page: Page,
    paragraphs: List[TextParagraph],
    x: float,
    y: float,
    width: float,
    height: float,
) -> int:
    """Lay out paragraphs top-down in a frame whose top-left corner is (x, y).

    Returns:
        Number of paragraphs that did not fit in the frame
    """
    frame = Frame(
        x,
        page.to_canvas_y(y + height),
        width,
        height,
        leftPadding=0,
        bottomPadding=0,
        rightPadding=0,
        topPadding=0,
        showBoundary=0,
    )
    flowables = [to_flowable(paragraph) for paragraph in paragraphs]
    frame.addFromList(flowables, page.canvas)

    if flowables:
        logger.warning("Text frame overflow on page %d: %d paragraph(s) dropped",
                       page.number, len(flowables))
    return len(flowables)


# ============================================================================
# FRONT PAGE
# ============================================================================

def write_header(paragraphs: List[TextParagraph], fonts: PdfFonts, report_title: str) -> None:
    add_paragraph(paragraphs, Align.CENTER, fonts.header_font, report_title)


def write_footer(
    paragraphs: List[TextParagraph],
    fonts: PdfFonts,
    product_branding: ProductBranding,
    locale: Optional[str] = None,
) -> None:
    """Write the program name/version and user locale, then the privacy clause."""
    saved_from = get_saved_from(product_branding, locale)
    add_paragraph(paragraphs, Align.CENTER, fonts.footer_font, saved_from)

    # For legal reasons, we also add a privacy clause.
    add_paragraph(paragraphs, Align.CENTER, fonts.footer_font, get_privacy_clause())


def write_project_properties(
    paragraphs: List[TextParagraph],
    fonts: PdfFonts,
    properties: ProjectProperties,
) -> None:
    """Write the Project Properties section, padded above and below.

    Project Notes, when enabled, are written one left-aligned paragraph per
    line, whichever newline convention the notes use.
    """
    add_empty_lines(paragraphs, Align.CENTER, fonts.header_font, 2)

    add_paragraph(paragraphs, Align.CENTER, fonts.properties_header_font,
                  f"Project: {properties.project_name}")

    # The remaining Project Properties as a pseudo-table.
    add_paragraph(paragraphs, Align.CENTER, fonts.properties_font, f"Venue: {properties.venue}")
    add_paragraph(paragraphs, Align.CENTER, fonts.properties_font, f"Designer: {properties.designer}")
    add_paragraph(paragraphs, Align.CENTER, fonts.properties_font, f"Date: {properties.date}")

    if properties.use_project_notes:
        add_paragraph(paragraphs, Align.CENTER, fonts.notes_header_font, "Project Notes: ")
        for line in re.split(r"\r\n|\r|\n", properties.project_notes):
            add_paragraph(paragraphs, Align.LEFT, fonts.notes_font, line)

    add_empty_lines(paragraphs, Align.CENTER, fonts.header_font, 2)


def build_front_page_paragraphs(
    fonts: PdfFonts,
    product_branding: ProductBranding,
    report_subtitle: str,
    properties: Optional[ProjectProperties] = None,
    locale: Optional[str] = None,
) -> List[TextParagraph]:
    """Header, optional Project Properties, then footer."""
    paragraphs: List[TextParagraph] = []

    write_header(paragraphs, fonts, get_report_title(product_branding, report_subtitle))

    if properties is not None:
        write_project_properties(paragraphs, fonts, properties)

    write_footer(paragraphs, fonts, product_branding, locale)
    return paragraphs


def write_front_page(
    document: PdfDocument,
    fonts: PdfFonts,
    product_branding: ProductBranding,
    report_subtitle: str,
    properties: Optional[ProjectProperties] = None,
    locale: Optional[str] = None,
) -> Page:
    """Write the text-only front page of a Project Report on a new portrait page.

    Args:
        properties: Project Properties to export, or None to leave them out
        locale: Locale tag shown in the footer

    Returns:
        The front page
    """
    front_page = Page(document, PORTRAIT_PAGE_SIZE)

    paragraphs = build_front_page_paragraphs(
        fonts, product_branding, report_subtitle, properties, locale
    )
    draw_text_frame(
        front_page,
        paragraphs,
        PORTRAIT_LEFT_MARGIN,
        PORTRAIT_TOP_MARGIN,
        PORTRAIT_PAGE_LAYOUT_WIDTH,
        PORTRAIT_PAGE_LAYOUT_HEIGHT,
    )

    return front_page


def write_section_header(
    page: Page,
    point: Point,
    fonts: PdfFonts,
    section_title: str,
) -> RenderResult[Point]:
    """Write a section header centered on the page at the cursor's height.

    Returns:
        RenderResult with the cursor one line below the header
    """
    font = fonts.section_header_font
    x = 0.5 * (page.width - font.string_width(section_title))
    y = point.y

    try:
        page.draw_string(font, section_title, x, y)
    except PdfError as e:
        logger.error("Section header %r failed: %s", section_title, e)
        return RenderResult.failure(e)

    return RenderResult.success(Point(point.x, y + font.leading))


# ============================================================================
# VISUALIZATION
# ============================================================================

@dataclass(frozen=True)
class ImagePlacement:
    x: float
    y: float
    width: float
    height: float


@dataclass
class VisualizationLayout:
    """Where each visualization image goes, and the height the charts use."""
    scale_factor: float
    placements: Dict[str, ImagePlacement] = field(default_factory=dict)
    extent: float = 0.0
    failures: Dict[str, PdfError] = field(default_factory=dict)


def compute_visualization_layout(
    layout_width: float,
    chart1_size: Optional[Tuple[float, float]] = None,
    chart2_size: Optional[Tuple[float, float]] = None,
    legend_size: Optional[Tuple[float, float]] = None,
    has_chart_label: bool = False,
) -> VisualizationLayout:
    """Place up to two stacked charts and a legend on a portrait page.

    Sizes are the unscaled (width, height) of each image; absent images take
    no room. Chart 2 goes below chart 1 and the legend sits right of the
    widest chart, level with the top chart.

    Args:
        layout_width: Logical width of the source visualization

    Raises:
        ValueError: if layout_width is not positive
    """
    if layout_width <= 0:
        raise ValueError(f"Visualization layout width must be positive, got {layout_width}")

    scale_factor = PORTRAIT_PAGE_LAYOUT_WIDTH / layout_width
    layout = VisualizationLayout(scale_factor=scale_factor)

    x_offset = PORTRAIT_LEFT_MARGIN
    y_offset = PORTRAIT_TOP_MARGIN + (CHART_LABEL_OFFSET if has_chart_label else 0.0)
    chart2_adjustment_y = 0.0
    legend_adjustment_x = 0.0

    if chart1_size is not None:
        width, height = chart1_size[0] * scale_factor, chart1_size[1] * scale_factor
        layout.placements["chart1"] = ImagePlacement(x_offset, y_offset, width, height)
        chart2_adjustment_y = height
        legend_adjustment_x = width
        layout.extent += height

    if chart2_size is not None:
        width, height = chart2_size[0] * scale_factor, chart2_size[1] * scale_factor
        layout.placements["chart2"] = ImagePlacement(
            x_offset, y_offset + chart2_adjustment_y, width, height
        )
        legend_adjustment_x = max(legend_adjustment_x, width)
        layout.extent += height

    if legend_size is not None:
        width, height = legend_size[0] * scale_factor, legend_size[1] * scale_factor
        layout.placements["legend"] = ImagePlacement(
            x_offset + legend_adjustment_x, y_offset, width, height
        )

    return layout


def write_visualization(
    document: PdfDocument,
    visualization_page: Page,
    fonts: PdfFonts,
    chart_label: Optional[str],
    layout_width: float,
    chart1: Any = None,
    chart2: Any = None,
    chart_legend: Any = None,
) -> VisualizationLayout:
    """Write a chart label, up to two charts and a legend to a page.

    Images are snapshotted as PNG for maximum resolution when zooming into the
    document. An image that cannot be encoded takes no room and is reported in
    the returned layout's failures.

    Returns:
        The layout, whose extent positions the content that follows
    """
    failures: Dict[str, PdfError] = {}

    if chart_label is not None:
        label_point = Point(PORTRAIT_LEFT_MARGIN, PORTRAIT_TOP_MARGIN)
        result = write_section_header(visualization_page, label_point, fonts, chart_label)
        if not result.ok:
            failures["chart_label"] = result.error

    images: Dict[str, PdfImage] = {}
    for name, source in (("chart1", chart1), ("chart2", chart2), ("legend", chart_legend)):
        if source is None:
            continue
        snapshot = get_image_snapshot(document, source)
        if snapshot.ok:
            images[name] = snapshot.value
        else:
            failures[name] = snapshot.error

    def size_of(name: str) -> Optional[Tuple[float, float]]:
        image = images.get(name)
        return (image.pixel_width, image.pixel_height) if image is not None else None

    layout = compute_visualization_layout(
        layout_width,
        size_of("chart1"),
        size_of("chart2"),
        size_of("legend"),
        has_chart_label=chart_label is not None,
    )

    for name, image in images.items():
        placement = layout.placements[name]
        image.set_position(placement.x, placement.y)
        image.scale_by(layout.scale_factor)
        image.draw_on(visualization_page)

    layout.failures.update(failures)
    if failures:
        logger.warning("Visualization written with failures: %s", sorted(failures))
    return layout
