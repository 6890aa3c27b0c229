"""
PDF Document Module.

Wraps the ReportLab canvas as a report document made of pages, and converts
chart snapshots into placeable images.

Coordinates in this toolkit are top-down: the origin is the top-left corner of
the page and y grows downward. Page converts to ReportLab's bottom-up space.
"""
import logging
from enum import Enum
from io import BytesIO
from pathlib import Path
from typing import Any, NamedTuple, Optional, Tuple

from PIL import Image as PILImage
from matplotlib.figure import Figure
from reportlab.lib import colors
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase.pdfdoc import PDFName
from reportlab.pdfgen.canvas import Canvas

from pdftoolkit.config import Config
from pdftoolkit.exceptions import ImageEncodingError, PageClosedError, PdfError
from pdftoolkit.models.project import ProductBranding
from pdftoolkit.models.results import RenderResult
from .branding import get_report_title
from .fonts import CORE_FONT_FAMILY, Font, register_embedded_fonts
from .styles import PORTRAIT_PAGE_SIZE, PageGeometry, get_page_geometry


logger = logging.getLogger("PdfToolkit.Document")


class Compliance(str, Enum):
    """PDF standard profile requested for a document."""
    NONE = "NONE"
    PDF_A_1B = "PDF_A_1B"  # archival: embedded fonts, no transparency

    @classmethod
    def from_config(cls) -> "Compliance":
        try:
            return cls(Config.PDF_COMPLIANCE)
        except ValueError:
            logger.warning("Unknown PDF_COMPLIANCE %r, using PDF_A_1B", Config.PDF_COMPLIANCE)
            return cls.PDF_A_1B


class Point(NamedTuple):
    """Cursor position on a page, top-down."""
    x: float
    y: float


class PdfDocument:
    """A report file under construction.

    Args:
        output: File path or binary stream; None writes to an in-memory buffer
        compliance: Standard profile, defaults to Config.PDF_COMPLIANCE
    """

    def __init__(self, output: Any = None, compliance: Optional[Compliance] = None):
        self.compliance = compliance or Compliance.from_config()
        self._output = output if output is not None else BytesIO()

        # PDF/A requires all fonts to be embedded in the document.
        if self.compliance is Compliance.PDF_A_1B:
            self.font_family = register_embedded_fonts()
        else:
            self.font_family = CORE_FONT_FAMILY

        self.canvas = Canvas(self._output, pagesize=PORTRAIT_PAGE_SIZE)

        # As there is no way to set multiple Page Modes, prioritize Outlines.
        self.canvas.showOutline()
        self.canvas.setCatalogEntry("PageLayout", PDFName("OneColumn"))

        self.page_count = 0
        self.current_page: Optional["Page"] = None
        self.closed = False

    def set_title(self, title: str) -> None:
        self.canvas.setTitle(title)

    def set_subject(self, subject: str) -> None:
        self.canvas.setSubject(subject)

    def set_author(self, author: str) -> None:
        # The author doubles as the creator, as in most report writers.
        self.canvas.setAuthor(author)
        self.canvas.setCreator(author)

    def _begin_page(self, page: "Page") -> int:
        if self.closed:
            raise PdfError("Document is already closed")
        if self.current_page is not None:
            self.canvas.showPage()
        self.canvas.setPageSize((page.width, page.height))
        self.current_page = page
        self.page_count += 1
        return self.page_count

    def close(self) -> Optional[bytes]:
        """Finalize the document.

        Returns:
            PDF bytes when writing to an in-memory buffer, otherwise None
        """
        if not self.closed:
            self.canvas.save()
            self.closed = True
            self.current_page = None
            logger.debug("Document closed with %d page(s)", self.page_count)

        if isinstance(self._output, BytesIO):
            return self._output.getvalue()
        return None


class Page:
    """One page of a PdfDocument; starts a new canvas page on creation."""

    def __init__(self, document: PdfDocument, page_size: Tuple[float, float] = PORTRAIT_PAGE_SIZE):
        self.document = document
        self.width, self.height = page_size
        self.number = document._begin_page(self)

    @property
    def landscape(self) -> bool:
        return self.width > self.height

    @property
    def geometry(self) -> PageGeometry:
        return get_page_geometry(self.landscape)

    @property
    def canvas(self) -> Canvas:
        if self.document.current_page is not self:
            raise PageClosedError(f"Page {self.number} is no longer the current page")
        return self.document.canvas

    def to_canvas_y(self, y: float) -> float:
        return self.height - y

    def draw_string(self, font: Font, text: str, x: float, y: float, color=colors.black) -> None:
        """Draw a single line of text with its baseline at (x, y)."""
        canvas = self.canvas
        canvas.setFont(font.name, font.size)
        canvas.setFillColor(color)
        canvas.drawString(x, self.to_canvas_y(y), text)


# ============================================================================
# DOCUMENT FACTORIES
# ============================================================================

def get_document(
    output: Any,
    report_title: str,
    report_subject: str,
    report_author: str,
    compliance: Optional[Compliance] = None,
) -> PdfDocument:
    """Create a report document with its metadata set."""
    document = PdfDocument(output, compliance)

    document.set_title(report_title)
    document.set_subject(report_subject)
    document.set_author(report_author)

    return document


def get_project_document(
    output: Any,
    product_branding: ProductBranding,
    report_subtitle: str,
    project_name: str,
    designer: str,
    compliance: Optional[Compliance] = None,
) -> PdfDocument:
    """Create a Project Report document.

    The title is derived from the product branding, the subject is the
    project name and the author is the designer.
    """
    report_title = get_report_title(product_branding, report_subtitle)
    return get_document(output, report_title, project_name, designer, compliance)


# ============================================================================
# IMAGES
# ============================================================================

class PdfImage:
    """A PNG snapshot that can be positioned, scaled and drawn on a page.

    One source pixel maps to one point before scaling.
    """

    def __init__(self, png_bytes: bytes):
        self._reader = ImageReader(BytesIO(png_bytes))
        self.pixel_width, self.pixel_height = self._reader.getSize()
        self.x = 0.0
        self.y = 0.0
        self.scale = 1.0

    def set_position(self, x: float, y: float) -> None:
        self.x = x
        self.y = y

    def scale_by(self, factor: float) -> None:
        self.scale *= factor

    @property
    def width(self) -> float:
        return self.pixel_width * self.scale

    @property
    def height(self) -> float:
        return self.pixel_height * self.scale

    def draw_on(self, page: Page) -> Point:
        page.canvas.drawImage(
            self._reader,
            self.x,
            page.to_canvas_y(self.y + self.height),
            width=self.width,
            height=self.height,
        )
        return Point(self.x + self.width, self.y + self.height)


def _flatten_alpha(image: PILImage.Image) -> PILImage.Image:
    if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
        rgba = image.convert("RGBA")
        background = PILImage.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.split()[-1])
        return background
    return image


def _encode_png(source: Any, flatten: bool) -> bytes:
    if isinstance(source, Figure):
        buf = BytesIO()
        source.savefig(buf, format="png", dpi=Config.PDF_IMAGE_DPI, facecolor="white")
        buf.seek(0)
        source = PILImage.open(buf)
    elif isinstance(source, (bytes, bytearray)):
        source = PILImage.open(BytesIO(source))
    elif isinstance(source, (str, Path)):
        source = PILImage.open(source)
    elif not isinstance(source, PILImage.Image):
        raise ImageEncodingError(f"Unsupported image source: {type(source).__name__}")

    source.load()
    if flatten:
        source = _flatten_alpha(source)

    out = BytesIO()
    source.save(out, format="PNG")
    return out.getvalue()


def get_image_snapshot(document: PdfDocument, source: Any) -> RenderResult[PdfImage]:
    """Snapshot a chart or bitmap as a lossless PNG image for the document.

    PNG is used rather than JPEG, which degrades logos and data plots.

    Args:
        document: Target document (PDF/A documents get alpha flattened)
        source: matplotlib Figure, Pillow image, encoded image bytes or a path

    Returns:
        RenderResult holding the PdfImage, or the ImageEncodingError
    """
    if source is None:
        return RenderResult.failure(ImageEncodingError("No image source given"))

    try:
        png_bytes = _encode_png(source, flatten=document.compliance is Compliance.PDF_A_1B)
        return RenderResult.success(PdfImage(png_bytes))
    except ImageEncodingError as e:
        logger.error("Image snapshot failed: %s", e)
        return RenderResult.failure(e)
    except Exception as e:
        logger.error("Image snapshot failed: %s", e)
        error = ImageEncodingError(f"Cannot encode image: {e}")
        error.__cause__ = e
        return RenderResult.failure(error)
