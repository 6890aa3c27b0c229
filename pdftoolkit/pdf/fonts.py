"""
PDF Fonts Module.

Container for the fonts needed by a PDF Report, using our preferred sizes and
styles. PDF/A compliance requires every font to be embedded, so the font faces
are resolved against a live document: an embedded TrueType family for PDF/A
documents, the core Helvetica family otherwise.
"""
import logging
import os
from dataclasses import dataclass
from typing import TYPE_CHECKING, NamedTuple, Optional

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont

from pdftoolkit.config import BASE_DIR, Config
from pdftoolkit.exceptions import FontError

if TYPE_CHECKING:
    from .document import PdfDocument


logger = logging.getLogger("PdfToolkit.Fonts")


class FontFamily(NamedTuple):
    """Registered face names of one font family."""
    regular: str
    bold: str
    italic: str
    bold_italic: str


CORE_FONT_FAMILY = FontFamily(
    "Helvetica", "Helvetica-Bold", "Helvetica-Oblique", "Helvetica-BoldOblique"
)

EMBEDDED_FONT_FAMILY = FontFamily(
    "DejaVuSans", "DejaVuSans-Bold", "DejaVuSans-Oblique", "DejaVuSans-BoldOblique"
)

_EMBEDDED_FONT_FILES = {
    "DejaVuSans": "DejaVuSans.ttf",
    "DejaVuSans-Bold": "DejaVuSans-Bold.ttf",
    "DejaVuSans-Oblique": "DejaVuSans-Oblique.ttf",
    "DejaVuSans-BoldOblique": "DejaVuSans-BoldOblique.ttf",
}


def _default_font_dir() -> str:
    if Config.PDF_FONT_DIR:
        # Relative paths are taken from the project root
        return str(BASE_DIR / Config.PDF_FONT_DIR)

    # matplotlib ships the DejaVu family with its data files
    import matplotlib
    return os.path.join(matplotlib.get_data_path(), "fonts", "ttf")


def register_embedded_fonts(font_dir: Optional[str] = None) -> FontFamily:
    """Register the TrueType faces that get embedded into PDF/A documents.

    Registration is global to ReportLab, so repeated calls are cheap no-ops.

    Raises:
        FontError: if any face cannot be loaded.
    """
    registered = set(pdfmetrics.getRegisteredFontNames())
    if all(name in registered for name in EMBEDDED_FONT_FAMILY):
        return EMBEDDED_FONT_FAMILY

    font_dir = font_dir or _default_font_dir()
    try:
        for face_name, file_name in _EMBEDDED_FONT_FILES.items():
            pdfmetrics.registerFont(TTFont(face_name, os.path.join(font_dir, file_name)))
    except Exception as e:
        raise FontError(f"Cannot register embedded fonts from {font_dir}: {e}") from e

    pdfmetrics.registerFontFamily(
        EMBEDDED_FONT_FAMILY.regular,
        normal=EMBEDDED_FONT_FAMILY.regular,
        bold=EMBEDDED_FONT_FAMILY.bold,
        italic=EMBEDDED_FONT_FAMILY.italic,
        boldItalic=EMBEDDED_FONT_FAMILY.bold_italic,
    )
    logger.debug("Registered embedded font family from %s", font_dir)
    return EMBEDDED_FONT_FAMILY


@dataclass(frozen=True)
class Font:
    """A sized font face."""
    family: FontFamily
    size: float
    bold: bool = False
    italic: bool = False

    @property
    def name(self) -> str:
        if self.bold and self.italic:
            return self.family.bold_italic
        if self.bold:
            return self.family.bold
        if self.italic:
            return self.family.italic
        return self.family.regular

    @property
    def leading(self) -> float:
        return 1.2 * self.size

    def string_width(self, text: str) -> float:
        return pdfmetrics.stringWidth(text, self.name, self.size)


def get_table_font_size(
    need_medium_table_fonts: bool,
    need_small_table_fonts: bool,
    need_borderless_table_fonts: bool,
) -> float:
    if need_medium_table_fonts:
        return 6.5
    if need_small_table_fonts:
        return 5.0
    if need_borderless_table_fonts:
        return 6.0
    return 8.0


class PdfFonts:
    """Named font roles for one report, resolved against a live document."""

    def __init__(
        self,
        document: "PdfDocument",
        need_medium_table_fonts: bool = False,
        need_small_table_fonts: bool = False,
        need_borderless_table_fonts: bool = False,
    ):
        family = document.font_family
        table_font_size = get_table_font_size(
            need_medium_table_fonts, need_small_table_fonts, need_borderless_table_fonts
        )

        self.header_font = Font(family, 18.0, bold=True)
        self.footer_font = Font(family, 10.0, italic=True)
        self.section_header_font = Font(family, 16.0, bold=True)

        self.table_header_font = Font(family, table_font_size, bold=True, italic=True)
        self.table_cell_font = Font(family, table_font_size)
        self.table_label_font = Font(family, 10.0, bold=True)

        self.chart_label_font = Font(family, 15.0, bold=True)
        self.axis_label_font = Font(family, 6.0)

        self.properties_header_font = Font(family, 13.0, bold=True)
        self.properties_font = Font(family, 12.0)
        self.notes_header_font = Font(family, 12.0, bold=True)
        self.notes_font = Font(family, 11.0)
