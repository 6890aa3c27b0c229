"""
PDF Styles Module.

Defines page geometry, alignment and the shared color vocabulary for reports.
Uses ReportLab library. No drawing happens here.
"""
from enum import Enum
from typing import Dict, NamedTuple, Tuple

from reportlab.lib import colors
from reportlab.lib.colors import Color, HexColor
from reportlab.lib.enums import TA_CENTER, TA_LEFT, TA_RIGHT
from reportlab.lib.pagesizes import A4, landscape, letter, portrait

from pdftoolkit.config import Config


# ============================================================================
# PAGE CONFIGURATION
# ============================================================================

POINTS_PER_INCH = 72.0

_PAGE_SIZES = {
    "letter": letter,
    "a4": A4,
}

# Letter is the most common case, and is used for scaling/clipping/etc.
PAGE_SIZE = _PAGE_SIZES.get(Config.PDF_PAGE_SIZE, letter)
PORTRAIT_PAGE_SIZE: Tuple[float, float] = portrait(PAGE_SIZE)
LANDSCAPE_PAGE_SIZE: Tuple[float, float] = landscape(PAGE_SIZE)

PORTRAIT_LEFT_MARGIN = 0.75 * POINTS_PER_INCH
PORTRAIT_TOP_MARGIN = 0.75 * POINTS_PER_INCH
PORTRAIT_RIGHT_MARGIN = 0.5 * POINTS_PER_INCH
PORTRAIT_BOTTOM_MARGIN = 1.0 * POINTS_PER_INCH

LANDSCAPE_LEFT_MARGIN = 0.75 * POINTS_PER_INCH
LANDSCAPE_TOP_MARGIN = 0.75 * POINTS_PER_INCH
LANDSCAPE_RIGHT_MARGIN = 0.5 * POINTS_PER_INCH
LANDSCAPE_BOTTOM_MARGIN = 1.0 * POINTS_PER_INCH

PORTRAIT_PAGE_LAYOUT_WIDTH = PORTRAIT_PAGE_SIZE[0] - PORTRAIT_LEFT_MARGIN - PORTRAIT_RIGHT_MARGIN
PORTRAIT_PAGE_LAYOUT_HEIGHT = PORTRAIT_PAGE_SIZE[1] - PORTRAIT_TOP_MARGIN - PORTRAIT_BOTTOM_MARGIN

LANDSCAPE_PAGE_LAYOUT_WIDTH = LANDSCAPE_PAGE_SIZE[0] - LANDSCAPE_LEFT_MARGIN - LANDSCAPE_RIGHT_MARGIN
LANDSCAPE_PAGE_LAYOUT_HEIGHT = LANDSCAPE_PAGE_SIZE[1] - LANDSCAPE_TOP_MARGIN - LANDSCAPE_BOTTOM_MARGIN


class PageGeometry(NamedTuple):
    """Margins and usable layout area of one page orientation."""
    page_size: Tuple[float, float]
    left_margin: float
    top_margin: float
    right_margin: float
    bottom_margin: float
    layout_width: float
    layout_height: float


PORTRAIT_GEOMETRY = PageGeometry(
    PORTRAIT_PAGE_SIZE,
    PORTRAIT_LEFT_MARGIN,
    PORTRAIT_TOP_MARGIN,
    PORTRAIT_RIGHT_MARGIN,
    PORTRAIT_BOTTOM_MARGIN,
    PORTRAIT_PAGE_LAYOUT_WIDTH,
    PORTRAIT_PAGE_LAYOUT_HEIGHT,
)

LANDSCAPE_GEOMETRY = PageGeometry(
    LANDSCAPE_PAGE_SIZE,
    LANDSCAPE_LEFT_MARGIN,
    LANDSCAPE_TOP_MARGIN,
    LANDSCAPE_RIGHT_MARGIN,
    LANDSCAPE_BOTTOM_MARGIN,
    LANDSCAPE_PAGE_LAYOUT_WIDTH,
    LANDSCAPE_PAGE_LAYOUT_HEIGHT,
)


def get_page_geometry(landscape_mode: bool) -> PageGeometry:
    return LANDSCAPE_GEOMETRY if landscape_mode else PORTRAIT_GEOMETRY


def page_size_for(landscape_mode: bool) -> Tuple[float, float]:
    return LANDSCAPE_PAGE_SIZE if landscape_mode else PORTRAIT_PAGE_SIZE


# ============================================================================
# ALIGNMENT
# ============================================================================

class Align(Enum):
    """Horizontal text alignment for paragraphs and table cells."""
    LEFT = "LEFT"
    CENTER = "CENTER"
    RIGHT = "RIGHT"

    @property
    def paragraph_alignment(self) -> int:
        return {Align.LEFT: TA_LEFT, Align.CENTER: TA_CENTER, Align.RIGHT: TA_RIGHT}[self]

    @property
    def table_alignment(self) -> str:
        return self.value


# ============================================================================
# COLOR PALETTE
# ============================================================================

# Custom colors that get used more than once.
BRIGHTYELLOW = HexColor(0xFFFF0A)
BURGUNDY = HexColor(0x3E1010)
DARKROYALBLUE = HexColor(0x3E5697)
DARKSKYBLUE = HexColor(0x216FE1)
DIMBURGUNDY = HexColor(0x621818)
GRAY15 = HexColor(0x272727)
GRAY25 = HexColor(0x404040)
GRAY30 = HexColor(0x4D4D4D)
GRAY85 = HexColor(0xD8D8D8)
LIGHTBURGUNDY = HexColor(0xDE1010)
RUST = HexColor(0x621818)

COLORS: Dict[str, Color] = {
    "brightyellow": BRIGHTYELLOW,
    "burgundy": BURGUNDY,
    "darkroyalblue": DARKROYALBLUE,
    "darkskyblue": DARKSKYBLUE,
    "dimburgundy": DIMBURGUNDY,
    "gray15": GRAY15,
    "gray25": GRAY25,
    "gray30": GRAY30,
    "gray85": GRAY85,
    "lightburgundy": LIGHTBURGUNDY,
    "rust": RUST,
    "white": colors.white,
    "black": colors.black,
}


class ColorPair(NamedTuple):
    background: Color
    foreground: Color


# Semantic roles, so every report colors the same state the same way.
ROLE_COLORS: Dict[str, ColorPair] = {
    "table_header": ColorPair(DARKROYALBLUE, colors.white),
    "table_label": ColorPair(colors.pink, colors.black),

    # Polarity "normal" and "reversed"
    "polarity_normal": ColorPair(GRAY15, colors.white),
    "polarity_reversed": ColorPair(GRAY85, colors.black),

    # Mute switch
    "unmuted": ColorPair(DIMBURGUNDY, colors.white),
    "muted": ColorPair(colors.red, colors.white),

    # Visibility
    "visible": ColorPair(BRIGHTYELLOW, colors.blue),
    "hidden": ColorPair(colors.blue, BRIGHTYELLOW),

    "enabled": ColorPair(colors.olive, colors.white),
    "bypassed": ColorPair(BRIGHTYELLOW, colors.black),
    "not_applicable": ColorPair(BRIGHTYELLOW, colors.black),

    # Array groups and array types
    "array_processing_inactive": ColorPair(GRAY30, colors.white),
    "array_processing_active": ColorPair(DARKSKYBLUE, colors.white),

    "processing_enabled": ColorPair(colors.olive, colors.white),
    "processing_bypassed": ColorPair(BRIGHTYELLOW, colors.black),

    "output_channel_unassigned": ColorPair(GRAY30, colors.white),
    "output_channel_assigned": ColorPair(DARKSKYBLUE, colors.white),

    # Associated Outputs status
    "associated_outputs_ok": ColorPair(colors.white, colors.black),
    "associated_outputs_warning": ColorPair(colors.olive, colors.white),
    "associated_outputs_error": ColorPair(RUST, colors.white),
}

TABLE_HEADER_COLORS = ROLE_COLORS["table_header"]
TABLE_LABEL_COLORS = ROLE_COLORS["table_label"]

# Pull-Back Load Status (foreground only)
PULL_BACK_LOAD_STATUS_OK = colors.green
PULL_BACK_LOAD_STATUS_FAIL = LIGHTBURGUNDY


def get_role_colors(role: str) -> ColorPair:
    """Get the background/foreground pair for a semantic role.

    Raises:
        KeyError: if the role is not defined.
    """
    try:
        return ROLE_COLORS[role]
    except KeyError:
        raise KeyError(f"Unknown color role: {role!r}") from None
