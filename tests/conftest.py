# Tests configuration for pdftoolkit
import pytest
import sys
from io import BytesIO
from pathlib import Path

from PIL import Image

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pdftoolkit.models.project import ProductBranding, ProjectProperties
from pdftoolkit.pdf.document import Compliance, Page, PdfDocument
from pdftoolkit.pdf.fonts import PdfFonts


@pytest.fixture
def document():
    """In-memory document using the core fonts."""
    return PdfDocument(BytesIO(), compliance=Compliance.NONE)


@pytest.fixture
def fonts(document):
    return PdfFonts(document)


@pytest.fixture
def page(document):
    """First portrait page of the document."""
    return Page(document)


@pytest.fixture
def branding():
    return ProductBranding("Stage Designer", "2.4.1", "Acme Audio")


@pytest.fixture
def properties():
    return ProjectProperties(
        project_name="Main Hall",
        venue="Civic Center",
        designer="J. Smith",
        date="2026-05-04",
    )


@pytest.fixture
def make_image():
    """Factory for solid-color Pillow images."""
    def _make(width=200, height=100, mode="RGB"):
        color = (255, 0, 0, 128) if mode == "RGBA" else (255, 0, 0)
        return Image.new(mode, (width, height), color)
    return _make
