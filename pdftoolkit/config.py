import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file if it exists
load_dotenv()

# Base directory
BASE_DIR = Path(__file__).parent.parent

class Config:
    # --- Page Settings ---
    PDF_PAGE_SIZE = os.getenv("PDF_PAGE_SIZE", "letter").lower()

    # --- Document Settings ---
    # PDF_A_1B embeds every font, NONE falls back to the core fonts
    PDF_COMPLIANCE = os.getenv("PDF_COMPLIANCE", "PDF_A_1B").upper()

    # Directory holding the DejaVuSans TTF files (empty: use matplotlib's copy)
    PDF_FONT_DIR = os.getenv("PDF_FONT_DIR", "")

    # --- Images ---
    PDF_IMAGE_DPI = int(os.getenv("PDF_IMAGE_DPI", "150"))

    # --- Tables ---
    PDF_CELL_PADDING = float(os.getenv("PDF_CELL_PADDING", "4.0"))

    # --- Legal ---
    PDF_PRIVACY_CLAUSE = os.getenv(
        "PDF_PRIVACY_CLAUSE",
        "This document is for discussion and/or bid purposes only.",
    )
