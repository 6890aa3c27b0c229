"""
Report branding strings shared by the header and footer of every report.
"""
import locale as locale_module
from typing import Optional

from pdftoolkit.config import Config
from pdftoolkit.models.project import ProductBranding


def get_report_title(product_branding: ProductBranding, report_subtitle: str) -> str:
    return f"{product_branding.product_name} - {report_subtitle}"


def get_privacy_clause() -> str:
    return Config.PDF_PRIVACY_CLAUSE


def get_saved_from(product_branding: ProductBranding, locale: Optional[str] = None) -> str:
    """Name/version of the exporting program plus the user locale.

    Args:
        product_branding: Exporting product
        locale: Locale tag such as "en_US"; None uses the process locale
    """
    if locale is None:
        locale = locale_module.getlocale()[0] or "en_US"

    product = " ".join(
        part for part in (product_branding.product_name, product_branding.product_version) if part
    )
    return f"Saved from {product} ({locale})"
