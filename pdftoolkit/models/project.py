"""
Project Report Inputs.

Plain data describing the product that writes a report and the project the
report is about. NO LOGIC IMPLEMENTED — structure only.
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class ProductBranding:
    """Identity of the application that exports the report."""
    product_name: str
    product_version: str = ""
    vendor_name: str = ""


@dataclass
class ProjectProperties:
    """Project Properties shown on the front page of a Project Report."""
    project_name: str
    venue: str = ""
    designer: str = ""
    date: str = ""
    use_project_notes: bool = False
    project_notes: str = ""  # multi-line, any newline convention
