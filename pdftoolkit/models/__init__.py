from .results import RenderResult
from .project import ProductBranding, ProjectProperties

__all__ = [
    "RenderResult",
    "ProductBranding",
    "ProjectProperties",
]
