"""
Render Result Objects.

Operations that draw through the PDF engine report their outcome with a
RenderResult instead of returning None on failure. The failure cause travels
with the result as a PdfError.
"""
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from pdftoolkit.exceptions import PdfError


T = TypeVar("T")


@dataclass(frozen=True)
class RenderResult(Generic[T]):
    """Outcome of a single drawing or encoding operation."""
    value: Optional[T] = None
    error: Optional[PdfError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "RenderResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: PdfError) -> "RenderResult[T]":
        return cls(error=error)

    def unwrap(self) -> T:
        """Return the value, or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.value
