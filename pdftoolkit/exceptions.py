class PdfError(Exception):
    """Base exception for every failure raised by the PDF toolkit."""


class FontError(PdfError):
    pass


class ImageEncodingError(PdfError):
    pass


class TableRenderError(PdfError):
    pass


class ColumnCoverageError(PdfError):
    """A table row does not provide exactly one cell per declared column."""


class PageClosedError(PdfError):
    """Drawing was attempted on a page the document has already moved past."""
