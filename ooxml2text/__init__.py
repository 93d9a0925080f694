"""
ooxml2text: plain text in and out of Office Open XML packages.

Extracts readable text from .docx, .xlsx and .pptx files with a forward-only
ZIP reader and a namespace-agnostic XML tokenizer, and writes edited plain
text back out as a minimal .docx package.
"""

from pathlib import Path
from typing import BinaryIO

from ooxml2text.exceptions import ExtractionFileFormatNotSupportedError
from ooxml2text.extractors.util.zip_bomb import DEFAULT_ZIP_BOMB_LIMITS, ZipBombLimits
from ooxml2text.mime_types import (
    DocumentKind,
    classify,
    guess_content_type,
    is_supported_content_type,
    suggested_extension,
    suggested_filename,
)
from ooxml2text.router import UNSUPPORTED_FORMAT_MESSAGE, extract_text, get_extractor

__version__ = "0.1.0"


def read_docx(
    file_like: BinaryIO, *, limits: ZipBombLimits = DEFAULT_ZIP_BOMB_LIMITS
) -> str:
    """Extract the text of a DOCX package."""
    from ooxml2text.extractors.docx_extractor import read_docx as _read_docx

    return _read_docx(file_like, limits=limits)


def read_xlsx(
    file_like: BinaryIO, *, limits: ZipBombLimits = DEFAULT_ZIP_BOMB_LIMITS
) -> str:
    """Extract the text of an XLSX package."""
    from ooxml2text.extractors.xlsx_extractor import read_xlsx as _read_xlsx

    return _read_xlsx(file_like, limits=limits)


def read_pptx(
    file_like: BinaryIO, *, limits: ZipBombLimits = DEFAULT_ZIP_BOMB_LIMITS
) -> str:
    """Extract the text of a PPTX package."""
    from ooxml2text.extractors.pptx_extractor import read_pptx as _read_pptx

    return _read_pptx(file_like, limits=limits)


def write_docx(text: str) -> bytes:
    """Serialize plain text into a minimal DOCX package."""
    from ooxml2text.writers.docx_writer import write_docx as _write_docx

    return _write_docx(text)


def save_docx(text: str, path: str | Path) -> Path:
    """Write plain text as a minimal DOCX package to ``path``."""
    from ooxml2text.writers.docx_writer import save_docx as _save_docx

    return _save_docx(text, path)


def read_file(path: str | Path, content_type: str | None = None) -> str:
    """
    Read and extract the text of a file.

    When no content type is given it is guessed from the file extension.

    Args:
        path: Path to the file to read.
        content_type: OOXML content type of the file, if known.

    Returns:
        The extracted text.

    Raises:
        ExtractionFileFormatNotSupportedError: The content type is not one of
            the three OOXML document types.
        FileNotFoundError: If the file does not exist.

    Example:
        >>> import ooxml2text
        >>> print(ooxml2text.read_file("report.docx"))
    """
    path = Path(path)
    if content_type is None:
        content_type = guess_content_type(str(path))
    if not is_supported_content_type(content_type):
        raise ExtractionFileFormatNotSupportedError(str(path))
    with open(path, "rb") as f:
        return extract_text(f, content_type)


__all__ = [
    # Version
    "__version__",
    # Main functions
    "read_file",
    "extract_text",
    "classify",
    "get_extractor",
    "is_supported_content_type",
    "suggested_extension",
    "suggested_filename",
    "DocumentKind",
    "UNSUPPORTED_FORMAT_MESSAGE",
    # Format-specific extractors
    "read_docx",
    "read_xlsx",
    "read_pptx",
    # Writer
    "write_docx",
    "save_docx",
]
