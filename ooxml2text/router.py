import logging
from typing import BinaryIO, Callable

from ooxml2text.extractors.util.zip_bomb import DEFAULT_ZIP_BOMB_LIMITS, ZipBombLimits
from ooxml2text.mime_types import DocumentKind, classify

logger = logging.getLogger(__name__)

UNSUPPORTED_FORMAT_MESSAGE = "Unsupported document format."


def get_extractor(kind: DocumentKind) -> Callable[..., str]:
    """Return the extractor function for a document kind (lazy import).

    :raises RuntimeError: The kind has no extractor (DocumentKind.UNSUPPORTED)
    """
    if kind is DocumentKind.WORD_DOCUMENT:
        from ooxml2text.extractors.docx_extractor import read_docx

        return read_docx
    elif kind is DocumentKind.SPREADSHEET:
        from ooxml2text.extractors.xlsx_extractor import read_xlsx

        return read_xlsx
    elif kind is DocumentKind.PRESENTATION:
        from ooxml2text.extractors.pptx_extractor import read_pptx

        return read_pptx
    else:
        raise RuntimeError(f"No extractor for document kind: {kind}")


def extract_text(
    file_like: BinaryIO,
    content_type: str | None,
    *,
    limits: ZipBombLimits = DEFAULT_ZIP_BOMB_LIMITS,
) -> str:
    """
    Classify ``content_type`` and extract the text of the package in ``file_like``.

    An unsupported content type returns UNSUPPORTED_FORMAT_MESSAGE without
    reading from the stream.

    :raises ContainerFormatError: The stream is not a readable ZIP package
    :raises XmlFormatError: A part needed for extraction is malformed
    """
    kind = classify(content_type)
    if kind is DocumentKind.UNSUPPORTED:
        logger.debug(f"Content type [{content_type}] is not supported")
        return UNSUPPORTED_FORMAT_MESSAGE
    logger.debug(f"Detected document kind: {kind.value} (MIME: {content_type})")
    return get_extractor(kind)(file_like, limits=limits)
