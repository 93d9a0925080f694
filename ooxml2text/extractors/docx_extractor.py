"""
DOCX Document Extractor
=======================

Extracts the plain text of Microsoft Word .docx files (Office Open XML,
Word 2007 and later).

Only the main document part is read:

    word/document.xml: Main document body (paragraphs, tables)

Text is assembled from ``w:t`` runs. Every ``w:p`` start tag begins a new
line, but only once some text has been produced, so leading empty paragraphs
do not turn into leading blank lines. Nothing is appended after the last
paragraph; trailing empty paragraphs therefore show up as trailing newlines.

A package without ``word/document.xml`` is not an error and yields "".

Known Limitations
-----------------
- Headers, footers, footnotes and comments are not extracted
- Tabs and breaks (w:tab, w:br) are dropped
- Table cells are flattened into paragraphs in document order
"""

import logging
from typing import BinaryIO

from ooxml2text.extractors.util.xml_tokens import (
    StartTag,
    iter_xml_tokens,
    read_element_text,
)
from ooxml2text.extractors.util.zip_bomb import DEFAULT_ZIP_BOMB_LIMITS, ZipBombLimits
from ooxml2text.extractors.util.zip_stream import ZipStreamReader

logger = logging.getLogger(__name__)

DOCUMENT_PATH = "word/document.xml"

PARAGRAPH_TAGS = frozenset({"p", "w:p"})
TEXT_TAGS = frozenset({"t", "w:t"})


def extract_document_text(data: bytes) -> str:
    """Fold the token stream of a document part into plain text."""
    parts = []
    has_text = False
    tokens = iter_xml_tokens(data)
    try:
        for token in tokens:
            if not isinstance(token, StartTag):
                continue
            if token.name in TEXT_TAGS:
                text = read_element_text(tokens, token.name)
                if text:
                    parts.append(text)
                    has_text = True
            elif token.name in PARAGRAPH_TAGS and has_text:
                parts.append("\n")
    finally:
        tokens.close()
    return "".join(parts)


def read_docx(
    file_like: BinaryIO, *, limits: ZipBombLimits = DEFAULT_ZIP_BOMB_LIMITS
) -> str:
    """
    Extract the plain text of a DOCX package.

    Args:
        file_like: Readable binary stream positioned at the start of the package.
        limits: ZIP-bomb limits applied while scanning the package.

    Returns:
        The document text with "\\n" between paragraphs, or "" when the
        package has no main document part.

    Raises:
        ContainerFormatError: The stream is not a readable ZIP package.
        XmlFormatError: The document part is not well-formed XML.
    """
    with ZipStreamReader(file_like, limits=limits, source="read_docx") as reader:
        for entry in reader:
            if entry.path == DOCUMENT_PATH:
                text = extract_document_text(entry.data)
                logger.info("Extracted DOCX: %d characters", len(text))
                return text

    logger.debug(f"No [{DOCUMENT_PATH}] in package, returning empty text")
    return ""
