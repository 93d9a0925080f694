"""
PPTX Presentation Extractor
===========================

Extracts the text runs of Microsoft PowerPoint .pptx files (Office Open XML
format, PowerPoint 2007 and later).

    ppt/slides/slide1.xml, slide2.xml, ...: Individual slide content

All DrawingML text (``a:t``) on a slide is joined with single spaces, in
document order, regardless of which shape or placeholder holds it. Each
slide becomes a "Slide N:" block; blocks are separated by a blank line.

Slides are numbered in the order their parts appear in the package, not by
the slide list in ppt/presentation.xml.

Known Limitations
-----------------
- Speaker notes, comments and slide layouts are not extracted
- Paragraph structure inside a shape is flattened to spaces
- Chart and SmartArt text is not extracted
"""

import logging
from typing import BinaryIO

from ooxml2text.extractors.util.xml_tokens import (
    EndTag,
    StartTag,
    Text,
    iter_xml_tokens,
)
from ooxml2text.extractors.util.zip_bomb import DEFAULT_ZIP_BOMB_LIMITS, ZipBombLimits
from ooxml2text.extractors.util.zip_stream import ZipStreamReader

logger = logging.getLogger(__name__)

SLIDE_PREFIX = "ppt/slides/slide"
SLIDE_SUFFIX = ".xml"

RUN_TEXT_TAGS = frozenset({"a:t"})


def is_slide_path(path: str) -> bool:
    return path.startswith(SLIDE_PREFIX) and path.endswith(SLIDE_SUFFIX)


def extract_slide_text(data: bytes) -> str:
    """Join the non-empty ``a:t`` runs of one slide part with single spaces."""
    runs = []
    run = None
    tokens = iter_xml_tokens(data)
    try:
        for token in tokens:
            if isinstance(token, StartTag) and token.name in RUN_TEXT_TAGS:
                run = []
            elif isinstance(token, Text) and run is not None:
                run.append(token.content)
            elif isinstance(token, EndTag) and token.name in RUN_TEXT_TAGS:
                if run:
                    text = "".join(run)
                    if text:
                        runs.append(text)
                run = None
    finally:
        tokens.close()
    return " ".join(runs)


def read_pptx(
    file_like: BinaryIO, *, limits: ZipBombLimits = DEFAULT_ZIP_BOMB_LIMITS
) -> str:
    """
    Extract the slide text of a PPTX package.

    Args:
        file_like: Readable binary stream positioned at the start of the package.
        limits: ZIP-bomb limits applied while scanning the package.

    Returns:
        One "Slide N:" block per slide part, blocks separated by a blank line,
        with leading and trailing whitespace removed.

    Raises:
        ContainerFormatError: The stream is not a readable ZIP package.
        XmlFormatError: A slide part is not well-formed XML.
    """
    blocks = []
    with ZipStreamReader(file_like, limits=limits, source="read_pptx") as reader:
        for entry in reader:
            if not is_slide_path(entry.path):
                continue
            logger.debug(f"Reading slide part [{entry.path}]")
            blocks.append(
                f"Slide {len(blocks) + 1}:\n{extract_slide_text(entry.data)}"
            )

    text = "\n\n".join(blocks).strip()
    logger.info("Extracted PPTX: %d slides, %d characters", len(blocks), len(text))
    return text
