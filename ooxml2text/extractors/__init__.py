"""
Office Open XML Extractor Package
=================================

Plain-text extractors for the three Office Open XML formats. All of them read
the package with the forward-only ZipStreamReader and fold the parts through
the namespace-agnostic XML tokenizer in ``extractors.util``.

.docx: paragraphs of word/document.xml, one per line
.xlsx: one "Sheet N:" block per worksheet, cells tab-separated
.pptx: one "Slide N:" block per slide, runs space-separated

Usage Example
-------------
    >>> from ooxml2text.extractors import read_docx
    >>> with open("report.docx", "rb") as f:
    ...     print(read_docx(f))
"""

from ooxml2text.extractors.docx_extractor import read_docx
from ooxml2text.extractors.pptx_extractor import read_pptx
from ooxml2text.extractors.xlsx_extractor import read_xlsx

__all__ = [
    "read_docx",
    "read_pptx",
    "read_xlsx",
]
