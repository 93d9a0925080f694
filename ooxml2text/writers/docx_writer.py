"""
Minimal DOCX Writer
===================

Builds the smallest package Word accepts from plain text: four static parts
plus a generated main document with one paragraph per input line.

Package layout (entries written in this order):

    [Content_Types].xml
    _rels/.rels
    word/_rels/document.xml.rels
    word/styles.xml
    word/document.xml

Reading the result back with read_docx returns the input text, except that
blank lines before the first non-empty line are dropped (empty paragraphs do
not start a line until some text exists) and "\\r\\n" / "\\r" come back as
"\\n".
"""

import io
import logging
import re
import zipfile
from pathlib import Path
from xml.sax.saxutils import escape

logger = logging.getLogger(__name__)

CONTENT_TYPES_PATH = "[Content_Types].xml"
PACKAGE_RELS_PATH = "_rels/.rels"
DOCUMENT_RELS_PATH = "word/_rels/document.xml.rels"
STYLES_PATH = "word/styles.xml"
DOCUMENT_PATH = "word/document.xml"

CONTENT_TYPES_XML = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">
  <Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>
  <Default Extension="xml" ContentType="application/xml"/>
  <Override PartName="/word/document.xml" ContentType="application/vnd.openxmlformats-officedocument.wordprocessingml.document.main+xml"/>
  <Override PartName="/word/styles.xml" ContentType="application/vnd.openxmlformats-officedocument.wordprocessingml.styles+xml"/>
</Types>"""

PACKAGE_RELS_XML = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">
  <Relationship Id="rId1" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/officeDocument" Target="word/document.xml"/>
</Relationships>"""

DOCUMENT_RELS_XML = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">
  <Relationship Id="rId1" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/styles" Target="styles.xml"/>
</Relationships>"""

STYLES_XML = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<w:styles xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main">
  <w:style w:type="paragraph" w:default="1" w:styleId="Normal">
    <w:name w:val="Normal"/>
  </w:style>
</w:styles>"""

DOCUMENT_HEADER = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
    '<w:document xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main"'
    ' xmlns:r="http://schemas.openxmlformats.org/officeDocument/2006/relationships">'
    "<w:body>"
)

# US Letter, 1 inch margins (twentieths of a point)
SECTION_PROPERTIES = (
    '<w:sectPr><w:pgSz w:w="12240" w:h="15840"/>'
    '<w:pgMar w:top="1440" w:right="1440" w:bottom="1440" w:left="1440"/></w:sectPr>'
)

DOCUMENT_FOOTER = "</w:body></w:document>"

PARAGRAPH_TEMPLATE = '<w:p><w:r><w:t xml:space="preserve">{}</w:t></w:r></w:p>'

_QUOTE_ENTITIES = {'"': "&quot;", "'": "&apos;"}

# Characters XML 1.0 does not allow, even escaped
_INVALID_XML_CHARS = re.compile(
    "[\x00-\x08\x0b\x0c\x0e-\x1f\U0000d800-\U0000dfff\U0000fffe\U0000ffff]"
)


def escape_xml(text: str) -> str:
    """Escape the five XML special characters ``& < > " '``."""
    return escape(text, _QUOTE_ENTITIES)


def build_document_xml(text: str) -> str:
    """Generate word/document.xml with one paragraph per line of ``text``."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _INVALID_XML_CHARS.sub("", text)
    paragraphs = "".join(
        PARAGRAPH_TEMPLATE.format(escape_xml(line)) for line in text.split("\n")
    )
    return DOCUMENT_HEADER + paragraphs + SECTION_PROPERTIES + DOCUMENT_FOOTER


def write_docx(text: str) -> bytes:
    """
    Serialize plain text into a minimal DOCX package.

    Args:
        text: The document text; every "\\n" starts a new paragraph.

    Returns:
        The bytes of the ZIP package.
    """
    parts = (
        (CONTENT_TYPES_PATH, CONTENT_TYPES_XML),
        (PACKAGE_RELS_PATH, PACKAGE_RELS_XML),
        (DOCUMENT_RELS_PATH, DOCUMENT_RELS_XML),
        (STYLES_PATH, STYLES_XML),
        (DOCUMENT_PATH, build_document_xml(text)),
    )
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, xml in parts:
            zf.writestr(name, xml.encode("utf-8"))
    data = buffer.getvalue()
    logger.info("Wrote DOCX package: %d bytes", len(data))
    return data


def save_docx(text: str, path: str | Path) -> Path:
    """Write ``text`` as a DOCX package to ``path`` and return the path."""
    path = Path(path)
    path.write_bytes(write_docx(text))
    logger.debug(f"Saved DOCX to [{path}]")
    return path
