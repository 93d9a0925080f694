"""
XLSX Spreadsheet Extractor
==========================

Extracts cell text from Microsoft Excel .xlsx files (Office Open XML format,
Excel 2007 and later).

File Format Background
----------------------
    xl/sharedStrings.xml: Shared string table (for cell text)
    xl/worksheets/sheet1.xml, sheet2.xml, ...: Individual sheet data

Cells holding text usually store an index into the shared string table
(``<c t="s"><v>3</v></c>``); numbers, booleans and cached formula results are
stored verbatim in ``v``. Inline strings (``t="inlineStr"``) keep their text
in ``<is><t>``.

Two passes over the data:
    1. One scan of the package collects the shared string part and every
       worksheet part. openpyxl, among others, writes the shared strings after
       the worksheets, so nothing is resolved until the scan is complete.
    2. The shared string table is built, then each sheet is folded into
       tab-separated row lines.

Output
------
    Sheet 1:
    <cell>\\t<cell>...
    <cell>\\t<cell>...

    Sheet 2:
    ...

Sheets are numbered in the order their parts appear in the package, which is
not necessarily the tab order shown by Excel (that lives in
xl/workbook.xml and its relationships).

Known Limitations
-----------------
- Formulas are not extracted (only cached values)
- Dates are reported as serial numbers
- Empty cells produce no placeholder at the start of a row
"""

import logging
import re
from typing import BinaryIO, List, Optional

from ooxml2text.extractors.util.xml_tokens import (
    EndTag,
    StartTag,
    Text,
    iter_xml_tokens,
)
from ooxml2text.extractors.util.zip_bomb import DEFAULT_ZIP_BOMB_LIMITS, ZipBombLimits
from ooxml2text.extractors.util.zip_stream import ZipStreamReader

logger = logging.getLogger(__name__)

SHARED_STRINGS_PATH = "xl/sharedStrings.xml"
WORKSHEET_PREFIX = "xl/worksheets/"
WORKSHEET_SUFFIX = ".xml"

ROW_TAGS = frozenset({"row", "x:row"})
CELL_TAGS = frozenset({"c", "x:c"})
VALUE_TAGS = frozenset({"v", "x:v"})
STRING_TAGS = frozenset({"t", "x:t"})
INLINE_STRING_TAGS = frozenset({"is", "x:is"})

CELL_TYPE_ATTRIBUTE = "t"
SHARED_STRING_TYPE = "s"

# ASCII digits only; int() would also take whitespace, signs and "_"
_SHARED_STRING_INDEX = re.compile(r"[0-9]+")


def is_worksheet_path(path: str) -> bool:
    return path.startswith(WORKSHEET_PREFIX) and path.endswith(WORKSHEET_SUFFIX)


def parse_shared_strings(data: Optional[bytes]) -> List[str]:
    """Collect the text of every ``t`` element, in document order."""
    if data is None:
        return []
    strings = []
    buffer = None
    tokens = iter_xml_tokens(data)
    try:
        for token in tokens:
            if isinstance(token, StartTag) and token.name in STRING_TAGS:
                buffer = []
            elif isinstance(token, Text) and buffer is not None:
                buffer.append(token.content)
            elif isinstance(token, EndTag) and token.name in STRING_TAGS:
                if buffer is not None:
                    strings.append("".join(buffer))
                buffer = None
    finally:
        tokens.close()
    return strings


def resolve_cell_value(
    cell_type: Optional[str], raw: str, shared_strings: List[str]
) -> str:
    """
    Turn a cell's raw ``v`` text into its display value.

    Shared-string cells look their index up in the table; an index that is
    not plain ASCII digits or falls outside the table yields the raw text
    instead.
    """
    if cell_type != SHARED_STRING_TYPE:
        return raw
    if not _SHARED_STRING_INDEX.fullmatch(raw):
        return raw
    index = int(raw)
    if index < len(shared_strings):
        return shared_strings[index]
    return raw


def extract_sheet_text(data: bytes, shared_strings: List[str]) -> str:
    """Fold one worksheet part into newline-separated, tab-joined row lines."""
    rows = []
    line = []
    cell_type = None
    raw = []
    in_value = False
    in_inline_string = False
    tokens = iter_xml_tokens(data)
    try:
        for token in tokens:
            if isinstance(token, StartTag):
                if token.name in CELL_TAGS:
                    cell_type = token.attributes.get(CELL_TYPE_ATTRIBUTE)
                    raw = []
                elif token.name in VALUE_TAGS:
                    in_value = True
                    raw = []
                elif token.name in INLINE_STRING_TAGS:
                    in_inline_string = True
                elif token.name in STRING_TAGS and in_inline_string:
                    in_value = True
            elif isinstance(token, Text):
                if in_value:
                    raw.append(token.content)
            elif isinstance(token, EndTag):
                if token.name in VALUE_TAGS or token.name in STRING_TAGS:
                    in_value = False
                elif token.name in INLINE_STRING_TAGS:
                    in_inline_string = False
                elif token.name in CELL_TAGS:
                    value = resolve_cell_value(cell_type, "".join(raw), shared_strings)
                    if line or value:
                        line.append(value)
                    cell_type = None
                    raw = []
                elif token.name in ROW_TAGS:
                    if line:
                        rows.append("\t".join(line))
                        line = []
    finally:
        tokens.close()
    if line:
        rows.append("\t".join(line))
    return "\n".join(rows)


def read_xlsx(
    file_like: BinaryIO, *, limits: ZipBombLimits = DEFAULT_ZIP_BOMB_LIMITS
) -> str:
    """
    Extract the cell text of an XLSX package.

    Args:
        file_like: Readable binary stream positioned at the start of the package.
        limits: ZIP-bomb limits applied while scanning the package.

    Returns:
        One "Sheet N:" block per worksheet, blocks separated by a blank line,
        with leading and trailing whitespace removed.

    Raises:
        ContainerFormatError: The stream is not a readable ZIP package.
        XmlFormatError: A shared string or worksheet part is not well-formed.
    """
    shared_strings_data = None
    sheets = []
    with ZipStreamReader(file_like, limits=limits, source="read_xlsx") as reader:
        for entry in reader:
            if entry.path == SHARED_STRINGS_PATH:
                shared_strings_data = entry.data
            elif is_worksheet_path(entry.path):
                logger.debug(f"Found worksheet part [{entry.path}]")
                sheets.append(entry.data)

    shared_strings = parse_shared_strings(shared_strings_data)
    logger.debug(f"Shared string table holds {len(shared_strings)} strings")

    blocks = []
    for index, sheet in enumerate(sheets, start=1):
        blocks.append(f"Sheet {index}:\n{extract_sheet_text(sheet, shared_strings)}\n")

    text = "\n".join(blocks).strip()
    logger.info("Extracted XLSX: %d sheets, %d characters", len(sheets), len(text))
    return text
