"""
Forward-only XML pull tokenizer for package parts.

Tag names are reported exactly as spelled in the document. Namespaces are not
resolved because producers disagree on whether parts carry prefixes, so
callers match against small alias sets such as ``{"t", "w:t"}``.
"""

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Dict, Generator, Iterator, Union
from xml.parsers import expat

from ooxml2text.exceptions import XmlFormatError

CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class StartTag:
    name: str
    attributes: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class EndTag:
    name: str


@dataclass(frozen=True)
class Text:
    content: str


@dataclass(frozen=True)
class EndOfDocument:
    pass


XmlToken = Union[StartTag, EndTag, Text, EndOfDocument]


def _reject_doctype(doctype_name, system_id, public_id, has_internal_subset):
    raise XmlFormatError(f"Document type declarations are not allowed ({doctype_name})")


def iter_xml_tokens(
    data: bytes, chunk_size: int = CHUNK_SIZE
) -> Generator[XmlToken, Any, None]:
    """
    Tokenize ``data`` lazily, yielding events as each chunk is parsed.

    The sequence always ends with one EndOfDocument. Character data may be
    split over several consecutive Text tokens.

    Raises:
        XmlFormatError: The buffer is empty or not well-formed, or it
            declares a DOCTYPE.
    """
    # No namespace_separator: expat then leaves "w:t" as "w:t"
    parser = expat.ParserCreate()
    parser.buffer_text = True
    pending: deque = deque()
    parser.StartElementHandler = lambda name, attrs: pending.append(
        StartTag(name, attrs)
    )
    parser.EndElementHandler = lambda name: pending.append(EndTag(name))
    parser.CharacterDataHandler = lambda content: pending.append(Text(content))
    parser.StartDoctypeDeclHandler = _reject_doctype

    def feed(chunk: bytes, final: bool) -> None:
        try:
            parser.Parse(chunk, final)
        except expat.ExpatError as exc:
            raise XmlFormatError(
                f"Malformed XML: {expat.ErrorString(exc.code)}",
                line=exc.lineno,
                column=exc.offset,
                cause=exc,
            ) from exc

    for offset in range(0, len(data), chunk_size):
        feed(data[offset : offset + chunk_size], False)
        while pending:
            yield pending.popleft()
    feed(b"", True)
    while pending:
        yield pending.popleft()
    yield EndOfDocument()


def read_element_text(tokens: Iterator[XmlToken], name: str) -> str:
    """
    Consume tokens up to the end tag closing ``name`` and return its text.

    Must be called right after the StartTag for ``name`` was taken from
    ``tokens``. Text of nested elements is included.
    """
    parts = []
    depth = 0
    for token in tokens:
        if isinstance(token, Text):
            parts.append(token.content)
        elif isinstance(token, StartTag):
            if token.name == name:
                depth += 1
        elif isinstance(token, EndTag):
            if token.name == name:
                if depth == 0:
                    return "".join(parts)
                depth -= 1
        else:
            break
    raise XmlFormatError(f"Element <{name}> is not closed")
