import io
import logging
import unittest
import zipfile
from unittest.mock import MagicMock

import pytest

import ooxml2text
from ooxml2text.exceptions import ExtractionFileFormatNotSupportedError
from ooxml2text.extractors.docx_extractor import read_docx
from ooxml2text.extractors.pptx_extractor import read_pptx
from ooxml2text.extractors.xlsx_extractor import read_xlsx
from ooxml2text.mime_types import (
    DOCX_CONTENT_TYPE,
    PPTX_CONTENT_TYPE,
    XLSX_CONTENT_TYPE,
    DocumentKind,
    classify,
    content_type_for_kind,
    guess_content_type,
    is_supported_content_type,
    suggested_extension,
    suggested_filename,
)
from ooxml2text.router import UNSUPPORTED_FORMAT_MESSAGE, extract_text, get_extractor

logger = logging.getLogger(__name__)

tc = unittest.TestCase()


def _docx_bytes(text: str) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        zf.writestr(
            "word/document.xml",
            f"<w:document><w:body><w:p><w:r><w:t>{text}</w:t></w:r></w:p></w:body></w:document>",
        )
    return buffer.getvalue()


def test_classify():
    tc.assertEqual(DocumentKind.WORD_DOCUMENT, classify(DOCX_CONTENT_TYPE))
    tc.assertEqual(DocumentKind.SPREADSHEET, classify(XLSX_CONTENT_TYPE))
    tc.assertEqual(DocumentKind.PRESENTATION, classify(PPTX_CONTENT_TYPE))

    tc.assertEqual(DocumentKind.UNSUPPORTED, classify("application/pdf"))
    tc.assertEqual(DocumentKind.UNSUPPORTED, classify("application/msword"))
    tc.assertEqual(DocumentKind.UNSUPPORTED, classify(""))
    tc.assertEqual(DocumentKind.UNSUPPORTED, classify(None))
    # exact match only
    tc.assertEqual(DocumentKind.UNSUPPORTED, classify(DOCX_CONTENT_TYPE.upper()))
    tc.assertEqual(
        DocumentKind.UNSUPPORTED, classify(DOCX_CONTENT_TYPE + "; charset=binary")
    )


def test_is_supported_content_type():
    tc.assertTrue(is_supported_content_type(DOCX_CONTENT_TYPE))
    tc.assertTrue(is_supported_content_type(XLSX_CONTENT_TYPE))
    tc.assertTrue(is_supported_content_type(PPTX_CONTENT_TYPE))
    tc.assertFalse(is_supported_content_type("text/plain"))
    tc.assertFalse(is_supported_content_type(None))


def test_router():
    tc.assertEqual(read_docx, get_extractor(DocumentKind.WORD_DOCUMENT))
    tc.assertEqual(read_xlsx, get_extractor(DocumentKind.SPREADSHEET))
    tc.assertEqual(read_pptx, get_extractor(DocumentKind.PRESENTATION))

    with pytest.raises(RuntimeError):
        get_extractor(DocumentKind.UNSUPPORTED)


def test_unsupported_content_type_does_not_read_stream():
    stream = MagicMock()

    tc.assertEqual(UNSUPPORTED_FORMAT_MESSAGE, extract_text(stream, "application/pdf"))
    tc.assertEqual(UNSUPPORTED_FORMAT_MESSAGE, extract_text(stream, None))
    stream.read.assert_not_called()


def test_extract_text_dispatches_on_content_type():
    data = _docx_bytes("routed")

    tc.assertEqual("routed", extract_text(io.BytesIO(data), DOCX_CONTENT_TYPE))
    # a DOCX package read as a presentation simply has no slides
    tc.assertEqual("", extract_text(io.BytesIO(data), PPTX_CONTENT_TYPE))


def test_suggested_filenames():
    tc.assertEqual("document.docx", suggested_filename(DocumentKind.WORD_DOCUMENT))
    tc.assertEqual("workbook.xlsx", suggested_filename(DocumentKind.SPREADSHEET))
    tc.assertEqual("presentation.pptx", suggested_filename(DocumentKind.PRESENTATION))
    tc.assertEqual("document.docx", suggested_filename(DocumentKind.UNSUPPORTED))

    tc.assertEqual(".xlsx", suggested_extension(DocumentKind.SPREADSHEET))
    tc.assertEqual(".docx", suggested_extension(DocumentKind.UNSUPPORTED))


def test_content_type_for_kind():
    tc.assertEqual(XLSX_CONTENT_TYPE, content_type_for_kind(DocumentKind.SPREADSHEET))
    tc.assertEqual(PPTX_CONTENT_TYPE, content_type_for_kind(DocumentKind.PRESENTATION))
    tc.assertEqual(DOCX_CONTENT_TYPE, content_type_for_kind(DocumentKind.UNSUPPORTED))


def test_guess_content_type():
    tc.assertEqual(DOCX_CONTENT_TYPE, guess_content_type("report.docx"))
    tc.assertEqual(XLSX_CONTENT_TYPE, guess_content_type("/tmp/Numbers.XLSX"))
    tc.assertEqual(PPTX_CONTENT_TYPE, guess_content_type("deck.pptx"))
    tc.assertEqual("application/pdf", guess_content_type("paper.pdf"))
    tc.assertIsNone(guess_content_type("no_extension"))


def test_read_file_guesses_content_type(tmp_path):
    path = tmp_path / "memo.docx"
    path.write_bytes(_docx_bytes("from disk"))

    tc.assertEqual("from disk", ooxml2text.read_file(path))


def test_read_file_with_explicit_content_type(tmp_path):
    path = tmp_path / "memo.bin"
    path.write_bytes(_docx_bytes("explicit"))

    tc.assertEqual(
        "explicit", ooxml2text.read_file(str(path), content_type=DOCX_CONTENT_TYPE)
    )


def test_read_file_unsupported_extension(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("plain", encoding="utf-8")

    with pytest.raises(ExtractionFileFormatNotSupportedError) as exc_info:
        ooxml2text.read_file(path)

    tc.assertEqual(str(path), exc_info.value.file_path)
