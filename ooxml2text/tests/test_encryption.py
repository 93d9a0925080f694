from unittest import TestCase
from unittest.mock import MagicMock, patch

from ooxml2text.extractors.util import encryption
from ooxml2text.extractors.util.encryption import (
    OLE_SIGNATURE,
    is_ole_signature,
    is_ooxml_encrypted,
)

tc = TestCase()


def _fake_ole(*streams: str) -> MagicMock:
    ole = MagicMock()
    ole.__enter__.return_value = ole
    ole.exists.side_effect = lambda name: name in streams
    return ole


def test_is_ole_signature() -> None:
    tc.assertTrue(is_ole_signature(OLE_SIGNATURE + b"rest"))
    tc.assertFalse(is_ole_signature(b"PK\x03\x04"))
    tc.assertFalse(is_ole_signature(b""))


def test_zip_bytes_are_not_encrypted() -> None:
    tc.assertFalse(is_ooxml_encrypted(b"PK\x03\x04" + b"\x00" * 600))


def test_encryption_info_stream_marks_package_encrypted() -> None:
    with patch.object(encryption.olefile, "isOleFile", return_value=True), patch.object(
        encryption.olefile,
        "OleFileIO",
        return_value=_fake_ole("EncryptionInfo", "EncryptedPackage"),
    ):
        tc.assertTrue(is_ooxml_encrypted(OLE_SIGNATURE + b"\x00" * 600))


def test_legacy_ole_document_is_not_encrypted() -> None:
    with patch.object(encryption.olefile, "isOleFile", return_value=True), patch.object(
        encryption.olefile, "OleFileIO", return_value=_fake_ole("WordDocument")
    ):
        tc.assertFalse(is_ooxml_encrypted(OLE_SIGNATURE + b"\x00" * 600))


def test_unreadable_ole_container_is_not_encrypted() -> None:
    with patch.object(encryption.olefile, "isOleFile", return_value=True), patch.object(
        encryption.olefile, "OleFileIO", side_effect=OSError("bad sector")
    ):
        tc.assertFalse(is_ooxml_encrypted(OLE_SIGNATURE + b"\x00" * 600))
