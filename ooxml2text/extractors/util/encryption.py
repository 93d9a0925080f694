"""
Detection of password-protected Office Open XML files.

An encrypted .docx/.xlsx/.pptx is not a ZIP package at all: Office wraps the
encrypted package in an OLE compound file next to an ``EncryptionInfo``
stream. The ZIP reader hands anything starting with the OLE signature to this
module so it can tell "encrypted" apart from "legacy binary format".
"""

import io
import logging

import olefile

logger = logging.getLogger(__name__)

OLE_SIGNATURE = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"

_ENCRYPTION_STREAMS = ("EncryptionInfo", "EncryptedPackage", "DataSpaces")


def is_ole_signature(head: bytes) -> bool:
    return head.startswith(OLE_SIGNATURE)


def _has_encryption_stream(ole: olefile.OleFileIO) -> bool:
    return any(ole.exists(stream) for stream in _ENCRYPTION_STREAMS)


def is_ooxml_encrypted(data: bytes) -> bool:
    """Return True if ``data`` is an OLE container holding an encrypted package."""
    file_like = io.BytesIO(data)
    if not olefile.isOleFile(file_like):
        return False
    file_like.seek(0)
    try:
        with olefile.OleFileIO(file_like) as ole:
            encrypted = _has_encryption_stream(ole)
    except OSError as exc:
        logger.debug(f"OLE container could not be inspected: {exc}")
        return False
    logger.debug(f"OLE container inspected, encrypted={encrypted}")
    return encrypted
