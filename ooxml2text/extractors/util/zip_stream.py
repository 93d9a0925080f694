"""
Forward-Only ZIP Reader
=======================

Streams the entries of a ZIP package by walking its local file headers from
the first byte to the central directory, without ever seeking. The central
directory itself is not consulted, so the reader works on sockets, pipes and
other non-seekable streams.

Supported:
    - stored (0) and deflated (8) entries
    - trailing data descriptors on deflated entries (general purpose bit 3),
      with or without the optional ``PK\\x07\\x08`` signature
    - ZIP64 sizes from the local extra field
    - UTF-8 (bit 11) and cp437 file names

Not supported:
    - encrypted entries (raises ExtractionFileEncryptedError)
    - other compression methods (bzip2, lzma, ...)
    - stored entries followed by a data descriptor, whose end cannot be found
      without the central directory

Every entry is CRC-checked and accounted against ZipBombLimits while it is
decompressed.
"""

import io
import logging
import struct
import zlib
from dataclasses import dataclass
from typing import Any, BinaryIO, Generator, Optional, Tuple

from ooxml2text.exceptions import ContainerFormatError, ExtractionFileEncryptedError
from ooxml2text.extractors.util.encryption import is_ole_signature, is_ooxml_encrypted
from ooxml2text.extractors.util.zip_bomb import (
    DEFAULT_ZIP_BOMB_LIMITS,
    ZipBombGuard,
    ZipBombLimits,
)

__all__ = [
    "ZipEntry",
    "ZipStreamReader",
    "iter_zip_entries",
]

logger = logging.getLogger(__name__)

LOCAL_FILE_HEADER = b"PK\x03\x04"
DATA_DESCRIPTOR = b"PK\x07\x08"
SPANNED_MARKER = b"PK00"

# Any of these after the last entry marks the end of the entry data
END_SIGNATURES = frozenset(
    {
        b"PK\x01\x02",  # central directory file header
        b"PK\x05\x06",  # end of central directory
        b"PK\x06\x06",  # zip64 end of central directory
        b"PK\x06\x07",  # zip64 end of central directory locator
        b"PK\x05\x05",  # digital signature
        b"PK\x06\x08",  # archive extra data
    }
)

# version, flags, method, mtime, mdate, crc32, compressed, uncompressed,
# name length, extra length
_LOCAL_HEADER = struct.Struct("<HHHHHIIIHH")
_EXTRA_HEADER = struct.Struct("<HH")

FLAG_ENCRYPTED = 0x0001
FLAG_DATA_DESCRIPTOR = 0x0008
FLAG_UTF8 = 0x0800

METHOD_STORED = 0
METHOD_DEFLATED = 8

ZIP64_EXTRA_ID = 0x0001
ZIP64_MARKER = 0xFFFFFFFF

CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class ZipEntry:
    """One non-directory entry of a package, fully decompressed."""

    path: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    def open(self) -> io.BytesIO:
        return io.BytesIO(self.data)


class _ByteSource:
    """Exact reads with push-back over a forward-only stream."""

    def __init__(self, stream: BinaryIO):
        self._stream = stream
        self._pending = b""
        self.offset = 0

    def read(self, n: int) -> bytes:
        if self._pending:
            data = self._pending[:n]
            self._pending = self._pending[n:]
        else:
            data = self._stream.read(n) or b""
        self.offset += len(data)
        return data

    def read_exact(self, n: int, what: str) -> bytes:
        chunks = []
        remaining = n
        while remaining > 0:
            data = self.read(remaining)
            if not data:
                raise ContainerFormatError(
                    f"Truncated ZIP archive: stream ended while reading {what} "
                    f"(offset {self.offset}, {remaining} bytes missing)"
                )
            chunks.append(data)
            remaining -= len(data)
        return b"".join(chunks)

    def read_upto(self, n: int) -> bytes:
        """Read up to n bytes, returning fewer only at end of stream."""
        chunks = []
        remaining = n
        while remaining > 0:
            data = self.read(remaining)
            if not data:
                break
            chunks.append(data)
            remaining -= len(data)
        return b"".join(chunks)

    def read_rest(self) -> bytes:
        rest = self._pending + (self._stream.read() or b"")
        self._pending = b""
        self.offset += len(rest)
        return rest

    def unread(self, data: bytes) -> None:
        self._pending = data + self._pending
        self.offset -= len(data)


def _read_zip64_sizes(
    path: str, extra: bytes, uncompressed: int, compressed: int
) -> Tuple[int, int]:
    """Resolve saturated 32-bit sizes from the ZIP64 extended information field."""
    pos = 0
    while pos + _EXTRA_HEADER.size <= len(extra):
        header_id, size = _EXTRA_HEADER.unpack_from(extra, pos)
        pos += _EXTRA_HEADER.size
        block = extra[pos : pos + size]
        pos += size
        if header_id != ZIP64_EXTRA_ID:
            continue
        values = [v for (v,) in struct.iter_unpack("<Q", block[: len(block) // 8 * 8])]
        if uncompressed == ZIP64_MARKER:
            if not values:
                break
            uncompressed = values.pop(0)
        if compressed == ZIP64_MARKER:
            if not values:
                break
            compressed = values.pop(0)
        return uncompressed, compressed
    raise ContainerFormatError(f"ZIP entry {path} has ZIP64 sizes but no valid ZIP64 field")


def _has_zip64_field(extra: bytes) -> bool:
    pos = 0
    while pos + _EXTRA_HEADER.size <= len(extra):
        header_id, size = _EXTRA_HEADER.unpack_from(extra, pos)
        if header_id == ZIP64_EXTRA_ID:
            return True
        pos += _EXTRA_HEADER.size + size
    return False


class ZipStreamReader:
    """
    Single-pass reader yielding the entries of a ZIP package in physical order.

    The reader is iterable exactly once. Use it as a context manager so that
    the scan is released on every exit path; the caller's stream is never
    closed by the reader.

    Example:
        >>> with ZipStreamReader(stream) as reader:
        ...     for entry in reader:
        ...         print(entry.path, entry.size)
    """

    def __init__(
        self,
        file_like: BinaryIO,
        *,
        limits: ZipBombLimits = DEFAULT_ZIP_BOMB_LIMITS,
        source: Optional[str] = None,
    ):
        if not hasattr(file_like, "read"):
            raise TypeError("ZipStreamReader requires a readable binary stream")
        self._source = _ByteSource(file_like)
        self._guard = ZipBombGuard(limits, source=source)
        self._scan: Optional[Generator[ZipEntry, Any, None]] = None
        self._closed = False

    def __iter__(self) -> Generator[ZipEntry, Any, None]:
        if self._closed:
            raise ValueError("I/O operation on closed ZipStreamReader")
        if self._scan is not None:
            raise RuntimeError(
                "ZipStreamReader is forward-only; open a new reader to re-scan"
            )
        self._scan = self._entries()
        return self._scan

    def __enter__(self) -> "ZipStreamReader":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        if self._scan is not None:
            self._scan.close()
        self._closed = True

    # -------------------------------------------------------------------------
    # Scanning
    # -------------------------------------------------------------------------

    def _entries(self) -> Generator[ZipEntry, Any, None]:
        signature = self._source.read_upto(4)
        if not signature:
            raise ContainerFormatError("Empty stream is not a ZIP archive")
        if signature in (DATA_DESCRIPTOR, SPANNED_MARKER):
            # Single-segment archives written by spanning tools start with a marker
            signature = self._source.read_upto(4)
        elif signature != LOCAL_FILE_HEADER and signature not in END_SIGNATURES:
            self._reject_non_zip(signature)

        count = 0
        while True:
            if signature == LOCAL_FILE_HEADER:
                entry = self._read_entry()
                if entry is not None:
                    count += 1
                    yield entry
            elif signature in END_SIGNATURES:
                self._guard.finish()
                logger.debug(f"ZIP scan complete: {count} entries")
                return
            elif len(signature) < 4:
                raise ContainerFormatError(
                    "Truncated ZIP archive: stream ended before the central directory"
                )
            else:
                raise ContainerFormatError(
                    f"Unexpected ZIP record signature {signature!r} "
                    f"at offset {self._source.offset - 4}"
                )
            signature = self._source.read_upto(4)

    def _reject_non_zip(self, signature: bytes) -> None:
        head = signature + self._source.read_upto(len(signature))
        if is_ole_signature(head):
            data = head + self._source.read_rest()
            if is_ooxml_encrypted(data):
                raise ExtractionFileEncryptedError(
                    "Package is encrypted or password-protected"
                )
            raise ContainerFormatError(
                "Stream is an OLE compound file (legacy Office format), not a ZIP package"
            )
        raise ContainerFormatError(
            f"Stream is not a ZIP archive (leading bytes {head!r})"
        )

    def _read_entry(self) -> Optional[ZipEntry]:
        (
            _version,
            flags,
            method,
            _mtime,
            _mdate,
            crc,
            compressed,
            uncompressed,
            name_len,
            extra_len,
        ) = _LOCAL_HEADER.unpack(
            self._source.read_exact(_LOCAL_HEADER.size, "local file header")
        )
        raw_name = self._source.read_exact(name_len, "file name")
        extra = self._source.read_exact(extra_len, "extra field")
        path = raw_name.decode("utf-8" if flags & FLAG_UTF8 else "cp437")

        if flags & FLAG_ENCRYPTED:
            raise ExtractionFileEncryptedError(f"ZIP entry {path} is encrypted")
        if method not in (METHOD_STORED, METHOD_DEFLATED):
            raise ContainerFormatError(
                f"ZIP entry {path} uses unsupported compression method {method}"
            )

        zip64 = _has_zip64_field(extra)
        if uncompressed == ZIP64_MARKER or compressed == ZIP64_MARKER:
            uncompressed, compressed = _read_zip64_sizes(
                path, extra, uncompressed, compressed
            )

        self._guard.start_entry(path)

        if flags & FLAG_DATA_DESCRIPTOR:
            if method != METHOD_DEFLATED:
                raise ContainerFormatError(
                    f"ZIP entry {path} is stored with a trailing data descriptor "
                    "and cannot be read without the central directory"
                )
            data, consumed = self._inflate_until_end(path)
            crc, compressed, uncompressed = self._read_data_descriptor(path, zip64)
            if consumed != compressed:
                raise ContainerFormatError(
                    f"ZIP entry {path}: data descriptor reports {compressed} "
                    f"compressed bytes, found {consumed}"
                )
        elif method == METHOD_DEFLATED:
            data = self._inflate_known(path, compressed)
        else:
            data = self._read_stored(path, compressed)

        if len(data) != uncompressed:
            raise ContainerFormatError(
                f"ZIP entry {path}: expected {uncompressed} bytes, got {len(data)}"
            )
        if zlib.crc32(data) & 0xFFFFFFFF != crc:
            raise ContainerFormatError(f"ZIP entry {path} failed its CRC-32 check")

        self._guard.finish_entry(path, len(data), compressed)

        if path.endswith("/"):
            return None
        logger.debug(f"Read ZIP entry [{path}] ({len(data)} bytes)")
        return ZipEntry(path=path, data=data)

    def _read_stored(self, path: str, size: int) -> bytes:
        chunks = []
        remaining = size
        while remaining > 0:
            chunk = self._source.read_exact(min(CHUNK_SIZE, remaining), path)
            chunks.append(chunk)
            remaining -= len(chunk)
            self._guard.check_progress(path, size - remaining)
        return b"".join(chunks)

    def _inflate(self, inflater, path: str, chunk: bytes) -> bytes:
        try:
            return inflater.decompress(chunk)
        except zlib.error as exc:
            raise ContainerFormatError(
                f"ZIP entry {path} contains corrupt deflate data", cause=exc
            ) from exc

    def _inflate_known(self, path: str, compressed: int) -> bytes:
        if compressed == 0:
            return b""
        inflater = zlib.decompressobj(-zlib.MAX_WBITS)
        chunks = []
        produced = 0
        remaining = compressed
        while remaining > 0:
            chunk = self._source.read_exact(min(CHUNK_SIZE, remaining), path)
            remaining -= len(chunk)
            data = self._inflate(inflater, path, chunk)
            if data:
                chunks.append(data)
                produced += len(data)
                self._guard.check_progress(path, produced)
        chunks.append(inflater.flush())
        if not inflater.eof:
            raise ContainerFormatError(f"ZIP entry {path} has an incomplete deflate stream")
        return b"".join(chunks)

    def _inflate_until_end(self, path: str) -> Tuple[bytes, int]:
        """Inflate until the deflate stream signals its end; return data and bytes consumed."""
        inflater = zlib.decompressobj(-zlib.MAX_WBITS)
        chunks = []
        produced = 0
        consumed = 0
        while not inflater.eof:
            chunk = self._source.read(CHUNK_SIZE)
            if not chunk:
                raise ContainerFormatError(
                    f"Truncated ZIP archive: stream ended inside entry {path}"
                )
            consumed += len(chunk)
            data = self._inflate(inflater, path, chunk)
            if data:
                chunks.append(data)
                produced += len(data)
                self._guard.check_progress(path, produced)
        leftover = inflater.unused_data
        if leftover:
            self._source.unread(leftover)
            consumed -= len(leftover)
        return b"".join(chunks), consumed

    def _read_data_descriptor(self, path: str, zip64: bool) -> Tuple[int, int, int]:
        sizes = struct.Struct("<QQ" if zip64 else "<II")
        head = self._source.read_exact(4, f"data descriptor of {path}")
        if head == DATA_DESCRIPTOR:
            head = self._source.read_exact(4, f"data descriptor of {path}")
        (crc,) = struct.unpack("<I", head)
        compressed, uncompressed = sizes.unpack(
            self._source.read_exact(sizes.size, f"data descriptor of {path}")
        )
        return crc, compressed, uncompressed


def iter_zip_entries(
    file_like: BinaryIO,
    *,
    limits: ZipBombLimits = DEFAULT_ZIP_BOMB_LIMITS,
    source: Optional[str] = None,
) -> Generator[ZipEntry, Any, None]:
    """Yield the entries of the package in ``file_like``; the scan is released
    when the generator is exhausted or closed."""
    with ZipStreamReader(file_like, limits=limits, source=source) as reader:
        yield from reader
