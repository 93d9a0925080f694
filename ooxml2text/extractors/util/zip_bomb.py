from __future__ import annotations

from dataclasses import dataclass

from ooxml2text.exceptions import ExtractionZipBombError


@dataclass(frozen=True)
class ZipBombLimits:
    """
    Heuristics for rejecting probable ZIP bombs.

    These defaults are intentionally set very high to avoid false positives in
    legitimate, large office documents while still catching extreme bombs.
    """

    max_entries: int = 50_000
    max_total_uncompressed_bytes: int = 4 * 1024 * 1024 * 1024  # 4 GiB
    max_single_uncompressed_bytes: int = 1 * 1024 * 1024 * 1024  # 1 GiB
    max_total_compression_ratio: float = 200.0
    max_entry_compression_ratio: float = 500.0


DEFAULT_ZIP_BOMB_LIMITS = ZipBombLimits()


class ZipBombGuard:
    """
    Running ZIP-bomb accounting for a forward-only archive scan.

    The central directory is never read up front, so every limit is checked
    while the entries are being decompressed. One guard per scan.
    """

    def __init__(
        self,
        limits: ZipBombLimits = DEFAULT_ZIP_BOMB_LIMITS,
        source: str | None = None,
    ):
        self.limits = limits
        self.source = source
        self.entries = 0
        self.total_uncompressed = 0
        self.total_compressed = 0

    def _suffix(self) -> str:
        return f" [{self.source}]" if self.source else ""

    def start_entry(self, path: str) -> None:
        self.entries += 1
        if self.entries > self.limits.max_entries:
            raise ExtractionZipBombError(
                f"ZIP container has too many entries (> {self.limits.max_entries})"
                + self._suffix()
            )

    def check_progress(self, path: str, uncompressed: int) -> None:
        """Called after each decompressed chunk of an entry."""
        if uncompressed > self.limits.max_single_uncompressed_bytes:
            raise ExtractionZipBombError(
                f"ZIP entry {path} too large (> {self.limits.max_single_uncompressed_bytes} bytes)"
                + self._suffix()
            )
        if (
            self.total_uncompressed + uncompressed
            > self.limits.max_total_uncompressed_bytes
        ):
            raise ExtractionZipBombError(
                f"ZIP total uncompressed size too large (> {self.limits.max_total_uncompressed_bytes} bytes)"
                + self._suffix()
            )

    def finish_entry(self, path: str, uncompressed: int, compressed: int) -> None:
        if uncompressed > 0:
            if compressed <= 0:
                raise ExtractionZipBombError(
                    f"ZIP entry {path} has zero compressed size but non-zero uncompressed size"
                    + self._suffix()
                )
            ratio = uncompressed / compressed
            if ratio > self.limits.max_entry_compression_ratio:
                raise ExtractionZipBombError(
                    f"ZIP entry {path} compression ratio too high ({ratio:.1f} > {self.limits.max_entry_compression_ratio})"
                    + self._suffix()
                )

        self.total_uncompressed += uncompressed
        self.total_compressed += compressed

    def finish(self) -> None:
        """Called once the last entry of the archive has been read."""
        if self.total_uncompressed > 0:
            if self.total_compressed <= 0:
                raise ExtractionZipBombError(
                    "ZIP container has non-zero uncompressed content but zero total compressed size"
                    + self._suffix()
                )
            total_ratio = self.total_uncompressed / self.total_compressed
            if total_ratio > self.limits.max_total_compression_ratio:
                raise ExtractionZipBombError(
                    f"ZIP total compression ratio too high ({total_ratio:.1f} > {self.limits.max_total_compression_ratio})"
                    + self._suffix()
                )
