"""
Record source: turns decrypted donation bytes into raw record lines.

The same content is scanned twice, once to count lines and once to iterate
records, so the source keeps the decrypted bytes and opens a fresh in-memory
stream for every pass.
"""

from __future__ import annotations

import io
from pathlib import Path
from typing import BinaryIO, Iterator

from tamboon.cipher import Rot128Reader
from tamboon.exceptions import InputFileError
from tamboon.utils.logging import get_logger

log = get_logger(__name__)

_CHUNK_SIZE = 32 * 1024


def count_lines(stream: BinaryIO, chunk_size: int = _CHUNK_SIZE) -> int:
    """
    Count lines in a binary stream by scanning fixed-size chunks.

    A final line without a trailing newline still counts. A read error is
    logged and the count gathered so far is returned.
    """
    count = 0
    last_byte = b"\n"
    while True:
        try:
            chunk = stream.read(chunk_size)
        except OSError as exc:
            log.error(
                "[SOURCE] Read error while counting lines; using partial count",
                extra={"lines_counted": count, "error": str(exc)},
            )
            return count
        if not chunk:
            break
        count += chunk.count(b"\n")
        last_byte = chunk[-1:]
    if last_byte != b"\n":
        count += 1
    return count


class RecordSource:
    """
    Restartable, ordered sequence of donation record lines.

    The first line of the content is a header and is never yielded.
    """

    def __init__(self, data: bytes, encoding: str = "utf-8") -> None:
        self._data = data
        self._encoding = encoding

    @classmethod
    def from_path(cls, path: Path | str) -> "RecordSource":
        """
        Read and decrypt a ROT-128 donation file.

        Raises
        ------
        InputFileError
            If the file does not exist or cannot be read.
        """
        file_path = Path(path)
        try:
            with Rot128Reader(file_path.open("rb")) as reader:
                data = reader.read()
        except OSError as exc:
            raise InputFileError(f"Cannot read donation file '{file_path}': {exc}") from exc
        log.debug("[SOURCE] Loaded donation file", extra={"path": str(file_path), "bytes": len(data)})
        return cls(data)

    def line_count(self) -> int:
        return count_lines(io.BytesIO(self._data))

    def records(self) -> Iterator[str]:
        """Yield every non-blank line after the header, in input order."""
        stream = io.BytesIO(self._data)
        stream.readline()
        for raw_line in stream:
            line = raw_line.decode(self._encoding, errors="replace").rstrip("\r\n")
            if line.strip():
                yield line

    def __iter__(self) -> Iterator[str]:
        return self.records()


__all__ = ["RecordSource", "count_lines"]
