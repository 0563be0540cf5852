"""
ROT-128 byte cipher.

Every byte is rotated by half the byte range, so applying the rotation twice
yields the original data. Donation files arrive obfuscated this way
(e.g. `fng.1000.csv.rot128`).
"""

from __future__ import annotations

from typing import BinaryIO

_ROT128_TABLE = bytes((b + 128) % 256 for b in range(256))


def decrypt_rot128(data: bytes) -> bytes:
    """Decode ROT-128 obfuscated bytes."""
    return data.translate(_ROT128_TABLE)


# The rotation is an involution.
encrypt_rot128 = decrypt_rot128


class Rot128Reader:
    """
    Read-only binary stream that decodes an underlying ROT-128 stream on the fly.
    """

    def __init__(self, raw: BinaryIO) -> None:
        self._raw = raw

    def read(self, size: int = -1) -> bytes:
        return decrypt_rot128(self._raw.read(size))

    def close(self) -> None:
        self._raw.close()

    def __enter__(self) -> "Rot128Reader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["Rot128Reader", "decrypt_rot128", "encrypt_rot128"]
