"""
Cipher package for Tamboon.

Holds the reversible byte obfuscation applied to donation input files.
"""

from tamboon.cipher.rot128 import Rot128Reader, decrypt_rot128, encrypt_rot128

__all__ = [
    "Rot128Reader",
    "decrypt_rot128",
    "encrypt_rot128",
]
