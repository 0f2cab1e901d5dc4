"""
Cipher Engine

Client-side AES-256-GCM encryption of whole files.

Every encrypt() call draws a fresh random 256-bit key and a fresh random
96-bit nonce, so a (key, nonce) pair is never used twice. The 16-byte
authentication tag is appended to the ciphertext by AESGCM.
"""

import hmac
import os
from dataclasses import dataclass

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from sealdrop.domain.errors import IntegrityError, KeyFormatError

NONCE_SIZE = 12             # AES-GCM nonce (96 bits per NIST)
KEY_SIZE = 32               # AES-256 key (256 bits)
TAG_SIZE = 16


class KeyHandle:
    """
    Holder of raw key material.

    The bytes live in a bytearray so destroy() can overwrite them once the
    key has been exported or used; a destroyed handle refuses further use.
    """

    def __init__(self, material: bytes):
        if len(material) != KEY_SIZE:
            raise KeyFormatError(f"Key must be {KEY_SIZE} bytes, got {len(material)}")
        self._material = bytearray(material)
        self._destroyed = False

    @classmethod
    def generate(cls) -> "KeyHandle":
        return cls(os.urandom(KEY_SIZE))

    @property
    def is_destroyed(self) -> bool:
        return self._destroyed

    def key_bytes(self) -> bytes:
        if self._destroyed:
            raise KeyFormatError("Key handle has been destroyed")
        return bytes(self._material)

    def destroy(self) -> None:
        for i in range(len(self._material)):
            self._material[i] = 0
        self._destroyed = True

    def __enter__(self) -> "KeyHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.destroy()

    def __eq__(self, other) -> bool:
        if not isinstance(other, KeyHandle):
            return NotImplemented
        return hmac.compare_digest(self.key_bytes(), other.key_bytes())

    __hash__ = None

    def __repr__(self) -> str:
        state = "destroyed" if self._destroyed else "active"
        return f"KeyHandle(<{KEY_SIZE * 8}-bit, {state}>)"


@dataclass(frozen=True)
class EncryptionResult:
    """Output of one encryption: ciphertext (with tag), its key and nonce."""
    ciphertext: bytes
    key: KeyHandle
    nonce: bytes


class CipherEngine:
    """Authenticated encryption of byte blobs with AES-256-GCM."""

    def encrypt(self, plaintext: bytes) -> EncryptionResult:
        """
        Encrypt a blob under a fresh key and nonce.

        Args:
            plaintext: File content

        Returns:
            EncryptionResult; the caller owns the key and should destroy it
        """
        key = KeyHandle.generate()
        nonce = os.urandom(NONCE_SIZE)
        ciphertext = AESGCM(key.key_bytes()).encrypt(nonce, bytes(plaintext), None)
        return EncryptionResult(ciphertext=ciphertext, key=key, nonce=nonce)

    def decrypt(self, ciphertext: bytes, key: KeyHandle, nonce: bytes) -> bytes:
        """
        Decrypt and authenticate a blob.

        Raises:
            IntegrityError: If the tag does not verify (tampered data, or a
                key/nonce that was not used to produce this ciphertext)
        """
        if len(nonce) != NONCE_SIZE:
            raise IntegrityError(f"Nonce must be {NONCE_SIZE} bytes, got {len(nonce)}")
        if len(ciphertext) < TAG_SIZE:
            raise IntegrityError("Ciphertext is shorter than the authentication tag")

        try:
            return AESGCM(key.key_bytes()).decrypt(nonce, bytes(ciphertext), None)
        except InvalidTag as e:
            raise IntegrityError("Authentication tag mismatch", e) from e
