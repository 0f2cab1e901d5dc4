"""
Key Export/Import

Portable representation of file keys and nonces.

Keys travel as a JSON Web Key, the same form browsers produce with
crypto.subtle.exportKey('jwk') for an AES-GCM key, so either kind of
client can decrypt what the other uploaded. The server stores the string
without parsing it.
"""

import base64
import binascii
import json
import re

from sealdrop.domain.errors import KeyFormatError

from .cipher import KEY_SIZE, NONCE_SIZE, KeyHandle

JWK_KTY = "oct"
JWK_ALG = "A256GCM"

_BASE64URL = re.compile(r"^[A-Za-z0-9_-]+$")


def export_key(key: KeyHandle) -> str:
    """Serialize a key to a compact JWK string."""
    k = base64.urlsafe_b64encode(key.key_bytes()).rstrip(b"=").decode("ascii")
    jwk = {
        "kty": JWK_KTY,
        "alg": JWK_ALG,
        "k": k,
        "ext": True,
        "key_ops": ["encrypt", "decrypt"],
    }
    return json.dumps(jwk, separators=(",", ":"))


def import_key(blob: str) -> KeyHandle:
    """
    Rebuild a key from its JWK string.

    Raises:
        KeyFormatError: If the blob is not an AES-256-GCM JWK
    """
    try:
        jwk = json.loads(blob)
    except (TypeError, ValueError) as e:
        raise KeyFormatError("Exported key is not valid JSON", e) from e

    if not isinstance(jwk, dict):
        raise KeyFormatError("Exported key is not a JSON object")
    if jwk.get("kty") != JWK_KTY:
        raise KeyFormatError(f"Unsupported key type: {jwk.get('kty')!r}")
    if jwk.get("alg") != JWK_ALG:
        raise KeyFormatError(f"Unsupported algorithm: {jwk.get('alg')!r}")

    k = jwk.get("k")
    if not isinstance(k, str) or not _BASE64URL.match(k):
        raise KeyFormatError("Key material is not base64url")

    try:
        material = base64.urlsafe_b64decode(k + "=" * (-len(k) % 4))
    except (binascii.Error, ValueError) as e:
        raise KeyFormatError("Key material is not base64url", e) from e

    if len(material) != KEY_SIZE:
        raise KeyFormatError(f"Key must be {KEY_SIZE} bytes, got {len(material)}")
    return KeyHandle(material)


def encode_nonce(nonce: bytes) -> str:
    return base64.b64encode(nonce).decode("ascii")


def decode_nonce(value: str) -> bytes:
    """
    Decode a transported nonce.

    Raises:
        KeyFormatError: If the value is not base64 of a 12-byte nonce
    """
    try:
        nonce = base64.b64decode(value, validate=True)
    except (binascii.Error, TypeError, ValueError) as e:
        raise KeyFormatError("Nonce is not valid base64", e) from e

    if len(nonce) != NONCE_SIZE:
        raise KeyFormatError(f"Nonce must be {NONCE_SIZE} bytes, got {len(nonce)}")
    return nonce
