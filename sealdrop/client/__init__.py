"""
Client side of SealDrop: local encryption, key export and the HTTP client.

Nothing in this package is imported by the server.
"""

from .cipher import CipherEngine, EncryptionResult, KeyHandle
from .keys import decode_nonce, encode_nonce, export_key, import_key
from .passwords import generate_share_password
from .share_client import DownloadedFile, ShareClient

__all__ = [
    "CipherEngine",
    "DownloadedFile",
    "EncryptionResult",
    "KeyHandle",
    "ShareClient",
    "decode_nonce",
    "encode_nonce",
    "export_key",
    "generate_share_password",
    "import_key",
]
