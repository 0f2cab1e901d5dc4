"""
SealDrop - zero-knowledge file sharing backend and client.

Files are encrypted on the sender's device; the server stores ciphertext and an
opaque exported key and gates access by link, expiry, download limit and an
optional password.
"""

__version__ = "1.0.0"
