"""
Share Password Generator

Random passwords a sender can attach to a share and pass to the
recipient out of band.
"""

import secrets
import string

_SYMBOLS = "!@#$%^&*-_"
_ALPHABET = string.ascii_letters + string.digits + _SYMBOLS
_CLASSES = (string.ascii_lowercase, string.ascii_uppercase, string.digits, _SYMBOLS)

MIN_LENGTH = 8


def generate_share_password(length: int = 16) -> str:
    """
    Generate a password containing lower case, upper case, digit and symbol.

    Raises:
        ValueError: If length is below MIN_LENGTH
    """
    if length < MIN_LENGTH:
        raise ValueError(f"Password length must be at least {MIN_LENGTH}")

    while True:
        password = "".join(secrets.choice(_ALPHABET) for _ in range(length))
        if all(any(c in cls for c in password) for cls in _CLASSES):
            return password
