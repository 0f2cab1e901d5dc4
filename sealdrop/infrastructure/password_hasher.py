"""
Password Hasher

Werkzeug-backed implementation of the domain PasswordHasher.
Hashes are salted and tagged with their method, so records created with
an older method keep verifying after PASSWORD_HASH_METHOD changes.
"""

from werkzeug.security import check_password_hash, generate_password_hash

from sealdrop.domain.file_sharing.password import PasswordHasher


class WerkzeugPasswordHasher(PasswordHasher):

    def __init__(self, method: str = "scrypt"):
        self.method = method

    def hash(self, password: str) -> str:
        return generate_password_hash(password, method=self.method)

    def verify(self, password: str, password_hash: str) -> bool:
        if not password or not password_hash:
            return False
        try:
            return check_password_hash(password_hash, password)
        except ValueError:
            # unknown or malformed hash format
            return False
