"""
Password Hashing Contract

The domain only needs a one-way, salted, slow hash; the algorithm lives in
the infrastructure layer.
"""

from abc import ABC, abstractmethod


class PasswordHasher(ABC):
    """Interface for hashing and verifying share passwords."""

    @abstractmethod
    def hash(self, password: str) -> str:
        """Return a salted one-way hash of password."""
        pass  # pragma: no cover

    @abstractmethod
    def verify(self, password: str, password_hash: str) -> bool:
        """Return True if password matches password_hash."""
        pass  # pragma: no cover
