"""
File Storage Domain

Contract for the ciphertext blob store.
"""

from .storage_repository import ICiphertextStore

__all__ = ["ICiphertextStore"]
