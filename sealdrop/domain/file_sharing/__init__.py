"""
File Sharing Domain

File records, the access gate, upload validation and the expiration sweeper.
"""

from .access_gate import AccessGate
from .entities import FileRecord
from .password import PasswordHasher
from .repositories import FileRecordRepository
from .sweeper import ExpirationSweeper, SweeperState, SweepReport
from .validation import UploadRequest, UploadValidator
from .value_objects import AccessType, Actor, ConsumeOutcome, ShareId, UploadLimits

__all__ = [
    "AccessGate",
    "AccessType",
    "Actor",
    "ConsumeOutcome",
    "ExpirationSweeper",
    "FileRecord",
    "FileRecordRepository",
    "PasswordHasher",
    "ShareId",
    "SweepReport",
    "SweeperState",
    "UploadLimits",
    "UploadRequest",
    "UploadValidator",
]
