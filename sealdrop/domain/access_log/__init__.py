"""
Access Log Domain

Append-only audit trail of uploads, views and downloads.
"""

from .entities import AccessLogEntry
from .repositories import AccessLogRepository
from .services import AccessLogger

__all__ = ["AccessLogEntry", "AccessLogRepository", "AccessLogger"]
