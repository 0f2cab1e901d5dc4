"""
Application Services Layer

Orchestrates domain services and coordinates use cases.
"""

from .dependency_container import DependencyContainer, DependencyNotFoundError
from .event_publisher import EventPublisher
from .share_results import DownloadResult, OwnerStats, UploadResult
from .share_service import ShareService

__all__ = [
    'DependencyContainer',
    'DependencyNotFoundError',
    'DownloadResult',
    'EventPublisher',
    'OwnerStats',
    'ShareService',
    'UploadResult',
]
