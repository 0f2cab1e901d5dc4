"""
Logging Event Handler

Infrastructure event handler for logging domain events.
Subscribes to domain events and logs them appropriately.
Domain layer remains unaware of logging infrastructure.
"""

import logging

from sealdrop.domain.events import (
    DomainEvent,
    FileAccessDeniedEvent,
    FileDeletedEvent,
    FileDownloadedEvent,
    FileUploadedEvent,
    FileViewedEvent,
    SweepCompletedEvent,
)


class LoggingEventHandler:
    """
    Infrastructure event handler for logging domain events.

    File ids are shortened to 8 characters; the full id is a capability.
    """

    def __init__(self, logger: logging.Logger):
        """
        Initialize with logger instance.

        Args:
            logger: Python logging.Logger instance
        """
        self.logger = logger

    def handle(self, event: DomainEvent) -> None:
        """
        Handle domain event by logging it.

        Args:
            event: Domain event to log
        """
        try:
            if isinstance(event, FileUploadedEvent):
                self._handle_uploaded(event)
            elif isinstance(event, FileViewedEvent):
                self._handle_viewed(event)
            elif isinstance(event, FileDownloadedEvent):
                self._handle_downloaded(event)
            elif isinstance(event, FileAccessDeniedEvent):
                self._handle_access_denied(event)
            elif isinstance(event, FileDeletedEvent):
                self._handle_deleted(event)
            elif isinstance(event, SweepCompletedEvent):
                self._handle_sweep_completed(event)
            else:
                self.logger.debug(
                    f"Unhandled event: {event.__class__.__name__} "
                    f"(aggregate_id={event.aggregate_id[:8]})"
                )
        except Exception as e:
            # Log handler errors but don't fail the operation
            self.logger.error(
                f"Error in logging event handler for {event.__class__.__name__}: {e}",
                exc_info=True,
            )

    def _handle_uploaded(self, event: FileUploadedEvent) -> None:
        self.logger.info(
            f"File uploaded: file_id={event.aggregate_id[:8]}, "
            f"size={event.size_bytes} bytes, max_downloads={event.max_downloads}, "
            f"expires_at={event.expires_at.isoformat()}, "
            f"password_protected={event.password_protected}"
        )

    def _handle_viewed(self, event: FileViewedEvent) -> None:
        self.logger.debug(f"File viewed: file_id={event.aggregate_id[:8]}")

    def _handle_downloaded(self, event: FileDownloadedEvent) -> None:
        self.logger.info(
            f"File downloaded: file_id={event.aggregate_id[:8]}, "
            f"count={event.download_count}/{event.max_downloads}"
        )

    def _handle_access_denied(self, event: FileAccessDeniedEvent) -> None:
        self.logger.warning(
            f"Access denied: file_id={event.aggregate_id[:8]}, "
            f"access={event.access_type}, reason={event.reason}"
        )

    def _handle_deleted(self, event: FileDeletedEvent) -> None:
        self.logger.info(f"File deleted by owner: file_id={event.aggregate_id[:8]}")

    def _handle_sweep_completed(self, event: SweepCompletedEvent) -> None:
        if event.skipped:
            self.logger.info("Sweep skipped: another sweep is in progress")
            return
        self.logger.info(
            f"Sweep completed: reclaimed={len(event.reclaimed_ids)}, "
            f"failed={len(event.failed_ids)}"
        )
        if event.failed_ids:
            self.logger.warning(
                f"Sweep failures: {[file_id[:8] for file_id in event.failed_ids]}"
            )
