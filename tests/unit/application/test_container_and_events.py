"""
Unit tests for DependencyContainer and EventPublisher.
"""

import logging
from unittest.mock import Mock

import pytest

from sealdrop.application.dependency_container import (
    DependencyContainer,
    DependencyNotFoundError,
)
from sealdrop.application.event_publisher import EventPublisher
from sealdrop.domain.events import DomainEvent, FileDeletedEvent, FileViewedEvent


class _Service:
    pass


class TestDependencyContainer:
    def test_singleton_resolves_same_instance(self):
        container = DependencyContainer()
        instance = _Service()
        container.register_singleton(_Service, instance)

        assert container.resolve(_Service) is instance
        assert container.singleton_count == 1

    def test_unregistered_raises(self):
        with pytest.raises(DependencyNotFoundError):
            DependencyContainer().resolve(_Service)

    def test_override_wins_until_cleared(self):
        container = DependencyContainer()
        real, fake = _Service(), _Service()
        container.register_singleton(_Service, real)

        container.override(_Service, fake)
        assert container.resolve(_Service) is fake

        container.clear_overrides()
        assert container.resolve(_Service) is real

    def test_is_registered(self):
        container = DependencyContainer()
        assert container.is_registered(_Service) is False
        container.override(_Service, _Service())
        assert container.is_registered(_Service) is True

    def test_setup_event_handlers_logs_events(self, fixed_datetime, caplog):
        publisher = EventPublisher()
        DependencyContainer().setup_event_handlers(publisher)

        with caplog.at_level(logging.INFO, logger="sealdrop.events"):
            publisher.publish(FileDeletedEvent("abcdefgh12345678", fixed_datetime, owner_id="o"))

        assert "File deleted by owner: file_id=abcdefgh" in caplog.text
        assert "abcdefgh12345678" not in caplog.text


class TestEventPublisher:
    def test_dispatches_to_exact_type(self, fixed_datetime):
        publisher = EventPublisher()
        viewed, deleted = Mock(), Mock()
        publisher.subscribe(FileViewedEvent, viewed)
        publisher.subscribe(FileDeletedEvent, deleted)

        event = FileViewedEvent("abc", fixed_datetime)
        publisher.publish(event)

        viewed.assert_called_once_with(event)
        deleted.assert_not_called()

    def test_base_class_subscription_sees_everything(self, fixed_datetime):
        publisher = EventPublisher()
        seen = []
        publisher.subscribe(DomainEvent, seen.append)

        publisher.publish(FileViewedEvent("a", fixed_datetime))
        publisher.publish(FileDeletedEvent("b", fixed_datetime, owner_id="o"))

        assert [e.aggregate_id for e in seen] == ["a", "b"]

    def test_handler_error_does_not_propagate(self, fixed_datetime):
        publisher = EventPublisher()
        after = Mock()
        publisher.subscribe(FileViewedEvent, Mock(side_effect=RuntimeError("broken handler")))
        publisher.subscribe(FileViewedEvent, after)

        publisher.publish(FileViewedEvent("abc", fixed_datetime))

        after.assert_called_once()

    def test_publish_without_handlers(self, fixed_datetime):
        EventPublisher().publish(FileViewedEvent("abc", fixed_datetime))
