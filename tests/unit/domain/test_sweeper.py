"""
Unit tests for the ExpirationSweeper.
"""

import threading
from datetime import timedelta
from unittest.mock import Mock

import pytest

from sealdrop.domain.errors import StorageError
from sealdrop.domain.file_sharing import ExpirationSweeper, SweeperState


@pytest.fixture
def populated(record_repo, blob_store, record_factory, fixed_datetime):
    """Ten records, three of which have passed their deadline at fixed_datetime."""
    expired, live = [], []
    for i in range(10):
        uploaded = fixed_datetime - timedelta(hours=2) if i < 3 else fixed_datetime
        ref = blob_store.put(f"ciphertext-{i}".encode())
        record = record_factory(uploaded, ciphertext_ref=ref, expiry_hours=1)
        record_repo.create(record)
        (expired if i < 3 else live).append(record)
    return expired, live


class TestSweep:
    def test_reclaims_only_expired(self, sweeper, populated, record_repo, blob_store, fixed_datetime):
        expired, live = populated

        report = sweeper.sweep(fixed_datetime)

        assert report.skipped is False
        assert report.examined == 3
        assert sorted(report.reclaimed) == sorted(r.id for r in expired)
        assert report.failures == {}
        for record in expired:
            assert blob_store.exists(record.ciphertext_ref) is False
            assert record_repo.get(record.id).is_expired is True
        for record in live:
            assert blob_store.exists(record.ciphertext_ref) is True
            assert record_repo.get(record.id).is_expired is False

    def test_second_sweep_is_noop(self, sweeper, populated, fixed_datetime):
        sweeper.sweep(fixed_datetime)

        report = sweeper.sweep(fixed_datetime)

        assert report.examined == 0
        assert report.reclaimed == []

    def test_records_survive_sweep(self, sweeper, populated, record_repo, fixed_datetime):
        expired, _ = populated
        sweeper.sweep(fixed_datetime)
        assert all(record_repo.get(r.id) is not None for r in expired)

    def test_state_returns_to_idle(self, sweeper, populated, fixed_datetime):
        sweeper.sweep(fixed_datetime)
        assert sweeper.state is SweeperState.IDLE

    def test_report_to_dict(self, sweeper, populated, fixed_datetime):
        data = sweeper.sweep(fixed_datetime).to_dict()
        assert data["reclaimed"] == 3
        assert len(data["reclaimed_ids"]) == 3
        assert data["started_at"] == fixed_datetime.isoformat()
        assert data["finished_at"] is not None


class TestSweepFailures:
    def test_blob_failure_is_collected_and_retried(self, record_repo, populated, blob_store, fixed_datetime):
        expired, _ = populated
        failing_ref = expired[0].ciphertext_ref
        store = Mock(wraps=blob_store)

        def delete(ref):
            if ref == failing_ref:
                raise StorageError("disk unavailable")
            return blob_store.delete(ref)

        store.delete.side_effect = delete
        sweeper = ExpirationSweeper(record_repo, store)

        report = sweeper.sweep(fixed_datetime)

        assert list(report.failures) == [expired[0].id]
        assert report.reclaimed_count == 2
        assert record_repo.get(expired[0].id).is_expired is False

        store.delete.side_effect = blob_store.delete
        retry = sweeper.sweep(fixed_datetime)
        assert retry.reclaimed == [expired[0].id]

    def test_mark_failure_is_collected(self, populated, blob_store, record_repo, fixed_datetime):
        expired, _ = populated
        repo = Mock(wraps=record_repo)
        repo.mark_expired.side_effect = StorageError("redis down")

        report = ExpirationSweeper(repo, blob_store).sweep(fixed_datetime)

        assert set(report.failures) == {r.id for r in expired}
        assert report.reclaimed == []


class TestSingleFlight:
    def test_held_guard_skips(self, record_repo, blob_store, populated, fixed_datetime):
        guard = threading.Lock()
        guard.acquire()
        sweeper = ExpirationSweeper(record_repo, blob_store, guard)

        report = sweeper.sweep(fixed_datetime)

        assert report.skipped is True
        assert report.examined == 0
        assert all(blob_store.exists(r.ciphertext_ref) for r in populated[0])

    def test_concurrent_invocation_is_not_queued(self, record_repo, blob_store, fixed_datetime):
        entered = threading.Event()
        release = threading.Event()
        repo = Mock(wraps=record_repo)

        def slow_find(now):
            entered.set()
            release.wait(timeout=5)
            return []

        repo.find_expired_unswept.side_effect = slow_find
        sweeper = ExpirationSweeper(repo, blob_store)

        worker = threading.Thread(target=sweeper.sweep, args=(fixed_datetime,))
        worker.start()
        assert entered.wait(timeout=5)
        assert sweeper.state is SweeperState.SWEEPING

        report = sweeper.sweep(fixed_datetime)
        release.set()
        worker.join(timeout=5)

        assert report.skipped is True
        assert repo.find_expired_unswept.call_count == 1

    def test_guard_released_after_error(self, blob_store, fixed_datetime):
        repo = Mock()
        repo.find_expired_unswept.side_effect = StorageError("redis down")
        guard = threading.Lock()
        sweeper = ExpirationSweeper(repo, blob_store, guard)

        with pytest.raises(StorageError):
            sweeper.sweep(fixed_datetime)

        assert guard.locked() is False
        assert sweeper.state is SweeperState.IDLE

    def test_failed_release_is_tolerated(self, record_repo, blob_store, fixed_datetime):
        guard = Mock()
        guard.acquire.return_value = True
        guard.release.side_effect = RuntimeError("lock expired")

        report = ExpirationSweeper(record_repo, blob_store, guard).sweep(fixed_datetime)

        assert report.skipped is False
        guard.acquire.assert_called_once_with(blocking=False)

    def test_unreachable_guard_raises_storage_error(self, record_repo, blob_store, fixed_datetime):
        guard = Mock()
        guard.acquire.side_effect = StorageError("Error acquiring Redis lock")
        sweeper = ExpirationSweeper(record_repo, blob_store, guard)

        with pytest.raises(StorageError):
            sweeper.sweep(fixed_datetime)

        guard.release.assert_not_called()
        assert sweeper.state is SweeperState.IDLE
