"""
Shared pytest fixtures and configuration for the SealDrop test suite.

This module provides:
- Hypothesis configuration for property-based testing
- Environment defaults so importing the app never needs Redis
- Shared fixtures for records, stores and domain services
- A Flask test client wired to in-memory backends
"""

import os
import tempfile

# Must be set before app_factory or celery_app are imported anywhere
os.environ.setdefault("RECORD_BACKEND", "memory")
os.environ.setdefault("STORAGE_DIR", tempfile.mkdtemp(prefix="sealdrop-tests-"))
os.environ.setdefault("CELERY_BROKER_URL", "memory://")
os.environ.setdefault("CELERY_RESULT_BACKEND", "cache+memory://")

from datetime import datetime, timedelta

import pytest

# Hypothesis configuration
from hypothesis import settings, HealthCheck, Phase

from sealdrop.domain.access_log import AccessLogger
from sealdrop.domain.events import DomainEvent
from sealdrop.domain.file_sharing import (
    AccessGate,
    ExpirationSweeper,
    FileRecord,
)
from sealdrop.infrastructure.memory_repositories import (
    InMemoryAccessLogRepository,
    InMemoryCiphertextStore,
    InMemoryFileRecordRepository,
)
from sealdrop.infrastructure.password_hasher import WerkzeugPasswordHasher

# Register Hypothesis profiles
settings.register_profile(
    "default",
    max_examples=100,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.target, Phase.shrink],
)
settings.register_profile(
    "ci",
    max_examples=200,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.register_profile(
    "dev",
    max_examples=10,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "default"))

# Cheap hash method so password tests stay fast; production uses scrypt
FAST_HASH_METHOD = "pbkdf2:sha256:1000"

SAMPLE_KEY = '{"kty":"oct","alg":"A256GCM","k":"AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA","ext":true}'
SAMPLE_NONCE = "AAAAAAAAAAAAAAAA"


# =============================================================================
# Time Fixtures
# =============================================================================

@pytest.fixture
def fixed_datetime() -> datetime:
    """Provide a fixed datetime for deterministic tests."""
    return datetime(2024, 1, 15, 12, 0, 0)


@pytest.fixture
def past_datetime(fixed_datetime) -> datetime:
    """Provide a datetime one hour before fixed_datetime."""
    return fixed_datetime - timedelta(hours=1)


# =============================================================================
# Domain Entity Fixtures
# =============================================================================

def make_record(
    now: datetime,
    *,
    ciphertext_ref: str = "0" * 32 + ".enc",
    max_downloads: int = 1,
    expiry_hours: int = 24,
    owner_id=None,
    password_hash=None,
    size_bytes: int = 1024,
    original_name: str = "report.pdf",
) -> FileRecord:
    """Build a FileRecord with sensible defaults."""
    return FileRecord.create(
        ciphertext_ref=ciphertext_ref,
        exported_key=SAMPLE_KEY,
        nonce=SAMPLE_NONCE,
        original_name=original_name,
        size_bytes=size_bytes,
        mime_type="application/pdf",
        max_downloads=max_downloads,
        expiry_hours=expiry_hours,
        owner_id=owner_id,
        password_hash=password_hash,
        now=now,
    )


@pytest.fixture
def record_factory():
    """Provide make_record for tests that need several records."""
    return make_record


@pytest.fixture
def sample_record(fixed_datetime) -> FileRecord:
    """Provide an unprotected single-download record uploaded at fixed_datetime."""
    return make_record(fixed_datetime, owner_id="owner-1")


# =============================================================================
# Repository and Service Fixtures
# =============================================================================

@pytest.fixture
def record_repo() -> InMemoryFileRecordRepository:
    return InMemoryFileRecordRepository()


@pytest.fixture
def log_repo() -> InMemoryAccessLogRepository:
    return InMemoryAccessLogRepository()


@pytest.fixture
def blob_store() -> InMemoryCiphertextStore:
    return InMemoryCiphertextStore()


@pytest.fixture
def hasher() -> WerkzeugPasswordHasher:
    return WerkzeugPasswordHasher(FAST_HASH_METHOD)


@pytest.fixture
def gate(record_repo, hasher) -> AccessGate:
    return AccessGate(record_repo, hasher)


@pytest.fixture
def access_logger(log_repo) -> AccessLogger:
    return AccessLogger(log_repo)


@pytest.fixture
def sweeper(record_repo, blob_store) -> ExpirationSweeper:
    return ExpirationSweeper(record_repo, blob_store)


@pytest.fixture
def share_service(record_repo, blob_store, gate, access_logger, hasher, sweeper):
    """ShareService over in-memory stores with a recording event publisher."""
    from sealdrop.application.event_publisher import EventPublisher
    from sealdrop.application.share_service import ShareService

    publisher = EventPublisher()
    service = ShareService(
        record_repo,
        blob_store,
        gate,
        access_logger,
        hasher,
        sweeper,
        event_publisher=publisher,
    )
    service.published = []
    publisher.subscribe(DomainEvent, service.published.append)
    return service


# =============================================================================
# Flask Application Fixtures
# =============================================================================

@pytest.fixture
def app_config(tmp_path):
    """AppConfig using in-memory records and a per-test blob directory."""
    from app_factory import AppConfig

    config = AppConfig()
    config.celery_enabled = False
    config.share.record_backend = "memory"
    config.share.storage_dir = str(tmp_path / "blobs")
    config.share.password_hash_method = FAST_HASH_METHOD
    config.share.public_base_url = "https://share.example.com"
    return config


@pytest.fixture
def app(app_config):
    from app_factory import create_app

    flask_app = create_app(app_config)
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests for isolated components"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests requiring Redis"
    )
    config.addinivalue_line(
        "markers", "property: Property-based tests using Hypothesis"
    )


def pytest_collection_modifyitems(config, items):
    """
    Automatically mark tests based on their location.

    Tests in tests/unit/ are marked as unit tests, tests/integration/ as
    integration tests, and tests/property/ as property tests.
    """
    for item in items:
        test_path = str(item.path)

        if "/unit/" in test_path or "\\unit\\" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path or "\\integration\\" in test_path:
            item.add_marker(pytest.mark.integration)
        elif "/property/" in test_path or "\\property\\" in test_path:
            item.add_marker(pytest.mark.property)
