"""
Application Factory

Creates and configures Flask application with all dependencies.
This factory pattern improves testability by allowing dependency injection
and configuration overrides.
"""

import logging
import os
import threading
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS

from sealdrop.api.health import get_health_status
from sealdrop.application.dependency_container import DependencyContainer
from sealdrop.application.event_publisher import EventPublisher
from sealdrop.application.share_service import ShareService
from sealdrop.config.celery_config import make_celery
from sealdrop.config.redis_config import get_redis_repository, init_redis
from sealdrop.config.share_config import ShareConfig
from sealdrop.domain.access_log import AccessLogger, AccessLogRepository
from sealdrop.domain.file_sharing import (
    AccessGate,
    ExpirationSweeper,
    FileRecordRepository,
    PasswordHasher,
    UploadValidator,
)
from sealdrop.domain.file_storage import ICiphertextStore
from sealdrop.infrastructure.password_hasher import WerkzeugPasswordHasher
from sealdrop.infrastructure.redis_repository import RedisRepository
from sealdrop.infrastructure.storage_factory import BACKEND_REDIS, StorageFactory

logger = logging.getLogger(__name__)


class AppConfig:
    """Application configuration."""

    def __init__(self):
        self.api_version = os.getenv("API_VERSION", "v1")
        self.flask_env = os.getenv("FLASK_ENV", "development")
        self.is_production = self.flask_env == "production"
        self.cors_origins = os.getenv("CORS_ORIGINS", "*")
        self.celery_enabled = os.getenv("CELERY_ENABLED", "true").lower() == "true"

        self.share = ShareConfig()


def create_app(config: Optional[AppConfig] = None) -> Flask:
    """
    Create and configure Flask application.

    Args:
        config: Application configuration, uses default if None

    Returns:
        Configured Flask application
    """
    if config is None:
        config = AppConfig()

    app = Flask(__name__)
    app.share_config = config.share
    app.config["MAX_CONTENT_LENGTH"] = config.share.max_request_size

    owner_header = config.share.owner_header
    CORS(
        app,
        resources={
            r"/*": {
                "origins": config.cors_origins,
                "methods": ["GET", "POST", "DELETE", "OPTIONS"],
                "allow_headers": ["Content-Type", "Authorization", owner_header],
                "expose_headers": ["Content-Type"],
                "max_age": 3600,
            }
        },
    )

    _initialize_infrastructure(app, config)
    _initialize_services(app, config)
    _register_blueprints(app, config)
    _register_health_endpoint(app)

    return app


def _initialize_infrastructure(app: Flask, config: AppConfig) -> None:
    """
    Initialize infrastructure components (Redis, Celery).

    Args:
        app: Flask application
        config: Application configuration
    """
    app.redis_repo = None
    app.celery = None

    if config.share.record_backend == BACKEND_REDIS:
        try:
            init_redis()
            app.redis_repo = get_redis_repository()
            logger.info("Redis initialized successfully")
        except Exception as e:
            logger.warning(f"Could not initialize Redis: {e}")

    if config.celery_enabled:
        try:
            app.celery = make_celery(app)
            logger.info("Celery initialized successfully")
        except Exception as e:
            logger.warning(f"Could not initialize Celery: {e}")


def _initialize_services(app: Flask, config: AppConfig) -> None:
    """
    Initialize application services and attach them to the app through a
    DependencyContainer.

    Every adapter, domain service and application service is registered as
    a singleton and resolved via container.resolve() in API routes and tasks.

    Args:
        app: Flask application
        config: Application configuration
    """
    share = config.share
    try:
        container = DependencyContainer()

        redis_repo: Optional[RedisRepository] = app.redis_repo
        if redis_repo is not None:
            container.register_singleton(RedisRepository, redis_repo)

        # Storage adapters
        record_repository, log_repository = StorageFactory.create_record_stores(
            share.record_backend, redis_repo
        )
        ciphertext_store = StorageFactory.create_ciphertext_store(share.storage_dir)
        password_hasher = WerkzeugPasswordHasher(share.password_hash_method)

        container.register_singleton(FileRecordRepository, record_repository)
        container.register_singleton(AccessLogRepository, log_repository)
        container.register_singleton(ICiphertextStore, ciphertext_store)
        container.register_singleton(PasswordHasher, password_hasher)

        # Domain services
        access_gate = AccessGate(record_repository, password_hasher)
        access_logger = AccessLogger(log_repository)
        if redis_repo is not None:
            # shared by every worker and web process using this Redis
            sweep_guard = redis_repo.create_lock("sweeper", timeout=share.sweep_lock_timeout)
        else:
            sweep_guard = threading.Lock()
        sweeper = ExpirationSweeper(record_repository, ciphertext_store, sweep_guard)

        container.register_singleton(AccessGate, access_gate)
        container.register_singleton(AccessLogger, access_logger)
        container.register_singleton(ExpirationSweeper, sweeper)

        # Events
        event_publisher = EventPublisher()
        container.setup_event_handlers(event_publisher)
        container.register_singleton(EventPublisher, event_publisher)

        # Application services
        share_service = ShareService(
            record_repository,
            ciphertext_store,
            access_gate,
            access_logger,
            password_hasher,
            sweeper,
            event_publisher=event_publisher,
            validator=UploadValidator(share.upload_limits),
        )
        container.register_singleton(ShareService, share_service)

        app.container = container
        logger.info(
            f"Application services initialized ({share.record_backend} backend, "
            f"{container.singleton_count} singletons)"
        )

    except Exception as e:
        logger.error(f"Could not initialize services: {e}", exc_info=True)
        app.container = None


def _register_blueprints(app: Flask, config: AppConfig) -> None:
    """
    Register API blueprints.

    Args:
        app: Flask application
        config: Application configuration
    """
    from sealdrop.api.v1 import api_v1_bp

    app.register_blueprint(api_v1_bp)

    logger.info(
        f"API {config.api_version} registered at /api/{config.api_version} "
        f"with Swagger UI at /api/{config.api_version}/docs"
    )


def _register_health_endpoint(app: Flask) -> None:
    """
    Register health check endpoint.

    Args:
        app: Flask application
    """

    @app.route("/health", methods=["GET"])
    def health():
        """
        Health check endpoint.
        Returns overall health status of the application and its dependencies.
        """
        health_status, status_code = get_health_status(app)
        return jsonify(health_status), status_code
