"""
Application Factory

Builds the Flask app: logging, CORS, Redis and Celery, the file-sharing
services in a DependencyContainer, the API blueprints, /health, and the
expiration sweeper. Tests pass their own configs to point it at a temporary
store.
"""

import logging
import os
from datetime import timedelta
from typing import Dict, Optional, Tuple

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import RequestEntityTooLarge

from fileshare.application import DependencyContainer, ShareService, SweepScheduler
from fileshare.config.celery_config import make_celery
from fileshare.config.logging_config import setup_logging
from fileshare.config.redis_config import (
    get_redis_repository,
    init_redis,
    redis_health_check,
)
from fileshare.config.storage_config import StorageConfig
from fileshare.domain.errors import ErrorCategory, create_error_response
from fileshare.domain.file_sharing import (
    ExpirationPolicy,
    IdentifierAllocator,
    IObjectStore,
    LifecycleManager,
    ObjectKeyCodec,
    PassphraseRepository,
)
from fileshare.infrastructure import (
    InMemoryPassphraseRepository,
    RedisPassphraseRepository,
    StorageFactory,
)

logger = logging.getLogger(__name__)

# Top-level path segments routed somewhere other than a short link
RESERVED_IDENTIFIERS = frozenset({"health", "api"})


class AppConfig:
    """Process-level settings read from the environment."""

    def __init__(self):
        self.api_version = os.getenv("API_VERSION", "v1")

        # "redis" or "memory"
        self.passphrase_backend = os.getenv("PASSPHRASE_BACKEND", "redis").lower()


def create_app(
    config: Optional[AppConfig] = None,
    storage_config: Optional[StorageConfig] = None,
) -> Flask:
    """
    Build the application.

    Args:
        config: Process settings, read from the environment if None
        storage_config: Storage and sweep configuration, uses default if None

    Returns:
        Configured Flask application
    """
    if config is None:
        config = AppConfig()
    if storage_config is None:
        storage_config = StorageConfig()

    setup_logging()

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = storage_config.max_upload_bytes

    CORS(
        app,
        resources={
            r"/*": {
                "origins": "*",
                "methods": ["GET", "POST", "OPTIONS"],
                "allow_headers": ["Content-Type", "X-File-Password"],
                "expose_headers": ["Content-Disposition", "Content-Length"],
                "max_age": 3600,
            }
        },
    )

    _initialize_infrastructure(app, config)

    _initialize_services(app, config, storage_config)

    _register_blueprints(app, config)

    _register_error_handlers(app)

    _register_health_endpoint(app, config)

    _start_sweeper(app, storage_config)

    return app


def _initialize_infrastructure(app: Flask, config: AppConfig) -> None:
    """
    Initialize infrastructure components (Redis, Celery).

    Neither connects eagerly; an unreachable Redis shows up in /health and
    as 503 on passphrase lookups.
    """
    try:
        if config.passphrase_backend == "redis":
            init_redis()
            logger.info("Redis initialized successfully")

        app.celery = make_celery(app)
        logger.info("Celery initialized successfully")

    except Exception as e:
        logger.warning(f"Could not initialize infrastructure: {e}")
        app.celery = None


def _create_passphrase_repository(config: AppConfig, policy: ExpirationPolicy) -> PassphraseRepository:
    if config.passphrase_backend == "memory":
        return InMemoryPassphraseRepository(clock=policy.now)
    return RedisPassphraseRepository(get_redis_repository())


def _initialize_services(app: Flask, config: AppConfig, storage_config: StorageConfig) -> None:
    """
    Build the file-sharing services and register them in a DependencyContainer.

    The container and the most used services are also set as app attributes.
    A store that cannot be created leaves them all None; /health then
    reports storage as unavailable.

    Args:
        app: Flask application
        config: Application configuration
        storage_config: Storage and sweep configuration
    """
    try:
        container = DependencyContainer()

        # Infrastructure adapters
        policy = ExpirationPolicy()
        store = StorageFactory.create_storage(storage_config)
        passphrase_repository = _create_passphrase_repository(config, policy)

        container.register_singleton(IObjectStore, store)
        container.register_singleton(PassphraseRepository, passphrase_repository)

        # Domain services
        codec = ObjectKeyCodec()
        allocator = IdentifierAllocator(
            min_length=storage_config.identifier_min_length,
            max_length=storage_config.identifier_max_length,
            max_attempts=storage_config.identifier_max_attempts,
        )
        lifecycle_manager = LifecycleManager(
            store,
            codec,
            policy,
            allocator,
            stale_upload_age=timedelta(seconds=storage_config.stale_upload_seconds),
            chunk_size=storage_config.download_chunk_size,
            reserved_identifiers=RESERVED_IDENTIFIERS,
        )

        container.register_singleton(ObjectKeyCodec, codec)
        container.register_singleton(ExpirationPolicy, policy)
        container.register_singleton(IdentifierAllocator, allocator)
        container.register_singleton(LifecycleManager, lifecycle_manager)

        # Application services
        share_service = ShareService(
            lifecycle_manager,
            passphrase_repository,
            public_base_url=storage_config.public_base_url,
        )
        container.register_singleton(ShareService, share_service)

        app.container = container
        app.lifecycle_manager = lifecycle_manager
        app.share_service = share_service
        app.object_store = store

        logger.info(
            f"Application services initialized ({len(container)} singletons, "
            f"passphrases in {config.passphrase_backend})"
        )

    except (RuntimeError, ValueError) as e:
        logger.error(f"Could not initialize services: {e}")
        app.container = None
        app.lifecycle_manager = None
        app.share_service = None
        app.object_store = None


def _register_blueprints(app: Flask, config: AppConfig) -> None:
    """Register the API v1 and short-link blueprints."""
    from fileshare.api.short_links import short_links_bp
    from fileshare.api.v1 import api_v1_bp

    app.register_blueprint(api_v1_bp)
    app.register_blueprint(short_links_bp)

    logger.info(
        f"API {config.api_version} registered at /api/{config.api_version} "
        f"with Swagger UI at /api/{config.api_version}/docs"
    )


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(RequestEntityTooLarge)
    def too_large(error):
        return create_error_response(
            ErrorCategory.FILE_TOO_LARGE, str(error.description), status_code=413
        )


def _start_sweeper(app: Flask, storage_config: StorageConfig) -> None:
    """
    Sweep once at startup, then keep sweeping in-process if enabled.

    With SWEEP_IN_PROCESS=false the Celery beat task owns the schedule.
    """
    app.sweep_scheduler = None
    if app.lifecycle_manager is None:
        return

    if storage_config.sweep_in_process:
        scheduler = SweepScheduler(
            app.lifecycle_manager.sweep,
            interval_seconds=storage_config.sweep_interval_seconds,
        )
        scheduler.start()
        app.sweep_scheduler = scheduler
    else:
        app.lifecycle_manager.sweep()


def _component_states(app: Flask, config: AppConfig) -> Dict[str, str]:
    store = getattr(app, "object_store", None)
    storage = "available" if store is not None and store.is_available() else "unavailable"

    if config.passphrase_backend != "redis":
        redis_state = "not_configured"
    else:
        redis_state = "connected" if redis_health_check() else "disconnected"

    celery = "available" if getattr(app, "celery", None) is not None else "unavailable"

    scheduler = getattr(app, "sweep_scheduler", None)
    if scheduler is None:
        sweeper = "external"
    else:
        sweeper = "running" if scheduler.is_running else "stopped"

    return {"storage": storage, "redis": redis_state, "celery": celery, "sweeper": sweeper}


def _get_health_status(app: Flask, config: AppConfig) -> Tuple[Dict[str, str], int]:
    """
    Summarize component states.

    Celery is informational; uploads and downloads work without it. Any
    other unhealthy component makes the status "degraded" and the code 503.
    """
    components = _component_states(app, config)
    degraded = (
        components["storage"] == "unavailable"
        or components["redis"] == "disconnected"
        or components["sweeper"] == "stopped"
    )
    body = {
        "status": "degraded" if degraded else "ok",
        "message": "backend degraded" if degraded else "backend ready",
    }
    body.update(components)
    return body, 503 if degraded else 200


def _register_health_endpoint(app: Flask, config: AppConfig) -> None:
    @app.route("/health", methods=["GET"])
    def health():
        """Component states for load balancers and operators."""
        body, status_code = _get_health_status(app, config)
        return jsonify(body), status_code
