"""Application lifespan: startup and shutdown.

Wires infrastructure only: WebSocket manager, notification publisher
(Redis relay or in-process), telemetry and DB engine dispose.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from workpaper.core.config import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: telemetry (if enabled), WebSocket manager, notification
    publisher. Shutdown order: relay task, publisher disconnect, telemetry
    shutdown, SQL engine dispose.
    """
    settings = get_settings()

    # ---- Startup ----
    telemetry = None
    if settings.telemetry_enabled:
        from workpaper.shared.telemetry.telemetry import TelemetryConfig, set_telemetry

        telemetry = TelemetryConfig(
            service_name=settings.app_name,
            service_version=settings.app_version,
            enabled=True,
            environment=settings.telemetry_environment,
        )
        telemetry.setup_telemetry(
            exporter_type=settings.telemetry_exporter,
            otlp_endpoint=settings.telemetry_otlp_endpoint,
            sample_rate=settings.telemetry_sample_rate,
        )
        set_telemetry(telemetry)
        telemetry.instrument_fastapi(app)
        telemetry.instrument_logging()
        logger.info("Telemetry initialized")

    from workpaper.api.websocket import ConnectionManager

    app.state.ws_manager = ConnectionManager()

    if settings.redis_enabled:
        from workpaper.infrastructure.messaging.redis_pubsub import (
            RedisNotificationPublisher,
            run_notification_relay,
        )

        if telemetry is not None:
            telemetry.instrument_redis()
        publisher = RedisNotificationPublisher()
        await publisher.connect()
        app.state.notification_publisher = publisher
        app.state.notification_relay_task = asyncio.create_task(
            run_notification_relay(app)
        )
    else:
        from workpaper.infrastructure.messaging.local_publisher import (
            WebSocketNotificationPublisher,
        )

        app.state.notification_publisher = WebSocketNotificationPublisher(
            app.state.ws_manager
        )
        app.state.notification_relay_task = None
        logger.info("Redis disabled, pushing notifications in-process")

    yield

    # ---- Shutdown ----
    relay_task = getattr(app.state, "notification_relay_task", None)
    if relay_task is not None:
        relay_task.cancel()
        try:
            await relay_task
        except asyncio.CancelledError:
            pass
        logger.info("Notification relay task stopped")

    publisher = getattr(app.state, "notification_publisher", None)
    if publisher is not None and hasattr(publisher, "disconnect"):
        await publisher.disconnect()

    from workpaper.shared.telemetry.telemetry import get_telemetry

    telemetry_instance = get_telemetry()
    if telemetry_instance is not None:
        telemetry_instance.shutdown()

    from workpaper.infrastructure.persistence import database

    if getattr(database, "engine", None) is not None:
        await database.engine.dispose()
        logger.info("Database engine disposed")
