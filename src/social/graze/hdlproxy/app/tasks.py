import asyncio
import logging
from typing import NoReturn

from aiohttp import web
import sentry_sdk

from social.graze.hdlproxy.app.config import (
    HandleStorageAppKey,
    HealthGaugeAppKey,
    SettingsAppKey,
)

logger = logging.getLogger(__name__)


async def tick_health_task(app: web.Application) -> NoReturn:
    """
    Tick the health gauge every 30 seconds, reducing the failure count by 1 each time.
    """

    logger.info("Starting health gauge task")

    health_gauge = app[HealthGaugeAppKey]
    while True:
        await health_gauge.tick()
        await asyncio.sleep(30)


async def registry_refresh_task(app: web.Application) -> NoReturn:
    """
    Reload the prefix registry every `registry_refresh_interval` seconds.

    A refresh that reaches no repository keeps the previously published registry. Configuration
    errors (e.g. an unreadable properties file) are reported and retried on the next interval.
    """

    settings = app[SettingsAppKey]
    handle_storage = app[HandleStorageAppKey]

    logger.info(
        "Starting registry refresh task, interval %ds", settings.registry_refresh_interval
    )

    while True:
        await asyncio.sleep(settings.registry_refresh_interval)
        try:
            await handle_storage.refresh(settings.endpoints())
        except Exception as e:
            logger.exception("Error refreshing prefix registry")
            sentry_sdk.capture_exception(e)
