import asyncio
import contextlib
import logging
from time import time
from typing import (
    Optional,
)
from aiohttp import web
import aiohttp
import sentry_sdk
from sentry_sdk.integrations.aiohttp import AioHttpIntegration

from social.graze.hdlproxy.app.config import (
    HandleStorageAppKey,
    HealthGaugeAppKey,
    MetricsClientAppKey,
    RegistryRefreshTaskAppKey,
    SessionAppKey,
    Settings,
    SettingsAppKey,
    TickHealthTaskAppKey,
)
from social.graze.hdlproxy.app.handlers.internal import (
    handle_internal_alive,
    handle_internal_ready,
    handle_internal_registry,
    handle_internal_registry_refresh,
)
from social.graze.hdlproxy.app.handlers.resolve import (
    handle_api_authority,
    handle_api_authority_handles,
    handle_api_resolve,
)
from social.graze.hdlproxy.app.metrics import (
    TelegrafCompatibilityClient,
    create_metrics_client,
)
from social.graze.hdlproxy.app.tasks import registry_refresh_task, tick_health_task
from social.graze.hdlproxy.errors import RegistryEmptyError
from social.graze.hdlproxy.model.health import HealthGauge
from social.graze.hdlproxy.storage.remote import RemoteHandleStorage

logger = logging.getLogger(__name__)


async def background_tasks(app):
    logger.info("Starting up")
    settings: Settings = app[SettingsAppKey]

    trace_config = aiohttp.TraceConfig()

    if settings.debug:

        async def on_request_start(
            session, trace_config_ctx, params: aiohttp.TraceRequestStartParams
        ):
            logging.info("Starting request: %s", params)

        async def on_request_end(session, trace_config_ctx, params):
            logging.info("Ending request: %s", params)

        trace_config.on_request_start.append(on_request_start)
        trace_config.on_request_end.append(on_request_end)

    app[SessionAppKey] = aiohttp.ClientSession(trace_configs=[trace_config])

    metrics_client = create_metrics_client(
        settings.metrics_backend,
        host=settings.statsd_host,
        port=settings.statsd_port,
        debug=settings.debug,
    )
    if isinstance(metrics_client, TelegrafCompatibilityClient):
        await metrics_client.connect()
    app[MetricsClientAppKey] = metrics_client

    handle_storage = RemoteHandleStorage(
        app[SessionAppKey], metrics_client=metrics_client
    )
    app[HandleStorageAppKey] = handle_storage

    try:
        await handle_storage.init(settings.endpoints())
    except RegistryEmptyError:
        if settings.require_registry:
            await app[SessionAppKey].close()
            await metrics_client.close()
            raise
        logger.error(
            "Unable to find configuration or reach any repository, starting with an empty registry"
        )

    logger.info("Startup complete")

    app[TickHealthTaskAppKey] = asyncio.create_task(tick_health_task(app))
    if settings.registry_refresh_interval > 0:
        app[RegistryRefreshTaskAppKey] = asyncio.create_task(registry_refresh_task(app))

    yield

    logger.info("Shutting down background tasks")

    tasks = [app[TickHealthTaskAppKey]]
    if RegistryRefreshTaskAppKey in app:
        tasks.append(app[RegistryRefreshTaskAppKey])

    for task in tasks:
        task.cancel()

    for task in tasks:
        with contextlib.suppress(asyncio.exceptions.CancelledError):
            await task

    await app[SessionAppKey].close()
    await app[MetricsClientAppKey].close()


@web.middleware
async def sentry_middleware(request: web.Request, handler):
    try:
        response = await handler(request)
        return response
    except web.HTTPException:
        raise
    except Exception as e:
        sentry_sdk.capture_exception(e)
        raise e


@web.middleware
async def statsd_middleware(request: web.Request, handler):
    metrics_client = request.app[MetricsClientAppKey]
    request_method: str = request.method
    request_path = request.path

    start_time: float = time()
    response_status_code = 0

    try:
        response = await handler(request)
        response_status_code = response.status
        return response
    except web.HTTPException as e:
        response_status_code = e.status
        raise e
    except Exception as e:
        metrics_client.increment(
            "hdlproxy.server.request.exception",
            1,
            tag_dict={
                "exception": type(e).__name__,
                "path": request_path,
                "method": request_method,
            },
        )
        raise e
    finally:
        metrics_client.timer(
            "hdlproxy.server.request.time",
            time() - start_time,
            tag_dict={"path": request_path, "method": request_method},
        )
        metrics_client.increment(
            "hdlproxy.server.request.count",
            1,
            tag_dict={
                "path": request_path,
                "method": request_method,
                "status": response_status_code,
            },
        )


async def start_web_server(settings: Optional[Settings] = None):

    if settings is None:
        settings = Settings()  # type: ignore
    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            send_default_pii=True,
            integrations=[AioHttpIntegration()],
        )
    app = web.Application(middlewares=[statsd_middleware, sentry_middleware])

    app[SettingsAppKey] = settings
    app[HealthGaugeAppKey] = HealthGauge()

    app.add_routes(
        [
            web.get("/internal/alive", handle_internal_alive),
            web.get("/internal/ready", handle_internal_ready),
            web.get("/internal/api/registry", handle_internal_registry),
            web.post("/internal/api/registry/refresh", handle_internal_registry_refresh),
        ]
    )

    app.add_routes(
        [
            web.get("/api/resolve", handle_api_resolve),
            web.get("/api/authority", handle_api_authority),
            web.get("/api/authority/handles", handle_api_authority_handles),
        ]
    )

    app.cleanup_ctx.append(background_tasks)

    return app
