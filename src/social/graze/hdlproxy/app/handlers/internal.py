from aiohttp import web

from social.graze.hdlproxy.app.config import (
    HandleStorageAppKey,
    HealthGaugeAppKey,
    SettingsAppKey,
)


async def handle_internal_ready(request: web.Request):
    health_gauge = request.app[HealthGaugeAppKey]
    handle_storage = request.app[HandleStorageAppKey]
    if len(handle_storage.registry) > 0 and await health_gauge.is_healthy():
        return web.Response(status=200)
    return web.Response(status=503)

async def handle_internal_alive(request: web.Request):
    return web.Response(status=200)

async def handle_internal_registry(request: web.Request):
    handle_storage = request.app[HandleStorageAppKey]
    return web.json_response(dict(handle_storage.registry.snapshot()))

async def handle_internal_registry_refresh(request: web.Request):
    settings = request.app[SettingsAppKey]
    handle_storage = request.app[HandleStorageAppKey]

    refreshed = await handle_storage.refresh(settings.endpoints())
    body = {"refreshed": refreshed, "prefixes": len(handle_storage.registry)}
    if not refreshed:
        return web.json_response(body, status=503)
    return web.json_response(body)
