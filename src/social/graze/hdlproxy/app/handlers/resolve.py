import base64
import json
from typing import Any, Dict

from aiohttp import web

from social.graze.hdlproxy.app.config import HandleStorageAppKey, HealthGaugeAppKey
from social.graze.hdlproxy.errors import RemoteResolutionError
from social.graze.hdlproxy.resolve.authority import authority_exists, list_handles
from social.graze.hdlproxy.resolve.handle import ResolutionOutcome, ResolutionStatus

RESOLUTION_FAILURE = {"error": "Internal Resolution Failure"}


def outcome_json(outcome: ResolutionOutcome) -> Dict[str, Any]:
    values = []
    value = outcome.value
    if value is not None:
        values.append(
            {
                **value.model_dump(),
                "encoded": base64.b64encode(value.encode()).decode("ascii"),
            }
        )
    return {
        "handle": outcome.handle,
        "status": outcome.status.name,
        "values": values,
    }


async def handle_api_resolve(request: web.Request):
    handles = request.query.getall("handle", [])
    if len(handles) == 0:
        return web.json_response([])

    handle_storage = request.app[HandleStorageAppKey]
    health_gauge = request.app[HealthGaugeAppKey]

    results = []
    for handle in handles:
        outcome = await handle_storage.resolve(handle)
        if outcome.status == ResolutionStatus.transient_error:
            await health_gauge.record_failure()
        results.append(outcome_json(outcome))
    return web.json_response(results)


def _na_param(request: web.Request) -> str:
    na_handle = request.query.get("na", "").strip()
    if len(na_handle) == 0:
        raise web.HTTPBadRequest(
            body=json.dumps({"error": "Missing na parameter"}),
            content_type="application/json",
        )
    return na_handle


async def handle_api_authority(request: web.Request):
    na_handle = _na_param(request)
    handle_storage = request.app[HandleStorageAppKey]
    return web.json_response(
        {"na": na_handle, "exists": authority_exists(handle_storage.registry, na_handle)}
    )


async def handle_api_authority_handles(request: web.Request):
    na_handle = _na_param(request)
    handle_storage = request.app[HandleStorageAppKey]

    try:
        handles = await list_handles(
            handle_storage.session, handle_storage.registry, na_handle
        )
    except RemoteResolutionError:
        await request.app[HealthGaugeAppKey].record_failure()
        raise web.HTTPBadGateway(
            body=json.dumps(RESOLUTION_FAILURE),
            content_type="application/json",
        )
    return web.json_response(handles)
