"""Client for the read-only JSON API exposed by each remote repository.

Every repository answers three queries below its configured base URL:

- `{base}/listprefixes`: JSON array of the prefixes it owns
- `{base}/listhandles/{prefix}`: JSON array of the handles under a naming authority
- `{base}/resolve/{handle}`: JSON array whose first element is the handle's location

These functions raise on any failure. Mapping failures to resolution outcomes is left to callers.
"""

from typing import Any, List, Optional
from urllib.parse import quote

from aiohttp import ClientSession
from pydantic import TypeAdapter

from social.graze.hdlproxy.errors import RemoteRepositoryError

_string_list = TypeAdapter(Optional[List[str]])
_candidate_list = TypeAdapter(Optional[List[Any]])
_candidate = TypeAdapter(Optional[str])


def endpoint_url(endpoint: str, *segments: str) -> str:
    """Append path segments to a repository base URL.

    Segments are percent-quoted with `/` left intact so that handles keep their
    `<prefix>/<suffix>` shape in the path.
    """
    path = "/".join(quote(segment, safe="/") for segment in segments)
    return f"{endpoint.rstrip('/')}/{path}"


async def fetch_json(session: ClientSession, url: str) -> Any:
    """GET a URL and decode its body as JSON.

    An empty body decodes to None. The content type is not checked, some repositories serve
    their JSON as text/plain.
    """
    async with session.get(url) as resp:
        if resp.status != 200:
            raise RemoteRepositoryError(url, resp.status)
        return await resp.json(content_type=None)


async def fetch_prefixes(session: ClientSession, endpoint: str) -> List[str]:
    body = await fetch_json(session, endpoint_url(endpoint, "listprefixes"))
    return _string_list.validate_python(body) or []


async def fetch_handles(session: ClientSession, endpoint: str, prefix: str) -> List[str]:
    body = await fetch_json(session, endpoint_url(endpoint, "listhandles", prefix))
    return _string_list.validate_python(body) or []


def first_candidate(body: Any) -> Optional[str]:
    """Take element 0 of a resolve answer, else None.

    Repositories answer with an array so that several locations could be returned, but only the
    first one is ever used. `null`, `[]` and `[null]` all mean the handle has no location.
    """
    candidates = _candidate_list.validate_python(body)
    if not candidates:
        return None
    return _candidate.validate_python(candidates[0])


async def fetch_location(
    session: ClientSession, endpoint: str, handle: str
) -> Optional[str]:
    body = await fetch_json(session, endpoint_url(endpoint, "resolve", handle))
    return first_candidate(body)
