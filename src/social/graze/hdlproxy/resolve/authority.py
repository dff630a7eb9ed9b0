"""Naming authority queries.

Naming authorities are addressed either by their bare prefix (`10673`) or by their naming
authority handle (`0.NA/10673`). Both forms are accepted everywhere.
"""

import logging
from typing import List

from aiohttp import ClientSession
import sentry_sdk

from social.graze.hdlproxy.errors import RemoteResolutionError
from social.graze.hdlproxy.registry.prefixes import PrefixRegistry
from social.graze.hdlproxy.resolve.remote import fetch_handles

logger = logging.getLogger(__name__)

NA_HANDLE_MARKER = "0.NA/"


def authority_prefix(na_handle: str) -> str:
    """Strip the `0.NA/` marker from a naming authority handle."""
    return na_handle.removeprefix(NA_HANDLE_MARKER)


def authority_exists(registry: PrefixRegistry, na_handle: str) -> bool:
    """Check whether any configured repository has claimed the naming authority.

    This is answered from the registry alone. It says nothing about whether the repository
    currently holds any handles under the authority.
    """
    return authority_prefix(na_handle) in registry


async def list_handles(
    session: ClientSession, registry: PrefixRegistry, na_handle: str
) -> List[str]:
    """List every handle under a naming authority.

    Args:
        session: HTTP client session
        registry: Prefix registry used for routing
        na_handle: Prefix or `0.NA/` naming authority handle

    Returns:
        Handles in the order the repository returned them; empty for unknown authorities

    Raises:
        RemoteResolutionError: If the owning repository could not be enumerated
    """
    prefix = authority_prefix(na_handle)
    endpoint = registry.lookup(prefix)
    if endpoint is None:
        return []

    try:
        return await fetch_handles(session, endpoint, prefix)
    except Exception as e:
        logger.error("Exception listing handles for %s at %s", prefix, endpoint, exc_info=True)
        sentry_sdk.capture_exception(e)
        raise RemoteResolutionError(prefix, e) from e
