"""Handle resolution against the owning remote repository.

Routes a handle to the repository that owns its prefix and turns the repository's answer into one
of three outcomes: found, not found or a transient error.
"""

from enum import IntEnum
import logging
from typing import Optional

from aiohttp import ClientSession
from pydantic import BaseModel, ConfigDict
import sentry_sdk

from social.graze.hdlproxy.model.value import HandleValue
from social.graze.hdlproxy.registry.prefixes import PrefixRegistry
from social.graze.hdlproxy.resolve.remote import fetch_location

logger = logging.getLogger(__name__)


class ResolutionStatus(IntEnum):
    """Outcome of a single handle resolution.

    A transient error means the owning repository could not be queried or its answer could not be
    understood. It never means the handle does not exist.
    """

    found = 1
    not_found = 2
    transient_error = 3


class ParsedHandle(BaseModel):
    """A handle split into its naming authority prefix and local suffix."""

    model_config = ConfigDict(frozen=True)

    prefix: str
    suffix: str


class ResolutionOutcome(BaseModel):
    """Result of resolving a handle.

    The location is only set when the status is found.
    """

    status: ResolutionStatus
    handle: str
    location: Optional[str] = None

    @property
    def value(self) -> Optional[HandleValue]:
        """The URL handle value for a found handle, built fresh on each access."""
        if self.location is None:
            return None
        return HandleValue.for_location(self.location)


def parse_handle(handle: str) -> Optional[ParsedHandle]:
    """Split a handle on its first `/`.

    Args:
        handle: Handle such as `10673/1`

    Returns:
        ParsedHandle, or None when the prefix is empty
    """
    prefix, _, suffix = handle.partition("/")
    if len(prefix) == 0:
        return None
    return ParsedHandle(prefix=prefix, suffix=suffix)


async def resolve_handle(
    session: ClientSession, registry: PrefixRegistry, handle: str
) -> ResolutionOutcome:
    """Resolve a handle to its location.

    Handles whose prefix is not in the registry are reported as not found without contacting
    any repository. Otherwise the owning repository's resolve API is queried once; there are no
    retries.

    Args:
        session: HTTP client session
        registry: Prefix registry used for routing
        handle: Handle to resolve

    Returns:
        ResolutionOutcome with status found, not_found or transient_error
    """
    parsed_handle = parse_handle(handle)
    if parsed_handle is None:
        return ResolutionOutcome(status=ResolutionStatus.not_found, handle=handle)

    endpoint = registry.lookup(parsed_handle.prefix)
    if endpoint is None:
        logger.debug("Cannot find endpoint for prefix %s", parsed_handle.prefix)
        return ResolutionOutcome(status=ResolutionStatus.not_found, handle=handle)

    try:
        location = await fetch_location(session, endpoint, handle)
    except Exception as e:
        logger.warning(
            "Exception resolving handle %s at %s", handle, endpoint, exc_info=True
        )
        sentry_sdk.capture_exception(e)
        return ResolutionOutcome(status=ResolutionStatus.transient_error, handle=handle)

    if location is None:
        return ResolutionOutcome(status=ResolutionStatus.not_found, handle=handle)

    logger.debug("Resolved %s to %s", handle, location)
    return ResolutionOutcome(
        status=ResolutionStatus.found, handle=handle, location=location
    )
