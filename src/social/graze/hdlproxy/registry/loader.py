"""Builds the prefix registry from the configured remote repositories.

Repositories are queried one at a time in configuration order. When two repositories claim the
same prefix the one configured later wins, which keeps the outcome of a conflict deterministic.
A repository that cannot be reached, or that answers with something other than a list of
prefixes, is skipped; only a load in which no repository contributed anything is an error.
"""

import logging
from typing import Dict, Optional, Sequence

from aiohttp import ClientSession

from social.graze.hdlproxy.errors import RegistryEmptyError
from social.graze.hdlproxy.registry.prefixes import PrefixRegistry
from social.graze.hdlproxy.resolve.remote import fetch_prefixes

logger = logging.getLogger(__name__)


async def load_prefixes(
    session: ClientSession, endpoints: Sequence[str]
) -> Dict[str, str]:
    """Query every endpoint for its prefixes and merge the answers.

    Args:
        session: HTTP client session
        endpoints: Repository base URLs, in configuration order

    Returns:
        Mapping of prefix to owning endpoint, possibly empty
    """
    mapping: Dict[str, str] = {}
    for endpoint in endpoints:
        try:
            prefixes = await fetch_prefixes(session, endpoint)
        except Exception as e:
            logger.warning(
                "Error while loading prefixes from %s, ignoring: %s",
                endpoint,
                e,
                exc_info=logger.isEnabledFor(logging.DEBUG),
            )
            continue

        if len(prefixes) == 0:
            logger.warning("Repository at %s returns an empty prefix list", endpoint)
            continue

        for prefix in prefixes:
            previous = mapping.get(prefix)
            if previous is not None and previous != endpoint:
                logger.warning(
                    "Prefix %s is claimed by both %s and %s, using %s",
                    prefix,
                    previous,
                    endpoint,
                    endpoint,
                )
            mapping[prefix] = endpoint
            logger.debug("Mapping %s to repository at %s", prefix, endpoint)

    return mapping


async def load_registry(
    session: ClientSession,
    endpoints: Sequence[str],
    registry: Optional[PrefixRegistry] = None,
) -> PrefixRegistry:
    """Load prefixes from all endpoints and publish them into a registry.

    The new mapping replaces the registry's contents in one step. When no endpoint contributed a
    prefix, RegistryEmptyError is raised and the given registry keeps its previous contents.

    Args:
        session: HTTP client session
        endpoints: Repository base URLs, in configuration order
        registry: Registry to publish into; a new one is created when omitted

    Returns:
        The populated registry

    Raises:
        RegistryEmptyError: If no prefixes could be loaded at all
    """
    mapping = await load_prefixes(session, endpoints)
    if len(mapping) == 0:
        raise RegistryEmptyError(endpoints)

    if registry is None:
        registry = PrefixRegistry()
    registry.replace(mapping)

    for prefix, endpoint in mapping.items():
        logger.info("Loaded prefix %s from %s", prefix, endpoint)

    return registry
