"""Handle storage backed by remote repositories.

RemoteHandleStorage is what a handle server host talks to. It owns the prefix registry and
translates resolution outcomes into the host's contract: encoded values for found handles, None
for missing handles and a generic HandleException for anything that went wrong remotely.
"""

import logging
from time import time
from typing import List, Optional, Sequence

from aiohttp import ClientSession

from social.graze.hdlproxy.app.metrics import MetricsClient, NoOpMetricsClient
from social.graze.hdlproxy.errors import (
    HandleErrorCode,
    HandleException,
    RegistryEmptyError,
    RemoteResolutionError,
)
from social.graze.hdlproxy.registry.loader import load_registry
from social.graze.hdlproxy.registry.prefixes import PrefixRegistry
from social.graze.hdlproxy.resolve.authority import authority_exists, list_handles
from social.graze.hdlproxy.resolve.handle import (
    ResolutionOutcome,
    ResolutionStatus,
    resolve_handle,
)
from social.graze.hdlproxy.storage.base import HandleResolution, ReadOnlyAdministration

logger = logging.getLogger(__name__)


class RemoteHandleStorage(HandleResolution, ReadOnlyAdministration):
    """
    Read-only handle storage that routes every request to the repository owning its prefix.

    The registry starts empty; call `init` once before serving requests. `refresh` reloads it
    later without disturbing requests in flight.
    """

    def __init__(
        self,
        session: ClientSession,
        registry: Optional[PrefixRegistry] = None,
        metrics_client: Optional[MetricsClient] = None,
    ) -> None:
        self.session = session
        self.registry = registry if registry is not None else PrefixRegistry()
        self.metrics_client = metrics_client or NoOpMetricsClient()

    async def init(self, endpoints: Sequence[str]) -> PrefixRegistry:
        """
        Load the registry from the configured repositories.

        Raises:
            RegistryEmptyError: If no repository contributed a prefix
        """
        logger.info("Loading prefixes from %d configured repositories", len(endpoints))
        await load_registry(self.session, endpoints, self.registry)
        self.metrics_client.gauge("hdlproxy.registry.prefixes", len(self.registry))
        return self.registry

    async def refresh(self, endpoints: Sequence[str]) -> bool:
        """
        Reload the registry, keeping the current one if no repository answers.

        Returns:
            True if a new registry was published
        """
        try:
            await self.init(endpoints)
        except RegistryEmptyError:
            logger.error(
                "Registry refresh found no prefixes, keeping %d previously loaded",
                len(self.registry),
            )
            return False
        return True

    async def resolve(self, handle: str) -> ResolutionOutcome:
        """Resolve a handle and record its outcome."""
        start_time = time()
        outcome = await resolve_handle(self.session, self.registry, handle)
        self.metrics_client.timer("hdlproxy.resolve.time", time() - start_time)
        self.metrics_client.increment(
            "hdlproxy.resolve.count", 1, tag_dict={"status": outcome.status.name}
        )
        return outcome

    async def get_raw_handle_values(
        self,
        handle: bytes,
        index_list: Optional[Sequence[int]] = None,
        type_list: Optional[Sequence[bytes]] = None,
    ) -> Optional[List[bytes]]:
        if handle is None:
            raise HandleException(HandleErrorCode.internal_error)

        try:
            decoded_handle = handle.decode("utf-8")
        except UnicodeDecodeError:
            logger.warning("Unable to decode handle %r", handle)
            raise HandleException(HandleErrorCode.internal_error)

        outcome = await self.resolve(decoded_handle)
        if outcome.status == ResolutionStatus.transient_error:
            raise HandleException(HandleErrorCode.internal_error)

        value = outcome.value
        if value is None:
            return None
        return [value.encode()]

    async def have_na(self, na_handle: bytes) -> bool:
        try:
            decoded_na_handle = na_handle.decode("utf-8")
        except UnicodeDecodeError:
            logger.warning("Unable to decode naming authority %r", na_handle)
            raise HandleException(HandleErrorCode.internal_error)
        return authority_exists(self.registry, decoded_na_handle)

    async def get_handles_for_na(self, na_handle: bytes) -> List[bytes]:
        try:
            decoded_na_handle = na_handle.decode("utf-8")
            handles = await list_handles(self.session, self.registry, decoded_na_handle)
        except (UnicodeDecodeError, RemoteResolutionError):
            raise HandleException(HandleErrorCode.internal_error)
        return [handle.encode("utf-8") for handle in handles]
