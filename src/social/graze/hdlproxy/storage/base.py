"""Handle storage capabilities expected by a handle server host.

A handle server talks to its storage through one wide interface covering both resolution and
administration. hdlproxy only resolves, so the interface is split in two: `HandleResolution` is
the part that does real work and `ReadOnlyAdministration` is an inert implementation of
everything else.
"""

from abc import ABC, abstractmethod
import logging
from typing import Any, Callable, List, Optional, Sequence

logger = logging.getLogger(__name__)


class HandleResolution(ABC):
    """Read side of a handle storage."""

    @abstractmethod
    async def get_raw_handle_values(
        self,
        handle: bytes,
        index_list: Optional[Sequence[int]] = None,
        type_list: Optional[Sequence[bytes]] = None,
    ) -> Optional[List[bytes]]:
        """
        Return the encoded values of a handle.

        Args:
            handle: UTF-8 encoded handle
            index_list: Requested value indexes; may be ignored
            type_list: Requested value types; may be ignored

        Returns:
            Encoded handle values, or None if the handle does not exist

        Raises:
            HandleException: If the handle could not be resolved
        """
        pass

    @abstractmethod
    async def have_na(self, na_handle: bytes) -> bool:
        """Return True if this storage is responsible for the naming authority."""
        pass

    @abstractmethod
    async def get_handles_for_na(self, na_handle: bytes) -> List[bytes]:
        """
        Return every handle under a naming authority.

        Raises:
            HandleException: If the handles could not be enumerated
        """
        pass


class ReadOnlyAdministration:
    """
    Administrative half of a handle storage for a read-only backend.

    Every call is logged and ignored. No call raises and none of them touch the resolution state.
    """

    def _unsupported(self, name: str) -> None:
        logger.info("Called %s (not supported, storage is read-only)", name)

    async def init_storage(self, config: Any = None) -> None:
        self._unsupported("init_storage")

    async def set_have_na(self, na_handle: bytes, have_it: bool) -> None:
        self._unsupported("set_have_na")

    async def create_handle(self, handle: bytes, values: Sequence[Any]) -> None:
        self._unsupported("create_handle")

    async def delete_handle(self, handle: bytes) -> bool:
        self._unsupported("delete_handle")
        return False

    async def update_value(self, handle: bytes, values: Sequence[Any]) -> None:
        self._unsupported("update_value")

    async def delete_all_records(self) -> None:
        self._unsupported("delete_all_records")

    async def checkpoint_database(self) -> None:
        self._unsupported("checkpoint_database")

    async def scan_handles(self, callback: Callable[[bytes], Any]) -> None:
        self._unsupported("scan_handles")

    async def scan_nas(self, callback: Callable[[bytes], Any]) -> None:
        self._unsupported("scan_nas")

    async def shutdown(self) -> None:
        self._unsupported("shutdown")
