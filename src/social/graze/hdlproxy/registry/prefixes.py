"""The prefix-to-endpoint registry.

The registry holds an immutable snapshot of the prefix ownership map. A refresh builds a complete
new map and publishes it by swapping a single reference, so concurrent readers observe either the
previous ownership or the new one, never a mix of both.
"""

from types import MappingProxyType
from typing import Iterator, Mapping, Optional


class PrefixRegistry:
    """Maps naming authority prefixes to the base URL of the repository that owns them.

    Prefixes are compared by exact, case-sensitive string equality.
    """

    def __init__(self, mapping: Optional[Mapping[str, str]] = None) -> None:
        self._snapshot: Mapping[str, str] = MappingProxyType(dict(mapping or {}))

    def lookup(self, prefix: str) -> Optional[str]:
        return self._snapshot.get(prefix)

    def snapshot(self) -> Mapping[str, str]:
        """Return the currently published mapping. It is read-only."""
        return self._snapshot

    def replace(self, mapping: Mapping[str, str]) -> None:
        self._snapshot = MappingProxyType(dict(mapping))

    def __contains__(self, prefix: object) -> bool:
        return prefix in self._snapshot

    def __len__(self) -> int:
        return len(self._snapshot)

    def __iter__(self) -> Iterator[str]:
        return iter(self._snapshot)

    def __repr__(self) -> str:
        return f"PrefixRegistry({dict(self._snapshot)!r})"
