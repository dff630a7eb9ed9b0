"""Error types shared across the registry, resolver and storage layers."""

from enum import IntEnum
from typing import Optional, Sequence


class RegistryEmptyError(Exception):
    """Raised when no configured repository contributed a single prefix.

    The caller decides whether to abort startup or continue degraded.
    """

    def __init__(self, endpoints: Sequence[str]) -> None:
        self.endpoints = list(endpoints)
        super().__init__(
            f"Unable to find configuration or reach any repository ({len(self.endpoints)} configured)"
        )


class RemoteRepositoryError(Exception):
    """A remote repository answered with a non-success HTTP status."""

    def __init__(self, url: str, status: int) -> None:
        self.url = url
        self.status = status
        super().__init__(f"{url} returned HTTP {status}")


class RemoteResolutionError(Exception):
    """A repository could not be queried or its answer could not be understood.

    Only raised where an empty answer would otherwise be indistinguishable from a failure,
    e.g. naming authority listings.
    """

    def __init__(self, target: str, cause: Optional[BaseException] = None) -> None:
        self.target = target
        self.cause = cause
        super().__init__(f"Unable to query remote repository for {target}")


class HandleErrorCode(IntEnum):
    """Error codes surfaced to a handle server host."""

    internal_error = 1
    handle_does_not_exist = 100


class HandleException(Exception):
    """Failure reported across the handle storage boundary.

    The message is deliberately generic; the underlying cause is logged where it happened.
    """

    def __init__(self, code: HandleErrorCode, message: Optional[str] = None) -> None:
        self.code = code
        super().__init__(message or code.name.replace("_", " "))
