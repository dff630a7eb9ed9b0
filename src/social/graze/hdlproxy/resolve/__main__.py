from typing import List
import argparse
import aiohttp
import asyncio
import logging

logger = logging.getLogger(__name__)

from social.graze.hdlproxy.app.config import Settings
from social.graze.hdlproxy.errors import RegistryEmptyError, RemoteResolutionError
from social.graze.hdlproxy.registry.loader import load_registry
from social.graze.hdlproxy.resolve.authority import list_handles
from social.graze.hdlproxy.resolve.handle import resolve_handle


async def realMain() -> None:
    parser = argparse.ArgumentParser(
        prog="resolve", description="Resolve handles against remote repositories"
    )
    parser.add_argument("handle", nargs="*", help="The handle(s) to resolve.")
    parser.add_argument(
        "--endpoint",
        action="append",
        default=[],
        help="Repository base URL. Repeatable. Defaults to the configured endpoints.",
    )
    parser.add_argument(
        "--list",
        action="append",
        default=[],
        dest="authorities",
        help="Naming authority whose handles should be listed. Repeatable.",
    )

    args = vars(parser.parse_args())

    endpoints: List[str] = args.get("endpoint") or Settings().endpoints()  # type: ignore

    async with aiohttp.ClientSession() as session:
        try:
            registry = await load_registry(session, endpoints)
        except RegistryEmptyError:
            logger.exception("Unable to load prefixes from %s", endpoints)
            return

        for authority in args.get("authorities", []):
            try:
                handles = await list_handles(session, registry, authority)
                print(f"handles {authority}: {','.join(handles)}")
            except RemoteResolutionError:
                logging.exception("Exception listing handles for %s", authority)

        for handle in args.get("handle", []):
            outcome = await resolve_handle(session, registry, handle)
            print(f"{outcome.status.name} {handle} {outcome.location or ''}".rstrip())


def main() -> None:
    asyncio.run(realMain())


if __name__ == "__main__":
    main()
