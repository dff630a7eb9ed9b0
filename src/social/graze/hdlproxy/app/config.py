"""
Configuration Module for hdlproxy

This module defines the configuration system for hdlproxy, using Pydantic settings for validation
and typed aiohttp AppKeys for dependency injection.

The Settings class is loaded from environment variables with defaults suitable for development.
Repository endpoints can come from two places, which are merged in this order:
1. HANDLE_ENDPOINTS, a comma-separated list of repository base URLs
2. A properties file named by HANDLE_PLUGIN_CONFIGURATION, where every key starting with
   `dspace.handle.endpoint` names one repository base URL, e.g.

       dspace.handle.endpoint1 = http://repo1.example.org/handleresolver
       dspace.handle.endpoint2 = http\\://repo2.example.org/handleresolver
"""

import asyncio
from typing import Annotated, Dict, Final, Iterable, Iterator, List, Mapping, Optional, Tuple
import logging
import re

from aiohttp import ClientSession, web
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode

from social.graze.hdlproxy.app.metrics import MetricsClient
from social.graze.hdlproxy.model.health import HealthGauge
from social.graze.hdlproxy.storage.remote import RemoteHandleStorage


logger = logging.getLogger(__name__)

ENDPOINT_PROPERTY_KEY = "dspace.handle.endpoint"
"""Every property whose key starts with this marker names a repository base URL."""

PROPERTY_WHITESPACE = " \t\f"
PROPERTY_SEPARATORS = ("=", ":")
PROPERTY_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
PROPERTY_ESCAPE_PATTERN = re.compile(r"\\(u[0-9a-fA-F]{4}|.)", re.DOTALL)


def _is_continued(line: str) -> bool:
    # An odd run of trailing backslashes escapes the line break.
    return (len(line) - len(line.rstrip("\\"))) % 2 == 1


def _logical_lines(lines: Iterable[str]) -> Iterator[str]:
    continued: Optional[str] = None
    for line in lines:
        line = line.rstrip("\r\n").lstrip(PROPERTY_WHITESPACE)
        if continued is None:
            if len(line) == 0 or line[0] in "#!":
                continue
            continued = ""
        if _is_continued(line):
            continued += line[:-1]
            continue
        yield continued + line
        continued = None
    if continued is not None:
        yield continued


def _unescape(text: str) -> str:
    def replace(match: re.Match) -> str:
        escaped = match.group(1)
        if escaped[0] == "u" and len(escaped) == 5:
            return chr(int(escaped[1:], 16))
        return PROPERTY_ESCAPES.get(escaped, escaped)

    return PROPERTY_ESCAPE_PATTERN.sub(replace, text)


def _split_property(line: str) -> Tuple[str, str]:
    end = 0
    while end < len(line):
        if line[end] == "\\":
            end += 2
            continue
        if line[end] in PROPERTY_WHITESPACE or line[end] in PROPERTY_SEPARATORS:
            break
        end += 1

    remainder = line[end:]
    if remainder[:1] in PROPERTY_SEPARATORS:
        remainder = remainder[1:]
    else:
        remainder = remainder.lstrip(PROPERTY_WHITESPACE)
        if remainder[:1] in PROPERTY_SEPARATORS:
            remainder = remainder[1:]
    return _unescape(line[:end]), _unescape(remainder.lstrip(PROPERTY_WHITESPACE))


def load_properties(path: str) -> Dict[str, str]:
    """
    Read a properties file in the `java.util.Properties.load` line format.

    Keys and values are separated by the first unescaped `=`, `:` or whitespace. Lines starting
    with `#` or `!` are comments, backslash escapes such as `http\\://` are decoded and a line
    ending in a backslash continues on the next line. Keys keep the order in which they appear in
    the file; a repeated key keeps its last value.
    """
    with open(path, encoding="utf-8") as fd:
        return dict(_split_property(line) for line in _logical_lines(fd))


def endpoints_from_properties(properties: Mapping[str, str]) -> List[str]:
    """Return the repository base URLs named by endpoint properties."""
    return [
        value
        for key, value in properties.items()
        if key.startswith(ENDPOINT_PROPERTY_KEY) and len(value) > 0
    ]


class Settings(BaseSettings):
    """
    Application settings for hdlproxy.

    Environment variables are mapped to settings fields automatically, e.g. HANDLE_ENDPOINTS sets
    handle_endpoints.
    """

    debug: bool = False
    """
    Enable debug mode for verbose logging and request tracing.
    Set with DEBUG=true environment variable.
    """

    http_port: int = Field(alias="port", default=5200)
    """
    HTTP port for the service to listen on.
    Set with PORT environment variable.
    """

    sentry_dsn: Optional[str] = None
    """
    Sentry DSN for error reporting. Optional, no error reporting if not set.
    Set with SENTRY_DSN environment variable.
    """

    handle_endpoints: Annotated[List[str], NoDecode] = list()
    """
    Base URLs of the remote repositories, in priority order (later entries win prefix conflicts).
    Set with HANDLE_ENDPOINTS environment variable as comma-separated values.
    """

    plugin_configuration: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("plugin_configuration", "handle_plugin_configuration"),
    )
    """
    Path to a properties file with `dspace.handle.endpoint*` entries.
    Set with HANDLE_PLUGIN_CONFIGURATION environment variable.
    """

    require_registry: bool = True
    """
    Refuse to start when no repository could be reached at startup. When false the service starts
    with an empty registry and answers every handle as not found until a refresh succeeds.
    Set with REQUIRE_REGISTRY environment variable.
    """

    registry_refresh_interval: int = 0
    """
    Seconds between background registry refreshes. 0 disables periodic refreshes.
    Set with REGISTRY_REFRESH_INTERVAL environment variable.
    """

    metrics_backend: str = "none"
    """
    Metrics backend, 'telegraf' or 'none'.
    Set with METRICS_BACKEND environment variable.
    """

    statsd_host: str = Field(alias="TELEGRAF_HOST", default="telegraf")
    """
    StatsD/Telegraf host for metrics collection.
    Set with TELEGRAF_HOST environment variable.
    """

    statsd_port: int = Field(alias="TELEGRAF_PORT", default=8125)
    """
    StatsD/Telegraf port for metrics collection.
    Set with TELEGRAF_PORT environment variable.
    """

    @field_validator("handle_endpoints", mode="before")
    @classmethod
    def decode_handle_endpoints(cls, v) -> List[str]:
        """
        Accept either a list of URLs or a comma-separated string.
        """
        if isinstance(v, str):
            return [endpoint.strip() for endpoint in v.split(",") if endpoint.strip()]
        return v

    def endpoints(self) -> List[str]:
        """
        Return every configured repository base URL, without duplicates.

        Endpoints from HANDLE_ENDPOINTS come first, followed by those from the properties file.
        """
        endpoints = list(self.handle_endpoints)
        if self.plugin_configuration:
            logger.info("Reading repository endpoints from %s", self.plugin_configuration)
            endpoints.extend(
                endpoints_from_properties(load_properties(self.plugin_configuration))
            )
        return list(dict.fromkeys(endpoints))


# Application context keys for dependency injection
SettingsAppKey: Final = web.AppKey("settings", Settings)
"""AppKey for accessing the application settings"""

SessionAppKey: Final = web.AppKey("http_session", ClientSession)
"""AppKey for accessing the shared aiohttp client session"""

HandleStorageAppKey: Final = web.AppKey("handle_storage", RemoteHandleStorage)
"""AppKey for accessing the remote handle storage and its prefix registry"""

HealthGaugeAppKey: Final = web.AppKey("health_gauge", HealthGauge)
"""AppKey for accessing the health monitoring gauge"""

MetricsClientAppKey: Final = web.AppKey("metrics_client", MetricsClient)
"""AppKey for the metrics client"""

TickHealthTaskAppKey: Final = web.AppKey("tick_health_task", asyncio.Task[None])
"""AppKey for the background task that decays the health gauge"""

RegistryRefreshTaskAppKey: Final = web.AppKey("registry_refresh_task", asyncio.Task[None])
"""AppKey for the background task that periodically reloads the prefix registry"""
