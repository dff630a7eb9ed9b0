"""
hdlproxy - Multi-Repository Handle Resolution Proxy

This package resolves persistent identifiers (handles, `<prefix>/<suffix>`) by routing each
request to the remote repository that owns the handle's prefix. Repositories are independently
operated services exposing a small read-only JSON API; hdlproxy never writes to them and never
caches their answers.

Key Components:
- registry: The prefix-to-endpoint registry and the loader that builds it from the configured
  repositories
- resolve: Handle resolution and naming authority listing against remote repositories
- model: The handle value record returned to callers and the service health gauge
- storage: The handle storage capability exposed to a handle server host
- app: Web application layer, configuration, metrics and background tasks

Resolution Flow:
1. At startup every configured repository is asked for the prefixes it owns
2. A handle's prefix is looked up in the registry; unknown prefixes are rejected without any
   network traffic
3. The owning repository is asked to resolve the handle and the first location is returned as a
   single URL handle value

Repositories that cannot be reached at startup are skipped. Failures while resolving are reported
as a generic resolution failure, distinct from a handle that does not exist.
"""
