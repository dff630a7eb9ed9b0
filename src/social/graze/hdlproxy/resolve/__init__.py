"""
Handle Resolution

This package resolves handles and enumerates naming authorities by querying the remote repository
that owns a prefix.

Key Components:
- remote.py: Client for the repositories' `listprefixes`, `listhandles` and `resolve` JSON APIs
- handle.py: Handle resolution with found / not found / transient error outcomes
- authority.py: Naming authority existence checks and handle listings
- __main__.py: CLI interface for resolution

The resolution flow follows these steps:
1. Split the handle on its first `/` to find the naming authority prefix
2. Look the prefix up in the registry; unknown prefixes are not found, no request is made
3. Query `{endpoint}/resolve/{handle}` on the owning repository
4. Use the first element of the returned array as the handle's location

Network and decoding failures are never retried. They are logged, reported to Sentry and returned
as a transient error so callers can tell them apart from handles that do not exist.
"""
