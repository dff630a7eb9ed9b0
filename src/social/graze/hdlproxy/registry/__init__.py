"""
Prefix Registry

This package tracks which remote repository owns which naming authority prefix.

Key Components:
- prefixes.py: PrefixRegistry, an atomically swappable, read-only prefix-to-endpoint snapshot
- loader.py: Queries each configured repository's `listprefixes` API and publishes the merged
  result

The registry is loaded once at startup and may be refreshed later. Each load builds a complete
new mapping before publishing it, so resolution requests running during a refresh are routed
consistently.
"""
