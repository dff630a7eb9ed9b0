"""
Data Models

This package defines the values hdlproxy hands back to its callers and the in-process state used to
report service health. Nothing here is persisted: handle values are built fresh for every
resolution.

Key Models:
- value.py: HandleValue, the single URL value returned for a resolved handle, and its binary
  encoding in the handle protocol storage layout
- health.py: HealthGauge, a decaying counter of remote resolution failures backing the readiness
  probe

Every HandleValue carries the same fixed metadata:
- Index 100, type URL
- Relative TTL of 100 and a placeholder timestamp
- Admin and public read access, no write access
"""
