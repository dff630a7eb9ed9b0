"""
Handle Storage

This package exposes hdlproxy to a handle server host through the host's storage interface.

Key Components:
- base.py: The HandleResolution capability and the inert ReadOnlyAdministration mixin
- remote.py: RemoteHandleStorage, which routes resolution requests to remote repositories

Host Contract:
- Found handles are returned as a single encoded URL value
- Missing handles, including handles with an unknown prefix, are returned as None
- Remote failures raise HandleException with an internal error code; the cause is only logged
- Administrative and write operations are accepted, logged and ignored
"""
