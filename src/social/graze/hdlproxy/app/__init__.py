"""
hdlproxy Application Layer

This package implements the web application layer for hdlproxy using the aiohttp framework. It
hosts the remote handle storage, keeps its prefix registry current and exposes resolution over
HTTP.

Key Components:
- cli.py: Entry point for running the application
- server.py: Web server configuration, startup/shutdown and middleware setup
- config.py: Configuration management using Pydantic settings
- handlers/: Request handlers for the resolution and internal endpoints
- tasks.py: Background tasks for registry refresh and health monitoring
- metrics.py: Metrics abstraction over Telegraf/StatsD

The application uses two middleware layers:
- Statsd middleware for metrics collection
- Sentry middleware for error reporting

It provides the following endpoints:
- Resolution endpoints (/api/resolve, /api/authority, /api/authority/handles)
- Internal endpoints (/internal/alive, /internal/ready, /internal/api/registry)
"""
