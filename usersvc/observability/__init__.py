"""Observability for the users service.

Request IDs + structlog contextvars for logs, and OpenTelemetry tracing of
inbound and outbound HTTP calls (static-asset requests are not traced).
"""
