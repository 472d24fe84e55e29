from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from opentelemetry.trace import Span


UNKNOWN_METHOD = "UNKNOWN-METHOD"

HTTP_METHOD_ATTRIBUTE = "http.method"
HTTP_URL_ATTRIBUTE = "http.url"


@dataclass(frozen=True)
class InboundRequest:
    """A request received by this process."""

    method: str | None
    path: str


@dataclass(frozen=True)
class OutboundRequest:
    """A request issued by this process to another host."""

    method: str | None
    host: str
    path: str


RequestDescriptor = Union[InboundRequest, OutboundRequest]


def inbound_from_scope(scope: dict[str, Any]) -> InboundRequest:
    # ASGI keeps the query string out of ``path``.
    return InboundRequest(method=scope.get("method"), path=scope.get("path") or "")


def outbound_from_httpx(request_info: Any) -> OutboundRequest:
    """Build a descriptor from the httpx instrumentation's ``RequestInfo``."""

    method = getattr(request_info, "method", None)
    if isinstance(method, bytes):
        method = method.decode("ascii", errors="replace")

    url = getattr(request_info, "url", None)
    host = getattr(url, "host", None) or ""
    path = getattr(url, "path", None) or ""
    return OutboundRequest(method=method, host=host, path=path)


def enrich(span: Span, request: RequestDescriptor) -> None:
    """Name ``span`` after the request and record its method and path."""

    method = request.method or UNKNOWN_METHOD

    if isinstance(request, OutboundRequest):
        span_name = f"{method} {request.host}{request.path}"
    else:
        span_name = f"{method} {request.path}"

    span.update_name(span_name)
    span.set_attribute(HTTP_METHOD_ATTRIBUTE, method)
    span.set_attribute(HTTP_URL_ATTRIBUTE, request.path)
