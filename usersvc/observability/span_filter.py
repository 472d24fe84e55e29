from __future__ import annotations

# Static assets are served often and carry no useful trace data.
IGNORED_EXTENSIONS: tuple[str, ...] = (".js", ".css", ".svg", ".js.map", ".webp")


def should_ignore(path: str) -> bool:
    """Return True when a request for ``path`` should not be traced.

    ``path`` is expected without its query string. Matching is case-insensitive.
    """

    return path.lower().endswith(IGNORED_EXTENSIONS)
