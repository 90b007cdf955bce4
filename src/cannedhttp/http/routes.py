"""
=============================================================================
ROUTE TABLE
=============================================================================

A fixed, ordered mapping from literal request path to canned content.

=============================================================================
WHY NOT A "REAL" ROUTER?
=============================================================================

A general router compiles patterns (/users/:id, /static/*path) to regexes
and dispatches to handler functions. This server needs none of that:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         ROUTE TABLE                                 │
    ├──────────────────┬──────────────────┬───────────────────────────────┤
    │  Path            │  Content-Type    │  Body                         │
    ├──────────────────┼──────────────────┼───────────────────────────────┤
    │  /admin          │  text/plain      │  Hello from Admin Page!       │
    │  /users          │  application/json│  [ Alice, Bob ]               │
    │  /api/all-users  │  application/json│  [ Alice ... brendon ]        │
    ├──────────────────┼──────────────────┼───────────────────────────────┤
    │  (anything else) │  text/plain      │  Hello, World!                │
    └──────────────────┴──────────────────┴───────────────────────────────┘

- Paths are compared byte-for-byte (case-sensitive, no normalisation)
- Lookup is a linear scan; with three entries that is the fastest option
- First match wins, so accidental duplicates resolve to the earlier entry
- Lookup can't fail: no match means the default entry

The table is built once at startup and never mutated afterwards.

=============================================================================
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple


TEXT_PLAIN = "text/plain"
APPLICATION_JSON = "application/json"


@dataclass(frozen=True)
class RouteEntry:
    """One canned response, keyed by its literal request path."""

    path: str
    body: str
    content_type: str = TEXT_PLAIN


class RouteTable:
    """
    Immutable, ordered collection of route entries plus a default entry.

    Usage:
        routes = RouteTable(
            [RouteEntry("/admin", "Hello from Admin Page!")],
            default=RouteEntry("", "Hello, World!"),
        )
        routes.lookup("/admin").body   # "Hello from Admin Page!"
        routes.lookup("/nope").body    # "Hello, World!"
        routes.lookup(None).body       # "Hello, World!"  (unparseable request)
    """

    def __init__(self, entries: Iterable[RouteEntry], default: RouteEntry):
        self._entries: Tuple[RouteEntry, ...] = tuple(entries)
        self._default = default

    @property
    def default(self) -> RouteEntry:
        return self._default

    @property
    def paths(self) -> Tuple[str, ...]:
        """Configured paths in table order (the default entry excluded)."""
        return tuple(entry.path for entry in self._entries)

    def lookup(self, path: Optional[str]) -> RouteEntry:
        """
        Find the entry for a request path.

        Args:
            path: Requested path, or None when the request line could
                  not be parsed.

        Returns:
            The first entry whose path equals ``path`` exactly, otherwise
            the default entry.
        """
        if path is not None:
            for entry in self._entries:
                if entry.path == path:
                    return entry
        return self._default

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    def __repr__(self) -> str:
        return f"RouteTable(paths={list(self.paths)!r}, default={self._default.body!r})"


# =============================================================================
# BUILT-IN CONTENT
# =============================================================================

USERS_BODY = (
    "[\n"
    '  {"id": 1, "name": "Alice"},\n'
    '  {"id": 2, "name": "Bob"}\n'
    "]"
)

# Earlier releases served this listing with a trailing comma after the last
# record. It is dropped here so the body parses as JSON, one byte shorter
# than those releases sent.
ALL_USERS_BODY = (
    "[\n"
    '  {"id": 1, "name": "Alice"},\n'
    '  {"id": 2, "name": "Bob"},\n'
    '  {"id": 3, "name": "john"},\n'
    '  {"id": 4, "name": "rehan"},\n'
    '  {"id": 5, "name": "shaikh"},\n'
    '  {"id": 6, "name": "vishal"},\n'
    '  {"id": 7, "name": "aashutosh"},\n'
    '  {"id": 8, "name": "Unais"},\n'
    '  {"id": 9, "name": "brendon"}\n'
    "]"
)

DEFAULT_BODY = "Hello, World!"


def default_routes() -> RouteTable:
    """Build the process-wide route table the server ships with."""
    return RouteTable(
        [
            RouteEntry("/admin", "Hello from Admin Page!", TEXT_PLAIN),
            RouteEntry("/users", USERS_BODY, APPLICATION_JSON),
            RouteEntry("/api/all-users", ALL_USERS_BODY, APPLICATION_JSON),
        ],
        default=RouteEntry("", DEFAULT_BODY, TEXT_PLAIN),
    )
