"""Immutable request/response values exchanged with a Transport."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Mapping, Optional, Tuple


class Method(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


class AuthMode(str, Enum):
    """Whether a request carries identity/signature headers."""

    NONE = "none"
    OPTIONAL = "optional"  # signed when a key pair is configured
    REQUIRED = "required"


@dataclass(frozen=True)
class Request:
    """A fully formed API request.

    ``path`` is relative to ``base_url`` and may include a query string.
    Headers keep insertion order; names compare case-insensitively and a
    later value replaces an earlier one.
    """

    method: Method
    base_url: str
    path: str
    body: bytes = b""
    header_items: Tuple[Tuple[str, str], ...] = ()
    auth: AuthMode = AuthMode.NONE

    @property
    def full_uri(self) -> str:
        """Scheme, host, path and query exactly as transmitted."""
        return f"{self.base_url.rstrip('/')}/{self.path.lstrip('/')}"

    @property
    def headers(self) -> Dict[str, str]:
        return dict(self.header_items)

    def header(self, name: str) -> Optional[str]:
        lowered = name.lower()
        for key, value in self.header_items:
            if key.lower() == lowered:
                return value
        return None

    def with_headers(self, headers: Mapping[str, str]) -> "Request":
        """Return a copy with *headers* set, replacing same-named entries."""
        items = list(self.header_items)
        for name, value in headers.items():
            lowered = name.lower()
            items = [(k, v) for k, v in items if k.lower() != lowered]
            items.append((name, value))
        return replace(self, header_items=tuple(items))


@dataclass(frozen=True)
class Response:
    """Raw transport response; ``request`` is the exact request that produced it."""

    status_code: int
    body: bytes = b""
    headers: Dict[str, str] = field(default_factory=dict)
    request: Optional[Request] = None

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")
