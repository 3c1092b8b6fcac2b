"""Request cookies in, ``Set-Cookie`` directives out.

``parse_cookies`` reads the ``Cookie`` header once when the Request is
built. ``SetCookie`` is what ``Context.set_cookie`` buffers and what
``Response.with_cookie`` carries until the sender serializes it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from email.utils import formatdate

# RFC 6265 cookie-name: an HTTP token
_TOKEN = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")


def parse_cookies(header: str) -> dict[str, str]:
    """Parse a ``Cookie`` header value into ``{name: value}``.

    The first occurrence of a name wins, surrounding double quotes are
    removed from values, and fragments without ``=`` are skipped.
    """
    cookies: dict[str, str] = {}
    for fragment in header.split(";"):
        name, sep, value = fragment.partition("=")
        name = name.strip()
        if not sep or not name or name in cookies:
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] == '"':
            value = value[1:-1]
        cookies[name] = value
    return cookies


@dataclass(frozen=True, slots=True)
class SetCookie:
    """One ``Set-Cookie`` directive.

    ``expires`` is a POSIX timestamp, sent as an HTTP-date.

    Raises:
        ValueError: If ``name`` is not a valid cookie name.
    """

    name: str
    value: str
    max_age: int | None = None
    expires: float | None = None
    path: str = "/"
    domain: str | None = None
    secure: bool = False
    httponly: bool = True
    samesite: str = "lax"

    def __post_init__(self) -> None:
        if not _TOKEN.fullmatch(self.name):
            msg = f"Invalid cookie name: {self.name!r}"
            raise ValueError(msg)

    @classmethod
    def expired(cls, name: str, path: str = "/") -> SetCookie:
        """A directive telling the client to drop cookie *name*."""
        return cls(name=name, value="", max_age=0, expires=0, path=path)

    def to_header_value(self) -> str:
        """Serialize to a ``Set-Cookie`` header value."""
        parts = [f"{self.name}={self.value}"]
        if self.max_age is not None:
            parts.append(f"Max-Age={self.max_age}")
        if self.expires is not None:
            parts.append(f"Expires={formatdate(self.expires, usegmt=True)}")
        if self.path:
            parts.append(f"Path={self.path}")
        if self.domain:
            parts.append(f"Domain={self.domain}")
        if self.secure:
            parts.append("Secure")
        if self.httponly:
            parts.append("HttpOnly")
        if self.samesite:
            parts.append(f"SameSite={self.samesite}")
        return "; ".join(parts)
