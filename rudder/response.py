"""
Response - HTTP response produced by the pipeline.

Provides:
- Content encoding for bytes, str and JSON-compatible values (orjson)
- Media type detection
- Case-insensitive header helpers with injection checks
- ASGI 3 sending
- Factory methods: json, text, html, redirect, empty

A ``Response`` also serves as the mutable draft handed to actions through
the ``Res`` parameter; headers and status written there are carried into
the final response.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Union

import orjson

from .faults import Fault, FaultDomain

logger = logging.getLogger("rudder.response")


def _json_default_serializer(o):
    """Default JSON serializer for non-standard types."""
    if isinstance(o, (set, frozenset, tuple)):
        return list(o)
    if hasattr(o, "isoformat"):
        return o.isoformat()
    if hasattr(o, "__dict__"):
        return {k: v for k, v in vars(o).items() if not k.startswith("_")}
    return str(o)


def dump_json(obj: Any) -> bytes:
    return orjson.dumps(obj, default=_json_default_serializer)


class InvalidHeaderError(Fault):
    domain = FaultDomain.FLOW
    code = "INVALID_HEADER"
    message = "Invalid header"


class Response:
    """
    HTTP response with ASGI support.

    Example:
        ```python
        Response.json({"id": 1}, status=201, headers={"x-total": "1"})
        ```
    """

    def __init__(
        self,
        content: Any = b"",
        status: int = 200,
        headers: Optional[Mapping[str, str]] = None,
        media_type: Optional[str] = None,
        *,
        encoding: str = "utf-8",
    ):
        """
        Initialize Response.

        Args:
            content: Response body (bytes, str, or a JSON-compatible value)
            status: HTTP status code
            headers: Response headers
            media_type: Content-Type override
            encoding: Text encoding
        """
        self.status = status
        self._content = content
        self.encoding = encoding

        self._headers: Dict[str, str] = {}
        for key, value in (headers or {}).items():
            self.set_header(key, value)

        if media_type:
            self._headers["content-type"] = media_type
        elif "content-type" not in self._headers and not self._is_empty(content):
            self._headers["content-type"] = self._detect_media_type(content)

    @staticmethod
    def _is_empty(content: Any) -> bool:
        return content is None or content == b"" or content == ""

    def _detect_media_type(self, content: Any) -> str:
        """Auto-detect media type from content."""
        if isinstance(content, str):
            return f"text/plain; charset={self.encoding}"
        if isinstance(content, (bytes, bytearray)):
            return "application/octet-stream"
        return "application/json; charset=utf-8"

    # ========================================================================
    # Factory Methods
    # ========================================================================

    @classmethod
    def json(
        cls,
        obj: Any,
        status: int = 200,
        *,
        headers: Optional[Mapping[str, str]] = None,
    ) -> "Response":
        return cls(
            content=dump_json(obj),
            status=status,
            headers=headers,
            media_type="application/json; charset=utf-8",
        )

    @classmethod
    def html(cls, content: str, status: int = 200, **kwargs) -> "Response":
        return cls(content=content, status=status, media_type="text/html; charset=utf-8", **kwargs)

    @classmethod
    def text(cls, content: str, status: int = 200, **kwargs) -> "Response":
        return cls(content=content, status=status, media_type="text/plain; charset=utf-8", **kwargs)

    @classmethod
    def redirect(
        cls,
        url: str,
        status: int = 302,
        *,
        headers: Optional[Mapping[str, str]] = None,
    ) -> "Response":
        redirect_headers = dict(headers or {})
        redirect_headers["location"] = url
        return cls(content=b"", status=status, headers=redirect_headers)

    @classmethod
    def empty(cls, status: int = 204, **kwargs) -> "Response":
        return cls(content=b"", status=status, **kwargs)

    # ========================================================================
    # Headers & Body
    # ========================================================================

    @property
    def headers(self) -> Dict[str, str]:
        """Response headers, lower-cased names."""
        return self._headers

    @property
    def content(self) -> Any:
        return self._content

    @property
    def media_type(self) -> Optional[str]:
        return self._headers.get("content-type")

    def set_header(self, name: str, value: Any) -> None:
        """Set header (replaces existing)."""
        value = str(value)
        self._validate_header(name, value)
        self._headers[name.lower()] = value

    def unset_header(self, name: str) -> None:
        self._headers.pop(name.lower(), None)

    def _validate_header(self, name: str, value: str) -> None:
        for char in name:
            if ord(char) < 32 or char in ("\r", "\n"):
                raise InvalidHeaderError(message=f"Invalid header name: {name!r}")
        if "\r" in value or "\n" in value:
            raise InvalidHeaderError(message=f"Invalid header value: {value!r}")

    @property
    def body(self) -> bytes:
        """Encoded body."""
        return self._encode_body(self._content)

    def _encode_body(self, content: Any) -> bytes:
        if content is None:
            return b""
        if isinstance(content, (bytes, bytearray)):
            return bytes(content)
        if isinstance(content, str):
            return content.encode(self.encoding)
        return dump_json(content)

    def json_body(self) -> Any:
        """Decode the body as JSON."""
        return orjson.loads(self.body)

    # ========================================================================
    # ASGI
    # ========================================================================

    async def send_asgi(self, send: Callable[[dict], Awaitable[None]]) -> None:
        """Send the response through an ASGI ``send`` callable."""
        body = self.body
        headers = dict(self._headers)
        headers["content-length"] = str(len(body))

        await send({
            "type": "http.response.start",
            "status": self.status,
            "headers": [
                (name.encode("latin-1"), value.encode("latin-1"))
                for name, value in headers.items()
            ],
        })
        await send({"type": "http.response.body", "body": body})

    async def __call__(self, scope: dict, receive: Callable, send: Callable) -> None:
        await self.send_asgi(send)

    def __repr__(self) -> str:
        return f"<Response [{self.status}] {self.media_type}>"
