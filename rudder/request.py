"""
Request - immutable view of one incoming HTTP request.

Provides:
- Construction from an ASGI scope with the body read up front
- Parsed query (MultiDict), headers (Headers) and cookies
- Body decoding: JSON, url-encoded forms, text
- Session and per-request state owned by the transport layer

The body is read before the pipeline starts so parameter resolution never
awaits I/O.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple, Union
from urllib.parse import parse_qsl, urlencode

import orjson

from ._datastructures import Headers, MultiDict, parse_cookie_header
from .faults import BadRequestError, HttpError

_NO_BODY = object()


class PayloadTooLargeError(HttpError):
    http_code = 413

    def __init__(self, limit: int):
        super().__init__(None, f"Request body exceeds {limit} bytes", limit=limit)


class Request:
    """
    Request object handed to the pipeline.

    Example:
        ```python
        request = Request.build("GET", "/photos", query={"limit": "5"})
        request.query_params.get("limit")  # "5"
        ```
    """

    def __init__(
        self,
        scope: Mapping[str, Any],
        body: bytes = b"",
        *,
        session: Any = None,
    ):
        """
        Initialize Request.

        Args:
            scope: ASGI HTTP scope (method, path, query_string, headers)
            body: Complete request body
            session: Session object; falls back to ``scope["session"]``
        """
        self.scope = scope
        self._body = body
        self._session = session if session is not None else scope.get("session")

        self.state: Dict[str, Any] = dict(scope.get("state") or {})

        self._query_params: Optional[MultiDict] = None
        self._headers: Optional[Headers] = None
        self._cookies: Optional[Dict[str, str]] = None
        self._parsed_body: Any = _NO_BODY

    @classmethod
    async def from_asgi(
        cls,
        scope: Mapping[str, Any],
        receive: Callable[[], Awaitable[dict]],
        *,
        max_body_size: int = 10_485_760,
    ) -> "Request":
        """
        Read the full body from ``receive`` and build a request.

        Raises:
            PayloadTooLargeError: If the body exceeds ``max_body_size``
        """
        chunks: List[bytes] = []
        total = 0
        more_body = True
        while more_body:
            message = await receive()
            if message["type"] == "http.disconnect":
                break
            chunk = message.get("body", b"")
            total += len(chunk)
            if total > max_body_size:
                raise PayloadTooLargeError(max_body_size)
            chunks.append(chunk)
            more_body = message.get("more_body", False)
        return cls(scope, b"".join(chunks))

    @classmethod
    def build(
        cls,
        method: str,
        path: str,
        *,
        query: Optional[Union[Mapping[str, Any], List[Tuple[str, str]]]] = None,
        headers: Optional[Mapping[str, str]] = None,
        body: Union[bytes, str, None] = None,
        json: Any = None,
        session: Any = None,
    ) -> "Request":
        """Construct a request without a server. Used by the test client."""
        header_map = {k.lower(): v for k, v in (headers or {}).items()}
        if json is not None:
            payload = orjson.dumps(json)
            header_map.setdefault("content-type", "application/json")
        elif isinstance(body, str):
            payload = body.encode("utf-8")
        else:
            payload = body or b""

        query_string = urlencode(query or {}, doseq=True) if not isinstance(query, str) else query
        path, _, inline_query = path.partition("?")
        if inline_query:
            query_string = f"{inline_query}&{query_string}" if query_string else inline_query

        scope = {
            "type": "http",
            "method": method.upper(),
            "path": path or "/",
            "query_string": query_string.encode("latin-1"),
            "headers": Headers.from_mapping(header_map).raw,
        }
        return cls(scope, payload, session=session)

    # ========================================================================
    # Basic Properties
    # ========================================================================

    @property
    def method(self) -> str:
        return self.scope.get("method", "GET")

    @property
    def path(self) -> str:
        return self.scope.get("path", "/")

    @property
    def query_string(self) -> str:
        return self.scope.get("query_string", b"").decode("utf-8")

    @property
    def query_params(self) -> MultiDict:
        """Parsed query parameters."""
        if self._query_params is None:
            self._query_params = MultiDict(parse_qsl(self.query_string, keep_blank_values=True))
        return self._query_params

    @property
    def headers(self) -> Headers:
        if self._headers is None:
            self._headers = Headers(raw=list(self.scope.get("headers", [])))
        return self._headers

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.headers.get(name, default)

    @property
    def cookies(self) -> Dict[str, str]:
        if self._cookies is None:
            self._cookies = parse_cookie_header(self.header("cookie"))
        return self._cookies

    @property
    def session(self) -> Any:
        return self._session

    @property
    def content_type(self) -> str:
        return (self.header("content-type") or "").split(";")[0].strip().lower()

    # ========================================================================
    # Body
    # ========================================================================

    @property
    def raw_body(self) -> bytes:
        return self._body

    @property
    def body(self) -> Any:
        """
        Decoded body.

        JSON for ``application/json`` (and ``+json``), a dict for url-encoded
        forms, text otherwise. An empty body decodes to None.

        Raises:
            BadRequestError: If a JSON body is malformed
        """
        if self._parsed_body is _NO_BODY:
            self._parsed_body = self._decode_body()
        return self._parsed_body

    def _decode_body(self) -> Any:
        if not self._body:
            return None

        content_type = self.content_type
        if content_type == "application/json" or content_type.endswith("+json"):
            try:
                return orjson.loads(self._body)
            except orjson.JSONDecodeError as e:
                raise BadRequestError(f"Invalid JSON body: {e}")

        if content_type == "application/x-www-form-urlencoded":
            form = MultiDict(parse_qsl(self._body.decode("utf-8"), keep_blank_values=True))
            return form.to_dict()

        try:
            return self._body.decode("utf-8")
        except UnicodeDecodeError:
            return self._body

    def __repr__(self) -> str:
        return f"<Request {self.method} {self.path}>"
