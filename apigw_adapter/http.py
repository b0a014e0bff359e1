"""Canonical HTTP request/response objects shared by both payload formats.

Handlers see a :class:`Request` built from the gateway event and hand back a
:class:`Response` which is turned into the gateway's response payload. The
helpers at the bottom of the module implement the body and URL rules both
payload formats have in common.
"""
from __future__ import annotations

import base64
import binascii
import io
import re
from typing import Any, Optional
from urllib.parse import SplitResult, parse_qsl, quote, unquote, urlsplit, urlunsplit

from werkzeug.datastructures import MultiDict
from werkzeug.http import dump_cookie, parse_cookie

from .errors import (
    BodyDecodeError,
    MalformedURLError,
    RequestConstructionError,
    ResponseBodyReadError,
)
from .headers import Headers, TOKEN_CHARS

_B64_ALPHABET = frozenset(
    b"ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
)
_NEWLINES = (0x0A, 0x0D)
_PAD = 0x3D

_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")
# characters a path may carry without being re-escaped
_PATH_SAFE = frozenset(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"
    "-._~$&+,/:;=@!'()*[]%"
)
_HOST_SAFE = frozenset(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"
    "-._~!$&'()*+,;=:[]%"
)
_PORT = re.compile(r"[0-9]*")


class Request:
    """An inbound HTTP request ready for a backend handler.

    ``body`` is always a readable binary stream; an empty body reads as
    ``b""`` straight away. ``context`` is whatever the caller supplied
    (normally the Lambda context object) and is never replaced.
    """

    def __init__(self, method: str, url: str, body: Any = None, context: Any = None) -> None:
        self.method = method
        self.url = url
        self._parts = urlsplit(url)
        self.headers = Headers()
        self.body = _as_stream(body)
        self.context = context

    @property
    def scheme(self) -> str:
        return self._parts.scheme

    @property
    def host(self) -> str:
        return self._parts.netloc

    @property
    def path(self) -> str:
        return unquote(self._parts.path)

    @property
    def raw_path(self) -> str:
        return self._parts.path

    @property
    def query_string(self) -> str:
        return self._parts.query

    @property
    def args(self) -> MultiDict:
        return MultiDict(parse_qsl(self._parts.query, keep_blank_values=True))

    @property
    def cookies(self) -> MultiDict:
        return parse_cookie("; ".join(self.headers.get_all("Cookie")))

    def cookie(self, name: str) -> Optional[str]:
        return self.cookies.get(name)

    def __repr__(self) -> str:
        return f"<Request {self.method} {self.url}>"


class Response:
    """An HTTP response produced by a backend handler."""

    def __init__(self, status_code: int = 200, headers: Any = None, body: Any = None) -> None:
        self.status_code = status_code
        self.headers = Headers(headers)
        self.body = _as_stream(body)

    def set_cookie(self, key: str, value: str = "", **kwargs: Any) -> None:
        self.headers.add("Set-Cookie", dump_cookie(key, value, **kwargs))

    @property
    def cookies(self) -> list[str]:
        """Raw ``Set-Cookie`` directives, in the order they were set."""
        return self.headers.get_all("Set-Cookie")

    def __repr__(self) -> str:
        return f"<Response {self.status_code}>"


def new_request(method: str, url: str, body: Any = None, context: Any = None) -> Request:
    if not method:
        method = "GET"
    if any(c not in TOKEN_CHARS for c in method):
        raise RequestConstructionError(
            f'failed to create new http request: invalid method "{method}"'
        )
    try:
        parts = parse_url(url)
    except MalformedURLError as exc:
        raise RequestConstructionError(
            f"failed to create new http request: {exc}"
        ) from exc
    return Request(method, urlunsplit(parts), body, context)


def parse_url(raw: str) -> SplitResult:
    """Split an absolute URL, re-escaping the path where needed.

    Raises :class:`MalformedURLError` for control characters, broken percent
    escapes in the host or path, characters a host name cannot hold, bad
    IPv6 literals and non-numeric ports. Any run of digits is a valid port.
    """
    if any(ord(c) < 0x20 or ord(c) == 0x7F for c in raw):
        raise MalformedURLError("failed to parse url: invalid control character in URL")
    try:
        parts = urlsplit(raw)
    except ValueError as exc:
        raise MalformedURLError(f"failed to parse url: {exc}") from exc
    for piece in (parts.netloc, parts.path):
        if _BAD_ESCAPE.search(piece):
            raise MalformedURLError(f'failed to parse url: invalid URL escape in "{piece}"')
    _check_host(parts.netloc.rpartition("@")[2])
    return parts._replace(path=_escape_path(parts.path))


def _check_host(hostport: str) -> None:
    if hostport.startswith("["):
        host, _, rest = hostport.partition("]")
        host += "]"
        if rest and not rest.startswith(":"):
            raise MalformedURLError(
                f'failed to parse url: invalid port "{rest}" after host'
            )
        port = rest[1:]
    else:
        host, _, port = hostport.partition(":")
    for c in host:
        if c not in _HOST_SAFE and ord(c) < 0x80:
            raise MalformedURLError(f'failed to parse url: invalid character "{c}" in host name')
    if not _PORT.fullmatch(port):
        raise MalformedURLError(f'failed to parse url: invalid port ":{port}" after host')


def decode_body(text: str) -> bytes:
    """Decode a base64 (standard alphabet, padded) body.

    Line breaks are ignored. On failure the error names the byte offset at
    which the input stopped being valid base64. Input ``binascii`` lets
    through, such as a full group followed by a lone "=", is rejected too.
    """
    data = text.encode("utf-8")
    offset = _corrupt_offset(data)
    if offset is not None:
        raise BodyDecodeError(f"failed to decode body: illegal base64 data at input byte {offset}")
    try:
        return base64.b64decode(data.translate(None, b"\r\n"), validate=True)
    except binascii.Error as exc:
        raise BodyDecodeError(f"failed to decode body: {exc}") from exc


def encode_body(data: bytes, encode: bool) -> tuple[str, bool]:
    if encode:
        return base64.b64encode(data).decode("ascii"), True
    return data.decode("utf-8", errors="replace"), False


def read_body(res: Response) -> bytes:
    try:
        data = res.body.read()
    except (OSError, ValueError) as exc:
        raise ResponseBodyReadError(f"failed to read response body: {exc}") from exc
    if isinstance(data, str):
        data = data.encode("utf-8")
    return bytes(data or b"")


def _as_stream(body: Any):
    if body is None:
        return io.BytesIO(b"")
    if isinstance(body, str):
        return io.BytesIO(body.encode("utf-8"))
    if isinstance(body, (bytes, bytearray, memoryview)):
        return io.BytesIO(bytes(body))
    if hasattr(body, "read"):
        return body
    raise TypeError(f"body must be bytes, str or a readable stream, not {type(body).__name__}")


def _escape_path(path: str) -> str:
    if all(c in _PATH_SAFE for c in path):
        return path
    return quote(unquote(path), safe="/$&+,:;=@")


def _corrupt_offset(src: bytes) -> Optional[int]:
    """Offset of the first byte that makes ``src`` invalid base64, or None."""
    n = len(src)
    si = 0
    while True:
        j = 0
        while j < 4:
            if si == n:
                if j == 0:
                    return None
                return si - j
            c = src[si]
            si += 1
            if c in _B64_ALPHABET:
                j += 1
                continue
            if c in _NEWLINES:
                continue
            if c != _PAD or j < 2:
                return si - 1
            if j == 2:
                # a second "=" must follow
                while si < n and src[si] in _NEWLINES:
                    si += 1
                if si == n:
                    return n
                if src[si] != _PAD:
                    return si - 1
                si += 1
            while si < n and src[si] in _NEWLINES:
                si += 1
            if si < n:
                return si
            return None
