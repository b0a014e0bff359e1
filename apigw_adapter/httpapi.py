"""API Gateway HTTP API (payload format 2.0) <-> canonical HTTP.

HTTP APIs and Lambda function URLs fold repeated headers into one
comma-joined string and carry cookies in their own list, on the way in and
on the way out.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from .errors import UnsupportedVersionError
from .http import (
    Request as HTTPRequest,
    Response as HTTPResponse,
    decode_body,
    encode_body,
    new_request,
    parse_url,
    read_body,
)

VERSION = "2.0"


@dataclass(frozen=True)
class RequestContextHTTP:
    method: str = ""
    path: str = ""


@dataclass(frozen=True)
class RequestContext:
    domain_name: str = ""
    http: RequestContextHTTP = field(default_factory=RequestContextHTTP)


@dataclass(frozen=True)
class Request:
    """The parts of an HTTP API event needed to rebuild the HTTP request."""

    version: str = ""
    raw_query_string: str = ""
    cookies: tuple = ()
    headers: dict = field(default_factory=dict)
    request_context: RequestContext = field(default_factory=RequestContext)
    body: str = ""
    is_base64_encoded: bool = False

    @classmethod
    def from_event(cls, event: dict) -> "Request":
        ctx = event.get("requestContext") or {}
        http = ctx.get("http") or {}
        return cls(
            version=event.get("version") or "",
            raw_query_string=event.get("rawQueryString") or "",
            cookies=tuple(event.get("cookies") or ()),
            headers=dict(event.get("headers") or {}),
            request_context=RequestContext(
                domain_name=ctx.get("domainName") or "",
                http=RequestContextHTTP(
                    method=http.get("method") or "",
                    path=http.get("path") or "",
                ),
            ),
            body=event.get("body") or "",
            is_base64_encoded=bool(event.get("isBase64Encoded", False)),
        )


@dataclass
class Response:
    status_code: int
    headers: dict = field(default_factory=dict)
    body: str = ""
    is_base64_encoded: bool = False
    cookies: list = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "statusCode": self.status_code,
            "headers": dict(self.headers),
            "body": self.body,
            "isBase64Encoded": self.is_base64_encoded,
            "cookies": list(self.cookies),
        }


def transform_request(context: Any, req: Request) -> HTTPRequest:
    """Build an HTTP request from an HTTP API event.

    Every header value is split on "," and each part added on its own, which
    is how the gateway joins repeated headers. A value that legitimately
    contains a comma comes out as several values.
    """
    if req.version != VERSION:
        raise UnsupportedVersionError(req.version)

    if req.is_base64_encoded:
        body = decode_body(req.body)
    else:
        body = req.body.encode("utf-8")

    raw_url = "https://" + req.request_context.domain_name + req.request_context.http.path
    if req.raw_query_string:
        raw_url = raw_url + "?" + req.raw_query_string
    parse_url(raw_url)

    h_req = new_request(req.request_context.http.method, raw_url, body, context)

    for key, value in req.headers.items():
        for part in value.split(","):
            h_req.headers.add(key, part)

    if req.cookies:
        h_req.headers.set("Cookie", "; ".join(req.cookies))

    return h_req


def transform_response(
    res: HTTPResponse,
    encode_response: Optional[Callable[[HTTPResponse], bool]] = None,
) -> Response:
    body = read_body(res)
    text, encoded = encode_body(body, encode_response is not None and encode_response(res))

    headers = {}
    for key, values in res.headers.items():
        # cookies go in their own list
        if key.lower() == "set-cookie":
            continue
        headers[key] = values[0]

    return Response(
        status_code=res.status_code,
        headers=headers,
        body=text,
        is_base64_encoded=encoded,
        cookies=res.cookies,
    )
