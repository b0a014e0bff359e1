"""API Gateway REST API (payload format 1.0) <-> canonical HTTP.

REST APIs always fill ``multiValueHeaders`` and
``multiValueQueryStringParameters`` with everything the single-value maps
hold, so only the multi-value maps are read, and responses are written back
through ``multiValueHeaders`` alone.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional
from urllib.parse import parse_qsl, urlencode, urlunsplit

from .errors import NilRequestError
from .http import (
    Request as HTTPRequest,
    Response as HTTPResponse,
    decode_body,
    encode_body,
    new_request,
    parse_url,
    read_body,
)


@dataclass(frozen=True)
class RequestContext:
    domain_name: str = ""


@dataclass(frozen=True)
class Request:
    path: str = ""
    http_method: str = ""
    multi_value_headers: dict = field(default_factory=dict)
    multi_value_query_string_parameters: dict = field(default_factory=dict)
    request_context: RequestContext = field(default_factory=RequestContext)
    body: str = ""
    is_base64_encoded: bool = False

    @classmethod
    def from_event(cls, event: dict) -> "Request":
        ctx = event.get("requestContext") or {}
        return cls(
            path=event.get("path") or "",
            http_method=event.get("httpMethod") or "",
            multi_value_headers={
                k: list(v or ()) for k, v in (event.get("multiValueHeaders") or {}).items()
            },
            multi_value_query_string_parameters={
                k: list(v or ())
                for k, v in (event.get("multiValueQueryStringParameters") or {}).items()
            },
            request_context=RequestContext(domain_name=ctx.get("domainName") or ""),
            body=event.get("body") or "",
            is_base64_encoded=bool(event.get("isBase64Encoded", False)),
        )


@dataclass
class Response:
    status_code: int
    multi_value_headers: dict = field(default_factory=dict)
    body: str = ""
    is_base64_encoded: bool = False

    def to_dict(self) -> dict:
        return {
            "statusCode": self.status_code,
            "multiValueHeaders": {k: list(v) for k, v in self.multi_value_headers.items()},
            "body": self.body,
            "isBase64Encoded": self.is_base64_encoded,
        }


def transform_request(context: Any, req: Optional[Request]) -> HTTPRequest:
    """Build an HTTP request from a REST API event.

    The query string is rebuilt from the multi-value parameters and encoded
    with keys sorted, so it need not match the order the client sent.
    ``req`` is left untouched.
    """
    if req is None:
        raise NilRequestError("req cannot be nil")

    if req.is_base64_encoded:
        body = decode_body(req.body)
    else:
        body = req.body.encode("utf-8")

    parts = parse_url("https://" + req.request_context.domain_name + req.path)

    pairs = parse_qsl(parts.query, keep_blank_values=True)
    for key, values in req.multi_value_query_string_parameters.items():
        for value in values:
            pairs.append((key, value))
    pairs.sort(key=lambda kv: kv[0])
    url = urlunsplit(parts._replace(query=urlencode(pairs)))

    h_req = new_request(req.http_method, url, body, context)

    # add() canonicalizes the key, so mixed-case duplicates end up merged
    for key, values in req.multi_value_headers.items():
        for value in values:
            h_req.headers.add(key, value)

    return h_req


def transform_response(
    res: HTTPResponse,
    encode_response: Optional[Callable[[HTTPResponse], bool]] = None,
) -> Response:
    body = read_body(res)
    text, encoded = encode_body(body, encode_response is not None and encode_response(res))

    return Response(
        status_code=res.status_code,
        multi_value_headers=res.headers.to_dict(),
        body=text,
        is_base64_encoded=encoded,
    )
