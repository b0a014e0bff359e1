"""One adapter object per payload format.

The two formats differ too much to share a code path, so a deployment picks
the adapter matching its gateway once and uses it for every invocation.
"""
from __future__ import annotations

from typing import Any, Callable, Optional

from . import httpapi, restapi
from .errors import ConfigError
from .http import Request, Response

EncodePolicy = Optional[Callable[[Response], bool]]


class Adapter:
    version = ""

    def parse_event(self, event: dict) -> Any:
        raise NotImplementedError

    def transform_request(self, context: Any, envelope: Any) -> Request:
        raise NotImplementedError

    def transform_response(self, res: Response, encode_response: EncodePolicy = None) -> Any:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.version}>"


class HTTPAPIAdapter(Adapter):
    version = httpapi.VERSION

    def parse_event(self, event: dict) -> httpapi.Request:
        return httpapi.Request.from_event(event)

    def transform_request(self, context: Any, envelope: httpapi.Request) -> Request:
        return httpapi.transform_request(context, envelope)

    def transform_response(self, res: Response, encode_response: EncodePolicy = None) -> httpapi.Response:
        return httpapi.transform_response(res, encode_response)


class RESTAPIAdapter(Adapter):
    version = "1.0"

    def parse_event(self, event: dict) -> restapi.Request:
        return restapi.Request.from_event(event)

    def transform_request(self, context: Any, envelope: restapi.Request) -> Request:
        return restapi.transform_request(context, envelope)

    def transform_response(self, res: Response, encode_response: EncodePolicy = None) -> restapi.Response:
        return restapi.transform_response(res, encode_response)


_ADAPTERS = {
    "2.0": HTTPAPIAdapter,
    "2": HTTPAPIAdapter,
    "http": HTTPAPIAdapter,
    "1.0": RESTAPIAdapter,
    "1": RESTAPIAdapter,
    "rest": RESTAPIAdapter,
}


def get_adapter(version: str) -> Adapter:
    try:
        cls = _ADAPTERS[version.strip().lower()]
    except KeyError:
        raise ConfigError(f'unknown payload format version "{version}"') from None
    return cls()
