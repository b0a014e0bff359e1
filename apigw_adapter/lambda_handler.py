"""Lambda entry point that serves a WSGI app behind API Gateway.

    from apigw_adapter import make_handler
    from app import app  # any WSGI app, e.g. a Flask instance

    handler = make_handler(app)
"""
from __future__ import annotations

import logging

from .adapters import get_adapter
from .config import Settings
from .http import Response
from .wsgi import run_app

logger = logging.getLogger(__name__)

TEXT_LIKE = ("text/", "json", "xml", "javascript", "svg", "x-www-form-urlencoded")


def is_binary_response(res: Response) -> bool:
    """Base64-encode anything whose Content-Type is not text-like."""
    ctype = (res.headers.get("Content-Type") or "").lower()
    if not ctype:
        return False
    return not any(tok in ctype for tok in TEXT_LIKE)


def _never(res: Response) -> bool:
    return False


def _always(res: Response) -> bool:
    return True


_POLICIES = {
    "auto": is_binary_response,
    "never": _never,
    "always": _always,
}


def make_handler(app, version=None, encode_response=None):
    """Return a ``handler(event, context)`` serving ``app``.

    ``version`` picks the payload format ("2.0" for HTTP APIs and function
    URLs, "1.0" for REST APIs) and falls back to ``APIGW_PAYLOAD_VERSION``.
    ``encode_response`` decides whether a response body is sent base64
    encoded and falls back to ``APIGW_BINARY_RESPONSES``.
    """
    settings = Settings.from_env()
    logger.setLevel(settings.log_level)
    adapter = get_adapter(version or settings.payload_version)
    if encode_response is None:
        encode_response = _POLICIES[settings.binary_responses]
    logger.debug("serving %r with %r", app, adapter)

    def handler(event, context):
        envelope = adapter.parse_event(event)
        req = adapter.transform_request(context, envelope)
        logger.debug("%s %s", req.method, req.url)

        res = run_app(app, req)
        logger.debug("%s %s -> %d", req.method, req.path, res.status_code)

        return adapter.transform_response(res, encode_response).to_dict()

    return handler
