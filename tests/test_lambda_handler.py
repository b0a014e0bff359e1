import base64
import json

import pytest

from apigw_adapter import (
    ConfigError,
    HTTPAPIAdapter,
    RESTAPIAdapter,
    UnsupportedVersionError,
    get_adapter,
    is_binary_response,
    make_handler,
)
from apigw_adapter.config import Settings
from apigw_adapter.http import Response


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("APIGW_PAYLOAD_VERSION", "APIGW_BINARY_RESPONSES", "APIGW_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


def _http_event(event, path, method="GET", **changes):
    event["requestContext"]["http"]["path"] = path
    event["requestContext"]["http"]["method"] = method
    event.update(changes)
    return event


@pytest.mark.parametrize(
    "version, cls",
    [("2.0", HTTPAPIAdapter), ("http", HTTPAPIAdapter), ("1.0", RESTAPIAdapter), (" REST ", RESTAPIAdapter)],
)
def test_get_adapter(version, cls):
    assert isinstance(get_adapter(version), cls)


def test_get_adapter_unknown():
    with pytest.raises(ConfigError, match="3.0"):
        get_adapter("3.0")


def test_settings_from_env(monkeypatch):
    assert Settings.from_env() == Settings()
    monkeypatch.setenv("APIGW_PAYLOAD_VERSION", "1.0")
    monkeypatch.setenv("APIGW_BINARY_RESPONSES", "Always")
    monkeypatch.setenv("APIGW_LOG_LEVEL", "debug")
    assert Settings.from_env() == Settings("1.0", "always", "DEBUG")


def test_settings_rejects_unknown_binary_mode(monkeypatch):
    monkeypatch.setenv("APIGW_BINARY_RESPONSES", "sometimes")
    with pytest.raises(ConfigError):
        Settings.from_env()


def test_settings_rejects_unknown_log_level(monkeypatch):
    monkeypatch.setenv("APIGW_LOG_LEVEL", "loud")
    with pytest.raises(ConfigError, match="LOUD"):
        Settings.from_env()


def test_make_handler_rejects_unknown_log_level(monkeypatch, app):
    monkeypatch.setenv("APIGW_LOG_LEVEL", "LOUD")
    with pytest.raises(ConfigError):
        make_handler(app, "2.0")


@pytest.mark.parametrize(
    "ctype, expected",
    [
        (None, False),
        ("text/html; charset=utf-8", False),
        ("application/json", False),
        ("image/svg+xml", False),
        ("application/x-www-form-urlencoded", False),
        ("image/png", True),
        ("application/octet-stream", True),
    ],
)
def test_is_binary_response(ctype, expected):
    res = Response(200, {"Content-Type": ctype} if ctype else None)
    assert is_binary_response(res) is expected


def test_http_api_handler(app, http_api_event, lambda_context):
    handler = make_handler(app, "2.0")
    event = _http_event(http_api_event, "/echo", "POST")

    result = handler(event, lambda_context)

    assert result["statusCode"] == 200
    assert result["isBase64Encoded"] is False
    assert result["headers"]["Content-Type"] == "application/json"
    assert result["cookies"] == []
    payload = json.loads(result["body"])
    assert payload["method"] == "POST"
    assert payload["path"] == "/echo"
    assert payload["args"] == {"parameter1": ["value1", "value2"], "parameter2": ["value"]}
    assert payload["body"] == "Hello World!"
    assert payload["cookies"] == {"cookie1": "val1", "cookie2": "val2"}


def test_http_api_handler_cookies(app, http_api_event, lambda_context):
    handler = make_handler(app, "2.0")
    result = handler(_http_event(http_api_event, "/cookies"), lambda_context)

    assert result["statusCode"] == 201
    assert result["body"] == "cookies set"
    assert [c.split(";")[0] for c in result["cookies"]] == ["session=abc123", "theme=dark"]
    assert "Set-Cookie" not in result["headers"]


def test_http_api_handler_binary(app, http_api_event, lambda_context):
    handler = make_handler(app, "2.0")
    result = handler(_http_event(http_api_event, "/logo.png"), lambda_context)

    assert result["isBase64Encoded"] is True
    assert base64.b64decode(result["body"]) == b"\x89PNG\r\n\x1a\n\x00\xff"


def test_http_api_handler_base64_request(app, http_api_event, lambda_context):
    handler = make_handler(app, "2.0")
    event = _http_event(
        http_api_event,
        "/echo",
        "PUT",
        body=base64.b64encode(b"binary \x00 payload").decode("ascii"),
        isBase64Encoded=True,
    )
    payload = json.loads(handler(event, lambda_context)["body"])
    assert payload["method"] == "PUT"
    assert payload["body"] == "binary \x00 payload"


def test_handler_errors_propagate(app, http_api_event, lambda_context):
    handler = make_handler(app, "2.0")
    http_api_event["version"] = "1.0"
    with pytest.raises(UnsupportedVersionError):
        handler(http_api_event, lambda_context)


def test_rest_api_handler_from_env(monkeypatch, app, rest_api_event, lambda_context):
    monkeypatch.setenv("APIGW_PAYLOAD_VERSION", "1.0")
    handler = make_handler(app)

    rest_api_event["path"] = "/cookies"
    rest_api_event["httpMethod"] = "GET"
    result = handler(rest_api_event, lambda_context)

    assert result["statusCode"] == 201
    assert result["body"] == "cookies set"
    set_cookies = result["multiValueHeaders"]["Set-Cookie"]
    assert [c.split(";")[0] for c in set_cookies] == ["session=abc123", "theme=dark"]
    assert "cookies" not in result


def test_rest_api_handler_echo(app, rest_api_event, lambda_context):
    handler = make_handler(app, "1.0")
    rest_api_event["path"] = "/echo"

    payload = json.loads(handler(rest_api_event, lambda_context)["body"])

    assert payload["args"] == {"parameter1": ["value1", "value2"], "parameter2": ["value"]}
    assert payload["cookies"] == {"cookie1": "val1", "cookie2": "val2"}
    assert payload["body"] == "Hello World!"


def test_binary_mode_always(monkeypatch, app, http_api_event, lambda_context):
    monkeypatch.setenv("APIGW_BINARY_RESPONSES", "always")
    handler = make_handler(app, "2.0")
    result = handler(_http_event(http_api_event, "/cookies"), lambda_context)
    assert result["isBase64Encoded"] is True
    assert base64.b64decode(result["body"]) == b"cookies set"


def test_explicit_policy_wins(monkeypatch, app, http_api_event, lambda_context):
    monkeypatch.setenv("APIGW_BINARY_RESPONSES", "always")
    handler = make_handler(app, "2.0", encode_response=lambda res: False)
    result = handler(_http_event(http_api_event, "/logo.png"), lambda_context)
    assert result["isBase64Encoded"] is False
