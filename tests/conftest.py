import copy

import pytest
from flask import Flask, jsonify, make_response, request


class FakeLambdaContext:
    function_name = "apigw-adapter-test"
    aws_request_id = "c6af9ac6-7b61-11e6-9a41-93e8deadbeef"

    def get_remaining_time_in_millis(self):
        return 30000


class FailingReader:
    def read(self, *args):
        raise OSError("boom")


HTTP_API_EVENT = {
    "version": "2.0",
    "routeKey": "$default",
    "rawPath": "/my/path",
    "rawQueryString": "parameter1=value1&parameter1=value2&parameter2=value",
    "cookies": ["cookie1=val1", "cookie2=val2"],
    "headers": {
        "Header1": "value1",
        "Header2": "value1,value2",
        "header-three": "value1,value2",
        "Header-three": "value3",
        "Header-Three": "value4",
    },
    "requestContext": {
        "domainName": "example.com",
        "http": {"method": "POST", "path": "/my/path", "protocol": "HTTP/1.1"},
        "stage": "$default",
    },
    "body": "Hello World!",
    "isBase64Encoded": False,
}

REST_API_EVENT = {
    "resource": "/{proxy+}",
    "path": "/my/path",
    "httpMethod": "POST",
    "headers": {"Header1": "value1"},
    "multiValueHeaders": {
        "Header1": ["value1"],
        "Header2": ["value1", "value2"],
        "header-three": ["value1"],
        "Cookie": ["cookie1=val1; cookie2=val2"],
    },
    "queryStringParameters": {"parameter1": "value2", "parameter2": "value"},
    "multiValueQueryStringParameters": {
        "parameter1": ["value1", "value2"],
        "parameter2": ["value"],
    },
    "requestContext": {"domainName": "example.com", "stage": "prod"},
    "body": "Hello World!",
    "isBase64Encoded": False,
}


@pytest.fixture
def lambda_context():
    return FakeLambdaContext()


@pytest.fixture
def http_api_event():
    return copy.deepcopy(HTTP_API_EVENT)


@pytest.fixture
def rest_api_event():
    return copy.deepcopy(REST_API_EVENT)


@pytest.fixture
def app():
    app = Flask(__name__)

    @app.route("/echo", methods=["GET", "POST", "PUT"])
    def echo():
        return jsonify(
            method=request.method,
            path=request.path,
            args=request.args.to_dict(flat=False),
            body=request.get_data(as_text=True),
            cookies=request.cookies.to_dict(),
            custom=request.headers.get("X-Custom"),
            content_type=request.content_type,
        )

    @app.route("/cookies")
    def cookies():
        resp = make_response("cookies set", 201)
        resp.set_cookie("session", "abc123")
        resp.set_cookie("theme", "dark", path="/prefs")
        return resp

    @app.route("/logo.png")
    def logo():
        return app.response_class(b"\x89PNG\r\n\x1a\n\x00\xff", mimetype="image/png")

    @app.route("/context")
    def context():
        return request.environ["lambda.context"].function_name

    return app
