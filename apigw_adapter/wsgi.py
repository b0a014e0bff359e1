from __future__ import annotations

import io
import sys
from urllib.parse import unquote_to_bytes, urlsplit

from .http import Request, Response

# headers that have their own environ keys
_CONTENT_HEADERS = ("Content-Type", "Content-Length")


def to_environ(request: Request) -> dict:
    """Build a PEP 3333 environ for ``request``.

    Reads the request body; the returned environ carries it as
    ``wsgi.input``. The request's context is passed along as
    ``lambda.context``.
    """
    parts = urlsplit(request.url)
    scheme = parts.scheme or "https"
    body = request.body.read()

    # any run of digits is a valid port, so read it as text
    _, sep, port = parts.netloc.rpartition("@")[2].rpartition("]")[2].rpartition(":")
    if not (sep and port):
        port = "443" if scheme == "https" else "80"

    remote_addr = (request.headers.get("X-Forwarded-For") or "").split(",")[0].strip() or "0.0.0.0"

    environ = {
        "REQUEST_METHOD": request.method,
        "SCRIPT_NAME": "",
        "PATH_INFO": unquote_to_bytes(parts.path or "/").decode("latin-1"),
        "QUERY_STRING": parts.query,
        "SERVER_NAME": parts.hostname or "lambda",
        "SERVER_PORT": port,
        "REMOTE_ADDR": remote_addr,
        "SERVER_PROTOCOL": "HTTP/1.1",
        "wsgi.version": (1, 0),
        "wsgi.url_scheme": scheme,
        "wsgi.input": io.BytesIO(body),
        "wsgi.errors": sys.stderr,
        "wsgi.multithread": False,
        "wsgi.multiprocess": False,
        "wsgi.run_once": True,
        "CONTENT_LENGTH": str(len(body)),
        "lambda.context": request.context,
    }

    ctype = request.headers.get("Content-Type")
    if ctype:
        environ["CONTENT_TYPE"] = ctype

    for key, values in request.headers.items():
        if key in _CONTENT_HEADERS:
            continue
        sep = "; " if key == "Cookie" else ", "
        environ["HTTP_" + key.upper().replace("-", "_")] = sep.join(values)

    return environ


def run_app(app, request: Request) -> Response:
    """Call the WSGI ``app`` with ``request`` and buffer what it returns."""
    status_holder = {}
    headers_holder = []
    chunks = []

    def start_response(status, response_headers, exc_info=None):
        if exc_info and status_holder:
            raise exc_info[1].with_traceback(exc_info[2])
        status_holder["status"] = status
        # keep as a list to preserve duplicates (e.g., multiple Set-Cookie)
        headers_holder[:] = list(response_headers)
        return chunks.append

    result = app(to_environ(request), start_response)

    try:
        for chunk in result:
            if isinstance(chunk, (bytes, bytearray)):
                chunks.append(bytes(chunk))
            else:
                chunks.append(str(chunk).encode("utf-8"))
    finally:
        if hasattr(result, "close"):
            result.close()

    status_code = int((status_holder.get("status") or "200 OK").split(" ", 1)[0])

    return Response(status_code, headers_holder, b"".join(chunks))
