from .adapters import Adapter, HTTPAPIAdapter, RESTAPIAdapter, get_adapter
from .errors import (
    AdapterError,
    BodyDecodeError,
    ConfigError,
    MalformedURLError,
    NilRequestError,
    RequestConstructionError,
    ResponseBodyReadError,
    UnsupportedVersionError,
)
from .headers import Headers, canonical_header_key
from .http import Request, Response, new_request
from .lambda_handler import is_binary_response, make_handler

__version__ = "0.1.0"
