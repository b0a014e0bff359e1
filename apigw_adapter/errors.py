class AdapterError(Exception):
    """Base class for every transformation failure."""


class UnsupportedVersionError(AdapterError):
    def __init__(self, version):
        self.version = version
        super().__init__(f'unsupported version "{version}"')


class BodyDecodeError(AdapterError):
    pass


class MalformedURLError(AdapterError):
    pass


class RequestConstructionError(AdapterError):
    pass


class ResponseBodyReadError(AdapterError):
    pass


class NilRequestError(AdapterError):
    pass


class ConfigError(AdapterError):
    pass
