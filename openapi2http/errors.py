"""Exceptions raised by openapi2http."""


class Openapi2HttpError(Exception):
    """Base class for all openapi2http errors."""


class SpecLoadError(Openapi2HttpError):
    """The spec could not be fetched, read or parsed."""


class SpecValidationError(Openapi2HttpError):
    """The spec was parsed but is not a valid OpenAPI document."""


class NoOperationsFound(Openapi2HttpError):
    """No operation matched the given filters."""


class RenderError(Openapi2HttpError):
    """A single operation could not be rendered."""

    def __init__(self, method: str, path: str, reason: str):
        super().__init__(f"{method} {path}: {reason}")
        self.method = method
        self.path = path
        self.reason = reason
