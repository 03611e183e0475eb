"""Error types raised by ovhctl."""

from __future__ import annotations

from typing import Optional


class OvhctlError(Exception):
    """Base class for every error surfaced to the operator."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message

    def with_context(self, context: str) -> "OvhctlError":
        """Return a copy of this error, same class and attributes, prefixed with `context`."""
        wrapped = self.__class__.__new__(self.__class__)
        wrapped.__dict__.update(self.__dict__)
        wrapped.message = f"{context}, {self.message}"
        Exception.__init__(wrapped, wrapped.message)
        return wrapped


class ConfigurationError(OvhctlError):
    """Configuration is missing, unreadable or incomplete."""


class RequestBuildError(OvhctlError):
    """The request could not be built (bad URL or header)."""


class TransportError(OvhctlError):
    """Connection, TLS or other transport level failure."""


class RequestFailed(OvhctlError):
    """The API answered with a non-2xx status."""

    def __init__(self, url: str, status: int, body: Optional[str] = None):
        message = f"could not execute the request '{url}', got '{status}'"
        if body:
            message = f"{message}, {body}"
        super().__init__(message)
        self.url = url
        self.status = status
        self.body = body


class DeserializationError(OvhctlError):
    """The response body does not have the expected shape."""
