"""
Relay Errors
============

Error taxonomy for the relay.

    UpstreamTransportError  - upstream fetch failed; absorbed by backoff
    TemplateOrFileReadError - served to the viewer as 500
    PathEscapeError         - served to the viewer as 403
    NotFoundError           - served to the viewer as 404
    StaticRootError         - web root cannot be resolved; fatal at startup
"""


class RelayError(Exception):
    """Base class for all relay errors."""


class UpstreamTransportError(RelayError):
    """Connection refused, reset, timed out, or otherwise broken upstream."""


class TemplateOrFileReadError(RelayError):
    """A template or static file exists but could not be read."""


class PathEscapeError(RelayError):
    """A requested path resolved outside the web root."""


class NotFoundError(RelayError):
    """A requested static path does not exist."""


class StaticRootError(RelayError):
    """The configured web root could not be resolved."""
