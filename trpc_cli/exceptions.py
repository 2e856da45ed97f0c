"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class TrpcCliError(Exception):
    """Base exception for all application-specific errors."""


class TransportError(TrpcCliError):
    """Raised when the daemon cannot be reached or the HTTP exchange fails."""


class UnauthorizedError(TrpcCliError):
    """Raised when the daemon rejects the request with HTTP 401."""


class DecodeError(TrpcCliError):
    """Raised when a response body is not a well-formed response envelope."""


class BadResponseError(TrpcCliError):
    """
    Raised when the daemon answers with a result other than "success".

    The daemon's result string is kept verbatim in `message`.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NoArgumentsError(TrpcCliError):
    """Raised when a success response carries no arguments but some were expected."""


class BothSourcesSpecifiedError(TrpcCliError):
    """Raised when a torrent-add request has both a filename and metainfo."""


class NoSourceSpecifiedError(TrpcCliError):
    """Raised when a torrent-add request has neither a filename nor metainfo."""


class UnknownFieldError(TrpcCliError):
    """Raised when a method or field name is not part of the protocol."""


class ImmutableSessionFieldError(TrpcCliError):
    """Raised when session-set is asked to change a read-only session field."""


class ConfigurationError(TrpcCliError):
    """Raised for issues related to configuration loading or validation."""
