"""Custom exception hierarchy for finz."""

from typing import Any


class FinzError(Exception):
    """Base exception for all finz errors.

    All exceptions carry an optional `context` dict for structured error
    metadata that can be logged or serialized without parsing the message.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}


class ConfigError(FinzError):
    """Invalid or missing configuration.

    Raised by load_config() during startup. Should be treated as fatal.

    Context keys:
        field (str): the config field that failed validation
        value (Any): the invalid value (redacted for secrets)
    """


class AuthError(FinzError):
    """The quote provider did not issue a usable session credential.

    Policy: propagate. The next request starts a fresh acquisition.

    Context keys:
        stage (str): "handshake" or "token"
        status_code (int | None): HTTP status of the failing step
    """


class UpstreamError(FinzError):
    """A provider returned a non-success status or the transport failed.

    Policy: convert to a 500 with a safe default payload at the handler
    boundary. Never retried within the same call.

    Context keys:
        url (str): the URL that was being fetched
        status_code (int | None): None for transport failures
    """

    def __init__(
        self,
        message: str,
        status: int | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context)
        self.status = status
        self.context.setdefault("status_code", status)


class ValidationError(FinzError):
    """A required request parameter is missing or malformed.

    Context keys:
        field (str): the offending parameter
    """


class NotFoundError(FinzError):
    """The provider returned no result for the requested symbol.

    Context keys:
        symbol: str
    """


class StorageError(FinzError):
    """State store operation failed.

    Context keys:
        operation (str): "get", "put", "initialize"
        key: str | None
    """


class StorageUnavailableError(StorageError):
    """No state store is configured."""


class LLMError(FinzError):
    """Text-generation provider returned an error or unusable output.

    Policy: swallowed by the profile service, which falls back to the
    templated summary.

    Context keys:
        provider (str): "anthropic" or "openai"
        status_code: int | None
    """
