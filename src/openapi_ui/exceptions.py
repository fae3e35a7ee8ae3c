"""Exception hierarchy for openapi-ui.

All exceptions inherit from :class:`OpenApiUIError`, which carries an
``exit_code`` attribute mapped to a constant from
:mod:`openapi_ui.exit_codes`. Library callers catch the specific subclass
they care about; the command line in :func:`openapi_ui.app.main` catches
``OpenApiUIError`` and exits with the matching code.

Subclass hierarchy::

    OpenApiUIError (exit 1)
    +-- InvalidUsageError            (exit 2)
    |   +-- UnsupportedLanguageError (exit 2)
    +-- OperationNotFoundError       (exit 4)
    +-- ExecutionError               (exit 5)
    +-- RequestCancelledError        (exit 130)
    +-- SpecLoadError                (exit 6)
    +-- SpecParseError               (exit 7)
    |   +-- DuplicateOperationIdError
    +-- ReferenceResolutionError     (exit 8)
    |   +-- CircularReferenceError
    +-- ConfigError                  (exit 1)
"""

from __future__ import annotations

from typing import Any, Optional

from openapi_ui.exit_codes import (
    EXIT_CANCELLED,
    EXIT_CONNECTION_ERROR,
    EXIT_EXECUTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_REFERENCE_ERROR,
    EXIT_SPEC_PARSE_ERROR,
)


class OpenApiUIError(Exception):
    """Base exception for all openapi-ui errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(OpenApiUIError):
    """Raised when the library is called incorrectly.

    Covers missing loader input, accessing a context-scoped value outside
    :func:`~openapi_ui.context.provide_context`, executing without a base
    URL, and similar caller mistakes. Never retried.
    """

    exit_code = EXIT_INVALID_USAGE


class UnsupportedLanguageError(InvalidUsageError):
    """Raised when a code snippet is requested for an unknown language."""

    def __init__(self, language: str):
        super().__init__(f"Unsupported language: {language}")
        self.language = language


class OperationNotFoundError(OpenApiUIError):
    """Raised when an operation id does not match any normalized endpoint."""

    exit_code = EXIT_NOT_FOUND

    def __init__(self, operation_id: str):
        super().__init__(f'Operation with ID "{operation_id}" not found')
        self.operation_id = operation_id


class ExecutionError(OpenApiUIError):
    """Raised when an executed request fails or returns a non-2xx status.

    Args:
        message: The server-supplied ``message`` field or a generic
            ``HTTP {status}: {reason}`` string.
        status_code: HTTP status, or ``None`` for transport failures.
        data: The parsed response body, when one was received.
    """

    exit_code = EXIT_EXECUTION_ERROR

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        data: Any = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.data = data


class RequestCancelledError(OpenApiUIError):
    """Raised by a request that was aborted through ``cancel()``.

    Cancellation is a deliberate outcome, so the executor never records it
    as its ``error`` state.
    """

    exit_code = EXIT_CANCELLED


class SpecLoadError(OpenApiUIError):
    """Raised when a spec cannot be fetched (network failure or non-2xx)."""

    exit_code = EXIT_CONNECTION_ERROR


class SpecParseError(OpenApiUIError):
    """Raised when spec text is not valid JSON or YAML, or is not an OpenAPI 3 document."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class DuplicateOperationIdError(SpecParseError):
    """Raised by strict normalization when two endpoints share an id."""

    def __init__(self, endpoint_id: str, first: str, second: str):
        super().__init__(
            f"Duplicate operation id '{endpoint_id}': {first} and {second}"
        )
        self.endpoint_id = endpoint_id


class ReferenceResolutionError(OpenApiUIError):
    """Raised when a ``$ref`` pointer cannot be resolved against the document.

    Attributes:
        ref: The literal ``$ref`` string that failed.
    """

    exit_code = EXIT_REFERENCE_ERROR

    def __init__(self, message: str, ref: str = ""):
        super().__init__(message)
        self.ref = ref


class CircularReferenceError(ReferenceResolutionError):
    """Raised when a chain of ``$ref`` pointers loops back on itself."""


class ConfigError(OpenApiUIError):
    """Raised for configuration problems (invalid JSON, bad values, missing credentials)."""

    exit_code = EXIT_GENERIC_FAILURE
