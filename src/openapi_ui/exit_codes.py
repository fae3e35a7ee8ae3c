"""Numeric process exit codes used by the ``openapi-ui`` command line.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~openapi_ui.exceptions.OpenApiUIError` subclass.
Shell wrappers can inspect the exit code to tell a bad spec from a failed
HTTP call without parsing stderr.

Example::

    $ openapi-ui --spec broken.yaml endpoints
    $ echo $?
    7   # EXIT_SPEC_PARSE_ERROR
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or outside a loaded spec."""

EXIT_NOT_FOUND = 4
"""An operation id or schema name does not exist in the loaded spec."""

EXIT_EXECUTION_ERROR = 5
"""An executed API request failed or returned a non-2xx status."""

EXIT_CONNECTION_ERROR = 6
"""The spec could not be fetched (timeout, DNS failure, non-2xx response)."""

EXIT_SPEC_PARSE_ERROR = 7
"""The OpenAPI document could not be decoded or normalized."""

EXIT_REFERENCE_ERROR = 8
"""A ``$ref`` pointer could not be resolved."""

EXIT_CANCELLED = 130
"""The request was cancelled."""
