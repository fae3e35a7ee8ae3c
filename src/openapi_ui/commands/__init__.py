"""Built-in CLI commands for openapi-ui.

* :mod:`~openapi_ui.commands.inspect` -- ``info``, ``endpoints``,
  ``schemas`` and ``schema``: read-only views of a spec.
* :mod:`~openapi_ui.commands.search` -- ranked endpoint search.
* :mod:`~openapi_ui.commands.snippet` -- code snippets for an endpoint.
* :mod:`~openapi_ui.commands.call` -- execute an endpoint against the API.

Each module exports plain callback functions that
:mod:`openapi_ui.app` registers on the root Typer application. Helpers
shared between them live in :mod:`~openapi_ui.commands.common`.
"""
