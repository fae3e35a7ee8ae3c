"""openapi-ui -- a headless toolkit for exploring and calling OpenAPI 3.x APIs.

The package loads an OpenAPI document (URL, file, text or dict), resolves
its ``$ref`` pointers, and normalizes it into a flat
:class:`~openapi_ui.models.ParsedApiSpec`. On top of that model it offers
endpoint lookup and grouping, ranked search, asynchronous request
execution, and code snippets in eight languages. Rendering is left to the
caller; the bundled ``openapi-ui`` command line is one such caller.

Typical use::

    from openapi_ui import CodeSnippetGenerator, CodeSnippetOptions, LoaderConfig, SpecLoader

    parsed = SpecLoader().load_spec(LoaderConfig(url="https://example.com/openapi.json"))
    snippet = CodeSnippetGenerator(parsed).generate("getUser", CodeSnippetOptions(language="curl"))
    print(snippet.code)

Modules:
    parser: Spec decoding, ``$ref`` resolution and normalization.
    loader: :class:`SpecLoader` with caching and retry.
    context: :class:`ApiContext` and the ``use_*`` accessors.
    endpoints: Endpoint lookup, filtering and grouping.
    search: Scored endpoint search.
    client: Asynchronous :class:`OperationExecutor`.
    codegen: :class:`CodeSnippetGenerator`.
    app: Typer application and CLI entry point.
"""

from openapi_ui.codegen import CodeSnippetGenerator
from openapi_ui.client import OperationExecutor
from openapi_ui.context import ApiContext, provide_context
from openapi_ui.loader import SpecLoader
from openapi_ui.models import (
    CodeSnippetOptions,
    ExecuteParams,
    LoaderConfig,
    ParsedApiSpec,
    SearchFilters,
    SearchOptions,
)
from openapi_ui.parser import normalize
from openapi_ui.search import EndpointSearch, search_endpoints

__version__ = "0.1.0"

__all__ = [
    "ApiContext",
    "CodeSnippetGenerator",
    "CodeSnippetOptions",
    "EndpointSearch",
    "ExecuteParams",
    "LoaderConfig",
    "OperationExecutor",
    "ParsedApiSpec",
    "SearchFilters",
    "SearchOptions",
    "SpecLoader",
    "normalize",
    "provide_context",
    "search_endpoints",
    "__version__",
]
