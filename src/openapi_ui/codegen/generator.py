"""Snippet generator facade -- registry and dispatcher for language generators.

:class:`CodeSnippetGenerator` holds one instance of every built-in
:class:`~openapi_ui.codegen.base.SnippetGenerator`, keyed by language id,
and exposes :meth:`~CodeSnippetGenerator.generate` (by endpoint id) and
:meth:`~CodeSnippetGenerator.generate_for_endpoint`. The registry is closed:
unknown language ids raise
:class:`~openapi_ui.exceptions.UnsupportedLanguageError`.
"""

from __future__ import annotations

from typing import Optional, Union

from openapi_ui.codegen.base import SnippetGenerator, prepare_request
from openapi_ui.codegen.curl import CurlGenerator
from openapi_ui.codegen.go import GoGenerator
from openapi_ui.codegen.java import JavaGenerator
from openapi_ui.codegen.javascript import JavaScriptGenerator, TypeScriptGenerator
from openapi_ui.codegen.node import NodeGenerator
from openapi_ui.codegen.php import PhpGenerator
from openapi_ui.codegen.python import PythonGenerator
from openapi_ui.context import ApiContext
from openapi_ui.endpoints import find_endpoint_by_id
from openapi_ui.exceptions import (
    InvalidUsageError,
    OperationNotFoundError,
    UnsupportedLanguageError,
)
from openapi_ui.models import (
    CodeSnippetLanguage,
    CodeSnippetOptions,
    CodeSnippetResult,
    NormalizedEndpoint,
    ParsedApiSpec,
)


def _builtin_generators() -> list[SnippetGenerator]:
    return [
        CurlGenerator(),
        JavaScriptGenerator(),
        TypeScriptGenerator(),
        PythonGenerator(),
        NodeGenerator(),
        PhpGenerator(),
        JavaGenerator(),
        GoGenerator(),
    ]


class CodeSnippetGenerator:
    """Generates request snippets for endpoints in eight languages.

    Args:
        spec: The spec that supplies servers and endpoints, or an
            :class:`~openapi_ui.context.ApiContext` to read the current spec
            from. May be ``None`` when only
            :meth:`generate_for_endpoint` is used.

    Example::

        generator = CodeSnippetGenerator(parsed)
        snippet = generator.generate(
            "getUser",
            CodeSnippetOptions(language="curl", parameters={"path_params": {"id": 123}}),
        )
        print(snippet.code)
    """

    def __init__(self, spec: Union[ParsedApiSpec, ApiContext, None] = None) -> None:
        self._spec_source = spec
        self._generators: dict[str, SnippetGenerator] = {
            generator.language.id: generator for generator in _builtin_generators()
        }
        self._last: Optional[CodeSnippetResult] = None

    @property
    def spec(self) -> Optional[ParsedApiSpec]:
        if isinstance(self._spec_source, ApiContext):
            return self._spec_source.spec
        return self._spec_source

    @property
    def available_languages(self) -> list[CodeSnippetLanguage]:
        """The supported languages, in registration order."""
        return [generator.language for generator in self._generators.values()]

    @property
    def last_generated(self) -> Optional[CodeSnippetResult]:
        return self._last

    def clear_last(self) -> None:
        self._last = None

    def get_generator(self, language: str) -> SnippetGenerator:
        """Return the generator for *language*.

        Raises:
            UnsupportedLanguageError: If *language* is not registered.
        """
        generator = self._generators.get(language)
        if generator is None:
            raise UnsupportedLanguageError(language)
        return generator

    def generate(self, operation_id: str, options: CodeSnippetOptions) -> CodeSnippetResult:
        """Generate a snippet for the endpoint with id *operation_id*.

        Raises:
            InvalidUsageError: If no spec is available.
            OperationNotFoundError: If no endpoint has this id.
            UnsupportedLanguageError: If ``options.language`` is unknown.
        """
        spec = self.spec
        if spec is None:
            raise InvalidUsageError("No API spec available")

        endpoint = find_endpoint_by_id(spec.endpoints, operation_id)
        if endpoint is None:
            raise OperationNotFoundError(operation_id)
        return self.generate_for_endpoint(endpoint, options)

    def generate_for_endpoint(
        self, endpoint: Optional[NormalizedEndpoint], options: CodeSnippetOptions
    ) -> CodeSnippetResult:
        """Generate a snippet for *endpoint*.

        Raises:
            InvalidUsageError: If *endpoint* is ``None``.
            UnsupportedLanguageError: If ``options.language`` is unknown.
        """
        generator = self.get_generator(options.language)
        if endpoint is None:
            raise InvalidUsageError("No endpoint provided")

        request = prepare_request(endpoint, options, self.spec)
        result = CodeSnippetResult(
            code=generator.render(request),
            language=generator.language,
            description=(
                f"{generator.language.name} code for "
                f"{endpoint.method.value.upper()} {endpoint.path}"
            ),
        )
        self._last = result
        return result
