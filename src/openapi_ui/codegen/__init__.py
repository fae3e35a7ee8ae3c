"""Code snippet generation for openapi-ui.

:class:`CodeSnippetGenerator` renders a ready-to-run request for any
normalized endpoint in one of eight languages: curl, JavaScript and
TypeScript (fetch), Python (requests), Node.js (axios), PHP (cURL),
Java (OkHttp) and Go (net/http).

Example::

    from openapi_ui.codegen import CodeSnippetGenerator

    options = CodeSnippetOptions(language="python")
    snippet = CodeSnippetGenerator(parsed).generate("listUsers", options)
"""

from openapi_ui.codegen.base import SnippetGenerator, SnippetRequest
from openapi_ui.codegen.generator import CodeSnippetGenerator

__all__ = ["CodeSnippetGenerator", "SnippetGenerator", "SnippetRequest"]
