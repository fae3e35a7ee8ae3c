"""cURL command-line snippets."""

from __future__ import annotations

from openapi_ui.codegen.base import SnippetGenerator, SnippetRequest, json_text
from openapi_ui.models import CodeSnippetLanguage


class CurlGenerator(SnippetGenerator):
    """Renders a multi-line ``curl`` invocation."""

    language = CodeSnippetLanguage(id="curl", name="cURL", extension="sh")

    def render(self, request: SnippetRequest) -> str:
        curl = f"curl -X {request.method}"

        for key, value in request.headers.items():
            curl += f' \\\n  -H "{key}: {value}"'

        if request.has_body:
            curl += ' \\\n  -H "Content-Type: application/json"'
            curl += f" \\\n  -d '{json_text(request.body, indent=2)}'"

        curl += f' \\\n  "{request.url}"'
        return curl
