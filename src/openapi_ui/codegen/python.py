"""Python snippets using requests."""

from __future__ import annotations

import pprint

from openapi_ui.codegen.base import SnippetGenerator, SnippetRequest
from openapi_ui.models import CodeSnippetLanguage


class PythonGenerator(SnippetGenerator):
    """Renders a ``requests.<method>(...)`` call.

    Structured bodies are rendered as Python literals and sent with
    ``json=``; string bodies are sent as-is with ``data=``.
    """

    language = CodeSnippetLanguage(id="python", name="Python (requests)", extension="py")

    def render(self, request: SnippetRequest) -> str:
        method = request.method.lower()

        code = "import requests\n\n"
        code += f"# {request.summary}\n"
        code += f'url = "{request.url}"\n'

        if request.headers:
            code += "headers = {\n"
            for key, value in request.headers.items():
                code += f'    "{key}": "{value}",\n'
            code += "}\n"

        if request.has_body:
            if isinstance(request.body, str):
                code += f"\ndata = {request.body!r}\n"
            else:
                literal = pprint.pformat(request.body, indent=4, sort_dicts=False)
                code += f"\ndata = {literal}\n"

        code += f"\nresponse = requests.{method}(url"
        if request.headers:
            code += ", headers=headers"
        if request.has_body:
            code += ", data=data" if isinstance(request.body, str) else ", json=data"
        code += ")\n\n"
        code += "response.raise_for_status()  # Raises an HTTPError for bad responses\n"
        code += "result = response.json()\n"
        code += "print(result)"
        return code
