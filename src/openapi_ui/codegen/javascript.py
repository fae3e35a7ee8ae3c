"""Browser ``fetch`` snippets in JavaScript and TypeScript."""

from __future__ import annotations

from openapi_ui.codegen.base import SnippetGenerator, SnippetRequest, json_text
from openapi_ui.models import CodeSnippetLanguage


class JavaScriptGenerator(SnippetGenerator):
    """Renders an ``await fetch(...)`` call.

    The TypeScript variant adds a placeholder ``ApiResponse`` interface and
    type annotations on ``response`` and ``data``.
    """

    language = CodeSnippetLanguage(id="javascript", name="JavaScript (fetch)", extension="js")
    typed = False

    def render(self, request: SnippetRequest) -> str:
        headers = dict(request.headers)
        if request.has_body:
            headers["Content-Type"] = "application/json"

        code = f"// {request.summary}\n"
        if self.typed:
            code += (
                "interface ApiResponse {\n"
                "  // Define your response type here\n"
                "  [key: string]: any;\n"
                "}\n\n"
            )

        code += "const response"
        if self.typed:
            code += ": Response"
        code += f" = await fetch('{request.url}', {{\n"
        code += f"  method: '{request.method}',\n"

        if headers:
            code += "  headers: {\n"
            for key, value in headers.items():
                code += f"    '{key}': '{value}',\n"
            code += "  },\n"

        if request.has_body:
            if isinstance(request.body, str):
                body = f"'{request.body}'"
            else:
                body = "\n  ".join(json_text(request.body, indent=4).split("\n"))
            code += f"  body: JSON.stringify({body}),\n"

        code += "});\n\n"
        code += "if (!response.ok) {\n"
        code += "  throw new Error(`HTTP error! status: ${response.status}`);\n"
        code += "}\n\n"
        code += "const data"
        if self.typed:
            code += ": ApiResponse"
        code += " = await response.json();\n"
        code += "console.log(data);"
        return code


class TypeScriptGenerator(JavaScriptGenerator):
    """:class:`JavaScriptGenerator` with TypeScript annotations."""

    language = CodeSnippetLanguage(id="typescript", name="TypeScript (fetch)", extension="ts")
    typed = True
