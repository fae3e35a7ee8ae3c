"""Node.js snippets using axios."""

from __future__ import annotations

from openapi_ui.codegen.base import SnippetGenerator, SnippetRequest, json_text
from openapi_ui.models import CodeSnippetLanguage


class NodeGenerator(SnippetGenerator):
    """Renders an axios request config and promise chain."""

    language = CodeSnippetLanguage(id="node", name="Node.js (axios)", extension="js")

    def render(self, request: SnippetRequest) -> str:
        code = "const axios = require('axios');\n\n"
        code += f"// {request.summary}\n"
        code += "const config = {\n"
        code += f"  method: '{request.method.lower()}',\n"
        code += f"  url: '{request.url}',\n"

        if request.headers:
            code += "  headers: {\n"
            for key, value in request.headers.items():
                code += f"    '{key}': '{value}',\n"
            code += "  },\n"

        if request.has_body:
            if isinstance(request.body, str):
                body = f"'{request.body}'"
            else:
                body = json_text(request.body, indent=2)
            code += f"  data: {body},\n"

        code += "};\n\n"
        code += "axios(config)\n"
        code += "  .then(response => {\n"
        code += "    console.log(response.data);\n"
        code += "  })\n"
        code += "  .catch(error => {\n"
        code += "    console.error('Error:', error.response?.data || error.message);\n"
        code += "  });"
        return code
