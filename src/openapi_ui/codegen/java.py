"""Java snippets using OkHttp."""

from __future__ import annotations

import json

from openapi_ui.codegen.base import SnippetGenerator, SnippetRequest, json_text
from openapi_ui.models import CodeSnippetLanguage


class JavaGenerator(SnippetGenerator):
    """Renders a ``main`` method that builds and executes an OkHttp request."""

    language = CodeSnippetLanguage(id="java", name="Java (OkHttp)", extension="java")

    def render(self, request: SnippetRequest) -> str:
        code = "import okhttp3.*;\nimport java.io.IOException;\n\n"
        code += "public class ApiClient {\n"
        code += "    public static void main(String[] args) throws IOException {\n"
        code += "        OkHttpClient client = new OkHttpClient();\n\n"

        if request.has_body:
            # json.dumps yields a double-quoted literal with Java-compatible escapes
            body_literal = json.dumps(json_text(request.body))
            code += "        RequestBody body = RequestBody.create(\n"
            code += f"            {body_literal},\n"
            code += '            MediaType.parse("application/json")\n'
            code += "        );\n\n"

        body_ref = "body" if request.has_body else "null"
        code += "        Request.Builder requestBuilder = new Request.Builder()\n"
        code += f'            .url("{request.url}")\n'
        code += f'            .method("{request.method}", {body_ref});\n\n'

        if request.headers:
            for key, value in request.headers.items():
                code += f'        requestBuilder.addHeader("{key}", "{value}");\n'
            code += "\n"

        code += "        Request request = requestBuilder.build();\n"
        code += "        Response response = client.newCall(request).execute();\n\n"
        code += "        if (response.isSuccessful()) {\n"
        code += "            System.out.println(response.body().string());\n"
        code += "        } else {\n"
        code += '            System.err.println("HTTP Error: " + response.code());\n'
        code += "            System.err.println(response.body().string());\n"
        code += "        }\n"
        code += "    }\n"
        code += "}"
        return code
