"""PHP snippets using the cURL extension."""

from __future__ import annotations

from openapi_ui.codegen.base import SnippetGenerator, SnippetRequest, json_text
from openapi_ui.models import CodeSnippetLanguage


class PhpGenerator(SnippetGenerator):
    """Renders a ``curl_setopt_array`` call and status check."""

    language = CodeSnippetLanguage(id="php", name="PHP (cURL)", extension="php")

    def render(self, request: SnippetRequest) -> str:
        code = "<?php\n\n"
        code += f"// {request.summary}\n"
        code += f'$url = "{request.url}";\n'
        code += "$curl = curl_init();\n\n"
        code += "curl_setopt_array($curl, [\n"
        code += "    CURLOPT_URL => $url,\n"
        code += "    CURLOPT_RETURNTRANSFER => true,\n"
        code += f'    CURLOPT_CUSTOMREQUEST => "{request.method}",\n'

        if request.headers or request.has_body:
            code += "    CURLOPT_HTTPHEADER => [\n"
            for key, value in request.headers.items():
                code += f'        "{key}: {value}",\n'
            if request.has_body:
                code += '        "Content-Type: application/json",\n'
            code += "    ],\n"

        if request.has_body:
            code += f"    CURLOPT_POSTFIELDS => '{json_text(request.body)}',\n"

        code += "]);\n\n"
        code += "$response = curl_exec($curl);\n"
        code += "$httpCode = curl_getinfo($curl, CURLINFO_HTTP_CODE);\n"
        code += "curl_close($curl);\n\n"
        code += "if ($httpCode >= 200 && $httpCode < 300) {\n"
        code += "    $data = json_decode($response, true);\n"
        code += "    print_r($data);\n"
        code += "} else {\n"
        code += '    echo "HTTP Error: $httpCode\\n";\n'
        code += "    echo $response;\n"
        code += "}"
        return code
