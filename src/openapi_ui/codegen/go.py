"""Go snippets using net/http."""

from __future__ import annotations

from openapi_ui.codegen.base import SnippetGenerator, SnippetRequest, json_text
from openapi_ui.models import CodeSnippetLanguage


class GoGenerator(SnippetGenerator):
    """Renders a ``main`` package that sends the request and prints the body.

    Structured bodies are marshalled with ``encoding/json``; string bodies
    are sent as a raw byte slice.
    """

    language = CodeSnippetLanguage(id="go", name="Go (net/http)", extension="go")

    def render(self, request: SnippetRequest) -> str:
        structured = request.has_body and isinstance(request.body, (dict, list))

        code = "package main\n\n"
        code += "import (\n"
        if request.has_body:
            code += '    "bytes"\n'
        code += '    "fmt"\n'
        code += '    "io"\n'
        code += '    "net/http"\n'
        if structured:
            code += '    "encoding/json"\n'
        code += ")\n\n"
        code += "func main() {\n"

        if structured:
            literal = json_text(request.body, indent=4).replace('"', "`")
            code += f"    data := map[string]interface{{}}{literal}\n"
            code += "    jsonData, _ := json.Marshal(data)\n"
            reader = "bytes.NewBuffer(jsonData)"
        elif request.has_body:
            code += f"    payload := []byte(`{request.body}`)\n"
            reader = "bytes.NewBuffer(payload)"
        else:
            reader = "nil"
        code += f'    req, err := http.NewRequest("{request.method}", "{request.url}", {reader})\n'

        code += "    if err != nil {\n"
        code += "        panic(err)\n"
        code += "    }\n\n"

        if request.headers or request.has_body:
            for key, value in request.headers.items():
                code += f'    req.Header.Set("{key}", "{value}")\n'
            if request.has_body:
                code += '    req.Header.Set("Content-Type", "application/json")\n'
            code += "\n"

        code += "    client := &http.Client{}\n"
        code += "    resp, err := client.Do(req)\n"
        code += "    if err != nil {\n"
        code += "        panic(err)\n"
        code += "    }\n"
        code += "    defer resp.Body.Close()\n\n"
        code += "    body, err := io.ReadAll(resp.Body)\n"
        code += "    if err != nil {\n"
        code += "        panic(err)\n"
        code += "    }\n\n"
        code += '    fmt.Printf("Status: %s\\n", resp.Status)\n'
        code += '    fmt.Printf("Response: %s\\n", string(body))\n'
        code += "}"
        return code
