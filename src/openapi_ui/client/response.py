"""Response decoding -- maps an :class:`httpx.Response` to caller-facing data.

After an HTTP call completes, :func:`extract_response_data` decodes the
body according to the response's ``content-type`` and
:func:`raise_for_status` turns a non-2xx status into an
:class:`~openapi_ui.exceptions.ExecutionError`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx

from openapi_ui.exceptions import ExecutionError


@dataclass
class ExecutionResult:
    """Outcome of a successful call.

    Attributes:
        data: The decoded body, after response interceptors ran.
        status: HTTP status code.
        headers: Response headers.
        response: The underlying :class:`httpx.Response`.
    """

    data: Any
    status: int
    headers: httpx.Headers
    response: httpx.Response


def extract_response_data(response: httpx.Response, parse_json: bool = True) -> Any:
    """Decode the body of *response*.

    Args:
        response: The received response.
        parse_json: Decode ``application/json`` bodies. When ``False`` they
            are returned as raw bytes.

    Returns:
        A JSON-decoded object for ``application/json`` (``None`` when the
        body is empty), a ``str`` for ``text/*``, and ``bytes`` otherwise.

    Raises:
        ExecutionError: If a JSON body cannot be decoded.
    """
    content_type = response.headers.get("content-type", "")

    if parse_json and "application/json" in content_type:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ExecutionError(
                f"Invalid JSON in response body: {exc}",
                status_code=response.status_code,
                data=response.text,
            ) from exc

    if "text/" in content_type:
        return response.text

    return response.content


def raise_for_status(response: httpx.Response, data: Any) -> None:
    """Raise :class:`~openapi_ui.exceptions.ExecutionError` for non-2xx responses.

    The message is the body's ``message`` field when present, else
    ``HTTP {status}: {reason}``.
    """
    if response.is_success:
        return

    message = None
    if isinstance(data, dict):
        message = data.get("message")
    if not message:
        message = f"HTTP {response.status_code}: {response.reason_phrase}"

    raise ExecutionError(str(message), status_code=response.status_code, data=data)
