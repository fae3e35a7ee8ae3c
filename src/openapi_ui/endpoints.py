"""Lookup, filtering and grouping helpers over normalized endpoint lists.

Every function here is pure: it reads a sequence of
:class:`~openapi_ui.models.NormalizedEndpoint` objects and returns a new
list or dict without touching its input.
"""

from __future__ import annotations

from typing import Callable, Iterable, Literal, Optional, Sequence, Union

from openapi_ui.models import HTTPMethod, NormalizedEndpoint

UNTAGGED = "Untagged"

GroupBy = Literal["tag", "method", "path"]


def find_endpoint_by_id(
    endpoints: Iterable[NormalizedEndpoint], endpoint_id: str
) -> Optional[NormalizedEndpoint]:
    """Return the first endpoint whose ``id`` equals *endpoint_id*."""
    for endpoint in endpoints:
        if endpoint.id == endpoint_id:
            return endpoint
    return None


def find_endpoint_by_method_and_path(
    endpoints: Iterable[NormalizedEndpoint],
    method: Union[HTTPMethod, str],
    path: str,
) -> Optional[NormalizedEndpoint]:
    """Return the first endpoint matching *method* (case-insensitive) and *path*."""
    method_value = _method_value(method)
    for endpoint in endpoints:
        if endpoint.method.value == method_value and endpoint.path == path:
            return endpoint
    return None


def filter_endpoints_by_tag(
    endpoints: Iterable[NormalizedEndpoint], tag: str
) -> list[NormalizedEndpoint]:
    """Return the endpoints carrying *tag*, in input order."""
    return [endpoint for endpoint in endpoints if tag in endpoint.tags]


def group_endpoints_by_tag(
    endpoints: Iterable[NormalizedEndpoint],
) -> dict[str, list[NormalizedEndpoint]]:
    """Group endpoints under each of their tags.

    An endpoint with several tags appears in each of their groups; one with
    no tags lands in the ``"Untagged"`` group. Groups are ordered by first
    appearance and keep input order internally.
    """
    groups: dict[str, list[NormalizedEndpoint]] = {}
    for endpoint in endpoints:
        for tag in endpoint.tags or [UNTAGGED]:
            groups.setdefault(tag, []).append(endpoint)
    return groups


def group_endpoints(
    endpoints: Iterable[NormalizedEndpoint], by: GroupBy = "tag"
) -> dict[str, list[NormalizedEndpoint]]:
    """Group endpoints by tag, by upper-case method, or by first path segment.

    Args:
        endpoints: Endpoints to group.
        by: ``"tag"`` (see :func:`group_endpoints_by_tag`), ``"method"``
            (``GET``, ``POST``...) or ``"path"`` (``/users/{id}`` groups
            under ``users``; the root path groups under ``/``).

    Raises:
        ValueError: If *by* is not one of the three supported keys.
    """
    if by == "tag":
        return group_endpoints_by_tag(endpoints)

    if by == "method":
        key: Callable[[NormalizedEndpoint], str] = lambda e: e.method.value.upper()
    elif by == "path":
        key = _first_path_segment
    else:
        raise ValueError(f"Cannot group endpoints by {by!r}")

    groups: dict[str, list[NormalizedEndpoint]] = {}
    for endpoint in endpoints:
        groups.setdefault(key(endpoint), []).append(endpoint)
    return groups


def filter_endpoints(
    endpoints: Sequence[NormalizedEndpoint],
    *,
    tag: Optional[str] = None,
    method: Optional[Union[HTTPMethod, str]] = None,
    search: Optional[str] = None,
    predicate: Optional[Callable[[NormalizedEndpoint], bool]] = None,
) -> list[NormalizedEndpoint]:
    """Apply the simple tag / method / substring / predicate filters in turn.

    ``search`` is a case-insensitive substring match against the path,
    summary, description and operation id. Falsy arguments are ignored.
    """
    filtered = list(endpoints)

    if tag:
        filtered = filter_endpoints_by_tag(filtered, tag)

    if method:
        method_value = _method_value(method)
        filtered = [e for e in filtered if e.method.value == method_value]

    if search:
        needle = search.lower()
        filtered = [
            e
            for e in filtered
            if any(
                needle in text.lower()
                for text in (e.path, e.summary, e.description, e.operation_id)
                if text
            )
        ]

    if predicate:
        filtered = [e for e in filtered if predicate(e)]

    return filtered


def _method_value(method: Union[HTTPMethod, str]) -> str:
    if isinstance(method, HTTPMethod):
        return method.value
    return method.lower()


def _first_path_segment(endpoint: NormalizedEndpoint) -> str:
    for segment in endpoint.path.split("/"):
        if segment:
            return segment
    return "/"
