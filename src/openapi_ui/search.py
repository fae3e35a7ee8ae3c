"""Multi-criteria filtering and ranked text search over endpoints.

:func:`search_endpoints` is a pure function of ``(endpoints, filters,
options)``. Filters are applied conjunctively in a fixed order (methods,
tags, deprecated, has-parameters, has-request-body, response status codes)
and the survivors are then ranked against the text query, if any.

Ranking: each searchable field scores 1.0 on a substring match. With fuzzy
search enabled, a field without a substring match scores
``(matched / len(query)) * 0.7`` when every query character appears in
order, else 0. Matched scores are weighted per field, summed, divided by the
number of matched fields and clamped to ``[0, 1]``. Ties keep input order.

:class:`EndpointSearch` wraps the same logic in a small stateful object
whose filters can be edited incrementally.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence, Union

from openapi_ui.context import ApiContext
from openapi_ui.exceptions import InvalidUsageError
from openapi_ui.models import (
    FilterOptions,
    NormalizedEndpoint,
    SearchFilters,
    SearchOptions,
    SearchResult,
)

FIELD_WEIGHTS: dict[str, float] = {
    "summary": 2.0,
    "operationId": 1.8,
    "path": 1.7,
    "description": 1.5,
    "tags": 1.3,
    "parameters": 1.2,
    "responses": 1.1,
}

# Fields are scored in this order, which is also the order of matched_fields
_FIELD_ORDER = (
    "summary",
    "description",
    "operationId",
    "path",
    "tags",
    "parameters",
    "responses",
)

FUZZY_FACTOR = 0.7


def match_score(
    query: str, text: str, *, case_sensitive: bool = False, fuzzy: bool = False
) -> float:
    """Score *text* against *query*.

    Returns:
        ``1.0`` for a substring match; the in-order subsequence score
        ``(matched / len(query)) * 0.7`` when *fuzzy* is set and every query
        character is found; ``0.0`` otherwise.
    """
    if not case_sensitive:
        query = query.lower()
        text = text.lower()

    if query in text:
        return 1.0
    if not fuzzy:
        return 0.0

    query_index = 0
    for char in text:
        if query_index == len(query):
            break
        if char == query[query_index]:
            query_index += 1

    if query_index != len(query):
        return 0.0
    return (query_index / len(query)) * FUZZY_FACTOR


def apply_filters(
    endpoints: Sequence[NormalizedEndpoint], filters: SearchFilters
) -> list[NormalizedEndpoint]:
    """Apply every non-text filter in *filters*, preserving input order."""
    results = list(endpoints)

    if filters.methods:
        methods = set(filters.methods)
        results = [e for e in results if e.method in methods]

    if filters.tags:
        tags = set(filters.tags)
        results = [e for e in results if tags.intersection(e.tags)]

    if filters.deprecated is not None:
        results = [e for e in results if e.deprecated == filters.deprecated]

    if filters.has_parameters is not None:
        results = [e for e in results if bool(e.parameters) == filters.has_parameters]

    if filters.has_request_body is not None:
        results = [
            e for e in results if (e.request_body is not None) == filters.has_request_body
        ]

    if filters.response_status_codes:
        codes = set(filters.response_status_codes)
        results = [
            e for e in results if any(r.status_code in codes for r in e.responses)
        ]

    return results


def score_endpoint(
    endpoint: NormalizedEndpoint, query: str, options: SearchOptions
) -> Optional[SearchResult]:
    """Rank one endpoint against *query*.

    Returns:
        A :class:`~openapi_ui.models.SearchResult`, or ``None`` when no
        searchable field matched.
    """
    fields = set(options.search_fields)
    matched: list[str] = []
    highlights: dict[str, str] = {}
    total = 0.0

    def score(text: str) -> float:
        return match_score(
            query, text, case_sensitive=options.case_sensitive, fuzzy=options.fuzzy_search
        )

    def record(field: str, value: float, highlight: str) -> None:
        nonlocal total
        matched.append(field)
        total += value * FIELD_WEIGHTS[field]
        highlights[field] = highlight

    for field in _FIELD_ORDER:
        if field not in fields:
            continue

        if field in ("summary", "description", "operationId", "path"):
            text = {
                "summary": endpoint.summary,
                "description": endpoint.description,
                "operationId": endpoint.operation_id,
                "path": endpoint.path,
            }[field]
            if text:
                value = score(text)
                if value > 0:
                    record(field, value, text)

        elif field == "tags":
            for tag in endpoint.tags:
                value = score(tag)
                if value > 0:
                    record(field, value, ", ".join(endpoint.tags))
                    break

        elif field == "parameters":
            for param in endpoint.parameters:
                name_score = score(param.name)
                desc_score = score(param.description) if param.description else 0.0
                if name_score > 0 or desc_score > 0:
                    record(field, name_score + desc_score, f"Parameter: {param.name}")
                    break

        else:
            for response in endpoint.responses:
                value = score(response.description) if response.description else 0.0
                if value > 0:
                    record(field, value, f"{response.status_code}: {response.description}")
                    break

    if not matched:
        return None

    return SearchResult(
        endpoint=endpoint,
        score=max(0.0, min(total / len(matched), 1.0)),
        matched_fields=matched,
        highlights=highlights,
    )


def search_endpoints(
    endpoints: Sequence[NormalizedEndpoint],
    filters: Optional[SearchFilters] = None,
    options: Optional[SearchOptions] = None,
) -> list[SearchResult]:
    """Filter and rank *endpoints*.

    Args:
        endpoints: The endpoints to search, typically
            ``ParsedApiSpec.endpoints``.
        filters: Criteria combined with AND. ``None`` applies no filter.
        options: Text-search behaviour. Defaults to all fields,
            case-insensitive, no fuzzy matching, minimum query length 1.

    Returns:
        Results sorted by descending score (stable). Without an active
        query every filter-passing endpoint is returned with score 1.0 and
        no matched fields.

    Example::

        results = search_endpoints(
            parsed.endpoints,
            SearchFilters(query="user", methods=[HTTPMethod.GET]),
        )
    """
    filters = filters or SearchFilters()
    options = options or SearchOptions()
    candidates = apply_filters(endpoints, filters)

    query = filters.query
    if query and len(query) >= options.min_query_length:
        scored = [score_endpoint(endpoint, query, options) for endpoint in candidates]
        results = [r for r in scored if r is not None]
        results.sort(key=lambda r: r.score, reverse=True)
        return results

    return [SearchResult(endpoint=endpoint, score=1.0) for endpoint in candidates]


def get_filter_options(endpoints: Sequence[NormalizedEndpoint]) -> FilterOptions:
    """Return the sorted distinct methods, tags and status codes in *endpoints*."""
    methods = {e.method for e in endpoints}
    tags = {tag for e in endpoints for tag in e.tags}
    status_codes = {r.status_code for e in endpoints for r in e.responses}
    return FilterOptions(
        methods=sorted(methods, key=lambda m: m.value),
        tags=sorted(tags),
        status_codes=sorted(status_codes),
    )


def is_searching(filters: SearchFilters) -> bool:
    """Return ``True`` when any filter is set to a non-empty value."""
    for value in filters.model_dump().values():
        if value is None:
            continue
        if isinstance(value, (list, str)) and len(value) == 0:
            continue
        return True
    return False


class EndpointSearch:
    """Stateful search over a context's (or a fixed list of) endpoints.

    Results are recomputed on every access, so a context that loads a new
    spec is reflected immediately.

    Args:
        source: An :class:`~openapi_ui.context.ApiContext` or a plain
            endpoint sequence.
        options: Text-search behaviour shared by every query.
    """

    def __init__(
        self,
        source: Union[ApiContext, Sequence[NormalizedEndpoint]],
        options: Optional[SearchOptions] = None,
    ) -> None:
        self._source = source
        self._options = options or SearchOptions()
        self._filters = SearchFilters()

    @property
    def endpoints(self) -> list[NormalizedEndpoint]:
        if isinstance(self._source, ApiContext):
            return self._source.endpoints
        return list(self._source)

    @property
    def filters(self) -> SearchFilters:
        return self._filters

    @property
    def options(self) -> SearchOptions:
        return self._options

    @property
    def results(self) -> list[SearchResult]:
        return search_endpoints(self.endpoints, self._filters, self._options)

    @property
    def total_results(self) -> int:
        return len(self.results)

    @property
    def is_searching(self) -> bool:
        return is_searching(self._filters)

    def set_filters(self, filters: SearchFilters) -> None:
        self._filters = filters

    def update_filter(self, key: str, value: Any) -> None:
        """Set a single filter field, validating the new value.

        Raises:
            InvalidUsageError: If *key* is not a filter field.
        """
        if key not in SearchFilters.model_fields:
            raise InvalidUsageError(f"Unknown search filter: {key}")
        self._filters = SearchFilters.model_validate(
            {**self._filters.model_dump(), key: value}
        )

    def clear_filters(self) -> None:
        self._filters = SearchFilters()

    def set_query(self, query: str) -> None:
        self.update_filter("query", query)

    def clear_search(self) -> None:
        self.set_query("")

    def get_filter_options(self) -> FilterOptions:
        return get_filter_options(self.endpoints)
