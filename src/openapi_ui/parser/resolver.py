"""Resolve ``$ref`` JSON Reference pointers in OpenAPI documents.

OpenAPI documents commonly use ``$ref`` pointers (e.g.,
``{"$ref": "#/components/schemas/Pet"}``) to avoid repetition. Unlike a
whole-document pre-pass, references here are resolved lazily at each site
where the normalizer consumes a node:

* :func:`resolve_reference` -- follow exactly one ``$ref`` hop.
* :func:`dereference` -- follow a chain of ``$ref`` hops until a concrete
  node is reached, failing on loops.

Only **internal** references (those starting with ``#/``) are supported.
Neither function copies or mutates the document; callers receive the node
that lives inside *root*.
"""

from __future__ import annotations

from typing import Any

from openapi_ui.exceptions import CircularReferenceError, ReferenceResolutionError


def is_reference(node: Any) -> bool:
    """Return ``True`` when *node* is a ``{"$ref": "..."}`` object."""
    return isinstance(node, dict) and isinstance(node.get("$ref"), str)


def resolve_reference(node: Any, root: dict[str, Any]) -> Any:
    """Resolve *node* one hop if it is a reference, else return it unchanged.

    Args:
        node: Any document node.
        root: The root document that ``#/`` pointers are relative to.

    Returns:
        The referenced node (which may itself be a reference), or *node*
        when it is not a reference.

    Raises:
        ReferenceResolutionError: If the pointer is external or any
            segment is missing. The message names the literal ``$ref``.
    """
    if not is_reference(node):
        return node
    return _resolve_pointer(node["$ref"], root)


def dereference(node: Any, root: dict[str, Any]) -> Any:
    """Follow ``$ref`` hops from *node* until a non-reference is reached.

    Args:
        node: Any document node.
        root: The root document.

    Returns:
        The first non-reference node along the chain.

    Raises:
        CircularReferenceError: If the chain revisits a pointer.
        ReferenceResolutionError: If any pointer along the chain is broken.
    """
    target, _ = follow_references(node, root)
    return target


def follow_references(node: Any, root: dict[str, Any]) -> tuple[Any, list[str]]:
    """Like :func:`dereference`, but also return the pointers followed.

    Returns:
        A ``(target, refs)`` tuple where *refs* lists every ``$ref`` string
        traversed, in order. *refs* is empty when *node* is not a reference.
    """
    visited: list[str] = []
    while is_reference(node):
        ref = node["$ref"]
        if ref in visited:
            chain = " -> ".join(visited + [ref])
            raise CircularReferenceError(f"Circular $ref chain: {chain}", ref=ref)
        visited.append(ref)
        node = _resolve_pointer(ref, root)
    return node, visited


def _resolve_pointer(ref: str, root: dict[str, Any]) -> Any:
    """Navigate *root* along the JSON Pointer in *ref*.

    Handles RFC 6901 escaping (``~1`` for ``/``, ``~0`` for ``~``).
    """
    if not ref.startswith("#/"):
        raise ReferenceResolutionError(
            f"Unable to resolve reference: {ref} "
            "(only internal references starting with '#/' are supported)",
            ref=ref,
        )

    current: Any = root
    for segment in ref[2:].split("/"):
        segment = segment.replace("~1", "/").replace("~0", "~")

        if isinstance(current, dict):
            if segment not in current:
                raise ReferenceResolutionError(
                    f"Unable to resolve reference: {ref} "
                    f"(key '{segment}' not found)",
                    ref=ref,
                )
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError) as exc:
                raise ReferenceResolutionError(
                    f"Unable to resolve reference: {ref} "
                    f"(invalid array index '{segment}')",
                    ref=ref,
                ) from exc
        else:
            raise ReferenceResolutionError(
                f"Unable to resolve reference: {ref} "
                f"(cannot navigate into {type(current).__name__})",
                ref=ref,
            )

    if current is None:
        raise ReferenceResolutionError(f"Unable to resolve reference: {ref}", ref=ref)
    return current
