"""OpenAPI spec parser -- decode, resolve ``$ref`` pointers, and normalize.

This sub-package turns a raw OpenAPI 3.x document (JSON or YAML text, or an
already-decoded dict) into the frozen :class:`~openapi_ui.models.ParsedApiSpec`
that the rest of openapi-ui consumes.

Typical usage::

    from openapi_ui.parser import normalize

    parsed = normalize(Path("petstore.yaml").read_text())

Sub-modules:

* :mod:`~openapi_ui.parser.loader` -- Text and file decoding plus OpenAPI
  version validation.
* :mod:`~openapi_ui.parser.resolver` -- Single-hop and chained ``$ref``
  resolution with loop detection.
* :mod:`~openapi_ui.parser.normalizer` -- Walks the document and produces
  :class:`~openapi_ui.models.NormalizedEndpoint` objects and schemas.
"""

from openapi_ui.parser.loader import (
    load_spec_file,
    parse_spec_string,
    validate_openapi_version,
)
from openapi_ui.parser.normalizer import endpoint_id, normalize
from openapi_ui.parser.resolver import dereference, resolve_reference

__all__ = [
    "dereference",
    "endpoint_id",
    "load_spec_file",
    "normalize",
    "parse_spec_string",
    "resolve_reference",
    "validate_openapi_version",
]
