"""Content negotiation for problem responses.

Only two representations exist: ``application/problem+json`` and
``application/problem+xml``. JSON is the default; XML is produced only when
the caller explicitly asks for a generic XML type and does not also accept
anything.

Precedence is decided by presence alone, q-values are ignored:

1. ``*/*`` or ``application/*`` -> JSON
2. ``application/xml`` or ``text/xml`` -> XML
3. anything else, including no Accept header -> JSON
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from problem_service.core.formatters import PROBLEM_JSON_MEDIA_TYPE, PROBLEM_XML_MEDIA_TYPE

if TYPE_CHECKING:
    from collections.abc import Iterable

    from starlette.requests import Request

    from problem_service.core.formatters import FormatterRegistry, ProblemFormatter

WILDCARD_MEDIA_RANGES = frozenset({"*/*", "application/*"})
XML_MEDIA_TYPES = frozenset({"application/xml", "text/xml"})


def parse_accept_header(value: str | None) -> frozenset[str]:
    """Split an Accept header into bare, lower-cased media ranges.

    Args:
        value: Raw header value, possibly several comma-joined headers.

    Returns:
        Set of media ranges with parameters (such as ``q``) removed.
    """
    if not value:
        return frozenset()
    tokens = set()
    for part in value.split(","):
        media_range = part.split(";", 1)[0].strip().lower()
        if media_range:
            tokens.add(media_range)
    return frozenset(tokens)


def negotiate_media_type(accepted: Iterable[str]) -> str:
    """Resolve the problem media type for a set of acceptable media ranges.

    Args:
        accepted: Media ranges the caller accepts.

    Returns:
        ``application/problem+json`` or ``application/problem+xml``.
    """
    tokens = frozenset(accepted)
    if tokens & WILDCARD_MEDIA_RANGES:
        return PROBLEM_JSON_MEDIA_TYPE
    if tokens & XML_MEDIA_TYPES:
        return PROBLEM_XML_MEDIA_TYPE
    return PROBLEM_JSON_MEDIA_TYPE


def negotiate_request(request: Request) -> str:
    """Resolve the problem media type from every Accept header on a request."""
    header = ",".join(request.headers.getlist("accept"))
    return negotiate_media_type(parse_accept_header(header))


def select_formatter(media_type: str, registry: FormatterRegistry) -> ProblemFormatter:
    """Pick the formatter for a negotiated media type.

    XML is used only when it was negotiated and an XML formatter is
    registered; every other case falls back to JSON.

    Raises:
        LookupError: If the registry has no JSON formatter.
    """
    if media_type == PROBLEM_XML_MEDIA_TYPE:
        xml_formatter = registry.get(PROBLEM_XML_MEDIA_TYPE)
        if xml_formatter is not None:
            return xml_formatter
    json_formatter = registry.get(PROBLEM_JSON_MEDIA_TYPE)
    if json_formatter is None:
        msg = f"No formatter registered for {PROBLEM_JSON_MEDIA_TYPE}"
        raise LookupError(msg)
    return json_formatter
