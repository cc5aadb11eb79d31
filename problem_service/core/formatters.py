"""Serializers that turn a problem detail into response body bytes.

Two formatters ship with the service: compact JSON and RFC 7807 Appendix A
style XML. They are looked up by canonical media type through a
``FormatterRegistry`` that the application builds once at startup.
"""

from __future__ import annotations

import json
import re
import xml.etree.ElementTree as ET
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from problem_service.core.schemas.problem_details import ProblemDetail

PROBLEM_JSON_MEDIA_TYPE = "application/problem+json"
PROBLEM_XML_MEDIA_TYPE = "application/problem+xml"

PROBLEM_XML_NAMESPACE = "urn:ietf:rfc:7807"

# Keys usable verbatim as element names; anything else goes into a key attribute.
_XML_NAME = re.compile(r"^(?![Xx][Mm][Ll])[A-Za-z_][A-Za-z0-9._-]*\Z")
# Characters outside the XML 1.0 Char production.
_XML_INVALID_CHARS = re.compile("[^\t\n\r\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")


def xml_safe_text(value: str) -> str:
    """Replace characters that cannot appear in an XML 1.0 document with U+FFFD."""
    return _XML_INVALID_CHARS.sub("\ufffd", value)


class ProblemFormatter(Protocol):
    """Serializer capability for one problem media type."""

    media_type: str

    def render(self, problem: ProblemDetail) -> bytes:
        """Serialize the problem to body bytes."""
        ...


class JSONProblemFormatter:
    """Compact UTF-8 JSON, matching Starlette's JSONResponse rendering."""

    media_type = PROBLEM_JSON_MEDIA_TYPE

    def render(self, problem: ProblemDetail) -> bytes:
        return json.dumps(
            problem.to_wire(),
            ensure_ascii=False,
            allow_nan=False,
            indent=None,
            separators=(",", ":"),
        ).encode("utf-8")


class XMLProblemFormatter:
    """XML rendering following RFC 7807 Appendix A.

    Each member becomes a child element of ``<problem>``. Arrays are
    written as repeated ``<i>`` elements and nested objects as nested
    elements. A key that is not a plain XML name (``first name``, or the
    empty field of a root-level validation error) is written as
    ``<entry key="...">``. Characters XML 1.0 forbids are replaced with
    U+FFFD.

    Example output:
        <problem xmlns="urn:ietf:rfc:7807">
          <type>urn:builtins.RuntimeError</type>
          <status>500</status>
          <detail>bad state</detail>
        </problem>
    """

    media_type = PROBLEM_XML_MEDIA_TYPE
    root_tag = "problem"
    item_tag = "i"
    entry_tag = "entry"

    def render(self, problem: ProblemDetail) -> bytes:
        root = ET.Element(self.root_tag, xmlns=PROBLEM_XML_NAMESPACE)
        for name, value in problem.to_wire().items():
            self._append(root, name, value)
        return ET.tostring(root, encoding="utf-8", xml_declaration=True)

    def _append(self, parent: ET.Element, tag: str, value: Any) -> None:
        if _XML_NAME.match(tag):
            element = ET.SubElement(parent, tag)
        else:
            element = ET.SubElement(parent, self.entry_tag, key=xml_safe_text(tag))
        if isinstance(value, dict):
            for key, item in value.items():
                self._append(element, key, item)
        elif isinstance(value, list):
            for item in value:
                self._append(element, self.item_tag, item)
        elif isinstance(value, bool):
            element.text = "true" if value else "false"
        else:
            element.text = xml_safe_text(str(value))


class FormatterRegistry:
    """Formatters available to the application, keyed by media type.

    A lookup for a format that was never registered returns None, which
    callers treat as "fall back to JSON".
    """

    def __init__(self, formatters: Iterable[ProblemFormatter] = ()) -> None:
        self._formatters: dict[str, ProblemFormatter] = {}
        for formatter in formatters:
            self.register(formatter)

    @classmethod
    def default(cls, *, xml_enabled: bool = True) -> FormatterRegistry:
        """Build the standard JSON (and optionally XML) registry."""
        formatters: list[ProblemFormatter] = [JSONProblemFormatter()]
        if xml_enabled:
            formatters.append(XMLProblemFormatter())
        return cls(formatters)

    def register(self, formatter: ProblemFormatter) -> None:
        self._formatters[formatter.media_type] = formatter

    def get(self, media_type: str) -> ProblemFormatter | None:
        return self._formatters.get(media_type)

    def __contains__(self, media_type: object) -> bool:
        return media_type in self._formatters

    def __iter__(self) -> Iterator[ProblemFormatter]:
        return iter(self._formatters.values())

    def __len__(self) -> int:
        return len(self._formatters)


__all__ = [
    "PROBLEM_JSON_MEDIA_TYPE",
    "PROBLEM_XML_MEDIA_TYPE",
    "PROBLEM_XML_NAMESPACE",
    "FormatterRegistry",
    "JSONProblemFormatter",
    "ProblemFormatter",
    "XMLProblemFormatter",
    "xml_safe_text",
]
