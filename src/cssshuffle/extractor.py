# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Extract class, id and custom-property names referenced by CSS fragments."""

import logging
from dataclasses import dataclass

from cssshuffle.css_syntax import IdentifierTransformer, parse_fragment
from cssshuffle.registry import Identifier, Namespace

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtractedIdentifiers:
    """Store identifiers of one fragment in order of first appearance.

    Args:
        identifiers: Distinct identifiers, first appearance first.
    """

    identifiers: tuple[Identifier, ...]

    @property
    def class_names(self) -> frozenset[str]:
        return self._names("class")

    @property
    def id_names(self) -> frozenset[str]:
        return self._names("id")

    @property
    def custom_property_names(self) -> frozenset[str]:
        return self._names("custom_property")

    def _names(self, namespace: Namespace) -> frozenset[str]:
        return frozenset(
            identifier.name
            for identifier in self.identifiers
            if identifier.namespace == namespace
        )


class _IdentifierCollector:
    """Record identifiers offered by the transformer without renaming."""

    def __init__(self) -> None:
        self._seen: dict[Identifier, None] = {}

    def __call__(self, namespace: Namespace, name: str) -> str | None:
        self._seen.setdefault(Identifier(namespace=namespace, name=name), None)
        return None

    @property
    def identifiers(self) -> tuple[Identifier, ...]:
        return tuple(self._seen)


def extract_identifiers(source: str) -> ExtractedIdentifiers:
    """Extract identifiers referenced or declared by one CSS fragment.

    Args:
        source: CSS text of a stylesheet or inline style block.

    Returns:
        Distinct identifiers in document order.

    Raises:
        CssParseError: If the fragment cannot be parsed.
    """
    nodes = parse_fragment(source)
    collector = _IdentifierCollector()
    IdentifierTransformer(resolve=collector).transform_contents(nodes)
    extracted = ExtractedIdentifiers(identifiers=collector.identifiers)
    logger.debug(
        "Extracted fragment identifiers",
        extra={
            "classes": len(extracted.class_names),
            "ids": len(extracted.id_names),
            "custom_properties": len(extracted.custom_property_names),
        },
    )
    return extracted
