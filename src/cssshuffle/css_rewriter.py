# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Rewrite CSS fragments using namespace registry aliases."""

import logging
from dataclasses import dataclass

from cssshuffle.css_syntax import (
    CssParseError,
    IdentifierTransformer,
    parse_fragment,
    serialize,
)
from cssshuffle.registry import NamespaceRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CssRewriteResult:
    """Store transformed CSS and rewrite counters.

    Args:
        transformed_source: Rewritten CSS text.
        identifiers_renamed: Count of identifier replacements applied.
    """

    transformed_source: str
    identifiers_renamed: int


def rewrite_css(
    source: str, registry: NamespaceRegistry, discover: bool = False
) -> CssRewriteResult:
    """Rewrite one CSS fragment according to registry aliases.

    Names missing from the registry are kept verbatim. With ``discover``
    enabled, missing names are registered on first encounter instead.

    Args:
        source: Original CSS text.
        registry: Alias registry.
        discover: Whether to register unseen names while rewriting.

    Returns:
        Rewritten CSS and counters.

    Raises:
        CssParseError: If the fragment cannot be parsed.
        RegistryFrozenError: If discover is enabled on a frozen registry.
    """
    try:
        nodes = parse_fragment(source)
    except CssParseError as exc:
        logger.warning("Rewrite skipped due to parse error", extra={"error": str(exc)})
        raise

    resolve = registry.register if discover else registry.lookup
    transformer = IdentifierTransformer(resolve=resolve)
    new_nodes = transformer.transform_contents(nodes)

    if transformer.identifiers_renamed == 0:
        return CssRewriteResult(transformed_source=source, identifiers_renamed=0)
    return CssRewriteResult(
        transformed_source=serialize(new_nodes),
        identifiers_renamed=transformer.identifiers_renamed,
    )
