# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Rewrite HTML attributes and inline style blocks using registry aliases."""

import logging
import re
from dataclasses import dataclass

from bs4 import BeautifulSoup, NavigableString, ParserRejectedMarkup, Tag
from bs4.dammit import EntitySubstitution
from bs4.element import Stylesheet
from bs4.formatter import HTMLFormatter

from cssshuffle.css_rewriter import rewrite_css
from cssshuffle.css_syntax import CssParseError
from cssshuffle.registry import NamespaceRegistry

logger = logging.getLogger(__name__)

_PARSER: str = "lxml"
_ID_REFERENCE_ATTRIBUTES: tuple[str, ...] = ("id", "for")
_DOCUMENT_MARKUP = re.compile(r"<(?:!doctype|html|head|body)\b", re.IGNORECASE)


class HtmlParseError(RuntimeError):
    """Represent an HTML document that cannot be parsed."""


class _SourceOrderFormatter(HTMLFormatter):
    """Minimal HTML formatter that keeps attributes in source order."""

    def attributes(self, tag: Tag) -> list[tuple[str, object]]:
        return list(tag.attrs.items())


_FORMATTER = _SourceOrderFormatter(
    entity_substitution=EntitySubstitution.substitute_xml
)


@dataclass(frozen=True)
class HtmlRewriteResult:
    """Store transformed HTML and rewrite counters.

    Args:
        transformed_source: Rewritten HTML document.
        identifiers_renamed: Count of attribute and style replacements.
        fragment_errors: Parse errors of inline style blocks left unchanged.
    """

    transformed_source: str
    identifiers_renamed: int
    fragment_errors: tuple[str, ...] = ()


def iter_style_blocks(document: str) -> list[str]:
    """Collect inline ``<style>`` block texts in document order.

    Args:
        document: HTML document.

    Returns:
        Style block contents; empty blocks are skipped.

    Raises:
        HtmlParseError: If the document cannot be parsed.
    """
    soup = _parse(document)
    blocks: list[str] = []
    for style in soup.find_all("style"):
        text = _style_text(style)
        if text:
            blocks.append(text)
    return blocks


def rewrite_html(document: str, registry: NamespaceRegistry) -> HtmlRewriteResult:
    """Rewrite one HTML document according to registry aliases.

    Only ``class``, ``id``, ``for`` and fragment ``href`` attributes plus
    inline ``<style>`` blocks are touched. A document without any
    replacement is returned unchanged, byte for byte.

    Args:
        document: Original HTML document.
        registry: Alias registry.

    Returns:
        Rewritten document and counters.

    Raises:
        HtmlParseError: If the document cannot be parsed.
    """
    soup = _parse(document)
    renamed = 0
    fragment_errors: list[str] = []

    for style in soup.find_all("style"):
        text = _style_text(style)
        if not text:
            continue
        try:
            result = rewrite_css(text, registry)
        except CssParseError as exc:
            fragment_errors.append(str(exc))
            continue
        if result.identifiers_renamed:
            style.string.replace_with(Stylesheet(result.transformed_source))
            renamed += result.identifiers_renamed

    for tag in soup.find_all(True):
        renamed += _rewrite_class(tag, registry)
        for attribute in _ID_REFERENCE_ATTRIBUTES:
            renamed += _rewrite_id_reference(tag, attribute, registry)
        renamed += _rewrite_fragment_link(tag, registry)

    if renamed == 0:
        return HtmlRewriteResult(
            transformed_source=document,
            identifiers_renamed=0,
            fragment_errors=tuple(fragment_errors),
        )
    return HtmlRewriteResult(
        transformed_source=_serialize(soup, document),
        identifiers_renamed=renamed,
        fragment_errors=tuple(fragment_errors),
    )


def _serialize(soup: BeautifulSoup, document: str) -> str:
    """Render a parsed document back to markup.

    The parser wraps fragments in implied ``html``, ``head`` and ``body``
    elements; for a fragment only their contents are rendered.

    Args:
        soup: Rewritten tree.
        document: Original markup.

    Returns:
        Serialized markup.
    """
    if _DOCUMENT_MARKUP.search(document):
        return soup.decode(formatter=_FORMATTER)
    parts: list[str] = []
    for name in ("head", "body"):
        section = soup.find(name)
        if section is not None:
            parts.append(section.decode_contents(formatter=_FORMATTER))
    return "".join(parts)


def _parse(document: str) -> BeautifulSoup:
    try:
        return BeautifulSoup(document, _PARSER)
    except ParserRejectedMarkup as exc:
        logger.warning("HTML parse failed", extra={"error": str(exc)})
        raise HtmlParseError(str(exc)) from exc


def _style_text(style: Tag) -> str | None:
    if len(style.contents) != 1:
        return None
    content = style.contents[0]
    if not isinstance(content, NavigableString):
        return None
    return str(content)


def _rewrite_class(tag: Tag, registry: NamespaceRegistry) -> int:
    """Replace registered class tokens of one element.

    Args:
        tag: Element to update.
        registry: Alias registry.

    Returns:
        Number of tokens replaced.
    """
    value = tag.get("class")
    if value is None:
        return 0
    tokens = value if isinstance(value, list) else str(value).split()
    replaced = 0
    updated: list[str] = []
    for token in tokens:
        alias = registry.lookup("class", token)
        if alias is None or alias == token:
            updated.append(token)
            continue
        updated.append(alias)
        replaced += 1
    if replaced:
        tag["class"] = updated
    return replaced


def _rewrite_id_reference(
    tag: Tag, attribute: str, registry: NamespaceRegistry
) -> int:
    value = tag.get(attribute)
    if not isinstance(value, str) or not value:
        return 0
    alias = registry.lookup("id", value)
    if alias is None or alias == value:
        return 0
    tag[attribute] = alias
    return 1


def _rewrite_fragment_link(tag: Tag, registry: NamespaceRegistry) -> int:
    value = tag.get("href")
    if not isinstance(value, str) or len(value) < 2 or not value.startswith("#"):
        return 0
    alias = registry.lookup("id", value[1:])
    if alias is None or alias == value[1:]:
        return 0
    tag["href"] = f"#{alias}"
    return 1
