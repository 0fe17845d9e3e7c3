# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Parse CSS fragments and walk identifier positions in component values."""

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Literal

import tinycss2
from tinycss2.ast import (
    CurlyBracketsBlock,
    FunctionBlock,
    HashToken,
    IdentToken,
    ParenthesesBlock,
    SquareBracketsBlock,
)

from cssshuffle.registry import Namespace

Resolver = Callable[[Namespace, str], str | None]

ItemKind = Literal["trivia", "rule", "at_rule", "declaration", "other"]

_TRIVIA_TYPES: frozenset[str] = frozenset({"whitespace", "comment"})
_SIMPLE_BLOCKS: dict[str, type] = {
    "() block": ParenthesesBlock,
    "[] block": SquareBracketsBlock,
    "{} block": CurlyBracketsBlock,
}
_WHITESPACE_SPLIT = re.compile(r"(\s+)")


class CssParseError(RuntimeError):
    """Represent a CSS fragment that cannot be parsed."""


@dataclass(frozen=True)
class BlockItem:
    """Represent one top-level item of a stylesheet or block body.

    Attributes:
        kind: Item category.
        tokens: Prelude tokens for rules, all tokens otherwise.
        block: Rule body, when the item has one.
    """

    kind: ItemKind
    tokens: list[Any]
    block: CurlyBracketsBlock | None = None


def parse_fragment(source: str) -> list[Any]:
    """Tokenize a CSS fragment into component values.

    Args:
        source: CSS text.

    Returns:
        Component values, comments and whitespace included.

    Raises:
        CssParseError: If the tokenizer reports a malformed construct.
    """
    nodes = tinycss2.parse_component_value_list(source, skip_comments=False)
    error = _find_parse_error(nodes)
    if error is not None:
        raise CssParseError(
            f"{error.message} (line={error.source_line} column={error.source_column})"
        )
    return nodes


def serialize(nodes: list[Any]) -> str:
    """Serialize component values back to CSS text."""
    return tinycss2.serialize(nodes)


def split_items(nodes: list[Any]) -> list[BlockItem]:
    """Split block contents into rules, declarations and statements.

    A run of tokens ending in a ``{}`` block is a rule (or block at-rule);
    a run ending in ``;`` or at the end of input is a declaration or
    statement. Custom property values may contain ``{}`` blocks and are
    always read up to the next ``;``.

    Args:
        nodes: Component values of a stylesheet or block body.

    Returns:
        Items in source order.
    """
    items: list[BlockItem] = []
    pending: list[Any] = []
    for node in nodes:
        if not pending and node.type in _TRIVIA_TYPES:
            items.append(BlockItem(kind="trivia", tokens=[node]))
            continue
        if node.type == "{} block" and not _starts_custom_property(pending):
            kind: ItemKind = "rule"
            if pending and pending[0].type == "at-keyword":
                kind = "at_rule"
            items.append(BlockItem(kind=kind, tokens=pending, block=node))
            pending = []
            continue
        pending.append(node)
        if node.type == "literal" and node.value == ";":
            items.append(_statement_item(pending))
            pending = []
    if pending:
        items.append(_statement_item(pending))
    return items


def declaration_colon(tokens: list[Any]) -> int | None:
    """Locate the colon of a ``name: value`` declaration.

    Args:
        tokens: Declaration tokens starting with the property name.

    Returns:
        Index of the colon, or ``None`` when tokens are not a declaration.
    """
    if not tokens or tokens[0].type != "ident":
        return None
    for position in range(1, len(tokens)):
        token = tokens[position]
        if token.type in _TRIVIA_TYPES:
            continue
        if token.type == "literal" and token.value == ":":
            return position
        return None
    return None


class IdentifierTransformer:
    """Replace identifier tokens of a CSS fragment through a resolver.

    The resolver receives ``(namespace, name)`` for every class, id and
    custom-property position in document order. Returning ``None`` keeps
    the original token. Input nodes are never mutated: changed tokens and
    their enclosing blocks are rebuilt.
    """

    def __init__(self, resolve: Resolver) -> None:
        """Initialize transformer state.

        Args:
            resolve: Callback mapping an identifier to its replacement.
        """
        self._resolve = resolve
        self.identifiers_renamed: int = 0

    def transform_contents(self, nodes: list[Any]) -> list[Any]:
        """Transform a stylesheet or block body.

        Args:
            nodes: Component values.

        Returns:
            New component values with identifiers replaced.
        """
        result: list[Any] = []
        for item in split_items(nodes):
            result.extend(self._transform_item(item))
        return result

    def _transform_item(self, item: BlockItem) -> list[Any]:
        if item.kind == "rule":
            return [
                *self._transform_selector(item.tokens),
                self._transform_block(item.block),
            ]
        if item.kind == "at_rule":
            return self._transform_at_rule(item)
        if item.kind == "declaration":
            return self._transform_declaration(item.tokens)
        return list(item.tokens)

    def _transform_block(self, block: CurlyBracketsBlock) -> CurlyBracketsBlock:
        return CurlyBracketsBlock(
            block.source_line,
            block.source_column,
            self.transform_contents(block.content),
        )

    def _transform_at_rule(self, item: BlockItem) -> list[Any]:
        keyword = item.tokens[0]
        prelude = item.tokens[1:]
        if keyword.lower_value == "apply":
            prelude = self._transform_apply(prelude)
        elif keyword.lower_value == "property":
            prelude = self._transform_property_name(prelude)
        elif keyword.lower_value == "scope":
            prelude = self._transform_selector(prelude)
        elif keyword.lower_value == "supports":
            prelude = self._transform_supports(prelude)
        result = [keyword, *prelude]
        if item.block is not None:
            result.append(self._transform_block(item.block))
        return result

    def _transform_selector(self, tokens: list[Any]) -> list[Any]:
        """Replace class and id components of a selector prelude.

        Args:
            tokens: Selector tokens.

        Returns:
            Tokens with class and id names replaced.
        """
        result: list[Any] = []
        previous: Any = None
        for token in tokens:
            replacement = token
            if (
                token.type == "ident"
                and previous is not None
                and previous.type == "literal"
                and previous.value == "."
            ):
                alias = self._rename("class", token.value)
                if alias is not None:
                    replacement = IdentToken(
                        token.source_line, token.source_column, alias
                    )
            elif token.type == "hash" and token.is_identifier:
                alias = self._rename("id", token.value)
                if alias is not None:
                    replacement = HashToken(
                        token.source_line, token.source_column, alias, True
                    )
            elif token.type == "function":
                replacement = FunctionBlock(
                    token.source_line,
                    token.source_column,
                    token.name,
                    self._transform_selector(token.arguments),
                )
            elif token.type == "() block":
                replacement = ParenthesesBlock(
                    token.source_line,
                    token.source_column,
                    self._transform_selector(token.content),
                )
            result.append(replacement)
            previous = token
        return result

    def _transform_supports(self, tokens: list[Any]) -> list[Any]:
        """Replace selectors inside ``selector()`` conditions of ``@supports``.

        Args:
            tokens: Condition tokens.

        Returns:
            Tokens with selector arguments transformed.
        """
        result: list[Any] = []
        for token in tokens:
            if token.type == "function":
                if token.lower_name == "selector":
                    arguments = self._transform_selector(token.arguments)
                else:
                    arguments = self._transform_supports(token.arguments)
                token = FunctionBlock(
                    token.source_line, token.source_column, token.name, arguments
                )
            elif token.type == "() block":
                token = ParenthesesBlock(
                    token.source_line,
                    token.source_column,
                    self._transform_supports(token.content),
                )
            result.append(token)
        return result

    def _transform_declaration(self, tokens: list[Any]) -> list[Any]:
        colon = declaration_colon(tokens)
        if colon is None:
            return list(tokens)
        result = list(tokens)
        name_token = tokens[0]
        if name_token.value.startswith("--"):
            result[0] = self._renamed_custom_property(name_token)
        result[colon + 1 :] = self._transform_values(tokens[colon + 1 :])
        return result

    def _transform_values(self, tokens: list[Any]) -> list[Any]:
        """Replace ``var()`` references inside declaration values.

        Args:
            tokens: Value tokens.

        Returns:
            Tokens with custom-property references replaced.
        """
        result: list[Any] = []
        for token in tokens:
            if token.type == "function":
                if token.lower_name == "var":
                    arguments = self._transform_var_arguments(token.arguments)
                else:
                    arguments = self._transform_values(token.arguments)
                token = FunctionBlock(
                    token.source_line, token.source_column, token.name, arguments
                )
            elif token.type in _SIMPLE_BLOCKS:
                token = _SIMPLE_BLOCKS[token.type](
                    token.source_line,
                    token.source_column,
                    self._transform_values(token.content),
                )
            result.append(token)
        return result

    def _transform_var_arguments(self, arguments: list[Any]) -> list[Any]:
        result = list(arguments)
        for position, argument in enumerate(arguments):
            if argument.type in _TRIVIA_TYPES:
                continue
            if argument.type == "ident" and argument.value.startswith("--"):
                result[position] = self._renamed_custom_property(argument)
            result[position + 1 :] = self._transform_values(arguments[position + 1 :])
            break
        return result

    def _transform_property_name(self, prelude: list[Any]) -> list[Any]:
        result = list(prelude)
        for position, token in enumerate(prelude):
            if token.type in _TRIVIA_TYPES:
                continue
            if token.type == "ident" and token.value.startswith("--"):
                result[position] = self._renamed_custom_property(token)
            break
        return result

    def _transform_apply(self, prelude: list[Any]) -> list[Any]:
        """Replace utility class names listed by an ``@apply`` statement.

        Variant prefixes such as ``hover:`` tokenize into several tokens,
        so names are matched on whitespace-separated words instead.

        Args:
            prelude: Tokens after the ``@apply`` keyword.

        Returns:
            Tokens with class names replaced.
        """
        terminator: list[Any] = []
        if prelude and prelude[-1].type == "literal" and prelude[-1].value == ";":
            terminator = [prelude[-1]]
            prelude = prelude[:-1]
        words = _WHITESPACE_SPLIT.split(serialize(prelude))
        changed = False
        for position, word in enumerate(words):
            if not word or word.isspace() or word.startswith("!"):
                continue
            alias = self._rename("class", word)
            if alias is not None:
                words[position] = alias
                changed = True
        if not changed:
            return [*prelude, *terminator]
        rebuilt = tinycss2.parse_component_value_list("".join(words))
        return [*rebuilt, *terminator]

    def _renamed_custom_property(self, token: IdentToken) -> IdentToken:
        alias = self._rename("custom_property", token.value[2:])
        if alias is None:
            return token
        return IdentToken(token.source_line, token.source_column, f"--{alias}")

    def _rename(self, namespace: Namespace, name: str) -> str | None:
        if not name:
            return None
        alias = self._resolve(namespace, name)
        if alias is None or alias == name:
            return None
        self.identifiers_renamed += 1
        return alias


def _statement_item(tokens: list[Any]) -> BlockItem:
    if tokens[0].type == "at-keyword":
        return BlockItem(kind="at_rule", tokens=tokens)
    if declaration_colon(tokens) is not None:
        return BlockItem(kind="declaration", tokens=tokens)
    return BlockItem(kind="other", tokens=tokens)


def _starts_custom_property(tokens: list[Any]) -> bool:
    if not tokens or tokens[0].type != "ident":
        return False
    return tokens[0].value.startswith("--")


def _find_parse_error(nodes: list[Any]) -> Any:
    for node in nodes:
        if node.type == "error":
            return node
        children = getattr(node, "content", None)
        if node.type == "function":
            children = node.arguments
        if isinstance(children, list):
            error = _find_parse_error(children)
            if error is not None:
                return error
    return None
