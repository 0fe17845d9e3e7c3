# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for HTML document rewriting."""

from collections.abc import Callable

from cssshuffle import NamespaceRegistry, iter_style_blocks, rewrite_html

RegistryFactory = Callable[..., NamespaceRegistry]


def test_shf_501_html_rewriter_uses_separate_class_and_id_namespaces(
    frozen_registry: RegistryFactory,
) -> None:
    registry = frozen_registry(("class", "foo"), ("id", "bar"))
    document = '<div class="foo bar" id="bar"><a href="#bar">x</a></div>'

    result = rewrite_html(document, registry)

    assert result.transformed_source == (
        '<div class="a bar" id="b"><a href="#b">x</a></div>'
    )
    assert result.identifiers_renamed == 3


def test_shf_502_html_rewriter_matches_whole_class_tokens_only(
    frozen_registry: RegistryFactory,
) -> None:
    registry = frozen_registry(("class", "foo"))

    result = rewrite_html('<p class="foobar foo">t</p>', registry)

    assert result.transformed_source == '<p class="foobar a">t</p>'


def test_shf_503_html_rewriter_normalizes_class_whitespace_when_renaming(
    frozen_registry: RegistryFactory,
) -> None:
    registry = frozen_registry(("class", "foo"))

    result = rewrite_html('<p class="  foo   bar ">t</p>', registry)

    assert result.transformed_source == '<p class="a bar">t</p>'


def test_shf_504_html_rewriter_renames_label_targets(
    frozen_registry: RegistryFactory,
) -> None:
    registry = frozen_registry(("id", "email"))
    document = '<label for="email">E</label><input id="email" type="text">'

    result = rewrite_html(document, registry)

    assert 'for="a"' in result.transformed_source
    assert 'id="a"' in result.transformed_source
    assert "email" not in result.transformed_source


def test_shf_505_html_rewriter_delegates_inline_styles(
    frozen_registry: RegistryFactory,
) -> None:
    registry = frozen_registry(("class", "foo"), ("class", "bar"))
    document = (
        "<html><head><style>.foo > .bar{color:red}</style></head>"
        '<body class="foo"></body></html>'
    )

    result = rewrite_html(document, registry)

    assert "<style>.a > .b{color:red}</style>" in result.transformed_source
    assert '<body class="a">' in result.transformed_source
    assert result.fragment_errors == ()


def test_shf_506_html_rewriter_leaves_scripts_text_and_other_attributes(
    frozen_registry: RegistryFactory,
) -> None:
    registry = frozen_registry(("class", "foo"), ("id", "bar"))
    document = (
        '<div data-foo="foo" aria-labelledby="bar" class="foo">foo bar</div>'
        '<a href="/page#bar">go</a>'
        '<script>document.getElementById("bar").classList.add("foo")</script>'
    )

    result = rewrite_html(document, registry)

    assert result.transformed_source == (
        '<div data-foo="foo" aria-labelledby="bar" class="a">foo bar</div>'
        '<a href="/page#bar">go</a>'
        '<script>document.getElementById("bar").classList.add("foo")</script>'
    )


def test_shf_507_html_rewriter_returns_document_unchanged_without_matches(
    frozen_registry: RegistryFactory,
) -> None:
    registry = frozen_registry(("class", "other"))
    document = "<!doctype html>\n<DIV  CLASS='x'  id=y><br></DIV>\n"

    result = rewrite_html(document, registry)

    assert result.transformed_source == document
    assert result.identifiers_renamed == 0


def test_shf_508_html_rewriter_reports_broken_style_block_and_continues(
    frozen_registry: RegistryFactory,
) -> None:
    registry = frozen_registry(("class", "foo"))
    document = '<style>.foo{content:"oops\n}</style><p class="foo">t</p>'

    result = rewrite_html(document, registry)

    assert len(result.fragment_errors) == 1
    assert '<p class="a">t</p>' in result.transformed_source
    assert '.foo{content:"oops' in result.transformed_source


def test_shf_509_html_rewriter_keeps_unknown_fragments_and_bare_hash(
    frozen_registry: RegistryFactory,
) -> None:
    registry = frozen_registry(("id", "top"))
    document = '<a href="#">a</a><a href="#missing">b</a><a href="#top">c</a>'

    result = rewrite_html(document, registry)

    assert result.transformed_source == (
        '<a href="#">a</a><a href="#missing">b</a><a href="#a">c</a>'
    )


def test_shf_510_iter_style_blocks_returns_non_empty_blocks_in_order() -> None:
    document = "<style>.a{}</style><div><style></style><style>#b{}</style></div>"

    assert iter_style_blocks(document) == [".a{}", "#b{}"]


def test_shf_511_html_rewriter_keeps_structure_with_implied_end_tags(
    frozen_registry: RegistryFactory,
) -> None:
    registry = frozen_registry(("class", "foo"))
    document = '<ul><li class="foo">a<li>b</ul><p>one<p>two'

    result = rewrite_html(document, registry)

    assert result.transformed_source == (
        '<ul><li class="a">a</li><li>b</li></ul><p>one</p><p>two</p>'
    )


def test_shf_512_html_rewriter_keeps_attribute_order_in_full_documents(
    frozen_registry: RegistryFactory,
) -> None:
    registry = frozen_registry(("id", "main"))
    document = (
        '<html lang="en"><body><main role="main" id="main" class="z">'
        "x</main></body></html>"
    )

    result = rewrite_html(document, registry)

    assert '<main role="main" id="a" class="z">' in result.transformed_source
    assert '<html lang="en">' in result.transformed_source
