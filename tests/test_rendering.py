"""
Unit tests for the Markdown renderer.

Covers the per-kind formatting rules, the fallbacks for unknown and malformed
nodes, and the normalization of the final block.
"""

import unittest

from hypothesis import given, settings, strategies as st

from granola_sync.models import DocumentRecord, NodeKind, SourceDocument, SourceNode
from granola_sync.models.source_tree import flatten_raw_text
from granola_sync.rendering import normalize_block, render, render_node


def text(value):
    return {"type": "text", "text": value}


def paragraph(*children):
    return {"type": "paragraph", "content": list(children)}


def heading(value, level=1):
    return {"type": "heading", "attrs": {"level": level}, "content": [text(value)]}


def bullets(*items):
    return {
        "type": "bulletList",
        "content": [{"type": "listItem", "content": [paragraph(text(item))]} for item in items]
    }


def doc(*nodes):
    return {"type": "doc", "content": list(nodes)}


class TestRenderer(unittest.TestCase):
    """Test rendering of the supported node kinds."""

    def test_heading_paragraph_and_list(self):
        tree = doc(heading("Title", 1), paragraph(text("Hello")), bullets("A", "B"))
        self.assertEqual(render(tree), "# Title\n\nHello\n\n- A\n- B")

    def test_heading_levels(self):
        self.assertEqual(render(doc(heading("Deep", 3))), "### Deep")
        self.assertEqual(render(doc(heading("Zero", 0))), "# Zero")
        self.assertEqual(render(doc(heading("Negative", -2))), "# Negative")

    def test_heading_level_not_a_number(self):
        node = {"type": "heading", "attrs": {"level": "big"}, "content": [text("Odd")]}
        self.assertEqual(render(doc(node)), "# Odd")

    def test_heading_without_attrs(self):
        node = {"type": "heading", "content": [text("Plain")]}
        self.assertEqual(render(doc(node)), "# Plain")

    def test_paragraph_text_is_trimmed(self):
        self.assertEqual(render(doc(paragraph(text("  padded  ")))), "padded")

    def test_text_runs_are_concatenated(self):
        tree = doc(paragraph(text("Hello, "), text("world")))
        self.assertEqual(render(tree), "Hello, world")

    def test_empty_paragraphs_are_dropped(self):
        tree = doc(paragraph(text("One")), paragraph(), paragraph(text("   ")), paragraph(text("Two")))
        self.assertEqual(render(tree), "One\n\nTwo")

    def test_empty_bullet_items_are_dropped(self):
        tree = doc(bullets("A", "", "  ", "B"))
        self.assertEqual(render(tree), "- A\n- B")

    def test_bullet_list_with_only_empty_items(self):
        tree = doc(paragraph(text("Before")), bullets("", ""), paragraph(text("After")))
        self.assertEqual(render(tree), "Before\n\nAfter")

    def test_bullet_list_ignores_non_item_children(self):
        tree = doc({
            "type": "bulletList",
            "content": [paragraph(text("stray")), {"type": "listItem", "content": [paragraph(text("kept"))]}]
        })
        self.assertEqual(render(tree), "- kept")

    def test_nested_bullet_list_is_flattened_into_item(self):
        inner = bullets("child")
        tree = doc({
            "type": "bulletList",
            "content": [{"type": "listItem", "content": [paragraph(text("parent")), inner]}]
        })
        self.assertEqual(render(tree), "- parent\n\n- child")

    def test_node_with_children_ignores_own_text(self):
        node = {"type": "paragraph", "text": "ignored", "content": [text("used")]}
        self.assertEqual(render(doc(node)), "used")

    def test_node_without_children_uses_own_text(self):
        node = {"type": "paragraph", "text": "literal"}
        self.assertEqual(render(doc(node)), "literal")

    def test_blank_lines_are_collapsed(self):
        tree = doc(paragraph(text("a\n\n\n\nb")))
        self.assertEqual(render(tree), "a\n\nb")


class TestRendererFallbacks(unittest.TestCase):
    """Test that unknown or malformed input never raises."""

    def test_unknown_kind_renders_flattened_text(self):
        tree = doc({"type": "blockquote", "content": [text("quoted "), text("words")]})
        self.assertEqual(render(tree), "quoted words")

    def test_unknown_kind_with_nested_paragraphs(self):
        tree = doc({"type": "callout", "content": [paragraph(text("Inside"))]})
        self.assertEqual(render(tree), "Inside")

    def test_unknown_kind_without_content(self):
        self.assertEqual(render(doc({"type": "horizontalRule"})), "")

    def test_none_input(self):
        self.assertEqual(render(None), "")

    def test_non_doc_root(self):
        self.assertEqual(render({"type": "paragraph", "content": [text("x")]}), "")

    def test_doc_without_content(self):
        self.assertEqual(render({"type": "doc"}), "")

    def test_malformed_children_are_skipped(self):
        tree = {"type": "doc", "content": ["junk", 42, None, paragraph(text("ok"))]}
        self.assertEqual(render(tree), "ok")

    def test_non_string_text_is_ignored(self):
        tree = doc(paragraph({"type": "text", "text": 12}), paragraph(text("kept")))
        self.assertEqual(render(tree), "kept")

    def test_non_mapping_attrs(self):
        tree = doc({"type": "heading", "attrs": "level-2", "content": [text("H")]})
        self.assertEqual(render(tree), "# H")

    def test_content_not_a_list(self):
        tree = doc({"type": "paragraph", "content": "oops", "text": "fallback"})
        self.assertEqual(render(tree), "fallback")

    def test_accepts_validated_document(self):
        document = SourceDocument.model_validate(doc(paragraph(text("model"))))
        self.assertEqual(render(document), "model")


def nested_paragraphs(depth, leaf):
    node = leaf
    for _ in range(depth):
        node = paragraph(node)
    return node


class TestDeepTrees(unittest.TestCase):
    """Test trees nested deeper than the validator accepts."""

    def test_deep_tree_renders_flattened_text(self):
        tree = doc(nested_paragraphs(400, text("deep")))
        self.assertEqual(render(tree), "deep")

    def test_deep_tree_keeps_sibling_text(self):
        tree = doc(paragraph(text("before ")), nested_paragraphs(400, text("deep")), paragraph(text(" after")))
        self.assertEqual(render(tree), "before deep after")

    def test_deep_tree_inside_document_record(self):
        record = DocumentRecord.model_validate({
            "id": "deep-doc",
            "title": "Deep",
            "last_viewed_panel": {"content": doc(nested_paragraphs(400, text("deep")))}
        })
        self.assertTrue(record.has_note)
        self.assertEqual(render(record.tree), "deep")

    def test_flatten_raw_text_handles_any_depth(self):
        tree = doc(paragraph(text("a")), nested_paragraphs(5000, text("b")), {"type": "text", "text": "c"})
        self.assertEqual(flatten_raw_text(tree), "abc")

    def test_flatten_raw_text_matches_leaf_rules(self):
        tree = doc({"type": "paragraph", "content": "oops", "text": "fallback"}, {"type": "x", "content": []})
        self.assertEqual(flatten_raw_text(tree), "fallback")

    def test_render_node_does_not_recurse(self):
        node = SourceNode.model_construct(type="text", text="leaf")
        for _ in range(3000):
            node = SourceNode.model_construct(type="paragraph", content=[node])
        self.assertEqual(render_node(node), "leaf\n\n")


class TestNodeKinds(unittest.TestCase):
    """Test the node kind vocabulary."""

    def test_known_kinds(self):
        self.assertIs(NodeKind.parse("bulletList"), NodeKind.BULLET_LIST)
        self.assertIs(NodeKind.parse("listItem"), NodeKind.LIST_ITEM)

    def test_unrecognized_kinds(self):
        self.assertIs(NodeKind.parse("table"), NodeKind.UNKNOWN)
        self.assertIs(NodeKind.parse(None), NodeKind.UNKNOWN)

    def test_render_node_returns_unnormalized_fragment(self):
        node = SourceNode.model_validate(heading("Title", 2))
        self.assertEqual(render_node(node), "## Title\n\n")

    def test_normalize_block(self):
        self.assertEqual(normalize_block("\n\nA\n\n\n\nB\n\n"), "A\n\nB")


node_text = st.text(alphabet="ab #-\n", max_size=8)

leaf_nodes = st.builds(text, node_text)

tree_nodes = st.recursive(
    leaf_nodes,
    lambda children: st.one_of(
        st.builds(lambda c: {"type": "paragraph", "content": c}, st.lists(children, max_size=3)),
        st.builds(
            lambda c, level: {"type": "heading", "attrs": {"level": level}, "content": c},
            st.lists(children, max_size=2),
            st.integers(min_value=-1, max_value=7)
        ),
        st.builds(
            lambda items: {"type": "bulletList", "content": [{"type": "listItem", "content": i} for i in items]},
            st.lists(st.lists(children, max_size=2), max_size=3)
        ),
        st.builds(lambda c: {"type": "mystery", "content": c}, st.lists(children, max_size=3)),
    ),
    max_leaves=12
)


@settings(max_examples=200)
@given(st.lists(tree_nodes, max_size=5))
def test_rendering_is_deterministic_and_normalized(nodes):
    tree = doc(*nodes)
    first = render(tree)

    assert render(tree) == first
    assert "\n\n\n" not in first
    assert first == first.strip()
