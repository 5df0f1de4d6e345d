import unittest

from filepreview.extractors.data_types import NodeKind
from filepreview.extractors.util.html_render import EMPTY_DOCUMENT_HTML
from filepreview.extractors.util.text_layout import (
    is_heading,
    is_list_item,
    raw_text_to_html,
    split_paragraphs,
    text_to_html,
    text_to_nodes,
)

tc = unittest.TestCase()


def test_heading_and_list_detection() -> None:
    tc.assertTrue(is_heading("OVERVIEW"))
    tc.assertTrue(is_heading("1. Introduction"))
    tc.assertFalse(is_heading("This is a regular sentence."))
    tc.assertFalse(is_heading(""))
    tc.assertTrue(is_list_item("- first item"))
    tc.assertTrue(is_list_item("2) second item"))
    tc.assertFalse(is_list_item("1.no space"))


def test_split_paragraphs() -> None:
    tc.assertEqual(["one", "two"], split_paragraphs("one\n\n  \ntwo"))
    tc.assertEqual(["one", "two"], split_paragraphs("one\ntwo"))
    tc.assertEqual(
        ["1. Apples are red", "2. Bananas are yellow"],
        split_paragraphs("1. Apples are red 2. Bananas are yellow"),
    )
    tc.assertEqual(
        ["one two", "three four", "five six"],
        split_paragraphs("one two three four five six"),
    )


def test_text_to_nodes() -> None:
    nodes = text_to_nodes("OVERVIEW\n\nThe report covers the year.\n\n- first point")

    tc.assertEqual(
        [NodeKind.HEADING, NodeKind.PARAGRAPH, NodeKind.LIST_ITEM],
        [node.kind for node in nodes],
    )
    tc.assertEqual([0, 1, 2], [node.block_index for node in nodes])
    tc.assertTrue(nodes[0].bold)


def test_text_to_html_renders_prose() -> None:
    html = text_to_html("OVERVIEW\n\nSome **important** <b>text</b>.\n\n- first point")

    tc.assertTrue(html.startswith('<div class="document">'))
    tc.assertIn('<h2 class="heading text-2xl" style="font-weight: bold">OVERVIEW</h2>', html)
    tc.assertIn("<strong>important</strong> &lt;b&gt;text&lt;/b&gt;.", html)
    tc.assertIn('<div class="list_item text-base">• first point</div>', html)


def test_text_to_html_renders_tables() -> None:
    html = text_to_html("水果清单\n序号  名称  数量\n1  苹果  10\n2  香蕉  20\n3  橙子  30")

    tc.assertIn('<h2 class="table-title">水果</h2>', html)
    tc.assertIn("<thead><tr><th>序号</th><th>名称</th><th>数量</th></tr></thead>", html)
    tc.assertEqual(3, html.count("<tr><td"))


def test_empty_text() -> None:
    tc.assertEqual(EMPTY_DOCUMENT_HTML, text_to_html(""))
    tc.assertEqual(EMPTY_DOCUMENT_HTML, text_to_html(" \n "))
    tc.assertEqual(EMPTY_DOCUMENT_HTML, raw_text_to_html(None))


def test_raw_text_keeps_lines() -> None:
    tc.assertEqual(
        '<div class="document"><p>first &amp; line</p><p>second</p></div>',
        raw_text_to_html("first & line\n\n  second  \n"),
    )
