import unittest

from filepreview.extractors.data_types import Alignment
from filepreview.extractors.util import table_heuristics as th

tc = unittest.TestCase()

FRUIT_TABLE = "\n".join(
    [
        "水果清单",
        "序号  名称  数量",
        "1  苹果  10",
        "2  香蕉  20",
        "3  橙子  30",
    ]
)


def test_single_line_detection() -> None:
    tc.assertTrue(th.is_single_line_table("1.苹果 2.香蕉 报检单号 123"))
    # no keyword
    tc.assertFalse(th.is_single_line_table("1.apples 2.bananas"))
    # a single marker
    tc.assertFalse(th.is_single_line_table("1.苹果 数量"))


def test_multi_line_detection() -> None:
    tc.assertTrue(th.is_table_data(FRUIT_TABLE))
    tc.assertFalse(th.is_table_data("This is a sentence.\nAnother line here.\nAnd a third."))
    tc.assertFalse(th.is_table_data("a  b  c\nd  e  f"))


def test_infer_numbered_table() -> None:
    structure = th.infer(FRUIT_TABLE)

    tc.assertIsNotNone(structure)
    tc.assertFalse(structure.single_line)
    tc.assertEqual("水果", structure.title)
    tc.assertEqual(["序号", "名称", "数量"], structure.headers)
    tc.assertEqual(3, len(structure.rows))
    for row in structure.rows:
        tc.assertEqual(structure.headers, list(row))
    # the leading number is removed before the cells are zipped to the headers
    tc.assertEqual({"序号": "苹果", "名称": "10", "数量": ""}, structure.rows[0])
    tc.assertEqual(
        {"序号": Alignment.CENTER, "名称": Alignment.LEFT, "数量": Alignment.CENTER},
        structure.alignments,
    )


def test_infer_header_on_first_line() -> None:
    structure = th.infer("名称  规格  数量\n苹果  大  10\n香蕉  小  20")

    tc.assertIsNone(structure.title)
    tc.assertEqual(["名称", "规格", "数量"], structure.headers)
    tc.assertEqual(
        [
            {"名称": "苹果", "规格": "大", "数量": "10"},
            {"名称": "香蕉", "规格": "小", "数量": "20"},
        ],
        structure.rows,
    )
    tc.assertEqual(
        [["名称", "规格", "数量"], ["苹果", "大", "10"], ["香蕉", "小", "20"]],
        structure.get_table(),
    )


def test_infer_single_line_inspection_table() -> None:
    text = (
        "序号 品名 原产地/地区 规格 报检数/重量 生产日期 保质期 "
        "1 苹果  中国  大 2 香蕉  菲律宾  小"
    )

    structure = th.infer(text)

    tc.assertTrue(structure.single_line)
    tc.assertEqual(list(th.INSPECTION_HEADERS), structure.headers)
    tc.assertEqual(2, len(structure.rows))
    tc.assertEqual("1", structure.rows[0]["序号"])
    tc.assertEqual("苹果", structure.rows[0]["品名"])
    tc.assertEqual("中国", structure.rows[0]["原产地/地区"])
    tc.assertEqual("大", structure.rows[0]["规格"])
    tc.assertEqual("", structure.rows[0]["保质期"])
    tc.assertEqual("菲律宾", structure.rows[1]["原产地/地区"])


def test_infer_returns_none_for_prose() -> None:
    tc.assertIsNone(th.infer(""))
    tc.assertIsNone(th.infer("   \n "))
    tc.assertIsNone(th.infer("Just one ordinary sentence."))


def test_duplicate_headers_get_suffix() -> None:
    tc.assertEqual(["名称", "名称_2", "数量"], th.headers_from_line("名称  名称  数量"))


def test_duplicate_header_suffix_skips_labels_in_use() -> None:
    structure = th.infer("报告标题\nx_3  x  x\n1  a  b\n2  c  d")

    tc.assertEqual(["x_3", "x", "x_4"], structure.headers)
    tc.assertEqual({"x_3": "a", "x": "b", "x_4": ""}, structure.rows[0])
    tc.assertEqual({"x_3": "c", "x": "d", "x_4": ""}, structure.rows[1])
    for row in structure.rows:
        tc.assertEqual(structure.headers, list(row))


def test_duplicate_header_suffix_skips_later_labels() -> None:
    tc.assertEqual(
        ["名称", "名称_3", "名称_2"], th.headers_from_line("名称  名称  名称_2")
    )


def test_header_by_position() -> None:
    long_label = "a" * 11
    tc.assertEqual("short", th.header_by_position(" short ", 2, 4))
    tc.assertEqual("序号", th.header_by_position(long_label, 0, 4))
    tc.assertEqual("名称", th.header_by_position(long_label, 1, 4))
    tc.assertEqual("列3", th.header_by_position(long_label, 2, 4))
    tc.assertEqual("备注", th.header_by_position("", 3, 4))


def test_split_table_row() -> None:
    tc.assertEqual(["a b", "c"], th.split_table_row("a b   c"))
    tc.assertEqual(["a", "b", "c"], th.split_table_row("a\tb\tc"))
    tc.assertEqual(["ab cd efg", "hi"], th.split_table_row("ab cd efg hi"))


def test_most_common_prefers_first_to_reach_top_count() -> None:
    tc.assertEqual(3, th.most_common([3, 1, 3, 1]))
    tc.assertEqual(1, th.most_common([1, 3, 1, 3]))
    tc.assertIsNone(th.most_common([]))


def test_document_title() -> None:
    tc.assertEqual("入境货物", th.extract_document_title("入境货物报检单号 2024001"))
    tc.assertEqual("月度", th.extract_document_title("月度报表"))
    tc.assertEqual("Untitled", th.extract_document_title(" Untitled "))
