import logging
import struct
import unittest

from filepreview.extractors.data_types import (
    AssetPosition,
    CsvPreview,
    ExcelPreview,
    SheetInfo,
    XmlPreview,
)
from filepreview.extractors.serialization import serialize_preview, to_camel_case
from filepreview.extractors.util.media import build_asset

logger = logging.getLogger(__name__)

tc = unittest.TestCase()
tc.maxDiff = None

PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n"
    + b"\x00\x00\x00\rIHDR"
    + struct.pack(">II", 2, 3)
    + b"\x08\x02\x00\x00\x00"
)


def _excel_preview() -> ExcelPreview:
    asset = build_asset("xl/media/image1.png", PNG_BYTES)
    asset.position = AssetPosition(row=1, col=2)
    return ExcelPreview(
        sheets={"Sheet1": [["Name", "Qty"], ["Apple", 3]]},
        sheet_names=["Sheet1"],
        sheet_info={"Sheet1": SheetInfo(max_row=2, max_col=2, data_length=2, image_count=1)},
        images={"Sheet1": [asset]},
    )


def test_to_camel_case() -> None:
    tc.assertEqual("maxRow", to_camel_case("max_row"))
    tc.assertEqual("type", to_camel_case("type"))
    tc.assertEqual("pixelWidth", to_camel_case("pixel_width"))


def test_excel_preview_without_binary() -> None:
    payload = serialize_preview(_excel_preview())

    tc.assertEqual("excel", payload["type"])
    tc.assertEqual("application/json", payload["contentType"])
    tc.assertEqual(["Sheet1"], payload["sheetNames"])
    tc.assertEqual(
        {"maxRow": 2, "maxCol": 2, "dataLength": 2, "imageCount": 1},
        payload["sheetInfo"]["Sheet1"],
    )
    image = payload["images"]["Sheet1"][0]
    tc.assertEqual("png", image["format"])
    tc.assertEqual({"row": 1, "col": 2, "width": 2, "height": 1}, image["position"])
    tc.assertEqual("image1.png", image["name"])
    tc.assertEqual(2, image["pixelWidth"])
    tc.assertEqual(3, image["pixelHeight"])
    tc.assertNotIn("data", image)
    tc.assertNotIn("base64", image)
    tc.assertNotIn("src", image)


def test_excel_preview_with_binary() -> None:
    preview = _excel_preview()
    payload = preview.to_dict(include_binary=True)

    image = payload["images"]["Sheet1"][0]
    asset = preview.images["Sheet1"][0]
    tc.assertEqual(asset.base64, image["base64"])
    tc.assertEqual(asset.base64, image["data"])
    tc.assertEqual(f"data:image/png;base64,{asset.base64}", image["src"])


def test_csv_and_xml_previews() -> None:
    csv_payload = serialize_preview(
        CsvPreview(data=[["a", "b"]], max_rows=1, max_cols=2, encoding="gbk")
    )
    xml_payload = serialize_preview(XmlPreview(content='{"root": "x"}', raw_content="<root>x</root>"))

    tc.assertEqual(
        {
            "type": "csv",
            "contentType": "application/json",
            "data": [["a", "b"]],
            "maxRows": 1,
            "maxCols": 2,
            "encoding": "gbk",
        },
        csv_payload,
    )
    tc.assertEqual("<root>x</root>", xml_payload["rawContent"])


def test_non_dataclass_values_are_wrapped() -> None:
    tc.assertEqual({"value": [1, 2]}, serialize_preview((1, 2)))
    tc.assertEqual({"value": "AAE="}, serialize_preview(b"\x00\x01"))
