import base64
import io
import typing
from dataclasses import fields, is_dataclass
from enum import Enum

from filepreview.extractors.data_types import MediaAsset


def _bytes_to_base64(data: bytes | bytearray) -> str:
    return base64.b64encode(bytes(data)).decode("utf-8")


def _bytesio_to_base64(buffer: io.BytesIO) -> str:
    position = buffer.tell()
    buffer.seek(0)
    encoded = base64.b64encode(buffer.read()).decode("utf-8")
    buffer.seek(position)
    return encoded


def to_camel_case(name: str) -> str:
    head, *tail = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in tail)


def _serialize_for_json(value: typing.Any, include_binary: bool) -> typing.Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, io.BytesIO):
        return _bytesio_to_base64(value)
    if isinstance(value, (bytes, bytearray)):
        return _bytes_to_base64(value)
    if is_dataclass(value) and not isinstance(value, type):
        result = {}
        for item in fields(value):
            if item.metadata.get("binary") and not include_binary:
                continue
            result[to_camel_case(item.name)] = _serialize_for_json(
                getattr(value, item.name), include_binary
            )
        if isinstance(value, MediaAsset) and include_binary:
            result["src"] = value.src
        return result
    if isinstance(value, dict):
        return {
            str(key.value if isinstance(key, Enum) else key): _serialize_for_json(
                val, include_binary
            )
            for key, val in value.items()
        }
    if isinstance(value, (list, tuple, set)):
        return [_serialize_for_json(item, include_binary) for item in value]
    return value


def serialize_preview(value: typing.Any, include_binary: bool = False) -> dict:
    """
    JSON-ready dict of a preview result.

    Field names become camelCase and enums become their values. Binary
    payloads (image bytes and their base64 text) are left out unless
    ``include_binary`` is set.
    """
    serialized = _serialize_for_json(value, include_binary)
    if isinstance(serialized, dict):
        return serialized
    return {"value": serialized}
