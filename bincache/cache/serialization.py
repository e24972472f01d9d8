"""
bincache - Entry Serialization

JSON encoding shared by the file and redis backends.

Values are stored as compact UTF-8 JSON. ``bytes`` payloads, which JSON
cannot express, are wrapped as ``{"__bytes__": "<base64>"}`` and unwrapped on
the way back so opaque blobs round-trip unchanged.

Supported values are those that come back equal after encoding: ``None``,
``bool``, ``int``, finite ``float``, ``str``, ``bytes``, and lists and
string-keyed dicts of them. Tuples, non-string dict keys and NaN raise
``ValueError`` rather than being silently reshaped; other types such as sets
raise ``TypeError``.
"""

import base64
import json
from typing import Any

from .entry import CacheEntry

_BYTES_TAG = "__bytes__"


def _encode_default(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return {_BYTES_TAG: base64.b64encode(bytes(value)).decode("ascii")}
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _decode_hook(obj: dict[str, Any]) -> Any:
    if len(obj) == 1 and isinstance(obj.get(_BYTES_TAG), str):
        return base64.b64decode(obj[_BYTES_TAG], validate=True)
    return obj


def _decode(data: str | bytes) -> Any:
    try:
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        return json.loads(data, object_hook=_decode_hook)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Stored cache value is not valid JSON: {e}") from e


def dumps_value(data: Any) -> str:
    """
    Serialize a bare value, refusing anything that would not read back equal.

    Raises:
        TypeError: If the value contains a type JSON cannot express
        ValueError: If the value would change shape on the way back
    """
    payload = json.dumps(data, default=_encode_default, ensure_ascii=False, separators=(",", ":"))
    if _decode(payload) != data:
        raise ValueError(f"Value of type {type(data).__name__} does not survive a JSON round-trip")
    return payload


def dumps_entry(entry: CacheEntry) -> str:
    """
    Serialize an entry to a JSON string.

    Raises:
        TypeError / ValueError: If the payload is not a supported value
    """
    dumps_value(entry.data)
    return json.dumps(
        entry.to_record(),
        default=_encode_default,
        ensure_ascii=False,
        separators=(",", ":"),
    )


def loads_entry(data: Any) -> CacheEntry:
    """
    Deserialize an entry produced by ``dumps_entry``.

    Raises:
        ValueError: If the payload is not a valid entry record
    """
    record = _decode(data)
    if not isinstance(record, dict) or "cid" not in record or "expire" not in record:
        raise ValueError("Stored cache record is missing required fields")
    try:
        return CacheEntry.from_record(record)
    except (KeyError, TypeError) as e:
        raise ValueError(f"Malformed cache record: {e}") from e
