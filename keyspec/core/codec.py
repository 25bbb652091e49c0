"""
Tagged-record binary encoding.

Records are frozen dataclasses that declare a ``FIELDS`` schema: a tuple of
``(field_number, attribute, kind)`` entries. ``kind`` is one of ``UINT32``,
``STRING``, ``BYTES``, an ``IntEnum`` subclass, or another record class.

The byte layout is the Protocol Buffers (proto3) wire format, so encoded
key formats are interchangeable with existing Tink keysets:

  tag:     varint  (field_number << 3) | wire_type, field_number 1..2**29-1
  varint:  little-endian base-128, at most 10 bytes (uint64)
  LEN:     varint length followed by that many bytes

  wire type 0 (varint)  -> UINT32, enum
  wire type 2 (LEN)     -> STRING, BYTES, nested record

Fields are written in ascending field-number order. Zero integers and empty
strings are omitted; nested records are always written, even when empty.
UINT32 values must be below 2**32 on both encode and decode. A nested
record that appears more than once is merged field by field, later
occurrences overriding the fields they carry.
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Iterator

from .errors import DecodeError, EncodeError

logger = logging.getLogger(__name__)

UINT32 = "uint32"
STRING = "string"
BYTES = "bytes"

WIRE_VARINT = 0
WIRE_FIXED64 = 1
WIRE_LEN = 2
WIRE_FIXED32 = 5

MAX_VARINT_SIZE = 10
MAX_FIELD_NUMBER = (1 << 29) - 1
_UINT32_LIMIT = 1 << 32
_UINT64_LIMIT = 1 << 64


def _is_record(kind: Any) -> bool:
    return isinstance(kind, type) and hasattr(kind, "FIELDS")


def _is_enum(kind: Any) -> bool:
    return isinstance(kind, type) and issubclass(kind, enum.IntEnum)


def _wire_type(kind: Any) -> int:
    if kind == UINT32 or _is_enum(kind):
        return WIRE_VARINT
    return WIRE_LEN


# ---------------------------------------------------------------------------
# Varints
# ---------------------------------------------------------------------------

def encode_varint(value: int) -> bytes:
    """Encode a non-negative integer below 2**64 as a base-128 varint."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise EncodeError(f"Expected an integer, got {type(value).__name__}")
    if value < 0:
        raise EncodeError(f"Cannot encode negative integer {value}")
    if value >= _UINT64_LIMIT:
        raise EncodeError(f"Integer {value} does not fit in 64 bits")

    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def decode_varint(data: bytes, pos: int) -> tuple[int, int]:
    """Read a varint at ``pos``. Returns (value, new_position)."""
    result = 0
    shift = 0
    for i in range(MAX_VARINT_SIZE):
        if pos + i >= len(data):
            raise DecodeError(f"Truncated varint at offset {pos}")
        byte = data[pos + i]
        result |= (byte & 0x7F) << shift
        if not byte & 0x80:
            if result >= _UINT64_LIMIT:
                raise DecodeError(f"Varint at offset {pos} overflows 64 bits")
            return result, pos + i + 1
        shift += 7
    raise DecodeError(f"Varint at offset {pos} longer than {MAX_VARINT_SIZE} bytes")


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------

def _encode_field(number: int, kind: Any, value: Any) -> bytes:
    if kind == UINT32 or _is_enum(kind):
        if isinstance(value, bool) or not isinstance(value, int):
            raise EncodeError(
                f"Field {number}: expected an integer, got {type(value).__name__}"
            )
        if kind == UINT32 and value >= _UINT32_LIMIT:
            raise EncodeError(f"Field {number}: {value} does not fit in uint32")
        if value == 0:
            return b""
        return encode_varint((number << 3) | WIRE_VARINT) + encode_varint(int(value))

    if kind == STRING:
        if not isinstance(value, str):
            raise EncodeError(f"Field {number}: expected str, got {type(value).__name__}")
        payload = value.encode("utf-8")
    elif kind == BYTES:
        if not isinstance(value, (bytes, bytearray)):
            raise EncodeError(f"Field {number}: expected bytes, got {type(value).__name__}")
        payload = bytes(value)
    elif _is_record(kind):
        if not isinstance(value, kind):
            raise EncodeError(
                f"Field {number}: expected {kind.__name__}, got {type(value).__name__}"
            )
        return (encode_varint((number << 3) | WIRE_LEN)
                + _length_prefixed(encode(value)))
    else:
        raise EncodeError(f"Field {number}: unsupported field kind {kind!r}")

    if not payload:
        return b""
    return encode_varint((number << 3) | WIRE_LEN) + _length_prefixed(payload)


def _length_prefixed(payload: bytes) -> bytes:
    return encode_varint(len(payload)) + payload


def encode(record: Any) -> bytes:
    """Serialize a record to its canonical bytes.

    Same record always yields the same bytes. Raises EncodeError when a
    field value cannot be represented (negative integer, uint32 overflow,
    wrong Python type).
    """
    fields = getattr(type(record), "FIELDS", None)
    if fields is None:
        raise EncodeError(f"{type(record).__name__} has no field schema")

    out = bytearray()
    for number, attr, kind in sorted(fields, key=lambda f: f[0]):
        out += _encode_field(number, kind, getattr(record, attr))
    return bytes(out)


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def _iter_fields(data: bytes) -> Iterator[tuple[int, int, Any]]:
    """Yield (field_number, wire_type, raw_value) for every field in ``data``."""
    pos = 0
    end = len(data)
    while pos < end:
        tag, pos = decode_varint(data, pos)
        number, wire_type = tag >> 3, tag & 0x07
        if number == 0:
            raise DecodeError("Field number 0 is not allowed")
        if number > MAX_FIELD_NUMBER:
            raise DecodeError(
                f"Field number {number} exceeds maximum {MAX_FIELD_NUMBER}"
            )

        if wire_type == WIRE_VARINT:
            value, pos = decode_varint(data, pos)
        elif wire_type == WIRE_LEN:
            length, pos = decode_varint(data, pos)
            if pos + length > end:
                raise DecodeError(
                    f"Field {number}: length {length} runs past end of data"
                )
            value = data[pos:pos + length]
            pos += length
        elif wire_type in (WIRE_FIXED64, WIRE_FIXED32):
            size = 8 if wire_type == WIRE_FIXED64 else 4
            if pos + size > end:
                raise DecodeError(f"Field {number}: truncated fixed-width value")
            value = data[pos:pos + size]
            pos += size
        else:
            raise DecodeError(f"Field {number}: unsupported wire type {wire_type}")

        yield number, wire_type, value


def _convert(number: int, kind: Any, wire_type: int, raw: Any, current: Any) -> Any:
    if wire_type != _wire_type(kind):
        raise DecodeError(
            f"Field {number}: wire type {wire_type} does not match schema"
        )
    if kind == UINT32:
        if raw >= _UINT32_LIMIT:
            raise DecodeError(f"Field {number}: {raw} does not fit in uint32")
        return raw
    if _is_enum(kind):
        try:
            return kind(raw)
        except ValueError:
            # Unrecognised enum numbers are preserved as plain ints.
            return raw
    if kind == STRING:
        try:
            return bytes(raw).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(f"Field {number}: invalid UTF-8") from exc
    if kind == BYTES:
        return bytes(raw)
    return _decode_into(bytes(raw), kind, current)


def default_value(kind: Any) -> Any:
    """Value a field takes when it is absent from the encoded bytes."""
    if kind == UINT32:
        return 0
    if _is_enum(kind):
        return kind(0)
    if kind == STRING:
        return ""
    if kind == BYTES:
        return b""
    return kind(**{attr: default_value(k) for _, attr, k in kind.FIELDS})


def _decode_into(data: bytes, record_cls: type, base: Any) -> Any:
    by_number = {number: (attr, kind) for number, attr, kind in record_cls.FIELDS}
    values = {attr: getattr(base, attr) for _, attr, _ in record_cls.FIELDS}

    for number, wire_type, raw in _iter_fields(data):
        if number not in by_number:
            logger.debug("%s: skipping unknown field %d", record_cls.__name__, number)
            continue
        attr, kind = by_number[number]
        values[attr] = _convert(number, kind, wire_type, raw, values[attr])

    return record_cls(**values)


def decode(data: bytes, record_cls: type) -> Any:
    """Parse bytes produced by :func:`encode` back into ``record_cls``.

    Fields not in the schema are skipped. A repeated scalar field keeps its
    last value; a repeated nested record is merged into the earlier one.
    Raises DecodeError on malformed input.
    """
    return _decode_into(bytes(data), record_cls, default_value(record_cls))
