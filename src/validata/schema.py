"""Record schemas: declaring, describing and building records.

A record is a dataclass whose fields are declared with ``rule_field``:

    @dataclass
    class SignUp:
        email: str = rule_field("email", "required|email")
        age: int = rule_field("age", "required|min:18", default=0)

``describe_record`` resolves a record class into an immutable
``RecordSchema`` once per class and rejects classes that are not valid
schemas. ``record_from_dict`` builds a record from a wire-named payload.
"""

import base64
import binascii
import collections.abc
import dataclasses
import logging
import re
import types
import typing
from functools import lru_cache
from typing import Any

from validata.errors import NotARecordError, SchemaError
from validata.rules.parser import parse_rules
from validata.types import (
    Attachment,
    FieldSchema,
    FieldType,
    RecordSchema,
    UInt,
    ValueKind,
)


logger = logging.getLogger(__name__)

WIRE_NAME_KEY = "json"
RULES_KEY = "validate"
LABEL_KEY = "label"

_SEQUENCE_ORIGINS = (list, tuple, collections.abc.Sequence, collections.abc.MutableSequence)
_MAPPING_ORIGINS = (dict, collections.abc.Mapping, collections.abc.MutableMapping)


# =============================================================================
# Declaration
# =============================================================================


def rule_field(json: str, rules: str, *, label: str | None = None, **kwargs: Any) -> Any:
    """Declare a record field with its wire name and rule chain.

    Args:
        json: External name, used as the payload key and the result key
        rules: Pipe-separated rule chain (may be empty)
        label: Display name for messages (derived from ``json`` if omitted)
        **kwargs: Passed through to ``dataclasses.field`` (default, etc.)
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[WIRE_NAME_KEY] = json
    metadata[RULES_KEY] = rules
    if label is not None:
        metadata[LABEL_KEY] = label
    return dataclasses.field(metadata=metadata, **kwargs)


def display_name(wire_name: str) -> str:
    """Turn a wire name into words: ``passwordConfirm`` -> ``password confirm``."""
    spaced = re.sub(r"(?<=[a-z0-9])([A-Z])", r" \1", wire_name)
    spaced = re.sub(r"[_\-.]+", " ", spaced)
    return " ".join(spaced.split()).lower()


def snake_case(name: str) -> str:
    """Convert a camelCase name to snake_case (column names)."""
    result = []
    for i, char in enumerate(name):
        if char.isupper() and i > 0 and name[i - 1] != "_":
            result.append("_")
        result.append(char.lower())
    return "".join(result)


# =============================================================================
# Description
# =============================================================================


def is_record(value: Any) -> bool:
    """True for dataclass instances (not the classes themselves)."""
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


@lru_cache(maxsize=256)
def describe_record(record_type: type, strict: bool = False) -> RecordSchema:
    """Resolve a record class into its schema.

    Args:
        record_type: A dataclass
        strict: Parse rule chains strictly

    Returns:
        The record schema, fields in declaration order

    Raises:
        NotARecordError: If record_type is not a dataclass
        SchemaError: If a field lacks a wire name or rule chain, or has an
            unsupported annotation
    """
    if not (isinstance(record_type, type) and dataclasses.is_dataclass(record_type)):
        raise NotARecordError(f"validate: a dataclass record is expected, got {record_type!r}")

    try:
        hints = typing.get_type_hints(record_type)
    except NameError as exc:
        raise SchemaError(f"cannot resolve annotations ({exc})", record_type) from exc

    fields = []
    for dc_field in dataclasses.fields(record_type):
        metadata = dc_field.metadata
        if WIRE_NAME_KEY not in metadata or RULES_KEY not in metadata:
            raise SchemaError("json or validate tag missing", record_type, dc_field.name)

        wire_name = metadata[WIRE_NAME_KEY]
        field_type = classify(hints[dc_field.name], record_type, dc_field.name)
        fields.append(
            FieldSchema(
                attribute=dc_field.name,
                wire_name=wire_name,
                display_name=metadata.get(LABEL_KEY) or display_name(wire_name),
                rules=parse_rules(metadata[RULES_KEY], strict),
                type=field_type,
            )
        )

    return RecordSchema(record_type=record_type, fields=tuple(fields))


def classify(hint: Any, record_type: type | None = None, field_name: str | None = None) -> FieldType:
    """Map a type annotation onto the closed set of value kinds."""
    origin = typing.get_origin(hint)
    args = typing.get_args(hint)

    if origin in (typing.Union, types.UnionType):
        members = [arg for arg in args if arg is not type(None)]
        if len(members) != 1 or len(members) == len(args):
            raise SchemaError(f"unsupported union annotation {hint!r}", record_type, field_name)
        return dataclasses.replace(classify(members[0], record_type, field_name), optional=True)

    if hint is UInt:
        return FieldType(ValueKind.UINT)
    if hint is bool:
        return FieldType(ValueKind.BOOL)
    if hint is str:
        return FieldType(ValueKind.TEXT)
    if hint is int:
        return FieldType(ValueKind.INT)
    if hint is float:
        return FieldType(ValueKind.FLOAT)
    if hint is Attachment:
        return FieldType(ValueKind.ATTACHMENT)

    if origin in _SEQUENCE_ORIGINS:
        if not args or (origin is tuple and (len(args) != 2 or args[1] is not Ellipsis)):
            raise SchemaError(f"sequence annotation {hint!r} needs one element type", record_type, field_name)
        element = classify(args[0], record_type, field_name)
        if element.kind in (ValueKind.SEQUENCE, ValueKind.MAPPING):
            raise SchemaError(f"nested collections are not supported ({hint!r})", record_type, field_name)
        return FieldType(ValueKind.SEQUENCE, element=element)

    if origin in _MAPPING_ORIGINS:
        return FieldType(ValueKind.MAPPING)

    if isinstance(hint, type) and dataclasses.is_dataclass(hint):
        return FieldType(ValueKind.RECORD, record_type=hint)

    raise SchemaError(f"unsupported annotation {hint!r}", record_type, field_name)


# =============================================================================
# Building records from payloads
# =============================================================================


def record_from_dict(record_type: type, payload: Any) -> Any:
    """Build a record from a payload keyed by wire names.

    Values that do not fit their field's kind are replaced by the kind's
    zero value, so that ``required`` reports them. Missing keys take the
    dataclass default, or the zero value when there is none.

    Raises:
        NotARecordError: If payload is not a mapping
    """
    if not isinstance(payload, collections.abc.Mapping):
        raise NotARecordError(f"expected a JSON object for {record_type.__name__}, got {type(payload).__name__}")

    schema = describe_record(record_type)
    dc_fields = {f.name: f for f in dataclasses.fields(record_type)}
    kwargs: dict[str, Any] = {}

    for field_schema in schema.fields:
        dc_field = dc_fields[field_schema.attribute]
        if not dc_field.init:
            continue
        if field_schema.wire_name in payload:
            kwargs[dc_field.name] = _coerce(payload[field_schema.wire_name], field_schema.type)
        elif dc_field.default is dataclasses.MISSING and dc_field.default_factory is dataclasses.MISSING:
            kwargs[dc_field.name] = zero_value(field_schema.type)

    return record_type(**kwargs)


def zero_value(field_type: FieldType) -> Any:
    """The empty value of a field type."""
    if field_type.optional:
        return None
    kind = field_type.kind
    if kind == ValueKind.TEXT:
        return ""
    if kind in (ValueKind.INT, ValueKind.UINT):
        return 0
    if kind == ValueKind.FLOAT:
        return 0.0
    if kind == ValueKind.BOOL:
        return False
    if kind == ValueKind.SEQUENCE:
        return []
    if kind == ValueKind.MAPPING:
        return {}
    if kind == ValueKind.RECORD:
        return record_from_dict(field_type.record_type, {})
    return None


_MISMATCH = object()


def _coerce(value: Any, field_type: FieldType) -> Any:
    if value is None:
        return zero_value(field_type)

    kind = field_type.kind
    coerced: Any = _MISMATCH

    if kind == ValueKind.TEXT and isinstance(value, str):
        coerced = value
    elif kind == ValueKind.INT and isinstance(value, int) and not isinstance(value, bool):
        coerced = value
    elif kind == ValueKind.UINT and isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        coerced = UInt(value)
    elif kind == ValueKind.FLOAT and isinstance(value, (int, float)) and not isinstance(value, bool):
        coerced = float(value)
    elif kind == ValueKind.BOOL and isinstance(value, bool):
        coerced = value
    elif kind == ValueKind.MAPPING and isinstance(value, collections.abc.Mapping):
        coerced = dict(value)
    elif kind == ValueKind.RECORD and isinstance(value, collections.abc.Mapping):
        coerced = record_from_dict(field_type.record_type, value)
    elif kind == ValueKind.SEQUENCE and isinstance(value, list):
        element = field_type.element
        coerced = [_coerce(item, element) for item in value]
    elif kind == ValueKind.ATTACHMENT:
        coerced = _attachment_from_payload(value)

    if coerced is _MISMATCH:
        logger.debug("Payload value %r does not fit %s; using zero value", value, kind.value)
        return zero_value(field_type)
    return coerced


def _attachment_from_payload(value: Any) -> Any:
    """Attachments travel as ``{"filename": ..., "content": <base64>}``.

    A ``size`` key is only honoured without content, and only as a
    non-negative integer; sent bytes are always measured.
    """
    if isinstance(value, Attachment):
        return value
    if not isinstance(value, collections.abc.Mapping) or "filename" not in value:
        return _MISMATCH
    content = value.get("content")
    if content is None:
        size = value.get("size")
        if not isinstance(size, int) or isinstance(size, bool) or size < 0:
            size = None
        return Attachment(filename=str(value["filename"]), size=size)
    try:
        data = base64.b64decode(content, validate=True)
    except (binascii.Error, TypeError, ValueError):
        return _MISMATCH
    return Attachment(filename=str(value["filename"]), content=data)
