"""Core types for the validata rule engine.

This module defines the foundational types shared by every layer:
- Value kinds: the closed set of shapes a record field can take
- Rule directives: one parsed segment of a rule chain
- Record schemas: the resolved, immutable description of a record class
- Capabilities: the lookup and content-sniffing protocols the engine consumes
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, NewType, Protocol


UInt = NewType("UInt", int)
"""Annotation marker for unsigned integer fields."""


class ValueKind(Enum):
    """The kind of value a field holds. Rules are dispatched on this."""

    TEXT = "text"
    INT = "int"
    UINT = "uint"
    FLOAT = "float"
    BOOL = "bool"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    RECORD = "record"
    ATTACHMENT = "attachment"

    @property
    def is_numeric(self) -> bool:
        return self in (ValueKind.INT, ValueKind.UINT, ValueKind.FLOAT)

    @property
    def is_sized(self) -> bool:
        """Kinds whose magnitude is their length."""
        return self in (ValueKind.TEXT, ValueKind.SEQUENCE, ValueKind.MAPPING)


@dataclass(frozen=True)
class FieldType:
    """Resolved shape of a field annotation.

    Attributes:
        kind: The value kind
        optional: True for ``X | None`` annotations; only None is empty then
        element: Element shape for SEQUENCE fields
        record_type: The dataclass for RECORD fields
    """

    kind: ValueKind
    optional: bool = False
    element: "FieldType | None" = None
    record_type: type | None = None


@dataclass(frozen=True)
class RuleDirective:
    """One rule of a chain, e.g. ``between:1,10#Pick a number``.

    Attributes:
        name: Rule name (never empty)
        parameters: Ordered parameters, possibly empty
        message: Custom message that replaces the localized template
    """

    name: str
    parameters: tuple[str, ...] = ()
    message: str | None = None

    @property
    def argument(self) -> str:
        """Parameters as written in the chain, comma joined."""
        return ",".join(self.parameters)

    def parameter(self, index: int) -> str:
        """Parameter at index, or an empty string when absent."""
        if index < len(self.parameters):
            return self.parameters[index]
        return ""


@dataclass(frozen=True)
class FieldSchema:
    """A record field with its wire name, rule chain and resolved type.

    Attributes:
        attribute: Python attribute name on the record
        wire_name: External key used in payloads and in the result map
        display_name: Name rendered into messages
        rules: Parsed rule chain, ``required`` first
        type: Resolved value shape
    """

    attribute: str
    wire_name: str
    display_name: str
    rules: tuple[RuleDirective, ...]
    type: FieldType

    def directive(self, name: str) -> RuleDirective | None:
        for rule in self.rules:
            if rule.name == name:
                return rule
        return None


@dataclass(frozen=True)
class RecordSchema:
    """Immutable description of a record class."""

    record_type: type
    fields: tuple[FieldSchema, ...]

    def field_by_wire_name(self, wire_name: str) -> FieldSchema | None:
        for field_schema in self.fields:
            if field_schema.wire_name == wire_name:
                return field_schema
        return None


@dataclass
class Attachment:
    """A binary attachment, held in memory or on disk.

    Attributes:
        filename: Original file name
        content: Raw bytes, when already in memory
        path: File location, read lazily
        size: Declared size in bytes, used only when content and path are absent
    """

    filename: str
    content: bytes | None = None
    path: Path | None = None
    size: int | None = None

    async def read(self) -> bytes:
        """Return the attachment bytes.

        Raises:
            OSError: If the attachment has no content or cannot be read
        """
        if self.content is not None:
            return self.content
        if self.path is None:
            raise FileNotFoundError(f"Attachment '{self.filename}' has no content")
        return await asyncio.to_thread(Path(self.path).read_bytes)

    async def byte_size(self) -> int:
        """Measured size in bytes; the declared size only when nothing can be measured."""
        if self.content is not None:
            return len(self.content)
        if self.path is not None:
            stat = await asyncio.to_thread(Path(self.path).stat)
            return stat.st_size
        if self.size is not None:
            return self.size
        raise FileNotFoundError(f"Attachment '{self.filename}' has no content")


class LookupService(Protocol):
    """Protocol for the "value not already stored" check.

    Implementations return True when a row with the value exists and raise
    ``LookupFault`` on any failure other than "not found".
    """

    async def exists(self, table: str, column: str, value: Any) -> bool:
        """Check whether ``table.column`` already holds ``value``.

        Args:
            table: Table name
            column: Column name
            value: Value to look for

        Returns:
            True if at least one row matches
        """
        ...


class ContentSniffer(Protocol):
    """Protocol for detecting a file extension from its bytes."""

    def detect(self, content: bytes) -> str | None:
        """Return the detected extension (without dot), or None if unknown."""
        ...


# Result shapes: wire name -> message | per-element list | nested mapping
FieldOutcome = str | list[str | None] | dict[str, Any] | None
ValidationResult = dict[str, Any]
