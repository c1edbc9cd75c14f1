"""Field dispatcher for the validata rule engine.

Runs one field's rule chain against its value. The dispatch follows a small
state machine:

    empty value  -> "required" fails (or passes when not required)
    record       -> nested evaluation
    sequence     -> whole-sequence rules, then every element
    anything else-> directives in chain order, first violation wins

Rules are looked up in per-kind tables; a directive that does not apply to
the field's kind is skipped.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from validata.errors import ConfigurationError
from validata.messages import MessageRenderer
from validata.rules import predicates
from validata.rules.parser import REQUIRED
from validata.schema import snake_case
from validata.sniffing import SignatureSniffer
from validata.tasks import gather_all
from validata.types import (
    Attachment,
    ContentSniffer,
    FieldOutcome,
    FieldSchema,
    FieldType,
    LookupService,
    RecordSchema,
    RuleDirective,
    ValueKind,
)


logger = logging.getLogger(__name__)


# =============================================================================
# Rule tables
# =============================================================================

TEXT_FORMAT_RULES: dict[str, Callable[[str], bool]] = {
    "string": predicates.violates_safe_string,
    "ascii": predicates.violates_ascii,
    "alpha": predicates.violates_alpha,
    "numeric": predicates.violates_numeric,
    "alpha_numeric": predicates.violates_alpha_numeric,
    "email": predicates.violates_email,
    "phone": predicates.violates_phone,
    "phone_with_code": predicates.violates_phone_with_code,
    "username": predicates.violates_username,
    "gh_card": predicates.violates_gh_card,
    "gh_gps": predicates.violates_gh_gps,
}

_INTEGER_FORMAT_RULES: dict[str, Callable[[Any], bool]] = {
    "int": predicates.violates_int,
    "uint": predicates.violates_uint,
}

NUMBER_FORMAT_RULES: dict[ValueKind, dict[str, Callable[[Any], bool]]] = {
    ValueKind.INT: _INTEGER_FORMAT_RULES,
    ValueKind.UINT: _INTEGER_FORMAT_RULES,
    ValueKind.FLOAT: {"float": predicates.violates_float},
}

SINGLE_BOUND_RULES: dict[str, Callable[[Any, ValueKind, str], bool]] = {
    "min": predicates.violates_min,
    "max": predicates.violates_max,
    "equal": predicates.violates_equal,
    "size": predicates.violates_size,
}

RANGE_RULES: dict[str, Callable[[Any, ValueKind, str, str], bool]] = {
    "between": predicates.violates_between,
    "from": predicates.violates_from,
}

# Message variant for magnitude rules, per kind
MAGNITUDE_VARIANTS = {
    ValueKind.TEXT: "string",
    ValueKind.INT: "numeric",
    ValueKind.UINT: "numeric",
    ValueKind.FLOAT: "numeric",
    ValueKind.MAPPING: "slice",
}

CROSS_FIELD_KINDS = frozenset({ValueKind.TEXT, ValueKind.INT, ValueKind.UINT, ValueKind.FLOAT})

# Attachment allow-list rules: rule name -> message key when parameterized
ATTACHMENT_TYPE_KEYS = {
    "image": "image_type",
    "file": "file_type",
    "mimes": "mimes",
}


@dataclass(frozen=True)
class Violation:
    """A failed rule: the message key and its template arguments."""

    key: str
    args: tuple[str, ...] = ()


@dataclass(frozen=True)
class RecordContext:
    """Read-only view of the record being evaluated, shared by field tasks.

    Attributes:
        schema: The record's schema
        record: The record instance (never mutated)
        locale: Requested locale tag
        evaluate_nested: Coroutine function evaluating a nested record
    """

    schema: RecordSchema
    record: Any
    locale: str | None
    evaluate_nested: Callable[[Any], Awaitable[dict[str, Any] | None]]

    def value_of(self, wire_name: str) -> tuple[FieldSchema | None, Any]:
        """Look up a sibling field and its value by wire name."""
        field_schema = self.schema.field_by_wire_name(wire_name)
        if field_schema is None:
            return None, None
        return field_schema, getattr(self.record, field_schema.attribute)


class FieldDispatcher:
    """Applies a field's rule chain to its value.

    Args:
        renderer: Message renderer for failures
        lookup: Service for the ``unique`` rule (optional)
        sniffer: Content sniffer for attachment type rules
    """

    def __init__(
        self,
        renderer: MessageRenderer,
        lookup: LookupService | None = None,
        sniffer: ContentSniffer | None = None,
    ):
        self.renderer = renderer
        self.lookup = lookup
        self.sniffer = sniffer or SignatureSniffer()

    async def dispatch(self, field: FieldSchema, value: Any, ctx: RecordContext) -> FieldOutcome:
        """Validate one field.

        Returns:
            None when the field passes, otherwise a message, a per-element
            list (sequences of scalars) or a nested result (records)

        Raises:
            ValidataError: On configuration or infrastructure faults
        """
        field_type = field.type

        if predicates.is_empty(value, field_type):
            return self._required_outcome(field, field_type, field.display_name, ctx)

        if field_type.kind == ValueKind.RECORD:
            return await ctx.evaluate_nested(value)

        if field_type.kind == ValueKind.SEQUENCE:
            return await self._dispatch_sequence(field, value, ctx)

        return await self._first_violation(field, field_type, value, field.display_name, ctx)

    # -------------------------------------------------------------------------
    # Chain walking
    # -------------------------------------------------------------------------

    def _required_outcome(
        self,
        field: FieldSchema,
        field_type: FieldType,
        display: str,
        ctx: RecordContext,
    ) -> str | None:
        required = field.directive(REQUIRED)
        if required is None:
            return None
        key = "bool" if field_type.kind == ValueKind.BOOL else "required"
        return self._render(ctx, Violation(key), display, required)

    async def _first_violation(
        self,
        field: FieldSchema,
        field_type: FieldType,
        value: Any,
        display: str,
        ctx: RecordContext,
    ) -> str | None:
        for directive in field.rules:
            if directive.name in (REQUIRED, "slice"):
                continue
            violation = await self.check(directive, field_type, value, ctx)
            if violation is not None:
                return self._render(ctx, violation, display, directive)
        return None

    async def _dispatch_sequence(
        self,
        field: FieldSchema,
        items: Any,
        ctx: RecordContext,
    ) -> FieldOutcome:
        for directive in field.rules:
            if directive.name != "slice":
                continue
            violation = self._check_slice(directive, items)
            if violation is not None:
                return self._render(ctx, violation, field.display_name, directive)

        element = field.type.element
        if element is None:
            return None

        if element.kind == ValueKind.RECORD:
            nested = await gather_all(
                self._evaluate_element_record(item, ctx) for item in items
            )
            failures = {str(i): result for i, result in enumerate(nested) if result is not None}
            return failures or None

        slots: list[str | None] = []
        for index, item in enumerate(items, start=1):
            display = f"{field.display_name} ({index})"
            if predicates.is_empty(item, element):
                slots.append(self._required_outcome(field, element, display, ctx))
            else:
                slots.append(await self._first_violation(field, element, item, display, ctx))

        if all(slot is None for slot in slots):
            return None
        return slots

    async def _evaluate_element_record(self, item: Any, ctx: RecordContext) -> dict[str, Any] | None:
        if item is None:
            return None
        return await ctx.evaluate_nested(item)

    def _check_slice(self, directive: RuleDirective, items: Any) -> Violation | None:
        bound_name = directive.parameter(0)
        bound = directive.parameter(1)
        if bound_name == "min" and predicates.violates_min(items, ValueKind.SEQUENCE, bound):
            return Violation("min.slice", (bound,))
        if bound_name == "max" and predicates.violates_max(items, ValueKind.SEQUENCE, bound):
            return Violation("max.slice", (bound,))
        return None

    def _render(
        self,
        ctx: RecordContext,
        violation: Violation,
        display: str,
        directive: RuleDirective,
    ) -> str:
        return self.renderer.render(
            violation.key,
            ctx.locale,
            display,
            *violation.args,
            custom=directive.message,
        )

    # -------------------------------------------------------------------------
    # Single rule
    # -------------------------------------------------------------------------

    async def check(
        self,
        directive: RuleDirective,
        field_type: FieldType,
        value: Any,
        ctx: RecordContext,
    ) -> Violation | None:
        """Check one directive against a non-empty value.

        Returns:
            The violation, or None when the rule passes or does not apply
        """
        kind = field_type.kind
        name = directive.name

        if kind == ValueKind.ATTACHMENT:
            return await self._check_attachment(directive, value)

        if kind == ValueKind.TEXT and name in TEXT_FORMAT_RULES:
            if TEXT_FORMAT_RULES[name](value):
                return Violation(name)
            return None

        if name in NUMBER_FORMAT_RULES.get(kind, {}):
            if NUMBER_FORMAT_RULES[kind][name](value):
                return Violation(name)
            return None

        variant = MAGNITUDE_VARIANTS.get(kind)
        if variant and name in SINGLE_BOUND_RULES:
            bound = directive.parameter(0)
            if SINGLE_BOUND_RULES[name](value, kind, bound):
                return Violation(f"{name}.{variant}", (bound,))
            return None

        if variant and name in RANGE_RULES:
            low, high = directive.parameter(0), directive.parameter(1)
            if RANGE_RULES[name](value, kind, low, high):
                return Violation(f"{name}.{variant}", (low, high))
            return None

        if kind in CROSS_FIELD_KINDS and name in ("same", "match"):
            return self._check_same(directive, value, ctx)

        if kind == ValueKind.TEXT and name == "unique":
            return await self._check_unique(directive, value)

        return None

    def _check_same(self, directive: RuleDirective, value: Any, ctx: RecordContext) -> Violation | None:
        wire_name = directive.parameter(0)
        other_field, other_value = ctx.value_of(wire_name)
        if not predicates.violates_same(value, other_value):
            return None
        if directive.name == "match":
            return Violation("match")
        other_name = other_field.display_name if other_field is not None else wire_name
        return Violation("same", (other_name,))

    async def _check_unique(self, directive: RuleDirective, value: Any) -> Violation | None:
        table_name, separator, column_name = directive.parameter(0).partition(".")
        if not separator or not table_name or not column_name:
            logger.debug("Ignoring unique rule without table.column: %r", directive.argument)
            return None

        if self.lookup is None:
            raise ConfigurationError(
                f"Rule 'unique:{directive.argument}' needs a lookup service; "
                "pass lookup= to Validator or set DATABASE_URL"
            )

        if await self.lookup.exists(table_name, snake_case(column_name), value):
            return Violation("unique")
        return None

    async def _check_attachment(self, directive: RuleDirective, attachment: Any) -> Violation | None:
        name = directive.name

        if name == "size":
            return await self._check_byte_limit(directive, attachment)

        if name not in ATTACHMENT_TYPE_KEYS:
            return None

        if not isinstance(attachment, Attachment):
            return Violation(name)

        if name == "file" and not directive.parameters:
            try:
                await attachment.read()
            except OSError as exc:
                logger.debug("Attachment %r is unreadable: %s", attachment.filename, exc)
                return Violation("file")
            return None

        if name == "image" and not directive.parameters:
            allowed: tuple[str, ...] = predicates.IMAGE_EXTENSIONS
            violation = Violation("image")
        else:
            allowed = directive.parameters
            violation = Violation(ATTACHMENT_TYPE_KEYS[name], (directive.argument,))

        try:
            content = await attachment.read()
        except OSError as exc:
            logger.debug("Attachment %r is unreadable: %s", attachment.filename, exc)
            return violation

        if predicates.violates_extension(self.sniffer.detect(content), allowed):
            return violation
        return None

    async def _check_byte_limit(self, directive: RuleDirective, attachment: Any) -> Violation | None:
        limit = predicates.parse_byte_limit(directive.argument)
        if limit is None:
            logger.warning("Ignoring malformed size limit %r on attachment rule", directive.argument)
            return None

        amount, unit, limit_bytes = limit
        violation = Violation(f"size.file_{unit}", (str(amount),))

        if not isinstance(attachment, Attachment):
            return violation

        try:
            size = await attachment.byte_size()
        except OSError as exc:
            logger.debug("Attachment %r is unreadable: %s", attachment.filename, exc)
            return violation

        if predicates.violates_byte_limit(size, limit_bytes):
            return violation
        return None
