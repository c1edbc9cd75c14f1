"""Record evaluator for the validata rule engine.

Evaluates every field of a record concurrently and assembles the result
map in declaration order once all fields are done.
"""

import logging
from typing import Any

from validata.dispatcher import FieldDispatcher, RecordContext
from validata.errors import NotARecordError
from validata.messages import MessageRenderer
from validata.schema import describe_record, is_record
from validata.tasks import gather_all
from validata.types import ContentSniffer, LookupService, ValidationResult


logger = logging.getLogger(__name__)


class RecordEvaluator:
    """Evaluates records field by field.

    Each field runs in its own task. Field tasks only read shared state: the
    schema, the frozen locale tables and the record's values. The first fatal
    fault cancels the sibling tasks and propagates unchanged.

    Usage:
        evaluator = RecordEvaluator(MessageRenderer(default_catalog()))
        errors = await evaluator.evaluate(sign_up, locale="fr")
        if errors is None:
            ...  # every field passed
    """

    def __init__(
        self,
        renderer: MessageRenderer,
        lookup: LookupService | None = None,
        sniffer: ContentSniffer | None = None,
        strict: bool = False,
    ):
        self.dispatcher = FieldDispatcher(renderer, lookup, sniffer)
        self.strict = strict

    async def evaluate(self, record: Any, locale: str | None = None) -> ValidationResult | None:
        """Validate a record.

        Args:
            record: A dataclass instance declared with ``rule_field``
            locale: Locale tag for messages (default locale if None)

        Returns:
            None when every field passes. Otherwise a mapping of every wire
            name to its outcome, None for the fields that passed.

        Raises:
            NotARecordError: If record is not a dataclass instance
            SchemaError: If the record class is not a valid schema
            ValidataError: On lookup, configuration or locale faults
        """
        if not is_record(record):
            raise NotARecordError(f"validate: a dataclass record is expected, got {type(record).__name__}")

        schema = describe_record(type(record), self.strict)
        logger.debug("Evaluating %s (%d fields)", schema.record_type.__name__, len(schema.fields))

        async def evaluate_nested(nested: Any) -> ValidationResult | None:
            return await self.evaluate(nested, locale)

        ctx = RecordContext(
            schema=schema,
            record=record,
            locale=locale,
            evaluate_nested=evaluate_nested,
        )

        outcomes = await gather_all(
            self.dispatcher.dispatch(field, getattr(record, field.attribute), ctx)
            for field in schema.fields
        )

        if all(outcome is None for outcome in outcomes):
            return None

        return {field.wire_name: outcome for field, outcome in zip(schema.fields, outcomes)}
