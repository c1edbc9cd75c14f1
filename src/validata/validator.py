"""Top-level entry points for validating records."""

import asyncio
import logging
from functools import lru_cache
from typing import Any

from validata.config import Settings
from validata.evaluator import RecordEvaluator
from validata.lookup import SQLAlchemyLookup
from validata.messages import DEFAULT_LOCALE, LocaleCatalog, MessageRenderer, default_catalog
from validata.sniffing import SignatureSniffer
from validata.types import ContentSniffer, LookupService, ValidationResult


logger = logging.getLogger(__name__)


class Validator:
    """Validates records against their declared rule chains.

    Capabilities not passed explicitly are built from settings: the
    uniqueness lookup from ``settings.database`` and the locale tables from
    ``settings.locale_dir``.

    Example:
        validator = Validator()
        errors = await validator.validate(SignUp(email="a@b.co", age=21))
    """

    def __init__(
        self,
        lookup: LookupService | None = None,
        *,
        catalog: LocaleCatalog | None = None,
        sniffer: ContentSniffer | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or Settings.from_env()

        if lookup is None and self.settings.database is not None:
            logger.debug("Using SQLAlchemy lookup for unique rules")
            lookup = SQLAlchemyLookup.from_config(self.settings.database)

        if catalog is None:
            if self.settings.locale_dir is None and self.settings.default_locale.lower() == DEFAULT_LOCALE:
                catalog = default_catalog()
            else:
                catalog = LocaleCatalog.load(self.settings.locale_dir, self.settings.default_locale)

        self.lookup = lookup
        self.catalog = catalog
        self.evaluator = RecordEvaluator(
            MessageRenderer(catalog),
            lookup=lookup,
            sniffer=sniffer or SignatureSniffer(),
            strict=self.settings.strict_rules,
        )

    async def validate(self, record: Any, locale: str | None = None) -> ValidationResult | None:
        """Validate a record; None means every field passed."""
        return await self.evaluator.evaluate(record, locale)

    def validate_sync(self, record: Any, locale: str | None = None) -> ValidationResult | None:
        """Blocking variant of ``validate`` for code outside an event loop."""
        return asyncio.run(self.validate(record, locale))


@lru_cache(maxsize=1)
def default_validator() -> Validator:
    """Process-wide validator configured from the environment."""
    return Validator()


async def validate(record: Any, locale: str | None = None) -> ValidationResult | None:
    """Validate a record with the default validator."""
    return await default_validator().validate(record, locale)
