"""validata: rule-chain validation for dataclass records.

Fields declare an external (wire) name and a pipe-separated rule chain;
validation returns None when every field passes, or a mapping from wire
name to a localized message, per-element list or nested result.

Usage:
    from dataclasses import dataclass
    from validata import Validator, rule_field

    @dataclass
    class SignUp:
        email: str = rule_field("email", "required|email")
        age: int = rule_field("age", "required|min:18#You must be an adult", default=0)

    errors = await Validator().validate(SignUp(email="a@example.com"), locale="fr")

The FastAPI integration lives in ``validata.http``.
"""

from validata.config import DatabaseConfig, Settings, configure_logging
from validata.errors import (
    ConfigurationError,
    LocaleError,
    LookupFault,
    NotARecordError,
    RuleSyntaxError,
    SchemaError,
    ValidataError,
)
from validata.evaluator import RecordEvaluator
from validata.lookup import SQLAlchemyLookup
from validata.messages import LocaleCatalog, MessageRenderer, default_catalog
from validata.rules import RuleParser, parse_rules
from validata.schema import describe_record, display_name, record_from_dict, rule_field
from validata.sniffing import SignatureSniffer
from validata.types import (
    Attachment,
    ContentSniffer,
    FieldSchema,
    FieldType,
    LookupService,
    RecordSchema,
    RuleDirective,
    UInt,
    ValidationResult,
    ValueKind,
)
from validata.validator import Validator, default_validator, validate

__all__ = [
    # Entry points
    "Validator",
    "default_validator",
    "validate",
    "RecordEvaluator",
    # Declaration
    "rule_field",
    "describe_record",
    "display_name",
    "record_from_dict",
    "Attachment",
    "UInt",
    # Types
    "ValueKind",
    "FieldType",
    "FieldSchema",
    "RecordSchema",
    "RuleDirective",
    "ValidationResult",
    "LookupService",
    "ContentSniffer",
    # Rules
    "RuleParser",
    "parse_rules",
    # Messages
    "LocaleCatalog",
    "MessageRenderer",
    "default_catalog",
    # Capabilities
    "SQLAlchemyLookup",
    "SignatureSniffer",
    # Configuration
    "Settings",
    "DatabaseConfig",
    "configure_logging",
    # Errors
    "ValidataError",
    "SchemaError",
    "NotARecordError",
    "RuleSyntaxError",
    "ConfigurationError",
    "LookupFault",
    "LocaleError",
]
