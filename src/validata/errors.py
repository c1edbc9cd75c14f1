"""Fatal faults raised by validata.

Validation failures are never raised; they are returned as data. Everything
in this module signals a misconfigured schema, rule chain, locale table or
capability, and aborts the whole validation call.
"""


class ValidataError(Exception):
    """Base class for configuration and integrity faults."""


class SchemaError(ValidataError):
    """A record class is not a valid validation schema."""

    def __init__(self, message: str, record_type: type | None = None, field: str | None = None):
        self.record_type = record_type
        self.field = field
        if record_type is not None and field is not None:
            message = f"{record_type.__name__}.{field}: {message}"
        elif record_type is not None:
            message = f"{record_type.__name__}: {message}"
        super().__init__(message)


class NotARecordError(ValidataError, TypeError):
    """The value passed to validate() is not record-shaped."""


class RuleSyntaxError(ValidataError):
    """A rule chain was rejected by the strict parser."""

    def __init__(self, message: str, chain: str, segment: str | None = None):
        self.chain = chain
        self.segment = segment
        super().__init__(f"{message} in rule chain {chain!r}")


class ConfigurationError(ValidataError):
    """A rule needs a capability that was not configured."""


class LookupFault(ValidataError):
    """The uniqueness lookup failed for a reason other than "not found"."""

    def __init__(self, message: str, table: str, column: str):
        self.table = table
        self.column = column
        super().__init__(f"{message} (table={table!r}, column={column!r})")


class LocaleError(ValidataError):
    """A locale table has no template for a rule key."""
