"""Predicate library for validata rules.

Every ``violates_*`` function is pure and returns True when the value breaks
the rule. Bounds arrive as the strings written in the rule chain and are
parsed per call; a bound that does not parse counts as zero.
"""

import dataclasses
import re
from typing import Any

from email_validator import EmailNotValidError, validate_email

from validata.types import FieldType, ValueKind


# =============================================================================
# Patterns
# =============================================================================

ALPHA_PATTERN = re.compile(r"^[a-zA-Z]+$")
NUMERIC_PATTERN = re.compile(r"^[0-9]+$")
ALPHA_NUMERIC_PATTERN = re.compile(r"^[a-zA-Z0-9]+$")
ASCII_PATTERN = re.compile(r"^[\x20-\x7E]+$")
SAFE_STRING_PATTERN = re.compile(r"^[0-9a-zA-Z\-+ .]+$")

PHONE_PATTERN = re.compile(r"^0\d{9}$")
PHONE_WITH_CODE_PATTERN = re.compile(r"^\+\d{12}$")
GH_CARD_PATTERN = re.compile(r"^GHA-\d{9}-\d$")
GH_GPS_PATTERN = re.compile(r"^[A-Z]{2}-\d{1,4}-\d{4}$")

INT_PATTERN = re.compile(r"^-?(?:0|[1-9][0-9]*)$")
UINT_PATTERN = re.compile(r"^[1-9]\d*$")
FLOAT_PATTERN = re.compile(r"^[-+]?[0-9]*\.?[0-9]+([eE][-+]?[0-9]+)?$")

BYTE_LIMIT_PATTERN = re.compile(r"^([1-9]|[1-9][0-9]+)(kb|mb|gb|tb)$", re.IGNORECASE)

EMAIL_MIN_LENGTH = 6
EMAIL_MAX_LENGTH = 254
EMAIL_LOCAL_MAX_LENGTH = 64
EMAIL_MIN_DOMAIN_LENGTH = 3
PLACEHOLDER_DOMAINS = frozenset({"localhost", "localhost.com", "example.com"})

KILOBYTE = 1024
BYTE_UNITS = {
    "kb": KILOBYTE,
    "mb": KILOBYTE ** 2,
    "gb": KILOBYTE ** 3,
    "tb": KILOBYTE ** 4,
}

IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "webp")
EXTENSION_ALIASES = {"jpeg": "jpg", "tif": "tiff"}


# =============================================================================
# Presence
# =============================================================================


def is_empty(value: Any, field_type: FieldType) -> bool:
    """Check if a value is the empty value for its kind.

    Optional fields are only empty when None: a present zero is a value.
    """
    if value is None:
        return True
    if field_type.optional:
        return False

    kind = field_type.kind
    if kind in (ValueKind.TEXT, ValueKind.SEQUENCE, ValueKind.MAPPING):
        return len(value) == 0
    if kind == ValueKind.BOOL:
        return not value
    if kind.is_numeric:
        return value == 0
    if kind == ValueKind.RECORD:
        return _is_empty_record(value)
    return False


def _is_empty_record(record: Any) -> bool:
    if not dataclasses.is_dataclass(record):
        return False
    return all(_is_zero(getattr(record, f.name)) for f in dataclasses.fields(record))


def _is_zero(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, bytes, list, tuple, dict)):
        return len(value) == 0
    if isinstance(value, (bool, int, float)):
        return not value
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return _is_empty_record(value)
    return False


# =============================================================================
# Text formats
# =============================================================================


def violates_alpha(value: str) -> bool:
    return not ALPHA_PATTERN.match(value)


def violates_numeric(value: str) -> bool:
    return not NUMERIC_PATTERN.match(value)


def violates_alpha_numeric(value: str) -> bool:
    return not ALPHA_NUMERIC_PATTERN.match(value)


def violates_ascii(value: str) -> bool:
    """Only printable ASCII characters are allowed."""
    return not ASCII_PATTERN.match(value)


def violates_safe_string(value: str) -> bool:
    """Letters, digits, spaces and ``- + .`` only."""
    return not SAFE_STRING_PATTERN.match(value)


# =============================================================================
# Identity formats
# =============================================================================


def violates_email(value: str) -> bool:
    """Check an email address.

    Rejects addresses outside 6-254 characters, a local part over 64
    characters, a domain shorter than 3 characters, placeholder domains, and
    anything email-validator cannot parse.
    """
    if len(value) < EMAIL_MIN_LENGTH or len(value) > EMAIL_MAX_LENGTH:
        return True

    at = value.rfind("@")
    if at <= 0:
        return True

    local, domain = value[:at], value[at + 1:]
    if len(domain) < EMAIL_MIN_DOMAIN_LENGTH:
        return True
    if domain.lower() in PLACEHOLDER_DOMAINS:
        return True
    if len(local) > EMAIL_LOCAL_MAX_LENGTH:
        return True

    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return True
    return False


def violates_phone(value: str) -> bool:
    """Local number: trunk digit 0 followed by nine digits."""
    return not PHONE_PATTERN.match(value)


def violates_phone_with_code(value: str) -> bool:
    """International number: ``+`` followed by twelve digits."""
    return not PHONE_WITH_CODE_PATTERN.match(value)


def violates_username(value: str) -> bool:
    """A username is an email, a phone with country code, or a local phone."""
    if "@" in value:
        return violates_email(value)
    if value.startswith("+"):
        return violates_phone_with_code(value)
    return violates_phone(value)


def violates_gh_card(value: str) -> bool:
    """Ghana card number, e.g. GHA-123456789-0."""
    return not GH_CARD_PATTERN.match(value)


def violates_gh_gps(value: str) -> bool:
    """Ghana digital address, e.g. GA-183-8164."""
    return not GH_GPS_PATTERN.match(value)


# =============================================================================
# Numeric classification
# =============================================================================
# The value is rendered to text first and judged on its shape, so a float
# routed to an int rule fails on its decimal point.


def violates_int(value: Any) -> bool:
    return not INT_PATTERN.match(str(value))


def violates_uint(value: Any) -> bool:
    return not UINT_PATTERN.match(str(value))


def violates_float(value: Any) -> bool:
    try:
        rendered = f"{value:.2f}"
    except (TypeError, ValueError):
        return True
    return not FLOAT_PATTERN.match(rendered)


# =============================================================================
# Magnitude
# =============================================================================


def parse_int_bound(bound: str) -> int:
    """Parse an integer bound; anything malformed is zero."""
    try:
        return int(bound.strip())
    except (AttributeError, ValueError):
        return 0


def parse_uint_bound(bound: str) -> int:
    return max(parse_int_bound(bound), 0)


def parse_float_bound(bound: str) -> float:
    try:
        return float(bound.strip())
    except (AttributeError, ValueError):
        return 0.0


def _magnitude(value: Any, kind: ValueKind) -> int | float | None:
    if kind.is_sized:
        return len(value)
    if kind.is_numeric:
        return value
    return None


def _bound(bound: str, kind: ValueKind) -> int | float:
    if kind == ValueKind.FLOAT:
        return parse_float_bound(bound)
    if kind == ValueKind.UINT:
        return parse_uint_bound(bound)
    return parse_int_bound(bound)


def violates_min(value: Any, kind: ValueKind, bound: str) -> bool:
    magnitude = _magnitude(value, kind)
    if magnitude is None:
        return False
    return not magnitude >= _bound(bound, kind)


def violates_max(value: Any, kind: ValueKind, bound: str) -> bool:
    magnitude = _magnitude(value, kind)
    if magnitude is None:
        return False
    return not magnitude <= _bound(bound, kind)


def violates_equal(value: Any, kind: ValueKind, bound: str) -> bool:
    magnitude = _magnitude(value, kind)
    if magnitude is None:
        return False
    return magnitude != _bound(bound, kind)


def violates_size(value: Any, kind: ValueKind, bound: str) -> bool:
    """Exact size: length for sized kinds, the value itself for numbers."""
    return violates_equal(value, kind, bound)


def violates_between(value: Any, kind: ValueKind, low: str, high: str) -> bool:
    """Exclusive bounds."""
    magnitude = _magnitude(value, kind)
    if magnitude is None:
        return False
    return not (_bound(low, kind) < magnitude < _bound(high, kind))


def violates_from(value: Any, kind: ValueKind, low: str, high: str) -> bool:
    """Inclusive bounds."""
    magnitude = _magnitude(value, kind)
    if magnitude is None:
        return False
    return not (_bound(low, kind) <= magnitude <= _bound(high, kind))


# =============================================================================
# Cross-field
# =============================================================================


def violates_same(value: Any, other: Any) -> bool:
    """Both values must render to the same trimmed text."""
    left = "" if value is None else str(value)
    right = "" if other is None else str(other)
    return left.strip() != right.strip()


# =============================================================================
# Attachments
# =============================================================================


def normalize_extension(extension: str) -> str:
    extension = extension.strip().lower().lstrip(".")
    return EXTENSION_ALIASES.get(extension, extension)


def violates_extension(detected: str | None, allowed: tuple[str, ...] | list[str]) -> bool:
    """The detected extension must be in the allow-list."""
    if not detected:
        return True
    allowed_set = {normalize_extension(ext) for ext in allowed if ext.strip()}
    return normalize_extension(detected) not in allowed_set


def parse_byte_limit(limit: str) -> tuple[int, str, int] | None:
    """Parse a limit such as ``2MB``.

    Returns:
        (amount, lower-case unit, limit in bytes), or None if malformed
    """
    match = BYTE_LIMIT_PATTERN.match(limit.strip())
    if not match:
        return None
    amount = int(match.group(1))
    unit = match.group(2).lower()
    return amount, unit, amount * BYTE_UNITS[unit]


def violates_byte_limit(size: int, limit_bytes: int) -> bool:
    return size > limit_bytes
