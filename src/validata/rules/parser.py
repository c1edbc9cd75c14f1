"""Parser for validata rule chains.

A rule chain is a pipe-separated list of directives:

    required|min:3|between:1,10|slice:max:5|email#Give us a real address

Grammar (one segment):
    segment    := name [":" parameters] ["#" message]
    parameters := piece (":" piece)+       colon-delimited
                | piece ("," piece)*       comma-delimited
"""

import logging
import re
from functools import lru_cache

from validata.errors import RuleSyntaxError
from validata.types import RuleDirective


logger = logging.getLogger(__name__)

REQUIRED = "required"
CHAIN_SEPARATOR = "|"
PARAMETER_SEPARATOR = ":"
LIST_SEPARATOR = ","
MESSAGE_SEPARATOR = "#"

KNOWN_RULES = frozenset({
    REQUIRED,
    # Text formats
    "string", "ascii", "alpha", "numeric", "alpha_numeric",
    "email", "phone", "phone_with_code", "username", "gh_card", "gh_gps",
    # Numeric classification
    "int", "uint", "float",
    # Magnitude
    "min", "max", "equal", "size", "from", "between",
    # Cross-field and cross-record
    "same", "match", "unique",
    # Sequence length
    "slice",
    # Attachments
    "file", "image", "mimes",
})

# Rules that do nothing without parameters
PARAMETERIZED_RULES = frozenset({
    "min", "max", "equal", "size", "from", "between",
    "same", "match", "unique", "slice", "mimes",
})

# Rules whose parameters are numeric bounds
NUMERIC_BOUND_RULES = frozenset({"min", "max", "equal", "size", "from", "between"})

_NUMBER = re.compile(r"^[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?$")
_BYTE_LIMIT = re.compile(r"^\d+(?:kb|mb|gb|tb)$", re.IGNORECASE)


class RuleParser:
    """Splits a rule chain into ordered directives.

    In lax mode (the default) unknown rule names are dropped and malformed
    bounds are kept as written, to be coerced to zero at evaluation time.
    Strict mode rejects both with ``RuleSyntaxError``.

    Usage:
        RuleParser().parse("required|between:1,10")
        # (RuleDirective('required'), RuleDirective('between', ('1', '10')))
    """

    def __init__(self, strict: bool = False):
        self.strict = strict

    def parse(self, chain: str) -> tuple[RuleDirective, ...]:
        """Parse a chain, moving ``required`` to the front."""
        directives: list[RuleDirective] = []

        for segment in chain.split(CHAIN_SEPARATOR):
            directive = self._parse_segment(segment, chain)
            if directive is not None:
                directives.append(directive)

        # required precedes every other check, whatever its position
        required = [d for d in directives if d.name == REQUIRED]
        others = [d for d in directives if d.name != REQUIRED]
        return tuple(required[:1] + others)

    def _parse_segment(self, segment: str, chain: str) -> RuleDirective | None:
        segment = segment.strip()
        if not segment:
            return None

        message: str | None = None
        if MESSAGE_SEPARATOR in segment:
            segment, message = segment.split(MESSAGE_SEPARATOR, 1)
            segment = segment.strip()
            if not message:
                message = None

        name, _, rest = segment.partition(PARAMETER_SEPARATOR)
        name = name.strip()
        if not name:
            if self.strict:
                raise RuleSyntaxError("Directive without a rule name", chain, segment)
            return None

        if name not in KNOWN_RULES:
            if self.strict:
                raise RuleSyntaxError(f"Unknown rule '{name}'", chain, segment)
            logger.debug("Ignoring unknown rule %r in chain %r", name, chain)
            return None

        parameters = self._split_parameters(rest)
        if self.strict:
            self._check_parameters(name, parameters, chain, segment)
        elif name in PARAMETERIZED_RULES and not parameters:
            logger.debug("Ignoring rule %r without parameters in chain %r", name, chain)
            return None

        return RuleDirective(name=name, parameters=parameters, message=message)

    def _split_parameters(self, rest: str) -> tuple[str, ...]:
        rest = rest.strip()
        if not rest:
            return ()
        if PARAMETER_SEPARATOR in rest:
            pieces = rest.split(PARAMETER_SEPARATOR)
        else:
            pieces = rest.split(LIST_SEPARATOR)
        return tuple(piece.strip() for piece in pieces)

    def _check_parameters(
        self,
        name: str,
        parameters: tuple[str, ...],
        chain: str,
        segment: str,
    ) -> None:
        if name in PARAMETERIZED_RULES and not parameters:
            raise RuleSyntaxError(f"Rule '{name}' needs parameters", chain, segment)

        if name in ("between", "from") and len(parameters) != 2:
            raise RuleSyntaxError(f"Rule '{name}' needs two bounds", chain, segment)

        if name == "slice":
            if len(parameters) != 2 or parameters[0] not in ("min", "max"):
                raise RuleSyntaxError("Rule 'slice' expects slice:min:N or slice:max:N", chain, segment)
            bounds: tuple[str, ...] = parameters[1:]
        elif name in NUMERIC_BOUND_RULES:
            bounds = parameters
        else:
            return

        for bound in bounds:
            if name == "size" and _BYTE_LIMIT.match(bound):
                continue
            if not _NUMBER.match(bound):
                raise RuleSyntaxError(
                    f"Rule '{name}' has a non-numeric bound '{bound}'", chain, segment
                )


@lru_cache(maxsize=1024)
def parse_rules(chain: str, strict: bool = False) -> tuple[RuleDirective, ...]:
    """Convenience function to parse a rule chain.

    Args:
        chain: The pipe-separated rule chain
        strict: Reject unknown rules and malformed bounds

    Returns:
        Ordered directives, ``required`` first
    """
    return RuleParser(strict=strict).parse(chain)
