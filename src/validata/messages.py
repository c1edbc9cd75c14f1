"""Localized validation messages.

Locale tables map a rule key to a ``str.format`` template. Keys may be
dotted (``min.string``) to select a variant for one kind of value:

    required: "The {0} field is required."
    min:
      numeric: "The {0} field must be at least {1}."
      string: "The {0} field must be at least {1} characters."

Tables are loaded once, frozen, and shared by every concurrent evaluation.
"""

from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from validata.errors import LocaleError


DEFAULT_LOCALE = "en"
LOCALE_DIR = Path(__file__).parent / "locales"


def _freeze(table: Mapping[str, Any]) -> Mapping[str, Any]:
    frozen: dict[str, Any] = {}
    for key, value in table.items():
        if isinstance(value, Mapping):
            frozen[str(key)] = MappingProxyType({str(k): str(v) for k, v in value.items()})
        else:
            frozen[str(key)] = str(value)
    return MappingProxyType(frozen)


class LocaleCatalog:
    """Read-only set of locale tables.

    Lookup is case-insensitive, tries the primary subtag (``fr-FR`` -> ``fr``)
    and falls back to the default locale.
    """

    def __init__(
        self,
        tables: Mapping[str, Mapping[str, Any]],
        default_locale: str = DEFAULT_LOCALE,
    ):
        self.default_locale = default_locale.lower()
        self._tables = MappingProxyType(
            {tag.lower(): _freeze(table) for tag, table in tables.items()}
        )
        if self.default_locale not in self._tables:
            raise LocaleError(f"Default locale '{default_locale}' has no table")

    @classmethod
    def load(
        cls,
        directory: Path | None = None,
        default_locale: str = DEFAULT_LOCALE,
    ) -> "LocaleCatalog":
        """Load every ``<tag>.yaml`` table from a directory.

        Args:
            directory: Directory of locale files (bundled tables if omitted)
            default_locale: Tag used when a requested locale has no table
        """
        directory = directory or LOCALE_DIR
        tables: dict[str, Mapping[str, Any]] = {}

        for path in sorted(Path(directory).glob("*.yaml")):
            try:
                with open(path, encoding="utf-8") as f:
                    data = yaml.safe_load(f)
            except yaml.YAMLError as exc:
                raise LocaleError(f"Cannot parse locale file {path}: {exc}") from exc
            if not isinstance(data, Mapping):
                raise LocaleError(f"Locale file {path} must contain a mapping")
            tables[path.stem] = data

        return cls(tables, default_locale)

    @property
    def locales(self) -> list[str]:
        return sorted(self._tables)

    def table(self, locale: str | None = None) -> Mapping[str, Any]:
        """Resolve the table for a locale tag."""
        if locale:
            tag = locale.strip().lower().replace("_", "-")
            if tag in self._tables:
                return self._tables[tag]
            primary = tag.split("-", 1)[0]
            if primary in self._tables:
                return self._tables[primary]
        return self._tables[self.default_locale]

    def template(self, key: str, locale: str | None = None) -> str:
        """Get the template for a rule key.

        Raises:
            LocaleError: If the table has no template for the key
        """
        table = self.table(locale)
        category, _, variant = key.partition(".")
        entry = table.get(category)

        if variant:
            if isinstance(entry, Mapping) and variant in entry:
                return entry[variant]
        elif isinstance(entry, str):
            return entry

        raise LocaleError(f"No message template for '{key}' (locale={locale or self.default_locale})")


class MessageRenderer:
    """Formats rule failures into messages.

    A custom message from the rule chain always wins and is returned
    verbatim. Otherwise the template is formatted with the field's display
    name first, then the rule arguments.
    """

    def __init__(self, catalog: LocaleCatalog):
        self.catalog = catalog

    def render(
        self,
        key: str,
        locale: str | None,
        field: str,
        *args: str,
        custom: str | None = None,
    ) -> str:
        if custom:
            return custom
        return self.catalog.template(key, locale).format(field, *args)


@lru_cache(maxsize=1)
def default_catalog() -> LocaleCatalog:
    """The bundled locale tables, loaded once per process."""
    return LocaleCatalog.load()
