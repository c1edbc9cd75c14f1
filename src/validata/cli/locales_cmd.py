"""Locale table commands."""

from collections.abc import Mapping

import click
import yaml

from validata.config import Settings
from validata.errors import LocaleError
from validata.messages import LocaleCatalog


def _load_catalog() -> LocaleCatalog:
    settings = Settings.from_env()
    try:
        return LocaleCatalog.load(settings.locale_dir, settings.default_locale)
    except LocaleError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(1)


@click.group()
def locales():
    """Locale table commands."""
    pass


@locales.command("list")
def list_cmd():
    """List the available locales; the default is starred."""
    catalog = _load_catalog()
    for tag in catalog.locales:
        marker = "*" if tag == catalog.default_locale else " "
        click.echo(f"{marker} {tag}")


@locales.command("show")
@click.option("--locale", "tag", default=None, help="Locale tag (default locale if omitted).")
def show_cmd(tag: str | None):
    """Print the message templates of one locale."""
    table = _load_catalog().table(tag)
    plain = {
        key: dict(value) if isinstance(value, Mapping) else value
        for key, value in table.items()
    }
    click.echo(yaml.safe_dump(plain, allow_unicode=True, sort_keys=True), nl=False)
