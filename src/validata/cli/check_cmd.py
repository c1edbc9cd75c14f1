"""Validate a JSON payload against a record class."""

import importlib
import json
from pathlib import Path

import click

from validata.errors import ValidataError
from validata.schema import record_from_dict
from validata.validator import Validator


def _import_record(target: str) -> type:
    """Resolve ``package.module:RecordClass``."""
    module_name, _, attr = target.partition(":")
    if not module_name or not attr:
        raise click.BadParameter("expected module:RecordClass", param_hint="RECORD")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise click.BadParameter(f"cannot import {module_name}: {e}", param_hint="RECORD")
    try:
        return getattr(module, attr)
    except AttributeError:
        raise click.BadParameter(f"{module_name} has no attribute {attr}", param_hint="RECORD")


@click.command()
@click.argument("record")
@click.argument("payload", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--locale", default=None, help="Locale tag for messages.")
def check(record: str, payload: Path, locale: str | None):
    """Validate PAYLOAD (a JSON object) as RECORD (module:RecordClass).

    Exits with status 1 and prints the error map when validation fails.
    """
    record_type = _import_record(record)

    try:
        data = json.loads(payload.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        click.echo(click.style(f"Error: {payload} is not valid JSON: {e}", fg="red"), err=True)
        raise SystemExit(1)

    try:
        instance = record_from_dict(record_type, data)
        errors = Validator().validate_sync(instance, locale)
    except ValidataError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(1)

    if errors is None:
        click.echo(click.style("Valid.", fg="green", bold=True))
        return

    click.echo(json.dumps(errors, indent=2, ensure_ascii=False))
    raise SystemExit(1)
