"""validata CLI entry point."""

import click

from validata.config import Settings, configure_logging


@click.group()
@click.option(
    "--log-level",
    default=None,
    help="Logging level (default: VALIDATA_LOG_LEVEL or WARNING).",
)
def cli(log_level: str | None):
    """validata: rule-chain validation for dataclass records."""
    configure_logging(log_level or Settings.from_env().log_level)


# Register subcommand groups
from validata.cli.check_cmd import check  # noqa: E402
from validata.cli.locales_cmd import locales  # noqa: E402
from validata.cli.rules_cmd import rules  # noqa: E402

cli.add_command(rules)
cli.add_command(locales)
cli.add_command(check)
