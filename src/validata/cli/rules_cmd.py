"""Rule chain commands."""

import click

from validata.errors import RuleSyntaxError
from validata.rules import KNOWN_RULES, RuleParser


@click.group()
def rules():
    """Rule chain commands."""
    pass


@rules.command("parse")
@click.argument("chain")
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Reject unknown rules and malformed parameters.",
)
def parse_cmd(chain: str, strict: bool):
    """Show the directives a rule chain parses into."""
    try:
        directives = RuleParser(strict=strict).parse(chain)
    except RuleSyntaxError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(1)

    if not directives:
        click.echo("No rules.")
        return

    for directive in directives:
        line = directive.name
        if directive.parameters:
            line += " " + ", ".join(directive.parameters)
        if directive.message:
            line += f"  # {directive.message}"
        click.echo(f"  {line}")


@rules.command("list")
def list_cmd():
    """List every rule name the parser accepts."""
    for name in sorted(KNOWN_RULES):
        click.echo(name)
