"""Terminal output helpers shared by the pipeline commands.

Status lines go through ``click.secho`` so colour is dropped automatically
when output is piped (cron mail, CI logs). Errors go to stderr.
"""

import click


def success(message: str) -> None:
    click.secho(f"✓ {message}", fg="green")


def error(message: str) -> None:
    click.secho(f"✗ {message}", fg="red", err=True)


def warning(message: str) -> None:
    click.secho(f"⚠ {message}", fg="yellow")


def info(message: str) -> None:
    click.secho(f"ℹ {message}", fg="blue")


def header(title: str) -> None:
    """Section title preceded by a blank line."""
    click.secho(f"\n{title}", fg="cyan", bold=True)


def field(label: str, value: object, *, width: int = 11) -> None:
    """Indented ``label: value`` line with values aligned in one column.

    Example:
        field("Sent", 3)   ->  "  Sent:      3"
    """
    click.echo(f"  {label + ':':<{width}}{value}")
