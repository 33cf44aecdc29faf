"""Main CLI entry point for taskdesk-service operations."""

import click

from taskdesk_service.cli.commands import config, digests, reminders, server
from taskdesk_service.infra.logging import setup_logging


@click.group()
@click.version_option(version="1.0.0", prog_name="taskdesk")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """TaskDesk CLI - run the reminder and digest pipeline by hand.

    \b
    Command Groups:
      reminders  Deliver due reminders, inspect the queue
      digests    Generate daily digests, show the next slot
      config     Check collaborator configuration
      serve      Run the HTTP API

    \b
    Quick Start:
      taskdesk config check
      taskdesk reminders process
      taskdesk digests generate --type morning
    """
    ctx.ensure_object(dict)


cli.add_command(reminders.reminders)
cli.add_command(digests.digests)
cli.add_command(config.config)
cli.add_command(server.serve)


def main() -> None:
    """Main entry point for the CLI."""
    setup_logging()
    cli(obj={})


if __name__ == "__main__":
    main()
