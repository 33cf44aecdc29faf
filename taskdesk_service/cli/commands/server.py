"""Server command."""

import subprocess
import sys

import click

from taskdesk_service.cli.utils import error, info, success
from taskdesk_service.core.settings import get_app_settings


@click.command()
@click.option(
    "--host",
    default=None,
    help="Host to bind (default: APP_HOST)",
)
@click.option(
    "--port",
    default=None,
    type=int,
    help="Port to bind (default: APP_PORT)",
)
@click.option(
    "--reload/--no-reload",
    default=False,
    help="Enable auto-reload on code changes",
)
@click.option(
    "--workers",
    default=1,
    type=int,
    help="Number of worker processes (ignored with --reload)",
)
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["critical", "error", "warning", "info", "debug", "trace"]),
    help="Log level",
)
def serve(
    host: str | None,
    port: int | None,
    reload: bool,
    workers: int,
    log_level: str,
) -> None:
    """Run the HTTP API with uvicorn."""
    settings = get_app_settings()
    host = host or settings.host
    port = port or settings.port

    info(f"Server will run at: http://{host}:{port}")
    info(f"Environment: {settings.environment}")

    cmd = [
        "uvicorn",
        "taskdesk_service.app.main:app",
        "--host",
        host,
        "--port",
        str(port),
        "--log-level",
        log_level,
    ]
    if reload:
        cmd.append("--reload")
    else:
        cmd.extend(["--workers", str(workers)])

    try:
        success("Starting uvicorn...")
        subprocess.run(cmd, check=True)
    except KeyboardInterrupt:
        info("Shutting down server...")
    except subprocess.CalledProcessError as e:
        error(f"Server exited with status {e.returncode}")
        sys.exit(e.returncode)
