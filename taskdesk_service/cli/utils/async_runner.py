"""Run async command bodies from synchronous click callbacks."""

import asyncio
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any

from taskdesk_service.infra.database.session import close_database


def coro[T](f: Callable[..., Awaitable[T]]) -> Callable[..., T]:
    """
    Decorator that makes an async function synchronous for Click.

    The database engine is disposed before the event loop closes, since its
    pooled connections belong to that loop.

    Usage:
        @cli.command()
        @coro
        async def my_command():
            result = await some_async_function()
            click.echo(result)
    """

    @wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> T:
        async def run() -> T:
            try:
                return await f(*args, **kwargs)
            finally:
                await close_database()

        return asyncio.run(run())

    return wrapper
