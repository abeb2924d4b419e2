#!/usr/bin/env python3
"""
MUD client command-line entry point.

Connects to the game server, logs in (or restores the stored session) and
then reads one command per input line until the player quits.
"""

import asyncio
import sys

import click

from .app.context import ClientContext
from .config import get_config
from .exceptions import CharacterValidationError, MudClientError
from .logging_config import get_logger
from .session.state_machine import SessionState

logger = get_logger(__name__)

QUIT_WORDS = frozenset({"quit", "logout"})


async def _prompt(text: str, hide_input: bool = False, default: str | None = None) -> str:
    return await asyncio.to_thread(
        click.prompt, text, hide_input=hide_input, default=default, show_default=default is not None
    )


async def _login(context: ClientContext) -> None:
    name = await _prompt("Name")
    password = await _prompt("Password", hide_input=True)
    await context.session.login(name, password)


async def _create_character(context: ClientContext) -> None:
    form = {
        "name": await _prompt("Name"),
        "password": await _prompt("Password", hide_input=True),
        "confirmPassword": await _prompt("Confirm password", hide_input=True),
        "sex": await _prompt("Sex (male/female)"),
        "email": await _prompt("Email", default=""),
        "age": await _prompt("Age", default=""),
        "title": await _prompt("Title", default=""),
        "reputation": await _prompt("Reputation (famous/infamous)", default=""),
        "profession": await _prompt("Profession", default=""),
        "description": await _prompt("Description", default=""),
    }
    await context.session.create_character(form)


async def _authenticate(context: ClientContext, new_character: bool) -> None:
    """Keep asking until the session is authenticated or the connection is gone."""
    await context.session.wait_for_result()
    while context.transport.is_open and not context.session.is_authenticated:
        try:
            if new_character:
                await _create_character(context)
            else:
                await _login(context)
        except CharacterValidationError as e:
            context.display.show_error(e.user_friendly)
            continue
        except MudClientError as e:
            context.display.show_error(e.user_friendly)
            return
        await context.session.wait_for_result()


def _needs_login(context: ClientContext) -> bool:
    return context.transport.is_open and context.session.state is SessionState.ANONYMOUS


async def _run(context: ClientContext, new_character: bool) -> None:
    await context.start()
    try:
        while True:
            # Covers the first connection, a reconnect without a stored session
            # and a rejected restore
            await context.session.wait_for_result()
            if _needs_login(context):
                await _authenticate(context, new_character)
                new_character = False

            try:
                line = await asyncio.to_thread(input, "> ")
            except EOFError:
                break
            await context.interpreter.submit(line)
            if line.strip().lower() in QUIT_WORDS:
                break
    finally:
        await context.shutdown()


@click.command()
@click.option("--host", help="Game server host (overrides MUDCLIENT_SERVER_HOST)")
@click.option("--port", type=click.IntRange(1, 65535), help="Game server port (overrides MUDCLIENT_SERVER_PORT)")
@click.option("--path", help="WebSocket endpoint path")
@click.option("--secure/--insecure", default=None, help="Try wss first and fall back to ws once")
@click.option("--new-character", is_flag=True, help="Create a new character instead of logging in")
@click.option("--log-level", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False))
def main(
    host: str | None,
    port: int | None,
    path: str | None,
    secure: bool | None,
    new_character: bool,
    log_level: str | None,
):
    """Play on a MUD server from the terminal."""
    config = get_config()
    if path is not None and not path.startswith("/"):
        path = f"/{path}"
    overrides = {
        key: value
        for key, value in {"host": host, "port": port, "path": path, "secure": secure}.items()
        if value is not None
    }
    if overrides:
        config = config.model_copy(update={"connection": config.connection.model_copy(update=overrides)})
    if log_level:
        config = config.model_copy(update={"logging": config.logging.model_copy(update={"level": log_level.upper()})})

    context = ClientContext(config=config, configure_logging=True)
    try:
        asyncio.run(_run(context, new_character))
    except KeyboardInterrupt:
        logger.info("Client interrupted")
        sys.exit(130)


if __name__ == "__main__":
    main()
