"""CLI: xplore cookie set|get|verify"""

from typing import Optional

import click
from rich.console import Console

from xplore.client import AsyncXplore

console = Console()


def _logged_in_client():
    from xplore.cli.main import _logged_in_client
    return _logged_in_client()


def _save_client(client: AsyncXplore):
    from xplore.cli.main import _save_client
    return _save_client(client)


def _run(coro):
    from xplore.cli.main import _run
    return _run(coro)


@click.group()
def cookie():
    """Session cookie commands."""


@cookie.command("set")
@click.argument("raw", required=False, envvar="X_COOKIE_STRING")
def cookie_set(raw: Optional[str]):
    """Import a browser cookie string (`ct0=...; auth_token=...`)."""
    if not raw:
        raw = click.prompt("Cookie string", hide_input=True)

    async def _set():
        async with AsyncXplore() as client:
            client.set_cookie(raw)
            path = _save_client(client)
            return len(client.session.cookies), path

    count, path = _run(_set())
    console.print(f"[green]Imported {count} cookies to {path}[/green]")


@cookie.command("get")
def cookie_get():
    """Print the saved cookie string."""

    async def _get():
        async with _logged_in_client() as client:
            return client.get_cookie()

    click.echo(_run(_get()))


@cookie.command("verify")
def cookie_verify():
    """Check the saved cookies against the account endpoint."""

    async def _verify():
        async with _logged_in_client() as client:
            with console.status("Verifying..."):
                account = await client.auth.verify_credentials()
        name = account.get("screen_name", "unknown") if isinstance(account, dict) else "unknown"
        console.print(f"[green]Cookies valid for @{name}[/green]")

    _run(_verify())
