"""CLI: xplore auth login|status|logout"""

from typing import Optional

import click
from rich.console import Console

from xplore.client import AsyncXplore
from xplore.totp import decode_base32_secret

console = Console()


def _cookie_file():
    from xplore.cli.main import _cookie_file
    return _cookie_file()


def _load_config():
    from xplore.cli.main import _load_config
    return _load_config()


def _save_client(client: AsyncXplore, username: Optional[str] = None):
    from xplore.cli.main import _save_client
    return _save_client(client, username=username)


def _forget_session():
    from xplore.cli.main import _forget_session
    return _forget_session()


def _run(coro):
    from xplore.cli.main import _run
    return _run(coro)


@click.group()
def auth():
    """Authentication commands."""


@auth.command("login")
@click.option("--username", prompt=True)
@click.option("--password", prompt=True, hide_input=True)
@click.option("--email", default=None, help="Needed when the server asks to confirm the account email")
@click.option("--two-factor-secret", default=None, envvar="X_TWO_FACTOR_SECRET", help="Base32 TOTP secret, as shown when enabling 2FA")
def auth_login(username: str, password: str, email: Optional[str], two_factor_secret: Optional[str]):
    """Log in with username and password."""

    async def _login():
        secret = decode_base32_secret(two_factor_secret) if two_factor_secret else None
        async with AsyncXplore() as client:
            with console.status("Logging in..."):
                await client.login(username, password, email=email, two_factor_secret=secret)
            path = _save_client(client, username=username)
        console.print(f"[green]Logged in as {username} after {client.auth.rounds} rounds.[/green]")
        if not client.authenticated:
            console.print("[yellow]Warning: the server did not issue ct0 and auth_token.[/yellow]")
        console.print(f"[dim]Cookies saved to {path}[/dim]")

    _run(_login())


@auth.command("status")
def auth_status():
    """Show current auth status."""
    path = _cookie_file()
    if not path.exists():
        console.print("[yellow]Not logged in. Run `xplore auth login`.[/yellow]")
        return

    async def _status():
        async with AsyncXplore() as client:
            client.load_cookies(path)
            return client.authenticated, len(client.session.cookies)

    authenticated, count = _run(_status())
    username = _load_config().get("username")
    if not authenticated:
        console.print("[yellow]Saved cookies are missing ct0 or auth_token.[/yellow]")
    elif username:
        console.print(f"[green]Session cookies present for {username}[/green] ({count} cookies in {path})")
    else:
        console.print(f"[green]Session cookies present[/green] ({count} cookies in {path})")


@auth.command("logout")
def auth_logout():
    """Clear saved cookies. The server-side session is left alone."""
    _forget_session()
    console.print("[green]Logged out.[/green]")
