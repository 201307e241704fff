"""
Xplore CLI: `xplore` command.

Commands:
  xplore auth login        Run the login flow, save session cookies
  xplore auth status       Show whether saved cookies look usable
  xplore auth logout       Forget saved cookies
  xplore cookie set [RAW]  Import a browser cookie string
  xplore cookie get        Print the saved cookie string
  xplore cookie verify     Check saved cookies against the server
"""

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

try:
    import click
    from rich.console import Console
    from rich.markup import escape
except ImportError:
    raise SystemExit("CLI requires extras: pip install xplore[cli]")

from xplore.client import AsyncXplore
from xplore.errors import XploreError

console = Console()
CONFIG_DIR = Path.home() / ".xplore"
CONFIG_FILE = CONFIG_DIR / "config.json"
COOKIE_FILE = CONFIG_DIR / "cookies.json"


def _load_config() -> dict:
    try:
        return json.loads(CONFIG_FILE.read_text())
    except (FileNotFoundError, json.JSONDecodeError):
        return {}


def _save_config(cfg: dict) -> None:
    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    CONFIG_FILE.write_text(json.dumps(cfg, indent=2))


def _cookie_file() -> Path:
    return Path(_load_config().get("cookie_file", COOKIE_FILE))


@asynccontextmanager
async def _logged_in_client() -> AsyncIterator[AsyncXplore]:
    """Client loaded from the saved cookie file; closed on exit."""
    path = _cookie_file()
    if not path.exists():
        console.print("[red]Not logged in. Run `xplore auth login` or `xplore cookie set` first.[/red]")
        raise SystemExit(1)
    async with AsyncXplore() as client:
        client.load_cookies(path)
        yield client


def _save_client(client: AsyncXplore, username: Optional[str] = None) -> Path:
    """Write the cookie file and remember where it went and whose it is."""
    path = _cookie_file()
    path.parent.mkdir(parents=True, exist_ok=True)
    client.save_cookies(path)
    cfg = _load_config()
    cfg["cookie_file"] = str(path)
    if username:
        cfg["username"] = username
    else:
        cfg.pop("username", None)
    _save_config(cfg)
    return path


def _forget_session() -> None:
    path = _cookie_file()
    if path.exists():
        path.unlink()
    cfg = _load_config()
    if cfg.pop("username", None) is not None:
        _save_config(cfg)


def _run(coro):
    try:
        return asyncio.run(coro)
    except XploreError as e:
        console.print(f"[red]{e.code}: {escape(str(e))}[/red]")
        raise SystemExit(1)


@click.group()
@click.version_option("0.1.0")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging")
def main(verbose: bool):
    """Xplore CLI: log in and manage session cookies."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG)


# Register subcommands from separate modules
from xplore.cli.auth import auth
from xplore.cli.cookie import cookie

main.add_command(auth)
main.add_command(cookie)


if __name__ == "__main__":
    main()
