"""The ``gh models`` command line entry point."""

from __future__ import annotations

import os
import subprocess
import sys
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence, TextIO

from . import list_command as _list
from . import run_command as _run
from . import view_command as _view
from .client import NOTICE, AzureClient, UnauthenticatedClient
from .config import CommandConfig, config_from_terminal
from .util import write_to_out

DEFAULT_HOST = "github.com"

LONG_DESCRIPTION = (
    "GitHub Models CLI extension allows you to experiment with AI models from the command line.\n"
    "\n"
    "To see a list of all available commands, run `gh models help`. To run the extension in\n"
    "interactive mode, run `gh models run`. This will prompt you to select a model and then\n"
    "enter a prompt. The extension will then return a response from the model.\n"
    "\n"
    "For more information about what you can do with GitHub Models extension, see the manual\n"
    "in the project README."
)

NO_TOKEN_MESSAGE = "No GitHub token found. Please run 'gh auth login' to authenticate.\n"


@dataclass(frozen=True)
class _Subcommand:
    name: str
    short: str
    parser: Callable[[], Any]
    run: Callable[[CommandConfig, Sequence[str]], None]


_SUBCOMMANDS = {
    command.name: command
    for command in (
        _Subcommand("list", "List available models", _list.build_parser, _list.list_command),
        _Subcommand("run", "Run inference with the specified model",
                    _run.build_parser, _run.run_command),
        _Subcommand("view", "View details about a model", _view.build_parser, _view.view_command),
    )
}


def token_for_host(host: str = DEFAULT_HOST) -> str:
    """Return the authentication token for ``host``, or an empty string.

    Environment variables are checked first, then the ``gh`` tool is asked.
    """
    if host == DEFAULT_HOST:
        names = ("GH_TOKEN", "GITHUB_TOKEN")
    else:
        names = ("GH_ENTERPRISE_TOKEN", "GITHUB_ENTERPRISE_TOKEN")
    for name in names:
        value = os.environ.get(name, "")
        if value:
            return value

    try:
        result = subprocess.run(
            ["gh", "auth", "token", "--secure-storage", "--hostname", host],
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError:
        return ""
    if result.returncode != 0:
        return ""
    return (result.stdout or "").strip()


def create_client(token: str, err_out: Optional[TextIO] = None) -> Any:
    """Return a client for ``token``; None if the client cannot be created."""
    if not token:
        return UnauthenticatedClient()
    try:
        return AzureClient(token)
    except Exception as err:  # noqa: BLE001 - reported to the user
        write_to_out(err_out if err_out is not None else sys.stderr,
                     f"Error creating Azure client: {err}")
        return None


def root_help() -> str:
    """Return the help text of the root command."""
    width = max(len(name) for name in [*_SUBCOMMANDS, "help"]) + 2
    lines = [
        LONG_DESCRIPTION,
        "",
        NOTICE,
        "",
        "Usage:",
        "  gh models [command]",
        "",
        "Available Commands:",
        f"  {'help':<{width}}Help about any command",
    ]
    lines += [f"  {c.name:<{width}}{c.short}" for c in _SUBCOMMANDS.values()]
    lines += [
        "",
        "Flags:",
        "  -h, --help   help for models",
        "",
        'Use "gh models [command] --help" for more information about a command.',
    ]
    return "\n".join(lines) + "\n"


def _help(args: Sequence[str]) -> int:
    if args:
        command = _SUBCOMMANDS.get(args[0])
        if command is None:
            write_to_out(sys.stdout, f"Unknown help topic [`{args[0]}`]\n")
        else:
            write_to_out(sys.stdout, command.parser().format_help())
            return 0
    write_to_out(sys.stdout, root_help())
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command line and return the process exit code."""
    args = list(sys.argv[1:] if argv is None else argv)

    if not args or args[0] in ("-h", "--help"):
        write_to_out(sys.stdout, root_help())
        return 0
    if args[0] == "help":
        return _help(args[1:])

    command = _SUBCOMMANDS.get(args[0])
    if command is None:
        write_to_out(
            sys.stderr,
            f'Error: unknown command "{args[0]}" for "gh models"\n\n'
            "Run 'gh models --help' for usage.\n",
        )
        return 1

    token = token_for_host(DEFAULT_HOST)
    if not token:
        write_to_out(sys.stdout, NO_TOKEN_MESSAGE)
    client = create_client(token, sys.stderr)
    if client is None:
        return 1

    config = config_from_terminal(client)
    try:
        command.run(config, args[1:])
    except SystemExit as exit_:
        return 0 if exit_.code in (0, None) else 1
    except KeyboardInterrupt:
        return 1
    except Exception as err:  # noqa: BLE001 - every failure becomes exit code 1
        write_to_out(sys.stderr, f"Error: {err}\n")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())