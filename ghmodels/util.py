"""Small helpers shared by the commands."""

from __future__ import annotations

import sys
from typing import Iterable, Optional, Sequence, TextIO


def write_to_out(out: TextIO, message: str) -> None:
    """Write ``message`` to ``out``, reporting a failed write on stdout."""
    try:
        out.write(message)
    except (OSError, ValueError) as err:
        print("Error writing message:", err)


def parse_template_variables(var_flags: Iterable[str]) -> dict[str, str]:
    """Turn ``key=value`` flag values into a mapping.

    Blank entries are skipped, keys are stripped and values kept as given.
    Raises ValueError for a malformed entry, an empty key or a repeated key.
    """
    variables: dict[str, str] = {}
    for flag in var_flags:
        if not flag.strip():
            continue
        key, sep, value = flag.partition("=")
        if not sep:
            raise ValueError(f"invalid variable format '{flag}', expected 'key=value'")
        key = key.strip()
        if not key:
            raise ValueError(f"variable key cannot be empty in '{flag}'")
        if key in variables:
            raise ValueError(f"duplicate variable key '{key}'")
        variables[key] = value
    return variables


def select_option(
    message: str,
    options: Sequence[str],
    stdin: Optional[TextIO] = None,
    out: Optional[TextIO] = None,
) -> str:
    """Ask the user to pick one of ``options`` by number or by name.

    Asks again after an invalid answer; raises EOFError when input ends.
    """
    if not options:
        raise ValueError("no options to select from")
    stdin = stdin if stdin is not None else sys.stdin
    out = out if out is not None else sys.stdout

    write_to_out(out, message + "\n")
    for number, option in enumerate(options, start=1):
        write_to_out(out, f"  {number}) {option}\n")

    while True:
        write_to_out(out, f"Enter a number (1-{len(options)}): ")
        if hasattr(out, "flush"):
            out.flush()
        line = stdin.readline()
        if not line:
            raise EOFError("no selection made")
        answer = line.strip()
        if answer.isdigit() and 1 <= int(answer) <= len(options):
            return options[int(answer) - 1]
        if answer in options:
            return answer
        write_to_out(out, f"Invalid selection '{answer}'\n")