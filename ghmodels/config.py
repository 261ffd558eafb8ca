"""Settings shared by the commands and a simple table printer."""

from __future__ import annotations

import shutil
import sys
import unicodedata
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence, TextIO

from .util import write_to_out

ColorFunc = Callable[[str], str]

_COLUMN_GAP = "  "


def _header_style(text: str) -> str:
    return f"\x1b[2;4;37m{text}\x1b[0m"


def _char_width(char: str) -> int:
    if unicodedata.combining(char):
        return 0
    return 2 if unicodedata.east_asian_width(char) in ("W", "F") else 1


def _display_width(text: str) -> int:
    return max((sum(_char_width(c) for c in line) for line in text.split("\n")), default=0)


def _truncate(text: str, width: int) -> str:
    if _display_width(text) <= width:
        return text
    ellipsis = "..." if width > 3 else ""
    limit = width - len(ellipsis)
    kept, used = [], 0
    for char in text:
        char_width = _char_width(char)
        if used + char_width > limit:
            break
        kept.append(char)
        used += char_width
    return "".join(kept) + ellipsis


def _fit_widths(natural: list[int], available: int) -> list[int]:
    if available <= 0 or sum(natural) <= available:
        return natural
    share = max(available // len(natural), 1)
    widths = [min(width, share) for width in natural]
    spare = available - sum(widths)
    for column, width in enumerate(natural):
        if spare <= 0:
            break
        extra = min(width - widths[column], spare)
        widths[column] += extra
        spare -= extra
    return widths


@dataclass
class _Field:
    text: str
    truncate: bool
    color: Optional[ColorFunc]


class TablePrinter:
    """Collects rows of fields and prints them as aligned columns.

    On a terminal, columns are padded, shrunk to fit ``max_width`` and may be
    coloured; otherwise fields are separated by tabs and headers are omitted.
    """

    def __init__(self, out: TextIO, is_terminal: bool = False, max_width: int = 80) -> None:
        self._out = out
        self._is_terminal = is_terminal
        self._max_width = max_width
        self._rows: list[list[_Field]] = []
        self._current: list[_Field] = []

    def add_header(self, headers: Sequence[str]) -> None:
        if not self._is_terminal:
            return
        self.end_row()
        self._rows.append([_Field(header, True, _header_style) for header in headers])

    def add_field(
        self, text: str, *, truncate: bool = True, color: Optional[ColorFunc] = None
    ) -> None:
        self._current.append(_Field(text, truncate, color))

    def end_row(self) -> None:
        if self._current:
            self._rows.append(self._current)
            self._current = []

    def render(self) -> None:
        """Write all collected rows and clear them."""
        self.end_row()
        rows, self._rows = self._rows, []
        if not rows:
            return
        if not self._is_terminal:
            for row in rows:
                write_to_out(self._out, "\t".join(f.text for f in row) + "\n")
            return

        columns = max(len(row) for row in rows)
        natural = [
            max((_display_width(row[c].text) for row in rows if c < len(row)), default=0)
            for c in range(columns)
        ]
        available = self._max_width - len(_COLUMN_GAP) * (columns - 1)
        widths = _fit_widths(natural, available) if self._max_width > 0 else natural

        for row in rows:
            cells = []
            for column, field in enumerate(row):
                text = _truncate(field.text, widths[column]) if field.truncate else field.text
                last = column == len(row) - 1
                padding = 0 if last or "\n" in text else widths[column] - _display_width(text)
                shown = field.color(text) if field.color else text
                cells.append(shown + " " * max(padding, 0))
            write_to_out(self._out, _COLUMN_GAP.join(cells) + "\n")


@dataclass
class CommandConfig:
    """Where a command writes, which client it uses and how it formats output."""

    out: TextIO
    err_out: TextIO
    client: Any
    is_terminal_output: bool = False
    terminal_width: int = 80

    def new_table_printer(self) -> TablePrinter:
        return TablePrinter(self.out, self.is_terminal_output, self.terminal_width)

    def write_to_out(self, message: str) -> None:
        write_to_out(self.out, message)


def config_from_terminal(client: Any) -> CommandConfig:
    """Build a configuration for the process's standard streams."""
    try:
        is_terminal = sys.stdout.isatty()
    except (AttributeError, ValueError):
        is_terminal = False
    width = shutil.get_terminal_size((80, 24)).columns
    return CommandConfig(
        out=sys.stdout,
        err_out=sys.stderr,
        client=client,
        is_terminal_output=is_terminal,
        terminal_width=width,
    )