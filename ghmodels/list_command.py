"""The ``list`` command: show the available chat models."""

from __future__ import annotations

import argparse
from typing import Iterable, Optional, Sequence

from .config import CommandConfig
from .models import ModelSummary, sort_models

DESCRIPTION = (
    "Returns a list of models that are available to use via the CLI.\n"
    "\n"
    'Values from the "MODEL NAME" column can be used as the `[model]`\n'
    "argument in other commands."
)


def filter_to_chat_models(models: Iterable[ModelSummary]) -> list[ModelSummary]:
    """Keep only the models meant for chat completions."""
    return [model for model in models if model.is_chat_model()]


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser of the list command."""
    return argparse.ArgumentParser(
        prog="gh models list",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )


def list_command(config: CommandConfig, argv: Optional[Sequence[str]] = None) -> None:
    """Print a table of the available chat models."""
    build_parser().parse_args(list(argv) if argv is not None else [])

    models = filter_to_chat_models(config.client.list_models())
    sort_models(models)

    if config.is_terminal_output:
        config.write_to_out("\n")
        config.write_to_out(f"Showing {len(models)} available chat models\n")
        config.write_to_out("\n")

    printer = config.new_table_printer()
    printer.add_header(["ID", "DISPLAY NAME"])
    printer.end_row()
    for model in models:
        printer.add_field(model.id)
        printer.add_field(model.friendly_name)
        printer.end_row()
    printer.render()