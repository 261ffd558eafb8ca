"""The ``view`` command: show details about one model."""

from __future__ import annotations

import argparse
import re
import textwrap
from typing import Iterable, Optional, Sequence

from .config import CommandConfig
from .models import ModelDetails, ModelSummary, sort_models
from .util import select_option

DESCRIPTION = (
    "Returns details about the specified model.\n"
    "\n"
    "Use `gh models view` to run in interactive mode. It will provide a list of the current\n"
    "models and allow you to select the one you want information about.\n"
    "\n"
    "If you know which model you want information for, you can run the request "
    "in a single command\n"
    "as `gh models view [model]`"
)

EXAMPLES = "examples:\n  gh models view openai/gpt-4.1\n"


def _label_style(text: str) -> str:
    return f"\x1b[2;4;37m{text}\x1b[0m"


def _render_text(text: str, width: int) -> str:
    """Wrap each line of ``text`` to ``width`` columns, keeping line breaks."""
    text = text.strip()
    if width <= 0:
        return text
    lines = []
    for line in text.splitlines():
        if not line.strip():
            lines.append("")
            continue
        indent = re.match(r"\s*", line).group(0)
        lines.append(
            textwrap.fill(
                line.strip(),
                width,
                initial_indent=indent,
                subsequent_indent=indent,
                break_on_hyphens=False,
            )
        )
    return "\n".join(lines)


class ModelPrinter:
    """Prints the summary and details of a model as a labelled table."""

    def __init__(
        self,
        summary: Optional[ModelSummary],
        details: Optional[ModelDetails],
        config: CommandConfig,
    ) -> None:
        self._summary = summary
        self._details = details
        self._printer = config.new_table_printer()
        self._terminal_width = config.terminal_width

    def render(self) -> None:
        """Write every non-empty field of the model."""
        summary = self._summary
        if summary is not None:
            self._line("Display name:", summary.friendly_name)
            self._line("Model name:", summary.name)
            self._line("Publisher:", summary.publisher)
            self._line("Summary:", summary.summary)

        details = self._details
        if details is not None:
            self._line("Context:", details.context_limits())
            self._line("Rate limit tier:", details.rate_limit_tier)
            self._list("Tags:", details.tags)
            self._list("Supported input types:", details.supported_input_modalities)
            self._list("Supported output types:", details.supported_output_modalities)
            self._multi_line("Supported languages:", ", ".join(details.supported_languages))
            self._line("License:", details.license)
            self._multi_line("License description:", details.license_description)
            self._multi_line("Description:", details.description)
            self._multi_line("Notes:", details.notes)
            self._multi_line("Evaluation:", details.evaluation)

        self._printer.render()

    def _label(self, label: str) -> None:
        self._printer.add_field(label, truncate=False, color=_label_style)

    def _line(self, label: str, value: str) -> None:
        if not value:
            return
        self._label(label)
        self._printer.add_field(value.strip())
        self._printer.end_row()

    def _list(self, label: str, values: Iterable[str]) -> None:
        self._line(label, ", ".join(values))

    def _multi_line(self, label: str, value: str) -> None:
        if not value:
            return
        self._label(label)
        self._printer.add_field(_render_text(value, self._terminal_width), truncate=False)
        self._printer.end_row()


def get_model_by_name(model_name: str, models: Iterable[ModelSummary]) -> ModelSummary:
    """Return the model called ``model_name``, ignoring case, or raise ValueError."""
    for model in models:
        if model.has_name(model_name):
            return model
    raise ValueError(f"the specified model name is not supported: {model_name}")


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser of the view command."""
    parser = argparse.ArgumentParser(
        prog="gh models view",
        usage="gh models view [model] [flags]",
        description=DESCRIPTION,
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("args", nargs="*", metavar="[model]")
    return parser


def view_command(config: CommandConfig, argv: Optional[Sequence[str]] = None) -> None:
    """Print the details of a model, asking for one when none is named."""
    options = build_parser().parse_args(list(argv) if argv is not None else [])
    client = config.client

    models = list(client.list_models())
    sort_models(models)

    if options.args:
        model_name = options.args[0]
    else:
        choices = [model.id for model in models if model.is_chat_model()]
        model_name = select_option("Select a model:", choices, out=config.out)

    summary = get_model_by_name(model_name, models)
    details = client.get_model_details(summary.registry, summary.name, summary.version)
    ModelPrinter(summary, details, config).render()