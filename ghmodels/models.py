"""Summaries and details of the models offered by the service."""

from __future__ import annotations

from dataclasses import dataclass, field

CHAT_COMPLETION_TASK = "chat-completion"

FEATURED_MODEL_NAMES: tuple[str, ...] = ()


@dataclass
class ModelSummary:
    """Basic information about a model."""

    id: str = ""
    name: str = ""
    registry: str = ""
    friendly_name: str = ""
    task: str = ""
    publisher: str = ""
    summary: str = ""
    version: str = ""

    def is_chat_model(self) -> bool:
        return self.task == CHAT_COMPLETION_TASK

    def has_name(self, name: str) -> bool:
        """Compare the model's ID with ``name`` without regard to case."""
        return self.id.casefold() == name.casefold()


@dataclass
class ModelDetails:
    """Detailed information about a model."""

    description: str = ""
    evaluation: str = ""
    license: str = ""
    license_description: str = ""
    notes: str = ""
    tags: list[str] = field(default_factory=list)
    supported_input_modalities: list[str] = field(default_factory=list)
    supported_output_modalities: list[str] = field(default_factory=list)
    supported_languages: list[str] = field(default_factory=list)
    max_output_tokens: int = 0
    max_input_tokens: int = 0
    rate_limit_tier: str = ""

    def context_limits(self) -> str:
        return (
            f"up to {self.max_input_tokens} input tokens and "
            f"{self.max_output_tokens} output tokens"
        )


def sort_models(models: list[ModelSummary]) -> None:
    """Sort in place: featured models first, then by lowercase publisher/name."""
    models.sort(
        key=lambda model: (
            model.name not in FEATURED_MODEL_NAMES,
            f"{model.publisher}/{model.name}".lower(),
        )
    )