"""Parsing and formatting of model identifiers such as ``publisher/model``."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_PROVIDER = "azureml"


@dataclass(frozen=True)
class ModelKey:
    """A model identifier split into provider, publisher and model name."""

    provider: str
    publisher: str
    model_name: str

    def __str__(self) -> str:
        provider = _format_part(self.provider)
        publisher = _format_part(self.publisher)
        model_name = _format_part(self.model_name)
        if provider == DEFAULT_PROVIDER:
            return f"{publisher}/{model_name}"
        return f"{provider}/{publisher}/{model_name}"


def _format_part(part: str) -> str:
    return part.lower().replace(" ", "-")


def parse_model_key(model_key: str) -> ModelKey:
    """Parse ``publisher/model`` or ``provider/publisher/model``.

    Raises ValueError when the key does not have one of those shapes.
    """
    error = ValueError(f"invalid model key format: {model_key}")
    if not model_key:
        raise error

    parts = model_key.split("/")
    if any(not part for part in parts):
        raise error

    if len(parts) == 2:
        publisher, model_name = parts
        return ModelKey(DEFAULT_PROVIDER, publisher, model_name)
    if len(parts) == 3:
        provider, publisher, model_name = parts
        return ModelKey(provider, publisher, model_name)
    raise error


def format_identifier(provider: str, publisher: str, name: str) -> str:
    """Return the canonical string form of a model identifier."""
    return str(ModelKey(provider, publisher, name))