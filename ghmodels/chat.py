"""Model parameters, conversations and model-name checks for chat runs."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Iterable, Optional

from .messages import ChatCompletionOptions, ChatMessage, ChatMessageRole
from .modelkey import parse_model_key
from .models import ModelSummary

PARAMETER_NAMES = ("max-tokens", "temperature", "top-p")
NOT_SET = "<not set>"
CUSTOM_PROVIDER = "custom"

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_HEX_FLOAT_PATTERN = re.compile(r"[+-]?0[xX][0-9a-fA-F.]+([pP][+-]?[0-9]+)?")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


def _parse_int(text: str) -> int:
    """Parse a decimal integer as strictly as a 64-bit integer flag."""
    if not _INT_PATTERN.fullmatch(text):
        raise ValueError(f'strconv.Atoi: parsing "{text}": invalid syntax')
    value = int(text)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ValueError(f'strconv.Atoi: parsing "{text}": value out of range')
    return value


def _parse_float(text: str) -> float:
    """Parse a floating point number, rejecting padding and separators."""
    error = ValueError(f'strconv.ParseFloat: parsing "{text}": invalid syntax')
    if not text or text != text.strip() or "_" in text:
        raise error
    try:
        if _HEX_FLOAT_PATTERN.fullmatch(text):
            value = float.fromhex(text)
        else:
            value = float(text)
    except (ValueError, OverflowError):
        raise error from None
    if math.isinf(value) and "inf" not in text.lower():
        raise ValueError(f'strconv.ParseFloat: parsing "{text}": value out of range')
    return value


@dataclass
class ModelParameters:
    """The tunable parameters of a model run."""

    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None

    def format_parameter(self, name: str) -> str:
        """Return the value of the named parameter for display."""
        if name == "max-tokens" and self.max_tokens is not None:
            return str(self.max_tokens)
        if name == "temperature" and self.temperature is not None:
            return f"{self.temperature:f}"
        if name == "top-p" and self.top_p is not None:
            return f"{self.top_p:f}"
        return NOT_SET

    def populate(self, max_tokens: str = "", temperature: str = "", top_p: str = "") -> None:
        """Set the parameters given as non-empty flag strings."""
        if max_tokens:
            self.max_tokens = _parse_int(max_tokens)
        if temperature:
            self.temperature = _parse_float(temperature)
        if top_p:
            self.top_p = _parse_float(top_p)

    def set_parameter_by_name(self, name: str, value: str) -> None:
        """Set one parameter from its flag name and string value."""
        if name == "max-tokens":
            self.max_tokens = _parse_int(value)
        elif name == "temperature":
            self.temperature = _parse_float(value)
        elif name == "top-p":
            self.top_p = _parse_float(value)
        else:
            raise ValueError(
                f"unknown parameter '{name}'. "
                "Supported parameters: max-tokens, temperature, top-p"
            )

    def update_request(self, request: ChatCompletionOptions) -> None:
        """Copy these parameters onto a request, unset ones included."""
        request.max_tokens = self.max_tokens
        request.temperature = self.temperature
        request.top_p = self.top_p


class Conversation:
    """The exchange between the user and the model, with an optional system prompt."""

    def __init__(self, system_prompt: str = "") -> None:
        self.system_prompt = system_prompt
        self._messages: list[ChatMessage] = []

    def add_message(self, role: ChatMessageRole | str, content: str) -> None:
        self._messages.append(ChatMessage(role=ChatMessageRole(role), content=content))

    def messages(self) -> list[ChatMessage]:
        """Return the messages, preceded by the system prompt when one is set."""
        result: list[ChatMessage] = []
        if self.system_prompt:
            result.append(ChatMessage(role=ChatMessageRole.SYSTEM, content=self.system_prompt))
        result.extend(self._messages)
        return result

    def reset(self) -> None:
        """Forget all messages; the system prompt stays."""
        self._messages = []


def validate_model_name(model_name: str, models: Iterable[ModelSummary]) -> str:
    """Return the canonical name of a known model, or raise ValueError.

    Models of the custom provider are accepted without looking them up.
    """
    no_match = (
        f"The specified model '{model_name}' is not found. Run 'gh models list' "
        "to see available models or 'gh models run' to select interactively."
    )
    if not model_name:
        raise ValueError(no_match)

    try:
        key = parse_model_key(model_name)
    except ValueError as err:
        raise ValueError(f"invalid model format: {err}") from err

    expected = str(key)
    if key.provider == CUSTOM_PROVIDER:
        return expected

    if not any(model.has_name(expected) for model in models):
        raise ValueError(no_match)
    return expected