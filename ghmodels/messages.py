"""Request and response shapes for chat completions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class ChatMessageRole(str, Enum):
    """The author of a chat message."""

    ASSISTANT = "assistant"
    SYSTEM = "system"
    USER = "user"


@dataclass
class ChatMessage:
    """A message in a chat thread."""

    role: ChatMessageRole
    content: Optional[str] = None

    def __post_init__(self) -> None:
        self.role = ChatMessageRole(self.role)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.content is not None:
            data["content"] = self.content
        data["role"] = self.role.value
        return data


@dataclass
class ResponseFormat:
    """The requested format of the model's response."""

    type: str
    json_schema: Optional[dict[str, Any]] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.type}
        if self.json_schema is not None:
            data["json_schema"] = self.json_schema
        return data


@dataclass
class ChatCompletionOptions:
    """Options of a chat completion request."""

    messages: list[ChatMessage] = field(default_factory=list)
    model: str = ""
    max_tokens: Optional[int] = None
    stream: bool = False
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    response_format: Optional[ResponseFormat] = None

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON body, leaving out unset optional fields."""
        data: dict[str, Any] = {}
        if self.max_tokens is not None:
            data["max_tokens"] = self.max_tokens
        data["messages"] = [message.to_dict() for message in self.messages]
        data["model"] = self.model
        if self.stream:
            data["stream"] = True
        if self.temperature is not None:
            data["temperature"] = self.temperature
        if self.top_p is not None:
            data["top_p"] = self.top_p
        if self.response_format is not None:
            data["response_format"] = self.response_format.to_dict()
        return data


@dataclass
class ChatChoiceMessage:
    """The content of a choice, either a whole message or a streamed delta."""

    content: Optional[str] = None
    role: Optional[str] = None

    @classmethod
    def _from_dict(cls, data: Optional[dict[str, Any]]) -> Optional["ChatChoiceMessage"]:
        if data is None:
            return None
        return cls(content=data.get("content"), role=data.get("role"))


@dataclass
class ChatChoice:
    """One choice in a chat completion."""

    delta: Optional[ChatChoiceMessage] = None
    finish_reason: str = ""
    index: int = 0
    message: Optional[ChatChoiceMessage] = None

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "ChatChoice":
        return ChatChoice(
            delta=ChatChoiceMessage._from_dict(data.get("delta")),
            finish_reason=data.get("finish_reason") or "",
            index=int(data.get("index") or 0),
            message=ChatChoiceMessage._from_dict(data.get("message")),
        )


@dataclass
class ChatCompletion:
    """A chat completion, or one chunk of a streamed one."""

    choices: list[ChatChoice] = field(default_factory=list)

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "ChatCompletion":
        return ChatCompletion(
            choices=[ChatChoice.from_dict(choice) for choice in data.get("choices") or []]
        )


@dataclass
class ChatCompletionResponse:
    """A response whose reader yields ChatCompletion events."""

    reader: Any