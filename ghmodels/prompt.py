"""Loading, saving and templating of ``.prompt.yml`` files."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

import yaml

from .messages import ChatCompletionOptions, ChatMessage, ChatMessageRole, ResponseFormat

RESPONSE_FORMATS = ("text", "json_object", "json_schema")


class PromptError(ValueError):
    """A prompt file that cannot be read, validated or written."""


def _as_str(value: Any, name: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    raise PromptError(f"{name} must be a string")


def _as_mapping(value: Any, name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if isinstance(value, Mapping):
        return value
    raise PromptError(f"{name} must be a mapping")


def _as_list(value: Any, name: str) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    raise PromptError(f"{name} must be a list")


def _as_optional_int(value: Any, name: str) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise PromptError(f"{name} must be an integer")
    return value


def _as_optional_float(value: Any, name: str) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise PromptError(f"{name} must be a number")
    return float(value)


@dataclass
class ModelParameters:
    """Model settings stored in a prompt file."""

    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None

    @classmethod
    def _from_dict(cls, data: Any) -> "ModelParameters":
        data = _as_mapping(data, "modelParameters")
        return cls(
            max_tokens=_as_optional_int(data.get("maxTokens"), "maxTokens"),
            temperature=_as_optional_float(data.get("temperature"), "temperature"),
            top_p=_as_optional_float(data.get("topP"), "topP"),
        )

    def _to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.max_tokens is not None:
            data["maxTokens"] = self.max_tokens
        if self.temperature is not None:
            data["temperature"] = self.temperature
        if self.top_p is not None:
            data["topP"] = self.top_p
        return data


@dataclass
class Message:
    """A message of the conversation a prompt file describes."""

    role: str = ""
    content: str = ""

    @classmethod
    def _from_dict(cls, data: Any) -> "Message":
        data = _as_mapping(data, "message")
        return cls(
            role=_as_str(data.get("role"), "role"),
            content=_as_str(data.get("content"), "content"),
        )

    def _to_dict(self) -> dict[str, Any]:
        return {"role": self.role, "content": self.content}


@dataclass
class StringEvaluator:
    """String matching checks on a model response."""

    ends_with: str = ""
    starts_with: str = ""
    contains: str = ""
    equals: str = ""

    _KEYS = (("endsWith", "ends_with"), ("startsWith", "starts_with"),
             ("contains", "contains"), ("equals", "equals"))

    @classmethod
    def _from_dict(cls, data: Any) -> "StringEvaluator":
        data = _as_mapping(data, "string")
        return cls(**{attr: _as_str(data.get(key), key) for key, attr in cls._KEYS})

    def _to_dict(self) -> dict[str, Any]:
        return {key: getattr(self, attr) for key, attr in self._KEYS if getattr(self, attr)}


@dataclass
class Choice:
    """A scoring choice of an LLM evaluator."""

    choice: str = ""
    score: float = 0.0

    @classmethod
    def _from_dict(cls, data: Any) -> "Choice":
        data = _as_mapping(data, "choice")
        score = _as_optional_float(data.get("score"), "score")
        return cls(choice=_as_str(data.get("choice"), "choice"), score=score or 0.0)

    def _to_dict(self) -> dict[str, Any]:
        return {"choice": self.choice, "score": self.score}


@dataclass
class LLMEvaluator:
    """An evaluation that asks a model to grade a response."""

    model_id: str = ""
    prompt: str = ""
    choices: list[Choice] = field(default_factory=list)
    system_prompt: str = ""

    @classmethod
    def _from_dict(cls, data: Any) -> "LLMEvaluator":
        data = _as_mapping(data, "llm")
        return cls(
            model_id=_as_str(data.get("modelId"), "modelId"),
            prompt=_as_str(data.get("prompt"), "prompt"),
            choices=[Choice._from_dict(c) for c in _as_list(data.get("choices"), "choices")],
            system_prompt=_as_str(data.get("systemPrompt"), "systemPrompt"),
        )

    def _to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "modelId": self.model_id,
            "prompt": self.prompt,
            "choices": [choice._to_dict() for choice in self.choices],
        }
        if self.system_prompt:
            data["systemPrompt"] = self.system_prompt
        return data


@dataclass
class Evaluator:
    """One evaluation method of a prompt file."""

    name: str = ""
    string: Optional[StringEvaluator] = None
    llm: Optional[LLMEvaluator] = None
    uses: str = ""

    @classmethod
    def _from_dict(cls, data: Any) -> "Evaluator":
        data = _as_mapping(data, "evaluator")
        string = data.get("string")
        llm = data.get("llm")
        return cls(
            name=_as_str(data.get("name"), "name"),
            string=None if string is None else StringEvaluator._from_dict(string),
            llm=None if llm is None else LLMEvaluator._from_dict(llm),
            uses=_as_str(data.get("uses"), "uses"),
        )

    def _to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name}
        if self.string is not None:
            data["string"] = self.string._to_dict()
        if self.llm is not None:
            data["llm"] = self.llm._to_dict()
        if self.uses:
            data["uses"] = self.uses
        return data


@dataclass
class JsonSchema:
    """A JSON schema for structured responses, kept as text and parsed."""

    raw: str
    parsed: dict[str, Any]


def parse_json_schema(raw: Any) -> JsonSchema:
    """Parse the JSON text of a ``jsonSchema`` entry."""
    if not isinstance(raw, str):
        raise PromptError("jsonSchema must be a JSON string")
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as err:
        raise PromptError(f"invalid JSON in jsonSchema: {err}") from err
    if parsed is None:
        parsed = {}
    if not isinstance(parsed, dict):
        raise PromptError("invalid JSON in jsonSchema: expected an object")
    return JsonSchema(raw=raw, parsed=parsed)


@dataclass
class PromptFile:
    """The contents of a ``.prompt.yml`` file."""

    name: str = ""
    description: str = ""
    model: str = ""
    model_parameters: ModelParameters = field(default_factory=ModelParameters)
    response_format: Optional[str] = None
    json_schema: Optional[JsonSchema] = None
    messages: list[Message] = field(default_factory=list)
    test_data: list[dict[str, Any]] = field(default_factory=list)
    evaluators: list[Evaluator] = field(default_factory=list)

    @classmethod
    def _from_dict(cls, data: Any) -> "PromptFile":
        data = _as_mapping(data, "prompt file")
        response_format = data.get("responseFormat")
        schema = data.get("jsonSchema")
        return cls(
            name=_as_str(data.get("name"), "name"),
            description=_as_str(data.get("description"), "description"),
            model=_as_str(data.get("model"), "model"),
            model_parameters=ModelParameters._from_dict(data.get("modelParameters")),
            response_format=(
                None if response_format is None
                else _as_str(response_format, "responseFormat")
            ),
            json_schema=None if schema is None else parse_json_schema(schema),
            messages=[Message._from_dict(m) for m in _as_list(data.get("messages"), "messages")],
            test_data=[
                dict(_as_mapping(item, "testData item"))
                for item in _as_list(data.get("testData"), "testData")
            ],
            evaluators=[
                Evaluator._from_dict(e) for e in _as_list(data.get("evaluators"), "evaluators")
            ],
        )

    def _validate_response_format(self) -> None:
        if self.response_format is None:
            return
        if self.response_format not in RESPONSE_FORMATS:
            raise PromptError(
                f"invalid responseFormat: {self.response_format}. "
                "Must be 'text', 'json_object', or 'json_schema'"
            )
        if self.response_format == "json_schema":
            if self.json_schema is None:
                raise PromptError("jsonSchema is required when responseFormat is 'json_schema'")
            if "name" not in self.json_schema.parsed:
                raise PromptError("jsonSchema must contain 'name' field")
            if "schema" not in self.json_schema.parsed:
                raise PromptError("jsonSchema must contain 'schema' field")

    def to_dict(self) -> dict[str, Any]:
        """Return the YAML document structure, leaving out empty optional parts."""
        data: dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "model": self.model,
        }
        parameters = self.model_parameters._to_dict()
        if parameters:
            data["modelParameters"] = parameters
        if self.response_format is not None:
            data["responseFormat"] = self.response_format
        if self.json_schema is not None:
            data["jsonSchema"] = self.json_schema.raw
        data["messages"] = [message._to_dict() for message in self.messages]
        if self.test_data:
            data["testData"] = [dict(item) for item in self.test_data]
        if self.evaluators:
            data["evaluators"] = [evaluator._to_dict() for evaluator in self.evaluators]
        return data

    def save_to_file(self, path: str | Path) -> None:
        """Write the prompt file as YAML."""
        try:
            text = yaml.safe_dump(self.to_dict(), sort_keys=False, allow_unicode=True)
        except yaml.YAMLError as err:
            raise PromptError(f"failed to marshal prompt file: {err}") from err
        try:
            Path(path).write_text(text, encoding="utf-8")
        except OSError as err:
            raise PromptError(f"failed to write prompt file: {err}") from err

    def build_chat_completion_options(
        self, messages: Sequence[ChatMessage]
    ) -> ChatCompletionOptions:
        """Build a request with this file's model, parameters and response format."""
        request = ChatCompletionOptions(
            messages=list(messages),
            model=self.model,
            stream=False,
            max_tokens=self.model_parameters.max_tokens,
            temperature=self.model_parameters.temperature,
            top_p=self.model_parameters.top_p,
        )
        if self.response_format is not None:
            request.response_format = ResponseFormat(
                type=self.response_format,
                json_schema=None if self.json_schema is None else self.json_schema.parsed,
            )
        return request


def parse_prompt(text: str) -> PromptFile:
    """Parse and validate the YAML text of a prompt file."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as err:
        raise PromptError(str(err)) from err
    prompt = PromptFile._from_dict(data)
    prompt._validate_response_format()
    return prompt


def load_from_file(path: str | Path) -> PromptFile:
    """Read and parse a prompt file; OSError propagates if it cannot be read."""
    return parse_prompt(Path(path).read_text(encoding="utf-8"))


def _format_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "<nil>"
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return str(value)


def template_string(template: str, data: Any) -> str:
    """Replace each ``{{key}}`` with the value of ``key`` in ``data``.

    Placeholders without a value are left alone; non-mapping data leaves
    the template unchanged.
    """
    if not isinstance(data, Mapping):
        return template
    result = template
    for key, value in data.items():
        result = result.replace("{{" + str(key) + "}}", _format_value(value))
    return result


def get_chat_message_role(role: str) -> ChatMessageRole:
    """Return the chat role named by ``role``, ignoring case."""
    try:
        return ChatMessageRole(role.lower())
    except ValueError:
        raise PromptError(f"unknown message role: {role}") from None