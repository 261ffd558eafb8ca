import json

import pytest

from ghmodels.messages import ChatMessage, ChatMessageRole
from ghmodels.prompt import (
    JsonSchema,
    PromptError,
    PromptFile,
    get_chat_message_role,
    load_from_file,
    parse_json_schema,
    parse_prompt,
    template_string,
)

FULL_PROMPT = """
name: Test Prompt
description: A test prompt file
model: openai/gpt-4o
modelParameters:
  temperature: 0.5
  maxTokens: 100
messages:
  - role: system
    content: You are a helpful assistant.
  - role: user
    content: "Hello {{name}}"
testData:
  - name: "Alice"
  - name: "Bob"
evaluators:
  - name: contains-greeting
    string:
      contains: "hello"
"""

SCHEMA_PROMPT = """
name: JSON Schema String Format Test
description: Test with JSON schema as JSON string
model: openai/gpt-4o
responseFormat: json_schema
jsonSchema: |-
  {
    "name": "describe_animal",
    "strict": true,
    "schema": {
      "type": "object",
      "properties": {
        "name": {
          "type": "string",
          "description": "The name of the animal"
        },
        "habitat": {
          "type": "string",
          "description": "The habitat the animal lives in"
        }
      },
      "additionalProperties": false,
      "required": [
        "name",
        "habitat"
      ]
    }
  }
messages:
  - role: user
    content: "Hello"
"""


def _write(tmp_path, body, name="test.prompt.yml"):
    path = tmp_path / name
    path.write_text(body, encoding="utf-8")
    return path


def test_loads_and_parses_prompt_file(tmp_path):
    prompt = load_from_file(_write(tmp_path, FULL_PROMPT))
    assert prompt.name == "Test Prompt"
    assert prompt.description == "A test prompt file"
    assert prompt.model == "openai/gpt-4o"
    assert prompt.model_parameters.temperature == 0.5
    assert prompt.model_parameters.max_tokens == 100
    assert len(prompt.messages) == 2
    assert prompt.messages[0].role == "system"
    assert prompt.messages[0].content == "You are a helpful assistant."
    assert prompt.messages[1].role == "user"
    assert prompt.messages[1].content == "Hello {{name}}"
    assert len(prompt.test_data) == 2
    assert prompt.test_data[0]["name"] == "Alice"
    assert prompt.test_data[1]["name"] == "Bob"
    assert len(prompt.evaluators) == 1
    assert prompt.evaluators[0].name == "contains-greeting"
    assert prompt.evaluators[0].string.contains == "hello"


def test_templates_messages_correctly():
    result = template_string(
        "Hello {{name}}, you are {{age}} years old", {"name": "World", "age": 25}
    )
    assert result == "Hello World, you are 25 years old"


def test_handles_missing_template_variables():
    result = template_string(
        "Hello {{name}}, you are {{missing}} years old", {"name": "World"}
    )
    assert result == "Hello World, you are {{missing}} years old"


def test_template_with_non_mapping_data_is_unchanged():
    assert template_string("Hello {{name}}", ["World"]) == "Hello {{name}}"


def test_template_formats_booleans_in_lowercase():
    assert template_string("{{flag}}", {"flag": True}) == "true"


def test_handles_file_not_found():
    with pytest.raises(FileNotFoundError):
        load_from_file("/nonexistent/file.yml")


def test_handles_invalid_yaml(tmp_path):
    path = _write(tmp_path, "invalid: yaml: content: [", "invalid.prompt.yml")
    with pytest.raises(PromptError):
        load_from_file(path)


@pytest.mark.parametrize("response_format", ["text", "json_object"])
def test_loads_simple_response_formats(tmp_path, response_format):
    body = f"""
name: Response Format Test
model: openai/gpt-4o
responseFormat: {response_format}
messages:
  - role: user
    content: "Hello"
"""
    prompt = load_from_file(_write(tmp_path, body))
    assert prompt.response_format == response_format
    assert prompt.json_schema is None


def test_loads_json_schema_from_json_string(tmp_path):
    prompt = load_from_file(_write(tmp_path, SCHEMA_PROMPT))
    assert prompt.response_format == "json_schema"
    schema = prompt.json_schema.parsed
    assert schema["name"] == "describe_animal"
    assert schema["strict"] is True
    nested = schema["schema"]
    assert nested["type"] == "object"
    assert set(nested["properties"]) == {"name", "habitat"}
    assert "name" in nested["required"]
    assert "habitat" in nested["required"]


def test_validates_invalid_response_format():
    body = """
name: Invalid Response Format Test
model: openai/gpt-4o
responseFormat: invalid_format
messages:
  - role: user
    content: "Hello"
"""
    with pytest.raises(PromptError, match="invalid responseFormat: invalid_format"):
        parse_prompt(body)


def test_json_schema_format_requires_json_schema():
    body = """
name: JSON Schema Missing Test
model: openai/gpt-4o
responseFormat: json_schema
messages:
  - role: user
    content: "Hello"
"""
    with pytest.raises(
        PromptError, match="jsonSchema is required when responseFormat is 'json_schema'"
    ):
        parse_prompt(body)


def test_json_schema_must_contain_name_and_schema():
    body = (
        "model: a/b\nresponseFormat: json_schema\n"
        "jsonSchema: '{\"schema\": {}}'\nmessages: []\n"
    )
    with pytest.raises(PromptError, match="jsonSchema must contain 'name' field"):
        parse_prompt(body)


def test_json_schema_must_be_a_string():
    with pytest.raises(PromptError, match="jsonSchema must be a JSON string"):
        parse_json_schema({"name": "x"})


def test_json_schema_rejects_invalid_json():
    with pytest.raises(PromptError, match="invalid JSON in jsonSchema"):
        parse_json_schema("{not json")


def test_build_chat_completion_options_includes_response_format():
    raw = json.dumps(
        {
            "name": "test_schema",
            "strict": True,
            "schema": {
                "type": "object",
                "properties": {"name": {"type": "string", "description": "The name"}},
                "required": ["name"],
            },
        }
    )
    prompt = PromptFile(
        model="openai/gpt-4o",
        response_format="json_schema",
        json_schema=JsonSchema(raw=raw, parsed=json.loads(raw)),
    )
    messages = [ChatMessage(role=ChatMessageRole.USER, content="Hello")]
    options = prompt.build_chat_completion_options(messages)
    assert options.response_format.type == "json_schema"
    schema = options.response_format.json_schema
    assert schema["name"] == "test_schema"
    assert schema["strict"] is True
    assert schema["schema"]["type"] == "object"
    assert "properties" in schema["schema"]
    assert options.model == "openai/gpt-4o"
    assert options.stream is False
    assert options.messages == messages


def test_build_chat_completion_options_copies_parameters(tmp_path):
    prompt = load_from_file(_write(tmp_path, FULL_PROMPT))
    options = prompt.build_chat_completion_options([])
    assert options.max_tokens == 100
    assert options.temperature == 0.5
    assert options.top_p is None
    assert options.response_format is None


def test_save_and_load_round_trip(tmp_path):
    original = load_from_file(_write(tmp_path, FULL_PROMPT))
    target = tmp_path / "saved.prompt.yml"
    original.save_to_file(target)
    assert load_from_file(target) == original


def test_save_and_load_round_trip_with_schema(tmp_path):
    original = load_from_file(_write(tmp_path, SCHEMA_PROMPT))
    target = tmp_path / "saved.prompt.yml"
    original.save_to_file(target)
    assert load_from_file(target) == original


def test_to_dict_leaves_out_empty_optional_parts():
    data = PromptFile(name="n", model="a/b").to_dict()
    assert data == {"name": "n", "description": "", "model": "a/b", "messages": []}


@pytest.mark.parametrize(
    "role, expected",
    [
        ("system", ChatMessageRole.SYSTEM),
        ("User", ChatMessageRole.USER),
        ("ASSISTANT", ChatMessageRole.ASSISTANT),
    ],
)
def test_get_chat_message_role(role, expected):
    assert get_chat_message_role(role) is expected


def test_get_chat_message_role_unknown():
    with pytest.raises(PromptError, match="unknown message role: tool"):
        get_chat_message_role("tool")