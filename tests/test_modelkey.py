import pytest

from ghmodels.modelkey import ModelKey, format_identifier, parse_model_key


@pytest.mark.parametrize(
    "text, provider, publisher, model_name",
    [
        ("custom/openai/gpt-4", "custom", "openai", "gpt-4"),
        ("openai/gpt-4", "azureml", "openai", "gpt-4"),
        ("azureml/microsoft/phi-3", "azureml", "microsoft", "phi-3"),
        ("cohere/command-r-plus", "azureml", "cohere", "command-r-plus"),
        ("ai21/jamba_instruct", "azureml", "ai21", "jamba_instruct"),
    ],
)
def test_parse_valid(text, provider, publisher, model_name):
    key = parse_model_key(text)
    assert key.provider == provider
    assert key.publisher == publisher
    assert key.model_name == model_name


@pytest.mark.parametrize(
    "text",
    ["gpt-4", "provider/publisher/model/extra", "", "//", "provider//model"],
)
def test_parse_invalid(text):
    with pytest.raises(ValueError, match="invalid model key format"):
        parse_model_key(text)


@pytest.mark.parametrize(
    "key, expected",
    [
        (ModelKey("azureml", "openai", "gpt-4"), "openai/gpt-4"),
        (ModelKey("custom", "microsoft", "phi-3"), "custom/microsoft/phi-3"),
        (ModelKey("azureml", "cohere", "command-r-plus"), "cohere/command-r-plus"),
        (ModelKey("azureml", "ai21", "jamba_instruct"), "ai21/jamba_instruct"),
        (
            ModelKey("custom-provider", "test-publisher", "test-model"),
            "custom-provider/test-publisher/test-model",
        ),
        (ModelKey("azureml", "Open AI", "GPT 4"), "open-ai/gpt-4"),
        (
            ModelKey("Custom Provider", "Test Publisher", "Test Model Name"),
            "custom-provider/test-publisher/test-model-name",
        ),
        (
            ModelKey("azureml", "Microsoft Corporation", "Phi 3 Mini Instruct"),
            "microsoft-corporation/phi-3-mini-instruct",
        ),
    ],
)
def test_string_form(key, expected):
    assert str(key) == expected


def test_format_identifier_matches_string_form():
    assert format_identifier("azureml", "Open AI", "GPT 4") == "open-ai/gpt-4"
    assert format_identifier("custom", "microsoft", "phi-3") == "custom/microsoft/phi-3"


def test_parse_then_format_round_trip():
    assert str(parse_model_key("custom/openai/gpt-4")) == "custom/openai/gpt-4"
    assert str(parse_model_key("azureml/openai/gpt-4")) == "openai/gpt-4"