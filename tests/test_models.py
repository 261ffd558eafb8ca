from ghmodels.models import ModelDetails, ModelSummary, sort_models


def test_context_limits():
    details = ModelDetails(max_input_tokens=123, max_output_tokens=456)
    assert details.context_limits() == "up to 123 input tokens and 456 output tokens"


def test_is_chat_model():
    assert not ModelSummary(task="embeddings").is_chat_model()
    assert ModelSummary(task="chat-completion").is_chat_model()
    assert not ModelSummary(task="something-else").is_chat_model()


def test_has_name():
    model = ModelSummary(id="bar/foo123", name="foo123", publisher="bar")
    assert model.has_name(model.id)
    assert model.has_name("BaR/foO123")
    assert not model.has_name("completely different value")
    assert not model.has_name("foo")
    assert not model.has_name("bar")


def test_sort_models_in_place_by_publisher_and_name():
    model_a = ModelSummary(id="a/z", publisher="a", name="z", friendly_name="z")
    model_b = ModelSummary(id="a/Y", publisher="a", name="Y", friendly_name="Y")
    model_c = ModelSummary(id="b/x", publisher="b", name="x", friendly_name="x")
    models = [model_c, model_b, model_a]

    sort_models(models)

    assert len(models) == 3
    assert [m.name for m in models] == ["Y", "z", "x"]


def test_sort_models_empty_list():
    models = []
    sort_models(models)
    assert models == []