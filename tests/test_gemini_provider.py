from types import SimpleNamespace

import pytest

pytest.importorskip("google.genai")

from LLM_API import LLMAuthenticationError, LLMError, LLMRequestError
from LLM_API.data_classes import ImageGenerationRequest, StructuredOutputRequest
from LLM_API.providers import gemini
from LLM_API.providers.gemini import GeminiModel


class _FakeModels:
    def __init__(self, *, content=None, images=None, exc=None):
        self.content = content
        self.images = images
        self.exc = exc
        self.calls = []

    def generate_content(self, **kwargs):
        self.calls.append(("generate_content", kwargs))
        if self.exc is not None:
            raise self.exc
        return self.content

    def generate_images(self, **kwargs):
        self.calls.append(("generate_images", kwargs))
        if self.exc is not None:
            raise self.exc
        return self.images


def _model(monkeypatch, models):
    created = {}

    def fake_client(**kwargs):
        created.update(kwargs)
        return SimpleNamespace(models=models)

    monkeypatch.setattr(gemini.genai, "Client", fake_client)
    model = GeminiModel(api_key="test-key", timeout_seconds=2.5)
    return model, created


def test_client_receives_key_and_timeout(monkeypatch):
    _, created = _model(monkeypatch, _FakeModels())

    assert created["api_key"] == "test-key"
    assert created["http_options"].timeout == 2500


def test_missing_api_key_raises(monkeypatch):
    monkeypatch.setattr(gemini, "load_dotenv", lambda: None)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("API_KEY", raising=False)

    with pytest.raises(LLMAuthenticationError):
        GeminiModel()


def test_structured_output_falls_back_to_text_json(monkeypatch):
    models = _FakeModels(content=SimpleNamespace(text='["a", "b"]', parsed=None))
    model, _ = _model(monkeypatch, models)

    response = model.generate_structured_output(
        StructuredOutputRequest(
            prompt="List two letters",
            system_instruction="Be brief",
            schema={"type": "ARRAY", "items": {"type": "STRING"}},
        )
    )

    assert response.success
    assert response.parsed_output == ["a", "b"]
    _, kwargs = models.calls[0]
    assert kwargs["model"] == "gemini-2.5-flash"
    assert kwargs["config"].response_mime_type == "application/json"
    assert kwargs["config"].system_instruction == "Be brief"


def test_structured_output_reports_invalid_json(monkeypatch):
    model, _ = _model(monkeypatch, _FakeModels(content=SimpleNamespace(text="oops", parsed=None)))

    response = model.generate_structured_output(
        StructuredOutputRequest(prompt="x", schema={"type": "STRING"})
    )

    assert not response.success
    assert response.error is None
    assert "not valid JSON" in response.validation_error


def test_structured_output_error_is_returned_not_raised(monkeypatch):
    model, _ = _model(monkeypatch, _FakeModels(exc=RuntimeError("503 unavailable")))

    response = model.generate_structured_output(
        StructuredOutputRequest(prompt="x", schema={"type": "STRING"})
    )

    assert "503 unavailable" in response.error


def test_generate_image_collects_bytes(monkeypatch):
    generated = SimpleNamespace(
        generated_images=[
            SimpleNamespace(image=SimpleNamespace(image_bytes=b"jpeg-bytes")),
            SimpleNamespace(image=None),
        ]
    )
    models = _FakeModels(images=generated)
    model, _ = _model(monkeypatch, models)

    response = model.generate_image(ImageGenerationRequest(prompt="A roof"))

    assert response.images == [b"jpeg-bytes"]
    assert response.mime_type == "image/jpeg"
    _, kwargs = models.calls[0]
    assert kwargs["model"] == "imagen-4.0-generate-001"
    assert kwargs["config"].number_of_images == 1
    assert kwargs["config"].aspect_ratio == "16:9"


def test_missing_key_error_names_the_provider(monkeypatch):
    monkeypatch.setattr(gemini, "load_dotenv", lambda: None)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("API_KEY", raising=False)

    with pytest.raises(LLMAuthenticationError) as excinfo:
        GeminiModel()

    assert excinfo.value.error_type == "missing_api_key"
    assert str(excinfo.value).startswith("Gemini: API key required")


def test_blank_prompt_is_rejected_without_calling_the_api(monkeypatch):
    models = _FakeModels()
    model, _ = _model(monkeypatch, models)

    response = model.generate_image(ImageGenerationRequest(prompt="   "))

    assert not response.has_images
    assert "Request must have a prompt" in response.error
    assert models.calls == []


def test_too_many_images_is_a_request_error(monkeypatch):
    model, _ = _model(monkeypatch, _FakeModels())

    with pytest.raises(LLMRequestError) as excinfo:
        model._validate_request(ImageGenerationRequest(prompt="roof", number_of_images=5))

    assert excinfo.value.error_type == "too_many_images"


def test_describe_names_both_models(monkeypatch):
    model, _ = _model(monkeypatch, _FakeModels())

    assert model.describe() == "Gemini · gemini-2.5-flash + imagen-4.0-generate-001"
    assert model.supports_images


def test_error_without_provider_prints_message_only():
    assert str(LLMError("boom")) == "boom"
