"""
LLM client tests (OpenRouter cascade and Gemini fallback).
"""
from dataclasses import replace
from unittest.mock import MagicMock

import pytest

from medassist.core.exceptions import LLMError
from medassist.llm.client import LLMClient, audio_part, image_part, text_part


def ok_response(content: str) -> MagicMock:
    response = MagicMock()
    response.ok = True
    response.status_code = 200
    response.json.return_value = {"choices": [{"message": {"role": "assistant", "content": content}}]}
    return response


def error_response(status: int = 429, text: str = "rate limited") -> MagicMock:
    response = MagicMock()
    response.ok = False
    response.status_code = status
    response.text = text
    return response


@pytest.fixture
def openrouter_settings(settings):
    return replace(
        settings,
        openrouter_api_key="sk-test",
        llm_model="default/model",
        llm_fallback_models=("fallback/model",),
        llm_vision_model="vision/model",
        gemini_api_key="",
    )


@pytest.fixture
def mock_post(monkeypatch):
    post = MagicMock()
    monkeypatch.setattr("medassist.llm.client.requests.post", post)
    monkeypatch.setattr("medassist.llm.client.time.sleep", lambda seconds: None)
    return post


def test_generate_sends_chat_completion(openrouter_settings, mock_post):
    """System prompt and user message are sent to the default model."""
    mock_post.return_value = ok_response("Paracetamol relieves pain.")
    client = LLMClient(openrouter_settings)

    reply = client.generate("What is paracetamol?", system_prompt="Be brief.")

    assert reply == "Paracetamol relieves pain."
    args, kwargs = mock_post.call_args
    assert args[0] == f"{openrouter_settings.openrouter_base_url}/chat/completions"
    assert kwargs["headers"]["Authorization"] == "Bearer sk-test"
    assert kwargs["headers"]["X-Title"] == openrouter_settings.app_title
    payload = kwargs["json"]
    assert payload["model"] == "default/model"
    assert payload["messages"] == [
        {"role": "system", "content": "Be brief."},
        {"role": "user", "content": "What is paracetamol?"},
    ]
    assert payload["max_tokens"] == openrouter_settings.llm_max_tokens


def test_generate_includes_history(openrouter_settings, mock_post):
    mock_post.return_value = ok_response("ok")
    history = [{"role": "user", "content": "hi"}, {"role": "assistant", "content": "hello"}]

    LLMClient(openrouter_settings).generate("next", history=history)

    messages = mock_post.call_args.kwargs["json"]["messages"]
    assert messages[:2] == history
    assert messages[-1] == {"role": "user", "content": "next"}


def test_cascade_falls_back_to_next_model(openrouter_settings, mock_post):
    """A failing model is followed by the default and then the fallbacks."""
    mock_post.side_effect = [error_response(), error_response(500, "boom"), ok_response("from fallback")]
    client = LLMClient(openrouter_settings)

    reply = client.generate("question", model="requested/model")

    assert reply == "from fallback"
    tried = [call.kwargs["json"]["model"] for call in mock_post.call_args_list]
    assert tried == ["requested/model", "default/model", "fallback/model"]


def test_cascade_deduplicates_models(openrouter_settings, mock_post):
    mock_post.return_value = error_response()
    client = LLMClient(openrouter_settings)

    with pytest.raises(LLMError):
        client.generate("question", model="default/model")

    tried = [call.kwargs["json"]["model"] for call in mock_post.call_args_list]
    assert tried == ["default/model", "fallback/model"]


def test_all_providers_failing_raises(openrouter_settings, mock_post):
    mock_post.return_value = error_response(503, "unavailable")

    with pytest.raises(LLMError) as exc_info:
        LLMClient(openrouter_settings).generate("question")

    assert "All LLM providers failed" in str(exc_info.value)
    assert "503" in str(exc_info.value)


def test_invalid_response_shape_is_a_failure(openrouter_settings, mock_post):
    empty = MagicMock(ok=True, status_code=200)
    empty.json.return_value = {"choices": []}
    mock_post.return_value = empty

    with pytest.raises(LLMError) as exc_info:
        LLMClient(openrouter_settings).generate("question")

    assert "Invalid response from OpenRouter API" in str(exc_info.value)


def test_missing_key_raises_without_request(settings, mock_post):
    client = LLMClient(replace(settings, openrouter_api_key="", gemini_api_key=""))

    assert not client.is_configured
    with pytest.raises(LLMError) as exc_info:
        client.generate("question")

    assert "not configured" in str(exc_info.value)
    mock_post.assert_not_called()


def test_gemini_answers_text_when_openrouter_missing(settings, mock_post, monkeypatch):
    genai = MagicMock()
    chat = genai.GenerativeModel.return_value.start_chat.return_value
    chat.send_message.return_value.text = "Gemini says hi"
    monkeypatch.setattr("medassist.llm.client.genai", genai)

    client = LLMClient(replace(settings, openrouter_api_key="", gemini_api_key="g-key"))
    reply = client.generate("hello", system_prompt="sys", history=[{"role": "assistant", "content": "prev"}])

    assert reply == "Gemini says hi"
    genai.configure.assert_called_once_with(api_key="g-key")
    start_kwargs = genai.GenerativeModel.return_value.start_chat.call_args.kwargs
    assert start_kwargs["history"] == [{"role": "model", "parts": ["prev"]}]
    mock_post.assert_not_called()


def test_multimodal_never_uses_gemini(settings, mock_post, monkeypatch):
    monkeypatch.setattr("medassist.llm.client.genai", MagicMock())
    client = LLMClient(replace(settings, openrouter_api_key="", gemini_api_key="g-key"))

    with pytest.raises(LLMError):
        client.generate_multimodal([text_part("describe")])


def test_single_text_part_is_sent_as_string(openrouter_settings, mock_post):
    mock_post.return_value = ok_response("done")

    LLMClient(openrouter_settings).generate_multimodal([text_part("just text")])

    payload = mock_post.call_args.kwargs["json"]
    assert payload["model"] == "vision/model"
    assert payload["messages"][-1]["content"] == "just text"


def test_generate_with_image_builds_parts(openrouter_settings, mock_post, image_uri):
    mock_post.return_value = ok_response("A white tablet")

    LLMClient(openrouter_settings).generate_with_image(image_uri, user_message="What is this?")

    content = mock_post.call_args.kwargs["json"]["messages"][-1]["content"]
    assert content == [image_part(image_uri), text_part("What is this?")]


def test_audio_part_maps_mime_subtype(audio_uri):
    part = audio_part(audio_uri)

    assert part["type"] == "input_audio"
    assert part["input_audio"]["format"] == "mp3"
    assert part["input_audio"]["data"] == audio_uri.split(",", 1)[1]


def test_audio_part_rejects_malformed_uri():
    with pytest.raises(ValueError):
        audio_part("not-a-data-uri")
