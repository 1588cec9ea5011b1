"""Tests for the Gemini and Groq extraction providers (HTTP mocked)."""

import json

import pytest
import requests

from conftest import FakeResponse
from uplatko.extraction.providers import (
    GeminiProvider,
    GroqProvider,
    ProviderConfig,
    extract_json_object,
    get_provider,
)
from uplatko.utils.exceptions import ConfigurationError, ProviderError

ANSWER = {
    'iban': "HR1210010051863000160",
    'amount': 100.5,
    'recipientName': "ACME d.o.o.",
    'referenceNumber': "1676-10-25",
}


def gemini_body(text):
    return {'candidates': [{'content': {'parts': [{'text': text}]}}]}


def groq_body(text):
    return {'choices': [{'message': {'role': 'assistant', 'content': text}}]}


@pytest.fixture
def gemini():
    return GeminiProvider(ProviderConfig(
        name="gemini",
        endpoint="https://gemini.example.test/generate",
        model="gemini-test",
        timeout=5,
    ))


@pytest.fixture
def groq():
    return GroqProvider(ProviderConfig(
        name="groq",
        endpoint="https://groq.example.test/chat",
        model="llama-test",
        timeout=5,
    ))


def test_gemini_request_and_answer(gemini, fake_post):
    post = fake_post(FakeResponse(body=gemini_body(json.dumps(ANSWER))))

    record = gemini.extract("Ukupno: 100,50", "gm-key")

    assert record.iban == "HR1210010051863000160"
    assert record.amount == 100.5
    assert record.reference_number == "1676-10-25"

    call = post.calls[0]
    assert call['url'] == "https://gemini.example.test/generate"
    assert call['params'] == {'key': "gm-key"}
    assert call['timeout'] == 5
    prompt = call['json']['contents'][0]['parts'][0]['text']
    assert prompt.endswith("Invoice text:\nUkupno: 100,50")
    assert call['json']['generationConfig']['temperature'] == 0.1


def test_groq_request_and_answer(groq, fake_post):
    post = fake_post(FakeResponse(body=groq_body(json.dumps(ANSWER))))

    record = groq.extract("Ukupno: 100,50", "gsk-key")

    assert record.recipient_name == "ACME d.o.o."
    call = post.calls[0]
    assert call['headers']['Authorization'] == "Bearer gsk-key"
    assert call['json']['model'] == "llama-test"
    messages = call['json']['messages']
    assert [m['role'] for m in messages] == ['system', 'user']
    assert messages[1]['content'] == "Invoice text:\nUkupno: 100,50"


def test_groq_answer_in_code_fence(groq, fake_post):
    fenced = "\ufeff```json\n" + json.dumps(ANSWER) + "\n```"
    fake_post(FakeResponse(body=groq_body(fenced)))
    assert groq.extract("text", "key").iban == "HR1210010051863000160"


def test_answer_is_used_without_defaults(groq, fake_post):
    fake_post(FakeResponse(body=groq_body('{"iban": "HR1210010051863000160"}')))
    record = groq.extract("text", "key")
    assert record.model is None
    assert record.purpose_code is None


def test_string_amount_is_coerced(groq, fake_post):
    fake_post(FakeResponse(body=groq_body('{"amount": "1.234,56"}')))
    assert groq.extract("text", "key").amount == pytest.approx(1234.56)


def test_extra_keys_are_ignored(groq, fake_post):
    fake_post(FakeResponse(body=groq_body('{"iban": "HR1210010051863000160", "vat": 25}')))
    record = groq.extract("text", "key")
    assert record.ignored_keys == ['vat']


def test_http_error(gemini, fake_post):
    fake_post(FakeResponse(status_code=500, body={}, text="internal error"))
    with pytest.raises(ProviderError) as exc_info:
        gemini.extract("text", "key")
    assert exc_info.value.status_code == 500
    assert exc_info.value.provider == "gemini"
    assert "500" in exc_info.value.reason


def test_transport_error(groq, fake_post):
    fake_post(requests.ConnectionError("connection refused"))
    with pytest.raises(ProviderError) as exc_info:
        groq.extract("text", "key")
    assert "connection refused" in exc_info.value.reason


def test_body_not_json(groq, fake_post):
    fake_post(FakeResponse(body=ValueError("Expecting value"), text="<html>"))
    with pytest.raises(ProviderError):
        groq.extract("text", "key")


@pytest.mark.parametrize("body", [
    groq_body(""),
    groq_body("   "),
    groq_body(None),
    {'choices': []},
    {},
])
def test_empty_answer(groq, fake_post, body):
    fake_post(FakeResponse(body=body))
    with pytest.raises(ProviderError) as exc_info:
        groq.extract("text", "key")
    assert exc_info.value.reason == "empty response"


def test_gemini_without_candidates(gemini, fake_post):
    fake_post(FakeResponse(body={'candidates': []}))
    with pytest.raises(ProviderError):
        gemini.extract("text", "key")


@pytest.mark.parametrize("answer", [
    "I could not find any payment data.",
    "{iban: HR12}",
    '{"amount": "sto eura"}',
])
def test_unusable_answer(groq, fake_post, answer):
    fake_post(FakeResponse(body=groq_body(answer)))
    with pytest.raises(ProviderError):
        groq.extract("text", "key")


def test_run_returns_failures_as_data(groq, fake_post):
    fake_post(FakeResponse(status_code=401, body={}, text="unauthorized"))
    stage = groq.run("text", "bad-key")
    assert not stage.ok
    assert stage.record is None
    assert stage.error.status_code == 401


def test_run_success(groq, fake_post):
    fake_post(FakeResponse(body=groq_body(json.dumps(ANSWER))))
    stage = groq.run("text", "key")
    assert stage.ok
    assert stage.error is None


def test_extract_json_object_with_prose():
    data = extract_json_object("groq", 'Here you go: {"iban": "HR1210010051863000160"} Done.')
    assert data == {'iban': "HR1210010051863000160"}


def test_extract_json_object_not_a_dict():
    with pytest.raises(ProviderError):
        extract_json_object("groq", "[1, 2, 3]")


def test_provider_config_from_settings():
    config = ProviderConfig.from_settings("groq")
    assert config.endpoint.startswith("https://")
    assert config.model
    assert config.timeout > 0


def test_get_provider():
    assert isinstance(get_provider("gemini"), GeminiProvider)
    assert isinstance(get_provider("groq"), GroqProvider)
    with pytest.raises(KeyError):
        get_provider("openai")


def test_provider_config_rejects_unknown_settings(monkeypatch):
    from uplatko.extraction import providers

    def fake_config(key, default=None):
        if key == "providers.groq":
            return {'endpoint': "https://groq.example.test", 'retries': 3}
        return default

    monkeypatch.setattr(providers, "get_config", fake_config)
    with pytest.raises(ConfigurationError):
        ProviderConfig.from_settings("groq")


def test_provider_config_requires_endpoint():
    with pytest.raises(ConfigurationError):
        ProviderConfig.from_settings("openai")
