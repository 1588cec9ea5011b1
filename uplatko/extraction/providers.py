"""
AI Extraction Providers Module.

Sends invoice text to a hosted text-generation API and reads the payment
fields back from its JSON answer. Two providers are supported:

    - gemini: Google Gemini generateContent API (key in query string)
    - groq:   Groq OpenAI-compatible chat completions (Bearer token)

Both return the same PartialPaymentRecord and raise ProviderError for
every failure (transport, HTTP status, empty answer, unparseable JSON).
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional, Type

import requests

from config import get_config
from uplatko.utils.logger import get_logger
from uplatko.utils.exceptions import ConfigurationError, ProviderError
from uplatko.hub3.payment_record import PartialPaymentRecord

logger = get_logger(__name__)

EXTRACTION_INSTRUCTIONS = """\
You are a data extraction assistant for Croatian invoices.
Extract payment fields from the invoice text and return ONLY a valid JSON object with no markdown, no explanation, no code blocks.

Extract these fields if present:
- iban: Croatian IBAN (HR + 19 digits)
- amount: number (decimal, e.g. 123.45)
- recipientName: company/person name (max 30 chars)
- recipientAddress: street and number (max 27 chars)
- recipientCity: city with postal code (max 27 chars)
- referenceNumber: payment reference (e.g. 123-456-789)
- model: payment model code (e.g. HR68, HR00)
- description: payment description (max 35 chars)

Rules:
- Omit any field you cannot find with confidence
- Do not invent or guess values
- amount must be a number, not a string
- Return only the JSON object, nothing else"""

# Greedy: first "{" to last "}"
_JSON_OBJECT = re.compile(r'\{[\s\S]*\}')


def extract_json_object(provider: str, raw: str) -> Dict[str, Any]:
    """
    Pull the JSON object out of a model answer.

    Leading whitespace and a byte-order mark are dropped, then the span
    from the first "{" to the last "}" is decoded. This tolerates prose or
    code fences around the object.

    Args:
        provider: Provider name, for error messages.
        raw: Text returned by the model.

    Returns:
        The decoded JSON object.

    Raises:
        ProviderError: If no object is found or it does not decode to a dict.
    """
    cleaned = raw.strip().lstrip('\ufeff').strip()
    match = _JSON_OBJECT.search(cleaned)
    if not match:
        raise ProviderError(provider, "no JSON object found in response")

    try:
        data = json.loads(match.group(0))
    except ValueError as e:
        raise ProviderError(provider, f"invalid JSON: {e}")

    if not isinstance(data, dict):
        raise ProviderError(provider, "JSON payload is not an object")

    return data


@dataclass
class ProviderConfig:
    """
    Connection settings for one provider.

    Attributes:
        name: Provider identifier ("gemini", "groq")
        endpoint: Request URL
        model: Model name sent to the API (Groq) or informational (Gemini)
        temperature: Sampling temperature
        max_tokens: Output token limit
        timeout: Transport timeout in seconds
    """
    name: str
    endpoint: str
    model: str = ""
    temperature: float = 0.1
    max_tokens: int = 512
    timeout: float = 60

    @classmethod
    def from_settings(cls, name: str) -> 'ProviderConfig':
        """
        Build the config from ``providers.<name>`` over the built-in defaults.

        Raises:
            ConfigurationError: If the section has unknown keys or no endpoint.
        """
        settings = get_config(f"providers.{name}", {}) or {}
        defaults = PROVIDER_DEFAULTS.get(name, {})
        merged = {**defaults, **settings}
        try:
            config = cls(name=name, **merged)
        except TypeError as e:
            raise ConfigurationError(f"providers.{name}", str(e))
        if not config.endpoint:
            raise ConfigurationError(f"providers.{name}.endpoint", "endpoint is required")
        return config


PROVIDER_DEFAULTS: Dict[str, Dict[str, Any]] = {
    'gemini': {
        'endpoint': "https://generativelanguage.googleapis.com/v1beta/models/"
                    "gemini-2.0-flash:generateContent",
        'model': "gemini-2.0-flash",
    },
    'groq': {
        'endpoint': "https://api.groq.com/openai/v1/chat/completions",
        'model': "llama-3.3-70b-versatile",
    },
}


@dataclass
class StageResult:
    """
    Outcome of one extraction stage.

    Exactly one of ``record`` and ``error`` is set.
    """
    record: Optional[PartialPaymentRecord] = None
    error: Optional[ProviderError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.record is not None


class BaseProvider:
    """
    Common request/response handling for AI providers.

    Subclasses describe their envelope: how to build the request and where
    the answer text sits in the response.

    Example:
        >>> provider = GroqProvider()
        >>> record = provider.extract(invoice_text, api_key)
        >>> record.iban
        'HR1210010051863000160'
    """

    name = "base"

    def __init__(
        self,
        config: Optional[ProviderConfig] = None,
        session: Optional[requests.Session] = None
    ) -> None:
        self.config = config or ProviderConfig.from_settings(self.name)
        self.session = session

    def build_request(self, raw_text: str, api_key: str) -> Dict[str, Any]:
        """Return keyword arguments for requests.post (url, headers, json)."""
        raise NotImplementedError

    def read_text(self, body: Dict[str, Any]) -> Optional[str]:
        """Return the answer text from a decoded response body."""
        raise NotImplementedError

    def _post(self, **kwargs: Any) -> requests.Response:
        if self.session is not None:
            return self.session.post(timeout=self.config.timeout, **kwargs)
        return requests.post(timeout=self.config.timeout, **kwargs)

    def extract(self, raw_text: str, api_key: str) -> PartialPaymentRecord:
        """
        Extract payment fields through the provider's API.

        Args:
            raw_text: Raw invoice text.
            api_key: Credential for the provider.

        Returns:
            PartialPaymentRecord built from the provider's JSON answer.

        Raises:
            ProviderError: On any transport, HTTP or parse failure.
        """
        logger.info(f"Requesting extraction from {self.name} ({self.config.model})")

        try:
            response = self._post(**self.build_request(raw_text, api_key))
        except requests.RequestException as e:
            raise ProviderError(self.name, f"request failed: {e}")

        if not response.ok:
            raise ProviderError(
                self.name,
                f"API error {response.status_code}: {response.text[:200]}",
                status_code=response.status_code
            )

        try:
            body = response.json()
        except ValueError as e:
            raise ProviderError(self.name, f"response is not JSON: {e}")

        try:
            text = self.read_text(body)
        except (KeyError, IndexError, TypeError, AttributeError):
            text = None

        if not isinstance(text, str) or not text.strip():
            raise ProviderError(self.name, "empty response")

        data = extract_json_object(self.name, text)

        try:
            record = PartialPaymentRecord.from_dict(data)
        except ValueError as e:
            raise ProviderError(self.name, str(e))

        if record.ignored_keys:
            logger.debug(f"{self.name} returned extra keys: {record.ignored_keys}")

        logger.info(f"{self.name} extracted {len(record.extracted_fields)} fields")
        return record

    def run(self, raw_text: str, api_key: str) -> StageResult:
        """extract() with failures returned as data instead of raised."""
        try:
            return StageResult(record=self.extract(raw_text, api_key))
        except ProviderError as e:
            return StageResult(error=e)


class GeminiProvider(BaseProvider):
    """Google Gemini generateContent API; the key goes in the query string."""

    name = "gemini"

    def build_request(self, raw_text: str, api_key: str) -> Dict[str, Any]:
        return {
            'url': self.config.endpoint,
            'params': {'key': api_key},
            'headers': {'Content-Type': 'application/json'},
            'json': {
                'contents': [
                    {'parts': [{'text': f"{EXTRACTION_INSTRUCTIONS}\n\nInvoice text:\n{raw_text}"}]}
                ],
                'generationConfig': {
                    'temperature': self.config.temperature,
                    'maxOutputTokens': self.config.max_tokens,
                },
            },
        }

    def read_text(self, body: Dict[str, Any]) -> Optional[str]:
        return body['candidates'][0]['content']['parts'][0]['text']


class GroqProvider(BaseProvider):
    """Groq OpenAI-compatible chat completions; Bearer token auth."""

    name = "groq"

    def build_request(self, raw_text: str, api_key: str) -> Dict[str, Any]:
        return {
            'url': self.config.endpoint,
            'headers': {
                'Content-Type': 'application/json',
                'Authorization': f"Bearer {api_key}",
            },
            'json': {
                'model': self.config.model,
                'temperature': self.config.temperature,
                'max_tokens': self.config.max_tokens,
                'messages': [
                    {'role': 'system', 'content': EXTRACTION_INSTRUCTIONS},
                    {'role': 'user', 'content': f"Invoice text:\n{raw_text}"},
                ],
            },
        }

    def read_text(self, body: Dict[str, Any]) -> Optional[str]:
        return body['choices'][0]['message']['content']


PROVIDERS: Dict[str, Type[BaseProvider]] = {
    'gemini': GeminiProvider,
    'groq': GroqProvider,
}


def get_provider(name: str) -> BaseProvider:
    """
    Instantiate a provider by name.

    Raises:
        KeyError: If the provider is not registered.
    """
    return PROVIDERS[name]()
