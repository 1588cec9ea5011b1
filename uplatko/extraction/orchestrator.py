"""
Extraction Orchestrator Module.

Chooses between AI-assisted and heuristic extraction and guarantees that
a usable record always comes back:

    provider "none"            -> heuristic
    provider without API key   -> heuristic + advisory (no network call)
    provider fails             -> heuristic + advisory
    provider misconfigured     -> heuristic + advisory
    provider succeeds          -> provider result, used as-is

The AI result replaces the heuristic one; the two are never merged.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Type

from uplatko.utils.logger import get_logger
from uplatko.utils.exceptions import ConfigurationError, ProviderError
from uplatko.hub3.payment_record import PartialPaymentRecord
from .heuristic import HeuristicExtractor
from .providers import PROVIDERS, BaseProvider, StageResult

logger = get_logger(__name__)

CredentialLookup = Callable[[str], Optional[str]]

HEURISTIC_SOURCE = "heuristic"
NO_PROVIDER = "none"


@dataclass
class ExtractionOutcome:
    """
    Result of resolving one document's text.

    Attributes:
        record: Extracted fields (possibly all empty)
        source: "heuristic" or the provider name that produced the record
        advisory: Non-blocking warning for the user, None when all went well
    """
    record: PartialPaymentRecord
    source: str = HEURISTIC_SOURCE
    advisory: Optional[str] = None

    @property
    def used_fallback(self) -> bool:
        return self.advisory is not None and self.source == HEURISTIC_SOURCE


class ExtractionOrchestrator:
    """
    Runs the AI stage (when configured) and the heuristic fallback.

    Provider selection and credentials are passed per call; the
    orchestrator holds no mutable state between calls.

    Example:
        >>> orchestrator = ExtractionOrchestrator()
        >>> outcome = orchestrator.resolve(text, "groq", store.get_api_key)
        >>> if outcome.advisory:
        ...     print(outcome.advisory)
        >>> outcome.record.iban
    """

    def __init__(
        self,
        heuristic: Optional[HeuristicExtractor] = None,
        providers: Optional[Dict[str, Type[BaseProvider]]] = None
    ) -> None:
        self.heuristic = heuristic or HeuristicExtractor()
        self.providers = dict(PROVIDERS if providers is None else providers)

    def resolve(
        self,
        raw_text: str,
        selected_provider: Optional[str],
        credential_lookup: Optional[CredentialLookup] = None
    ) -> ExtractionOutcome:
        """
        Extract payment fields from invoice text.

        Args:
            raw_text: Text extracted from the invoice PDF.
            selected_provider: "gemini", "groq", "none" or None.
            credential_lookup: Returns the API key for a provider name.

        Returns:
            ExtractionOutcome; never raises.
        """
        if not selected_provider or selected_provider == NO_PROVIDER:
            return self._heuristic(raw_text)

        provider_cls = self.providers.get(selected_provider)
        if provider_cls is None:
            return self._heuristic(
                raw_text,
                f"Unknown provider '{selected_provider}', used regex extraction."
            )

        api_key = self._lookup_key(credential_lookup, selected_provider)
        if not api_key:
            return self._heuristic(
                raw_text,
                f"{selected_provider} is selected but no API key is set. "
                f"Add one in the settings; regex extraction was used."
            )

        stage = self._run_provider(provider_cls, raw_text, api_key)
        if stage.ok:
            return ExtractionOutcome(record=stage.record, source=selected_provider)

        logger.debug(f"Provider failure: {stage.error}")
        return self._heuristic(
            raw_text,
            f"{selected_provider} failed ({stage.error.reason}), "
            f"regex extraction was used. Check the fields."
        )

    def _run_provider(
        self,
        provider_cls: Type[BaseProvider],
        raw_text: str,
        api_key: str
    ) -> StageResult:
        try:
            provider = provider_cls()
        except ConfigurationError as e:
            return StageResult(error=ProviderError(provider_cls.name, e.message))
        return provider.run(raw_text, api_key)

    @staticmethod
    def _lookup_key(
        credential_lookup: Optional[CredentialLookup],
        provider_name: str
    ) -> Optional[str]:
        """API key for the provider; None when missing or unreadable."""
        if credential_lookup is None:
            return None
        try:
            return credential_lookup(provider_name)
        except Exception as e:
            # A broken credential source counts as no key
            logger.warning(f"Could not read the {provider_name} API key: {e}")
            return None

    def _heuristic(self, raw_text: str, advisory: Optional[str] = None) -> ExtractionOutcome:
        if advisory:
            logger.warning(advisory)
        record = self.heuristic.extract(raw_text)
        return ExtractionOutcome(record=record, source=HEURISTIC_SOURCE, advisory=advisory)


def resolve(
    raw_text: str,
    selected_provider: Optional[str],
    credential_lookup: Optional[CredentialLookup] = None
) -> ExtractionOutcome:
    """Resolve with a default ExtractionOrchestrator."""
    return ExtractionOrchestrator().resolve(raw_text, selected_provider, credential_lookup)
