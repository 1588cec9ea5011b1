"""
Credential Store Module.

Persists the selected AI provider and its API keys in a small JSON file
in the user's config directory. Environment variables
(``UPLATKO_GEMINI_API_KEY``, ``UPLATKO_GROQ_API_KEY``) take precedence
over stored keys.

The keys are stored in plain text, readable by anything running as the
same user. Restricted API keys are recommended.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from config import get_config
from uplatko.utils.logger import get_logger

logger = get_logger(__name__)

# Values accepted for the provider selection
KNOWN_PROVIDERS = ("gemini", "groq", "none")


class CredentialStore:
    """
    Read/write access to provider selection and API keys.

    Example:
        >>> store = CredentialStore("/tmp/creds.json")
        >>> store.set_provider("groq")
        >>> store.set_api_key("groq", "gsk_...")
        >>> store.get_api_key("groq")
        'gsk_...'
    """

    PROVIDER_KEY = "provider"
    API_KEY_SUFFIX = "_api_key"

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        env_prefix: Optional[str] = None
    ) -> None:
        if path is None:
            path = get_config(
                "credentials.store_path",
                "~/.config/uplatko/credentials.json"
            )
        self.path = Path(path).expanduser()
        self.env_prefix = env_prefix or get_config("credentials.env_prefix", "UPLATKO")

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable credential store {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)
        try:
            os.chmod(self.path, 0o600)
        except OSError:
            logger.debug(f"Could not restrict permissions on {self.path}")

    def _env_var(self, provider: str) -> str:
        return f"{self.env_prefix}_{provider.upper()}_API_KEY"

    def get_provider(self) -> str:
        """Return the stored provider, or "none" when unset or unknown."""
        stored = self._read().get(self.PROVIDER_KEY)
        if stored in ("gemini", "groq"):
            return stored
        return "none"

    def set_provider(self, provider: str) -> None:
        if provider not in KNOWN_PROVIDERS:
            raise ValueError(f"Unknown provider: {provider}")
        data = self._read()
        data[self.PROVIDER_KEY] = provider
        self._write(data)
        logger.info(f"Extraction provider set to '{provider}'")

    def get_api_key(self, provider: str) -> Optional[str]:
        """
        Look up the API key for a provider.

        Args:
            provider: Provider name, e.g. "gemini".

        Returns:
            The key from the environment or the store, None when neither
            holds a non-empty value.
        """
        from_env = os.environ.get(self._env_var(provider))
        if from_env:
            return from_env

        stored = self._read().get(provider + self.API_KEY_SUFFIX)
        return stored or None

    def set_api_key(self, provider: str, api_key: str) -> None:
        data = self._read()
        data[provider + self.API_KEY_SUFFIX] = api_key
        self._write(data)
        logger.info(f"Stored API key for '{provider}'")

    def clear_api_key(self, provider: str) -> None:
        data = self._read()
        if data.pop(provider + self.API_KEY_SUFFIX, None) is not None:
            self._write(data)
            logger.info(f"Removed API key for '{provider}'")

    def __call__(self, provider: str) -> Optional[str]:
        """Lets the store be passed directly as a credential lookup."""
        return self.get_api_key(provider)
