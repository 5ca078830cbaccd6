"""Secure storage for the speech-provider API key.

The key lives in the operating system keychain via `keyring`; it is never
written to the ledger, the config file, or log output.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import keyring
from keyring.backends import fail
from keyring.errors import KeyringError


_SERVICE_NAME = "readaloud"
_ACCOUNT_NAME = "gemini_api_key"


class CredentialStore(Protocol):
    """Persistence operations for the provider API key."""

    def is_available(self) -> bool:
        """Return whether a usable secure backend is configured."""

    def get_api_key(self) -> str | None:
        """Return the stored key, or `None` when nothing is stored."""

    def set_api_key(self, api_key: str) -> None:
        """Persist a key, replacing any existing one."""

    def clear_api_key(self) -> bool:
        """Delete the stored key and report whether one existed."""


@dataclass(slots=True)
class KeyringCredentialStore:
    """Credential store backed by the active `keyring` backend."""

    service_name: str = _SERVICE_NAME
    account_name: str = _ACCOUNT_NAME

    def is_available(self) -> bool:
        return not isinstance(keyring.get_keyring(), fail.Keyring)

    def get_api_key(self) -> str | None:
        if not self.is_available():
            return None
        try:
            value = keyring.get_password(self.service_name, self.account_name)
        except KeyringError:
            return None
        if value is None:
            return None
        return value.strip() or None

    def set_api_key(self, api_key: str) -> None:
        if not self.is_available():
            raise RuntimeError(
                "Secure credential storage is unavailable: no keyring backend is configured."
            )
        normalized = api_key.strip()
        if not normalized:
            raise ValueError("API key must be a non-empty string.")
        keyring.set_password(self.service_name, self.account_name, normalized)

    def clear_api_key(self) -> bool:
        if self.get_api_key() is None:
            return False
        keyring.delete_password(self.service_name, self.account_name)
        return True


def create_credential_store() -> CredentialStore:
    """Create the default secure credential store."""

    return KeyringCredentialStore()
