"""
Secret acquisition for wallet operations.

A secret is resolved from an ordered list of providers; the first one that
returns a non-empty value wins. The default chain reads WALLET_PASSWORD from
the environment and falls back to a masked interactive prompt.
"""
from __future__ import annotations

import getpass
import logging
import os
import sys
from collections.abc import Iterable
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)

PASSWORD_ENV = "WALLET_PASSWORD"
PASSWORD_PROMPT = "Enter password for wallet: "


class MissingSecretError(ValueError):
    """No provider in the chain produced a secret."""


class SecretProvider(Protocol):
    name: str

    def get(self) -> Optional[str]:
        ...


class EnvSecretProvider:
    """Reads a secret from an environment variable."""

    def __init__(self, env_name: str = PASSWORD_ENV):
        self.env_name = env_name
        self.name = f"env:{env_name}"

    def get(self) -> Optional[str]:
        return os.getenv(self.env_name) or None


class PromptSecretProvider:
    """Asks for the secret on the terminal without echoing it.

    Returns None when stdin is not interactive so that automated runs fail
    with a clear error instead of blocking.
    """

    def __init__(
        self,
        prompt: str = PASSWORD_PROMPT,
        hint: str | None = f"Set {PASSWORD_ENV} env var to skip this prompt",
        reader: Callable[[str], str] = getpass.getpass,
        interactive: Callable[[], bool] | None = None,
    ):
        self.prompt = prompt
        self.hint = hint
        self.reader = reader
        self.interactive = interactive or (lambda: sys.stdin is not None and sys.stdin.isatty())
        self.name = "prompt"

    def get(self) -> Optional[str]:
        if not self.interactive():
            return None
        if self.hint:
            logger.info(self.hint)
        return self.reader(self.prompt) or None


class StaticSecretProvider:
    """Fixed value, e.g. from a --password flag or a test."""

    def __init__(self, value: str | None, name: str = "static"):
        self.value = value
        self.name = name

    def get(self) -> Optional[str]:
        return self.value or None


def default_password_providers() -> list[SecretProvider]:
    return [EnvSecretProvider(PASSWORD_ENV), PromptSecretProvider()]


def resolve_secret(providers: Iterable[SecretProvider] | None = None, what: str = "wallet password") -> str:
    """Return the first non-empty secret from ``providers``.

    Raises MissingSecretError if every provider comes back empty.
    """
    chain = list(providers) if providers is not None else default_password_providers()
    for provider in chain:
        value = provider.get()
        if value:
            logger.debug("Resolved %s from %s", what, provider.name)
            return value
    tried = ", ".join(p.name for p in chain) or "no providers"
    raise MissingSecretError(f"No {what} available (tried {tried}). Set {PASSWORD_ENV} or run interactively.")
