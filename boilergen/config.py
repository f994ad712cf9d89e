"""boilergen configuration.

Centralised, typed configuration for the generator. All settings use Pydantic
v2 models so they can be validated at construction time and serialised to/from
JSON or environment variables without boiler-plate.

The Gemini API credential is not part of ``Config``: it lives in
a small per-user credential file managed by ``CredentialStore`` so that it can
be requested interactively once and reused by later runs.
"""

from __future__ import annotations

import json
import os
import stat
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


DEFAULT_CREDENTIALS_PATH = Path.home() / ".boilergen" / "credentials.json"


class GeminiConfig(BaseModel):
    """Configuration for the Gemini ``generateContent`` API."""

    url: str = Field(default="https://generativelanguage.googleapis.com/v1beta")
    model: str = Field(default="gemini-2.5-pro")
    timeout: int = Field(default=120, ge=10, description="Per-request timeout in seconds")
    api_key_env: str = Field(
        default="GEMINI_API_KEY",
        description="Environment variable consulted before the credential file",
    )


class InstallConfig(BaseModel):
    """How required dependencies are installed after generation."""

    package_manager: str = Field(default="npm")
    assume_yes: bool = Field(default=False, description="Answer yes to the install prompt")
    skip: bool = Field(default=False, description="Never install, never prompt")


class Config(BaseModel):
    """Global boilergen configuration.

    Instances are created once by the CLI entry point and passed through the
    rest of the system.
    """

    credentials_path: Path = Field(default=DEFAULT_CREDENTIALS_PATH)
    ai_fallback: bool = Field(
        default=True, description="Offer AI generation for unknown template names"
    )
    gemini: GeminiConfig = Field(default_factory=GeminiConfig)
    install: InstallConfig = Field(default_factory=InstallConfig)

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file and return its path."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return path

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            BOILERGEN_GEMINI_URL, BOILERGEN_GEMINI_MODEL,
            BOILERGEN_GEMINI_TIMEOUT, BOILERGEN_PACKAGE_MANAGER,
            BOILERGEN_CREDENTIALS, BOILERGEN_NO_AI.
        """
        gemini_kwargs: dict[str, Any] = {}
        if os.environ.get("BOILERGEN_GEMINI_URL"):
            gemini_kwargs["url"] = os.environ["BOILERGEN_GEMINI_URL"]
        if os.environ.get("BOILERGEN_GEMINI_MODEL"):
            gemini_kwargs["model"] = os.environ["BOILERGEN_GEMINI_MODEL"]
        if os.environ.get("BOILERGEN_GEMINI_TIMEOUT"):
            gemini_kwargs["timeout"] = int(os.environ["BOILERGEN_GEMINI_TIMEOUT"])

        install_kwargs: dict[str, Any] = {}
        if os.environ.get("BOILERGEN_PACKAGE_MANAGER"):
            install_kwargs["package_manager"] = os.environ["BOILERGEN_PACKAGE_MANAGER"]

        no_ai = os.environ.get("BOILERGEN_NO_AI", "").strip().lower() in ("1", "true", "yes")

        return cls(
            credentials_path=Path(
                os.environ.get("BOILERGEN_CREDENTIALS", str(DEFAULT_CREDENTIALS_PATH))
            ),
            ai_fallback=not no_ai,
            gemini=GeminiConfig(**gemini_kwargs),
            install=InstallConfig(**install_kwargs),
        )


class CredentialStore:
    """Reads and writes the persisted Gemini API key.

    The file is a tiny JSON document ``{"gemini_api_key": "..."}``. A missing,
    unreadable or corrupt file simply means "no stored credential".
    """

    KEY_FIELD = "gemini_api_key"

    def __init__(self, path: str | Path = DEFAULT_CREDENTIALS_PATH) -> None:
        self.path = Path(path)

    def load(self) -> str | None:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return None
        if not isinstance(data, dict):
            return None
        value = data.get(self.KEY_FIELD)
        if not isinstance(value, str) or not value.strip():
            return None
        return value.strip()

    def save(self, api_key: str) -> Path:
        """Write *api_key* to the credential file, readable by the owner only."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps({self.KEY_FIELD: api_key.strip()}, indent=2), encoding="utf-8"
        )
        try:
            self.path.chmod(stat.S_IRUSR | stat.S_IWUSR)
        except OSError:
            # Not every filesystem supports POSIX modes (e.g. some Windows mounts).
            pass
        return self.path
