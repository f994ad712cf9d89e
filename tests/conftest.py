"""Shared pytest fixtures for the boilergen test suite.

Provides reusable fixtures for:
- Temporary target directories
- Environment isolation (no real credentials, no home-directory writes)
- Sample Gemini response bodies
- Mocked httpx and subprocess helpers
"""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from boilergen.config import Config, CredentialStore
from boilergen.scaffolder import BoilerplateGenerator, build_default_registry


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------

_ENV_VARS = (
    "GEMINI_API_KEY",
    "BOILERGEN_GEMINI_URL",
    "BOILERGEN_GEMINI_MODEL",
    "BOILERGEN_GEMINI_TIMEOUT",
    "BOILERGEN_PACKAGE_MANAGER",
    "BOILERGEN_CREDENTIALS",
    "BOILERGEN_NO_AI",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Clear boilergen env vars and point the credential file into ``tmp_path``."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    credentials = tmp_path / "home" / ".boilergen" / "credentials.json"
    monkeypatch.setenv("BOILERGEN_CREDENTIALS", str(credentials))
    return credentials


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------


@pytest.fixture
def tmp_project_dir(tmp_path: Path) -> Path:
    """Temporary target directory for generated boilerplate (auto-cleanup)."""
    project_dir = tmp_path / "test-project"
    project_dir.mkdir()
    yield project_dir


@pytest.fixture
def config(isolated_env: Path) -> Config:
    """A ``Config`` whose credential file lives under ``tmp_path``."""
    return Config(credentials_path=isolated_env)


@pytest.fixture
def credential_store(isolated_env: Path) -> CredentialStore:
    return CredentialStore(isolated_env)


# ---------------------------------------------------------------------------
# Scaffolder
# ---------------------------------------------------------------------------


@pytest.fixture
def generator() -> BoilerplateGenerator:
    return BoilerplateGenerator()


@pytest.fixture
def registry(generator: BoilerplateGenerator):
    return build_default_registry(generator)


# ---------------------------------------------------------------------------
# Gemini responses
# ---------------------------------------------------------------------------


SAMPLE_AI_TEXT = textwrap.dedent("""\
    Here is your boilerplate.

    <vue-store/store/index.js>
    ```js
    import { createStore } from 'vuex';

    export default createStore({ state: {} });
    ```

    <vue-store/store/modules/user.js>
    ```javascript
    export default { namespaced: true };
    ```

    ```deps
    vuex
    vue
    ```
""")


@pytest.fixture
def sample_ai_text() -> str:
    """A well-formed AI response with two files and a deps block."""
    return SAMPLE_AI_TEXT


def make_gemini_body(text: str) -> dict[str, Any]:
    """Build a ``generateContent`` JSON body carrying *text*."""
    return {
        "candidates": [
            {
                "content": {"parts": [{"text": text}], "role": "model"},
                "finishReason": "STOP",
            }
        ],
        "modelVersion": "gemini-2.5-pro",
    }


@pytest.fixture
def mock_gemini():
    """Patch ``httpx.AsyncClient`` so Gemini returns ``SAMPLE_AI_TEXT``.

    Usage:
        def test_something(mock_gemini):
            with mock_gemini as client_cls:
                ...
    """
    mock_response = MagicMock()
    mock_response.status_code = 200
    mock_response.json.return_value = make_gemini_body(SAMPLE_AI_TEXT)
    mock_response.raise_for_status = MagicMock()

    mock_client = AsyncMock()
    mock_client.post = AsyncMock(return_value=mock_response)
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)

    return patch("httpx.AsyncClient", return_value=mock_client)


# ---------------------------------------------------------------------------
# Mock Subprocess (generic)
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_subprocess():
    """Mock asyncio subprocess for testing package installs.

    Returns a factory that creates mock process instances with a
    configurable return code.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(returncode=0)
            with patch("asyncio.create_subprocess_exec", return_value=proc):
                ...
    """

    def factory(returncode: int = 0) -> AsyncMock:
        mock_proc = AsyncMock()
        mock_proc.returncode = returncode
        mock_proc.pid = 99999
        mock_proc.wait = AsyncMock(return_value=returncode)
        mock_proc.send_signal = MagicMock()
        return mock_proc

    return factory
