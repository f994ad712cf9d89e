"""Tests for the AI fallback (boilergen.ai_fallback).

Tests cover:
- Prompt construction
- Parsing file blocks and the trailing deps block
- Path safety checks
- API key resolution order and the interactive prompt
- One re-prompt and retry on a rejected key
- End-to-end generation against a mocked Gemini API
"""

from __future__ import annotations

import textwrap
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from boilergen.ai_fallback import (
    AIFallbackGenerator,
    AIFileBlock,
    AIGenerationError,
    CredentialError,
    build_prompt,
    filter_safe_blocks,
    is_auth_error,
    is_safe_path,
    parse_deps_block,
    parse_file_blocks,
    resolve_api_key,
    safe_relative_path,
)
from boilergen.config import Config, CredentialStore
from boilergen.gemini_client import GeminiResponse
from boilergen.scaffolder import GenerationResult

pytestmark = pytest.mark.unit


def _fake_client(*responses: GeminiResponse) -> AsyncMock:
    client = AsyncMock()
    client.generate = AsyncMock(side_effect=list(responses))
    return client


# ---------------------------------------------------------------------------
# Prompt
# ---------------------------------------------------------------------------


class TestBuildPrompt:
    def test_mentions_template_and_format(self):
        prompt = build_prompt("vue-store")
        assert 'USER REQUEST: "vue-store"' in prompt
        assert "<vue-store/relative/path/to/file.ext>" in prompt
        assert "```deps" in prompt

    def test_deterministic(self):
        assert build_prompt("x") == build_prompt("x")


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class TestParseFileBlocks:
    def test_sample(self, sample_ai_text: str):
        blocks = parse_file_blocks(sample_ai_text)
        assert [b.file_path for b in blocks] == [
            "vue-store/store/index.js",
            "vue-store/store/modules/user.js",
        ]
        assert blocks[0].content.startswith("import { createStore } from 'vuex';")
        assert blocks[1].content == "export default { namespaced: true };\n"

    def test_no_blocks(self):
        assert parse_file_blocks("Sorry, I cannot help with that.") == []

    def test_deps_block_is_not_a_file(self):
        text = "```deps\naxios\n```\n"
        assert parse_file_blocks(text) == []

    def test_path_whitespace_stripped(self):
        text = "<  app/main.js  >\n```\nrun();\n```\n"
        assert parse_file_blocks(text) == [AIFileBlock(file_path="app/main.js", content="run();\n")]

    def test_fence_without_language(self):
        text = "<app/a.txt>\n```\nhello\n```"
        assert parse_file_blocks(text)[0].content == "hello\n"


class TestParseDepsBlock:
    def test_sample(self, sample_ai_text: str):
        assert parse_deps_block(sample_ai_text) == ["vuex", "vue"]

    def test_missing(self):
        assert parse_deps_block("<a/b.js>\n```js\nx\n```") == []

    def test_blank_lines_and_duplicates(self):
        text = textwrap.dedent("""\
            ```deps
            axios

              axios
            react
            ```
        """)
        assert parse_deps_block(text) == ["axios", "react"]


class TestIsAuthError:
    @pytest.mark.parametrize(
        "message",
        [
            "Gemini returned HTTP 401: Unauthorized",
            "Gemini returned HTTP 400: API key not valid. Please pass a valid API key.",
            "Gemini returned HTTP 403: Forbidden",
        ],
    )
    def test_auth_errors(self, message: str):
        assert is_auth_error(message)

    @pytest.mark.parametrize("message", [None, "", "Request to Gemini timed out after 120s."])
    def test_other_errors(self, message):
        assert not is_auth_error(message)


# ---------------------------------------------------------------------------
# Path safety
# ---------------------------------------------------------------------------


class TestSafePaths:
    def test_inside_template_folder(self, tmp_project_dir: Path):
        assert safe_relative_path("vue-store/store/index.js", tmp_project_dir, "vue-store") == (
            "vue-store/store/index.js"
        )

    def test_normalised(self, tmp_project_dir: Path):
        rel = safe_relative_path("vue-store/x/../a.js", tmp_project_dir, "vue-store")
        assert rel == "vue-store/a.js"

    @pytest.mark.parametrize(
        "file_path",
        [
            "../evil.js",
            "vue-store/../../evil.js",
            "other/file.js",
            "vue-store",
            "vue-store/",
            "/etc/passwd",
            "vue-store/debug.log",
            "vue-store/ERROR.LOG",
            "vue-store/a?.js",
            'vue-store/"quoted".js',
            "vue-store/c:/x.js",
            "",
        ],
    )
    def test_rejected(self, tmp_project_dir: Path, file_path: str):
        assert not is_safe_path(file_path, tmp_project_dir, "vue-store")

    @pytest.mark.parametrize("template_name", ["", ".", "..", "../outside"])
    def test_bad_template_name(self, tmp_project_dir: Path, template_name: str):
        assert not is_safe_path(f"{template_name}/a.js", tmp_project_dir, template_name)

    def test_filter_safe_blocks(self, tmp_project_dir: Path, capsys):
        blocks = [
            AIFileBlock(file_path="app/ok.js", content="1"),
            AIFileBlock(file_path="../bad.js", content="2"),
            AIFileBlock(file_path="app/./also.js", content="3"),
        ]
        kept = filter_safe_blocks(blocks, tmp_project_dir, "app")
        assert [b.file_path for b in kept] == ["app/ok.js", "app/also.js"]
        assert "unsafe path" in capsys.readouterr().out


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------


class TestResolveApiKey:
    def test_environment_first(self, config: Config, credential_store: CredentialStore, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "from-env")
        credential_store.save("from-file")
        assert resolve_api_key(config, credential_store) == "from-env"

    def test_credential_file(self, config: Config, credential_store: CredentialStore):
        credential_store.save("from-file")
        with patch("boilergen.ai_fallback.Prompt.ask") as ask:
            assert resolve_api_key(config, credential_store) == "from-file"
        ask.assert_not_called()

    def test_prompt_and_persist(self, config: Config, credential_store: CredentialStore):
        with patch("boilergen.ai_fallback.Prompt.ask", return_value="  typed-key  ") as ask:
            assert resolve_api_key(config, credential_store) == "typed-key"
        assert ask.call_args.kwargs["password"] is True
        assert credential_store.load() == "typed-key"

    def test_blank_prompt(self, config: Config, credential_store: CredentialStore):
        with patch("boilergen.ai_fallback.Prompt.ask", return_value="   "):
            with pytest.raises(CredentialError):
                resolve_api_key(config, credential_store)
        assert credential_store.load() is None


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------


class TestAIFallbackRequest:
    async def test_retries_once_on_rejected_key(self, config: Config, credential_store):
        client = _fake_client(
            GeminiResponse(success=False, error="Gemini returned HTTP 400: API key not valid"),
            GeminiResponse(text="ok"),
        )
        generator = AIFallbackGenerator(config, client=client, store=credential_store)

        with patch("boilergen.ai_fallback.Prompt.ask", side_effect=["bad-key", "good-key"]):
            text = await generator.request("vue-store")

        assert text == "ok"
        assert [c.args[1] for c in client.generate.call_args_list] == ["bad-key", "good-key"]
        assert credential_store.load() == "good-key"

    async def test_gives_up_after_one_retry(self, config: Config, credential_store):
        rejected = GeminiResponse(success=False, error="Gemini returned HTTP 401: Unauthorized")
        client = _fake_client(rejected, rejected, GeminiResponse(text="never"))
        generator = AIFallbackGenerator(config, client=client, store=credential_store)

        with patch("boilergen.ai_fallback.Prompt.ask", side_effect=["k1", "k2"]):
            with pytest.raises(AIGenerationError, match="401"):
                await generator.request("vue-store")

        assert client.generate.await_count == 2

    async def test_other_errors_not_retried(self, config: Config, credential_store, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "env-key")
        client = _fake_client(GeminiResponse(success=False, error="Request to Gemini timed out"))
        generator = AIFallbackGenerator(config, client=client, store=credential_store)

        with pytest.raises(AIGenerationError, match="timed out"):
            await generator.request("vue-store")

        assert client.generate.await_count == 1

    def test_client_built_from_config(self, config: Config):
        config.gemini.model = "gemini-custom"
        generator = AIFallbackGenerator(config)
        assert generator.client.model == "gemini-custom"
        assert generator.store.path == config.credentials_path


class TestAIFallbackGenerate:
    async def test_writes_parsed_files(self, config, tmp_project_dir: Path, mock_gemini, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "env-key")

        with mock_gemini:
            result = await AIFallbackGenerator(config).generate(tmp_project_dir, "vue-store")

        assert result.files == ["vue-store/store/index.js", "vue-store/store/modules/user.js"]
        assert result.dependencies == ["vuex", "vue"]
        assert result.written == result.files
        content = (tmp_project_dir / "vue-store/store/modules/user.js").read_text()
        assert content == "export default { namespaced: true };\n"

    async def test_no_blocks_writes_nothing(self, config, tmp_project_dir: Path, monkeypatch, capsys):
        monkeypatch.setenv("GEMINI_API_KEY", "env-key")
        client = _fake_client(GeminiResponse(text="I can't do that."))

        result = await AIFallbackGenerator(config, client=client).generate(tmp_project_dir, "vue-store")

        assert result.files == []
        assert list(tmp_project_dir.iterdir()) == []
        assert "No files were parsed" in capsys.readouterr().out

    async def test_only_unsafe_blocks(self, config, tmp_project_dir: Path, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "env-key")
        text = "<../evil.js>\n```js\nx\n```\n<other/a.js>\n```js\ny\n```\n"
        client = _fake_client(GeminiResponse(text=text))

        result = await AIFallbackGenerator(config, client=client).generate(tmp_project_dir, "vue-store")

        assert result == GenerationResult()
        assert not (tmp_project_dir.parent / "evil.js").exists()
        assert list(tmp_project_dir.iterdir()) == []

    async def test_duplicate_paths_keep_first(self, config, tmp_project_dir: Path, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "env-key")
        text = "<app/a.js>\n```js\nfirst\n```\n<app/a.js>\n```js\nsecond\n```\n"
        client = _fake_client(GeminiResponse(text=text))

        result = await AIFallbackGenerator(config, client=client).generate(tmp_project_dir, "app")

        assert result.files == ["app/a.js"]
        assert (tmp_project_dir / "app/a.js").read_text() == "first\n"

    async def test_existing_files_skipped(self, config, tmp_project_dir: Path, mock_gemini, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "env-key")
        existing = tmp_project_dir / "vue-store" / "store" / "index.js"
        existing.parent.mkdir(parents=True)
        existing.write_text("// mine\n", encoding="utf-8")

        with mock_gemini:
            result = await AIFallbackGenerator(config).generate(tmp_project_dir, "vue-store")

        assert result.skipped == ["vue-store/store/index.js"]
        assert existing.read_text() == "// mine\n"
