"""AI fallback for template names the registry does not know.

The unknown template name is sent to Gemini with a fixed prompt asking for a
minimal boilerplate laid out as ``<path>`` lines each followed by a fenced
code block, plus an optional trailing ```` ```deps ```` block. The response
is parsed, every path is checked to lie strictly inside
``<target>/<template_name>/``, and the accepted files go through the same
map-mode materializer as the built-in templates.

A credential rejection from the API triggers exactly one re-prompt for the
key and one retry of the whole request.
"""

from __future__ import annotations

import os
import re
from collections.abc import Iterable
from pathlib import Path

from pydantic import BaseModel, Field
from rich.prompt import Prompt

from . import BoilergenError
from .config import Config, CredentialStore
from .gemini_client import GeminiClient
from .scaffolder.dependencies import merge_dependencies
from .scaffolder.materializer import write_file_map
from .scaffolder.registry import GenerationResult
from .utils import is_within, print_info, print_success, print_warning


FILE_BLOCK_PATTERN = re.compile(r"<([^>\n]+)>\s*\n```[^\n]*\n(.*?)```", re.DOTALL)
DEPS_BLOCK_PATTERN = re.compile(r"```deps[ \t]*\n(.*?)```", re.DOTALL)
ILLEGAL_PATH_CHARS = re.compile(r'[<>:"|?*\x00-\x1f]')
AUTH_ERROR_PATTERN = re.compile(r"401|unauthorized|forbidden|api key", re.IGNORECASE)

STRUCTURE_EXAMPLE = """\
redux/
  slices/
    authSlice.js
  reducer/
    rootReducer.js
  store.js
api/
  client.js
  endpoints.js
  userApi.js
  hooks/
    useUserApi.js
  utils/
    apiUtils.js
"""


class CredentialError(BoilergenError):
    """Raised when no usable Gemini API key can be obtained."""


class AIGenerationError(BoilergenError):
    """Raised when the Gemini request fails for good."""


class AIFileBlock(BaseModel):
    """One ``<path>`` + fenced code block pair parsed from an AI response."""

    file_path: str = Field(..., description="Path relative to the target root")
    content: str = Field(default="")


# ---------------------------------------------------------------------------
# Prompt
# ---------------------------------------------------------------------------


def build_prompt(template_name: str) -> str:
    """Return the generation prompt for *template_name*."""
    return f"""\
You are an expert code generator. Your ONLY job is to generate the minimal, standard boilerplate for the requested type, and nothing else.

USER REQUEST: "{template_name}"

STRICT INSTRUCTIONS:
- ONLY generate the files and folders that are standard for a {template_name} boilerplate.
- DO NOT add explanations, log files, error files or anything unrelated to {template_name}.
- All files and folders MUST be inside a root folder named exactly "{template_name}".
- For each file, output the path on its own line followed by a fenced code block:
<{template_name}/relative/path/to/file.ext>
```js
// file content
```
- Use modern JavaScript/React/Node.js conventions.
- Output only valid code and file structure, no extra text.

EXAMPLE STRUCTURE (one folder per boilerplate):
{STRUCTURE_EXAMPLE}
At the end, output the npm dependencies required by the generated code, one per line:
```deps
package1
package2
```
Only include packages that are actually imported. Do not include devDependencies.
"""


# ---------------------------------------------------------------------------
# Response parsing
# ---------------------------------------------------------------------------


def parse_file_blocks(text: str) -> list[AIFileBlock]:
    """Extract file blocks from *text*. No match yields an empty list."""
    without_deps = DEPS_BLOCK_PATTERN.sub("", text)
    return [
        AIFileBlock(file_path=match.group(1).strip(), content=match.group(2))
        for match in FILE_BLOCK_PATTERN.finditer(without_deps)
    ]


def parse_deps_block(text: str) -> list[str]:
    """Package names from the first ```` ```deps ```` block, if any."""
    match = DEPS_BLOCK_PATTERN.search(text)
    if match is None:
        return []
    return merge_dependencies(line for line in match.group(1).splitlines())


def is_auth_error(error: str | None) -> bool:
    """``True`` if an API error message looks like a rejected credential."""
    return bool(error) and AUTH_ERROR_PATTERN.search(error) is not None


# ---------------------------------------------------------------------------
# Path safety
# ---------------------------------------------------------------------------


def _normalise(path: Path) -> Path:
    return Path(os.path.normpath(path.absolute()))


def safe_relative_path(file_path: str, target_root: str | Path, template_name: str) -> str | None:
    """Return *file_path* normalised relative to *target_root*, or ``None`` if unsafe.

    A path is safe when it has no illegal filename characters, does not end
    in ``.log``, and resolves strictly inside ``<target_root>/<template_name>/``.
    """
    if not file_path or ILLEGAL_PATH_CHARS.search(file_path):
        return None
    if file_path.lower().endswith(".log"):
        return None

    root = _normalise(Path(target_root))
    base = _normalise(root / template_name)
    candidate = _normalise(root / file_path)
    if not is_within(base, root) or base == root:
        return None
    if candidate == base or not is_within(candidate, base):
        return None
    return candidate.relative_to(root).as_posix()


def is_safe_path(file_path: str, target_root: str | Path, template_name: str) -> bool:
    return safe_relative_path(file_path, target_root, template_name) is not None


def filter_safe_blocks(
    blocks: Iterable[AIFileBlock], target_root: str | Path, template_name: str
) -> list[AIFileBlock]:
    """Keep only blocks with safe paths, rewritten to their normalised form."""
    accepted: list[AIFileBlock] = []
    for block in blocks:
        rel = safe_relative_path(block.file_path, target_root, template_name)
        if rel is None:
            print_warning(f"Skipping unsafe path from AI response: {block.file_path}")
            continue
        accepted.append(block.model_copy(update={"file_path": rel}))
    return accepted


# ---------------------------------------------------------------------------
# Credential
# ---------------------------------------------------------------------------


def prompt_api_key(store: CredentialStore) -> str:
    """Ask for the API key with hidden input and persist it."""
    api_key = Prompt.ask("Enter your Gemini API key", password=True).strip()
    if not api_key:
        raise CredentialError("A Gemini API key is required for AI generation")
    path = store.save(api_key)
    print_success(f"API key saved to {path}")
    return api_key


def resolve_api_key(config: Config, store: CredentialStore) -> str:
    """Environment variable first, then the credential file, then ask once."""
    from_env = os.environ.get(config.gemini.api_key_env, "").strip()
    if from_env:
        return from_env
    stored = store.load()
    if stored:
        return stored
    return prompt_api_key(store)


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------


class AIFallbackGenerator:
    """Generates an unknown template through Gemini."""

    def __init__(
        self,
        config: Config,
        client: GeminiClient | None = None,
        store: CredentialStore | None = None,
    ) -> None:
        self.config = config
        self.client = client or GeminiClient(
            base_url=config.gemini.url,
            model=config.gemini.model,
            timeout=config.gemini.timeout,
        )
        self.store = store or CredentialStore(config.credentials_path)

    async def request(self, template_name: str) -> str:
        """Return the raw AI response text, re-prompting once on a rejected key."""
        prompt = build_prompt(template_name)
        api_key = resolve_api_key(self.config, self.store)

        print_info(f"Asking Gemini to generate the '{template_name}' boilerplate...")
        response = await self.client.generate(prompt, api_key)

        if not response.success and is_auth_error(response.error):
            print_warning("Gemini rejected the API key.")
            api_key = prompt_api_key(self.store)
            response = await self.client.generate(prompt, api_key)

        if not response.success:
            raise AIGenerationError(response.error or "Gemini request failed")
        return response.text

    async def generate(self, root: Path, template_name: str) -> GenerationResult:
        """Generate *template_name* under ``<root>/<template_name>/``.

        Returns an empty result (and writes nothing) when the response holds
        no usable file blocks.
        """
        text = await self.request(template_name)

        blocks = parse_file_blocks(text)
        if not blocks:
            print_warning("No files were parsed from the AI response")
            return GenerationResult()

        safe_blocks = filter_safe_blocks(blocks, root, template_name)
        if not safe_blocks:
            print_warning("No files with safe paths were found in the AI response")
            return GenerationResult()

        files: dict[str, str] = {}
        for block in safe_blocks:
            files.setdefault(block.file_path, block.content)

        report = await write_file_map(root, files)
        return GenerationResult(
            files=list(files),
            dependencies=parse_deps_block(text),
            instructions=[
                f"Review the generated files in {template_name}/ before using them",
            ],
            skipped=report.skipped,
            failed=report.failed,
        )
