"""Template registry and the result model every generator returns."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel, Field

from .. import BoilergenError


class TemplateError(BoilergenError):
    """Raised when a template cannot be generated from its definition."""


class GenerationResult(BaseModel):
    """What a template generator produced.

    ``files`` lists every path belonging to the template, relative to the
    target root, whether it was written in this run or already present.
    ``skipped`` is the subset that already existed and was left untouched.
    """

    files: list[str] = Field(default_factory=list)
    dependencies: list[str] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)

    @property
    def written(self) -> list[str]:
        """Paths actually created by this run."""
        excluded = set(self.skipped) | set(self.failed)
        return [f for f in self.files if f not in excluded]


GenerateFn = Callable[[Path, Sequence[str]], Awaitable[GenerationResult]]


@dataclass(frozen=True)
class TemplateDescriptor:
    """A named template: how to generate it and what it depends on."""

    name: str
    description: str
    generate: GenerateFn
    dependencies: tuple[str, ...] = ()
    default_entity: str | None = None
    parts: tuple[str, ...] = field(default=())

    @property
    def composite(self) -> bool:
        """``True`` when the template fans out to other registered templates."""
        return bool(self.parts)


class TemplateRegistry:
    """Exact, case-sensitive name -> ``TemplateDescriptor`` lookup table."""

    def __init__(self) -> None:
        self._templates: dict[str, TemplateDescriptor] = {}

    def register(self, descriptor: TemplateDescriptor) -> None:
        """Register a template. Duplicate names are a programming error."""
        if descriptor.name in self._templates:
            raise ValueError(f"Template '{descriptor.name}' already registered")
        self._templates[descriptor.name] = descriptor

    def resolve(self, name: str) -> TemplateDescriptor | None:
        """Return the descriptor for *name*, or ``None`` if it is unknown."""
        return self._templates.get(name)

    def names(self) -> list[str]:
        """Registered names in registration order."""
        return list(self._templates)

    def list_all(self) -> list[TemplateDescriptor]:
        return list(self._templates.values())

    def __contains__(self, name: object) -> bool:
        return name in self._templates

    def __len__(self) -> int:
        return len(self._templates)
