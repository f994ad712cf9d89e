"""boilergen scaffolder -- renders and writes boilerplate templates.

Quick usage::

    from boilergen.scaffolder import build_default_registry

    registry = build_default_registry()
    descriptor = registry.resolve("redux")
    result = await descriptor.generate(Path("./src"), ["user"])
"""

from boilergen.scaffolder.boilerplates import BoilerplateGenerator, build_default_registry
from boilergen.scaffolder.registry import (
    GenerationResult,
    TemplateDescriptor,
    TemplateError,
    TemplateRegistry,
)
from boilergen.scaffolder.templates import TemplateRenderer

__all__ = [
    "BoilerplateGenerator",
    "GenerationResult",
    "TemplateDescriptor",
    "TemplateError",
    "TemplateRegistry",
    "TemplateRenderer",
    "build_default_registry",
]
