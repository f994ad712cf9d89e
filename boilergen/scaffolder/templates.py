"""Jinja2 template rendering for boilerplate generation.

Provides the TemplateRenderer class which loads Jinja2 templates from the
``boilergen/scaffolder/templates/`` directory and renders them with the
entity-name context produced by :func:`~boilergen.scaffolder.placeholders.interpolate`.
Rendering never touches the target project: it returns content strings that
the materializer writes.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from .placeholders import capitalize_first, naive_plural


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 boilerplate templates.

    Templates are plain JavaScript/JSX/CSS files with a ``.j2`` suffix.
    Rendering uses ``StrictUndefined`` so a misspelt placeholder fails loudly
    instead of silently producing an empty identifier in generated code.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["capitalize_first"] = capitalize_first
        self.env.filters["plural"] = naive_plural

    # -- Single template rendering -----------------------------------------

    def render(self, template_path: str, context: Mapping[str, Any]) -> str:
        """Render a single template with the provided context.

        Args:
            template_path: Path relative to the template directory (e.g.
                ``"redux/slice.js.j2"``).
            context: Dictionary of variables available inside the template.

        Returns:
            The rendered template content as a string.
        """
        template = self.env.get_template(template_path)
        return template.render(**context)

    def render_string(self, template_string: str, context: Mapping[str, Any]) -> str:
        """Render an inline template string with the provided context."""
        template = self.env.from_string(template_string)
        return template.render(**context)

    # -- Batch rendering ---------------------------------------------------

    def render_map(
        self,
        layout: Mapping[str, str],
        context: Mapping[str, Any],
    ) -> dict[str, str]:
        """Render a ``{output_path: template_path}`` layout.

        Returns a ``{output_path: content}`` mapping in the same order as
        *layout*, ready to hand to the map-mode materializer.
        """
        return {
            output_path: self.render(template_path, context)
            for output_path, template_path in layout.items()
        }

    # -- Utility -----------------------------------------------------------

    def list_templates(self, prefix: str = "") -> list[str]:
        """Return a sorted list of all ``.j2`` template paths under *prefix*.

        Paths are relative to the template root directory and use ``/``.
        """
        search_dir = self.template_dir / prefix if prefix else self.template_dir
        if not search_dir.is_dir():
            return []
        return sorted(
            p.relative_to(self.template_dir).as_posix()
            for p in search_dir.rglob("*.j2")
        )
