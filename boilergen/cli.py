"""Command-line front end.

``boilergen <target> <template> [entity] [flags]`` resolves the template in
the registry, generates it into the target directory, prints a report and
then offers to install the template's dependencies. Unknown template names
are offered to the AI fallback.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Sequence
from pathlib import Path

from rich.prompt import Confirm

from . import __version__
from .ai_fallback import AIFallbackGenerator
from .config import Config
from .installer import InstallPrompter
from .scaffolder import GenerationResult, TemplateRegistry, build_default_registry
from .utils import (
    console,
    ensure_dir,
    print_error,
    print_info,
    print_section,
    print_success,
    print_template_table,
    print_warning,
)


EXIT_INTERRUPTED = 130


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


def print_templates(registry: TemplateRegistry) -> None:
    print_template_table((d.name, d.description) for d in registry.list_all())


def print_report(template_name: str, result: GenerationResult, package_manager: str = "npm") -> None:
    """Print dependencies, next steps and the file lists for one generation."""
    if result.written:
        print_success(f"{template_name} boilerplate added successfully!")
    else:
        print_warning(f"No new files written for {template_name}.")
    console.print()
    print_section(
        "Required dependencies:",
        [f"{package_manager} install {dep}" for dep in result.dependencies],
        style="cyan",
        bullet="$",
    )
    print_section("Next steps:", result.instructions, style="blue", bullet="•")
    print_section("Files created:", result.written, style="green", bullet="✓")
    print_section("Skipped (already exist):", result.skipped, style="yellow", bullet="-")
    print_section("Failed:", result.failed, style="red", bullet="✗")
    console.print()


# ---------------------------------------------------------------------------
# Run
# ---------------------------------------------------------------------------


async def generate_with_ai(
    root: Path, template_name: str, config: Config, registry: TemplateRegistry
) -> GenerationResult | None:
    """Offer the AI fallback for an unknown template. ``None`` if declined."""
    print_error(f'Template "{template_name}" not found!')
    if not config.ai_fallback:
        print_templates(registry)
        return None

    accepted = config.install.assume_yes or Confirm.ask(
        f'Generate a "{template_name}" boilerplate with AI?', default=True
    )
    if not accepted:
        print_templates(registry)
        return None

    ensure_dir(root)
    return await AIFallbackGenerator(config).generate(root, template_name)


async def run(
    target: str,
    template_name: str,
    options: Sequence[str],
    config: Config,
    registry: TemplateRegistry,
) -> int:
    """Generate *template_name* into *target*; return the process exit code."""
    root = Path(target).resolve()
    descriptor = registry.resolve(template_name)

    if descriptor is None:
        result = await generate_with_ai(root, template_name, config, registry)
        if result is None:
            return 0
    else:
        if not root.exists():
            print_info(f"Creating directory: {root}")
            ensure_dir(root)
        print_info(f"Adding {template_name} boilerplate to: {root}")
        result = await descriptor.generate(root, options)

    if not result.files:
        return 0

    print_report(template_name, result, config.install.package_manager)

    prompter = InstallPrompter(
        package_manager=config.install.package_manager,
        assume_yes=config.install.assume_yes,
        skip=config.install.skip,
    )
    summary = await asyncio.create_task(prompter.prompt_install(result.dependencies))
    return EXIT_INTERRUPTED if summary.interrupted else 0


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="boilergen",
        description="Generate clean, minimal boilerplate code for your existing projects",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  boilergen ./src redux user\n"
            "  boilergen ./components form contact\n"
            "  boilergen ./src auth\n"
            "  boilergen ./src react-native\n"
            "  boilergen ./server express --yes\n"
        ),
    )
    parser.add_argument("target", nargs="?", help="Directory to add the boilerplate to")
    parser.add_argument("template", nargs="?", help="Template name (see --list)")
    parser.add_argument(
        "options",
        nargs="*",
        help="Template options; the first one is the entity name (e.g. user)",
    )
    parser.add_argument("--list", action="store_true", help="List available templates and exit")
    parser.add_argument(
        "--no-ai",
        action="store_true",
        help="Do not offer AI generation for unknown templates",
    )
    parser.add_argument(
        "--yes", "-y",
        action="store_true",
        help="Answer yes to every prompt",
    )
    parser.add_argument(
        "--skip-install",
        action="store_true",
        help="Never install dependencies",
    )
    parser.add_argument(
        "--package-manager",
        default=None,
        help="Package manager used to install dependencies (default: npm)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def build_config(args: argparse.Namespace) -> Config:
    """Environment configuration with command-line flags applied on top."""
    config = Config.from_env()
    if args.no_ai:
        config.ai_fallback = False
    if args.yes:
        config.install.assume_yes = True
    if args.skip_install:
        config.install.skip = True
    if args.package_manager:
        config.install.package_manager = args.package_manager
    return config


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point for ``boilergen`` and ``python -m boilergen``."""
    parser = build_parser()
    args = parser.parse_intermixed_args(argv)
    registry = build_default_registry()

    if args.list:
        print_templates(registry)
        return

    if not args.target or not args.template:
        parser.print_help()
        console.print()
        print_templates(registry)
        return

    try:
        config = build_config(args)
        exit_code = asyncio.run(run(args.target, args.template, args.options, config, registry))
    except KeyboardInterrupt:
        print_warning("Interrupted")
        sys.exit(EXIT_INTERRUPTED)
    except Exception as exc:  # noqa: BLE001
        print_error(f"Error: {exc}")
        return

    if exit_code:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
