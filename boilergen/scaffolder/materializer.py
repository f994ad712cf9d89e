"""Writes boilerplate file trees into a target project.

Two strategies are supported:

* **map mode** (:func:`write_file_map`) takes ``{relative_path: content}``
  produced by the template renderer or the AI fallback.
* **copy mode** (:func:`copy_tree`) recursively copies a static template
  directory, skipping basenames on an ignore list.

Both share one invariant: an existing path is never overwritten. Such paths
are reported as skipped. Individual failures are printed and recorded but
never abort the rest of the tree (best effort, not transactional). Entries
are processed one at a time; blocking I/O runs in a worker thread so the
event loop stays responsive to signals.
"""

from __future__ import annotations

import asyncio
import os
import shutil
from collections.abc import Iterable, Mapping
from pathlib import Path

from pydantic import BaseModel, Field

from ..utils import is_within, print_error, print_warning


DEFAULT_IGNORE: frozenset[str] = frozenset({"__init__.py", "__pycache__", ".DS_Store"})


class MaterializeReport(BaseModel):
    """Outcome of one materialization pass. All paths are relative, ``/``-separated."""

    written: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list, description="Already existed; untouched")
    failed: list[str] = Field(default_factory=list)

    def merge(self, other: "MaterializeReport") -> "MaterializeReport":
        """Return a new report containing both reports' entries."""
        return MaterializeReport(
            written=[*self.written, *other.written],
            skipped=[*self.skipped, *other.skipped],
            failed=[*self.failed, *other.failed],
        )


# ---------------------------------------------------------------------------
# Map mode
# ---------------------------------------------------------------------------


async def write_file_map(root: str | Path, files: Mapping[str, str]) -> MaterializeReport:
    """Write every ``{relative_path: content}`` entry under *root*.

    Intermediate directories are created as needed. A path that already exists
    is skipped with an "already exists" warning. A path that would resolve
    outside *root* is refused and recorded as failed.
    """
    root_path = _normalise(Path(root))
    report = MaterializeReport()

    for rel_path, content in files.items():
        target = _normalise(root_path / rel_path)
        if target == root_path or not is_within(target, root_path):
            print_error(f"Refusing to write outside the target directory: {rel_path}")
            report.failed.append(rel_path)
            continue

        display = target.relative_to(root_path).as_posix()
        try:
            created = await asyncio.to_thread(_write_if_absent, target, content)
        except OSError as exc:
            print_error(f"Failed to write {display}: {exc}")
            report.failed.append(display)
            continue

        if created:
            report.written.append(display)
        else:
            print_warning(f"File already exists: {display}")
            report.skipped.append(display)

    return report


# ---------------------------------------------------------------------------
# Copy mode
# ---------------------------------------------------------------------------


async def copy_tree(
    source: str | Path,
    root: str | Path,
    *,
    into: str = "",
    ignore: Iterable[str] = DEFAULT_IGNORE,
) -> MaterializeReport:
    """Copy the static tree at *source* to ``<root>/<into>``.

    Entries whose basename is in *ignore* are skipped entirely (directories
    included). Reported paths are relative to *root*, so copying
    ``static/express`` with ``into="express"`` reports ``express/app.js``.
    """
    source_path = Path(source)
    root_path = _normalise(Path(root))
    dest_base = _normalise(root_path / into) if into else root_path
    report = MaterializeReport()

    for rel_path in walk_files(source_path, ignore=ignore):
        destination = dest_base / rel_path
        display = destination.relative_to(root_path).as_posix()
        try:
            created = await asyncio.to_thread(
                _copy_if_absent, source_path / rel_path, destination
            )
        except OSError as exc:
            print_error(f"Failed to copy {display}: {exc}")
            report.failed.append(display)
            continue

        if created:
            report.written.append(display)
        else:
            print_warning(f"File already exists: {display}")
            report.skipped.append(display)

    return report


# ---------------------------------------------------------------------------
# Directory walker
# ---------------------------------------------------------------------------


def walk_files(directory: str | Path, ignore: Iterable[str] = ()) -> list[str]:
    """List every regular file under *directory*, relative to it.

    The result is sorted and free of duplicates, so it does not depend on the
    order the OS lists directory entries in. Directory entries themselves are
    not included. Symlinked directories are followed at most once per real
    directory (tracked by device and inode), which guarantees termination on
    symlink cycles. A missing directory yields an empty list.
    """
    base = Path(directory)
    if not base.is_dir():
        return []

    found: set[str] = set()
    visited: set[tuple[int, int]] = set()
    _walk(base, "", frozenset(ignore), visited, found)
    return sorted(found)


def _walk(
    current: Path,
    prefix: str,
    ignore: frozenset[str],
    visited: set[tuple[int, int]],
    found: set[str],
) -> None:
    try:
        st = current.stat()
    except OSError:
        return
    key = (st.st_dev, st.st_ino)
    if key in visited:
        return
    visited.add(key)

    try:
        with os.scandir(current) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError:
        return

    for entry in entries:
        if entry.name in ignore:
            continue
        rel = f"{prefix}{entry.name}"
        try:
            if entry.is_dir():
                _walk(Path(entry.path), f"{rel}/", ignore, visited, found)
            elif entry.is_file():
                found.add(rel)
        except OSError:
            # Broken symlink or entry vanished mid-walk.
            continue


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _normalise(path: Path) -> Path:
    """Absolute, lexically normalised path (``..`` collapsed, no symlink resolution)."""
    return Path(os.path.normpath(path.absolute()))


def _write_if_absent(path: Path, content: str) -> bool:
    """Create *path* with *content*; return ``False`` if it already existed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        with open(path, "x", encoding="utf-8", newline="") as fh:
            fh.write(content)
    except FileExistsError:
        return False
    return True


def _copy_if_absent(source: Path, destination: Path) -> bool:
    """Copy *source* to *destination*; return ``False`` if it already existed."""
    destination.parent.mkdir(parents=True, exist_ok=True)
    try:
        with open(source, "rb") as src, open(destination, "xb") as dst:
            shutil.copyfileobj(src, dst)
    except FileExistsError:
        return False
    shutil.copymode(source, destination)
    return True
