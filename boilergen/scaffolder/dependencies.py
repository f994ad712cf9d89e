"""Dependency aggregation across one or more template generators."""

from __future__ import annotations

from collections.abc import Iterable


def merge_dependencies(*dependency_lists: Iterable[str]) -> list[str]:
    """Merge package-name lists into one de-duplicated list.

    Order is first-seen across all inputs. Names are compared verbatim after
    stripping surrounding whitespace; blank entries are dropped. There is no
    version handling: a later request for the same name is simply absorbed.

    Examples::

        merge_dependencies(["axios", "react-redux"], ["react-redux", "redux-persist"])
        -> ["axios", "react-redux", "redux-persist"]
    """
    seen: set[str] = set()
    merged: list[str] = []
    for deps in dependency_lists:
        for dep in deps:
            name = dep.strip()
            if not name or name in seen:
                continue
            seen.add(name)
            merged.append(name)
    return merged
