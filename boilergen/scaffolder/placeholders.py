"""Entity-name variants substituted into boilerplate templates.

Capitalisation touches the first character only and pluralisation is a plain
``s`` suffix. Both are intentionally naive: generated file names and the
identifiers inside them are derived from the same transformation, so "fixing"
irregular plurals would desynchronise them.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class EntityNames(BaseModel):
    """The set of name variants available to every template as ``entity``."""

    name: str = Field(..., description="Entity name exactly as supplied, e.g. 'user'")
    capitalized: str = Field(..., description="First character upper-cased, e.g. 'User'")
    plural: str = Field(..., description="Naive plural, e.g. 'users'")
    capitalized_plural: str = Field(..., description="e.g. 'Users'")
    upper: str = Field(..., description="Fully upper-cased, e.g. 'USER'")

    def as_context(self) -> dict[str, str]:
        """Return the variants as a flat Jinja2 context fragment."""
        return self.model_dump()


def capitalize_first(value: str) -> str:
    """Upper-case the first character and leave the rest untouched.

    Unlike ``str.capitalize`` this does not lower-case the remainder, so
    ``"userProfile"`` becomes ``"UserProfile"``.
    """
    if not value:
        return value
    return value[0].upper() + value[1:]


def naive_plural(value: str) -> str:
    """Append ``s``. ``"person"`` becomes ``"persons"`` on purpose."""
    return f"{value}s"


def interpolate(entity_name: str) -> EntityNames:
    """Derive every name variant for *entity_name*.

    Examples::

        interpolate("user").capitalized -> "User"
        interpolate("user").plural      -> "users"
    """
    capitalized = capitalize_first(entity_name)
    return EntityNames(
        name=entity_name,
        capitalized=capitalized,
        plural=naive_plural(entity_name),
        capitalized_plural=naive_plural(capitalized),
        upper=entity_name.upper(),
    )
