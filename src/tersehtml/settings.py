"""Minifier configuration.

`MinifySettings` carries the three tag classifications the minifier needs.
It is immutable and read-only for the whole pass; build a new one (or use
`dataclasses.replace`) to change it.
"""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass, field

from .constants import (
    BLOCK_ELEMENTS,
    PRESERVE_INNER_SPACE_ELEMENTS,
    PRESERVE_SURROUNDING_SPACE_ELEMENTS,
)


@dataclass(frozen=True, slots=True)
class MinifySettings:
    """Tag classifications driving whitespace decisions.

    - `block_level_elements`: a pending space right before the closing tag of
      one of these is dropped, since it would never render.
    - `preserve_inner_space_tags`: text inside these is emitted verbatim.
    - `preserve_surrounding_space_tags`: after a pending space is written in
      front of one of these, a space following it is still written.

    All tag names are expected to be ASCII-lowercase.
    """

    block_level_elements: Collection[str] = field(default_factory=lambda: frozenset(BLOCK_ELEMENTS))
    preserve_inner_space_tags: Collection[str] = field(
        default_factory=lambda: frozenset(PRESERVE_INNER_SPACE_ELEMENTS)
    )
    preserve_surrounding_space_tags: Collection[str] = field(
        default_factory=lambda: frozenset(PRESERVE_SURROUNDING_SPACE_ELEMENTS)
    )

    def __post_init__(self) -> None:
        # Accept lists/tuples/sets from user code, normalize for internal use.
        for name in ("block_level_elements", "preserve_inner_space_tags", "preserve_surrounding_space_tags"):
            value = getattr(self, name)
            if isinstance(value, str):
                raise TypeError(f"{name} must be a collection of tag names, not a string")
            if not isinstance(value, frozenset):
                object.__setattr__(self, name, frozenset(str(tag).lower() for tag in value))

    def with_preserved_tags(self, *tags: str) -> MinifySettings:
        """Return a copy that also preserves the interior whitespace of `tags`."""
        extra = frozenset(tag.lower() for tag in tags)
        return MinifySettings(
            block_level_elements=self.block_level_elements,
            preserve_inner_space_tags=self.preserve_inner_space_tags | extra,
            preserve_surrounding_space_tags=self.preserve_surrounding_space_tags,
        )


DEFAULT_SETTINGS = MinifySettings()
