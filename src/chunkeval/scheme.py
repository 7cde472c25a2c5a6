"""Tagging schemes and the tag-type to boundary-role table.

A label id packs two values: the *tag type* (the boundary marker such as B or
I) and the *chunk type* (the entity class).  With ``num_tag_types`` taken from
the active scheme::

    tag_type = label % num_tag_types
    chunk_type = label // num_tag_types

Each scheme assigns a structural role to its tag types:

    ======  ===========  =====  ======  ===  ======
    Scheme  cardinality  Begin  Inside  End  Single
    ======  ===========  =====  ======  ===  ======
    plain   1            -      0       -    -
    IOB     2            0      1       -    -
    IOE     2            -      0       1    -
    IOBES   4            0      1       2    3
    ======  ===========  =====  ======  ===  ======

``plain`` has no explicit boundary markers; its only tag type continues the
open chunk and boundaries fall to chunk type changes alone.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from chunkeval.utils.errors import ConfigurationError


class ChunkScheme(str, Enum):
    """Supported tagging schemes."""

    PLAIN = "plain"
    IOB = "IOB"
    IOE = "IOE"
    IOBES = "IOBES"


class TagRole(Enum):
    """Structural role of a tag type within its scheme."""

    BEGIN = "B"
    INSIDE = "I"
    END = "E"
    SINGLE = "S"
    INVALID = "O"


@dataclass(slots=True, frozen=True)
class SchemeTable:
    """Role lookup for one scheme.

    ``roles[t]`` is the role of tag type ``t``; the tuple length is the
    scheme's tag-type cardinality.
    """

    scheme: ChunkScheme
    roles: tuple[TagRole, ...]

    @property
    def num_tag_types(self) -> int:
        return len(self.roles)

    def role_of(self, tag_type: int) -> TagRole:
        """Return the role of ``tag_type`` or ``TagRole.INVALID`` when out of range."""

        if 0 <= tag_type < len(self.roles):
            return self.roles[tag_type]
        return TagRole.INVALID

    def split_label(self, label: int) -> tuple[int, int]:
        """Split ``label`` into ``(tag_type, chunk_type)``."""

        return label % len(self.roles), label // len(self.roles)


_TABLES: dict[ChunkScheme, SchemeTable] = {
    ChunkScheme.PLAIN: SchemeTable(ChunkScheme.PLAIN, (TagRole.INSIDE,)),
    ChunkScheme.IOB: SchemeTable(ChunkScheme.IOB, (TagRole.BEGIN, TagRole.INSIDE)),
    ChunkScheme.IOE: SchemeTable(ChunkScheme.IOE, (TagRole.INSIDE, TagRole.END)),
    ChunkScheme.IOBES: SchemeTable(
        ChunkScheme.IOBES,
        (TagRole.BEGIN, TagRole.INSIDE, TagRole.END, TagRole.SINGLE),
    ),
}


def parse_scheme(name: str | ChunkScheme) -> ChunkScheme:
    """Return the :class:`ChunkScheme` named ``name``.

    Raises :class:`ConfigurationError` for unknown names.  Matching is exact
    (``"IOB"``, not ``"iob"``) apart from ``plain`` which is lower case.
    """

    if isinstance(name, ChunkScheme):
        return name
    try:
        return ChunkScheme(name)
    except ValueError:
        choices = ", ".join(s.value for s in ChunkScheme)
        raise ConfigurationError(
            f"unknown chunk scheme {name!r}; expected one of: {choices}"
        ) from None


def scheme_table(scheme: str | ChunkScheme) -> SchemeTable:
    """Return the :class:`SchemeTable` for ``scheme``."""

    return _TABLES[parse_scheme(scheme)]


def role_of(scheme: str | ChunkScheme, tag_type: int) -> TagRole:
    """Return the role of ``tag_type`` under ``scheme``."""

    return scheme_table(scheme).role_of(tag_type)


def num_tag_types(scheme: str | ChunkScheme) -> int:
    """Return the tag-type cardinality of ``scheme``."""

    return scheme_table(scheme).num_tag_types


__all__ = [
    "ChunkScheme",
    "TagRole",
    "SchemeTable",
    "parse_scheme",
    "scheme_table",
    "role_of",
    "num_tag_types",
]
