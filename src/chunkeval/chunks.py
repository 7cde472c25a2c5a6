"""Chunk model and the boundary state machine that decodes label ids.

Chunks follow the half-open interval convention ``[start, end)`` over token
positions.  A decoded list is ordered by ``start`` and its chunks never
overlap.

The token whose chunk type equals ``num_chunk_types`` is the *Outside* (O)
token, whatever its tag type; negative ids and tag types with no role in the
scheme are Outside too.  Outside tokens never open or continue a chunk.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np

from chunkeval.scheme import SchemeTable, TagRole
from chunkeval.utils.logging import get_logger

logger = get_logger(__name__)

_OUTSIDE = TagRole.INVALID
_OPENING = (TagRole.BEGIN, TagRole.SINGLE)
_CLOSING = (TagRole.END, TagRole.SINGLE)


@dataclass(slots=True, frozen=True, order=True)
class Chunk:
    """A typed span ``[start, end)`` decoded from one sequence."""

    start: int
    end: int
    chunk_type: int

    @property
    def length(self) -> int:
        """Return the number of tokens covered."""

        return self.end - self.start


def _is_chunk_end(prev_role: TagRole, prev_type: int, role: TagRole, chunk_type: int) -> bool:
    """Return ``True`` if the open chunk closes before the current token."""

    if prev_role is _OUTSIDE:
        return False
    if role is _OUTSIDE:
        return True
    if chunk_type != prev_type:
        return True
    if prev_role in (TagRole.BEGIN, TagRole.INSIDE):
        return role in _OPENING
    return True


def _is_chunk_begin(prev_role: TagRole, prev_type: int, role: TagRole, chunk_type: int) -> bool:
    """Return ``True`` if the current token starts a new chunk."""

    if prev_role is _OUTSIDE:
        return role is not _OUTSIDE
    if role is _OUTSIDE:
        return False
    # A type change starts a chunk even without a Begin marker.
    if chunk_type != prev_type:
        return True
    if role in _OPENING:
        return True
    return prev_role in _CLOSING


def _as_ints(labels: Iterable[int] | np.ndarray) -> list[int]:
    if isinstance(labels, np.ndarray):
        return [int(x) for x in labels.reshape(-1).tolist()]
    return [int(x) for x in labels]


def decode_chunks(
    labels: Iterable[int] | np.ndarray,
    table: SchemeTable,
    num_chunk_types: int,
) -> list[Chunk]:
    """Decode one sequence of label ids into its ordered chunk list.

    Parameters
    ----------
    labels:
        Label ids of a single sequence.
    table:
        Role table of the active scheme.
    num_chunk_types:
        Number of real chunk types; the chunk type equal to this value is
        Outside.  Larger chunk types are still decoded and a warning is
        logged.
    """

    seq = _as_ints(labels)
    chunks: list[Chunk] = []
    in_chunk = False
    chunk_start = 0
    prev_role = _OUTSIDE
    prev_type = num_chunk_types
    over_range = 0

    for i, label in enumerate(seq):
        role, chunk_type = _OUTSIDE, num_chunk_types
        if label >= 0:
            tag_type, ctype = table.split_label(label)
            trole = table.role_of(tag_type)
            if trole is not _OUTSIDE and ctype != num_chunk_types:
                role, chunk_type = trole, ctype
                if ctype > num_chunk_types:
                    over_range += 1

        if in_chunk and _is_chunk_end(prev_role, prev_type, role, chunk_type):
            chunks.append(Chunk(chunk_start, i, prev_type))
            in_chunk = False
        if _is_chunk_begin(prev_role, prev_type, role, chunk_type):
            chunk_start = i
            in_chunk = True
        if in_chunk and role is TagRole.SINGLE:
            chunks.append(Chunk(i, i + 1, chunk_type))
            in_chunk = False

        prev_role, prev_type = role, chunk_type

    if in_chunk:
        chunks.append(Chunk(chunk_start, len(seq), prev_type))

    if over_range:
        logger.warning(
            "%d token(s) carry a chunk type above num_chunk_types=%d; counted as chunks",
            over_range,
            num_chunk_types,
        )
    return chunks


def filtered_count(chunks: Iterable[Chunk], excluded: frozenset[int] | set[int]) -> int:
    """Return the number of ``chunks`` whose type is not in ``excluded``."""

    return sum(1 for c in chunks if c.chunk_type not in excluded)


__all__ = ["Chunk", "decode_chunks", "filtered_count"]
