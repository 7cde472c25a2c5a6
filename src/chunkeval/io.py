"""Reader for JSON Lines evaluation batches.

Each non-blank line holds one sequence pair::

    {"inference": [0, 1, 6], "label": [0, 1, 1], "length": 3}

``length`` is optional and trims both lists to their first ``length`` ids.
Blank lines are skipped.  Malformed records raise
:class:`InputFormatError` naming the 1-based line number.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from chunkeval.utils.errors import InputFormatError


@dataclass(slots=True, frozen=True)
class SequencePair:
    """One inference/label pair read from a batch file."""

    inference: tuple[int, ...]
    label: tuple[int, ...]
    line_no: int


def _int_list(record: dict[str, Any], key: str, line_no: int) -> list[int]:
    value = record.get(key)
    if not isinstance(value, list):
        raise InputFormatError(f"line {line_no}: '{key}' must be a list of integers")
    for item in value:
        if isinstance(item, bool) or not isinstance(item, int):
            raise InputFormatError(f"line {line_no}: '{key}' contains non-integer {item!r}")
    return value


def parse_record(line: str, line_no: int) -> SequencePair:
    """Parse one JSONL ``line`` into a :class:`SequencePair`."""

    try:
        record = json.loads(line)
    except json.JSONDecodeError as exc:
        raise InputFormatError(f"line {line_no}: invalid JSON ({exc.msg})") from exc
    if not isinstance(record, dict):
        raise InputFormatError(f"line {line_no}: expected a JSON object")

    inference = _int_list(record, "inference", line_no)
    label = _int_list(record, "label", line_no)
    if len(inference) != len(label):
        raise InputFormatError(
            f"line {line_no}: inference and label lengths differ "
            f"({len(inference)} != {len(label)})"
        )

    length = record.get("length")
    if length is not None:
        if isinstance(length, bool) or not isinstance(length, int):
            raise InputFormatError(f"line {line_no}: 'length' must be an integer")
        if not 0 <= length <= len(label):
            raise InputFormatError(f"line {line_no}: length {length} outside [0, {len(label)}]")
        inference, label = inference[:length], label[:length]

    return SequencePair(tuple(inference), tuple(label), line_no)


def read_jsonl_pairs(
    path: str | os.PathLike[str], *, encoding: str = "utf-8"
) -> list[SequencePair]:
    """Read every sequence pair from the JSONL file at ``path``."""

    pairs: list[SequencePair] = []
    with Path(path).open("rb") as fh:
        for line_no, raw in enumerate(fh, start=1):
            try:
                line = raw.decode(encoding)
            except UnicodeDecodeError as exc:
                raise InputFormatError(
                    f"line {line_no}: not valid {encoding} ({exc.reason})"
                ) from exc
            if not line.strip():
                continue
            pairs.append(parse_record(line, line_no))
    return pairs


__all__ = ["SequencePair", "parse_record", "read_jsonl_pairs"]
