"""Chunk evaluation: matching, counting and corpus-level metrics.

Inference and label sequences are decoded independently with
:func:`chunkeval.chunks.decode_chunks`.  A chunk is correct when the same
``(start, end, chunk_type)`` triple is present on both sides.  Counts are
summed over every sequence of a batch before precision, recall and F1 are
computed, so the ratios are corpus-level rather than per-sequence averages.

Batch layouts accepted by :meth:`ChunkEvaluator.evaluate`:

* ``[N]``: a single sequence;
* ``[N]`` or ``[N, 1]`` with ``lod`` offsets ``[0, n1, n1 + n2, ..., N]``;
* ``[batch, max_len]`` with optional ``seq_lengths`` trimming the padding.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np

from chunkeval.chunks import Chunk, decode_chunks, filtered_count
from chunkeval.config import EvalConfig, build_config
from chunkeval.scheme import SchemeTable
from chunkeval.utils.errors import ConfigurationError, InputShapeError
from chunkeval.utils.logging import get_logger

logger = get_logger(__name__)

__all__ = [
    "ChunkCounts",
    "ChunkMetrics",
    "ChunkEvaluator",
    "compute_prf",
    "count_correct",
    "chunk_eval",
]


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class ChunkCounts:
    """Raw chunk counts; adding two counts merges their batches."""

    num_infer_chunks: int = 0
    num_label_chunks: int = 0
    num_correct_chunks: int = 0

    def __add__(self, other: ChunkCounts) -> ChunkCounts:
        if not isinstance(other, ChunkCounts):
            return NotImplemented
        return ChunkCounts(
            self.num_infer_chunks + other.num_infer_chunks,
            self.num_label_chunks + other.num_label_chunks,
            self.num_correct_chunks + other.num_correct_chunks,
        )


@dataclass(slots=True, frozen=True)
class ChunkMetrics:
    """Precision/recall/F1 together with the counts they derive from."""

    precision: float
    recall: float
    f1: float
    counts: ChunkCounts

    @classmethod
    def from_counts(cls, counts: ChunkCounts) -> ChunkMetrics:
        precision, recall, f1 = compute_prf(
            counts.num_correct_chunks, counts.num_infer_chunks, counts.num_label_chunks
        )
        return cls(precision, recall, f1, counts)

    @property
    def num_infer_chunks(self) -> int:
        return self.counts.num_infer_chunks

    @property
    def num_label_chunks(self) -> int:
        return self.counts.num_label_chunks

    @property
    def num_correct_chunks(self) -> int:
        return self.counts.num_correct_chunks

    def as_outputs(self) -> dict[str, float | int]:
        """Return the six named scalar outputs."""

        return {
            "Precision": self.precision,
            "Recall": self.recall,
            "F1-Score": self.f1,
            "NumInferChunks": self.num_infer_chunks,
            "NumLabelChunks": self.num_label_chunks,
            "NumCorrectChunks": self.num_correct_chunks,
        }

    def as_dict(self) -> dict[str, float | int]:
        """Return a JSON friendly mapping with snake_case keys."""

        return {
            "precision": self.precision,
            "recall": self.recall,
            "f1": self.f1,
            "num_infer_chunks": self.num_infer_chunks,
            "num_label_chunks": self.num_label_chunks,
            "num_correct_chunks": self.num_correct_chunks,
        }


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def compute_prf(correct: int, num_infer: int, num_label: int) -> tuple[float, float, float]:
    """Compute precision, recall and F1 from counts; zero denominators give 0."""

    precision = correct / num_infer if num_infer > 0 else 0.0
    recall = correct / num_label if num_label > 0 else 0.0
    f1 = 2 * precision * recall / (precision + recall) if (precision + recall) > 0 else 0.0
    return precision, recall, f1


def count_correct(
    infer_chunks: Sequence[Chunk],
    label_chunks: Sequence[Chunk],
    excluded: frozenset[int] | set[int] = frozenset(),
) -> int:
    """Count chunks present in both lists with a non-excluded type.

    Both lists must be ordered and non-overlapping, as produced by
    :func:`decode_chunks`; each chunk matches at most one counterpart.
    """

    i = j = 0
    correct = 0
    while i < len(infer_chunks) and j < len(label_chunks):
        pred, gold = infer_chunks[i], label_chunks[j]
        if pred == gold and pred.chunk_type not in excluded:
            correct += 1
        if pred.end < gold.end:
            i += 1
        elif pred.end > gold.end:
            j += 1
        else:
            i += 1
            j += 1
    return correct


def _as_label_array(values: Any, name: str) -> np.ndarray:
    try:
        arr = np.asarray(values)
    except ValueError as exc:
        raise InputShapeError(f"{name} is ragged; pad it and pass seq_lengths") from exc
    if arr.size == 0:
        return arr.astype(np.int64)
    if arr.dtype.kind not in "iu":
        raise InputShapeError(f"{name} must hold integers, got dtype {arr.dtype}")
    return arr.astype(np.int64, copy=False)


def _as_index_array(values: Any, name: str) -> np.ndarray:
    return _as_label_array(values, name).reshape(-1)


def _check_lod(lod: Sequence[int], total: int) -> list[int]:
    offsets = _as_index_array(lod, "lod").tolist()
    if not offsets or offsets[0] != 0 or offsets[-1] != total:
        raise InputShapeError(f"lod offsets must start at 0 and end at {total}, got {offsets}")
    for a, b in zip(offsets, offsets[1:]):
        if b < a:
            raise InputShapeError(f"lod offsets must be non-decreasing, got {offsets}")
    return offsets


# ---------------------------------------------------------------------------
# Evaluator
# ---------------------------------------------------------------------------


class ChunkEvaluator:
    """Evaluate predicted label ids against ground truth at the chunk level.

    Build it from an :class:`EvalConfig` or from keyword settings::

        evaluator = ChunkEvaluator(num_chunk_types=3, chunk_scheme="IOB")
        metrics = evaluator.evaluate(inference, label)

    Invalid settings raise :class:`ConfigurationError` here, before any
    sequence is processed.
    """

    def __init__(self, config: EvalConfig | None = None, **settings: Any) -> None:
        if config is not None and settings:
            raise ConfigurationError("pass either an EvalConfig or keyword settings, not both")
        self._config = config if config is not None else build_config(**settings)
        self._table = self._config.table

    @property
    def config(self) -> EvalConfig:
        return self._config

    @property
    def table(self) -> SchemeTable:
        return self._table

    def decode(self, labels: Any) -> list[Chunk]:
        """Decode one sequence of label ids into chunks."""

        return decode_chunks(
            _as_label_array(labels, "labels").reshape(-1), self._table, self._config.num_chunk_types
        )

    def eval_sequence(self, inference: Any, label: Any) -> ChunkCounts:
        """Return the counts for one pair of equal-length sequences."""

        inf = _as_label_array(inference, "inference").reshape(-1)
        lab = _as_label_array(label, "label").reshape(-1)
        if inf.shape != lab.shape:
            raise InputShapeError(
                f"inference and label lengths differ: {inf.shape[0]} != {lab.shape[0]}"
            )
        return self._count_pair(inf, lab)

    def _count_pair(self, inf: np.ndarray, lab: np.ndarray) -> ChunkCounts:
        num_chunk_types = self._config.num_chunk_types
        excluded = self._config.excluded_chunk_types
        infer_chunks = decode_chunks(inf, self._table, num_chunk_types)
        label_chunks = decode_chunks(lab, self._table, num_chunk_types)
        return ChunkCounts(
            filtered_count(infer_chunks, excluded),
            filtered_count(label_chunks, excluded),
            count_correct(infer_chunks, label_chunks, excluded),
        )

    def iter_sequences(
        self,
        inference: Any,
        label: Any,
        *,
        seq_lengths: Sequence[int] | np.ndarray | None = None,
        lod: Sequence[int] | None = None,
    ) -> Iterator[tuple[np.ndarray, np.ndarray]]:
        """Split a batch into ``(inference, label)`` pairs, one per sequence."""

        inf = _as_label_array(inference, "inference")
        lab = _as_label_array(label, "label")
        if inf.shape != lab.shape:
            raise InputShapeError(
                f"Inference's shape {inf.shape} must be the same as Label's shape {lab.shape}"
            )
        if inf.ndim > 2:
            raise InputShapeError(f"expected a 1-D or 2-D input, got shape {inf.shape}")
        if seq_lengths is not None and lod is not None:
            raise InputShapeError("seq_lengths and lod are mutually exclusive")

        if lod is not None:
            if inf.ndim == 2 and inf.shape[1] != 1:
                raise InputShapeError(f"lod offsets need an [N] or [N, 1] input, got {inf.shape}")
            flat_inf, flat_lab = inf.reshape(-1), lab.reshape(-1)
            offsets = _check_lod(lod, flat_inf.shape[0])
            for a, b in zip(offsets, offsets[1:]):
                yield flat_inf[a:b], flat_lab[a:b]
            return

        if inf.ndim < 2:
            if seq_lengths is not None:
                raise InputShapeError("seq_lengths need a [batch, max_len] input")
            yield inf.reshape(-1), lab.reshape(-1)
            return

        batch, max_len = inf.shape
        if seq_lengths is None:
            for row in range(batch):
                yield inf[row], lab[row]
            return

        lengths = _as_index_array(seq_lengths, "seq_lengths")
        if lengths.shape[0] != batch:
            raise InputShapeError(
                f"seq_lengths has {lengths.shape[0]} entries for a batch of {batch}"
            )
        for row, length in enumerate(lengths.tolist()):
            if not 0 <= int(length) <= max_len:
                raise InputShapeError(f"seq_lengths[{row}]={length} outside [0, {max_len}]")
            yield inf[row, : int(length)], lab[row, : int(length)]

    def count(
        self,
        inference: Any,
        label: Any,
        *,
        seq_lengths: Sequence[int] | np.ndarray | None = None,
        lod: Sequence[int] | None = None,
    ) -> ChunkCounts:
        """Return the counts summed over every sequence of the batch."""

        total = ChunkCounts()
        for inf, lab in self.iter_sequences(inference, label, seq_lengths=seq_lengths, lod=lod):
            total = total + self._count_pair(inf, lab)
        return total

    def evaluate(
        self,
        inference: Any,
        label: Any,
        *,
        seq_lengths: Sequence[int] | np.ndarray | None = None,
        lod: Sequence[int] | None = None,
    ) -> ChunkMetrics:
        """Evaluate a batch and return corpus-level metrics."""

        counts = self.count(inference, label, seq_lengths=seq_lengths, lod=lod)
        metrics = ChunkMetrics.from_counts(counts)
        logger.debug(
            "infer=%d label=%d correct=%d precision=%.4f recall=%.4f f1=%.4f",
            counts.num_infer_chunks,
            counts.num_label_chunks,
            counts.num_correct_chunks,
            metrics.precision,
            metrics.recall,
            metrics.f1,
        )
        return metrics

    __call__ = evaluate


def chunk_eval(
    inference: Any,
    label: Any,
    num_chunk_types: int,
    chunk_scheme: str = "IOB",
    excluded_chunk_types: Sequence[int] = (),
    *,
    seq_lengths: Sequence[int] | np.ndarray | None = None,
    lod: Sequence[int] | None = None,
) -> ChunkMetrics:
    """One-shot evaluation of a batch; see :class:`ChunkEvaluator`."""

    evaluator = ChunkEvaluator(
        num_chunk_types=num_chunk_types,
        chunk_scheme=chunk_scheme,
        excluded_chunk_types=list(excluded_chunk_types),
    )
    return evaluator.evaluate(inference, label, seq_lengths=seq_lengths, lod=lod)
