import random

import pytest

from chunkeval.chunks import Chunk
from chunkeval.config import build_config
from chunkeval.evaluator import (
    ChunkCounts,
    ChunkEvaluator,
    ChunkMetrics,
    compute_prf,
    count_correct,
)
from chunkeval.utils.errors import ConfigurationError

ORG, PER, LOC = 0, 1, 2
O = 6


@pytest.fixture()
def evaluator() -> ChunkEvaluator:
    return ChunkEvaluator(num_chunk_types=3, chunk_scheme="IOB")


def test_partial_recall(evaluator: ChunkEvaluator) -> None:
    # inference: B-ORG I-ORG O O O -> [(0,2,ORG)]
    # label:     B-ORG I-ORG O B-LOC O -> [(0,2,ORG), (3,4,LOC)]
    metrics = evaluator.evaluate([0, 1, O, O, O], [0, 1, O, 4, O])
    assert metrics.num_infer_chunks == 1
    assert metrics.num_label_chunks == 2
    assert metrics.num_correct_chunks == 1
    assert metrics.precision == pytest.approx(1.0)
    assert metrics.recall == pytest.approx(0.5)
    assert metrics.f1 == pytest.approx(2 / 3)


def test_identical_sequences(evaluator: ChunkEvaluator) -> None:
    seq = [2, 3, O, O, 0, 1, 1, 1, O, 4]
    metrics = evaluator.evaluate(seq, list(seq))
    assert metrics.num_correct_chunks == metrics.num_infer_chunks == metrics.num_label_chunks == 3
    assert metrics.precision == metrics.recall == metrics.f1 == 1.0


def test_single_tag_vocabulary() -> None:
    # one chunk type under IOB: B-Person=0, I-Person=1, O=2
    evaluator = ChunkEvaluator(num_chunk_types=1, chunk_scheme="IOB")
    metrics = evaluator.evaluate([2, 0, 1, 0, 1], [2, 0, 1, 0, 0])
    assert metrics.precision == 0.5
    assert metrics.recall == pytest.approx(1 / 3)
    assert metrics.f1 == pytest.approx(0.4)


def test_boundary_mismatch_is_not_correct(evaluator: ChunkEvaluator) -> None:
    # B-ORG I-ORG I-ORG vs B-ORG I-ORG O
    metrics = evaluator.evaluate([0, 1, 1], [0, 1, O])
    assert metrics.num_correct_chunks == 0
    assert metrics.f1 == 0.0


def test_type_mismatch_is_not_correct(evaluator: ChunkEvaluator) -> None:
    metrics = evaluator.evaluate([2, 3], [0, 1])
    assert (metrics.num_infer_chunks, metrics.num_label_chunks) == (1, 1)
    assert metrics.num_correct_chunks == 0


def test_exclusion_removes_only_that_type() -> None:
    seq = [0, 1, O, 4, O]
    plain = ChunkEvaluator(num_chunk_types=3).evaluate(seq, seq)
    assert (plain.num_infer_chunks, plain.num_label_chunks, plain.num_correct_chunks) == (2, 2, 2)

    no_loc = ChunkEvaluator(num_chunk_types=3, excluded_chunk_types=[LOC]).evaluate(seq, seq)
    assert (no_loc.num_infer_chunks, no_loc.num_label_chunks, no_loc.num_correct_chunks) == (
        1,
        1,
        1,
    )

    no_org = ChunkEvaluator(num_chunk_types=3, excluded_chunk_types=[ORG]).evaluate(seq, seq)
    assert no_org.num_correct_chunks == 1

    # the LOC false positive disappears from precision once LOC is excluded
    metrics = ChunkEvaluator(num_chunk_types=3, excluded_chunk_types=[LOC]).evaluate(
        [0, 1, O, 4, O], [0, 1, O, O, O]
    )
    assert metrics.precision == 1.0


def test_all_outside_gives_zero_not_nan(evaluator: ChunkEvaluator) -> None:
    metrics = evaluator.evaluate([O, O, O], [O, O, O])
    assert metrics.as_dict() == {
        "precision": 0.0,
        "recall": 0.0,
        "f1": 0.0,
        "num_infer_chunks": 0,
        "num_label_chunks": 0,
        "num_correct_chunks": 0,
    }


def test_no_predicted_chunks(evaluator: ChunkEvaluator) -> None:
    metrics = evaluator.evaluate([O, O, O], [0, 1, O])
    assert metrics.precision == 0.0
    assert metrics.recall == 0.0
    assert metrics.num_label_chunks == 1


def test_empty_sequence(evaluator: ChunkEvaluator) -> None:
    metrics = evaluator.evaluate([], [])
    assert metrics.counts == ChunkCounts()
    assert metrics.f1 == 0.0


def test_correct_never_exceeds_counts() -> None:
    rng = random.Random(7)
    for scheme, tags in (("plain", 1), ("IOB", 2), ("IOE", 2), ("IOBES", 4)):
        evaluator = ChunkEvaluator(num_chunk_types=3, chunk_scheme=scheme)
        for _ in range(100):
            n = rng.randrange(0, 25)
            inf = [rng.randrange(4 * tags) for _ in range(n)]
            lab = [rng.randrange(4 * tags) for _ in range(n)]
            m = evaluator.evaluate(inf, lab)
            assert m.num_correct_chunks <= min(m.num_infer_chunks, m.num_label_chunks)
            assert 0.0 <= m.f1 <= 1.0


def test_count_correct_merges_on_end() -> None:
    infer = [Chunk(1, 3, 0), Chunk(3, 5, 0)]
    label = [Chunk(1, 3, 0), Chunk(3, 4, 0), Chunk(4, 5, 0)]
    assert count_correct(infer, label) == 1
    assert count_correct(infer, label, frozenset({0})) == 0
    assert count_correct([], label) == 0


def test_compute_prf_guards_zero() -> None:
    assert compute_prf(0, 0, 0) == (0.0, 0.0, 0.0)
    assert compute_prf(0, 3, 4) == (0.0, 0.0, 0.0)
    p, r, f = compute_prf(2, 4, 2)
    assert (p, r) == (0.5, 1.0)
    assert f == pytest.approx(2 / 3)


def test_counts_add() -> None:
    total = ChunkCounts(1, 2, 1) + ChunkCounts(3, 0, 0)
    assert total == ChunkCounts(4, 2, 1)


def test_named_outputs() -> None:
    metrics = ChunkMetrics.from_counts(ChunkCounts(4, 2, 1))
    outputs = metrics.as_outputs()
    assert list(outputs) == [
        "Precision",
        "Recall",
        "F1-Score",
        "NumInferChunks",
        "NumLabelChunks",
        "NumCorrectChunks",
    ]
    assert outputs["Precision"] == 0.25
    assert outputs["Recall"] == 0.5
    assert outputs["NumInferChunks"] == 4


def test_evaluator_from_config() -> None:
    cfg = build_config(num_chunk_types=2, chunk_scheme="IOBES")
    evaluator = ChunkEvaluator(cfg)
    assert evaluator.config is cfg
    assert evaluator.table.num_tag_types == 4
    assert [(c.start, c.end) for c in evaluator.decode([3, 8])] == [(0, 1)]


def test_bad_settings_fail_at_construction() -> None:
    with pytest.raises(ConfigurationError):
        ChunkEvaluator(num_chunk_types=3, chunk_scheme="BIO")
    with pytest.raises(ConfigurationError):
        ChunkEvaluator(num_chunk_types=0)
    with pytest.raises(ConfigurationError):
        ChunkEvaluator()
    with pytest.raises(ConfigurationError):
        ChunkEvaluator(build_config(num_chunk_types=3), chunk_scheme="IOE")
