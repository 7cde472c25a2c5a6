"""Typer-based command line interface for chunk evaluation.

The ``run`` command reads a JSON Lines batch (see :mod:`chunkeval.io`),
evaluates every sequence pair as one batch and prints the six outputs as JSON.
The ``decode`` command prints the chunks of a single label sequence, which is
handy when checking how a label vocabulary maps onto a scheme.

Exit codes
----------
0 success
3 I/O error (missing input, unwritable report)
4 configuration error
5 input error (malformed records, inconsistent shapes)
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from time import perf_counter
from types import TracebackType
from typing import Optional

import typer

from .config import EvalConfig, load_config
from .evaluator import ChunkEvaluator
from .io import read_jsonl_pairs
from .utils.errors import ConfigurationError, InputFormatError, InputShapeError
from .utils.logging import configure_logging

if not sys.stdout.isatty():  # pragma: no cover - CLI test context
    os.environ.setdefault("NO_COLOR", "1")
    os.environ.setdefault("RICH_DISABLE_NO_COLOR", "1")

app = typer.Typer(
    name="chunkeval",
    help="Chunk-level precision/recall/F1 for sequence labeling. Use 'chunkeval run'.",
)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _safe_exit(code: int, msg: str | None = None) -> None:
    """Exit the CLI with ``code`` emitting ``msg`` to stderr if provided."""

    if msg:
        typer.echo(msg, err=True)
    raise typer.Exit(code)


class Timing:
    """Context manager measuring elapsed milliseconds."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end = 0.0

    def __enter__(self) -> "Timing":
        self._start = perf_counter()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self._end = perf_counter()

    @property
    def ms(self) -> float:
        return (self._end - self._start) * 1000.0


def _load(
    config_path: Path | None,
    num_chunk_types: int | None,
    scheme: str | None,
    exclude: list[int] | None,
) -> EvalConfig:
    overrides = {
        "num_chunk_types": num_chunk_types,
        "chunk_scheme": scheme,
        "excluded_chunk_types": exclude or None,
    }
    try:
        cfg = load_config(config_path, overrides=overrides)
    except (ConfigurationError, OSError) as exc:
        _safe_exit(4, str(exc).splitlines()[0])
    return cfg


@app.callback()
def main() -> None:
    """Entry point for the chunkeval command group."""
    pass


@app.command()
def run(  # noqa: PLR0913
    in_path: Path = typer.Option(  # noqa: B008
        ..., "--in", "--input", help="JSONL file with 'inference' and 'label' id lists"
    ),
    config_path: Optional[Path] = typer.Option(  # noqa: B008
        None, "--config", help="YAML config to override defaults"
    ),
    num_chunk_types: Optional[int] = typer.Option(  # noqa: B008
        None, "--num-chunk-types", "-n", help="Number of chunk types (O uses this id)"
    ),
    scheme: Optional[str] = typer.Option(  # noqa: B008
        None, "--scheme", help="Tagging scheme: plain, IOB, IOE or IOBES"
    ),
    exclude: Optional[list[int]] = typer.Option(  # noqa: B008
        None, "--exclude", help="Chunk type left out of every count (repeatable)"
    ),
    out_path: Optional[Path] = typer.Option(  # noqa: B008
        None, "--out", help="Write the outputs as JSON to this file"
    ),
    verbose: bool = typer.Option(  # noqa: B008
        False, "--verbose", "-v", help="Emit progress messages to stderr"
    ),
) -> dict[str, float | int]:
    """Evaluate every sequence pair in ``in_path`` as one batch."""

    configure_logging(verbose)
    cfg = _load(config_path, num_chunk_types, scheme, exclude)
    if verbose:
        typer.echo(
            f"Loaded config scheme={cfg.chunk_scheme.value} "
            f"num_chunk_types={cfg.num_chunk_types}",
            err=True,
        )

    try:
        with Timing() as t_read:
            pairs = read_jsonl_pairs(in_path)
    except (FileNotFoundError, OSError) as exc:
        _safe_exit(3, str(exc))
    except InputFormatError as exc:
        _safe_exit(5, f"{in_path}: {exc}")
    if verbose:
        typer.echo(f"Read {len(pairs)} sequences in {t_read.ms:.1f} ms", err=True)

    inference: list[int] = []
    label: list[int] = []
    lod = [0]
    for pair in pairs:
        inference.extend(pair.inference)
        label.extend(pair.label)
        lod.append(len(inference))

    evaluator = ChunkEvaluator(cfg)
    try:
        with Timing() as t_eval:
            metrics = evaluator.evaluate(inference, label, lod=lod)
    except InputShapeError as exc:
        _safe_exit(5, str(exc))
    if verbose:
        typer.echo(f"Evaluated {len(inference)} tokens in {t_eval.ms:.1f} ms", err=True)

    outputs = metrics.as_outputs()
    typer.echo(json.dumps(outputs, indent=2))

    if out_path is not None:
        try:
            out_path.write_text(json.dumps(outputs, indent=2) + "\n", encoding="utf-8")
        except OSError as exc:
            _safe_exit(3, str(exc))
        if verbose:
            typer.echo(f"Wrote {out_path}", err=True)

    return outputs


@app.command()
def decode(
    labels: str = typer.Option(  # noqa: B008
        ..., "--labels", help="Comma separated label ids of one sequence"
    ),
    config_path: Optional[Path] = typer.Option(  # noqa: B008
        None, "--config", help="YAML config to override defaults"
    ),
    num_chunk_types: Optional[int] = typer.Option(  # noqa: B008
        None, "--num-chunk-types", "-n", help="Number of chunk types (O uses this id)"
    ),
    scheme: Optional[str] = typer.Option(  # noqa: B008
        None, "--scheme", help="Tagging scheme: plain, IOB, IOE or IOBES"
    ),
) -> None:
    """Print the chunks of one sequence as ``start end chunk_type`` lines."""

    cfg = _load(config_path, num_chunk_types, scheme, None)
    try:
        ids = [int(part) for part in labels.split(",") if part.strip()]
    except ValueError:
        _safe_exit(5, f"--labels must be comma separated integers, got {labels!r}")

    try:
        chunks = ChunkEvaluator(cfg).decode(ids)
    except InputShapeError as exc:
        _safe_exit(5, str(exc))

    for chunk in chunks:
        typer.echo(f"{chunk.start} {chunk.end} {chunk.chunk_type}")
