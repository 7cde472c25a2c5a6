"""Chunk-level evaluation for sequence labeling.

Decodes predicted and ground-truth label-id sequences into typed chunks under
the plain, IOB, IOE or IOBES tagging scheme and reports precision, recall and
F1 together with the raw chunk counts.
"""

from .chunks import Chunk, decode_chunks
from .config import EvalConfig, build_config, load_config
from .evaluator import ChunkCounts, ChunkEvaluator, ChunkMetrics, chunk_eval, compute_prf
from .scheme import ChunkScheme, SchemeTable, TagRole, parse_scheme, role_of, scheme_table
from .utils.errors import ConfigurationError, InputFormatError, InputShapeError

__version__ = "0.1.0"

__all__ = [
    "Chunk",
    "ChunkCounts",
    "ChunkEvaluator",
    "ChunkMetrics",
    "ChunkScheme",
    "ConfigurationError",
    "EvalConfig",
    "InputFormatError",
    "InputShapeError",
    "SchemeTable",
    "TagRole",
    "build_config",
    "chunk_eval",
    "compute_prf",
    "decode_chunks",
    "load_config",
    "parse_scheme",
    "role_of",
    "scheme_table",
    "__version__",
]
