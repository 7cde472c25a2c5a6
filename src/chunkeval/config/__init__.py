"""Configuration loading utilities.

Precedence of configuration sources:
    1. Package defaults (``defaults.yml``)
    2. Optional user-provided YAML passed to :func:`load_config`
    3. Environment variables ``CHUNKEVAL_CHUNK_SCHEME``,
       ``CHUNKEVAL_NUM_CHUNK_TYPES`` and ``CHUNKEVAL_EXCLUDED_CHUNK_TYPES``
       (comma separated ids)
    4. Explicit overrides (command line flags)
"""

from .schema import EvalConfig, build_config, deep_merge_dicts, load_config

__all__ = ["EvalConfig", "build_config", "deep_merge_dicts", "load_config"]
