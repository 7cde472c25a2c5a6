"""Typed configuration schema and loader for the chunkeval package."""

from __future__ import annotations

import os
from collections.abc import Mapping
from importlib import resources as importlib_resources
from pathlib import Path
from typing import Annotated, Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, conint, field_validator

from chunkeval.scheme import ChunkScheme, SchemeTable, parse_scheme, scheme_table
from chunkeval.utils.errors import ConfigurationError

ENV_CHUNK_SCHEME = "CHUNKEVAL_CHUNK_SCHEME"
ENV_NUM_CHUNK_TYPES = "CHUNKEVAL_NUM_CHUNK_TYPES"
ENV_EXCLUDED_CHUNK_TYPES = "CHUNKEVAL_EXCLUDED_CHUNK_TYPES"

# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------


class EvalConfig(BaseModel):
    """Immutable evaluator settings.

    ``num_chunk_types`` bounds the real chunk types; the chunk type equal to it
    is the Outside category.  Chunks whose type is listed in
    ``excluded_chunk_types`` are left out of every count.
    """

    num_chunk_types: conint(ge=1)  # type: ignore[valid-type]
    chunk_scheme: ChunkScheme = ChunkScheme.IOB
    excluded_chunk_types: frozenset[Annotated[int, Field(ge=0)]] = frozenset()

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("chunk_scheme", mode="before")
    @classmethod
    def _known_scheme(cls, value: Any) -> ChunkScheme:
        return parse_scheme(value)

    @property
    def table(self) -> SchemeTable:
        """Return the role table of ``chunk_scheme``."""

        return scheme_table(self.chunk_scheme)


# ---------------------------------------------------------------------------
# Loader utilities
# ---------------------------------------------------------------------------


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc).splitlines()[0]
    err = errors[0]
    loc = ".".join(str(part) for part in err.get("loc", ())) or "config"
    return f"{loc}: {err.get('msg', 'invalid value')}"


def build_config(**values: Any) -> EvalConfig:
    """Validate ``values`` into an :class:`EvalConfig`.

    Raises :class:`ConfigurationError` for any invalid or unknown setting.
    """

    try:
        return EvalConfig.model_validate(values)
    except ValidationError as exc:
        raise ConfigurationError(_first_error(exc)) from exc


def deep_merge_dicts(a: dict[str, Any], b: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge mapping ``b`` onto ``a`` returning a new dict."""

    result: dict[str, Any] = dict(a)
    for key, b_val in b.items():
        if key in result and isinstance(result[key], dict) and isinstance(b_val, dict):
            result[key] = deep_merge_dicts(result[key], b_val)
        else:
            result[key] = b_val
    return result


def _read_yaml(handle: Any, source: str) -> dict[str, Any]:
    try:
        data = yaml.safe_load(handle) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"{source}: invalid YAML ({exc})") from exc
    except UnicodeDecodeError as exc:
        raise ConfigurationError(f"{source}: not valid UTF-8 ({exc.reason})") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"{source}: top level must be a mapping")
    return data


def _env_values(environ: Mapping[str, str]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    if environ.get(ENV_CHUNK_SCHEME):
        values["chunk_scheme"] = environ[ENV_CHUNK_SCHEME]
    if environ.get(ENV_NUM_CHUNK_TYPES):
        values["num_chunk_types"] = environ[ENV_NUM_CHUNK_TYPES]
    if ENV_EXCLUDED_CHUNK_TYPES in environ:
        raw = environ[ENV_EXCLUDED_CHUNK_TYPES]
        values["excluded_chunk_types"] = [p.strip() for p in raw.split(",") if p.strip()]
    return values


def load_config(
    path: str | os.PathLike[str] | None = None,
    *,
    overrides: Mapping[str, Any] | None = None,
    env: Mapping[str, str] | None = None,
) -> EvalConfig:
    """Load configuration from defaults, a YAML file, the environment and overrides.

    Precedence of sources: package ``defaults.yml`` < user-provided YAML <
    ``CHUNKEVAL_*`` environment variables < ``overrides``.  Override entries
    whose value is ``None`` are ignored so that unset command line flags do
    not mask lower sources.
    """

    with (
        importlib_resources.files("chunkeval.config")
        .joinpath("defaults.yml")
        .open("r", encoding="utf-8") as f
    ):
        merged = _read_yaml(f, "defaults.yml")

    if path is not None:
        with Path(path).open("r", encoding="utf-8") as f:
            merged = deep_merge_dicts(merged, _read_yaml(f, str(path)))

    environ = env if env is not None else os.environ
    merged = deep_merge_dicts(merged, _env_values(environ))

    if overrides:
        merged = deep_merge_dicts(
            merged, {k: v for k, v in overrides.items() if v is not None}
        )

    return build_config(**merged)


__all__ = [
    "EvalConfig",
    "build_config",
    "deep_merge_dicts",
    "load_config",
    "ENV_CHUNK_SCHEME",
    "ENV_NUM_CHUNK_TYPES",
    "ENV_EXCLUDED_CHUNK_TYPES",
]
