"""Bench configuration (JSON/YAML) for meshparser."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml

__all__ = [
    "BenchOptions",
    "ConfigError",
    "load_bench_config",
    "apply_env_overrides",
    "DEFAULT_CONCURRENCY",
    "ENV_CONCURRENCY",
]

DEFAULT_CONCURRENCY = 15
ENV_CONCURRENCY = "MESHPARSER_CONCURRENCY"


class ConfigError(ValueError):
    pass


@dataclass(slots=True)
class BenchOptions:
    directory: Path
    pattern: str = "*.mesh"
    recursive: bool = False
    concurrency: int = DEFAULT_CONCURRENCY
    # Read files on worker threads instead of loading them up front
    use_threads: bool = False

    def __post_init__(self) -> None:
        self.directory = Path(self.directory)
        if isinstance(self.concurrency, bool) or not isinstance(
            self.concurrency, int
        ):
            raise ConfigError(
                f"concurrency must be an integer, got {self.concurrency!r}"
            )
        if self.concurrency < 1:
            raise ConfigError(
                f"concurrency must be >= 1, got {self.concurrency}"
            )
        if not isinstance(self.pattern, str) or not self.pattern:
            raise ConfigError("pattern must be a non-empty string")


def load_bench_config(path: str | Path) -> BenchOptions:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(p)
    text = p.read_text(encoding="utf-8")
    if p.suffix.lower() in {".yaml", ".yml"}:
        data: Any = yaml.safe_load(text)
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ConfigError("Root of bench config must be an object")
    known = {f.name for f in fields(BenchOptions)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown bench config keys: {unknown}")
    if "directory" not in data:
        raise ConfigError("Bench config requires 'directory'")
    directory = Path(data.pop("directory"))
    if not directory.is_absolute():
        directory = p.parent / directory
    return BenchOptions(directory=directory, **data)


def apply_env_overrides(options: BenchOptions) -> BenchOptions:
    raw = os.environ.get(ENV_CONCURRENCY)
    if raw is None or raw == "":
        return options
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigError(f"{ENV_CONCURRENCY} must be an integer") from e
    return replace(options, concurrency=value)
