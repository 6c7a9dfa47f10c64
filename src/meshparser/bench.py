"""Batch decode harness.

Decodes every matching file in a directory concurrently on one event loop.
Admission is bounded by an ``asyncio.Semaphore``; each file gets its own
stream and its own outcome, so one bad file never aborts the batch.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .api import decode_async, decode_file_async
from .config import BenchOptions
from .decoding.errors import CorruptMeshError, NotMeshError
from .logging import get_logger
from .reporting import get_reporter

__all__ = [
    "FileOutcome",
    "BenchResult",
    "collect_mesh_files",
    "bench",
    "run_bench",
]

OK = "ok"
NOT_MESH = "not_mesh"
CORRUPT = "corrupt"
UNREADABLE = "unreadable"


@dataclass(slots=True)
class FileOutcome:
    path: Path
    status: str
    vertices: int = 0
    indices: int = 0
    sub_meshes: int = 0
    size_bytes: int = 0
    error: Optional[str] = None
    code: Optional[str] = None


@dataclass(slots=True)
class BenchResult:
    elapsed_seconds: float
    outcomes: List[FileOutcome] = field(default_factory=list)

    def _count(self, status: str) -> int:
        return sum(1 for o in self.outcomes if o.status == status)

    @property
    def files(self) -> int:
        return len(self.outcomes)

    @property
    def ok(self) -> int:
        return self._count(OK)

    @property
    def not_mesh(self) -> int:
        return self._count(NOT_MESH)

    @property
    def corrupt(self) -> int:
        return self._count(CORRUPT)

    @property
    def unreadable(self) -> int:
        return self._count(UNREADABLE)

    def to_dict(self) -> dict:
        return {
            "files": self.files,
            "ok": self.ok,
            "not_mesh": self.not_mesh,
            "corrupt": self.corrupt,
            "unreadable": self.unreadable,
            "elapsed_seconds": self.elapsed_seconds,
            "outcomes": [
                {
                    "path": str(o.path),
                    "status": o.status,
                    "vertices": o.vertices,
                    "indices": o.indices,
                    "sub_meshes": o.sub_meshes,
                    "size_bytes": o.size_bytes,
                    "error": o.error,
                    "code": o.code,
                }
                for o in self.outcomes
            ],
        }


def collect_mesh_files(
    directory: Path, pattern: str = "*.mesh", recursive: bool = False
) -> List[Path]:
    directory = Path(directory)
    if not directory.is_dir():
        return []
    found = (
        directory.rglob(pattern) if recursive else directory.glob(pattern)
    )
    return sorted(p for p in found if p.is_file())


def _file_size(path: Path) -> int:
    return path.stat().st_size


async def _decode_one(path: Path, use_threads: bool) -> FileOutcome:
    try:
        if use_threads:
            size = await asyncio.to_thread(_file_size, path)
            mesh = await decode_file_async(path)
        else:
            data = await asyncio.to_thread(path.read_bytes)
            size = len(data)
            mesh = await decode_async(data)
    except NotMeshError as exc:
        return FileOutcome(path, NOT_MESH, error=str(exc), code=exc.code)
    except CorruptMeshError as exc:
        return FileOutcome(path, CORRUPT, error=str(exc), code=exc.code)
    except OSError as exc:
        return FileOutcome(path, UNREADABLE, error=str(exc))
    return FileOutcome(
        path,
        OK,
        vertices=mesh.vertex_count,
        indices=mesh.index_count,
        sub_meshes=mesh.sub_mesh_count,
        size_bytes=size,
    )


async def bench(options: BenchOptions) -> BenchResult:
    logger = get_logger()
    rep = get_reporter()
    paths = await asyncio.to_thread(
        collect_mesh_files,
        options.directory,
        options.pattern,
        options.recursive,
    )
    logger.debug(
        "bench: %d files under %s (concurrency=%d)",
        len(paths),
        options.directory,
        options.concurrency,
    )
    semaphore = asyncio.Semaphore(options.concurrency)

    async def worker(path: Path) -> FileOutcome:
        async with semaphore:
            outcome = await _decode_one(path, options.use_threads)
        rep.advance(
            "bench.decode", current_item=path.name, outcome=outcome.status
        )
        return outcome

    rep.start_task("bench.decode", "Decode meshes", total=len(paths))
    start = time.perf_counter()
    outcomes = await asyncio.gather(*(worker(p) for p in paths))
    elapsed = time.perf_counter() - start
    result = BenchResult(elapsed_seconds=elapsed, outcomes=list(outcomes))
    rep.end_task(
        "bench.decode",
        files=result.files,
        ok=result.ok,
        not_mesh=result.not_mesh,
        corrupt=result.corrupt,
        unreadable=result.unreadable,
        vertices=sum(o.vertices for o in result.outcomes),
        bytes=sum(o.size_bytes for o in result.outcomes),
    )
    return result


def run_bench(options: BenchOptions) -> BenchResult:
    return asyncio.run(bench(options))
