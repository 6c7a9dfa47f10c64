"""Suspending decode: same results and failures as the blocking path."""

from __future__ import annotations

import asyncio
import io

import pytest

from meshparser import (
    CorruptMeshError,
    NotMeshError,
    decode_async,
    decode_bytes,
    decode_file,
    decode_file_async,
)
from meshparser.decoding.errors import IndexOutOfRange, StreamFailure
from meshparser.decoding.stream import READ_AHEAD
from mesh_builder import MeshSpec, quad_mesh, triangle_mesh, vertex


class SlowReader:
    """Async reader that yields to the loop and hands out tiny chunks."""

    def __init__(self, data: bytes, chunk: int = 5):
        self._buf = io.BytesIO(data)
        self._chunk = chunk
        self.reads = 0

    async def read(self, n: int) -> bytes:
        self.reads += 1
        await asyncio.sleep(0)
        return self._buf.read(min(n, self._chunk))


def test_async_matches_blocking_for_bytes():
    data = quad_mesh().to_bytes()
    assert asyncio.run(decode_async(data)) == decode_bytes(data)


def test_async_stream_reader():
    data = quad_mesh().to_bytes()

    async def run():
        reader = asyncio.StreamReader()
        reader.feed_data(data)
        reader.feed_eof()
        return await decode_async(reader)

    assert asyncio.run(run()) == decode_bytes(data)


def test_async_reader_with_short_reads():
    data = quad_mesh().to_bytes()
    reader = SlowReader(data, chunk=3)
    mesh = asyncio.run(decode_async(reader))
    assert mesh == decode_bytes(data)
    assert reader.reads > 1


def test_async_blocking_file_object_runs_in_thread():
    data = triangle_mesh().to_bytes()
    mesh = asyncio.run(decode_async(io.BytesIO(data)))
    assert mesh.index_count == 3


def test_async_not_mesh():
    with pytest.raises(NotMeshError):
        asyncio.run(decode_async(b"mesx" + b"\x00" * 100))


def test_async_same_cause_as_blocking():
    data = MeshSpec(vertices=[vertex()], indices=[0, 1]).to_bytes()
    with pytest.raises(CorruptMeshError) as ei:
        asyncio.run(decode_async(SlowReader(data)))
    cause = ei.value.cause
    assert isinstance(cause, IndexOutOfRange)
    assert cause.position == 1


def test_async_truncation():
    data = quad_mesh().to_bytes()[:-5]
    with pytest.raises(CorruptMeshError) as ei:
        asyncio.run(decode_async(SlowReader(data)))
    assert isinstance(ei.value.cause, StreamFailure)


def test_concurrent_decodes_are_independent():
    good = quad_mesh().to_bytes()
    bad = MeshSpec(vertices=[vertex()], indices=[4]).to_bytes()

    async def run():
        return await asyncio.gather(
            decode_async(SlowReader(good)),
            decode_async(SlowReader(bad)),
            decode_async(SlowReader(good, chunk=1)),
            return_exceptions=True,
        )

    first, second, third = asyncio.run(run())
    assert first == third == decode_bytes(good)
    assert isinstance(second, CorruptMeshError)


def test_decode_file_async(tmp_path):
    p = tmp_path / "tri.mesh"
    p.write_bytes(triangle_mesh().to_bytes())
    assert asyncio.run(decode_file_async(p)) == decode_file(p)


def test_threaded_file_reads_ahead_in_blocks(monkeypatch):
    verts = [vertex(float(i)) for i in range(20_000)]
    data = MeshSpec(vertices=verts, indices=[0, 1, 2] * 100).to_bytes()
    real_to_thread = asyncio.to_thread
    hops = []

    async def counting_to_thread(func, *args, **kwargs):
        hops.append(func)
        return await real_to_thread(func, *args, **kwargs)

    monkeypatch.setattr(asyncio, "to_thread", counting_to_thread)
    mesh = asyncio.run(decode_async(io.BytesIO(data)))
    assert mesh == decode_bytes(data)
    # one hop per read-ahead block, not one per record
    assert len(hops) <= len(data) // READ_AHEAD + 2
