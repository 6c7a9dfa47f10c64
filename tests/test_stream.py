import asyncio
import io
import struct

import pytest

from meshparser.decoding.errors import SliceConversionFailure, StreamFailure
from meshparser.decoding.stream import (
    AsyncStreamSource,
    BlockingSource,
    MemorySource,
    Read,
    ThreadedFileSource,
    as_async_byte_source,
    as_byte_source,
    read_u16_le,
    read_u32_le,
    read_upto,
    run_async,
    run_blocking,
    skip_forward,
    unpack,
)


def _pair():
    a = yield from read_u16_le()
    yield from skip_forward(2)
    b = yield from read_u32_le()
    return a, b


def test_little_endian_primitives():
    data = struct.pack("<H", 0x1234) + b"zz" + struct.pack("<I", 0xDEADBEEF)
    assert run_blocking(_pair(), as_byte_source(data)) == (0x1234, 0xDEADBEEF)


def test_skip_requires_bytes_to_exist():
    data = struct.pack("<H", 1) + b"z"
    with pytest.raises(StreamFailure) as ei:
        run_blocking(_pair(), as_byte_source(data))
    assert (ei.value.requested, ei.value.received, ei.value.offset) == (2, 1, 2)


def test_read_upto_allows_short_result():
    def dec():
        return (yield from read_upto(10))

    assert run_blocking(dec(), as_byte_source(b"abc")) == b"abc"


def test_unpack_size_mismatch():
    with pytest.raises(SliceConversionFailure) as ei:
        unpack(struct.Struct("<I"), b"\x00\x01")
    assert ei.value.size == 2


def test_read_request_defaults_to_exact():
    assert Read(4).exact
    assert not Read(4, exact=False).exact


def test_blocking_source_loops_over_short_reads():
    class Two(io.RawIOBase):
        def __init__(self, data):
            self._buf = io.BytesIO(data)

        def readable(self):
            return True

        def read(self, n=-1):
            return self._buf.read(min(n, 2))

    assert BlockingSource(Two(b"abcdefg")).read(5) == b"abcde"


def test_as_byte_source_rejects_non_readers():
    with pytest.raises(TypeError):
        as_byte_source(42)


def test_as_async_byte_source_selection():
    class AsyncReader:
        async def read(self, n):
            return b""

    assert isinstance(as_async_byte_source(b"xy"), MemorySource)
    assert isinstance(
        as_async_byte_source(io.BytesIO(b"xy")), ThreadedFileSource
    )
    assert isinstance(as_async_byte_source(AsyncReader()), AsyncStreamSource)
    src = MemorySource(b"")
    assert as_async_byte_source(src) is src
    with pytest.raises(TypeError):
        as_async_byte_source(object())


def test_async_driver_matches_blocking():
    data = struct.pack("<H", 7) + b"--" + struct.pack("<I", 99)
    result = asyncio.run(run_async(_pair(), MemorySource(data)))
    assert result == run_blocking(_pair(), as_byte_source(data))


def test_async_driver_reports_offset():
    with pytest.raises(StreamFailure) as ei:
        asyncio.run(run_async(_pair(), MemorySource(b"\x01\x00zz\x01")))
    assert (ei.value.requested, ei.value.offset) == (4, 4)


def test_driver_closes_decoder_on_failure():
    closed = []

    def dec():
        try:
            yield from read_u32_le()
        finally:
            closed.append(True)

    with pytest.raises(StreamFailure):
        run_blocking(dec(), as_byte_source(b""))
    assert closed == [True]


def test_threaded_source_buffers_and_is_short_only_at_eof():
    src = ThreadedFileSource(io.BytesIO(bytes(range(100))), block_size=16)

    async def run():
        return [await src.read(n) for n in (3, 20, 70, 10, 4)]

    a, b, c, d, e = asyncio.run(run())
    assert a == bytes(range(0, 3))
    assert b == bytes(range(3, 23))
    assert c == bytes(range(23, 93))
    assert d == bytes(range(93, 100))
    assert e == b""


def test_as_byte_source_rejects_async_readers():
    with pytest.raises(TypeError, match="async read"):
        as_byte_source(MemorySource(b"mesh"))
