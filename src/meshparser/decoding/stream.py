"""Byte primitives and the drivers that feed them.

Decoders are generators that yield ``Read`` requests and receive the bytes
back, so every decode step is written once and runs unchanged under either
driver:

* ``run_blocking(decoder, source)`` pulls from a ``ByteSource`` on the
  calling thread.
* ``await run_async(decoder, source)`` pulls from an ``AsyncByteSource``,
  suspending the task between reads.

The cursor only moves forward. Skips are read-and-discard so truncation is
detected the same way in both modes.
"""

from __future__ import annotations

import asyncio
import inspect
import io
import struct
from dataclasses import dataclass
from typing import (
    Any,
    BinaryIO,
    Generator,
    Protocol,
    TypeVar,
    runtime_checkable,
)

from .errors import SliceConversionFailure, StreamFailure

T = TypeVar("T")

__all__ = [
    "Read",
    "Decoder",
    "ByteSource",
    "AsyncByteSource",
    "BlockingSource",
    "AsyncStreamSource",
    "ThreadedFileSource",
    "MemorySource",
    "READ_AHEAD",
    "as_byte_source",
    "as_async_byte_source",
    "read_exact",
    "read_upto",
    "read_u16_le",
    "read_u32_le",
    "skip_forward",
    "unpack",
    "run_blocking",
    "run_async",
]


@dataclass(frozen=True, slots=True)
class Read:
    size: int
    exact: bool = True


Decoder = Generator[Read, bytes, T]

# Minimum bytes fetched per worker-thread hop by ThreadedFileSource
READ_AHEAD = 64 * 1024

_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")


@runtime_checkable
class ByteSource(Protocol):
    def read(self, size: int) -> bytes:
        """Return up to ``size`` bytes; fewer only at end of stream."""
        ...


@runtime_checkable
class AsyncByteSource(Protocol):
    async def read(self, size: int) -> bytes: ...


# Primitives -------------------------------------------------------------------
def read_exact(size: int) -> Decoder[bytes]:
    data = yield Read(size)
    return data


def read_upto(size: int) -> Decoder[bytes]:
    data = yield Read(size, exact=False)
    return data


def unpack(layout: struct.Struct, raw: bytes) -> tuple[Any, ...]:
    try:
        return layout.unpack(raw)
    except struct.error:
        raise SliceConversionFailure(layout.format, len(raw)) from None


def read_u16_le() -> Decoder[int]:
    raw = yield from read_exact(2)
    return unpack(_U16, raw)[0]


def read_u32_le() -> Decoder[int]:
    raw = yield from read_exact(4)
    return unpack(_U32, raw)[0]


def skip_forward(size: int) -> Decoder[None]:
    yield from read_exact(size)


# Sources ----------------------------------------------------------------------
class BlockingSource:
    """Adapt a binary file-like object; loops over short reads."""

    def __init__(self, raw: BinaryIO):
        self._raw = raw

    def read(self, size: int) -> bytes:
        chunks = []
        remaining = size
        while remaining > 0:
            chunk = self._raw.read(remaining)
            if not chunk:
                break
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)


class AsyncStreamSource:
    """Adapt ``asyncio.StreamReader`` (or any object with async ``read``)."""

    def __init__(self, reader: Any):
        self._reader = reader

    async def read(self, size: int) -> bytes:
        chunks = []
        remaining = size
        while remaining > 0:
            chunk = await self._reader.read(remaining)
            if not chunk:
                break
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)


class ThreadedFileSource:
    """Run blocking reads of a file object in a worker thread.

    Each thread hop reads ahead at least ``block_size`` bytes; smaller
    requests are served from the local buffer. Short only at end of file.
    """

    def __init__(self, raw: BinaryIO, block_size: int = READ_AHEAD):
        self._inner = BlockingSource(raw)
        self._block_size = block_size
        self._buf = bytearray()
        self._eof = False

    async def read(self, size: int) -> bytes:
        if len(self._buf) < size and not self._eof:
            want = max(size - len(self._buf), self._block_size)
            chunk = await asyncio.to_thread(self._inner.read, want)
            # BlockingSource only returns short at end of file
            if len(chunk) < want:
                self._eof = True
            self._buf += chunk
        data = bytes(self._buf[:size])
        del self._buf[:size]
        return data


class MemorySource:
    """In-memory buffer for the async driver; never suspends on I/O."""

    def __init__(self, data: bytes | bytearray | memoryview):
        self._buf = io.BytesIO(bytes(data))

    async def read(self, size: int) -> bytes:
        return self._buf.read(size)


def as_byte_source(obj: Any) -> ByteSource:
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return BlockingSource(io.BytesIO(bytes(obj)))
    if isinstance(obj, BlockingSource):
        return obj
    read = getattr(obj, "read", None)
    if read is None:
        raise TypeError(f"Unsupported byte source: {type(obj).__name__}")
    if inspect.iscoroutinefunction(read):
        raise TypeError(
            f"{type(obj).__name__} has an async read(); "
            "use decode_async() instead"
        )
    return BlockingSource(obj)


def as_async_byte_source(obj: Any) -> AsyncByteSource:
    if isinstance(
        obj, (AsyncStreamSource, ThreadedFileSource, MemorySource)
    ):
        return obj
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return MemorySource(obj)
    read = getattr(obj, "read", None)
    if read is None:
        raise TypeError(f"Unsupported byte source: {type(obj).__name__}")
    if inspect.iscoroutinefunction(read):
        return AsyncStreamSource(obj)
    return ThreadedFileSource(obj)


# Drivers ----------------------------------------------------------------------
def _check(req: Read, data: bytes, offset: int) -> None:
    if req.exact and len(data) != req.size:
        raise StreamFailure(req.size, len(data), offset)


def run_blocking(decoder: Decoder[T], source: ByteSource) -> T:
    offset = 0
    try:
        req = next(decoder)
        while True:
            try:
                data = source.read(req.size)
            except OSError as exc:
                raise StreamFailure(req.size, 0, offset, str(exc)) from exc
            _check(req, data, offset)
            offset += len(data)
            req = decoder.send(data)
    except StopIteration as stop:
        return stop.value
    finally:
        decoder.close()


async def run_async(decoder: Decoder[T], source: AsyncByteSource) -> T:
    offset = 0
    try:
        req = next(decoder)
        while True:
            try:
                data = await source.read(req.size)
            except OSError as exc:
                raise StreamFailure(req.size, 0, offset, str(exc)) from exc
            _check(req, data, offset)
            offset += len(data)
            req = decoder.send(data)
    except StopIteration as stop:
        return stop.value
    finally:
        decoder.close()
