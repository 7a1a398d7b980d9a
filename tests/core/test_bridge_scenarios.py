from __future__ import annotations

import asyncio

import pytest

from aio_bridge.core import (
    AsyncBytesIO,
    bridge,
    BridgeBuilder,
    BridgeConfig,
    CarrierMode,
    IncompleteReadError,
    run_blocking,
    SeekFrom,
    spawn_executor,
)
from tests.helpers.fakes import BufferedWriter, MiscountingReader


@pytest.mark.asyncio
async def test_read_exact_then_read_to_end() -> None:
    resource = AsyncBytesIO(bytes([1, 2, 3, 4, 5, 6, 7, 8, 9, 10]))
    executor, io = BridgeBuilder(resource).enable_read().finalize()
    executor_task = spawn_executor(executor)

    def consume() -> tuple[bytes, bytes]:
        head = io.read_exact(4)
        rest = io.read_to_end()
        io.close()
        return head, rest

    head, rest = await asyncio.to_thread(consume)

    assert head == bytes([1, 2, 3, 4])
    assert rest == bytes([5, 6, 7, 8, 9, 10])
    # ファサードを閉じれば executor は正常終了する
    assert await executor_task > 0


@pytest.mark.asyncio
@pytest.mark.parametrize("mode", [CarrierMode.SHARED, CarrierMode.COPY])
async def test_read_write_seek_round(mode: CarrierMode) -> None:
    resource = AsyncBytesIO()
    executor, io = (
        BridgeBuilder(resource, config=BridgeConfig(carrier_mode=mode))
        .enable_read()
        .enable_write()
        .enable_seek()
        .finalize()
    )
    executor_task = spawn_executor(executor)

    def consume() -> bytes:
        with io:
            io.write_all(bytes([1, 2, 1, 2]))
            io.write_all(bytes([5, 6, 7, 8, 9, 10]))
            io.seek(SeekFrom.start(2))
            io.write_all(bytes([3, 4]))
            io.seek(SeekFrom.current(-3))
            return io.read_to_end()

    data = await asyncio.to_thread(consume)

    assert data == bytes([2, 3, 4, 5, 6, 7, 8, 9, 10])
    assert resource.getvalue() == bytes([1, 2, 3, 4, 5, 6, 7, 8, 9, 10])
    await executor_task


@pytest.mark.asyncio
async def test_write_seek_read_back_round_trip(running_bridge) -> None:
    resource, io = running_bridge
    payload = bytes(range(256)) * 40

    def consume() -> bytes:
        io.write_all(payload)
        io.flush()
        io.rewind()
        return io.read_to_end()

    assert await asyncio.to_thread(consume) == payload
    assert resource.flushes == 1


@pytest.mark.asyncio
async def test_seek_variants_and_tell(running_bridge) -> None:
    _, io = running_bridge

    def consume() -> list[int]:
        io.write_all(b"0123456789")
        return [
            io.seek(SeekFrom.end(-4)),
            io.tell(),
            io.seek(2),
            io.seek(3, 1),
            io.seek(SeekFrom.end()),
        ]

    assert await asyncio.to_thread(consume) == [6, 6, 2, 5, 10]


@pytest.mark.asyncio
async def test_readinto_memoryview_and_read_sizes(running_bridge) -> None:
    _, io = running_bridge

    def consume() -> tuple[int, bytes, bytes, bytes]:
        io.write_all(b"abcdefgh")
        io.rewind()
        target = bytearray(3)
        count = io.readinto(memoryview(target))
        chunk = io.read(2)
        rest = io.read()
        return count, bytes(target), chunk, rest

    count, target, chunk, rest = await asyncio.to_thread(consume)
    assert (count, target, chunk, rest) == (3, b"abc", b"de", b"fgh")


@pytest.mark.asyncio
async def test_read_exact_past_end_raises_incomplete(running_bridge) -> None:
    _, io = running_bridge

    def consume() -> None:
        io.write_all(b"xy")
        io.rewind()
        io.read_exact(5)

    with pytest.raises(IncompleteReadError) as excinfo:
        await asyncio.to_thread(consume)

    assert excinfo.value.partial == b"xy"
    assert excinfo.value.expected == 5
    assert isinstance(excinfo.value, OSError)


@pytest.mark.asyncio
async def test_zero_length_read_does_not_reach_executor(make_bridge) -> None:
    executor, io = make_bridge(AsyncBytesIO(b"data"), "read")

    # executor を起動しなくてもブロックしない
    assert io.readinto(bytearray()) == 0
    io.close()
    assert await executor.run() == 0


@pytest.mark.asyncio
async def test_run_blocking_closes_facade_and_waits_for_executor(make_bridge) -> None:
    resource = AsyncBytesIO(b"hello world")
    executor, io = make_bridge(resource, "read", "seek")

    def consume(facade, offset: int) -> bytes:
        facade.seek(offset)
        return facade.read_to_end()

    result = await run_blocking(executor, io, consume, 6)

    assert result == b"world"
    assert io.closed
    assert executor.served == 3


@pytest.mark.asyncio
async def test_bridge_helper_builds_and_runs() -> None:
    resource = AsyncBytesIO()

    def produce(io) -> int:
        io.write_all(b"abc")
        io.flush()
        return io.write(b"def")

    written = await bridge(resource, produce, write=True)

    assert written == 3
    assert resource.getvalue() == b"abcdef"


@pytest.mark.asyncio
async def test_run_blocking_propagates_consumer_error(make_bridge) -> None:
    executor, io = make_bridge(AsyncBytesIO(b"abc"), "read")

    def consume(facade) -> None:
        facade.read(1)
        raise LookupError("consumer failed")

    with pytest.raises(LookupError, match="consumer failed"):
        await run_blocking(executor, io, consume)

    assert io.closed
    assert executor.served == 1


@pytest.mark.asyncio
async def test_executor_can_be_awaited_directly(make_bridge) -> None:
    executor, io = make_bridge(AsyncBytesIO(b"abc"), "read")
    task = asyncio.ensure_future(executor)

    data = await asyncio.to_thread(io.read, 3)
    io.close()

    assert data == b"abc"
    assert await task == 1


@pytest.mark.asyncio
async def test_yield_every_keeps_serving(make_bridge) -> None:
    executor, io = make_bridge(
        AsyncBytesIO(bytes(100)), "read", config=BridgeConfig(yield_every=1)
    )
    task = spawn_executor(executor)

    def consume() -> int:
        total = 0
        while chunk := io.read(7):
            total += len(chunk)
        io.close()
        return total

    assert await asyncio.to_thread(consume) == 100
    await task


@pytest.mark.asyncio
@pytest.mark.parametrize("mode", [CarrierMode.COPY, CarrierMode.SHARED])
async def test_writer_that_keeps_buffers_until_flush(make_bridge, mode: CarrierMode) -> None:
    resource = BufferedWriter()
    executor, io = make_bridge(resource, "write", config=BridgeConfig(carrier_mode=mode))
    task = spawn_executor(executor)

    def produce() -> None:
        io.write_all(bytearray(b"hello"))
        io.write(b" world")
        io.flush()
        io.close()

    await asyncio.to_thread(produce)

    assert resource.flushed == [b"hello world"]
    await task


@pytest.mark.asyncio
async def test_copy_mode_isolates_kept_buffers_from_caller(make_bridge) -> None:
    resource = BufferedWriter()
    executor, io = make_bridge(resource, "write")
    task = spawn_executor(executor)

    def produce() -> None:
        data = bytearray(b"hello")
        io.write_all(data)
        data[:] = b"HELLO, again"
        io.flush()
        io.close()

    await asyncio.to_thread(produce)

    assert resource.flushed == [b"hello"]
    await task


@pytest.mark.asyncio
async def test_overreported_read_count_fails_the_call(make_bridge) -> None:
    executor, io = make_bridge(MiscountingReader(b"abcd", 100), "read")
    task = spawn_executor(executor)

    def consume() -> None:
        try:
            io.readinto(bytearray(4))
        finally:
            io.close()

    with pytest.raises(ValueError, match="104 bytes"):
        await asyncio.to_thread(consume)

    assert not io.broken
    assert await task == 1
