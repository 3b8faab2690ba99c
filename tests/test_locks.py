from __future__ import annotations

import asyncio

from rollcall.core.locks import ReadWriteLock


async def test_readers_share_and_writer_is_exclusive():
    lock = ReadWriteLock()
    log = []

    async def reader(name):
        async with lock.read():
            log.append(f"{name}+")
            await asyncio.sleep(0.01)
            log.append(f"{name}-")

    async def writer():
        await asyncio.sleep(0.001)
        async with lock.write():
            log.append("w+")
            await asyncio.sleep(0.01)
            log.append("w-")

    await asyncio.gather(reader("a"), reader("b"), writer())

    assert log[:2] == ["a+", "b+"]
    w = log.index("w+")
    assert log[w + 1] == "w-"
    assert {"a-", "b-"} <= set(log[:w])


async def test_waiting_writer_blocks_new_readers():
    lock = ReadWriteLock()
    log = []

    async def early_reader():
        async with lock.read():
            await asyncio.sleep(0.02)
            log.append("early")

    async def writer():
        await asyncio.sleep(0.005)
        async with lock.write():
            log.append("writer")

    async def late_reader():
        await asyncio.sleep(0.01)
        async with lock.read():
            log.append("late")

    await asyncio.gather(early_reader(), writer(), late_reader())

    assert log == ["early", "writer", "late"]


async def test_cancelled_writer_releases_queued_readers():
    lock = ReadWriteLock()
    release = asyncio.Event()

    async def holder():
        async with lock.read():
            await release.wait()

    holding = asyncio.create_task(holder())
    await asyncio.sleep(0)
    queued_writer = asyncio.create_task(lock.write().__aenter__())
    await asyncio.sleep(0)

    blocked_reader = asyncio.create_task(lock.read().__aenter__())
    await asyncio.sleep(0)
    assert not blocked_reader.done()

    queued_writer.cancel()
    await asyncio.sleep(0.01)

    assert blocked_reader.done()
    release.set()
    await holding
