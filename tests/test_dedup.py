import asyncio

import pytest

from storefront.cache.dedup import RequestDeduplicator


@pytest.mark.asyncio
async def test_concurrent_callers_share_one_fetch():
    dedup = RequestDeduplicator()
    calls = 0
    gate = asyncio.Event()

    async def fetch():
        nonlocal calls
        calls += 1
        await gate.wait()
        return {"products": [1, 2]}

    first = asyncio.ensure_future(dedup.run("mawu_products_all", fetch))
    second = asyncio.ensure_future(dedup.run("mawu_products_all", fetch))
    await asyncio.sleep(0)
    assert dedup.is_pending("mawu_products_all")
    assert dedup.pending_count == 1

    gate.set()
    results = await asyncio.gather(first, second)

    assert calls == 1
    assert results[0] == results[1] == {"products": [1, 2]}
    assert dedup.pending_count == 0


@pytest.mark.asyncio
async def test_failure_is_shared_and_key_released():
    dedup = RequestDeduplicator()
    gate = asyncio.Event()

    async def failing():
        await gate.wait()
        raise RuntimeError("API down")

    first = asyncio.ensure_future(dedup.run("k", failing))
    second = asyncio.ensure_future(dedup.run("k", failing))
    await asyncio.sleep(0)
    gate.set()

    outcomes = await asyncio.gather(first, second, return_exceptions=True)
    assert all(isinstance(o, RuntimeError) for o in outcomes)
    assert not dedup.is_pending("k")


@pytest.mark.asyncio
async def test_next_call_after_settle_fetches_again():
    dedup = RequestDeduplicator()
    calls = 0

    async def fetch():
        nonlocal calls
        calls += 1
        return calls

    assert await dedup.run("k", fetch) == 1
    assert await dedup.run("k", fetch) == 2


@pytest.mark.asyncio
async def test_different_keys_do_not_share():
    dedup = RequestDeduplicator()

    async def fetch_a():
        return "a"

    async def fetch_b():
        return "b"

    assert await asyncio.gather(dedup.run("a", fetch_a), dedup.run("b", fetch_b)) == ["a", "b"]


@pytest.mark.asyncio
async def test_cancelled_waiter_does_not_cancel_shared_fetch():
    dedup = RequestDeduplicator()
    calls = 0
    gate = asyncio.Event()

    async def fetch():
        nonlocal calls
        calls += 1
        await gate.wait()
        return "catalog"

    first = asyncio.ensure_future(dedup.run("mawu_products_all", fetch))
    second = asyncio.ensure_future(dedup.run("mawu_products_all", fetch))
    await asyncio.sleep(0)

    first.cancel()
    with pytest.raises(asyncio.CancelledError):
        await first
    assert dedup.is_pending("mawu_products_all")

    gate.set()
    assert await second == "catalog"
    assert calls == 1
    assert not dedup.is_pending("mawu_products_all")
