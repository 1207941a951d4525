import asyncio
import typing as tp

import hypothesis as hp
import pytest
from hypothesis import strategies as st

import hwmap

MAX_EXAMPLES = 10


class MyError(Exception):
    pass


async def _source(items):
    for x in items:
        yield x


@hp.given(nums=st.lists(st.integers()))
@hp.settings(max_examples=MAX_EXAMPLES)
@hwmap.task.run_test_async
async def test_for_each(nums: tp.List[int]):
    seen = []

    async def f(x):
        seen.append(x)

    output = await hwmap.task.for_each(_source(nums), f)

    assert output is None
    assert seen == nums


@pytest.mark.parametrize("n", [16, 5])
@hwmap.task.run_test_async
async def test_for_each_high_watermark(n: int):
    namespace = hwmap.task.Namespace(started=0, finished=0, max=0)

    async def f(x):
        namespace.started += 1
        assert namespace.started - namespace.finished <= n
        await asyncio.sleep(0)
        namespace.finished += 1
        namespace.max = max(namespace.max, namespace.started - namespace.finished)

    await hwmap.task.for_each(_source(range(42)), f, n)

    assert namespace.started == 42
    assert 1 < namespace.max <= n


@pytest.mark.parametrize("size, expected", [(42, 16), (10, 10)])
@hwmap.task.run_test_async
async def test_for_each_errors_with_a_batch(size: int, expected: int):
    namespace = hwmap.task.Namespace(started=0)

    async def f(x):
        namespace.started += 1
        await asyncio.sleep(0)
        raise MyError("kaboom")

    with pytest.raises(MyError, match="kaboom"):
        await hwmap.task.for_each(_source(range(size)), f)

    assert namespace.started == expected


@hwmap.task.run_test_async
async def test_for_each_first_element_errors():
    namespace = hwmap.task.Namespace(started=0)

    async def f(x):
        first = namespace.started == 0
        namespace.started += 1
        await asyncio.sleep(0)

        if first:
            raise MyError()

    with pytest.raises(MyError):
        await hwmap.task.for_each(_source(range(42)), f)

    assert namespace.started == 16


@hwmap.task.run_test_async
async def test_for_each_cancels_outstanding_transforms_on_error():
    reasons = []

    async def f(x, token):
        if x == 0:
            await asyncio.sleep(0)
            raise MyError()

        await token.wait()
        reasons.append(token.reason)

    with pytest.raises(MyError) as info:
        await hwmap.task.for_each(_source(range(4)), f)

    await asyncio.sleep(0.01)

    assert len(reasons) == 3
    assert all(reason is info.value for reason in reasons)
