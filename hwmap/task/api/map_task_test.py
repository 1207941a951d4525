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
async def test_map_square(nums: tp.List[int]):
    nums_py = [x**2 for x in nums]

    nums_pl = await hwmap.task.map(_source(nums), lambda x: x**2)

    assert nums_pl == nums_py


@hwmap.task.run_test_async
async def test_map_identity_high_watermark():
    nums_pl = await hwmap.task.map(_source(["a", "b", "c"]), lambda x: x, 32)

    assert nums_pl == ["a", "b", "c"]


@hwmap.task.run_test_async
async def test_map_double():
    namespace = hwmap.task.Namespace(started=0, finished=0, max=0)

    async def double(x):
        namespace.started += 1
        assert namespace.started - namespace.finished <= hwmap.DEFAULT_WATERMARK
        await asyncio.sleep(0)
        namespace.finished += 1
        namespace.max = max(namespace.max, namespace.started - namespace.finished)
        return x * 2

    nums_pl = await hwmap.task.map(_source(range(42)), double)

    assert nums_pl == list(range(0, 84, 2))
    assert namespace.max > 1


@hwmap.task.run_test_async
async def test_map_error():
    async def f(x):
        await asyncio.sleep(0)
        raise MyError()

    with pytest.raises(MyError):
        await hwmap.task.map(_source(range(10)), f)
