import typing as tp

from hwmap import utils as hwmap_utils
from hwmap.utils import A, B

from ..stage import Stage
from ..worker import TransformFn


def map_iterator(
    source: tp.Union[tp.Iterable[A], tp.AsyncIterable[A]],
    f: TransformFn,
    n: int = hwmap_utils.DEFAULT_WATERMARK,
) -> Stage[A, B]:
    """
    Lazily maps `f` over `source` keeping up to `n` transforms in flight. Results come back in the
    same order as the source, whatever order the transforms finish in.

    ```python
    import asyncio
    import hwmap
    from random import random

    async def slow_add1(x):
        await asyncio.sleep(random()) # <= some slow computation
        return x + 1

    async def main():
        data = range(10) # [0, 1, 2, ..., 9]

        async for x in hwmap.task.map_iterator(data, slow_add1, n=4):
            print(x) # 1, 2, 3, ..., 10

    asyncio.run(main())
    ```

    `f` can optionally declare a `token` parameter to receive the stage's `CancellationToken`, it is
    activated when the consumer stops early or when any transform or the source fails.

    Arguments:
        source: An AsyncIterable or Iterable, consumed one item at a time.
        f: A function with signature `f(x, token?) -> y` where `y` can be a value or an awaitable.
        n: High watermark, the maximum number of transforms outstanding at the same time.

    Returns:
        A single-pass `Stage` that can be iterated with `async for`, awaited to get a list, or used as an async context manager.
    """

    return Stage(source, f, n)
