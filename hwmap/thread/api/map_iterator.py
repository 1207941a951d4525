import typing as tp

from hwmap import utils as hwmap_utils
from hwmap.utils import A, B

from ..stage import Stage
from ..worker import TransformFn


def map_iterator(
    source: tp.Iterable[A],
    f: TransformFn,
    n: int = hwmap_utils.DEFAULT_WATERMARK,
) -> Stage[A, B]:
    """
    Lazily maps `f` over `source` running up to `n` transforms at the same time on a thread pool.
    Results are yielded in source order.

    ```python
    import hwmap
    import time
    from random import random

    def slow_add1(x):
        time.sleep(random()) # <= some slow computation
        return x + 1

    data = range(10) # [0, 1, 2, ..., 9]
    stage = hwmap.thread.map_iterator(data, slow_add1, n=4)

    data = list(stage) # [1, 2, 3, ..., 10]
    ```

    Arguments:
        source: An Iterable, consumed one item at a time on a background thread.
        f: A function with signature `f(x, token?) -> y` where `y` can be a value or a `concurrent.futures.Future`.
        n: High watermark, the maximum number of transforms outstanding at the same time.

    Returns:
        A single-pass `Stage` that can be iterated or used as a context manager.
    """

    return Stage(source, f, n)
