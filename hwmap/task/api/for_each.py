import typing as tp

from hwmap import utils as hwmap_utils
from hwmap.utils import A

from ..worker import TransformFn
from .map_iterator import map_iterator


async def for_each(
    source: tp.Union[tp.Iterable[A], tp.AsyncIterable[A]],
    f: TransformFn,
    n: int = hwmap_utils.DEFAULT_WATERMARK,
) -> None:
    """
    Runs `f` for each element of `source` with up to `n` concurrent calls and discards the results. Useful
    for sinks such as writing to disk or to a database.

    ```python
    async def save(record):
        await db.insert(record)

    await hwmap.task.for_each(records, save, n=4)
    ```

    Arguments:
        source: An AsyncIterable or Iterable.
        f: A function with signature `f(x, token?) -> None`, it can be a coroutine function.
        n: High watermark, the maximum number of transforms outstanding at the same time.
    """

    async for _ in map_iterator(source, f, n):
        pass
