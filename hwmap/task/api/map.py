import typing as tp

from hwmap import utils as hwmap_utils
from hwmap.utils import A, B

from ..worker import TransformFn
from .map_iterator import map_iterator


async def map(
    source: tp.Union[tp.Iterable[A], tp.AsyncIterable[A]],
    f: TransformFn,
    n: int = hwmap_utils.DEFAULT_WATERMARK,
) -> tp.List[B]:
    """
    Maps `f` over `source` with up to `n` concurrent transforms and collects the results in source order.

    ```python
    data = await hwmap.task.map(range(42), double) # [0, 2, 4, ..., 82]
    ```

    Arguments:
        source: An AsyncIterable or Iterable.
        f: A function with signature `f(x, token?) -> y` where `y` can be a value or an awaitable.
        n: High watermark, the maximum number of transforms outstanding at the same time.

    Returns:
        The list of results. The first error raised by the source or by `f` is propagated instead.
    """

    return await map_iterator(source, f, n)
