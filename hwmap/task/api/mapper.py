import typing as tp

from hwmap import utils as hwmap_utils
from hwmap.utils import A, B

from ..stage import Stage
from ..worker import TransformFn
from .map_iterator import map_iterator


def mapper(
    f: TransformFn, n: int = hwmap_utils.DEFAULT_WATERMARK
) -> hwmap_utils.Partial[Stage[A, B]]:
    """
    Partially applies `f` and `n`, the result can be called with a source or piped into:

    ```python
    add1 = hwmap.task.mapper(slow_add1, n=4)

    stage = add1(range(10))
    stage = range(10) | add1
    ```

    Every call creates a new stage so the same mapper can be reused across sources.

    Arguments:
        f: A function with signature `f(x, token?) -> y` where `y` can be a value or an awaitable.
        n: High watermark, the maximum number of transforms outstanding at the same time.

    Returns:
        A `Partial` that maps a source to a new `Stage`.
    """

    hwmap_utils.validate_watermark(n)

    return hwmap_utils.Partial(lambda source: map_iterator(source, f, n))
