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
    Partially applies `f` and `n`. The returned `Partial` creates a new stage for every source it is
    called with or piped into, e.g. `list(range(10) | hwmap.thread.mapper(slow_add1))`.
    """

    hwmap_utils.validate_watermark(n)

    return hwmap_utils.Partial(lambda source: map_iterator(source, f, n))
