import typing as tp

from hwmap import utils as hwmap_utils
from hwmap.utils import A, B

from ..worker import TransformFn
from .map_iterator import map_iterator


def map(
    source: tp.Iterable[A],
    f: TransformFn,
    n: int = hwmap_utils.DEFAULT_WATERMARK,
) -> tp.List[B]:
    """
    Maps `f` over `source` with up to `n` concurrent transforms and returns the results in source order.

    Arguments:
        source: An Iterable.
        f: A function with signature `f(x, token?) -> y`.
        n: High watermark, the maximum number of transforms outstanding at the same time.

    Returns:
        The list of results. The first error raised by the source or by `f` is propagated instead.
    """

    return list(map_iterator(source, f, n))
