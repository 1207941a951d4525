import asyncio
import functools
import typing as tp

from hwmap import utils as hwmap_utils

T = tp.TypeVar("T")


class Namespace:
    """
    Attribute bag shared by the launch and drain loops. Both loops run on the same event loop and only
    touch it between their own suspension points so no lock is needed.
    """

    def __init__(self, **kwargs):
        self.__dict__["_namespace"] = hwmap_utils._Namespace(**kwargs)

    def __getattr__(self, key) -> tp.Any:
        if key == "_namespace":
            raise AttributeError()

        return getattr(self._namespace, key)

    def __setattr__(self, key, value) -> None:
        if key == "_namespace":
            raise AttributeError()

        setattr(self._namespace, key, value)


def create_scope() -> hwmap_utils.CancellationScope:
    return hwmap_utils.CancellationScope(asyncio.Event())


async def from_iterable(iterable: tp.Iterable[T]) -> tp.AsyncIterator[T]:
    for x in iterable:
        yield x


def to_async_iterable(
    source: tp.Union[tp.Iterable[T], tp.AsyncIterable[T]]
) -> tp.AsyncIterable[T]:
    if isinstance(source, tp.AsyncIterable):
        return source
    elif isinstance(source, tp.Iterable):
        return from_iterable(source)
    else:
        raise ValueError(f"Object {source} is not an iterable or async iterable")


def run_test_async(f):
    @functools.wraps(f)
    def wrapped(*args, **kwargs):
        return asyncio.run(f(*args, **kwargs))

    return wrapped
