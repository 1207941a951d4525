import threading
import typing as tp

from hwmap import utils as hwmap_utils

T = tp.TypeVar("T")


class Namespace:
    """
    Attribute bag guarded by a `threading.Condition`. Reads and writes of shared state must happen
    inside `with namespace:`, which is also where `wait_for` and `notify_all` are called.
    """

    def __init__(self, **kwargs):
        self.__dict__["_namespace"] = hwmap_utils._Namespace(**kwargs)
        self.__dict__["_condition"] = threading.Condition()

    def __getattr__(self, key) -> tp.Any:
        if key in ("_namespace", "_condition"):
            raise AttributeError()

        return getattr(self._namespace, key)

    def __setattr__(self, key, value) -> None:
        if key in ("_namespace", "_condition"):
            raise AttributeError()

        setattr(self._namespace, key, value)

    def wait_for(
        self, predicate: tp.Callable[[], bool], timeout: tp.Optional[float] = None
    ) -> bool:
        return self._condition.wait_for(predicate, timeout=timeout)

    def notify_all(self) -> None:
        self._condition.notify_all()

    def __enter__(self):
        self._condition.acquire()

    def __exit__(self, *args):
        self._condition.release()


def create_scope() -> hwmap_utils.CancellationScope:
    return hwmap_utils.CancellationScope(threading.Event())


def to_iterable(source: tp.Iterable[T]) -> tp.Iterable[T]:
    if isinstance(source, tp.Iterable):
        return source
    else:
        raise ValueError(f"Object {source} is not an iterable")
