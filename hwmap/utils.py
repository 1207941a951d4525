import enum
import inspect
import logging
import threading
import typing as tp
from abc import ABC, abstractmethod
from typing import Protocol

logger = logging.getLogger(__name__)

DEFAULT_WATERMARK = 16


Kwargs = tp.Dict[str, tp.Any]
T = tp.TypeVar("T")
A = tp.TypeVar("A")
B = tp.TypeVar("B")


class ConsumerAbandoned(Exception):
    """
    Cancellation reason used when the consumer stops iterating before the stage is exhausted.
    """


class Cancelled(Exception):
    """
    Raised by `CancellationToken.raise_if_cancelled` once the token has been activated, and by a
    stage whose transform was itself cancelled.
    """


class StageReuseError(Exception):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)


class StageState(enum.Enum):
    """
    Lifecycle of a single stage iteration:

    * `IDLE`: created, not iterated yet.
    * `RUNNING`: the source is still being consumed.
    * `DRAINING`: no more operations will be launched, pending results are still being yielded.
    * `DONE`, `FAILED`, `CANCELLED`: terminal.
    """

    IDLE = "idle"
    RUNNING = "running"
    DRAINING = "draining"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def terminal(self) -> bool:
        return self in (StageState.DONE, StageState.FAILED, StageState.CANCELLED)


class Event(Protocol):
    def set(self) -> None:
        ...

    def is_set(self) -> bool:
        ...

    def wait(self, *args) -> tp.Any:
        ...


class CancellationToken:
    """
    Read-only view of a `CancellationScope`. Transforms receive it through the `token` argument and
    are free to ignore it, the stage never interrupts a running transform.

    ```python
    async def fetch(url, token):
        async with session.get(url) as response:
            if token.cancelled():
                return None
            return await response.text()
    ```
    """

    def __init__(self, event: Event):
        self._event = event
        self._lock = threading.Lock()
        self._reason: tp.Optional[BaseException] = None
        self._callbacks: tp.List[tp.Callable[["CancellationToken"], tp.Any]] = []

    @property
    def reason(self) -> tp.Optional[BaseException]:
        """
        `BaseException` : The error that triggered cancellation, a `ConsumerAbandoned` if the consumer
        stopped early, `None` while the token is still inactive.
        """
        return self._reason

    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, *args) -> tp.Any:
        """
        Waits until the token is activated. On the `task` module this returns an awaitable, on the
        `thread` module it blocks and accepts an optional `timeout`.
        """
        return self._event.wait(*args)

    def add_callback(self, callback: tp.Callable[["CancellationToken"], tp.Any]) -> None:
        """
        Registers `callback(token)` to run when the token is activated, it runs right away if the
        token is already active.
        """
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return

        callback(self)

    def raise_if_cancelled(self) -> None:
        if self.cancelled():
            raise Cancelled(self._reason) from self._reason


class CancellationScope:
    def __init__(self, event: Event):
        self.token = CancellationToken(event)

    def cancel(self, reason: BaseException) -> bool:
        token = self.token

        with token._lock:
            if token._event.is_set():
                return False

            token._reason = reason
            token._event.set()
            callbacks, token._callbacks = token._callbacks, []

        logger.debug("cancellation activated: %r", reason)

        for callback in callbacks:
            callback(token)

        return True

    @property
    def cancelled(self) -> bool:
        return self.token.cancelled()


class BaseStage(tp.Generic[A, B], ABC):
    def __init__(self, source: tp.Any, f: tp.Callable[..., tp.Any], n: int):
        self.source = source
        self.f = f
        self.n = validate_watermark(n)
        self.f_args = function_args(f)
        self.queue: tp.Any = None
        self._state = StageState.IDLE
        self._iterated = False

    @property
    def state(self) -> StageState:
        if (
            self._state is StageState.RUNNING
            and self.queue is not None
            and self.queue.is_done()
        ):
            return StageState.DRAINING

        return self._state

    def claim(self) -> None:
        """
        Marks the stage as consumed, stages wrap a single-pass source and can only be iterated once.
        """
        if self._iterated:
            raise StageReuseError(
                f"{type(self).__name__} can only be iterated once, create a new stage to map the source again."
            )

        self._iterated = True

    @abstractmethod
    def create_scope(self) -> CancellationScope:
        pass

    def __or__(self, f):
        return f(self)


class Partial(tp.Generic[T]):
    def __init__(self, f):
        self.f = f

    def __or__(self, stage) -> T:
        return self.f(stage)

    def __ror__(self, stage) -> T:
        return self.f(stage)

    def __call__(self, stage) -> T:
        return self.f(stage)


class _Namespace(object):
    def __init__(self, **kwargs):
        for key, value in kwargs.items():
            setattr(self, key, value)


class Done(object):
    pass


DONE = Done()


def validate_watermark(n: int) -> int:
    if isinstance(n, bool) or not isinstance(n, int) or n < 1:
        raise ValueError(f"n must be a positive integer, got {n!r}")

    return n


def function_args(f) -> tp.List[str]:
    try:
        parameters = inspect.signature(f).parameters
    except (TypeError, ValueError):
        return []

    return [
        "**" if parameter.kind == inspect.Parameter.VAR_KEYWORD else name
        for name, parameter in parameters.items()
    ]


def transform_kwargs(f_args: tp.List[str], token: CancellationToken) -> Kwargs:
    if "token" in f_args or "**" in f_args:
        return dict(token=token)

    return {}
