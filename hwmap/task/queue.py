import asyncio
import logging
import typing as tp
from collections import deque

from hwmap import utils as hwmap_utils

from . import utils

logger = logging.getLogger(__name__)

T = tp.TypeVar("T")


def transform_cancelled(
    cause: tp.Optional[BaseException] = None,
) -> hwmap_utils.Cancelled:
    error = hwmap_utils.Cancelled("transform was cancelled")
    error.__cause__ = cause

    return error


class WakeSignal:
    """
    Single-slot wakeup between the launch and the drain loop. `wait_for` clears the slot before
    checking the predicate and nothing suspends in between, a `wake` that races the check is kept in
    the slot and resumes the waiter right away.
    """

    def __init__(self):
        self._event = asyncio.Event()

    def wake(self) -> None:
        self._event.set()

    async def wait_for(self, predicate: tp.Callable[[], bool]) -> None:
        while True:
            self._event.clear()

            if predicate():
                return

            await self._event.wait()


class PendingQueue(tp.Generic[T]):
    def __init__(self, maxsize: int, scope: hwmap_utils.CancellationScope):
        self.maxsize = maxsize
        self.scope = scope
        self.pending: tp.Deque[asyncio.Future] = deque()
        self.namespace = utils.Namespace(done=False, error=None)
        self.not_empty = WakeSignal()
        self.not_full = WakeSignal()

    def put_nowait(self, future: asyncio.Future) -> None:
        future.add_done_callback(self.on_future_done)
        self.pending.append(future)
        self.not_empty.wake()

    async def wait_not_full(self) -> None:
        await self.not_full.wait_for(lambda: self.is_done() or not self.full())

    async def get(self) -> tp.Union[T, hwmap_utils.Done]:
        await self.not_empty.wait_for(lambda: self.is_done() or len(self.pending) > 0)

        if self.pending:
            future = self.pending[0]

            try:
                # shielded so that cancelling the consumer leaves the transform running
                return await asyncio.shield(future)
            except asyncio.CancelledError as e:
                # only a cancelled transform fails the stage, the consumer's own cancellation propagates
                if not future.cancelled():
                    raise

                self.raise_exception(transform_cancelled(e))
                raise self.namespace.error
            except Exception as e:
                self.raise_exception(e)
                raise self.namespace.error

        if self.namespace.error is not None:
            raise self.namespace.error

        return hwmap_utils.DONE

    def pop(self) -> None:
        self.pending.popleft()
        self.not_full.wake()

    def on_future_done(self, future: asyncio.Future) -> None:
        if future.cancelled():
            self.raise_exception(transform_cancelled())
            return

        exception = future.exception()

        if exception is not None:
            self.raise_exception(exception)

    def worker_done(self) -> None:
        logger.debug("source exhausted with %d operations pending", len(self.pending))
        self.namespace.done = True
        self.not_empty.wake()

    def raise_exception(self, exception: BaseException) -> bool:
        if self.namespace.error is not None:
            if exception is not self.namespace.error:
                logger.debug("dropping error raised after the first one: %r", exception)
            return False

        self.namespace.error = exception
        self.namespace.done = True
        self.scope.cancel(exception)
        self.wake_all()

        return True

    def stop(self) -> None:
        self.namespace.done = True
        self.scope.cancel(hwmap_utils.ConsumerAbandoned("consumer stopped iterating"))
        self.wake_all()

    def wake_all(self) -> None:
        self.not_empty.wake()
        self.not_full.wake()

    def is_done(self) -> bool:
        return self.namespace.done

    def full(self) -> bool:
        return len(self.pending) >= self.maxsize

    def empty(self) -> bool:
        return len(self.pending) == 0

    def __len__(self) -> int:
        return len(self.pending)
