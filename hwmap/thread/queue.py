import logging
import typing as tp
from collections import deque
from concurrent.futures import Future

from hwmap import utils as hwmap_utils

from . import utils

logger = logging.getLogger(__name__)

T = tp.TypeVar("T")


class PendingQueue(tp.Generic[T]):
    """
    FIFO of transform futures shared by the launcher thread and the consuming thread. The futures and
    the `done` / `error` flags are only touched while holding the namespace's condition.
    """

    def __init__(self, maxsize: int, scope: hwmap_utils.CancellationScope):
        self.maxsize = maxsize
        self.scope = scope
        self.namespace = utils.Namespace(pending=deque(), done=False, error=None)

    def put(self, future: Future) -> None:
        with self.namespace:
            self.namespace.pending.append(future)
            self.namespace.notify_all()

        future.add_done_callback(self.on_future_done)

    def wait_not_full(self) -> None:
        with self.namespace:
            self.namespace.wait_for(
                lambda: self.namespace.done
                or len(self.namespace.pending) < self.maxsize
            )

    def get(self) -> tp.Union[T, hwmap_utils.Done]:
        with self.namespace:
            self.namespace.wait_for(
                lambda: self.namespace.done or len(self.namespace.pending) > 0
            )

            if self.namespace.pending:
                future = self.namespace.pending[0]
            elif self.namespace.error is not None:
                raise self.namespace.error
            else:
                return hwmap_utils.DONE

        try:
            y = future.result()

            # transforms may hand back their own deferred result
            if isinstance(y, Future):
                y = y.result()

        except Exception as e:
            self.raise_exception(e)

            with self.namespace:
                error = self.namespace.error

            raise error

        return y

    def pop(self) -> None:
        with self.namespace:
            self.namespace.pending.popleft()
            self.namespace.notify_all()

    def on_future_done(self, future: Future) -> None:
        if future.cancelled():
            self.raise_exception(hwmap_utils.Cancelled("transform was cancelled"))
            return

        exception = future.exception()

        if exception is not None:
            self.raise_exception(exception)
            return

        # a deferred result fails the stage as soon as it fails, not when it reaches the head
        result = future.result()

        if isinstance(result, Future):
            result.add_done_callback(self.on_future_done)

    def worker_done(self) -> None:
        with self.namespace:
            logger.debug(
                "source exhausted with %d operations pending",
                len(self.namespace.pending),
            )
            self.namespace.done = True
            self.namespace.notify_all()

    def raise_exception(self, exception: BaseException) -> bool:
        with self.namespace:
            if self.namespace.error is not None:
                if exception is not self.namespace.error:
                    logger.debug(
                        "dropping error raised after the first one: %r", exception
                    )
                return False

            self.namespace.error = exception
            self.namespace.done = True
            self.namespace.notify_all()

        self.scope.cancel(exception)

        return True

    def stop(self) -> None:
        with self.namespace:
            self.namespace.done = True
            self.namespace.notify_all()

        self.scope.cancel(hwmap_utils.ConsumerAbandoned("consumer stopped iterating"))

    def is_done(self) -> bool:
        with self.namespace:
            return self.namespace.done

    def full(self) -> bool:
        with self.namespace:
            return len(self.namespace.pending) >= self.maxsize

    def empty(self) -> bool:
        with self.namespace:
            return len(self.namespace.pending) == 0

    def __len__(self) -> int:
        with self.namespace:
            return len(self.namespace.pending)
