import logging
import threading
import typing as tp
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass

from hwmap import utils as hwmap_utils

from .queue import PendingQueue

logger = logging.getLogger(__name__)

A = tp.TypeVar("A")
B = tp.TypeVar("B")


class TransformFn(tp.Protocol):
    def __call__(self, item, **kwargs) -> tp.Union[tp.Any, Future]:
        ...


@dataclass
class Launcher(tp.Generic[A, B]):
    """
    Launch loop running on its own daemon thread. Transforms are submitted to `executor`, which is
    sized to the high watermark and shut down, without waiting, when the loop exits.
    """

    source: tp.Iterable[A]
    f: TransformFn
    f_args: tp.List[str]
    queue: PendingQueue[B]
    executor: ThreadPoolExecutor
    process: tp.Optional[threading.Thread] = None

    def __call__(self):
        iterator: tp.Optional[tp.Iterator[A]] = None

        try:
            iterator = iter(self.source)

            while not self.queue.is_done():
                try:
                    item = next(iterator)
                except StopIteration:
                    self.queue.worker_done()
                    return

                self.queue.put(self.launch(item))
                self.queue.wait_not_full()

        except Exception as e:
            self.queue.raise_exception(e)
        finally:
            logger.debug("launcher stopped")
            self.executor.shutdown(wait=False)

            if iterator is not None:
                self.close(iterator)

    def launch(self, item: A) -> Future:
        kwargs = hwmap_utils.transform_kwargs(self.f_args, self.queue.scope.token)

        return self.executor.submit(self.f, item, **kwargs)

    def close(self, iterator: tp.Iterator[A]) -> None:
        close = getattr(iterator, "close", None)

        if close is None:
            return

        try:
            close()
        except Exception as e:
            logger.debug("error while closing the source: %r", e)

    def start(self) -> threading.Thread:
        [self.process] = start_workers(self)

        return self.process


def start_workers(
    target: tp.Callable,
    n_workers: int = 1,
    args: tp.Tuple[tp.Any, ...] = tuple(),
    kwargs: tp.Optional[tp.Dict[tp.Any, tp.Any]] = None,
) -> tp.List[threading.Thread]:
    if kwargs is None:
        kwargs = {}

    workers = []

    for _ in range(n_workers):
        t = threading.Thread(target=target, args=args, kwargs=kwargs)
        t.daemon = True
        t.start()
        workers.append(t)

    return workers
