import logging
import typing as tp
import weakref
from concurrent.futures import ThreadPoolExecutor

from hwmap import utils as hwmap_utils
from hwmap.utils import A, B, StageState

from . import utils
from .queue import PendingQueue
from .worker import Launcher, TransformFn

logger = logging.getLogger(__name__)


class Stage(hwmap_utils.BaseStage[A, B], tp.Iterable[B]):
    """
    Thread based counterpart of `hwmap.task.Stage`. The source is consumed on a daemon thread and
    transforms run on a pool of `n` threads, results are yielded in source order on the consuming
    thread.

    Closing the iterator, leaving a `with` block or simply dropping the iterator stops the launcher and
    activates the cancellation token.
    """

    def __init__(
        self,
        source: tp.Iterable[A],
        f: TransformFn,
        n: int = hwmap_utils.DEFAULT_WATERMARK,
    ):
        super().__init__(utils.to_iterable(source), f, n)
        self.scope = self.create_scope()
        self._iterator: tp.Optional[weakref.ref] = None

    @property
    def token(self) -> hwmap_utils.CancellationToken:
        return self.scope.token

    def create_scope(self) -> hwmap_utils.CancellationScope:
        return utils.create_scope()

    def to_iterable(self) -> tp.Generator[B, None, None]:
        self.claim()

        self.queue = PendingQueue(maxsize=self.n, scope=self.scope)
        launcher = Launcher(
            source=self.source,
            f=self.f,
            f_args=self.f_args,
            queue=self.queue,
            executor=ThreadPoolExecutor(
                max_workers=self.n, thread_name_prefix="hwmap-transform"
            ),
        )

        self._state = StageState.RUNNING
        launcher.start()

        try:
            while True:
                y = self.queue.get()

                if isinstance(y, hwmap_utils.Done):
                    self._state = StageState.DONE
                    return

                yield y

                self.queue.pop()

        except Exception:
            self._state = StageState.FAILED
            raise

        finally:
            if not self._state.terminal:
                logger.debug("consumer left with %d operations pending", len(self.queue))
                self._state = StageState.CANCELLED

            if self._state is not StageState.DONE:
                self.queue.stop()

    def __iter__(self) -> tp.Iterator[B]:
        iterator = self.to_iterable()

        if self._iterator is None:
            self._iterator = weakref.ref(iterator)

        return iterator

    def close(self) -> None:
        iterator = self._iterator() if self._iterator is not None else None

        if iterator is not None:
            iterator.close()

    def __enter__(self) -> tp.Iterator[B]:
        return self.__iter__()

    def __exit__(self, *args):
        self.close()
