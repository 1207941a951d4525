import logging
import typing as tp
import weakref

from hwmap import utils as hwmap_utils
from hwmap.utils import A, B, StageState

from . import utils
from .queue import PendingQueue
from .worker import Launcher, TransformFn

logger = logging.getLogger(__name__)


class Stage(hwmap_utils.BaseStage[A, B], tp.AsyncIterable[B], tp.Awaitable[tp.List[B]]):
    """
    Ordered, bounded-concurrency map over an async source. At most `n` transforms are outstanding at
    any time and results are yielded in source order regardless of completion order.

    A stage is single-pass. Use it as an async context manager to guarantee that leaving early
    releases the launcher and activates the cancellation token:

    ```python
    async with hwmap.task.map_iterator(source, fetch, n=8) as results:
        async for x in results:
            if x is None:
                break
    ```
    """

    def __init__(
        self,
        source: tp.Union[tp.Iterable[A], tp.AsyncIterable[A]],
        f: TransformFn,
        n: int = hwmap_utils.DEFAULT_WATERMARK,
    ):
        super().__init__(utils.to_async_iterable(source), f, n)
        self.scope = self.create_scope()
        self._iterator: tp.Optional[weakref.ref] = None

    @property
    def token(self) -> hwmap_utils.CancellationToken:
        return self.scope.token

    def create_scope(self) -> hwmap_utils.CancellationScope:
        return utils.create_scope()

    async def to_async_iterable(self) -> tp.AsyncGenerator[B, None]:
        self.claim()

        self.queue = PendingQueue(maxsize=self.n, scope=self.scope)
        launcher = Launcher(
            source=self.source, f=self.f, f_args=self.f_args, queue=self.queue
        )

        self._state = StageState.RUNNING
        launcher.start()

        try:
            while True:
                y = await self.queue.get()

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

            await launcher.stop()

    def __aiter__(self) -> tp.AsyncIterator[B]:
        iterator = self.to_async_iterable()

        if self._iterator is None:
            # weak so that an abandoned iterator is still finalized by the event loop
            self._iterator = weakref.ref(iterator)

        return iterator

    async def aclose(self) -> None:
        iterator = self._iterator() if self._iterator is not None else None

        if iterator is not None:
            await iterator.aclose()

    async def __aenter__(self) -> tp.AsyncIterator[B]:
        return self.__aiter__()

    async def __aexit__(self, *args):
        await self.aclose()

    async def _await(self) -> tp.List[B]:
        return [x async for x in self]

    def __await__(self) -> tp.Generator[tp.Any, None, tp.List[B]]:
        return self._await().__await__()
