import asyncio
import logging
import typing as tp
from dataclasses import dataclass

from hwmap import utils as hwmap_utils

from .queue import PendingQueue

logger = logging.getLogger(__name__)

A = tp.TypeVar("A")
B = tp.TypeVar("B")


class TransformFn(tp.Protocol):
    def __call__(self, item, **kwargs) -> tp.Union[tp.Any, tp.Awaitable[tp.Any]]:
        ...


@dataclass
class Launcher(tp.Generic[A, B]):
    """
    Launch loop: pulls the source one item at a time, starts a transform for each item and parks the
    resulting futures in the queue, waiting whenever the queue reaches its high watermark.
    """

    source: tp.AsyncIterable[A]
    f: TransformFn
    f_args: tp.List[str]
    queue: PendingQueue[B]
    process: tp.Optional[asyncio.Task] = None

    async def __call__(self):
        iterator = self.source.__aiter__()

        try:
            while not self.queue.is_done():
                try:
                    item = await iterator.__anext__()
                except StopAsyncIteration:
                    self.queue.worker_done()
                    return

                self.queue.put_nowait(self.launch(item))

                await self.queue.wait_not_full()

        except asyncio.CancelledError:
            pass
        except Exception as e:
            self.queue.raise_exception(e)
        finally:
            logger.debug("launcher stopped")
            await self.close(iterator)

    def launch(self, item: A) -> asyncio.Future:
        kwargs = hwmap_utils.transform_kwargs(self.f_args, self.queue.scope.token)

        try:
            y = self.f(item, **kwargs)
        except asyncio.CancelledError:
            future = asyncio.get_running_loop().create_future()
            future.cancel()
            return future
        except Exception as e:
            future = asyncio.get_running_loop().create_future()
            future.set_exception(e)
            return future

        if isinstance(y, tp.Awaitable):
            return asyncio.ensure_future(y)

        future = asyncio.get_running_loop().create_future()
        future.set_result(y)

        return future

    async def close(self, iterator: tp.AsyncIterator[A]) -> None:
        aclose = getattr(iterator, "aclose", None)

        if aclose is None:
            return

        try:
            await aclose()
        except Exception as e:
            logger.debug("error while closing the source: %r", e)

    def start(self) -> asyncio.Task:
        self.process = asyncio.ensure_future(self())

        return self.process

    async def stop(self) -> None:
        if self.process is None:
            return

        if not self.process.done():
            self.process.cancel()

        await asyncio.wait([self.process])
