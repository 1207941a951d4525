import asyncio
import typing as tp

import pytest

import hwmap

T = tp.TypeVar("T")


class MyError(Exception):
    pass


async def _source(items: tp.Iterable[T], namespace=None) -> tp.AsyncIterator[T]:
    try:
        for x in items:
            yield x
    finally:
        if namespace is not None:
            namespace.closed = True


def _launcher(source, f, maxsize: int = 16) -> hwmap.task.Launcher:
    queue = hwmap.task.PendingQueue(
        maxsize=maxsize, scope=hwmap.task.utils.create_scope()
    )

    return hwmap.task.Launcher(
        source=source, f=f, f_args=hwmap.utils.function_args(f), queue=queue
    )


@hwmap.task.run_test_async
async def test_launch_value():
    launcher = _launcher(_source([]), lambda x: x + 1)

    future = launcher.launch(1)

    assert future.done()
    assert await future == 2


@hwmap.task.run_test_async
async def test_launch_coroutine():
    async def f(x):
        await asyncio.sleep(0)
        return x + 1

    launcher = _launcher(_source([]), f)

    assert await launcher.launch(1) == 2


@hwmap.task.run_test_async
async def test_launch_sync_error():
    def f(x):
        raise MyError()

    launcher = _launcher(_source([]), f)
    future = launcher.launch(1)

    assert future.done()

    with pytest.raises(MyError):
        await future


@hwmap.task.run_test_async
async def test_launch_injects_token():
    launcher = _launcher(_source([]), lambda x, token: token)

    assert await launcher.launch(1) is launcher.queue.scope.token


@hwmap.task.run_test_async
async def test_launcher_exhausts_source():
    namespace = hwmap.task.Namespace(closed=False)
    launcher = _launcher(_source(range(3), namespace), lambda x: x)

    await asyncio.wait_for(launcher.start(), 1)

    assert launcher.queue.is_done()
    assert launcher.queue.namespace.error is None
    assert len(launcher.queue) == 3
    assert namespace.closed


@hwmap.task.run_test_async
async def test_launcher_backpressure():
    namespace = hwmap.task.Namespace(closed=False, started=0)
    never = asyncio.Event()

    async def f(x):
        namespace.started += 1
        await never.wait()

    launcher = _launcher(_source(range(5), namespace), f, maxsize=2)
    launcher.start()

    await asyncio.sleep(0.01)

    assert len(launcher.queue) == 2
    assert namespace.started == 2
    assert not launcher.process.done()

    launcher.queue.stop()
    await asyncio.wait_for(launcher.process, 1)

    assert len(launcher.queue) == 2
    assert namespace.closed

    never.set()


@hwmap.task.run_test_async
async def test_launcher_source_error():
    error = MyError()

    async def source():
        yield 0
        raise error

    launcher = _launcher(source(), lambda x: x)
    await asyncio.wait_for(launcher.start(), 1)

    assert launcher.queue.namespace.error is error
    assert launcher.queue.scope.token.reason is error
    assert len(launcher.queue) == 1


@hwmap.task.run_test_async
async def test_launcher_stop_cancels_pending_source():
    async def source():
        yield 0
        await asyncio.Event().wait()
        yield 1

    launcher = _launcher(source(), lambda x: x)
    launcher.start()

    await asyncio.sleep(0.01)
    await asyncio.wait_for(launcher.stop(), 1)

    assert launcher.process.done()
    assert len(launcher.queue) == 1
