"""
The `task` module maps over async iterables using objects from python's [asyncio](https://docs.python.org/3/library/asyncio.html) module. Use it when the transform performs asynchronous IO and you need to bound how much work is in flight while keeping the output in source order.

`map_iterator` returns a `hwmap.task.Stage` which implements the `AsyncIterable` and `Awaitable` interfaces and works as an async context manager.

### AsyncIterable
Iterate a stage using `async for` to get each result as soon as it and every result before it are available:

```python
import hwmap
import asyncio
from random import random

async def slow_add1(x):
    await asyncio.sleep(random()) # <= some slow computation
    return x + 1

async def main():
    data = range(10) # [0, 1, 2, ..., 9]

    async for x in hwmap.task.map_iterator(data, slow_add1, n=3):
        print(x) # 1, 2, 3, ..., 10

asyncio.run(main())
```

### Awaitable
Awaiting a stage collects all of its results into a list, `hwmap.task.map` does exactly that:

```python
data = await hwmap.task.map_iterator(range(10), slow_add1, n=3) # [1, 2, ..., 10]
```

### Cancellation
Transforms that declare a `token` parameter receive a `hwmap.utils.CancellationToken`. It is activated once, when the consumer leaves early or when the source or any transform fails. The stage never interrupts a running transform, it is up to `f` to check the token:

```python
async def fetch(url, token):
    while not token.cancelled():
        ...
```

### Event Loop
All transforms are scheduled on the running event loop of the consumer.
"""

from .api.for_each import for_each
from .api.map import map
from .api.map_iterator import map_iterator
from .api.mapper import mapper
from .queue import PendingQueue, WakeSignal
from .stage import Stage
from .utils import Namespace, run_test_async
from .worker import Launcher, TransformFn
from . import utils
