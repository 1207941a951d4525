"""
The `thread` module maps over regular iterables using python's [threading](https://docs.python.org/3/library/threading.html) module. Use it for blocking IO, or for code that releases the GIL, when you are not inside an event loop.

The source is consumed on a background thread, transforms run on a `concurrent.futures.ThreadPoolExecutor` with `n` workers and results are yielded in source order on the consuming thread:

```python
import hwmap
import time
from random import random

def slow_add1(x):
    time.sleep(random()) # <= some slow computation
    return x + 1

data = range(10) # [0, 1, 2, ..., 9]
data = hwmap.thread.map(data, slow_add1, n=3) # [1, 2, 3, ..., 10]
```

The queue of pending results and the `done` / `error` flags are guarded by a single `threading.Condition`.
"""

from .api.for_each import for_each
from .api.map import map
from .api.map_iterator import map_iterator
from .api.mapper import mapper
from .queue import PendingQueue
from .stage import Stage
from .utils import Namespace
from .worker import Launcher, TransformFn, start_workers
from . import utils
