from . import task
from . import thread
from .utils import (
    BaseStage,
    CancellationScope,
    CancellationToken,
    Cancelled,
    ConsumerAbandoned,
    DEFAULT_WATERMARK,
    StageReuseError,
    StageState,
)


__version__ = "0.1.0"
