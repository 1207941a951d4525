import typing as tp

from hwmap import utils as hwmap_utils
from hwmap.utils import A

from ..worker import TransformFn
from .map_iterator import map_iterator


def for_each(
    source: tp.Iterable[A],
    f: TransformFn,
    n: int = hwmap_utils.DEFAULT_WATERMARK,
) -> None:
    """
    Runs `f` for each element of `source` on up to `n` threads and discards the results.

    ```python
    def process_image(image_path):
        image = load_image(image_path)
        image = transform_image(image)
        save_image(image_path, image)

    hwmap.thread.for_each(get_file_paths(), process_image, n=4)
    ```
    """

    for _ in map_iterator(source, f, n):
        pass
