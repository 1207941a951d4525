import cytoolz as cz
import pytest

import hwmap


def test_mapper():
    upper = hwmap.thread.mapper(str.upper)

    stage = upper(["a", "b", "c"])

    assert isinstance(stage, hwmap.thread.Stage)
    assert list(stage) == ["A", "B", "C"]


def test_mapper_pipe():
    add1 = hwmap.thread.mapper(lambda x: x + 1, n=4)

    assert list(range(3) | add1) == [1, 2, 3]
    assert list(range(2) | add1) == [1, 2]


def test_mapper_compose():
    add1 = hwmap.thread.mapper(lambda x: x + 1)
    double = hwmap.thread.mapper(lambda x: x * 2)

    assert cz.pipe(range(3), add1, double, list) == [2, 4, 6]


def test_mapper_invalid_watermark():
    with pytest.raises(ValueError):
        hwmap.thread.mapper(lambda x: x, -1)
