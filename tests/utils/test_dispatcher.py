import pytest
import numpy as np
import torch

from proxgrad.utils import Dispatcher


@pytest.fixture
def dispatcher():
    disp = Dispatcher()
    disp.register("numpy", lambda x: ("numpy", x))
    disp.register("torch", lambda x: ("torch", x))
    return disp


@pytest.mark.parametrize(
    "value, expected",
    [
        (np.zeros(3), "numpy"),
        ([1.0, 2.0], "numpy"),
        (2.5, "numpy"),
        (torch.zeros(3), "torch"),
    ],
)
def test_detect_backend_from_type(dispatcher, value, expected):
    assert dispatcher.detect_backend(value) == expected
    assert dispatcher(value)[0] == expected


def test_forced_backend_and_alias(dispatcher):
    assert dispatcher.detect_backend(np.zeros(2), "torch") == "torch"
    assert dispatcher.detect_backend(np.zeros(2), "pytorch") == "torch"
    assert dispatcher.detect_backend(torch.zeros(2), "np") == "numpy"


def test_unregistered_backend():
    disp = Dispatcher()
    disp.register("numpy", lambda x: x)

    with pytest.raises(ValueError, match="not available"):
        disp.detect_backend(torch.zeros(2))


def test_cast_values(dispatcher):
    dispatcher.detect_backend([1.0, 2.0], "torch")
    x = dispatcher.cast_values([1.0, 2.0])
    assert torch.is_tensor(x)

    dispatcher.detect_backend([1.0, 2.0])
    x, y = dispatcher.cast_values([1.0, 2.0], 3.0)
    assert isinstance(x, np.ndarray)
    assert isinstance(y, np.ndarray)


def test_cast_keeps_same_array(dispatcher):
    a = np.zeros((2, 3))
    dispatcher.detect_backend(a)
    assert dispatcher.cast_values(a) is a


def test_call_before_detection():
    disp = Dispatcher()
    disp.register("numpy", lambda x: x)

    with pytest.raises(RuntimeError, match="detect_backend"):
        disp(1.0)
