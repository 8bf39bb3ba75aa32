import numpy as np
import pytest

from convnet import Volume, VolumeIndexError, ConfigError


def test_constant_fill_and_shape():
    v = Volume(4, 3, 2, 0.5)
    assert v.shape == (4, 3, 2)
    assert len(v) == 24
    assert np.all(v.weights == 0.5)
    assert v.weight_gradients is None


def test_row_major_layout():
    v = Volume(4, 3, 2, 0.0)
    v.set(3, 1, 1, 7.0)
    # index = (width*y + x)*depth + d
    assert v.weights[(4 * 1 + 3) * 2 + 1] == 7.0
    assert v.get(3, 1, 1) == 7.0
    assert v.to_array()[1, 3, 1] == 7.0


def test_default_init_is_random_and_scaled():
    v = Volume(10, 10, 10)
    assert np.std(v.weights) == pytest.approx(np.sqrt(1.0 / 1000), rel=0.2)
    assert not np.all(v.weights == v.weights[0])


def test_add_gradient_accumulates():
    v = Volume(2, 2, 1, 0.0)
    v.add_gradient(1, 0, 0, 1.5)
    v.add_gradient(1, 0, 0, 2.0)
    assert v.get_gradient(1, 0, 0) == 3.5
    assert v.get_gradient(0, 0, 0) == 0.0


def test_get_gradient_without_buffer_is_zero():
    v = Volume(2, 2, 1, 0.0)
    assert v.get_gradient(0, 1, 0) == 0.0
    assert v.weight_gradients is None


def test_zero_gradients_keeps_buffer_identity():
    v = Volume(2, 2, 1, 0.0)
    buf = v.zero_gradients()
    v.add_gradient(0, 0, 0, 3.0)
    assert v.zero_gradients() is buf
    assert np.all(buf == 0.0)


@pytest.mark.parametrize("coord, axis", [((2, 0, 0), "x"), ((0, -1, 0), "y"), ((0, 0, 1), "d")])
def test_out_of_range_names_axis(coord, axis):
    v = Volume(2, 2, 1, 0.0)
    with pytest.raises(VolumeIndexError) as exc:
        v.get(*coord)
    assert exc.value.axis == axis
    assert f"{axis}=" in str(exc.value)


def test_from_array_and_clone_copy():
    arr = np.arange(12, dtype=float).reshape(2, 3, 2)  # (height, width, depth)
    v = Volume.from_array(arr)
    assert v.shape == (3, 2, 2)
    assert v.get(2, 1, 1) == arr[1, 2, 1]
    arr[0, 0, 0] = 100.0
    assert v.get(0, 0, 0) == 0.0

    c = v.clone()
    c.set(0, 0, 0, -1.0)
    assert v.get(0, 0, 0) == 0.0


def test_non_positive_dimension_rejected():
    with pytest.raises(ConfigError):
        Volume(0, 3, 1)
