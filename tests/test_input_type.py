import pytest

from clear_dense.input_type import InputType


def test_flat_input():
    input_type = InputType(784)
    assert input_type.input_size == 784
    assert input_type.width is None
    assert repr(input_type) == "InputType(input_size=784)"


def test_image_input_size_is_product():
    input_type = InputType.image(width=28, height=28, channel=3)
    assert input_type.input_size == 28 * 28 * 3
    assert (input_type.width, input_type.height, input_type.channel) == (28, 28, 3)
    assert input_type != InputType(28 * 28 * 3)
    assert input_type == InputType.image(28, 28, 3)


def test_equal_descriptors_hash_alike():
    assert hash(InputType.image(28, 28, 3)) == hash(InputType.image(28, 28, 3))
    seen = {InputType.image(28, 28, 3): "rgb", InputType(10): "flat"}
    assert seen[InputType.image(28, 28, 3)] == "rgb"
    assert seen[InputType(10)] == "flat"
    assert len({InputType(10), InputType(10), InputType(11)}) == 2


@pytest.mark.parametrize("size", [0, -3])
def test_non_positive_size(size):
    with pytest.raises(ValueError):
        InputType(size)
