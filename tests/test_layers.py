import pytest

from minikeras.exceptions import GraphBuildingError
from minikeras.neural_networks import (Activations, AvgPool2D, Conv2D, ConvPadding, Dense,
                                       Flatten, Input, MaxPool2D, Zeros)


def test_input_shape():
    layer = Input(28, 28, 1)

    assert layer.compute_output_shape() == (None, 28, 28, 1)
    assert not layer.has_activation()
    assert layer.get_weights() == []


def test_input_placeholder(graph):
    layer = Input(28, 28, 1)
    with graph.tf_graph.as_default():
        layer.define_variables(graph)

    assert layer.input.op.name == "x"
    assert layer.input.shape.as_list() == [None, 28, 28, 1]
    assert graph.variables() == []


def test_dense_shapes_and_variables(graph):
    layer = Dense(output_size=4, name="dense")
    with graph.tf_graph.as_default():
        layer.define_variables(graph, (None, 3))

    assert layer.compute_output_shape((None, 3)) == (None, 4)
    assert (layer.fan_in, layer.fan_out) == (3, 4)
    assert [v.op.name for v in graph.trainable_variables()] == ["dense_dense_kernel",
                                                               "dense_dense_bias"]
    assert list(graph.initializers) == ["dense_dense_kernelInit", "dense_dense_biasInit"]
    assert layer.kernel.shape.as_list() == [3, 4]
    assert layer.bias.shape.as_list() == [4]
    assert layer.has_activation()


def test_defining_variables_twice_fails(graph):
    layer = Dense(output_size=4, name="dense")
    with graph.tf_graph.as_default():
        layer.define_variables(graph, (None, 3))
        with pytest.raises(GraphBuildingError):
            layer.define_variables(graph, (None, 3))


def test_conv2d_variables_and_fans(graph):
    layer = Conv2D(filters=32, kernel_size=(5, 5), name="conv")
    with graph.tf_graph.as_default():
        layer.define_variables(graph, (None, 28, 28, 1))

    assert layer.kernel.shape.as_list() == [5, 5, 1, 32]
    assert layer.bias.shape.as_list() == [32]
    assert (layer.fan_in, layer.fan_out) == (25, 800)
    assert layer.has_activation()


@pytest.mark.parametrize("padding, strides, expected", [
    (ConvPadding.SAME, (1, 1, 1, 1), (None, 28, 28, 32)),
    (ConvPadding.VALID, (1, 1, 1, 1), (None, 24, 24, 32)),
    (ConvPadding.SAME, (1, 2, 2, 1), (None, 14, 14, 32)),
    (ConvPadding.VALID, (1, 2, 2, 1), (None, 12, 12, 32)),
])
def test_conv2d_output_shape(padding, strides, expected):
    layer = Conv2D(filters=32, kernel_size=(5, 5), strides=strides, padding=padding)

    assert layer.compute_output_shape((None, 28, 28, 1)) == expected


def test_conv2d_requires_four_strides():
    with pytest.raises(ValueError):
        Conv2D(strides=(1, 1))


@pytest.mark.parametrize("layer_class", [MaxPool2D, AvgPool2D])
def test_pooling_output_shape(layer_class):
    valid = layer_class()
    same = layer_class(pool_size=(1, 3, 3, 1), strides=(1, 2, 2, 1), padding=ConvPadding.SAME)

    assert valid.compute_output_shape((None, 28, 28, 32)) == (None, 14, 14, 32)
    assert valid.compute_output_shape((None, 7, 7, 64)) == (None, 3, 3, 64)
    assert same.compute_output_shape((None, 7, 7, 64)) == (None, 4, 4, 64)
    assert not valid.has_activation()


def test_flatten(graph):
    layer = Flatten()
    with graph.tf_graph.as_default():
        layer.define_variables(graph, (None, 7, 7, 64))

    assert layer.units == 3136
    assert layer.compute_output_shape((None, 7, 7, 64)) == (None, 3136)
    assert graph.variables() == []


def test_get_weights_requires_model():
    layer = Dense(output_size=2, name="orphan")

    with pytest.raises(ValueError, match="orphan is not a part of any model"):
        layer.get_weights()


def test_layer_accepts_activation_names():
    layer = Dense(output_size=2, activation="softmax", bias_initializer=Zeros())

    assert layer.activation is Activations.SOFTMAX
