import numpy as np
import pytest
import tensorflow as tf

from minikeras.neural_networks import Activations
from minikeras.neural_networks.activations import activation_name, get_activation

INPUT = np.array([-100.0, -10.0, -1.0, 0.0, 1.0, 10.0, 100.0], dtype=np.float32)


def _apply(evaluate, activation):
    return evaluate(lambda: activation.apply(tf.constant(INPUT), "dense"))


def test_relu6(evaluate):
    expected = [0.0, 0.0, 0.0, 0.0, 1.0, 6.0, 6.0]

    np.testing.assert_allclose(_apply(evaluate, Activations.RELU6), expected, atol=1e-7)


def test_log_softmax(evaluate):
    expected = [-200.0, -110.0, -101.0, -100.0, -99.0, -90.0, 0.0]

    np.testing.assert_allclose(_apply(evaluate, Activations.LOG_SOFTMAX), expected, atol=1e-5)


def test_linear_and_relu(evaluate):
    np.testing.assert_array_equal(_apply(evaluate, Activations.LINEAR), INPUT)
    np.testing.assert_array_equal(_apply(evaluate, Activations.RELU), np.maximum(INPUT, 0.0))


def test_activation_output_is_named_after_layer():
    graph = tf.Graph()
    with graph.as_default():
        output = Activations.TANH.apply(tf.constant(INPUT), "conv_1")

    assert output.op.name == "Activation_conv_1"
    assert activation_name("conv_1") == "Activation_conv_1"


def test_get_activation():
    assert get_activation("relu") is Activations.RELU
    assert get_activation("SIGMOID") is Activations.SIGMOID
    assert get_activation(Activations.SWISH) is Activations.SWISH
    with pytest.raises(ValueError):
        get_activation("gelu")
