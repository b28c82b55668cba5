"""
Activation functions applied on top of layer outputs.
"""
from enum import Enum

import tensorflow as tf

ACTIVATION_PREFIX = "Activation_"


def activation_name(layer_name):
    """Name of the operation holding the activation output of a layer."""
    return f"{ACTIVATION_PREFIX}{layer_name}"


def _linear(features):
    return features


def _swish(features):
    return features * tf.nn.sigmoid(features)


_FUNCTIONS = {
    "LINEAR": _linear,
    "SIGMOID": tf.nn.sigmoid,
    "TANH": tf.nn.tanh,
    "RELU": tf.nn.relu,
    "RELU6": tf.nn.relu6,
    "ELU": tf.nn.elu,
    "SELU": tf.nn.selu,
    "SOFTMAX": tf.nn.softmax,
    "LOG_SOFTMAX": tf.nn.log_softmax,
    "EXPONENTIAL": tf.math.exp,
    "SOFTPLUS": tf.nn.softplus,
    "SOFTSIGN": tf.nn.softsign,
    "SWISH": _swish,
}


class Activations(Enum):
    """Supported activation functions."""
    LINEAR = "linear"
    SIGMOID = "sigmoid"
    TANH = "tanh"
    RELU = "relu"
    RELU6 = "relu6"
    ELU = "elu"
    SELU = "selu"
    SOFTMAX = "softmax"
    LOG_SOFTMAX = "log_softmax"
    EXPONENTIAL = "exponential"
    SOFTPLUS = "softplus"
    SOFTSIGN = "softsign"
    SWISH = "swish"

    def apply(self, features, layer_name):
        """
        Apply the activation and name the result after the layer.

        Args:
            features (tf.Tensor): Layer pre-activation output
            layer_name (str): Name of the layer owning the activation

        Returns:
            tf.Tensor: Activation output named ``Activation_<layer_name>``
        """
        output = _FUNCTIONS[self.name](features)
        return tf.identity(output, name=activation_name(layer_name))


def get_activation(activation):
    """Resolve an activation given as enum member or name."""
    if isinstance(activation, Activations):
        return activation
    if isinstance(activation, str):
        try:
            return Activations(activation.lower())
        except ValueError:
            pass
    raise ValueError(f"Unknown activation: {activation}")
