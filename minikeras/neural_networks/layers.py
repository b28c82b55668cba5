"""
Neural network layers implementation.
"""
import logging
from enum import Enum

import tensorflow as tf

from ..common.utils import DTYPE, conv_output_length, num_elements, shape_from_dims, tail
from .activations import Activations, get_activation
from .initializers import Constant, TruncatedNormal, Zeros

tf1 = tf.compat.v1

logger = logging.getLogger(__name__)


class ConvPadding(Enum):
    SAME = "SAME"
    VALID = "VALID"


class Layer:
    """
    Base class for all neural network layers.

    A layer defines its variables once, when the model is compiled, and then
    contributes a piece of the forward computation graph.
    """

    def __init__(self, name=""):
        self.name = name
        self.parent_model = None
        # Trainable variables by name.
        self.variables = {}
        # Initializer operations by name.
        self.initializers = {}
        self.fan_in = None
        self.fan_out = None

    def attach(self, model):
        """Bind the layer to the model that owns it. Done once, on model assembly."""
        if self.parent_model is not None and self.parent_model is not model:
            raise ValueError(f"Layer {self.name} belongs to another model already")
        self.parent_model = model

    def define_variables(self, graph, input_shape):
        """Create the layer variables for the given input shape and register them in the graph."""
        raise NotImplementedError

    def compute_output_shape(self, input_shape):
        """Shape of the layer output for the given input shape."""
        raise NotImplementedError

    def transform_input(self, input_data):
        """Forward pass: build the output tensor from the input tensor."""
        raise NotImplementedError

    def get_weights(self):
        """Current values of the layer variables."""
        return []

    def has_activation(self):
        return False

    def _add_weight(self, graph, variable_name, shape, init_name, initializer):
        """
        Create a trainable variable and register it together with its initializer.

        Args:
            graph (GraphContainer): Graph of the model
            variable_name (str): Name of the variable
            shape (tuple): Shape of the variable
            init_name (str): Name of the initializer operation
            initializer (Initializer): Strategy producing the initial value

        Returns:
            tf.Variable: The new variable
        """
        variable = tf.Variable(tf.zeros(shape, dtype=DTYPE), name=variable_name, trainable=True)
        graph.add_variable(variable, True, name=variable_name)

        initial_value = initializer.initialize(
            self.fan_in, self.fan_out, shape, DTYPE, name=f"{init_name}_value")
        init_op = variable.assign(initial_value, read_value=False, name=init_name)
        graph.add_initializer(init_name, init_op)

        self.variables[variable_name] = variable
        self.initializers[init_name] = init_op
        return variable

    def _fetch_weights(self, *variable_names):
        if self.parent_model is None:
            raise ValueError(f"Layer {self.name} is not a part of any model")
        return self.parent_model.fetch_variables(list(variable_names))

    def __repr__(self):
        return f"{self.__class__.__name__}(name={self.name})"


class Input(Layer):
    """
    Entry layer of a model, owns the placeholder fed with input images.
    """

    def __init__(self, *dims, name="input"):
        super().__init__(name)
        self.packed_dims = shape_from_dims(*dims)
        self.input = None

    def define_variables(self, graph=None, input_shape=None):
        self.input = tf1.placeholder(DTYPE, shape=(None,) + self.packed_dims, name="x")

    def compute_output_shape(self, input_shape=None):
        return (None,) + self.packed_dims

    def transform_input(self, input_data):
        return input_data

    def __repr__(self):
        return f"Input(dims={self.packed_dims})"


class Dense(Layer):
    """
    Densely connected layer: activation(input.dot(kernel) + bias).
    """

    KERNEL = "dense_kernel"
    KERNEL_INIT = "dense_kernelInit"
    BIAS = "dense_bias"
    BIAS_INIT = "dense_biasInit"

    def __init__(self, output_size=128, activation=Activations.RELU,
                 kernel_initializer=None, bias_initializer=None, name=""):
        """
        Args:
            output_size (int): Number of output units
            activation (Activations or str): Activation of the output
            kernel_initializer (Initializer): Defaults to TruncatedNormal(12)
            bias_initializer (Initializer): Defaults to Constant(0.1)
            name (str): Layer name, assigned by the model when empty
        """
        super().__init__(name)
        self.output_size = output_size
        self.activation = get_activation(activation)
        self.kernel_initializer = kernel_initializer or TruncatedNormal(12)
        self.bias_initializer = bias_initializer or Constant(0.1)
        self.kernel = None
        self.bias = None

    def define_variables(self, graph, input_shape):
        input_size = int(input_shape[-1])
        kernel_shape = (input_size, self.output_size)
        bias_shape = (self.output_size,)

        self.fan_in = input_size
        self.fan_out = self.output_size

        self.kernel = self._add_weight(graph, self._kernel_name(), kernel_shape,
                                       f"{self.name}_{self.KERNEL_INIT}", self.kernel_initializer)
        self.bias = self._add_weight(graph, self._bias_name(), bias_shape,
                                     f"{self.name}_{self.BIAS_INIT}", self.bias_initializer)

    def compute_output_shape(self, input_shape):
        return (input_shape[0], self.output_size)

    def transform_input(self, input_data):
        signal = tf.nn.bias_add(tf.matmul(input_data, self.kernel), self.bias)
        return self.activation.apply(signal, self.name)

    def get_weights(self):
        return self._fetch_weights(self._kernel_name(), self._bias_name())

    def has_activation(self):
        return True

    def _kernel_name(self):
        return f"{self.name}_{self.KERNEL}"

    def _bias_name(self):
        return f"{self.name}_{self.BIAS}"

    def __repr__(self):
        return (f"Dense(name={self.name}, output_size={self.output_size}, "
                f"activation={self.activation.name})")


class Flatten(Layer):
    """Flatten all dimensions except the batch one."""

    def __init__(self, name=""):
        super().__init__(name)
        self.units = None

    def define_variables(self, graph, input_shape):
        self.units = num_elements(tail(input_shape))

    def compute_output_shape(self, input_shape):
        return (input_shape[0], num_elements(tail(input_shape)))

    def transform_input(self, input_data):
        return tf.reshape(input_data, [-1, self.units])


class Conv2D(Layer):
    """
    2D convolution layer: activation(conv2d(input, kernel) + bias).
    """

    KERNEL = "conv2d_kernel"
    KERNEL_INIT = "conv2d_kernelInit"
    BIAS = "conv2d_bias"
    BIAS_INIT = "conv2d_biasInit"

    def __init__(self, filters=32, kernel_size=(5, 5), strides=(1, 1, 1, 1),
                 activation=Activations.RELU, kernel_initializer=None,
                 bias_initializer=None, padding=ConvPadding.SAME, name=""):
        """
        Args:
            filters (int): Number of output channels
            kernel_size (tuple): (height, width) of the convolution window
            strides (tuple): Strides for every input dimension (N, H, W, C)
            activation (Activations or str): Activation of the output
            kernel_initializer (Initializer): Defaults to TruncatedNormal(12)
            bias_initializer (Initializer): Defaults to Zeros()
            padding (ConvPadding): SAME or VALID
            name (str): Layer name, assigned by the model when empty
        """
        super().__init__(name)
        if len(strides) != 4:
            raise ValueError(f"strides must have 4 elements (N, H, W, C), got {strides}")
        self.filters = filters
        self.kernel_size = tuple(kernel_size)
        self.strides = tuple(strides)
        self.activation = get_activation(activation)
        self.kernel_initializer = kernel_initializer or TruncatedNormal(12)
        self.bias_initializer = bias_initializer or Zeros()
        self.padding = ConvPadding(padding)
        self.kernel = None
        self.bias = None

    def define_variables(self, graph, input_shape):
        # Channels are the last input dimension.
        input_depth = int(input_shape[-1])
        kernel_shape = shape_from_dims(*self.kernel_size, input_depth, self.filters)
        bias_shape = (self.filters,)

        logger.debug("%s kernelShape %s biasShape %s", self.name, kernel_shape, bias_shape)

        self.fan_in = input_depth * self.kernel_size[0] * self.kernel_size[1]
        self.fan_out = round(self.filters * self.kernel_size[0] * self.kernel_size[1]
                             / (self.strides[0] * self.strides[1]))

        self.kernel = self._add_weight(graph, self._kernel_name(), kernel_shape,
                                       f"{self.name}_{self.KERNEL_INIT}", self.kernel_initializer)
        self.bias = self._add_weight(graph, self._bias_name(), bias_shape,
                                     f"{self.name}_{self.BIAS_INIT}", self.bias_initializer)

    def compute_output_shape(self, input_shape):
        batch, height, width = input_shape[0], input_shape[1], input_shape[2]
        out_h = conv_output_length(height, self.kernel_size[0], self.strides[1], self.padding.value)
        out_w = conv_output_length(width, self.kernel_size[1], self.strides[2], self.padding.value)
        return (batch, out_h, out_w, self.filters)

    def transform_input(self, input_data):
        signal = tf.nn.bias_add(
            tf.nn.conv2d(input_data, self.kernel, strides=list(self.strides),
                         padding=self.padding.value),
            self.bias)
        return self.activation.apply(signal, self.name)

    def get_weights(self):
        return self._fetch_weights(self._kernel_name(), self._bias_name())

    def has_activation(self):
        return True

    def _kernel_name(self):
        return f"{self.name}_{self.KERNEL}"

    def _bias_name(self):
        return f"{self.name}_{self.BIAS}"

    def __repr__(self):
        return (f"Conv2D(name={self.name}, filters={self.filters}, "
                f"kernel_size={self.kernel_size}, strides={self.strides}, "
                f"padding={self.padding.name})")


class _Pool2D(Layer):
    """Base for 2D pooling layers, windows are given for every input dimension."""

    def __init__(self, pool_size=(1, 2, 2, 1), strides=(1, 2, 2, 1),
                 padding=ConvPadding.VALID, name=""):
        super().__init__(name)
        if len(pool_size) != 4 or len(strides) != 4:
            raise ValueError("pool_size and strides must have 4 elements (N, H, W, C)")
        self.pool_size = tuple(pool_size)
        self.strides = tuple(strides)
        self.padding = ConvPadding(padding)

    def define_variables(self, graph, input_shape):
        pass

    def compute_output_shape(self, input_shape):
        batch, height, width, channels = input_shape
        out_h = conv_output_length(height, self.pool_size[1], self.strides[1], self.padding.value)
        out_w = conv_output_length(width, self.pool_size[2], self.strides[2], self.padding.value)
        return (batch, out_h, out_w, channels)

    def __repr__(self):
        return (f"{self.__class__.__name__}(name={self.name}, pool_size={self.pool_size}, "
                f"strides={self.strides}, padding={self.padding.name})")


class MaxPool2D(_Pool2D):
    """Max pooling layer for spatial dimension reduction."""

    def transform_input(self, input_data):
        return tf.nn.max_pool2d(input_data, ksize=list(self.pool_size),
                                strides=list(self.strides), padding=self.padding.value)


class AvgPool2D(_Pool2D):
    """Average pooling layer for spatial dimension reduction."""

    def transform_input(self, input_data):
        return tf.nn.avg_pool2d(input_data, ksize=list(self.pool_size),
                                strides=list(self.strides), padding=self.padding.value)
