"""
Weight initialization strategies.
"""
import math

import tensorflow as tf

from ..common.utils import DTYPE

# Standard deviation of a unit normal truncated to [-2, 2].
TRUNCATED_NORMAL_STDDEV = 0.87962566103423978


def _shape_tensor(shape):
    return tf.constant(list(shape), dtype=tf.int32)


class Initializer:
    """Base class for weight initializers."""

    def initialize(self, fan_in, fan_out, shape, dtype=DTYPE, name=None):
        """
        Build the tensor holding initial values of a variable.

        Args:
            fan_in (int): Number of input units of the layer
            fan_out (int): Number of output units of the layer
            shape (tuple): Shape of the variable
            dtype (tf.DType): Data type of the values
            name (str, optional): Name of the resulting operation

        Returns:
            tf.Tensor: Initial values
        """
        raise NotImplementedError

    def __repr__(self):
        return f"{self.__class__.__name__}()"


class Zeros(Initializer):
    def initialize(self, fan_in, fan_out, shape, dtype=DTYPE, name=None):
        return tf.zeros(shape, dtype=dtype, name=name)


class Ones(Initializer):
    def initialize(self, fan_in, fan_out, shape, dtype=DTYPE, name=None):
        return tf.ones(shape, dtype=dtype, name=name)


class Constant(Initializer):
    """Fill the variable with a single value."""

    def __init__(self, value):
        self.value = value

    def initialize(self, fan_in, fan_out, shape, dtype=DTYPE, name=None):
        return tf.fill(_shape_tensor(shape), tf.constant(self.value, dtype=dtype), name=name)

    def __repr__(self):
        return f"Constant(value={self.value})"


class TruncatedNormal(Initializer):
    """
    Samples from a normal distribution, values further than two standard
    deviations from the mean are dropped and re-drawn.

    The engine kernel is seeded with ``(seed, 0)`` so the same seed and shape
    always give the same values.
    """

    def __init__(self, seed=12, mean=0.0, stddev=1.0):
        self.seed = seed
        self.mean = mean
        self.stddev = stddev

    def initialize(self, fan_in, fan_out, shape, dtype=DTYPE, name=None):
        return _truncated_normal(shape, dtype, self.seed, self.mean, self.stddev, name)

    def __repr__(self):
        return f"TruncatedNormal(seed={self.seed}, mean={self.mean}, stddev={self.stddev})"


class RandomNormal(Initializer):
    def __init__(self, seed=12, mean=0.0, stddev=1.0):
        self.seed = seed
        self.mean = mean
        self.stddev = stddev

    def initialize(self, fan_in, fan_out, shape, dtype=DTYPE, name=None):
        sample = tf.raw_ops.RandomStandardNormal(
            shape=_shape_tensor(shape), dtype=dtype, seed=self.seed, seed2=0)
        return tf.add(sample * self.stddev, self.mean, name=name)


class RandomUniform(Initializer):
    def __init__(self, seed=12, minval=-0.05, maxval=0.05):
        self.seed = seed
        self.minval = minval
        self.maxval = maxval

    def initialize(self, fan_in, fan_out, shape, dtype=DTYPE, name=None):
        return _uniform(shape, dtype, self.seed, self.minval, self.maxval, name)


class VarianceScaling(Initializer):
    """
    Scales the spread of the samples with the number of layer units.

    With ``n`` the fan-in, fan-out or their mean (depending on ``mode``),
    normal draws use ``stddev = sqrt(scale / n)`` and uniform draws use the
    limit ``sqrt(3 * scale / n)``.
    """

    def __init__(self, scale=1.0, mode="fan_in", distribution="truncated_normal", seed=12):
        if scale <= 0.0:
            raise ValueError(f"scale must be positive, got {scale}")
        if mode not in ("fan_in", "fan_out", "fan_avg"):
            raise ValueError(f"Unknown mode: {mode}")
        if distribution not in ("truncated_normal", "untruncated_normal", "uniform"):
            raise ValueError(f"Unknown distribution: {distribution}")
        self.scale = scale
        self.mode = mode
        self.distribution = distribution
        self.seed = seed

    def _units(self, fan_in, fan_out):
        if self.mode == "fan_in":
            units = fan_in
        elif self.mode == "fan_out":
            units = fan_out
        else:
            units = (fan_in + fan_out) / 2.0
        return max(1.0, units)

    def initialize(self, fan_in, fan_out, shape, dtype=DTYPE, name=None):
        scale = self.scale / self._units(fan_in, fan_out)
        if self.distribution == "truncated_normal":
            stddev = math.sqrt(scale) / TRUNCATED_NORMAL_STDDEV
            return _truncated_normal(shape, dtype, self.seed, 0.0, stddev, name)
        if self.distribution == "untruncated_normal":
            return RandomNormal(self.seed, 0.0, math.sqrt(scale)).initialize(
                fan_in, fan_out, shape, dtype, name)
        limit = math.sqrt(3.0 * scale)
        return _uniform(shape, dtype, self.seed, -limit, limit, name)

    def __repr__(self):
        return (f"{self.__class__.__name__}(scale={self.scale}, mode={self.mode}, "
                f"distribution={self.distribution}, seed={self.seed})")


class GlorotNormal(VarianceScaling):
    def __init__(self, seed=12):
        super().__init__(1.0, "fan_avg", "truncated_normal", seed)


class GlorotUniform(VarianceScaling):
    def __init__(self, seed=12):
        super().__init__(1.0, "fan_avg", "uniform", seed)


class HeNormal(VarianceScaling):
    def __init__(self, seed=12):
        super().__init__(2.0, "fan_in", "truncated_normal", seed)


class LeCunNormal(VarianceScaling):
    def __init__(self, seed=12):
        super().__init__(1.0, "fan_in", "truncated_normal", seed)


def _truncated_normal(shape, dtype, seed, mean, stddev, name):
    sample = tf.raw_ops.TruncatedNormal(shape=_shape_tensor(shape), dtype=dtype, seed=seed, seed2=0)
    return tf.add(sample * stddev, mean, name=name)


def _uniform(shape, dtype, seed, minval, maxval, name):
    sample = tf.raw_ops.RandomUniform(shape=_shape_tensor(shape), dtype=dtype, seed=seed, seed2=0)
    return tf.add(sample * (maxval - minval), minval, name=name)
