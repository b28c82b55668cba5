"""
Metrics computed on softmax predictions.
"""
from enum import Enum

import tensorflow as tf

from ..common.utils import DTYPE


class Metrics(Enum):
    ACCURACY = "accuracy"
    MAE = "mae"
    MSE = "mse"

    def apply(self, y_pred, y_true):
        """
        Args:
            y_pred (tf.Tensor): Predicted class probabilities, shape (batch, n_classes)
            y_true (tf.Tensor): One-hot targets of the same shape

        Returns:
            tf.Tensor: Scalar metric value averaged over the batch
        """
        if self is Metrics.ACCURACY:
            correct = tf.equal(tf.argmax(y_pred, 1), tf.argmax(y_true, 1))
            return tf.reduce_mean(tf.cast(correct, DTYPE))
        if self is Metrics.MAE:
            return tf.reduce_mean(tf.abs(y_pred - y_true))
        return tf.reduce_mean(tf.square(y_pred - y_true))


def get_metric(metric):
    """Resolve a metric given as enum member or name."""
    if isinstance(metric, Metrics):
        return metric
    if isinstance(metric, str):
        try:
            return Metrics(metric.lower())
        except ValueError:
            pass
    raise ValueError(f"Unknown metric: {metric}")
