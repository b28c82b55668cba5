"""
Loss functions mapping (logits, targets) to a scalar batch loss.
"""
from enum import Enum

import tensorflow as tf


class Losses(Enum):
    SOFT_MAX_CROSS_ENTROPY_WITH_LOGITS = "soft_max_cross_entropy_with_logits"
    SIGMOID_CROSS_ENTROPY_WITH_LOGITS = "sigmoid_cross_entropy_with_logits"
    MAE = "mae"
    MSE = "mse"
    HINGE = "hinge"

    def apply(self, y_pred, y_true):
        """
        Args:
            y_pred (tf.Tensor): Model output before softmax, shape (batch, n_classes)
            y_true (tf.Tensor): One-hot targets of the same shape

        Returns:
            tf.Tensor: Scalar mean loss over the batch
        """
        if self is Losses.SOFT_MAX_CROSS_ENTROPY_WITH_LOGITS:
            batch_loss = tf.nn.softmax_cross_entropy_with_logits(labels=y_true, logits=y_pred)
            return tf.reduce_mean(batch_loss)
        if self is Losses.SIGMOID_CROSS_ENTROPY_WITH_LOGITS:
            batch_loss = tf.nn.sigmoid_cross_entropy_with_logits(labels=y_true, logits=y_pred)
            return tf.reduce_mean(batch_loss)
        if self is Losses.MAE:
            return tf.reduce_mean(tf.abs(y_pred - y_true))
        if self is Losses.MSE:
            return tf.reduce_mean(tf.square(y_pred - y_true))
        # Hinge expects {0, 1} targets, rescaled to {-1, 1}.
        signed_true = 2.0 * y_true - 1.0
        return tf.reduce_mean(tf.maximum(1.0 - signed_true * y_pred, 0.0))


def get_loss(loss):
    """Resolve a loss given as enum member or name."""
    if isinstance(loss, Losses):
        return loss
    if isinstance(loss, str):
        try:
            return Losses(loss.lower())
        except ValueError:
            pass
    raise ValueError(f"Unknown loss: {loss}")
