from contextlib import contextmanager

import numpy as np
import tensorflow as tf

DTYPE = tf.float32
NP_DTYPE = np.float32


def tail(shape):
    """Drop the batch dimension of a shape tuple."""
    return tuple(shape[1:])


def num_elements(dims):
    return int(np.prod(dims, dtype=np.int64))


def shape_from_dims(*dims):
    return tuple(int(dim) for dim in dims)


def conv_output_length(input_length, filter_size, stride, padding):
    """
    Output length of a convolution or pooling window along one axis.

    Args:
        input_length (int or None): Input length, None if unknown
        filter_size (int): Window size
        stride (int): Window stride
        padding (str): 'SAME' or 'VALID'

    Returns:
        int or None: Output length
    """
    if input_length is None:
        return None
    if padding == "SAME":
        return -(-input_length // stride)
    if padding == "VALID":
        return -(-(input_length - filter_size + 1) // stride)
    raise ValueError(f"Unknown padding: {padding}")


@contextmanager
def batch_buffers(batch, image_shape, label_shape=None):
    """
    Pack an image batch into dense float buffers for a single engine call.

    The buffers only live inside the ``with`` block, also when the block raises.
    """
    images = np.asarray(batch.images, dtype=NP_DTYPE).reshape(image_shape)
    labels = None
    if label_shape is not None:
        labels = np.asarray(batch.labels, dtype=NP_DTYPE).reshape(label_shape)
    try:
        yield images, labels
    finally:
        del images, labels
