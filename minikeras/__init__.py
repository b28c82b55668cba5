"""Keras-like neural network training on top of TensorFlow graphs."""

from ._graph import GraphContainer
from .dataset import ImageBatch, ImageDataset
from .history import BatchEvent, TrainingHistory

__all__ = ['GraphContainer', 'ImageBatch', 'ImageDataset', 'BatchEvent', 'TrainingHistory']
