"""
In-memory image dataset with sequential batch iteration.
"""
import numpy as np

from .common.utils import NP_DTYPE


class ImageBatch:
    """A batch of flattened images with their one-hot labels."""

    def __init__(self, images, labels):
        self.images = images
        self.labels = labels

    @property
    def size(self):
        return self.images.shape[0]


class ImageBatchIterator:
    """
    Sequential, finite iterator over dataset batches. It cannot be restarted,
    ask the dataset for a new one instead.
    """

    def __init__(self, dataset, batch_size):
        if batch_size <= 0:
            raise ValueError(f"Batch size must be positive, got {batch_size}")
        self._dataset = dataset
        self._batch_size = batch_size
        self._start = 0

    def has_next(self):
        return self._start < self._dataset.size()

    def __iter__(self):
        return self

    def __next__(self):
        if not self.has_next():
            raise StopIteration
        end = min(self._start + self._batch_size, self._dataset.size())
        batch = ImageBatch(self._dataset.images[self._start:end],
                           self._dataset.labels[self._start:end])
        self._start = end
        return batch


class ImageDataset:
    """
    Dataset of images stored as rows of a 2D float array together with
    one-hot encoded labels.
    """

    def __init__(self, images, labels):
        """
        Args:
            images (ndarray): Array of shape (n_samples, ...) with pixel values
            labels (ndarray): One-hot labels of shape (n_samples, n_classes)
        """
        images = np.asarray(images, dtype=NP_DTYPE)
        labels = np.asarray(labels, dtype=NP_DTYPE)
        if images.shape[0] != labels.shape[0]:
            raise ValueError(
                f"images and labels must have the same number of samples, "
                f"got {images.shape[0]} and {labels.shape[0]}")
        if labels.ndim != 2:
            raise ValueError("labels must be a 2D one-hot array")

        self.images = images.reshape(images.shape[0], -1)
        self.labels = labels

    @classmethod
    def from_labels(cls, images, labels, num_classes):
        """Build a dataset from integer class labels."""
        one_hot = np.eye(num_classes, dtype=NP_DTYPE)[np.asarray(labels, dtype=np.int64)]
        return cls(images, one_hot)

    @staticmethod
    def to_one_hot_vector(num_classes, label):
        vector = np.zeros(num_classes, dtype=NP_DTYPE)
        vector[int(label)] = 1.0
        return vector

    @staticmethod
    def to_normalized_vector(pixels):
        """Scale raw byte pixels to [0, 1]."""
        return np.asarray(pixels, dtype=np.uint8).astype(NP_DTYPE) / 255.0

    @property
    def num_classes(self):
        return self.labels.shape[1]

    def size(self):
        return self.images.shape[0]

    def __len__(self):
        return self.size()

    def batch_iterator(self, batch_size):
        return ImageBatchIterator(self, batch_size)

    def split(self, train_ratio):
        """
        Split into two datasets, keeping sample order.

        Args:
            train_ratio (float): Fraction of samples in the first dataset

        Returns:
            tuple: (first, second) datasets
        """
        if not 0.0 < train_ratio < 1.0:
            raise ValueError(f"train_ratio must be in (0, 1), got {train_ratio}")
        n_train = int(self.size() * train_ratio)
        return (ImageDataset(self.images[:n_train], self.labels[:n_train]),
                ImageDataset(self.images[n_train:], self.labels[n_train:]))

    def get_image(self, index):
        return self.images[index]

    def get_image_label(self, index):
        return self.labels[index]
