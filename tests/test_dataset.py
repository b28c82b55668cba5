import numpy as np
import pytest

from minikeras import ImageDataset


def _dataset(n_samples=7):
    images = np.arange(n_samples * 6, dtype=np.float32).reshape(n_samples, 2, 3)
    return ImageDataset.from_labels(images, np.arange(n_samples) % 3, num_classes=3)


def test_images_are_flattened():
    dataset = _dataset()

    assert dataset.images.shape == (7, 6)
    assert dataset.images.dtype == np.float32
    assert dataset.size() == len(dataset) == 7
    assert dataset.num_classes == 3


def test_from_labels_builds_one_hot():
    dataset = _dataset()

    np.testing.assert_array_equal(dataset.get_image_label(4), [0.0, 1.0, 0.0])
    np.testing.assert_array_equal(dataset.get_image(1), np.arange(6, 12))
    np.testing.assert_array_equal(ImageDataset.to_one_hot_vector(4, 2), [0.0, 0.0, 1.0, 0.0])


def test_normalized_vector():
    np.testing.assert_allclose(ImageDataset.to_normalized_vector([0, 51, 255]), [0.0, 0.2, 1.0])


def test_mismatched_samples_are_rejected():
    with pytest.raises(ValueError):
        ImageDataset(np.zeros((3, 4)), np.zeros((2, 2)))
    with pytest.raises(ValueError):
        ImageDataset(np.zeros((3, 4)), np.zeros(3))


def test_batch_iterator_yields_partial_last_batch():
    batches = list(_dataset().batch_iterator(3))

    assert [batch.size for batch in batches] == [3, 3, 1]
    np.testing.assert_array_equal(batches[-1].images, _dataset().images[6:])
    np.testing.assert_array_equal(batches[1].labels, _dataset().labels[3:6])


def test_batch_iterator_is_not_restartable():
    iterator = _dataset(4).batch_iterator(2)

    assert iterator.has_next()
    assert len(list(iterator)) == 2
    assert not iterator.has_next()
    assert list(iterator) == []


def test_batch_size_must_be_positive():
    with pytest.raises(ValueError):
        _dataset().batch_iterator(0)


def test_split_keeps_order():
    train, test = _dataset(10).split(0.8)

    assert (train.size(), test.size()) == (8, 2)
    np.testing.assert_array_equal(test.get_image(0), _dataset(10).get_image(8))
    with pytest.raises(ValueError):
        _dataset().split(1.0)
