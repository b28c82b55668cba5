# tests/conftest.py
import numpy as np
import pytest
import tensorflow as tf

from minikeras import GraphContainer, ImageDataset
from minikeras.neural_networks import (SGD, Activations, Constant, Dense, Input, Sequential,
                                       TruncatedNormal)

tf1 = tf.compat.v1


def evaluate_in_graph(build):
    """Build tensors with ``build`` inside a fresh graph and return their values."""
    graph = tf.Graph()
    with graph.as_default():
        output = build()
    with tf1.Session(graph=graph) as session:
        return session.run(output)


@pytest.fixture
def evaluate():
    return evaluate_in_graph


@pytest.fixture
def graph():
    container = GraphContainer()
    yield container
    container.close()


@pytest.fixture
def session(graph):
    with tf1.Session(graph=graph.tf_graph) as tf_session:
        yield tf_session


def make_dataset(n_samples=10, n_features=4, seed=7):
    """Two linearly separable classes, the class is decided by the first feature."""
    rng = np.random.default_rng(seed)
    images = rng.uniform(0.0, 1.0, size=(n_samples, n_features)).astype(np.float32)
    labels = (images[:, 0] > 0.5).astype(np.int64)
    # Both classes are present whatever the draw.
    labels[0], labels[1] = 0, 1
    images[0, 0], images[1, 0] = 0.1, 0.9
    return ImageDataset.from_labels(images, labels, num_classes=2)


@pytest.fixture
def synthetic_dataset():
    return make_dataset()


@pytest.fixture
def dense_model():
    """Input -> Dense model compiled with plain SGD."""
    model = Sequential(
        Input(4),
        Dense(output_size=2, activation=Activations.LINEAR,
              kernel_initializer=TruncatedNormal(12), bias_initializer=Constant(0.1)),
    )
    model.compile(optimizer=SGD(learning_rate=0.1))
    yield model
    if not model.closed:
        model.close()


@pytest.fixture
def fitted_model(dense_model, synthetic_dataset):
    dense_model.fit(synthetic_dataset, epochs=3, batch_size=5)
    return dense_model
