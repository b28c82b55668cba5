"""
Sequential model: a linear stack of layers compiled into one TensorFlow graph.
"""
import logging
from enum import Enum
from pathlib import Path

import numpy as np
import tensorflow as tf

from .._graph import GraphContainer
from ..base import BaseModel
from ..common.utils import DTYPE, NP_DTYPE, batch_buffers, num_elements
from ..exceptions import (BatchSizeMismatchError, ModelClosedError, ModelStateError,
                          RepeatableLayerNameError, TrainingStepError)
from ..history import TrainingHistory
from .activations import activation_name
from .layers import Dense, Input
from .losses import Losses, get_loss
from .metrics import Metrics, get_metric
from .optimizers import Adam, Optimizer, get_optimizer

tf1 = tf.compat.v1

logger = logging.getLogger(__name__)

TRAINING_LOSS = "training_loss"

OUTPUT_NAME = "output"


class ModelState(Enum):
    CREATED = "created"
    COMPILED = "compiled"
    CLOSED = "closed"


class Sequential(BaseModel):
    """
    Groups a linear stack of layers into a model and provides training and
    inference on it.

    Lifecycle:
    - construction: layers are named and bound to the model, graph and
      session are created
    - compile: variables of every layer are defined, loss, metric and
      optimizer are selected
    - fit / evaluate / predict: any number of times; every fit starts from
      freshly initialized weights
    - close: releases the session and the graph, the model is unusable afterwards
    """

    def __init__(self, input_layer, *layers, verbose=False):
        """
        Args:
            input_layer (Input): Input layer with the image dimensions
            *layers (Layer): Layers in forward order
            verbose (bool): Report training progress at INFO level instead of DEBUG
        """
        if not isinstance(input_layer, Input):
            raise ValueError(f"The first layer must be an Input layer, got {input_layer!r}")
        if not layers:
            raise ValueError("Sequential model needs at least one layer after the Input layer")

        self.input_layer = input_layer
        self.layers = list(layers)
        self.verbose = verbose

        self._name_layers()
        self.layers_by_name = {}
        for layer in self.layers:
            if layer.name in self.layers_by_name:
                raise RepeatableLayerNameError(layer.name)
            self.layers_by_name[layer.name] = layer

        for layer in [self.input_layer] + self.layers:
            layer.attach(self)

        # Amount of classes for classification tasks, -1 when the last layer is not Dense.
        last_layer = self.layers[-1]
        self.amount_of_classes = last_layer.output_size if isinstance(last_layer, Dense) else -1

        self.optimizer = None
        self.loss = None
        self.metric = None
        self.trainable_variables = []
        self.initializers = {}
        self.output_shape = None

        self._graph = GraphContainer()
        self._session = tf1.Session(graph=self._graph.tf_graph)
        self._state = ModelState.CREATED
        self._is_fitted = False

        self._x_op = None
        self._y_op = None
        self._y_pred = None
        self._loss_op = None
        self._prediction = None
        self._metric_ops = {}
        self._targets = None

    @classmethod
    def of(cls, input_layer, *layers, **kwargs):
        """Create a Sequential model from the input layer and the following layers."""
        return cls(input_layer, *layers, **kwargs)

    def _name_layers(self):
        counter = 1
        for layer in self.layers:
            if not layer.name:
                layer.name = f"layer_{counter}"
                counter += 1

    @property
    def state(self):
        return self._state

    @property
    def closed(self):
        return self._state is ModelState.CLOSED

    def get_graph(self):
        return self._graph

    def get_layer(self, layer_name):
        try:
            return self.layers_by_name[layer_name]
        except KeyError:
            raise KeyError(f"There is no layer named {layer_name}") from None

    def compile(self, optimizer=None, loss=Losses.SOFT_MAX_CROSS_ENTROPY_WITH_LOGITS,
                metric=Metrics.ACCURACY):
        """
        Configure the model for training and define the variables of every layer.

        Args:
            optimizer (Optimizer or str): Defaults to Adam()
            loss (Losses or str): Loss function
            metric (Metrics or str): Metric reported during training
        """
        self._check_is_open()
        if self._state is not ModelState.CREATED:
            raise ModelStateError("Model is compiled already")

        if optimizer is None:
            optimizer = Adam()
        elif isinstance(optimizer, str):
            optimizer = get_optimizer(optimizer)
        elif not isinstance(optimizer, Optimizer):
            raise ValueError(f"Unknown optimizer: {optimizer!r}")

        self.optimizer = optimizer
        self.loss = get_loss(loss)
        self.metric = get_metric(metric)

        with self._graph.tf_graph.as_default():
            self.input_layer.define_variables(self._graph)
            input_shape = self.input_layer.compute_output_shape()

            for layer in self.layers:
                layer.define_variables(self._graph, input_shape)

                self.trainable_variables.extend(layer.variables.values())
                self.initializers.update(layer.initializers)

                logger.debug("%r input shape %s", layer, input_shape)
                input_shape = layer.compute_output_shape(input_shape)
                logger.debug("%r output shape %s", layer, input_shape)

        self.output_shape = input_shape
        self._state = ModelState.COMPILED

    def fit(self, dataset, epochs=5, batch_size=32, validation_dataset=None,
            validation_batch_size=None, validation_metric=Metrics.ACCURACY, verbose=None):
        """
        Train the model for a fixed number of epochs. Weights are initialized
        from scratch on every call.

        Args:
            dataset (ImageDataset): Training images and one-hot labels
            epochs (int): Number of passes over the dataset
            batch_size (int): Number of samples per gradient update
            validation_dataset (ImageDataset, optional): Evaluated after every epoch
            validation_batch_size (int, optional): Defaults to batch_size
            validation_metric (Metrics or str): Metric for the validation dataset
            verbose (bool, optional): Overrides the model verbosity

        Returns:
            TrainingHistory: Loss and metric values of every batch
        """
        self._check_is_compiled()
        if verbose is not None:
            self.verbose = verbose

        training_history = TrainingHistory()

        if self._y_pred is None:
            self._build_training_ops()

        logger.debug("Initialization of TensorFlow Graph variables")
        self._graph.initialize_graph_variables(self._session)

        if self._targets is None:
            with self._graph.tf_graph.as_default():
                self._targets = self.optimizer.prepare_targets(
                    self._graph, self._loss_op, self.trainable_variables)

        self._graph.initialize_optimizer_variables(self._session)
        self._is_fitted = True

        for epoch in range(1, epochs + 1):
            extra_feed = self.optimizer.feed_for_epoch(epoch)

            batch_counter = 0
            average_training_loss_accum = 0.0
            average_training_metric_accum = 0.0

            for batch in dataset.batch_iterator(batch_size):
                image_shape, label_shape = self._calculate_xy_shapes(batch)
                with batch_buffers(batch, image_shape, label_shape) as (images, labels):
                    loss_value, metric_value = self._train_on_batch(images, labels, extra_feed)

                average_training_loss_accum += loss_value
                average_training_metric_accum += metric_value
                training_history.append(epoch, batch_counter, loss_value, metric_value)

                logger.debug("epochs: %d batch: %d lossValue: %f metricValue: %f",
                             epoch, batch_counter, loss_value, metric_value)
                batch_counter += 1

            if batch_counter == 0:
                raise ValueError("Training dataset is empty")

            avg_loss_value = average_training_loss_accum / batch_counter
            avg_training_metric_value = average_training_metric_accum / batch_counter

            if validation_dataset is not None:
                validation_metric_value = self.evaluate(
                    validation_dataset, validation_metric, validation_batch_size or batch_size)
                self._log("epochs: %d avgLossValue: %f avgTrainingMetricValue: %f "
                          "validationMetricValue: %f", epoch, avg_loss_value,
                          avg_training_metric_value, validation_metric_value)
            else:
                self._log("epochs: %d avgLossValue: %f avgTrainingMetricValue: %f",
                          epoch, avg_loss_value, avg_training_metric_value)

        return training_history

    def _build_training_ops(self):
        with self._graph.tf_graph.as_default():
            self._x_op = self.input_layer.input
            label_shape = (None, self.amount_of_classes) if self.amount_of_classes > 0 else None
            self._y_op = tf1.placeholder(DTYPE, shape=label_shape, name="y")

            self._y_pred = self._transform_input_with_model(self._x_op)
            self._loss_op = tf.identity(self.loss.apply(self._y_pred, self._y_op), name=TRAINING_LOSS)
            self._prediction = tf.nn.softmax(self._y_pred, name=OUTPUT_NAME)
        self._metric_op(self.metric)

    def _transform_input_with_model(self, input_data):
        output = input_data
        for layer in self.layers:
            output = layer.transform_input(output)
        return output

    def _metric_op(self, metric):
        if metric not in self._metric_ops:
            with self._graph.tf_graph.as_default():
                self._metric_ops[metric] = metric.apply(self._prediction, self._y_op)
        return self._metric_ops[metric]

    def _train_on_batch(self, images, labels, extra_feed):
        """
        Run one optimization step and return the loss value and the metric value of the batch.
        """
        feed_dict = {self._x_op: images, self._y_op: labels}
        feed_dict.update(extra_feed)

        try:
            _, loss_value, metric_value = self._session.run(
                [self._targets, self._loss_op.name, self._metric_op(self.metric)],
                feed_dict=feed_dict)
        except tf.errors.OpError as err:
            raise TrainingStepError(err.message) from err

        return float(loss_value), float(metric_value)

    def evaluate(self, dataset, metric=Metrics.ACCURACY, batch_size=256):
        """
        Average a metric over all batches of the dataset.

        Args:
            dataset (ImageDataset): Images and one-hot labels
            metric (Metrics or str): Metric to evaluate
            batch_size (int): Must divide the dataset size

        Returns:
            float: Value of the metric
        """
        self._check_is_fitted()
        self._check_divisible(dataset, batch_size)

        metric_op = self._metric_op(get_metric(metric))

        average_metric_accum = 0.0
        amount_of_batches = 0

        for batch in dataset.batch_iterator(batch_size):
            image_shape, label_shape = self._calculate_xy_shapes(batch)
            with batch_buffers(batch, image_shape, label_shape) as (images, labels):
                metric_value = self._session.run(
                    metric_op, feed_dict={self._x_op: images, self._y_op: labels})
            average_metric_accum += float(metric_value)
            amount_of_batches += 1

        return average_metric_accum / amount_of_batches

    def predict_all(self, dataset, batch_size=256):
        """
        Predict the class of every image in the dataset, batch by batch.

        Returns:
            ndarray: Class indices of shape (dataset.size(),)
        """
        self._check_is_fitted()
        self._check_divisible(dataset, batch_size)

        predictions = np.full(dataset.size(), np.iinfo(np.int32).min, dtype=np.int32)

        for batch_index, batch in enumerate(dataset.batch_iterator(batch_size)):
            image_shape, _ = self._calculate_xy_shapes(batch)
            with batch_buffers(batch, image_shape) as (images, _):
                soft_predictions = self._session.run(
                    self._prediction, feed_dict={self._x_op: images})

            offset = batch_index * batch_size
            predictions[offset:offset + batch.size] = np.argmax(soft_predictions, axis=1)

        return predictions

    def predict_softly_and_get_activations(self, image, form_activation_data=False):
        """
        Predict the probability of every class for a single image.

        Args:
            image (ndarray): Flattened image or image with the input dimensions
            form_activation_data (bool): Also fetch the activations of every
                layer that has one, in layer order

        Returns:
            tuple: (class probabilities, list of activation arrays)
        """
        self._check_is_fitted()
        images = self._reshape_image(image)

        fetches = [self._prediction]
        if form_activation_data:
            for layer in self.layers:
                if layer.has_activation():
                    fetches.append(f"{activation_name(layer.name)}:0")

        tensors = self._session.run(fetches, feed_dict={self._x_op: images})
        return tensors[0][0], list(tensors[1:])

    def _reshape_image(self, image):
        image = np.asarray(image, dtype=NP_DTYPE)
        dims = self.input_layer.packed_dims
        if image.size != num_elements(dims):
            raise ValueError(f"Cannot reshape image {image.shape} to {(1,) + dims}")
        return image.reshape((1,) + dims)

    def fetch_variables(self, variable_names):
        """Current values of the named variables."""
        self._check_is_fitted()
        return self._session.run([self._graph.variable(name) for name in variable_names])

    def save(self, path_to_model_directory):
        """
        Dump the graph definition and the trainable variables into a directory.

        Writes ``graph.pb``, ``variableNames.txt`` with variable names in
        registration order and a ``<variable>.txt`` file of space separated
        flattened values per variable.
        """
        self._check_is_fitted()
        directory = Path(path_to_model_directory)
        directory.mkdir(parents=True, exist_ok=True)

        (directory / "graph.pb").write_bytes(
            self._graph.tf_graph.as_graph_def().SerializeToString())

        model_weights = self._session.run(self.trainable_variables)

        with open(directory / "variableNames.txt", "w", encoding="utf-8") as variable_names_file:
            for variable, weights in zip(self.trainable_variables, model_weights):
                variable_name = variable.op.name
                variable_names_file.write(variable_name + "\n")

                flattened = np.ravel(weights)
                (directory / f"{variable_name}.txt").write_text(
                    " ".join(str(value) for value in flattened), encoding="utf-8")

        logger.debug("Model saved to %s", directory)

    def close(self):
        """Release the session and the graph."""
        self._check_is_open()
        self._session.close()
        self._graph.close()
        self._state = ModelState.CLOSED

    def _calculate_xy_shapes(self, batch):
        image_shape = (batch.size,) + self.input_layer.packed_dims
        amount_of_classes = self.amount_of_classes
        if amount_of_classes <= 0:
            amount_of_classes = batch.labels.shape[-1]
        return image_shape, (batch.size, amount_of_classes)

    def _check_divisible(self, dataset, batch_size):
        if dataset.size() == 0:
            raise ValueError("Dataset is empty")
        if dataset.size() % batch_size != 0:
            raise BatchSizeMismatchError(dataset.size(), batch_size)

    def _check_is_open(self):
        if self._state is ModelState.CLOSED:
            raise ModelClosedError("Model is closed and cannot be used anymore")

    def _check_is_compiled(self):
        self._check_is_open()
        if self._state is not ModelState.COMPILED:
            raise ModelStateError("Model must be compiled first")

    def _check_is_fitted(self):
        self._check_is_compiled()
        if not self._is_fitted:
            raise ModelStateError("Model must be fitted before making predictions.")

    def _log(self, message, *args):
        logger.log(logging.INFO if self.verbose else logging.DEBUG, message, *args)

    def __str__(self):
        return str(self._graph)

    def __repr__(self):
        layers = ", ".join(repr(layer) for layer in self.layers)
        return f"Sequential({self.input_layer!r}, {layers})"
