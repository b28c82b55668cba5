"""
Errors raised by minikeras models, layers and graph containers.
"""


class ConfigurationError(ValueError):
    """Model or layer configuration is invalid."""


class RepeatableLayerNameError(ConfigurationError):
    """Two layers of the same model share a name."""

    def __init__(self, layer_name):
        super().__init__(f"The layer name {layer_name} is used in previous layers")
        self.layer_name = layer_name


class BatchSizeMismatchError(ConfigurationError):
    """Dataset size is not a multiple of the requested batch size."""

    def __init__(self, dataset_size, batch_size):
        super().__init__(
            f"Dataset size {dataset_size} must be divisible by batch size {batch_size}")
        self.dataset_size = dataset_size
        self.batch_size = batch_size


class GraphBuildingError(RuntimeError):
    """A variable or initializer was registered in the graph twice."""


class TrainingStepError(RuntimeError):
    """The engine failed while running a training step."""


class ModelStateError(RuntimeError):
    """Operation is not allowed in the current model state."""


class ModelClosedError(ModelStateError):
    """Model was closed already."""
