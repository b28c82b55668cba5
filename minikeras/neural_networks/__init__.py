"""
Neural networks module: layers, initializers, optimizers and the Sequential model.
"""
from .activations import Activations
from .initializers import (
    Initializer,
    Zeros,
    Ones,
    Constant,
    TruncatedNormal,
    RandomNormal,
    RandomUniform,
    VarianceScaling,
    GlorotNormal,
    GlorotUniform,
    HeNormal,
    LeCunNormal
)
from .layers import (
    Layer,
    Input,
    Dense,
    Flatten,
    Conv2D,
    ConvPadding,
    MaxPool2D,
    AvgPool2D
)
from .losses import Losses, get_loss
from .metrics import Metrics, get_metric
from .optimizers import (
    Optimizer,
    SGD,
    Momentum,
    AdaGrad,
    AdaGradDA,
    AdaDelta,
    RMSProp,
    Adam,
    Adamax,
    get_optimizer
)
from ._sequential import Sequential, ModelState

__all__ = [
    'Activations',
    'Initializer',
    'Zeros',
    'Ones',
    'Constant',
    'TruncatedNormal',
    'RandomNormal',
    'RandomUniform',
    'VarianceScaling',
    'GlorotNormal',
    'GlorotUniform',
    'HeNormal',
    'LeCunNormal',
    'Layer',
    'Input',
    'Dense',
    'Flatten',
    'Conv2D',
    'ConvPadding',
    'MaxPool2D',
    'AvgPool2D',
    'Losses',
    'get_loss',
    'Metrics',
    'get_metric',
    'Optimizer',
    'SGD',
    'Momentum',
    'AdaGrad',
    'AdaGradDA',
    'AdaDelta',
    'RMSProp',
    'Adam',
    'Adamax',
    'get_optimizer',
    'Sequential',
    'ModelState'
]
