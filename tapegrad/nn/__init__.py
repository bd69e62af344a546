# tapegrad/nn/__init__.py

from .mlp import Neuron, Layer, MLP, InputArityError
from .train import (
    TrainConfig,
    TrainResult,
    Trainer,
    sum_squared_error,
)

__all__ = [
    'Neuron', 'Layer', 'MLP', 'InputArityError',
    'TrainConfig', 'TrainResult', 'Trainer',
    'sum_squared_error',
]
