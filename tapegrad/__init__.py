# tapegrad/__init__.py
# Scalar reverse-mode automatic differentiation on an append-only tape

from .core.var import Value, StaleValueError
from .core.tape import Tape, global_tape, use_tape
from .core.engine import topological_sort, backward, zero_grads
from .core.graph_utils import trace, get_graph_stats, print_graph_summary
from .ops import leaf, add, sub, mul, neg, pow, tanh

# Gradient checking by bumping
from . import check
from .check import check_gradients

__version__ = "0.1.0"

__all__ = [
    # Core
    'Value',
    'StaleValueError',
    'Tape',
    'global_tape',
    'use_tape',
    # Graph builder
    'leaf',
    'add',
    'sub',
    'mul',
    'neg',
    'pow',
    'tanh',
    # Engine
    'topological_sort',
    'backward',
    'zero_grads',
    # Diagnostics
    'trace',
    'get_graph_stats',
    'print_graph_summary',
    'check',
    'check_gradients',
]
