# tapegrad/ops/__init__.py

# Convenience re-exports so users can do: from tapegrad.ops import mul, tanh, ...
from .arithmetic import leaf, add, sub, mul, neg, pow
from .transcendental import tanh

__all__ = [
    "leaf", "add", "sub", "mul", "neg", "pow",
    "tanh",
]
