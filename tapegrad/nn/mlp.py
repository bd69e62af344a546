"""
Neuron / Layer / MLP built purely from the graph-builder ops.

Each neuron computes tanh(Σᵢ wᵢ·xᵢ + b). Weights and biases are leaf Values
drawn uniformly from [-1, 1) with an explicitly passed numpy Generator, so a
given seed always builds the same network.

Usage:
    >>> rng = np.random.default_rng(0)
    >>> model = MLP(3, [4, 4, 1], rng=rng)
    >>> out = model([2.0, 3.0, -1.0])[0]
    >>> out.backward()
"""

from typing import List, Optional, Sequence, Union

import numpy as np

from ..core.var import Value
from ..ops import leaf, add, mul, tanh

Input = Union[float, Value]


class InputArityError(ValueError):
    """Input vector length does not match a neuron's number of inputs."""


class Neuron:
    """Single tanh unit with `nin` weights and a bias."""

    def __init__(self, nin: int, rng: np.random.Generator, name: str = "n"):
        self.nin = nin
        self.name = name
        self.w = [leaf(rng.uniform(-1.0, 1.0), label=f"{name}.w{i}") for i in range(nin)]
        self.b = leaf(rng.uniform(-1.0, 1.0), label=f"{name}.b")

    def __call__(self, x: Sequence[Input]) -> Value:
        if len(x) != self.nin:
            raise InputArityError(
                f"neuron {self.name!r} expects {self.nin} inputs, got {len(x)}"
            )
        act = self.b
        for wi, xi in zip(self.w, x):
            act = add(act, mul(wi, xi))
        return tanh(act, label=f"{self.name}.out")

    def parameters(self) -> List[Value]:
        return self.w + [self.b]

    def __repr__(self):
        return f"Neuron({self.nin})"


class Layer:
    """`nout` independent neurons over the same `nin` inputs."""

    def __init__(self, nin: int, nout: int, rng: np.random.Generator, name: str = "L"):
        self.neurons = [Neuron(nin, rng, name=f"{name}.n{j}") for j in range(nout)]

    def __call__(self, x: Sequence[Input]) -> List[Value]:
        return [n(x) for n in self.neurons]

    def parameters(self) -> List[Value]:
        return [p for n in self.neurons for p in n.parameters()]

    def __repr__(self):
        return f"Layer([{', '.join(str(n) for n in self.neurons)}])"


class MLP:
    """
    Multilayer perceptron: layers of sizes `nouts` stacked on `nin` inputs.

    Args:
        nin: Number of inputs
        nouts: Layer sizes, e.g. [4, 4, 1] for 3→4→4→1 with nin=3
        rng: Source of initial weights. Defaults to np.random.default_rng(seed)
        seed: Used only when rng is None
    """

    def __init__(self, nin: int, nouts: Sequence[int],
                 rng: Optional[np.random.Generator] = None, seed: Optional[int] = None):
        if rng is None:
            rng = np.random.default_rng(seed)
        sizes = [nin] + list(nouts)
        self.nin = nin
        self.layers = [Layer(sizes[i], sizes[i + 1], rng, name=f"L{i}")
                       for i in range(len(nouts))]

    def __call__(self, x: Sequence[Input]) -> List[Value]:
        if len(x) != self.nin:
            raise InputArityError(f"MLP expects {self.nin} inputs, got {len(x)}")
        out = list(x)
        for layer in self.layers:
            out = layer(out)
        return out

    def parameters(self) -> List[Value]:
        return [p for layer in self.layers for p in layer.parameters()]

    def zero_grad(self):
        for p in self.parameters():
            p.zero_grad()

    def __repr__(self):
        return f"MLP of [{', '.join(str(layer) for layer in self.layers)}]"
