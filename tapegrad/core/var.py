# tapegrad/core/var.py
from __future__ import annotations
from typing import Optional, Tuple

from .node import Node
from .tape import Tape


class StaleValueError(RuntimeError):
    """Raised when a Value's node was discarded by `Tape.rewind`."""


class Value:
    """
    Handle to one scalar node on a tape.

    A Value is just (tape, index); the node itself lives in the tape's arena.
    Two Values are the same graph node iff they share tape and index. Labels
    play no part in identity.

    Build Values with the graph-builder ops (`tapegrad.ops.leaf`, `add`, ...)
    or the operator overloads below, not by calling the constructor directly.
    """

    __slots__ = ("tape", "index", "_node")

    def __init__(self, tape: Tape, index: int):
        self.tape = tape
        self.index = index
        self._node = tape.nodes[index]

    @property
    def node(self) -> Node:
        nodes = self.tape.nodes
        if self.index >= len(nodes) or nodes[self.index] is not self._node:
            raise StaleValueError(
                f"node {self.index} was discarded from its tape"
            )
        return self._node

    @property
    def handle(self) -> int:
        """Index of the node on its tape, checked for staleness."""
        self.node
        return self.index

    # ---------------------------- accessors ---------------------------- #
    @property
    def value(self) -> float:
        return self.node.value

    @property
    def grad(self) -> float:
        return self.node.grad

    @property
    def label(self) -> str:
        self.node
        return self.tape.label_of(self.index)

    @property
    def op(self) -> str:
        return self.node.op_tag

    @property
    def exponent(self) -> Optional[float]:
        return self.node.exponent

    @property
    def is_leaf(self) -> bool:
        return self.node.is_leaf

    @property
    def parents(self) -> Tuple["Value", ...]:
        return tuple(Value(self.tape, p) for p in self.node.parents)

    # ---------------------------- mutators ----------------------------- #
    def adjust_value(self, delta: float):
        """Add `delta` to a leaf's value (a gradient-descent step)."""
        node = self.node
        if not node.is_leaf:
            raise ValueError(
                f"only leaf values can be adjusted; {self.label!r} is a {node.op_tag!r} node"
            )
        node.value = node.value + delta

    def zero_grad(self):
        self.node.grad = 0.0

    def backward(self):
        """Run a reverse pass with this Value as the output root."""
        from .engine import backward
        backward(self)

    # ------------------------- named operations ------------------------ #
    def add(self, other):
        from ..ops.arithmetic import add
        return add(self, other)

    def mul(self, other):
        from ..ops.arithmetic import mul
        return mul(self, other)

    def sub(self, other):
        from ..ops.arithmetic import sub
        return sub(self, other)

    def pow(self, exponent: float):
        from ..ops.arithmetic import pow
        return pow(self, exponent)

    def tanh(self):
        from ..ops.transcendental import tanh
        return tanh(self)

    # ------------------------ operator overloads ----------------------- #
    def __add__(self, other):
        from ..ops.arithmetic import add
        return add(self, other)

    def __radd__(self, other):
        from ..ops.arithmetic import add
        return add(other, self)

    def __sub__(self, other):
        from ..ops.arithmetic import sub
        return sub(self, other)

    def __rsub__(self, other):
        from ..ops.arithmetic import sub
        return sub(other, self)

    def __mul__(self, other):
        from ..ops.arithmetic import mul
        return mul(self, other)

    def __rmul__(self, other):
        from ..ops.arithmetic import mul
        return mul(other, self)

    def __neg__(self):
        from ..ops.arithmetic import neg
        return neg(self)

    def __pow__(self, exponent):
        from ..ops.arithmetic import pow
        return pow(self, exponent)

    # --------------------------- identity ------------------------------ #
    def __eq__(self, other):
        if not isinstance(other, Value):
            return NotImplemented
        return self.tape is other.tape and self.index == other.index

    def __hash__(self):
        return hash((id(self.tape), self.index))

    def __str__(self):
        node = self.node
        return f"[ {self.label} | val = {node.value} | grad = {node.grad} ]"

    def __repr__(self):
        node = self._node
        return f"Value({float(node.value)!r}, grad={float(node.grad)!r}, op={node.op_tag!r})"
