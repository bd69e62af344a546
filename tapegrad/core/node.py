# tapegrad/core/node.py
from dataclasses import dataclass
from typing import Optional, Tuple

OP_TAGS = ("leaf", "add", "mul", "pow", "tanh")


@dataclass
class Node:
    """
    One record on the tape, produced by a graph-builder operation.

    Attributes
    ----------
    op_tag  : str
        Operation that produced this node; one of OP_TAGS.
    value   : float
        Forward value, computed eagerly when the node is pushed.
    grad    : float
        Accumulated d(output)/d(this node). Starts at 0.0.
    label   : Optional[str]
        Display name, only for diagnostics and never used as identity. None
        means "compose from the operands" (see Tape.label_of).
    parents : Tuple[int, ...]
        Handles (tape indices) of the operand nodes. Always smaller than
        this node's own handle, so the tape can never hold a cycle.
    exponent: Optional[float]
        The constant power for "pow" nodes; None for every other op.
    """
    op_tag: str
    value: float
    grad: float = 0.0
    label: Optional[str] = None
    parents: Tuple[int, ...] = ()
    exponent: Optional[float] = None

    @property
    def is_leaf(self) -> bool:
        return self.op_tag == "leaf"
