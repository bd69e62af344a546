# tapegrad/core/tape.py
from __future__ import annotations
from typing import List, Optional, Tuple
from contextlib import contextmanager
from .node import Node, OP_TAGS


class Tape:
    """
    Append-only arena of Nodes, recorded in forward order.

    A node's handle is its index in `nodes`. Operands are pushed before the
    nodes that consume them, so every parent handle is smaller than the
    child's and the recorded graph is acyclic by construction.
    """
    def __init__(self):
        self.nodes: List[Node] = []

    def __len__(self):
        return len(self.nodes)

    def reset(self):
        self.nodes.clear()

    def push_node(self, *, op_tag: str, value: float, label: Optional[str] = None,
                  parents: Tuple[int, ...] = (), exponent: Optional[float] = None) -> int:
        """
        Append a Node and return its handle.
        `parents` are handles of nodes already on this tape.
        """
        if op_tag not in OP_TAGS:
            raise ValueError(f"unknown op_tag {op_tag!r}; expected one of {OP_TAGS}")
        handle = len(self.nodes)
        for p in parents:
            if not 0 <= p < handle:
                raise ValueError(f"parent handle {p} is not on the tape before node {handle}")
        self.nodes.append(Node(op_tag=op_tag, value=value, label=label,
                               parents=tuple(parents), exponent=exponent))
        return handle

    def mark(self) -> int:
        """Return a position that `rewind` can later truncate back to."""
        return len(self.nodes)

    def rewind(self, mark: int):
        """
        Drop every node pushed after `mark`. Handles below the mark (e.g.
        parameter leaves created before it) stay valid; Values pointing past
        it become stale.
        """
        if not 0 <= mark <= len(self.nodes):
            raise ValueError(f"mark {mark} is outside the tape (size {len(self.nodes)})")
        del self.nodes[mark:]

    def zero_grads(self):
        for node in self.nodes:
            node.grad = 0.0

    def label_of(self, handle: int) -> str:
        """
        Display label of a node. Unlabelled derived nodes get one composed
        from their operands, e.g. "tanh(x1*w1 + b)". Composition is done on
        demand (labels of deep graphs grow fast) and without recursion.
        """
        nodes = self.nodes
        if nodes[handle].label is not None:
            return nodes[handle].label

        labels = {}
        stack = [handle]
        while stack:
            h = stack[-1]
            node = nodes[h]
            if node.label is not None:
                labels[h] = node.label
                stack.pop()
                continue
            pending = [p for p in node.parents if p not in labels]
            if pending:
                stack.extend(pending)
                continue
            stack.pop()
            args = [labels[p] for p in node.parents]
            if node.op_tag == "add":
                labels[h] = f"{args[0]} + {args[1]}"
            elif node.op_tag == "mul":
                labels[h] = f"{args[0]}*{args[1]}"
            elif node.op_tag == "pow":
                labels[h] = f"{args[0]}^{node.exponent}"
            elif node.op_tag == "tanh":
                labels[h] = f"tanh({args[0]})"
            else:
                labels[h] = f"{node.value}"
        return labels[handle]


# Global default tape; `use_tape` swaps it for a scoped one
global_tape = Tape()


@contextmanager
def use_tape(tape: Optional[Tape] = None):
    """
    Context manager to temporarily record on another (by default fresh) tape:
        with use_tape():
            ... build computation ...
            y.backward()
    """
    from . import tape as _tape_mod  # local import to avoid cycles
    prev = _tape_mod.global_tape
    try:
        # an empty Tape is falsy (len 0), so test against None explicitly
        _tape_mod.global_tape = tape if tape is not None else Tape()
        yield _tape_mod.global_tape
    finally:
        _tape_mod.global_tape = prev
