# tapegrad/core/engine.py
from __future__ import annotations
import logging
import numpy as np
from typing import Callable, Dict, List

from .node import Node
from .tape import Tape
from .var import Value

logger = logging.getLogger(__name__)


def _topo_handles(tape: Tape, root: int) -> List[int]:
    """
    Post-order handles of every node reachable from `root`.

    Iterative DFS with an explicit stack; each entry is (handle, expanded).
    A node is emitted once all of its operands have been emitted. The visited
    set is keyed on handles, so labels can collide freely.
    """
    nodes = tape.nodes
    visited = set()
    order: List[int] = []
    stack = [(root, False)]
    while stack:
        handle, expanded = stack.pop()
        if expanded:
            order.append(handle)
            continue
        if handle in visited:
            continue
        visited.add(handle)
        stack.append((handle, True))
        # reversed so the first operand is explored first, as in recursive DFS
        for p in reversed(nodes[handle].parents):
            if p not in visited:
                stack.append((p, False))
    return order


def topological_sort(root: Value) -> List[Value]:
    """
    Every Value reachable from `root`, each exactly once, ordered so that a
    node always comes after all the nodes it depends on. `root` is last.
    """
    return [Value(root.tape, h) for h in _topo_handles(root.tape, root.handle)]


# ---------------- local gradient rules, keyed by op_tag ---------------- #
def _leaf_rule(node: Node, nodes: List[Node]):
    pass


def _add_rule(node: Node, nodes: List[Node]):
    g = node.grad
    for p in node.parents:
        nodes[p].grad += g


def _mul_rule(node: Node, nodes: List[Node]):
    # a and b may be the same node (x*x); both contributions land on it
    a, b = (nodes[p] for p in node.parents)
    g = node.grad
    a_val, b_val = a.value, b.value
    a.grad += b_val * g
    b.grad += a_val * g


def _pow_rule(node: Node, nodes: List[Node]):
    (base,) = (nodes[p] for p in node.parents)
    k = node.exponent
    with np.errstate(all="ignore"):
        base.grad += k * np.power(np.float64(base.value), k - 1.0) * node.grad


def _tanh_rule(node: Node, nodes: List[Node]):
    (arg,) = (nodes[p] for p in node.parents)
    t = node.value
    arg.grad += (1.0 - t * t) * node.grad


_LOCAL_RULES: Dict[str, Callable[[Node, List[Node]], None]] = {
    "leaf": _leaf_rule,
    "add": _add_rule,
    "mul": _mul_rule,
    "pow": _pow_rule,
    "tanh": _tanh_rule,
}


def backward(root: Value):
    """
    Reverse-mode pass: fill `grad` on every node reachable from `root` with
    d(root)/d(node).

    The root's grad is set to 1.0. Nothing else is reset: gradients add onto
    whatever is already stored, so a caller that runs backward twice over the
    same nodes must zero them first (see `zero_grads`).
    """
    tape = root.tape
    root.node.grad = 1.0
    nodes = tape.nodes
    order = _topo_handles(tape, root.handle)
    logger.debug("backward from node %d over %d nodes", root.index, len(order))

    # Reversed post-order: every consumer of a node runs before the node itself
    for handle in reversed(order):
        node = nodes[handle]
        _LOCAL_RULES[node.op_tag](node, nodes)


def zero_grads(root: Value):
    """Set grad to 0.0 on every node reachable from `root`."""
    nodes = root.tape.nodes
    for handle in _topo_handles(root.tape, root.handle):
        nodes[handle].grad = 0.0
