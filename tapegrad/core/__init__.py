# tapegrad/core/__init__.py

"""
Core public API of the engine.

Exports:
    Value            : Handle to one scalar node on a tape.
    StaleValueError  : Raised when a Value outlives its node (see Tape.rewind).
    Tape             : Append-only node arena; handles are list indices.
    global_tape      : The default tape new nodes are recorded on.
    use_tape         : Context manager to temporarily switch the active tape.
    topological_sort : Reachable nodes, dependencies first.
    backward         : Reverse pass from an output Value.
    zero_grads       : Reset grads on every node reachable from a Value.
    trace            : Print a reachable graph with values and grads.
"""

from .var import Value, StaleValueError
from .tape import Tape, global_tape, use_tape
from .engine import topological_sort, backward, zero_grads
from .graph_utils import trace, get_graph_stats, print_graph_summary

__all__ = [
    "Value", "StaleValueError",
    "Tape", "global_tape", "use_tape",
    "topological_sort", "backward", "zero_grads",
    "trace", "get_graph_stats", "print_graph_summary",
]
