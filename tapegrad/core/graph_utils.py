"""
Graph diagnostics: printing and summarising what is recorded on a tape.
"""

import sys
from collections import Counter
from typing import Dict, List, Optional, TextIO

import numpy as np

from .tape import Tape
from .var import Value


def trace(root: Value, file: Optional[TextIO] = None) -> List[str]:
    """
    Print every node reachable from `root`, depth-first, one line per node,
    indented by its depth below the root:

        [ tanh(n) | val = 0.7071 | grad = 1.0 ]
        |   [ n | val = 0.8813 | grad = 0.5 ]
        |   |   ...

    A node reachable along several paths is printed once, the first time it
    is met; dedup is by handle so equal labels do not hide distinct nodes.

    Returns:
        The printed lines (without newlines).
    """
    out = file if file is not None else sys.stdout
    tape = root.tape
    lines: List[str] = []
    seen = set()
    stack = [(root.handle, 0)]
    while stack:
        handle, depth = stack.pop()
        if handle in seen:
            continue
        seen.add(handle)
        line = "|   " * depth + str(Value(tape, handle))
        lines.append(line)
        print(line, file=out)
        for p in reversed(tape.nodes[handle].parents):
            stack.append((p, depth + 1))
    return lines


def get_graph_stats(tape: Tape) -> Dict:
    """
    Statistics of the whole tape (not printed).

    Returns:
        dict with node/edge counts, fan-in/fan-out extremes and averages, and
        a per-op count.
    """
    if not tape.nodes:
        return {
            'nodes': 0,
            'edges': 0,
            'leaves': 0,
            'max_fan_in': 0,
            'avg_fan_in': 0.0,
            'max_fan_out': 0,
            'avg_fan_out': 0.0,
            'operations': {}
        }

    n_nodes = len(tape.nodes)
    fan_ins = [len(node.parents) for node in tape.nodes]

    # a node used twice by the same op (x*x) counts as two edges
    fan_outs = [0] * n_nodes
    for node in tape.nodes:
        for p in node.parents:
            fan_outs[p] += 1

    op_counter = Counter(node.op_tag for node in tape.nodes)

    return {
        'nodes': n_nodes,
        'edges': sum(fan_ins),
        'leaves': op_counter.get('leaf', 0),
        'max_fan_in': max(fan_ins),
        'avg_fan_in': float(np.mean(fan_ins)),
        'max_fan_out': max(fan_outs),
        'avg_fan_out': float(np.mean(fan_outs)),
        'operations': dict(op_counter)
    }


def print_graph_summary(tape: Tape, detailed: bool = False, max_nodes: int = 100) -> Dict:
    """
    Print a summary of the tape and return the stats dict.

    Args:
        tape: tape to summarise
        detailed: also list up to `max_nodes` nodes with their parents
    """
    stats = get_graph_stats(tape)
    if stats['nodes'] == 0:
        print("Empty computation graph")
        return stats

    print("\n" + "=" * 70)
    print("COMPUTATION GRAPH SUMMARY")
    print("=" * 70)
    print(f"Total nodes:        {stats['nodes']:,}")
    print(f"Total edges:        {stats['edges']:,}")
    print(f"Leaves:             {stats['leaves']:,}")
    print(f"Max fan-in:         {stats['max_fan_in']}")
    print(f"Avg fan-in:         {stats['avg_fan_in']:.2f}")
    print(f"Max fan-out:        {stats['max_fan_out']}")
    print(f"Avg fan-out:        {stats['avg_fan_out']:.2f}")
    print()
    print("Operation breakdown:")
    for op_type, count in Counter(stats['operations']).most_common():
        pct = 100.0 * count / stats['nodes']
        print(f"  {op_type:6s}: {count:6,} ({pct:5.1f}%)")

    if detailed:
        print()
        for i, node in enumerate(tape.nodes[:max_nodes]):
            if node.parents:
                parent_info = ", ".join(f"Node{p}" for p in node.parents)
                print(f"Node {i:4d}: {node.op_tag:6s} ({node.value:10.6f}) <- [{parent_info}]")
            else:
                print(f"Node {i:4d}: {node.op_tag:6s} ({node.value:10.6f}) [leaf]")
        if len(tape.nodes) > max_nodes:
            print(f"... ({len(tape.nodes) - max_nodes} more nodes)")

    print("=" * 70 + "\n")
    return stats
