"""
Command line front end.

    tapegrad demo [--no-backward]   trace the single-neuron example graph
    tapegrad train [options]        fit a 3→4→4→1 MLP to four fixed points
"""

import argparse
import sys
from typing import List, Optional, Tuple

from .core.tape import use_tape
from .core.graph_utils import trace
from .core.var import Value
from .ops import leaf, add, mul, tanh
from .nn import MLP, Trainer, TrainConfig

XS = [
    [2.0, 3.0, -1.0],
    [3.0, -1.0, 0.5],
    [0.5, 1.0, 1.0],
    [1.0, 1.0, -1.0],
]
YS = [1.0, -1.0, -1.0, 1.0]


def build_neuron_example() -> Tuple[Value, dict]:
    """o = tanh(x1*w1 + x2*w2 + b), with b chosen so that o = 1/√2."""
    x1 = leaf(2.0, label="x1")
    x2 = leaf(0.0, label="x2")
    w1 = leaf(-3.0, label="w1")
    w2 = leaf(1.0, label="w2")
    b = leaf(6.881373587019543, label="b")
    x1w1 = mul(x1, w1, label="x1*w1")
    x2w2 = mul(x2, w2, label="x2*w2")
    x1w1x2w2 = add(x1w1, x2w2, label="x1*w1 + x2*w2")
    n = add(x1w1x2w2, b, label="n")
    o = tanh(n, label="o")
    return o, {"x1": x1, "x2": x2, "w1": w1, "w2": w2, "b": b, "n": n}


def parse_args(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog='tapegrad',
        description='Scalar reverse-mode autodiff demos',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    sub = parser.add_subparsers(dest='command', required=True)

    demo = sub.add_parser('demo', help='Trace the single-neuron example',
                          formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    demo.add_argument('--no-backward', action='store_true',
                      help='Only run the forward pass (grads stay 0)')

    train = sub.add_parser('train', help='Train a 3-4-4-1 MLP on four fixed points',
                           formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    defaults = TrainConfig()
    train.add_argument('--seed', type=int, default=0,
                       help='Seed for weight initialisation')
    train.add_argument('--learning-rate', type=float, default=defaults.learning_rate,
                       help='Gradient-descent step size')
    train.add_argument('--tolerance', type=float, default=defaults.tolerance,
                       help='Stop once the loss is below this')
    train.add_argument('--max-iterations', type=int, default=defaults.max_iterations,
                       help='Give up after this many steps')
    train.add_argument('--fixed-lr', action='store_true',
                       help='Keep the learning rate constant instead of adapting it')
    train.add_argument('--log-every', type=int, default=defaults.log_every,
                       help='Print the loss every N iterations')
    train.add_argument('--quiet', action='store_true',
                       help='Only print the final predictions')
    return parser.parse_args(argv)


def run_demo(args) -> int:
    with use_tape():
        o, _ = build_neuron_example()
        if not args.no_backward:
            o.backward()
        trace(o)
    return 0


def run_train(args) -> int:
    try:
        config = TrainConfig(
            learning_rate=args.learning_rate,
            tolerance=args.tolerance,
            max_iterations=args.max_iterations,
            adaptive_lr=not args.fixed_lr,
            verbose=not args.quiet,
            log_every=args.log_every,
        )
    except ValueError as e:
        print(f"tapegrad train: {e}", file=sys.stderr)
        return 2
    with use_tape():
        model = MLP(3, [4, 4, 1], seed=args.seed)
        result = Trainer(model, config).fit(XS, YS)

    for x, y, p in zip(XS, YS, result.predictions):
        print(f"{x} -> {p:+.6f} (target {y:+.1f})")
    return 0 if result.converged else 1


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    if args.command == 'demo':
        return run_demo(args)
    return run_train(args)


if __name__ == "__main__":
    sys.exit(main())
