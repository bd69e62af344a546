"""
Gradient-descent training of an MLP on a small fixed dataset.

Each iteration rebuilds the whole graph from the persistent parameter
leaves:

    loss = Σᵢ (model(xᵢ)[0] - yᵢ)²
    p.value -= learning_rate * dloss/dp      for every parameter p

Gradient reset is the caller's job, not the engine's. The trainer is such a
caller: it zeroes the parameter grads before every backward pass, and it
rewinds the tape to the mark taken before the first forward pass so that the
previous iteration's graph is discarded instead of piling up on the tape.

Step size ("bold driver", on by default):
    - loss went down  -> keep the step, learning_rate *= lr_increase
    - loss went up    -> undo the step, learning_rate *= lr_decrease and
                         retry from the previous point with its gradient
Near the targets tanh saturates and the squared-error gradient shrinks like
the error squared, so a fixed rate needs a huge number of steps to reach a
tight tolerance; the growing rate does not.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..core.var import Value
from ..ops import add, sub, pow
from .mlp import MLP

logger = logging.getLogger(__name__)


def sum_squared_error(preds: Sequence[Value], targets: Sequence[float]) -> Value:
    """Σ (pred - target)²"""
    if len(preds) != len(targets):
        raise ValueError(f"{len(preds)} predictions for {len(targets)} targets")
    if not preds:
        raise ValueError("no predictions to compare")
    terms = [pow(sub(p, y), 2.0) for p, y in zip(preds, targets)]
    loss = terms[0]
    for t in terms[1:]:
        loss = add(loss, t)
    return loss


@dataclass
class TrainConfig:
    """Configuration for gradient-descent training."""
    learning_rate: float = 0.05
    tolerance: float = 1e-6      # stop once loss < tolerance
    max_iterations: int = 20000

    # Step-size adaptation
    adaptive_lr: bool = True
    lr_increase: float = 1.05
    lr_decrease: float = 0.5
    max_learning_rate: float = 100.0

    # Logging
    verbose: bool = False
    log_every: int = 100

    def __post_init__(self):
        if self.learning_rate <= 0:
            raise ValueError(f"learning_rate must be positive, got {self.learning_rate}")
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {self.max_iterations}")
        if self.log_every < 1:
            raise ValueError(f"log_every must be >= 1, got {self.log_every}")
        if self.lr_increase < 1.0:
            raise ValueError(f"lr_increase must be >= 1, got {self.lr_increase}")
        if not 0.0 < self.lr_decrease < 1.0:
            raise ValueError(f"lr_decrease must be in (0, 1), got {self.lr_decrease}")
        if self.max_learning_rate < self.learning_rate:
            raise ValueError(
                f"max_learning_rate ({self.max_learning_rate}) is below "
                f"learning_rate ({self.learning_rate})"
            )


@dataclass
class TrainResult:
    converged: bool
    iterations: int
    loss: float
    predictions: List[float]
    loss_history: List[float] = field(default_factory=list)
    learning_rate: float = 0.0   # rate in use when training stopped


class Trainer:
    """
    Fit an MLP with single-output last layer to (xs, ys) by gradient descent.

    Usage:
        >>> model = MLP(3, [4, 4, 1], seed=0)
        >>> result = Trainer(model, TrainConfig(learning_rate=0.05)).fit(xs, ys)
        >>> result.converged, result.predictions
    """

    def __init__(self, model: MLP, config: Optional[TrainConfig] = None):
        self.model = model
        self.config = config or TrainConfig()
        self.loss_history: List[float] = []

    def _parameters(self) -> List[Value]:
        params = self.model.parameters()
        if not params:
            raise ValueError("model has no parameters to train")
        return params

    def predict(self, xs: Sequence[Sequence[float]]) -> List[float]:
        """Forward pass only; the graph it builds is discarded."""
        tape = self._parameters()[0].tape
        base = tape.mark()
        try:
            return [float(self.model(x)[0].value) for x in xs]
        finally:
            tape.rewind(base)

    def fit(self, xs: Sequence[Sequence[float]], ys: Sequence[float]) -> TrainResult:
        if len(xs) != len(ys):
            raise ValueError(f"{len(xs)} inputs for {len(ys)} targets")
        if not xs:
            raise ValueError("no training examples")
        params = self._parameters()

        cfg = self.config
        lr = cfg.learning_rate
        tape = params[0].tape
        base = tape.mark()
        self.loss_history = []
        converged = False
        predictions: List[float] = []
        loss_val = float('nan')

        # point and gradient of the last accepted step, for undoing a bad one
        best_loss = float('inf')
        values: Optional[List[float]] = None
        grads: Optional[List[float]] = None

        for iteration in range(1, cfg.max_iterations + 1):
            try:
                preds = [self.model(x)[0] for x in xs]
                loss = sum_squared_error(preds, ys)
                loss_val = float(loss.value)
                predictions = [float(p.value) for p in preds]
                self.loss_history.append(loss_val)

                if cfg.verbose and iteration % cfg.log_every == 0:
                    print(f"  Iteration {iteration}: Loss = {loss_val:.6e} (lr = {lr:.3g})")

                if loss_val < cfg.tolerance:
                    converged = True
                    break

                if cfg.adaptive_lr and values is not None:
                    # NaN compares False, so it is treated as a failed step
                    if not loss_val < best_loss:
                        lr *= cfg.lr_decrease
                        for p, v, g in zip(params, values, grads):
                            p.adjust_value(v - lr * g - p.value)
                        continue
                    lr = min(lr * cfg.lr_increase, cfg.max_learning_rate)

                best_loss = loss_val
                self.model.zero_grad()
                loss.backward()
                values = [p.value for p in params]
                grads = [p.grad for p in params]
                for p, g in zip(params, grads):
                    p.adjust_value(-lr * g)
            finally:
                tape.rewind(base)

        if cfg.verbose:
            status = "converged" if converged else "stopped"
            print(f"  {status} after {iteration} iterations: Loss = {loss_val:.6e}")
        if not converged:
            logger.warning("training did not reach loss < %g in %d iterations (loss %g)",
                           cfg.tolerance, cfg.max_iterations, loss_val)

        return TrainResult(converged=converged, iterations=iteration, loss=loss_val,
                           predictions=predictions, loss_history=list(self.loss_history),
                           learning_rate=lr)
