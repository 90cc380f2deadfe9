"""
Discrete target density for the biased random walk.

Holds one unnormalized positive weight per state 1..K. The walk only ever
needs ratios of weights, so the normalizing constant is never computed while
sampling.
"""

from typing import Sequence

import numpy as np

from .error_handling import InvalidState, validate_weights


class DiscreteTargetDensity:
    """
    Unnormalized weights over the 1-based states 1..K.

    Args:
        weights: Sequence of K positive finite weights; weights[0] belongs to
                 state 1. The weights do not need to sum to one.

    Raises:
        InvalidArgument: If the weights are empty, non-positive or non-finite
    """

    def __init__(self, weights: Sequence[float]):
        arr = validate_weights(weights).copy()
        arr.setflags(write=False)
        self._weights = arr

    @classmethod
    def uniform(cls, k: int = 20, value: float = 1.0) -> "DiscreteTargetDensity":
        """Flat target over 1..k: every in-bounds walk proposal is accepted."""
        return cls(np.full(k, float(value)))

    @property
    def weights(self) -> np.ndarray:
        """Read-only view of the weights, index 0 holding state 1."""
        return self._weights

    def __len__(self):
        return self._weights.shape[0]

    def weight(self, state: int) -> float:
        """Weight of a 1-based state; raises InvalidState outside [1, K]."""
        if not 1 <= state <= len(self):
            raise InvalidState(f"state {state} is outside [1, {len(self)}]")
        return float(self._weights[state - 1])

    def ratio(self, proposed: int, current: int) -> float:
        """weight(proposed) / weight(current): the Metropolis ratio of a move."""
        return self.weight(proposed) / self.weight(current)

    def normalized(self) -> np.ndarray:
        """Weights rescaled to sum to one (the walk's stationary distribution)."""
        return self._weights / self._weights.sum()

    def __repr__(self):
        return f"DiscreteTargetDensity(K={len(self)})"
