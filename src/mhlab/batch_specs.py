"""
Block Specification System

A "block" is a group of parameters that are proposed and accepted together
in one Metropolis-Hastings step. The update granularity of a sampler is
entirely described by how its parameters are split into blocks:

1. Joint updates: a single block holding every parameter. All parameters
   move together or none move.
2. Component-wise updates: one block per parameter, updated in order within
   each sweep. Later blocks see the values accepted by earlier blocks.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Sequence, Tuple, Union

import numpy as np


# ============================================================================
# PROPOSAL TYPE ENUMERATION
# ============================================================================

class ProposalType(IntEnum):
    """
    Enumeration of proposal distribution strategies.

    To add a new proposal:
    1. Add enum value here
    2. Create a new file in proposals/ with the proposal function
    3. Add it to PROPOSAL_REGISTRY in mcmc/sampling.py
    """
    RAND_WALK = 0  # Gaussian perturbation: x' ~ N(x, scale^2), per parameter
    STEP = 1       # Discrete +/-1 step with equal probability

    def __str__(self):
        return self.name.replace('_', ' ').title()


class UpdateScheme(IntEnum):
    """How parameters are grouped into blocks within one sweep."""
    JOINT = 0
    COMPONENTWISE = 1

    def __str__(self):
        return self.name.title()


# ============================================================================
# BLOCK SPECIFICATION
# ============================================================================

@dataclass
class BlockSpec:
    """
    Specification for a single parameter block.

    Required fields:
        size: Number of parameters in this block

    Optional fields:
        proposal_type: Proposal strategy for the block (default RAND_WALK)
        scale: Proposal scale. A scalar applies to every parameter of the
               block; a sequence gives one value per parameter. For RAND_WALK
               this is the standard deviation of the Gaussian perturbation.
        label: Human-readable name for logging and trajectory columns
        metadata: Additional info (not used by the sampler)

    Examples:
        # Joint (f, p) block with per-parameter step sizes
        BlockSpec(size=2, scale=(0.07, 0.05), label="f,p")

        # Single-parameter block
        BlockSpec(size=1, scale=0.07, label="f")
    """
    size: int
    proposal_type: ProposalType = ProposalType.RAND_WALK
    scale: Union[float, Sequence[float]] = 1.0
    label: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Validate the specification after initialization."""
        if self.size < 1:
            raise ValueError(f"Block size must be >= 1, got {self.size}")

        if not isinstance(self.proposal_type, (ProposalType, int)):
            raise ValueError(f"proposal_type must be ProposalType or int, got {type(self.proposal_type)}")

        if isinstance(self.proposal_type, int):
            object.__setattr__(self, 'proposal_type', ProposalType(self.proposal_type))

        scales = self.scales()
        if len(scales) != self.size:
            raise ValueError(
                f"Block '{self.label or 'unlabeled'}' has size {self.size} "
                f"but {len(scales)} proposal scales"
            )
        if not np.all(np.isfinite(scales)) or np.any(scales <= 0):
            raise ValueError(
                f"Block '{self.label or 'unlabeled'}' proposal scales must be positive and finite, got {list(scales)}"
            )

    def scales(self) -> np.ndarray:
        """Per-parameter proposal scales as a float array of length ``size``."""
        if np.ndim(self.scale) == 0:
            return np.full(self.size, float(self.scale))
        return np.asarray(self.scale, dtype=float)

    def __repr__(self):
        parts = [f"BlockSpec(size={self.size}", f"proposal={self.proposal_type}"]
        if self.label:
            parts.append(f'label="{self.label}"')
        parts.append(f"scale={self.scale}")
        return ", ".join(parts) + ")"


# ============================================================================
# VALIDATION
# ============================================================================

def validate_block_specs(specs: List[BlockSpec], n_params: int = None) -> None:
    """
    Validate a list of block specifications.

    Args:
        specs: List of BlockSpec objects
        n_params: Expected total parameter count (optional)

    Raises:
        ValueError: If specs are invalid
    """
    if not isinstance(specs, list):
        raise ValueError(f"Block specs must be a list, got {type(specs)}")

    if len(specs) == 0:
        raise ValueError("Block specs list cannot be empty")

    errors = []

    for i, spec in enumerate(specs):
        if not isinstance(spec, BlockSpec):
            errors.append(f"Block {i}: Expected BlockSpec object, got {type(spec)}")

    if not errors and n_params is not None:
        total = sum(spec.size for spec in specs)
        if total != n_params:
            errors.append(f"Blocks cover {total} parameters but the state has {n_params}")

    if errors:
        raise ValueError("Invalid block specs:\n  " + "\n  ".join(errors))


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def joint_blocks(scales: Sequence[float], labels: Sequence[str]) -> List[BlockSpec]:
    """
    One block covering every parameter: proposals are accepted atomically.

    Example:
        >>> joint_blocks((0.07, 0.07), ("f", "p"))
        [BlockSpec(size=2, proposal=Rand Walk, label="f,p", scale=(0.07, 0.07))]
    """
    return [
        BlockSpec(
            size=len(scales),
            proposal_type=ProposalType.RAND_WALK,
            scale=tuple(float(s) for s in scales),
            label=",".join(labels),
        )
    ]


def componentwise_blocks(scales: Sequence[float], labels: Sequence[str]) -> List[BlockSpec]:
    """
    One block per parameter, updated sequentially in the given order.

    Example:
        >>> [b.label for b in componentwise_blocks((0.07, 0.07), ("f", "p"))]
        ['f', 'p']
    """
    return [
        BlockSpec(size=1, proposal_type=ProposalType.RAND_WALK, scale=float(s), label=lbl)
        for s, lbl in zip(scales, labels)
    ]


def create_blocks(scheme: UpdateScheme, scales: Sequence[float],
                  labels: Sequence[str]) -> List[BlockSpec]:
    """Build the block list for an update scheme."""
    if len(scales) != len(labels):
        raise ValueError(f"Got {len(scales)} scales for {len(labels)} parameters")
    if UpdateScheme(scheme) == UpdateScheme.JOINT:
        return joint_blocks(scales, labels)
    return componentwise_blocks(scales, labels)


def param_labels(specs: List[BlockSpec]) -> Tuple[str, ...]:
    """
    Per-parameter labels derived from the block labels.

    A block labelled "f,p" of size 2 yields ("f", "p"); unlabeled or
    mismatched blocks fall back to "theta_<index>".
    """
    labels = []
    for spec in specs:
        parts = spec.label.split(",") if spec.label else []
        if len(parts) == spec.size:
            labels.extend(p.strip() for p in parts)
        else:
            labels.extend(f"theta_{len(labels) + j}" for j in range(spec.size))
    return tuple(labels)


# ============================================================================
# SUMMARY UTILITIES
# ============================================================================

def summarize_blocks(specs: List[BlockSpec]) -> str:
    """
    Create a human-readable summary of block specifications.

    Args:
        specs: List of BlockSpec objects

    Returns:
        Formatted string summary
    """
    total_params = sum(spec.size for spec in specs)

    lines = [
        "Block Specification Summary:",
        f"  Total blocks: {len(specs)}",
        f"  Total parameters: {total_params}",
    ]
    for i, spec in enumerate(specs):
        lines.append(
            f"  Block {i}: {spec.label or 'unlabeled'} "
            f"(size={spec.size}, proposal={spec.proposal_type})"
        )
    return "\n".join(lines)
