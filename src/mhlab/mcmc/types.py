"""
MCMC Data Structures and Type Definitions.

This module contains the core data structures used by the samplers:
- BlockArrays: Pre-parsed block specification arrays
- build_block_arrays: Factory function for BlockArrays
- SweepRecord / ChainRecord / WalkRecord: One entry of a trajectory
- MHTrajectory / InbreedingTrajectory / WalkTrajectory: Read-only run outputs

Trajectories are frozen dataclasses over numpy arrays flagged read-only.
Record 0 is always the initial state and carries no proposal.
"""

import jax
import jax.numpy as jnp
import numpy as np
from dataclasses import dataclass
from typing import Iterator, List, NamedTuple, Tuple

from ..batch_specs import BlockSpec


@dataclass(frozen=True)
class BlockArrays:
    """
    Pre-parsed block specification arrays for the MH engine.

    Registered as a JAX pytree so it can be passed through jit and scan.

    Note on proposal_types: These are REMAPPED indices into a compact dispatch
    table containing only the proposals actually used by the blocks. The
    used_proposal_types tuple stores the original ProposalType enum values in
    dispatch order.
    """
    indices: jnp.ndarray         # (n_blocks, max_block_size) - parameter indices per block, -1 = padding
    masks: jnp.ndarray           # (n_blocks, max_block_size) - valid parameter mask
    scales: jnp.ndarray          # (n_blocks, max_block_size) - proposal scale per parameter
    proposal_types: jnp.ndarray  # (n_blocks,) - REMAPPED proposal indices
    param_block: jnp.ndarray     # (total_params,) - owning block of each parameter

    # Metadata
    max_size: int                # Maximum block size
    num_blocks: int              # Number of blocks
    total_params: int            # Total parameter count
    used_proposal_types: tuple   # Original ProposalType values actually used (in dispatch order)


def _block_arrays_flatten(ba):
    """Flatten BlockArrays for JAX pytree."""
    children = (ba.indices, ba.masks, ba.scales, ba.proposal_types, ba.param_block)
    aux_data = (ba.max_size, ba.num_blocks, ba.total_params, ba.used_proposal_types)
    return children, aux_data


def _block_arrays_unflatten(aux_data, children):
    """Unflatten BlockArrays from JAX pytree."""
    indices, masks, scales, proposal_types, param_block = children
    max_size, num_blocks, total_params, used_proposal_types = aux_data
    return BlockArrays(
        indices=indices,
        masks=masks,
        scales=scales,
        proposal_types=proposal_types,
        param_block=param_block,
        max_size=max_size,
        num_blocks=num_blocks,
        total_params=total_params,
        used_proposal_types=used_proposal_types,
    )


jax.tree_util.register_pytree_node(
    BlockArrays,
    _block_arrays_flatten,
    _block_arrays_unflatten
)


def build_block_arrays(specs: List[BlockSpec]) -> BlockArrays:
    """
    Build BlockArrays from a list of BlockSpec objects.

    Parameters are assigned to blocks in order: the first block owns
    parameters 0..size-1, the next block the following ones, and so on.

    Args:
        specs: List of BlockSpec objects defining parameter blocks

    Returns:
        BlockArrays with all arrays ready for the MH engine
    """
    if not specs:
        raise ValueError("Empty block specifications")

    max_size = max(spec.size for spec in specs)
    num_blocks = len(specs)
    total_params = sum(spec.size for spec in specs)

    indices = np.full((num_blocks, max_size), -1, dtype=np.int32)
    masks = np.zeros((num_blocks, max_size))
    # Padding gets scale 1 so no division or log ever sees a zero
    scales = np.ones((num_blocks, max_size))
    param_block = np.zeros(total_params, dtype=np.int32)

    current_param = 0
    for i, spec in enumerate(specs):
        block_idxs = np.arange(current_param, current_param + spec.size)
        indices[i, :spec.size] = block_idxs
        masks[i, :spec.size] = 1.0
        scales[i, :spec.size] = spec.scales()
        param_block[block_idxs] = i
        current_param += spec.size

    # Sorted for a stable compact dispatch order
    used_types_list = tuple(sorted({int(spec.proposal_type) for spec in specs}))
    type_to_compact = {t: i for i, t in enumerate(used_types_list)}
    proposal_types = [type_to_compact[int(spec.proposal_type)] for spec in specs]

    return BlockArrays(
        indices=jnp.array(indices),
        masks=jnp.array(masks),
        scales=jnp.array(scales),
        proposal_types=jnp.array(proposal_types, dtype=jnp.int32),
        param_block=jnp.array(param_block),
        max_size=max_size,
        num_blocks=num_blocks,
        total_params=total_params,
        used_proposal_types=used_types_list,
    )


# =============================================================================
# RECORDS
# =============================================================================

class ChainRecord(NamedTuple):
    """One sweep of a generic block-MH chain (arrays of length n_params)."""
    sweep: int
    state: np.ndarray
    proposed: np.ndarray
    mh_ratio: np.ndarray
    accepted: np.ndarray


class SweepRecord(NamedTuple):
    """
    One sweep of an inbreeding-model sampler.

    f and p are the values after the sweep. For sweep 0 (the initial state)
    the proposals and ratios are NaN and both flags are False. For the joint
    sampler both ratios hold the same joint ratio and both flags are equal.
    """
    sweep: int
    f: float
    p: float
    proposed_f: float
    proposed_p: float
    mh_ratio_f: float
    mh_ratio_p: float
    accepted_f: bool
    accepted_p: bool

    @property
    def mh_ratio(self) -> float:
        return self.mh_ratio_f


class WalkRecord(NamedTuple):
    """One step of the discrete walk."""
    step: int
    state: int
    proposed: int
    accepted: bool
    in_bounds: bool


def _freeze(arr) -> np.ndarray:
    out = np.array(arr)
    out.setflags(write=False)
    return out


# =============================================================================
# TRAJECTORIES
# =============================================================================

@dataclass(frozen=True)
class MHTrajectory:
    """
    Output of a block-MH run: every visited state, proposal and decision.

    All arrays have one row per record (sweeps + 1 rows); row 0 is the initial
    state with NaN proposals/ratios and False flags.
    """
    states: np.ndarray     # (n_records, n_params)
    proposals: np.ndarray  # (n_records, n_params)
    ratios: np.ndarray     # (n_records, n_params) - ratio of the block owning each parameter
    accepted: np.ndarray   # (n_records, n_params) bool
    labels: Tuple[str, ...]

    def __post_init__(self):
        for name in ('states', 'proposals', 'ratios', 'accepted'):
            object.__setattr__(self, name, _freeze(getattr(self, name)))

    def __len__(self):
        return self.states.shape[0]

    def _index(self, i: int) -> int:
        n = len(self)
        if i < 0:
            i += n
        if not 0 <= i < n:
            raise IndexError(f"record {i} out of range for trajectory of length {n}")
        return i

    def record(self, i: int) -> ChainRecord:
        i = self._index(i)
        return ChainRecord(i, self.states[i], self.proposals[i], self.ratios[i], self.accepted[i])

    def __getitem__(self, i: int):
        return self.record(i)

    def __iter__(self) -> Iterator:
        for i in range(len(self)):
            yield self[i]

    @property
    def num_sweeps(self) -> int:
        return len(self) - 1

    def column(self, label: str) -> np.ndarray:
        """Visited values of one parameter."""
        return self.states[:, self.labels.index(label)]

    def acceptance_rates(self) -> np.ndarray:
        """Per-parameter fraction of accepted proposals over sweeps 1..n."""
        if self.num_sweeps == 0:
            return np.full(len(self.labels), np.nan)
        return self.accepted[1:].mean(axis=0)


@dataclass(frozen=True)
class InbreedingTrajectory(MHTrajectory):
    """MHTrajectory over (f, p) whose records are SweepRecords."""

    def __getitem__(self, i: int) -> SweepRecord:
        i = self._index(i)
        return SweepRecord(
            sweep=i,
            f=float(self.states[i, 0]),
            p=float(self.states[i, 1]),
            proposed_f=float(self.proposals[i, 0]),
            proposed_p=float(self.proposals[i, 1]),
            mh_ratio_f=float(self.ratios[i, 0]),
            mh_ratio_p=float(self.ratios[i, 1]),
            accepted_f=bool(self.accepted[i, 0]),
            accepted_p=bool(self.accepted[i, 1]),
        )

    @property
    def f(self) -> np.ndarray:
        return self.states[:, 0]

    @property
    def p(self) -> np.ndarray:
        return self.states[:, 1]

    @property
    def proposed_f(self) -> np.ndarray:
        return self.proposals[:, 0]

    @property
    def proposed_p(self) -> np.ndarray:
        return self.proposals[:, 1]

    @property
    def mh_ratio_f(self) -> np.ndarray:
        return self.ratios[:, 0]

    @property
    def mh_ratio_p(self) -> np.ndarray:
        return self.ratios[:, 1]

    @property
    def accepted_f(self) -> np.ndarray:
        return self.accepted[:, 0]

    @property
    def accepted_p(self) -> np.ndarray:
        return self.accepted[:, 1]


@dataclass(frozen=True)
class WalkTrajectory:
    """
    Output of the discrete walk. Row 0 is the initial state; its proposal
    repeats the state and its flags are False.
    """
    states: np.ndarray     # (steps + 1,) int
    proposed: np.ndarray   # (steps + 1,) int
    accepted: np.ndarray   # (steps + 1,) bool
    in_bounds: np.ndarray  # (steps + 1,) bool
    left: int
    right: int

    def __post_init__(self):
        for name in ('states', 'proposed', 'accepted', 'in_bounds'):
            object.__setattr__(self, name, _freeze(getattr(self, name)))

    def __len__(self):
        return self.states.shape[0]

    def __getitem__(self, i: int) -> WalkRecord:
        n = len(self)
        if i < 0:
            i += n
        if not 0 <= i < n:
            raise IndexError(f"step {i} out of range for walk of length {n}")
        return WalkRecord(i, int(self.states[i]), int(self.proposed[i]),
                          bool(self.accepted[i]), bool(self.in_bounds[i]))

    def __iter__(self) -> Iterator[WalkRecord]:
        for i in range(len(self)):
            yield self[i]

    @property
    def num_steps(self) -> int:
        return len(self) - 1

    def acceptance_rate(self) -> float:
        if self.num_steps == 0:
            return float('nan')
        return float(self.accepted[1:].mean())

    def state_frequencies(self) -> np.ndarray:
        """Empirical frequency of each state left..right over all records."""
        counts = np.bincount(self.states - self.left, minlength=self.right - self.left + 1)
        return counts / counts.sum()
