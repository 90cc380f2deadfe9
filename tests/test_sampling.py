"""
Block-MH Engine Tests

Tests the engine below the inbreeding samplers:
- BlockSpec validation and block builders
- build_block_arrays layout
- Proposal functions (Hastings ratio, masking)
- metropolis_block_step rejection of out-of-domain proposals
- run_block_mh on simple targets, including mixed proposal types

Run with: pytest tests/test_sampling.py -v
"""

import numpy as np
import jax
import jax.numpy as jnp
import pytest

from mhlab import (
    BlockSpec,
    InvalidArgument,
    LogDensityResult,
    MHTrajectory,
    ProposalType,
    UpdateScheme,
    componentwise_blocks,
    create_blocks,
    joint_blocks,
    run_block_mh,
)
from mhlab.batch_specs import param_labels, validate_block_specs
from mhlab.mcmc.sampling import metropolis_block_step
from mhlab.mcmc.types import build_block_arrays
from mhlab.proposals import rand_walk_proposal, step_proposal


def standard_normal_log_density(state):
    return LogDensityResult(-0.5 * jnp.sum(state ** 2), jnp.array(True))


def nowhere_log_density(state):
    """Only the origin is in domain."""
    at_origin = jnp.all(state == 0.0)
    return LogDensityResult(jnp.where(at_origin, 0.0, -jnp.inf), at_origin)


DISCRETE_WEIGHTS = jnp.array([1.0, 2.0, 3.0, 4.0])


def discrete_and_normal_log_density(state):
    """state[0] on {0, 1, 2, 3} with weights 1..4; state[1] standard normal."""
    k = state[0]
    in_domain = (k >= 0) & (k <= 3)
    idx = jnp.clip(k, 0, 3).astype(jnp.int32)
    value = jnp.log(DISCRETE_WEIGHTS[idx]) - 0.5 * state[1] ** 2
    return LogDensityResult(jnp.where(in_domain, value, -jnp.inf), in_domain)


# ============================================================================
# BLOCK SPECS
# ============================================================================

class TestBlockSpec:
    """BlockSpec validation and builders."""

    def test_scalar_scale_broadcasts(self):
        spec = BlockSpec(size=3, scale=0.5)
        np.testing.assert_array_equal(spec.scales(), [0.5, 0.5, 0.5])

    def test_int_proposal_type_converted(self):
        spec = BlockSpec(size=1, proposal_type=1)
        assert spec.proposal_type is ProposalType.STEP

    @pytest.mark.parametrize("kwargs", [
        dict(size=0),
        dict(size=2, scale=(0.1,)),
        dict(size=1, scale=0.0),
        dict(size=2, scale=(0.1, -0.1)),
        dict(size=1, scale=float("inf")),
    ])
    def test_invalid_spec(self, kwargs):
        with pytest.raises(ValueError):
            BlockSpec(**kwargs)

    def test_joint_blocks(self, joint_specs):
        assert len(joint_specs) == 1
        assert joint_specs[0].size == 2
        assert param_labels(joint_specs) == ("f", "p")

    def test_componentwise_blocks(self, componentwise_specs):
        assert [b.size for b in componentwise_specs] == [1, 1]
        assert param_labels(componentwise_specs) == ("f", "p")

    def test_create_blocks_dispatch(self):
        assert len(create_blocks(UpdateScheme.JOINT, (1.0, 1.0), ("a", "b"))) == 1
        assert len(create_blocks(UpdateScheme.COMPONENTWISE, (1.0, 1.0), ("a", "b"))) == 2

    def test_create_blocks_length_mismatch(self):
        with pytest.raises(ValueError):
            create_blocks(UpdateScheme.JOINT, (1.0,), ("a", "b"))

    def test_unlabeled_fallback(self):
        specs = [BlockSpec(size=2), BlockSpec(size=1, label="z")]
        assert param_labels(specs) == ("theta_0", "theta_1", "z")

    def test_validate_param_count(self, joint_specs):
        validate_block_specs(joint_specs, n_params=2)
        with pytest.raises(ValueError, match="3"):
            validate_block_specs(joint_specs, n_params=3)

    def test_validate_rejects_non_list(self, joint_specs):
        with pytest.raises(ValueError):
            validate_block_specs(tuple(joint_specs))
        with pytest.raises(ValueError):
            validate_block_specs([])


# ============================================================================
# BLOCK ARRAYS
# ============================================================================

class TestBuildBlockArrays:
    """Padding and parameter ownership."""

    def test_joint_layout(self, joint_specs):
        ba = build_block_arrays(joint_specs)
        assert ba.num_blocks == 1
        assert ba.total_params == 2
        np.testing.assert_array_equal(ba.indices, [[0, 1]])
        np.testing.assert_array_equal(ba.param_block, [0, 0])

    def test_padding(self):
        ba = build_block_arrays([BlockSpec(size=2, scale=(0.1, 0.2)), BlockSpec(size=1, scale=0.3)])
        np.testing.assert_array_equal(ba.indices, [[0, 1], [2, -1]])
        np.testing.assert_array_equal(ba.masks, [[1.0, 1.0], [1.0, 0.0]])
        np.testing.assert_allclose(ba.scales, [[0.1, 0.2], [0.3, 1.0]])
        np.testing.assert_array_equal(ba.param_block, [0, 0, 1])

    def test_compact_dispatch(self):
        ba = build_block_arrays([
            BlockSpec(size=1, proposal_type=ProposalType.STEP),
            BlockSpec(size=1, proposal_type=ProposalType.STEP),
        ])
        assert ba.used_proposal_types == (int(ProposalType.STEP),)
        np.testing.assert_array_equal(ba.proposal_types, [0, 0])

    def test_mixed_dispatch_order(self):
        ba = build_block_arrays([
            BlockSpec(size=1, proposal_type=ProposalType.STEP),
            BlockSpec(size=1, proposal_type=ProposalType.RAND_WALK),
        ])
        assert ba.used_proposal_types == (0, 1)
        np.testing.assert_array_equal(ba.proposal_types, [1, 0])

    def test_empty_specs(self):
        with pytest.raises(ValueError):
            build_block_arrays([])


# ============================================================================
# PROPOSALS
# ============================================================================

class TestProposals:
    """Symmetric proposals: Hastings ratio 0 and masking."""

    def test_rand_walk_symmetric(self):
        operand = (jax.random.PRNGKey(0), jnp.array([0.2, 0.5]),
                   jnp.array([0.07, 0.07]), jnp.array([1.0, 1.0]))
        proposal, log_ratio, new_key = rand_walk_proposal(operand)
        assert log_ratio == 0.0
        assert proposal.shape == (2,)
        assert not np.array_equal(np.asarray(new_key), np.asarray(jax.random.PRNGKey(0)))

    def test_rand_walk_masked(self):
        operand = (jax.random.PRNGKey(1), jnp.array([0.2, 0.5]),
                   jnp.array([0.07, 0.07]), jnp.array([1.0, 0.0]))
        proposal, _, _ = rand_walk_proposal(operand)
        assert float(proposal[1]) == 0.5
        assert float(proposal[0]) != 0.2

    def test_rand_walk_scale(self):
        """Sample standard deviation of the increments tracks the scale."""
        keys = jax.random.split(jax.random.PRNGKey(2), 4000)
        current = jnp.zeros(1)
        propose = jax.vmap(lambda k: rand_walk_proposal(
            (k, current, jnp.array([0.3]), jnp.array([1.0])))[0])
        samples = np.asarray(propose(keys))[:, 0]
        assert np.std(samples) == pytest.approx(0.3, rel=0.05)
        assert abs(np.mean(samples)) < 0.03

    def test_step_moves_one_unit(self):
        keys = jax.random.split(jax.random.PRNGKey(3), 500)
        current = jnp.array([5], dtype=jnp.int32)
        propose = jax.vmap(lambda k: step_proposal(
            (k, current, jnp.ones(1), jnp.ones(1)))[0])
        moves = np.asarray(propose(keys))[:, 0] - 5
        assert set(np.unique(moves)) == {-1, 1}
        assert 0.4 < np.mean(moves == 1) < 0.6

    def test_step_keeps_dtype(self):
        current = jnp.array([3], dtype=jnp.int32)
        proposal, log_ratio, _ = step_proposal(
            (jax.random.PRNGKey(0), current, jnp.ones(1), jnp.ones(1)))
        assert proposal.dtype == jnp.int32
        assert log_ratio == 0.0


# ============================================================================
# METROPOLIS STEP
# ============================================================================

class TestMetropolisBlockStep:
    """Single block update."""

    def _operand(self, state, key=0):
        ba = build_block_arrays(joint_blocks((0.5, 0.5), ("a", "b")))
        return (jax.random.PRNGKey(key), state, ba.indices[0],
                ba.scales[0], ba.masks[0], ba.proposal_types[0]), ba

    def test_out_of_domain_rejected(self):
        state = jnp.zeros(2)
        for key in range(10):
            operand, ba = self._operand(state, key)
            next_state, _, proposed, ratio, accept = metropolis_block_step(
                operand, nowhere_log_density, ba.used_proposal_types)
            assert not bool(accept)
            assert np.isnan(float(ratio))
            np.testing.assert_array_equal(np.asarray(next_state), [0.0, 0.0])
            assert not np.array_equal(np.asarray(proposed), [0.0, 0.0])

    def test_ratio_matches_densities(self):
        state = jnp.array([0.3, -0.2])
        operand, ba = self._operand(state)
        next_state, _, proposed, ratio, accept = metropolis_block_step(
            operand, standard_normal_log_density, ba.used_proposal_types)
        expected = np.exp(-0.5 * np.sum(np.asarray(proposed) ** 2) + 0.5 * np.sum(np.asarray(state) ** 2))
        assert float(ratio) == pytest.approx(expected, rel=1e-10)
        chosen = proposed if bool(accept) else state
        np.testing.assert_array_equal(np.asarray(next_state), np.asarray(chosen))

    def test_downhill_acceptance_frequency(self):
        """Accepted with probability equal to the ratio."""
        ba = build_block_arrays(joint_blocks((0.5, 0.5), ("a", "b")))
        state = jnp.array([0.0, 0.0])

        def step(key):
            operand = (key, state, ba.indices[0], ba.scales[0], ba.masks[0], ba.proposal_types[0])
            _, _, _, ratio, accept = metropolis_block_step(
                operand, standard_normal_log_density, ba.used_proposal_types)
            return ratio, accept

        ratios, accepts = jax.vmap(step)(jax.random.split(jax.random.PRNGKey(4), 20000))
        # From the mode every move is downhill; E[accept] = E[min(1, ratio)]
        expected = np.mean(np.minimum(1.0, np.asarray(ratios)))
        assert np.mean(np.asarray(accepts)) == pytest.approx(expected, abs=0.015)


# ============================================================================
# ENGINE RUNS
# ============================================================================

class TestRunBlockMH:
    """run_block_mh on targets with known moments."""

    def test_standard_normal_moments(self):
        traj = run_block_mh(standard_normal_log_density, (0.0, 0.0),
                            componentwise_blocks((1.5, 1.5), ("x", "y")), 40000,
                            seed=0, log_summary=False)
        assert isinstance(traj, MHTrajectory)
        samples = traj.states[1000:]
        np.testing.assert_allclose(samples.mean(axis=0), [0.0, 0.0], atol=0.06)
        np.testing.assert_allclose(samples.var(axis=0), [1.0, 1.0], rtol=0.1)

    def test_labels_from_blocks(self):
        traj = run_block_mh(standard_normal_log_density, (0.0, 0.0),
                            joint_blocks((1.0, 1.0), ("x", "y")), 10, log_summary=False)
        assert traj.labels == ("x", "y")
        assert traj.column("y").shape == (11,)
        assert traj.record(0).sweep == 0

    def test_mixed_proposal_types(self, total_variation):
        specs = [
            BlockSpec(size=1, proposal_type=ProposalType.STEP, label="k"),
            BlockSpec(size=1, proposal_type=ProposalType.RAND_WALK, scale=1.5, label="x"),
        ]
        traj = run_block_mh(discrete_and_normal_log_density, (0.0, 0.0), specs, 40000,
                            seed=1, log_summary=False)
        k = traj.states[1:, 0]
        assert set(np.unique(k)) <= {0.0, 1.0, 2.0, 3.0}
        freqs = np.bincount(k.astype(int), minlength=4) / k.size
        assert total_variation(freqs, np.array([1, 2, 3, 4]) / 10) < 0.05
        assert abs(traj.states[1:, 1].mean()) < 0.08

    def test_param_count_mismatch(self):
        with pytest.raises(ValueError):
            run_block_mh(standard_normal_log_density, (0.0, 0.0, 0.0),
                         joint_blocks((1.0, 1.0), ("x", "y")), 10)

    def test_init_must_be_vector(self):
        with pytest.raises(InvalidArgument):
            run_block_mh(standard_normal_log_density, [[0.0, 0.0]],
                         joint_blocks((1.0, 1.0), ("x", "y")), 10)

    def test_single_precision(self):
        traj = run_block_mh(standard_normal_log_density, (0.0, 0.0),
                            joint_blocks((1.0, 1.0), ("x", "y")), 50,
                            use_double=False, log_summary=False)
        assert traj.states.dtype == np.float32
        assert len(traj) == 51
