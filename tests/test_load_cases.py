"""
Several load cases on one factorisation, and the plain-kernel entry points.
"""

import numpy as np
import pytest

from keyed_fe.errors import UnderConstrainedError, UnsupportedFreedomError
from keyed_fe.kernel import KeyedVector, StaticReductionSolver, solve_static
from keyed_fe.kernel.dof import DegreeOfFreedom, NodalDegreeOfFreedom
from keyed_fe.model import CrossSection, FiniteElementModel, Material, ModelType
from keyed_fe.solve import LinearSolver

X, Y, ZZ = DegreeOfFreedom.X, DegreeOfFreedom.Y, DegreeOfFreedom.ZZ


@pytest.fixture
def frame():
    """Fixed-base L-frame in FRAME_2D."""
    model = FiniteElementModel(ModelType.FRAME_2D)
    base = model.add_node(0.0, 0.0)
    knee = model.add_node(0.0, 3.0)
    tip = model.add_node(4.0, 3.0)
    steel = Material(youngs_modulus=210e9)
    section = CrossSection(area=0.005, second_moment_zz=2.0e-5)
    model.add_beam(base, knee, steel, section)
    model.add_beam(knee, tip, steel, section)
    model.fix_node(base)
    return model, (base, knee, tip)


def test_factorisation_is_reused_across_load_cases(frame):
    model, (base, knee, tip) = frame
    solver = StaticReductionSolver(LinearSolver(model).boundary_partition())

    key_a = NodalDegreeOfFreedom(tip, Y)
    key_b = NodalDegreeOfFreedom(knee, X)
    case_a = solver.solve({key_a: -1000.0})
    case_b = solver.solve({key_b: 500.0})
    combined = solver.solve({key_a: -1000.0, key_b: 500.0})

    # Linear superposition, displacements and reactions alike
    np.testing.assert_allclose(
        combined.displacements.to_array(),
        (case_a.displacements + case_b.displacements).to_array(),
        rtol=1e-9, atol=1e-15,
    )
    np.testing.assert_allclose(
        combined.reactions.to_array(),
        (case_a.reactions + case_b.reactions).to_array(),
        rtol=1e-9, atol=1e-6,
    )


def test_keyed_vector_load_case(frame):
    model, (base, knee, tip) = frame
    p = LinearSolver(model).boundary_partition()
    F = KeyedVector(p.free_keys)
    F[NodalDegreeOfFreedom(tip, Y)] = -1000.0

    from_vector = StaticReductionSolver(p).solve(F)
    from_dict = StaticReductionSolver(p).solve({NodalDegreeOfFreedom(tip, Y): -1000.0})

    np.testing.assert_allclose(from_vector.displacements.to_array(), from_dict.displacements.to_array())


def test_result_frame(frame):
    model, (base, knee, tip) = frame
    model.apply_force(tip, Y, -1000.0)

    df = LinearSolver(model).solve().to_frame()

    assert list(df.columns) == ['node', 'dof', 'displacement', 'force', 'known']
    assert len(df) == 9
    assert set(df.loc[df['node'] == base.id, 'known']) == {'displacement'}
    assert set(df.loc[df['node'] == tip.id, 'known']) == {'force'}
    tip_y = df[(df['node'] == tip.id) & (df['dof'] == 'Y')].iloc[0]
    assert tip_y['force'] == -1000.0
    assert tip_y['displacement'] < 0.0


def test_displacements_at_node(frame):
    model, (base, knee, tip) = frame
    model.apply_force(tip, Y, -1000.0)

    result = LinearSolver(model).solve()
    at_tip = result.displacements_at(tip)

    assert set(at_tip) == {X, Y, ZZ}
    assert at_tip[Y] == result.displacement(tip, Y)
    assert all(v == 0.0 for v in result.displacements_at(base).values())


def test_solve_static_with_settlement(frame):
    model, (base, knee, tip) = frame
    K = LinearSolver(model).stiffness_matrix()
    settle = {NodalDegreeOfFreedom(base, Y): -0.002}

    result = solve_static(K, model.is_constrained, known_displacements=settle)

    # Rigid drop of the whole frame: every node follows, nothing is strained
    for node in (knee, tip):
        assert np.isclose(result.displacement(node, Y), -0.002)
        assert np.isclose(result.displacement(node, X), 0.0, atol=1e-12)
    assert np.allclose(result.reactions.to_array(), 0.0, atol=1e-3)


def test_fully_constrained_model_only_recovers_reactions(frame):
    model, (base, knee, tip) = frame
    K = LinearSolver(model).stiffness_matrix()
    p_keys = set(K.row_keys)

    result = solve_static(K, lambda key: key in p_keys)

    assert result.free_keys == ()
    assert np.all(result.forces.to_array() == 0.0)


def test_mechanism_detected_by_condition_number(frame):
    model, _ = frame
    K = LinearSolver(model).stiffness_matrix()

    with pytest.raises(UnderConstrainedError):
        solve_static(K, lambda key: False)


def _spring_chain_fixed_ends():
    """n0 --[2]-- n1 --[4]-- n2 --[2]-- n3, both ends fixed."""
    model = FiniteElementModel(ModelType.TRUSS_1D)
    nodes = [model.add_node(float(i)) for i in range(4)]
    for a, b, k in zip(nodes, nodes[1:], (2.0, 4.0, 2.0)):
        model.add_spring(a, b, k)
    model.constrain_node(nodes[0], X)
    model.constrain_node(nodes[3], X)
    return model, nodes


def test_partial_keyed_vector_defaults_missing_keys_to_zero():
    model, nodes = _spring_chain_fixed_ends()
    p = LinearSolver(model).boundary_partition()
    loaded = NodalDegreeOfFreedom(nodes[1], X)

    from_vector = StaticReductionSolver(p).solve(KeyedVector([loaded], data=[1.0]))
    from_dict = StaticReductionSolver(p).solve({loaded: 1.0})

    assert from_vector.force(nodes[2], X) == 0.0
    np.testing.assert_allclose(from_vector.displacements.to_array(), from_dict.displacements.to_array())
    np.testing.assert_allclose(from_vector.reactions.to_array(), from_dict.reactions.to_array())


def test_keyed_vector_with_key_outside_class_is_rejected():
    """A force given at a constrained key is an error, whichever container carries it."""
    model, nodes = _spring_chain_fixed_ends()
    p = LinearSolver(model).boundary_partition()
    F = KeyedVector(p.keys)
    F[NodalDegreeOfFreedom(nodes[0], X)] = 5.0

    with pytest.raises(UnsupportedFreedomError):
        StaticReductionSolver(p).solve(F)
    with pytest.raises(UnsupportedFreedomError):
        StaticReductionSolver(p).solve({NodalDegreeOfFreedom(nodes[0], X): 5.0})


def test_widely_different_stiffnesses_are_not_a_mechanism():
    """
    A 1e13 spring in series with a 1.0 spring: cond(K_FF) ~ 1e13, yet the
    chain is fully supported and the answer is exact to hand calculation.
    """
    model = FiniteElementModel(ModelType.TRUSS_1D)
    n0, n1, n2 = model.add_node(0.0), model.add_node(1.0), model.add_node(2.0)
    model.add_spring(n0, n1, 1e13)
    model.add_spring(n1, n2, 1.0)
    model.constrain_node(n0, X)
    model.apply_force(n2, X, 1.0)

    result = LinearSolver(model).solve()

    assert np.isclose(result.displacement(n1, X), 1e-13, rtol=1e-6)
    assert np.isclose(result.displacement(n2, X), 1.0 + 1e-13, rtol=1e-9)
    assert np.isclose(result.force(n0, X), -1.0, rtol=1e-9)
