# tests/test_truss3d_tetrahedron.py
"""
TETRAHEDRON TEST: Validation of 3D Truss Analysis
=================================================

A regular tetrahedron with:
- 4 nodes (3 at base, 1 at apex)
- 6 bars (connecting all nodes)
- Fixed base (all 3 base nodes pinned)
- Vertical load at apex

Expected behavior:
1. SYMMETRY: Base reactions should be symmetric
2. EQUILIBRIUM: ΣReactions = -ΣApplied loads
3. FORCES: All legs carry the same force (by symmetry)
"""

import numpy as np
import pytest

from keyed_fe.builders import TrussStiffnessBuilder
from keyed_fe.errors import UnderConstrainedError
from keyed_fe.kernel.dof import DegreeOfFreedom
from keyed_fe.model import CrossSection, FiniteElementModel, Material, ModelType
from keyed_fe.solve import LinearSolver

X, Y, Z = DegreeOfFreedom.X, DegreeOfFreedom.Y, DegreeOfFreedom.Z
P = -10000.0  # N (downward)


def make_regular_tetrahedron(base_radius: float = 1.0, height: float = 1.0, fixed=(0, 1, 2)):
    """
    Base triangle at z=0 (nodes 0, 1, 2, 120° apart), apex (node 3) above
    the centre. Bars 0-2 are the base edges, bars 3-5 the legs.
    """
    model = FiniteElementModel(ModelType.TRUSS_3D)

    angles = [0, 2*np.pi/3, 4*np.pi/3]
    base = [model.add_node(base_radius * np.cos(a), base_radius * np.sin(a), 0.0) for a in angles]
    apex = model.add_node(0.0, 0.0, height)

    # Steel, 10 cm²
    steel = Material(youngs_modulus=210e9)
    section = CrossSection(area=0.001)

    for i in range(3):
        model.add_truss(base[i], base[(i + 1) % 3], steel, section)
    for i in range(3):
        model.add_truss(base[i], apex, steel, section)

    for i in fixed:
        model.fix_node(base[i])
    model.apply_force(apex, Z, P)
    return model, base, apex


class TestTetrahedronEquilibrium:
    """Test that reactions balance applied loads."""

    def test_vertical_load_equilibrium(self):
        model, base, apex = make_regular_tetrahedron()

        result = LinearSolver(model).solve()

        Rz_total = sum(result.force(n, Z) for n in base)
        assert np.isclose(Rz_total, -P, rtol=1e-10), \
            f"Vertical equilibrium failed: ΣRz={Rz_total:.2f} N, applied={P:.2f} N"

        Rx_total = sum(result.force(n, X) for n in base)
        Ry_total = sum(result.force(n, Y) for n in base)
        assert np.isclose(Rx_total, 0.0, atol=1e-6), f"ΣRx={Rx_total:.6f} N"
        assert np.isclose(Ry_total, 0.0, atol=1e-6), f"ΣRy={Ry_total:.6f} N"

    def test_applied_force_is_reported_at_free_keys(self):
        model, _, apex = make_regular_tetrahedron()

        result = LinearSolver(model).solve()

        assert result.force(apex, Z) == P
        assert result.force(apex, X) == 0.0


class TestTetrahedronSymmetry:
    """Test that symmetric structure produces symmetric response."""

    def test_symmetric_vertical_reactions(self):
        model, base, _ = make_regular_tetrahedron()

        result = LinearSolver(model).solve()

        expected_Rz = -P / 3  # Load splits equally to 3 supports
        for node in base:
            rz = result.force(node, Z)
            assert np.isclose(rz, expected_Rz, rtol=1e-6), \
                f"Node {node.id}: Rz={rz:.2f} N, expected={expected_Rz:.2f} N"

    def test_symmetric_leg_forces(self):
        model, _, _ = make_regular_tetrahedron()

        result = LinearSolver(model).solve()

        legs = model.elements[3:6]
        leg_forces = [TrussStiffnessBuilder(bar).axial_force(result.displacements) for bar in legs]

        assert np.allclose(leg_forces, leg_forces[0], rtol=1e-6), \
            f"Leg forces not symmetric: {leg_forces}"
        # Under downward load, legs should be in compression (negative)
        assert leg_forces[0] < 0, f"Legs should be in compression, got {leg_forces[0]:.2f} N"


class TestTetrahedronDisplacement:
    """Test displacement behavior."""

    def test_apex_moves_downward(self):
        model, _, apex = make_regular_tetrahedron()

        result = LinearSolver(model).solve()

        assert result.displacement(apex, Z) < 0
        assert np.isclose(result.displacement(apex, X), 0.0, atol=1e-10)
        assert np.isclose(result.displacement(apex, Y), 0.0, atol=1e-10)

    def test_displacement_order_of_magnitude(self):
        """
        For steel bars (E=210 GPa, A=10 cm²) of ~1m length under 10 kN
        we expect roughly 0.05 mm.
        """
        model, _, apex = make_regular_tetrahedron()

        uz_apex = abs(LinearSolver(model).solve().displacement(apex, Z))

        assert 1e-6 < uz_apex < 1e-3, \
            f"Displacement {uz_apex*1000:.4f} mm seems wrong (expected 0.01-1 mm)"


class TestTetrahedronMechanism:
    """Test that insufficiently supported structures are detected."""

    def test_insufficient_supports_detected(self):
        """Only 2 base nodes fixed: the body can rotate about the line through them."""
        model, _, _ = make_regular_tetrahedron(fixed=(0, 1))

        with pytest.raises(UnderConstrainedError):
            LinearSolver(model).solve()
