import numpy as np

from keyed_fe.kernel.dof import DegreeOfFreedom
from keyed_fe.model import CrossSection, FiniteElementModel, Material, ModelType
from keyed_fe.solve import LinearSolver

X, Y, ZZ = DegreeOfFreedom.X, DegreeOfFreedom.Y, DegreeOfFreedom.ZZ


def test_simply_supported_midspan_pointload():
    """
    A beam supported at both ends (like a bridge deck) with a weight in the
    middle. We check:
    1. How much force each support pushes back with (reactions)
    2. How much the beam bends downward at the middle (deflection)
    against the textbook closed-form solutions.
    """

    # ========================================================================
    # STEP 1: DEFINE THE PHYSICAL PROBLEM
    # ========================================================================
    L = 4.0     # Length of beam (m)
    E = 210e9   # Young's Modulus (Pa), steel
    I = 8.0e-6  # Second moment of area (m⁴)
    A = 0.01    # Cross-sectional area (m²)
    P = 1000.0  # Applied load (N), pushing down

    # ========================================================================
    # STEP 2: CREATE THE MODEL
    # ========================================================================
    # Node 0: left support, node 1: midspan (where the weight is), node 2: right support
    model = FiniteElementModel(ModelType.FRAME_2D)
    left = model.add_node(0.0, 0.0)
    mid = model.add_node(L / 2, 0.0)
    right = model.add_node(L, 0.0)

    steel = Material(youngs_modulus=E)
    section = CrossSection(area=A, second_moment_zz=I)
    model.add_beam(left, mid, steel, section)
    model.add_beam(mid, right, steel, section)

    # ========================================================================
    # STEP 3: LOADS AND SUPPORTS
    # ========================================================================
    model.apply_force(mid, Y, -P)

    # "Simply supported":
    # - Left support: no sliding (X) and no vertical movement (Y)
    # - Right support: no vertical movement (Y), free to expand in X
    # Rotations (ZZ) stay free at both supports: they are pins
    model.constrain_node(left, X, Y)
    model.constrain_node(right, Y)

    # ========================================================================
    # STEP 4: SOLVE
    # ========================================================================
    result = LinearSolver(model).solve()

    Ry_left = result.force(left, Y)
    Ry_right = result.force(right, Y)
    uy_midspan = result.displacement(mid, Y)

    # ========================================================================
    # STEP 5: COMPARE TO TEXTBOOK ANSWER
    # ========================================================================
    # Each support takes half the load (symmetry)
    R_expected = P / 2.0
    # Maximum deflection at centre: δ = PL³/(48EI), negative = downward
    delta_max_expected = -P * L**3 / (48 * E * I)

    assert np.isclose(Ry_left, R_expected, rtol=1e-3, atol=1e-6), \
        f"Left reaction {Ry_left} != expected {R_expected}"
    assert np.isclose(Ry_right, R_expected, rtol=1e-3, atol=1e-6), \
        f"Right reaction {Ry_right} != expected {R_expected}"
    assert np.isclose(uy_midspan, delta_max_expected, rtol=1e-3, atol=1e-9), \
        f"Midspan deflection {uy_midspan} != expected {delta_max_expected}"

    # End rotations are equal and opposite: θ = PL²/(16EI)
    theta = P * L**2 / (16 * E * I)
    assert np.isclose(result.displacement(left, ZZ), -theta, rtol=1e-6)
    assert np.isclose(result.displacement(right, ZZ), theta, rtol=1e-6)
