# keyed_fe/builders/beam.py
"""
3D EULER-BERNOULLI BEAM: 12×12 Stiffness in Local and Global Axes
=================================================================

SIGN CONVENTION:
----------------
Right-hand rule throughout. Local x runs from the start node to the end node.
Rotations are positive anticlockwise looking down the positive axis, so:

    θz = +dv/dx     (bending in the local x-y plane, uses Izz)
    θy = -dw/dx     (bending in the local x-z plane, uses Iyy)

which gives the familiar coupling signs: +6EI/L² between v and θz at the
start node, -6EI/L² between w and θy.

LOCAL AXES:
-----------
    x = (end - start) / L
    y = unit(ref × x)       ref = global Z, or global X for vertical members
    z = x × y

A horizontal member therefore keeps local z pointing up (global Z), and a
member lying in the global XY plane has its local y in that plane too, so a
FRAME_2D model (X, Y, ZZ) sees exactly the classic 6×6 plane-frame matrix.

GLOBAL STIFFNESS:
-----------------
    K_global = T^T × k_local × T,   T = blockdiag(λ, λ, λ, λ)

where the rows of the 3×3 λ are the local axes expressed in global
coordinates. Translations and rotations transform the same way.
"""

import numpy as np

from ..kernel.dof import ALL_DOFS, DegreeOfFreedom, NodalDegreeOfFreedom
from ..kernel.stiffness import ElementStiffnessMatrix
from .base import StiffnessBuilder, keyed_stiffness

X, Y, Z = DegreeOfFreedom.X, DegreeOfFreedom.Y, DegreeOfFreedom.Z
XX, YY, ZZ = DegreeOfFreedom.XX, DegreeOfFreedom.YY, DegreeOfFreedom.ZZ


def beam_rotation_matrix(element, tolerance: float = 1e-9) -> np.ndarray:
    """
    3×3 λ whose rows are the local x, y, z axes in global coordinates.

    Examples:
    ---------
    Beam along global X: λ = identity.
    Vertical beam (along global Z): x = Z, y = -Y, z = X.
    """
    d = element.end_node.as_array() - element.start_node.as_array()
    # Zero length is rejected when the element is created
    x = d / np.linalg.norm(d)

    ref = np.array([0.0, 0.0, 1.0])
    if abs(x @ ref) > 1.0 - tolerance:
        ref = np.array([1.0, 0.0, 0.0])

    y = np.cross(ref, x)
    y /= np.linalg.norm(y)
    z = np.cross(x, y)
    return np.vstack([x, y, z])


class Linear3DBeamStiffnessBuilder(StiffnessBuilder):
    """
    Stiffness of a two-node Euler-Bernoulli beam with all six freedoms per node.

    Coefficients (L = length):
        axial       EA/L
        torsion     GJ/L
        shear       12EI/L³
        bending     4EI/L (same end), 2EI/L (opposite ends)
        coupling    6EI/L² between translation and rotation
    """

    SUPPORTED_DOFS = ALL_DOFS

    def _couple(self, matrix: ElementStiffnessMatrix, row_key, column_key, value: float) -> None:
        """Set a coefficient and its transpose partner."""
        matrix[row_key, column_key] = value
        matrix[column_key, row_key] = value

    def local_stiffness(self) -> ElementStiffnessMatrix:
        """12×12 matrix in local axes, keyed [start: X..ZZ, end: X..ZZ]."""
        beam = self.element
        E = beam.material.youngs_modulus
        G = beam.material.shear_modulus
        A = beam.section.area
        Iyy = beam.section.second_moment_yy
        Izz = beam.section.second_moment_zz
        J = beam.section.torsional_constant
        L = beam.length
        L2 = L * L
        L3 = L2 * L

        i, j = beam.start_node, beam.end_node
        k = ElementStiffnessMatrix(self.element_keys())

        def key(node, dof):
            return NodalDegreeOfFreedom(node, dof)

        # Uncoupled two-point effects: [[s, -s], [-s, s]]
        for dof, s in (
            (X, E * A / L),
            (XX, G * J / L),
            (Y, 12 * E * Izz / L3),
            (Z, 12 * E * Iyy / L3),
        ):
            k[key(i, dof), key(i, dof)] = s
            k[key(j, dof), key(j, dof)] = s
            self._couple(k, key(i, dof), key(j, dof), -s)

        # Bending rotations: 4EI/L on the diagonal, 2EI/L across the element
        for dof, I in ((ZZ, Izz), (YY, Iyy)):
            k[key(i, dof), key(i, dof)] = 4 * E * I / L
            k[key(j, dof), key(j, dof)] = 4 * E * I / L
            self._couple(k, key(i, dof), key(j, dof), 2 * E * I / L)

        # v / θz coupling (bending about local z)
        c = 6 * E * Izz / L2
        self._couple(k, key(i, Y), key(i, ZZ), c)
        self._couple(k, key(i, Y), key(j, ZZ), c)
        self._couple(k, key(j, Y), key(i, ZZ), -c)
        self._couple(k, key(j, Y), key(j, ZZ), -c)

        # w / θy coupling (bending about local y), opposite sign since θy = -dw/dx
        c = 6 * E * Iyy / L2
        self._couple(k, key(i, Z), key(i, YY), -c)
        self._couple(k, key(i, Z), key(j, YY), -c)
        self._couple(k, key(j, Z), key(i, YY), c)
        self._couple(k, key(j, Z), key(j, YY), c)

        return self._check_symmetric(k)

    def transformation_matrix(self) -> np.ndarray:
        """12×12 T mapping global displacements to local ones."""
        lam = beam_rotation_matrix(self.element)
        return np.kron(np.eye(4), lam)

    def global_stiffness(self) -> ElementStiffnessMatrix:
        keys = self.element_keys()
        k_local = self.local_stiffness().restrict(keys, keys).to_array()
        T = self.transformation_matrix()
        return self._check_symmetric(keyed_stiffness(keys, T.T @ k_local @ T))

    def shape_functions(self, xi: float) -> np.ndarray:
        """
        Hermite shape functions for transverse deflection v at ξ = x/L ∈ [0, 1].

        Returns [N1, N2, N3, N4] weighting [v_i, θz_i, v_j, θz_j], with
        θz = +dv/dx, so v(ξ) = N1 v_i + N2 θz_i + N3 v_j + N4 θz_j.
        """
        if not 0.0 <= xi <= 1.0:
            raise ValueError(f"ξ must lie within the beam (0 <= ξ <= 1), got {xi}")
        L = self.element.length
        xi2 = xi * xi
        xi3 = xi2 * xi
        return np.array([
            1 - 3 * xi2 + 2 * xi3,
            L * (xi - 2 * xi2 + xi3),
            3 * xi2 - 2 * xi3,
            L * (xi3 - xi2),
        ])

    def strain_displacement_matrix(self, xi: float):
        raise NotImplementedError(
            "Linear3DBeamStiffnessBuilder.strain_displacement_matrix: beam stiffness is "
            "closed form, curvature recovery is not implemented"
        )
