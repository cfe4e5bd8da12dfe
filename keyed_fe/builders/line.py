# keyed_fe/builders/line.py
"""
AXIAL LINE ELEMENTS: Springs and Trusses from Direction Cosines
===============================================================

A spring or truss bar has stiffness only along its own axis. In LOCAL
coordinates (x' along the bar) the stiffness matrix is simply:

    k_local = k × [ 1  -1 ]        k = spring constant, or EA/L for a truss
                  [-1   1 ]

In GLOBAL coordinates (x, y, z) we use the direction cosines

    l = (xj - xi) / L,   m = (yj - yi) / L,   n = (zj - zi) / L

and the 6×6 matrix becomes

    ke_global = k × [  B  -B ]      B = [ l²  lm  ln ]
                    [ -B   B ]          [ lm  m²  mn ]
                                        [ ln  mn  n² ]

which is ke_global = T^T × k_local × T with T holding the direction cosines.
Both elements support the three global translations X, Y, Z; a 1D or 2D model
simply drops the ones it does not solve for.
"""

import numpy as np
from abc import abstractmethod
from typing import Tuple

from ..kernel.dof import DegreeOfFreedom, NodalDegreeOfFreedom, TRANSLATIONS
from ..kernel.stiffness import ElementStiffnessMatrix
from .base import StiffnessBuilder, keyed_stiffness


def element_geometry_3d(element) -> Tuple[float, float, float, float]:
    """
    Length and direction cosines (L, l, m, n) of a two-node element.

    l² + m² + n² = 1. Zero length is rejected when the element is created,
    so L > 0 here.

    Example:
    --------
    >>> bar = LinearTruss(0, (Node(0, 0, 0, 0), Node(1, 1, 0, 0)), steel, section)
    >>> element_geometry_3d(bar)
    (1.0, 1.0, 0.0, 0.0)
    """
    ni = element.start_node
    nj = element.end_node

    dx = nj.x - ni.x
    dy = nj.y - ni.y
    dz = nj.z - ni.z

    L = float(np.sqrt(dx*dx + dy*dy + dz*dz))
    return L, dx / L, dy / L, dz / L


def axial_global_stiffness(element, k: float) -> np.ndarray:
    """6×6 global matrix for axial stiffness k, DOF order [ux_i, uy_i, uz_i, ux_j, uy_j, uz_j]."""
    _, l, m, n = element_geometry_3d(element)

    # B[i,j] = direction_cosine[i] × direction_cosine[j]
    d = np.array([l, m, n], dtype=float)
    B = np.outer(d, d)

    ke = np.zeros((6, 6), dtype=float)
    ke[0:3, 0:3] = B
    ke[0:3, 3:6] = -B
    ke[3:6, 0:3] = -B
    ke[3:6, 3:6] = B
    return k * ke


class _AxialStiffnessBuilder(StiffnessBuilder):

    SUPPORTED_DOFS = TRANSLATIONS

    @abstractmethod
    def axial_stiffness(self) -> float:
        """Stiffness along the element axis."""

    def local_stiffness(self) -> ElementStiffnessMatrix:
        """2×2 matrix over the local X freedom of each end."""
        start, end = self.element.start_node, self.element.end_node
        k = self.axial_stiffness()
        keys = [NodalDegreeOfFreedom(start, DegreeOfFreedom.X), NodalDegreeOfFreedom(end, DegreeOfFreedom.X)]
        return keyed_stiffness(keys, np.array([[k, -k], [-k, k]], dtype=float))

    def global_stiffness(self) -> ElementStiffnessMatrix:
        ke = axial_global_stiffness(self.element, self.axial_stiffness())
        return self._check_symmetric(keyed_stiffness(self.element_keys(), ke))

    def axial_force(self, displacements) -> float:
        """
        Axial force from global displacements (positive = tension).

        displacements is anything indexable by NodalDegreeOfFreedom
        (a KeyedVector or a dict); missing translations count as zero.
        """
        _, l, m, n = element_geometry_3d(self.element)

        def u(node, dof):
            key = NodalDegreeOfFreedom(node, dof)
            return displacements[key] if key in displacements else 0.0

        delta = [u(self.element.end_node, d) - u(self.element.start_node, d) for d in TRANSLATIONS]
        # Axial deformation = relative displacement projected on the element axis
        delta_L = l * delta[0] + m * delta[1] + n * delta[2]
        return self.axial_stiffness() * delta_L


class SpringStiffnessBuilder(_AxialStiffnessBuilder):
    """Linear spring: stiffness is the element's constant k."""

    def axial_stiffness(self) -> float:
        return float(self.element.stiffness)


class TrussStiffnessBuilder(_AxialStiffnessBuilder):
    """Axial-only bar: k = EA/L."""

    def axial_stiffness(self) -> float:
        return self.element.material.youngs_modulus * self.element.section.area / self.element.length
