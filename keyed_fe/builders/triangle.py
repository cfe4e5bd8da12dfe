# keyed_fe/builders/triangle.py
"""
CONSTANT STRAIN TRIANGLE: Plane-Stress Membrane Stiffness
=========================================================

The three-node triangle with linear displacement field has CONSTANT strain
over the element, so the stiffness integral is exact without quadrature:

    K = t × A × B^T × D × B

with, for nodes (x1, y1), (x2, y2), (x3, y3) and signed area A:

    b = [y2 - y3, y3 - y1, y1 - y2]
    c = [x3 - x2, x1 - x3, x2 - x1]

    B = 1/(2A) × [ b1  0   b2  0   b3  0  ]      strains [εxx, εyy, γxy]
                 [ 0   c1  0   c2  0   c3 ]
                 [ c1  b1  c2  b2  c3  b3 ]

    D = E/(1 - ν²) × [ 1  ν  0        ]
                     [ ν  1  0        ]
                     [ 0  0  (1 - ν)/2 ]

The element carries membrane forces only: it supports the in-plane
translations X and Y, never Z or any rotation. It must therefore lie in a
plane parallel to global XY.
"""

import numpy as np
from enum import Enum

from ..errors import InvalidGeometryError
from ..kernel.dof import DegreeOfFreedom, nodal_dofs
from ..kernel.keyed import KeyedMatrix
from ..kernel.stiffness import ElementStiffnessMatrix
from .base import StiffnessBuilder, keyed_stiffness


class Strain(Enum):
    """In-plane strain components of a membrane."""
    XX = "exx"
    YY = "eyy"
    XY = "gxy"


class ConstantStrainTriangleStiffnessBuilder(StiffnessBuilder):
    """Plane-stress stiffness for LinearConstantStrainTriangle."""

    SUPPORTED_DOFS = (DegreeOfFreedom.X, DegreeOfFreedom.Y)

    def __init__(self, element, config=None):
        super().__init__(element, config)
        z = [n.z for n in element.nodes]
        if max(z) - min(z) > self.config.geometry_tolerance * max(1.0, element.area):
            raise InvalidGeometryError(
                f"Triangle {element.id} must lie in a plane parallel to global XY (node z = {z})"
            )
        if element.section.thickness <= 0.0:
            raise ValueError(f"Triangle {element.id} needs a positive membrane thickness")

    def _coefficients(self):
        (x1, y1), (x2, y2), (x3, y3) = [(n.x, n.y) for n in self.element.nodes]
        b = np.array([y2 - y3, y3 - y1, y1 - y2])
        c = np.array([x3 - x2, x1 - x3, x2 - x1])
        a = np.array([x2 * y3 - x3 * y2, x3 * y1 - x1 * y3, x1 * y2 - x2 * y1])
        two_area = float(a.sum())  # signed, negative for clockwise node order
        return a, b, c, two_area

    def elasticity_matrix(self) -> np.ndarray:
        E = self.element.material.youngs_modulus
        nu = self.element.material.effective_poissons_ratio
        return E / (1.0 - nu * nu) * np.array([
            [1.0, nu, 0.0],
            [nu, 1.0, 0.0],
            [0.0, 0.0, (1.0 - nu) / 2.0],
        ])

    def _b_matrix(self) -> np.ndarray:
        _, b, c, two_area = self._coefficients()
        B = np.zeros((3, 6))
        B[0, 0::2] = b
        B[1, 1::2] = c
        B[2, 0::2] = c
        B[2, 1::2] = b
        return B / two_area

    def strain_displacement_matrix(self) -> KeyedMatrix:
        """B keyed by strain component (rows) and nodal freedom (columns)."""
        return KeyedMatrix(list(Strain), nodal_dofs(self.element.nodes, self.SUPPORTED_DOFS), data=self._b_matrix())

    def shape_functions(self, x: float, y: float) -> np.ndarray:
        """Area coordinates [N1, N2, N3] at global point (x, y)."""
        a, b, c, two_area = self._coefficients()
        return (a + b * x + c * y) / two_area

    def local_stiffness(self) -> ElementStiffnessMatrix:
        """6×6 membrane stiffness over [X, Y] of each node, in the XY plane."""
        B = self._b_matrix()
        D = self.elasticity_matrix()
        t = self.element.section.thickness
        k = t * self.element.area * (B.T @ D @ B)
        return self._check_symmetric(keyed_stiffness(self.element_keys(), k))
