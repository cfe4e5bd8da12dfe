# keyed_fe/builders/base.py
"""Capability shared by every element stiffness builder."""

import numpy as np
from abc import ABC, abstractmethod
from typing import Any, List, Tuple

from ..config import CONFIG
from ..errors import UnsupportedFreedomError
from ..kernel.dof import DegreeOfFreedom, NodalDegreeOfFreedom, nodal_dofs
from ..kernel.stiffness import ElementStiffnessMatrix


class StiffnessBuilder(ABC):
    """
    Computes the stiffness of ONE element.

    Subclasses declare SUPPORTED_DOFS (the global freedoms the element
    physically couples) and implement local_stiffness(). Elements whose
    formula is written in their own local axes also override
    global_stiffness(); for the rest the local and global matrices coincide.

    Builders hold no state besides the element they were built for.
    """

    SUPPORTED_DOFS: Tuple[DegreeOfFreedom, ...] = ()

    def __init__(self, element: Any, config=None):
        self.element = element
        self.config = config or CONFIG

    @property
    def supported_dofs(self) -> Tuple[DegreeOfFreedom, ...]:
        return self.SUPPORTED_DOFS

    def supports(self, dof: DegreeOfFreedom) -> bool:
        return dof in self.SUPPORTED_DOFS

    def element_keys(self) -> List[NodalDegreeOfFreedom]:
        """Global keys of this element: every node, every supported dof."""
        return nodal_dofs(self.element.nodes, self.SUPPORTED_DOFS)

    @abstractmethod
    def local_stiffness(self) -> ElementStiffnessMatrix:
        """Stiffness in the element's own axes."""

    def global_stiffness(self) -> ElementStiffnessMatrix:
        """Stiffness in global axes, keyed by element_keys()."""
        return self.local_stiffness()

    def stiffness_at(
        self,
        row_node: Any,
        row_dof: DegreeOfFreedom,
        column_node: Any,
        column_dof: DegreeOfFreedom,
    ) -> float:
        """Single global stiffness coefficient, rejecting freedoms the element lacks."""
        for dof in (row_dof, column_dof):
            if not self.supports(dof):
                raise UnsupportedFreedomError(
                    f"{type(self.element).__name__} {self.element.id} does not support {dof.name}"
                )
        return self.global_stiffness().at_nodes(row_node, row_dof, column_node, column_dof)

    def _check_symmetric(self, matrix: ElementStiffnessMatrix) -> ElementStiffnessMatrix:
        assert matrix.is_symmetric(self.config.symmetry_rtol, self.config.symmetry_atol), \
            f"{type(self.element).__name__} {self.element.id} stiffness is not symmetric"
        return matrix


def keyed_stiffness(keys: List[NodalDegreeOfFreedom], k: np.ndarray) -> ElementStiffnessMatrix:
    """Wrap a plain element matrix whose rows/columns follow keys."""
    assert k.shape == (len(keys), len(keys)), \
        f"Element matrix shape {k.shape} doesn't match {len(keys)} keys"
    return ElementStiffnessMatrix(keys, data=k)
