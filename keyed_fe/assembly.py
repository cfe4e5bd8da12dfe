# keyed_fe/assembly.py
"""Global K assembly for model elements (uses kernel internally)."""

from typing import AbstractSet, Iterable, List, Optional

from .builders import builder_for
from .config import SolverConfig
from .kernel.assemble import assemble_global_K
from .kernel.dof import DegreeOfFreedom
from .kernel.stiffness import ElementStiffnessMatrix


def element_contributions(elements: Iterable, config: Optional[SolverConfig] = None) -> List[ElementStiffnessMatrix]:
    """Global-axes stiffness of every element, in element order."""
    return [builder_for(e, config).global_stiffness() for e in elements]


def assemble_model_K(
    elements: Iterable,
    allowed_dofs: Optional[AbstractSet[DegreeOfFreedom]] = None,
    config: Optional[SolverConfig] = None,
) -> ElementStiffnessMatrix:
    """
    Global stiffness matrix of a list of elements.

    Only freedoms that some element supports AND that allowed_dofs admits
    (e.g. ModelType.TRUSS_1D.allowed_dofs) become rows/columns.
    """
    return assemble_global_K(element_contributions(elements, config), allowed_dofs)
