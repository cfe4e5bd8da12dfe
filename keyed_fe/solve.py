# keyed_fe/solve.py
"""
LinearSolver: assemble -> partition -> solve for a FiniteElementModel.
"""

import logging
from typing import Optional

from .assembly import assemble_model_K
from .config import SolverConfig
from .errors import UnsupportedFreedomError
from .kernel.partition import BoundaryPartition, partition
from .kernel.solve import StaticReductionSolver, StaticResult
from .kernel.stiffness import ElementStiffnessMatrix
from .model import FiniteElementModel

logger = logging.getLogger(__name__)


class LinearSolver:
    """
    Linear static solve of a whole model.

    The global stiffness and its partition are rebuilt on every call, so
    the solver always reflects the model's current elements and boundary
    conditions.

    Example:
    --------
    >>> result = LinearSolver(model).solve()
    >>> result.displacement(n2, DegreeOfFreedom.X)
    0.2
    """

    def __init__(self, model: FiniteElementModel, config: Optional[SolverConfig] = None):
        self.model = model
        self.config = config

    def stiffness_matrix(self) -> ElementStiffnessMatrix:
        return assemble_model_K(self.model.elements, self.model.allowed_dofs, self.config)

    def boundary_partition(self) -> BoundaryPartition:
        return partition(self.stiffness_matrix(), self.model.is_constrained)

    def solve(self) -> StaticResult:
        """
        Raises:
            UnderConstrainedError: If a rigid-body mode is not restrained
            UnsupportedFreedomError: If a force is applied where no element provides stiffness
            ValueError: If a force is applied at a constrained freedom
        """
        p = self.boundary_partition()
        keys = set(p.keys)

        forces = self.model.forces
        for key in forces:
            if self.model.is_constrained(key):
                raise ValueError(
                    f"Force applied at constrained freedom {key!r}; reactions there are solved for"
                )
            if key not in keys:
                raise UnsupportedFreedomError(
                    f"Force applied at {key!r}, but no element provides stiffness there"
                )

        # Supports on freedoms that no element couples carry no stiffness; skip them
        settlements = {k: v for k, v in self.model.settlements.items() if k in keys}

        logger.debug(
            "Solving %d free / %d constrained DOFs (%d elements)",
            len(p.free_keys), len(p.constrained_keys), len(self.model.elements),
        )
        return StaticReductionSolver(p, self.config).solve(forces, settlements)
