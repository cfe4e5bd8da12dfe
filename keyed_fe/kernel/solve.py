# keyed_fe/kernel/solve.py
"""Static reduction: solve free displacements, recover reactions, with mechanism detection."""

import logging
import numpy as np
import pandas as pd
import scipy.linalg
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Union

from ..config import CONFIG, SolverConfig
from ..errors import UnderConstrainedError
from .assemble import assemble_nodal_vector
from .dof import DegreeOfFreedom, NodalDegreeOfFreedom
from .keyed import KeyedVector
from .partition import BoundaryPartition, partition
from .stiffness import ElementStiffnessMatrix

logger = logging.getLogger(__name__)

KnownValues = Union[KeyedVector, Mapping[NodalDegreeOfFreedom, float], None]


@dataclass(frozen=True)
class StaticResult:
    """
    Displacement and force at every global key.

    For free keys the force was given and the displacement solved; for
    constrained keys the displacement was given and the force (reaction)
    recovered.
    """
    displacements: KeyedVector
    forces: KeyedVector
    free_keys: tuple
    constrained_keys: tuple

    def displacement(self, node: Any, dof: DegreeOfFreedom) -> float:
        return self.displacements[NodalDegreeOfFreedom(node, dof)]

    def force(self, node: Any, dof: DegreeOfFreedom) -> float:
        return self.forces[NodalDegreeOfFreedom(node, dof)]

    def displacements_at(self, node: Any) -> Dict[DegreeOfFreedom, float]:
        """Every solved freedom of one node; axes not in the model are absent."""
        return {key.dof: value for key, value in self.displacements.items() if key.node == node}

    @property
    def reactions(self) -> KeyedVector:
        """Recovered forces at the constrained keys only."""
        return self.forces.restrict(self.constrained_keys)

    def to_frame(self) -> pd.DataFrame:
        """One row per key: node, dof, displacement, force, and which one was known."""
        constrained = set(self.constrained_keys)
        rows = []
        for key, d in self.displacements.items():
            rows.append({
                'node': getattr(key.node, 'id', key.node),
                'dof': key.dof.name,
                'displacement': d,
                'force': self.forces[key],
                'known': 'displacement' if key in constrained else 'force',
            })
        return pd.DataFrame(rows, columns=['node', 'dof', 'displacement', 'force', 'known'])


def _scaled_condition_number(Kff: np.ndarray) -> float:
    """
    cond(S · K_FF · S) with S = diag(1/sqrt(K_ii)).

    Rigid-body modes stay singular under the scaling, a spread of stiffness
    magnitudes (a 1e13 spring next to a 1.0 spring) does not. A non-positive
    diagonal entry is a free key with no stiffness of its own.
    """
    diagonal = np.diag(Kff)
    if np.any(diagonal <= 0.0):
        return np.inf
    s = 1.0 / np.sqrt(diagonal)
    return float(np.linalg.cond(Kff * s[:, None] * s[None, :]))


def _known_vector(keys, values: KnownValues) -> KeyedVector:
    if isinstance(values, KeyedVector):
        values = values.items()
    return assemble_nodal_vector(keys, values)


class StaticReductionSolver:
    """
    Solves the partitioned system for any number of load cases.

    Step 1:  K_FF · d_F = F_F - K_FC · d_C     ->  d_F
    Step 2:  F_C = K_CF · d_F + K_CC · d_C     ->  reactions

    K_FF is checked and LU-factored ONCE at construction; every solve() reuses
    the factors read-only, so independent load cases can share one solver.

    Args:
        partition: BoundaryPartition of the assembled global stiffness
        config: SolverConfig (cond_limit is the mechanism threshold)

    Raises:
        UnderConstrainedError: If K_FF is singular or its diagonally scaled
            condition number exceeds cond_limit
    """

    def __init__(self, partition: BoundaryPartition, config: Optional[SolverConfig] = None):
        self.partition = partition
        self.config = config or CONFIG

        self._K_FC = partition.K_FC.to_array()
        self._K_CF = partition.K_CF.to_array()
        self._K_CC = partition.K_CC.to_array()
        self._lu = None

        n_free = len(partition.free_keys)
        if n_free:
            Kff = partition.K_FF.to_array()
            cond = _scaled_condition_number(Kff)
            logger.debug("K_FF: %d free DOFs, cond=%.3e", n_free, cond)
            if not np.isfinite(cond) or cond > self.config.cond_limit:
                raise UnderConstrainedError(
                    f"Unstable system (cond={cond:.2e}) with {n_free} free and "
                    f"{len(partition.constrained_keys)} constrained DOFs. Check supports. "
                    f"Need cond < {self.config.cond_limit:.0e}."
                )
            self._lu = scipy.linalg.lu_factor(Kff)

    def solve(self, known_forces: KnownValues = None, known_displacements: KnownValues = None) -> StaticResult:
        """
        Solve one load case.

        Args:
            known_forces: Applied forces at free keys (missing keys = 0)
            known_displacements: Prescribed displacements at constrained keys (missing keys = 0)

        Returns:
            StaticResult over every global key
        """
        p = self.partition
        F_F = _known_vector(p.free_keys, known_forces).to_array()
        d_C = _known_vector(p.constrained_keys, known_displacements).to_array()

        if self._lu is not None:
            d_F = scipy.linalg.lu_solve(self._lu, F_F - self._K_FC @ d_C)
        else:
            d_F = np.zeros(0)
        F_C = self._K_CF @ d_F + self._K_CC @ d_C

        displacements = KeyedVector(p.keys)
        forces = KeyedVector(p.keys)
        for key, value in zip(p.free_keys, d_F):
            displacements[key] = value
        for key, value in zip(p.free_keys, F_F):
            forces[key] = value
        for key, value in zip(p.constrained_keys, d_C):
            displacements[key] = value
        for key, value in zip(p.constrained_keys, F_C):
            forces[key] = value

        return StaticResult(displacements, forces, p.free_keys, p.constrained_keys)


def solve_static(
    K: ElementStiffnessMatrix,
    is_constrained: Callable[[NodalDegreeOfFreedom], bool],
    known_forces: KnownValues = None,
    known_displacements: KnownValues = None,
    config: Optional[SolverConfig] = None,
) -> StaticResult:
    """
    Partition K and solve a single load case.

    Raises:
        UnderConstrainedError: If the free block is singular (unrestrained rigid-body mode)
    """
    return StaticReductionSolver(partition(K, is_constrained), config).solve(known_forces, known_displacements)
