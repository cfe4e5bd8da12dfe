# keyed_fe - Keyed direct-stiffness finite element core
"""
KEYED-FE: Direct Stiffness Assembly and Static Solve
====================================================

Turns nodes, elements and boundary conditions into displacements and
reaction forces:

    element geometry/material -> element stiffness (keyed by node, dof)
        -> global stiffness -> K_FF/K_FC/K_CF/K_CC -> d_F, then reactions

ARCHITECTURE:
-------------
    kernel/         Element-agnostic core (keys, keyed matrices, assembly,
                    partition, static reduction)
    builders/       Stiffness formula per element variant (spring, truss,
                    3D beam, constant strain triangle)
    model.py        Node, Material, CrossSection, elements, FiniteElementModel
    assembly.py     Element list -> global K (uses kernel internally)
    solve.py        LinearSolver: whole-model solve
    config.py       SolverConfig tolerances
    errors.py       Error taxonomy
"""

import logging

from .config import CONFIG, SolverConfig
from .errors import (
    InvalidGeometryError,
    MalformedElementError,
    UnderConstrainedError,
    UnsupportedFreedomError,
)
from .kernel import (
    DegreeOfFreedom,
    ElementStiffnessMatrix,
    KeyedMatrix,
    KeyedVector,
    NodalDegreeOfFreedom,
    StaticReductionSolver,
    StaticResult,
    partition,
    solve_static,
)
from .model import (
    CrossSection,
    FiniteElementModel,
    Linear3DBeam,
    LinearConstantStrainTriangle,
    LinearTruss,
    Material,
    ModelType,
    Node,
    Spring,
)
from .builders import builder_for
from .assembly import assemble_model_K
from .solve import LinearSolver

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"
