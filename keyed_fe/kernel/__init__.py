# keyed_fe/kernel - Element-agnostic stiffness core
"""
KERNEL: KEYED ASSEMBLY, PARTITION AND SOLVE
===========================================

This package contains the plumbing that works for ANY element type:

- dof.py        DegreeOfFreedom and the (node, dof) key
- keyed.py      KeyedMatrix / KeyedVector: linear algebra addressed by key
- stiffness.py  ElementStiffnessMatrix: keyed by (node, dof), node sub-blocks
- assemble.py   Sum element matrices into the global matrix by key pair
- partition.py  Split K into K_FF, K_FC, K_CF, K_CC
- solve.py      Static reduction: free displacements, then reactions

The element formulas (springs, trusses, beams, triangles) live in
keyed_fe.builders; the kernel only ever sees keyed matrices.
"""

from .dof import DegreeOfFreedom, NodalDegreeOfFreedom, nodal_dofs
from .keyed import KeyedMatrix, KeyedVector
from .stiffness import ElementStiffnessMatrix
from .assemble import assemble_global_K, assemble_nodal_vector
from .partition import BoundaryPartition, partition
from .solve import StaticReductionSolver, StaticResult, solve_static

__all__ = [
    'DegreeOfFreedom', 'NodalDegreeOfFreedom', 'nodal_dofs',
    'KeyedMatrix', 'KeyedVector', 'ElementStiffnessMatrix',
    'assemble_global_K', 'assemble_nodal_vector',
    'BoundaryPartition', 'partition',
    'StaticReductionSolver', 'StaticResult', 'solve_static',
]
