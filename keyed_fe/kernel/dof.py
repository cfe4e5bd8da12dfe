# keyed_fe/kernel/dof.py
"""
DEGREES OF FREEDOM: Keys Instead of Integer Indices
===================================================

PURPOSE:
--------
A stiffness matrix relates nodal forces to nodal displacements. Each row and
column belongs to ONE scalar unknown: "node 5, displacement along Y" or
"node 2, rotation about Z".

Rather than flattening these into integer indices (node_id * dof_per_node +
local_dof), every row/column is addressed by a NodalDegreeOfFreedom key:

    NodalDegreeOfFreedom(node, DegreeOfFreedom.Y)

This means:
- Elements only materialise the freedoms they physically support
  (a membrane triangle has no rotations, a 1D spring only has X).
- Assembly never needs to know "how many DOF per node" up front.
- Partitioning and solving carry the physical meaning of each entry
  end-to-end, so results never need un-scrambling by index arithmetic.

USAGE:
------
    key = NodalDegreeOfFreedom(node, DegreeOfFreedom.X)
    key == NodalDegreeOfFreedom(node, DegreeOfFreedom.X)   # True, value equality
    {key: 1.0}[NodalDegreeOfFreedom(node, DegreeOfFreedom.X)]  # 1.0
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List


class DegreeOfFreedom(Enum):
    """
    The six freedoms of a point in 3D space.

    Translations along the global (or element local) axes, then rotations
    about them (right-hand rule).
    """
    X = "x"
    Y = "y"
    Z = "z"
    XX = "xx"   # rotation about X
    YY = "yy"   # rotation about Y
    ZZ = "zz"   # rotation about Z

    @property
    def is_rotation(self) -> bool:
        return self in ROTATIONS

    def __repr__(self):
        return f"DegreeOfFreedom.{self.name}"


TRANSLATIONS = (DegreeOfFreedom.X, DegreeOfFreedom.Y, DegreeOfFreedom.Z)
ROTATIONS = (DegreeOfFreedom.XX, DegreeOfFreedom.YY, DegreeOfFreedom.ZZ)
ALL_DOFS = TRANSLATIONS + ROTATIONS


@dataclass(frozen=True)
class NodalDegreeOfFreedom:
    """
    One scalar unknown of the model: (node, degree of freedom).

    frozen=True gives value-based __eq__ and __hash__, so building the same
    pair twice always resolves to the same matrix entry. The node only needs
    to be hashable itself (model Nodes are frozen dataclasses).

    Parameters:
    -----------
    node : Any
        The node this freedom belongs to
    dof : DegreeOfFreedom
        The axis of translation or rotation
    """
    node: Any
    dof: DegreeOfFreedom

    def __repr__(self):
        node_id = getattr(self.node, "id", self.node)
        return f"<{node_id}:{self.dof.name}>"


def nodal_dofs(nodes: Iterable[Any], dofs: Iterable[DegreeOfFreedom]) -> List[NodalDegreeOfFreedom]:
    """
    Build the element key list: for each node (in order), each dof (in order).

    Examples:
    ---------
    >>> nodal_dofs([n0, n1], [DegreeOfFreedom.X, DegreeOfFreedom.Y])
    [<0:X>, <0:Y>, <1:X>, <1:Y>]
    """
    dofs = list(dofs)
    return [NodalDegreeOfFreedom(node, dof) for node in nodes for dof in dofs]
