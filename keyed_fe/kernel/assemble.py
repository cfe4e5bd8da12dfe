# keyed_fe/kernel/assemble.py
"""
ASSEMBLY: Keyed Global Matrix Assembly
======================================

PURPOSE:
--------
This module sums element contributions into the global stiffness matrix.

The key insight: assembly doesn't care about element TYPE, and with keyed
matrices it doesn't even need a DOF numbering. Each element contribution is
an ElementStiffnessMatrix keyed by (node, dof); entries that share a key pair
across elements simply add up (physical superposition of stiffness).

ALGORITHM:
----------
    acc = {}                                   # (row_key, col_key) -> sum
    for each element matrix ke:
        for each (r, c) in ke:
            acc[r, c] += ke[r, c]
    K = ElementStiffnessMatrix(all keys) filled from acc

Accumulating by key pair (reduce-by-key) instead of writing into a shared
matrix keeps each element independent, and the result does not depend on
element order. Freedoms the model does not solve for (allowed_dofs) are
dropped before accumulation; freedoms no element supports never appear.

USAGE:
------
    contributions = [builder_for(e).global_stiffness() for e in elements]
    K = assemble_global_K(contributions, allowed_dofs={X, Y, ZZ})
"""

import logging
from collections import defaultdict
from typing import AbstractSet, Dict, Hashable, Iterable, List, Mapping, Optional, Tuple, Union

from .dof import ALL_DOFS, DegreeOfFreedom, NodalDegreeOfFreedom
from .keyed import KeyedVector
from .stiffness import ElementStiffnessMatrix

logger = logging.getLogger(__name__)

_DOF_POSITION = {dof: i for i, dof in enumerate(ALL_DOFS)}


def ordered_keys(keys: Iterable[NodalDegreeOfFreedom]) -> List[NodalDegreeOfFreedom]:
    """
    Canonical global order: by node id, then X, Y, Z, XX, YY, ZZ.

    Falls back to first-appearance order when nodes carry no id.
    """
    keys = list(dict.fromkeys(keys))
    if all(hasattr(k.node, "id") for k in keys):
        keys.sort(key=lambda k: (k.node.id, _DOF_POSITION[k.dof]))
    return keys


def assemble_global_K(
    contributions: Iterable[ElementStiffnessMatrix],
    allowed_dofs: Optional[AbstractSet[DegreeOfFreedom]] = None,
) -> ElementStiffnessMatrix:
    """
    Assemble the global stiffness matrix from element contributions.

    Parameters:
    -----------
    contributions : Iterable[ElementStiffnessMatrix]
        One global-axes stiffness matrix per element
    allowed_dofs : set of DegreeOfFreedom, optional
        Freedoms the model solves for; None keeps every supported freedom

    Returns:
    --------
    ElementStiffnessMatrix
        Square, symmetric for conservative elements, over the union of the
        element keys (restricted to allowed_dofs) in canonical order
    """
    accumulator: Dict[Tuple[Hashable, Hashable], float] = defaultdict(float)
    seen: Dict[NodalDegreeOfFreedom, None] = {}
    n_elements = 0

    for ke in contributions:
        n_elements += 1
        kept = [k for k in ke.row_keys if allowed_dofs is None or k.dof in allowed_dofs]
        block = ke.restrict(kept, kept).to_array()
        for a, row_key in enumerate(kept):
            seen.setdefault(row_key)
            for b, column_key in enumerate(kept):
                accumulator[row_key, column_key] += block[a, b]

    K = ElementStiffnessMatrix(ordered_keys(seen))
    for (row_key, column_key), value in accumulator.items():
        K[row_key, column_key] = value

    logger.debug("Assembled %d elements into %d degrees of freedom", n_elements, len(K.row_keys))
    return K


def assemble_nodal_vector(
    keys: Iterable[NodalDegreeOfFreedom],
    contributions: Union[Mapping[NodalDegreeOfFreedom, float], Iterable[Tuple[NodalDegreeOfFreedom, float]], None] = None,
) -> KeyedVector:
    """
    Build a force or displacement vector over keys, summing contributions.

    Entries without a contribution are 0 (no applied force, or a fixed
    support). A contribution on a key outside keys raises
    UnsupportedFreedomError.

    Example:
    --------
    >>> F = assemble_nodal_vector(free_keys, {NodalDegreeOfFreedom(n2, DegreeOfFreedom.X): 1.0})
    """
    vector = KeyedVector(list(keys))
    if contributions is None:
        return vector
    items = contributions.items() if isinstance(contributions, Mapping) else contributions
    for key, value in items:
        vector.add(key, value)
    return vector
