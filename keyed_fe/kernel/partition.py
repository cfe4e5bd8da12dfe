# keyed_fe/kernel/partition.py
"""
BOUNDARY PARTITION: Splitting K by Known and Unknown Displacements
==================================================================

Every degree of freedom is either

    FREE (F)         force known (applied, default 0), displacement unknown
    CONSTRAINED (C)  displacement known (prescribed, default 0), force unknown

Reordering K by class gives four blocks:

    [ F_F ]   [ K_FF  K_FC ] [ d_F ]
    [ F_C ] = [ K_CF  K_CC ] [ d_C ]

Each block is a keyed restriction of K, so the keys travel with the numbers
and the solution never has to be un-scrambled by index. Within each class,
keys keep the order they have in the global matrix.
"""

from dataclasses import dataclass
from typing import Callable, Tuple

from .dof import NodalDegreeOfFreedom
from .stiffness import ElementStiffnessMatrix


@dataclass(frozen=True)
class BoundaryPartition:
    """
    The four stiffness blocks of a model, plus the key classes.

    Attributes:
    -----------
    keys : tuple
        All global keys, in global matrix order
    free_keys, constrained_keys : tuple
        Disjoint, together exactly keys, each in global order
    K_FF : unknown displacements -> known forces
    K_FC : prescribed displacements -> known forces
    K_CF : unknown displacements -> reactions
    K_CC : prescribed displacements -> reactions
    """
    keys: Tuple[NodalDegreeOfFreedom, ...]
    free_keys: Tuple[NodalDegreeOfFreedom, ...]
    constrained_keys: Tuple[NodalDegreeOfFreedom, ...]
    K_FF: ElementStiffnessMatrix
    K_FC: ElementStiffnessMatrix
    K_CF: ElementStiffnessMatrix
    K_CC: ElementStiffnessMatrix

    @property
    def entry_count(self) -> int:
        """Total entries over the four blocks (equals the entries of K)."""
        return sum(block.shape[0] * block.shape[1] for block in (self.K_FF, self.K_FC, self.K_CF, self.K_CC))


def partition(
    K: ElementStiffnessMatrix,
    is_constrained: Callable[[NodalDegreeOfFreedom], bool],
) -> BoundaryPartition:
    """
    Classify every key of K and cut K into K_FF, K_FC, K_CF, K_CC.

    Parameters:
    -----------
    K : ElementStiffnessMatrix
        Assembled global stiffness matrix (square)
    is_constrained : callable
        key -> True if its displacement is prescribed
        (e.g. FiniteElementModel.is_constrained)
    """
    if K.row_keys != K.column_keys:
        raise ValueError("Only a square stiffness matrix with matching row/column keys can be partitioned")

    free = tuple(K.row_keys_where(lambda key: not is_constrained(key)))
    constrained = tuple(K.row_keys_where(is_constrained))

    return BoundaryPartition(
        keys=K.row_keys,
        free_keys=free,
        constrained_keys=constrained,
        K_FF=K.restrict(free, free),
        K_FC=K.restrict(free, constrained),
        K_CF=K.restrict(constrained, free),
        K_CC=K.restrict(constrained, constrained),
    )
