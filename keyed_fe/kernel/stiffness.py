# keyed_fe/kernel/stiffness.py
"""Stiffness matrices keyed by NodalDegreeOfFreedom."""

import numpy as np
from typing import Any, Sequence

from .dof import DegreeOfFreedom, NodalDegreeOfFreedom
from .keyed import KeyedMatrix


class ElementStiffnessMatrix(KeyedMatrix):
    """
    A KeyedMatrix whose keys are NodalDegreeOfFreedom.

    Used both for a single element's stiffness and for the assembled global
    stiffness: the node-to-node sub_matrix() works the same on either.
    """

    def __init__(
        self,
        row_keys: Sequence[NodalDegreeOfFreedom],
        column_keys: Sequence[NodalDegreeOfFreedom] = None,
        initial_value: float = 0.0,
        data: Any = None,
    ):
        super().__init__(row_keys, column_keys, initial_value=initial_value, data=data)

    def at_nodes(
        self,
        row_node: Any,
        row_dof: DegreeOfFreedom,
        column_node: Any,
        column_dof: DegreeOfFreedom,
    ) -> float:
        """Value at (row_node, row_dof) x (column_node, column_dof)."""
        return self[NodalDegreeOfFreedom(row_node, row_dof), NodalDegreeOfFreedom(column_node, column_dof)]

    def set_at_nodes(
        self,
        row_node: Any,
        row_dof: DegreeOfFreedom,
        column_node: Any,
        column_dof: DegreeOfFreedom,
        value: float,
    ) -> None:
        self[NodalDegreeOfFreedom(row_node, row_dof), NodalDegreeOfFreedom(column_node, column_dof)] = value

    def sub_matrix(self, row_node: Any, column_node: Any) -> np.ndarray:
        """
        Plain numpy block coupling two nodes.

        Rows are the row keys belonging to row_node and columns the column keys
        belonging to column_node, each in the order they appear in this matrix.
        """
        rows = self.row_keys_where(lambda key: key.node == row_node)
        cols = self.column_keys_where(lambda key: key.node == column_node)
        return self.restrict(rows, cols).to_array()

    def is_symmetric(self, rtol: float = 1e-9, atol: float = 1e-9) -> bool:
        """M(r, c) == M(c, r) for every key pair (requires equal key sets)."""
        if set(self.row_keys) != set(self.column_keys):
            return False
        aligned = self.restrict(self.row_keys, self.row_keys).to_array()
        # atol scales with the largest coefficient (E ~ 1e11 in SI units)
        scale = max(float(np.max(np.abs(aligned))) if aligned.size else 0.0, 1.0)
        return bool(np.allclose(aligned, aligned.T, rtol=rtol, atol=atol * scale))
