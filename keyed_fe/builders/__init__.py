# keyed_fe/builders - per-element stiffness computation
"""
BUILDERS: One Stiffness Formula per Element Variant
===================================================

Every builder offers the same capability:

    builder.supported_dofs          freedoms the element couples
    builder.supports(dof)
    builder.local_stiffness()       ElementStiffnessMatrix in element axes
    builder.global_stiffness()      ElementStiffnessMatrix in global axes
    builder.stiffness_at(n1, d1, n2, d2)

builder_for(element) picks the right builder for an element record, so the
assembler never has to know which variants exist.
"""

from ..model import LinearConstantStrainTriangle, Linear3DBeam, LinearTruss, Spring
from .base import StiffnessBuilder
from .beam import Linear3DBeamStiffnessBuilder, beam_rotation_matrix
from .line import SpringStiffnessBuilder, TrussStiffnessBuilder, element_geometry_3d
from .triangle import ConstantStrainTriangleStiffnessBuilder, Strain

BUILDERS = {
    Spring: SpringStiffnessBuilder,
    LinearTruss: TrussStiffnessBuilder,
    Linear3DBeam: Linear3DBeamStiffnessBuilder,
    LinearConstantStrainTriangle: ConstantStrainTriangleStiffnessBuilder,
}


def builder_for(element, config=None) -> StiffnessBuilder:
    """Stiffness builder for element; NotImplementedError for unknown variants."""
    try:
        builder_cls = BUILDERS[type(element)]
    except KeyError:
        raise NotImplementedError(
            f"No stiffness builder for element type {type(element).__name__}"
        ) from None
    return builder_cls(element, config)


__all__ = [
    'StiffnessBuilder', 'builder_for', 'BUILDERS',
    'SpringStiffnessBuilder', 'TrussStiffnessBuilder',
    'Linear3DBeamStiffnessBuilder', 'ConstantStrainTriangleStiffnessBuilder',
    'beam_rotation_matrix', 'element_geometry_3d', 'Strain',
]
