# keyed_fe/model.py
"""
MODEL DEFINITIONS: Nodes, Elements and Boundary Conditions
==========================================================

PURPOSE:
--------
The data the stiffness core consumes:

- Node: a point in space (immutable, hashable - it is half of every DOF key)
- Material / CrossSection: constants used by the stiffness formulas
- Spring, LinearTruss, Linear3DBeam, LinearConstantStrainTriangle:
  element records with a FIXED number of nodes, checked at construction
- ModelType: which global freedoms the model solves for (a 1D spring chain
  only has X, a 2D frame has X, Y and ZZ, ...)
- FiniteElementModel: owns nodes and elements, and records which freedoms
  are constrained, which forces are applied and which displacements are
  prescribed

Elements reject degenerate geometry (zero length, collinear triangle) when
they are created, the earliest point at which it can be detected.
"""

import numpy as np
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Dict, FrozenSet, List, Optional, Tuple

from .config import CONFIG
from .errors import InvalidGeometryError, MalformedElementError, UnsupportedFreedomError
from .kernel.dof import ALL_DOFS, DegreeOfFreedom, NodalDegreeOfFreedom


@dataclass(frozen=True)
class Node:
    """
    A node (joint) in 3D space, at its original (undeformed) position.

    Parameters:
    -----------
    id : int
        Unique identifier within the model
    x, y, z : float
        Reference coordinates (z defaults to 0 for planar models)

    Notes:
    ------
    frozen=True makes nodes immutable and hashable by value, which is what
    lets NodalDegreeOfFreedom(node, dof) work as a dictionary key.
    """
    id: int
    x: float
    y: float = 0.0
    z: float = 0.0

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)


@dataclass(frozen=True)
class Material:
    """
    Linear elastic isotropic material.

    Parameters:
    -----------
    youngs_modulus : float
        E (Pa). Steel ~210e9, aluminium ~70e9, timber ~10-15e9.
    shear_modulus : float
        G (Pa), used for torsional stiffness GJ/L
    poissons_ratio : float, optional
        Used by membrane elements. Derived from E and G when omitted.
    density : float
        kg/m³, carried for downstream mass calculations
    """
    youngs_modulus: float
    shear_modulus: float = 0.0
    poissons_ratio: Optional[float] = None
    density: float = 0.0

    @property
    def effective_poissons_ratio(self) -> float:
        if self.poissons_ratio is not None:
            return self.poissons_ratio
        if self.shear_modulus > 0.0:
            return self.youngs_modulus / (2.0 * self.shear_modulus) - 1.0
        return 0.0


@dataclass(frozen=True)
class CrossSection:
    """
    Section constants for line and membrane elements.

    Parameters:
    -----------
    area : float
        A (m²), axial stiffness EA/L
    second_moment_yy : float
        Iyy (m⁴), bending about the element local y axis (deflection in local z)
    second_moment_zz : float
        Izz (m⁴), bending about the element local z axis (deflection in local y)
    torsional_constant : float
        J (m⁴), torsional stiffness GJ/L
    thickness : float
        Membrane thickness t (m) for plane-stress elements
    """
    area: float
    second_moment_yy: float = 0.0
    second_moment_zz: float = 0.0
    torsional_constant: float = 0.0
    thickness: float = 0.0

    @classmethod
    def rectangle(cls, width: float, depth: float) -> "CrossSection":
        """
        Solid rectangle, width b along local y and depth d along local z.

        Torsion uses the thin/thick rectangle approximation
        J = a b³ (1/3 - 0.21 (b/a) (1 - b⁴/(12 a⁴))) with a >= b.
        """
        a, b = max(width, depth), min(width, depth)
        J = a * b**3 * (1.0 / 3.0 - 0.21 * (b / a) * (1.0 - b**4 / (12.0 * a**4)))
        return cls(
            area=width * depth,
            second_moment_yy=width * depth**3 / 12.0,
            second_moment_zz=depth * width**3 / 12.0,
            torsional_constant=J,
            thickness=width,
        )


def _check_node_count(element, nodes: Tuple[Node, ...]) -> None:
    expected = element.NODE_COUNT
    if len(nodes) != expected:
        raise MalformedElementError(
            f"{type(element).__name__} {element.id} needs exactly {expected} nodes, got {len(nodes)}"
        )
    if len(set(nodes)) != len(nodes):
        raise MalformedElementError(f"{type(element).__name__} {element.id} repeats a node")


def _check_length(element, start: Node, end: Node) -> None:
    L = float(np.linalg.norm(end.as_array() - start.as_array()))
    if L <= CONFIG.geometry_tolerance:
        raise InvalidGeometryError(
            f"{type(element).__name__} {element.id} has zero length (nodes {start.id} and {end.id} "
            f"at same location: ({start.x}, {start.y}, {start.z}))"
        )


class _TwoNodeElement:
    """Start/end/length accessors shared by the line elements."""

    NODE_COUNT: ClassVar[int] = 2

    def __post_init__(self):
        object.__setattr__(self, "nodes", tuple(self.nodes))
        _check_node_count(self, self.nodes)
        _check_length(self, self.start_node, self.end_node)

    @property
    def start_node(self) -> Node:
        return self.nodes[0]

    @property
    def end_node(self) -> Node:
        return self.nodes[1]

    @property
    def length(self) -> float:
        return float(np.linalg.norm(self.end_node.as_array() - self.start_node.as_array()))


@dataclass(frozen=True)
class Spring(_TwoNodeElement):
    """
    Axial spring of constant stiffness k between two nodes.

    Acts along the line start_node -> end_node.
    """
    id: int
    nodes: Tuple[Node, ...]
    stiffness: float


@dataclass(frozen=True)
class LinearTruss(_TwoNodeElement):
    """Axial-only bar: k = EA/L along its axis."""
    id: int
    nodes: Tuple[Node, ...]
    material: Material
    section: CrossSection


@dataclass(frozen=True)
class Linear3DBeam(_TwoNodeElement):
    """
    Euler-Bernoulli beam: axial, torsion and bending about both local axes.

    Local x runs from start_node to end_node. See
    builders.beam.beam_rotation_matrix for the local y/z convention.
    """
    id: int
    nodes: Tuple[Node, ...]
    material: Material
    section: CrossSection


@dataclass(frozen=True)
class LinearConstantStrainTriangle:
    """
    Triangular membrane element (in-plane forces only).

    Node order defines the local axes: local x along side node0 -> node1,
    local y perpendicular to it towards node2.
    """
    id: int
    nodes: Tuple[Node, ...]
    material: Material
    section: CrossSection

    NODE_COUNT: ClassVar[int] = 3

    def __post_init__(self):
        object.__setattr__(self, "nodes", tuple(self.nodes))
        _check_node_count(self, self.nodes)
        longest = max(
            np.linalg.norm(self.nodes[i].as_array() - self.nodes[i - 1].as_array())
            for i in range(3)
        )
        if self.area <= CONFIG.geometry_tolerance * max(longest * longest, 1.0):
            raise InvalidGeometryError(
                f"Triangle {self.id} is degenerate: nodes "
                f"{[n.id for n in self.nodes]} are collinear or coincident"
            )

    @property
    def local_x_axis(self) -> np.ndarray:
        """Side 1, from node0 to node1 (not normalised)."""
        return self.nodes[1].as_array() - self.nodes[0].as_array()

    @property
    def local_y_axis(self) -> np.ndarray:
        """
        Perpendicular from side 1 to node2 (not normalised).

        The foot of the perpendicular is node2 projected onto the line through
        node0 along local x.
        """
        x_axis = self.local_x_axis
        to_apex = self.nodes[2].as_array() - self.nodes[0].as_array()
        foot = x_axis * (to_apex @ x_axis) / (x_axis @ x_axis)
        return to_apex - foot

    @property
    def area(self) -> float:
        side1 = self.nodes[1].as_array() - self.nodes[0].as_array()
        side2 = self.nodes[2].as_array() - self.nodes[0].as_array()
        return 0.5 * float(np.linalg.norm(np.cross(side1, side2)))


class ModelType(Enum):
    """The global freedoms a model solves for."""
    TRUSS_1D = "truss_1d"
    TRUSS_2D = "truss_2d"
    TRUSS_3D = "truss_3d"
    FRAME_2D = "frame_2d"
    MEMBRANE_2D = "membrane_2d"
    FULL_3D = "full_3d"

    @property
    def allowed_dofs(self) -> FrozenSet[DegreeOfFreedom]:
        return MODEL_DOFS[self]


MODEL_DOFS = {
    ModelType.TRUSS_1D: frozenset([DegreeOfFreedom.X]),
    ModelType.TRUSS_2D: frozenset([DegreeOfFreedom.X, DegreeOfFreedom.Y]),
    ModelType.TRUSS_3D: frozenset([DegreeOfFreedom.X, DegreeOfFreedom.Y, DegreeOfFreedom.Z]),
    ModelType.FRAME_2D: frozenset([DegreeOfFreedom.X, DegreeOfFreedom.Y, DegreeOfFreedom.ZZ]),
    ModelType.MEMBRANE_2D: frozenset([DegreeOfFreedom.X, DegreeOfFreedom.Y]),
    ModelType.FULL_3D: frozenset(ALL_DOFS),
}


@dataclass
class FiniteElementModel:
    """
    Container for everything the solver needs.

    Nodes and elements are created through the factory methods so that ids
    are unique and every element only references nodes of this model.

    Example:
    --------
    >>> model = FiniteElementModel(ModelType.TRUSS_1D)
    >>> n1, n2, n3 = model.add_node(0), model.add_node(1), model.add_node(2)
    >>> model.add_spring(n1, n2, 3.0)
    >>> model.add_spring(n2, n3, 2.0)
    >>> model.constrain_node(n1, DegreeOfFreedom.X)
    >>> model.constrain_node(n3, DegreeOfFreedom.X)
    >>> model.apply_force(n2, DegreeOfFreedom.X, 1.0)
    """
    model_type: ModelType = ModelType.FULL_3D
    nodes: List[Node] = field(default_factory=list)
    elements: list = field(default_factory=list)
    _constrained: set = field(default_factory=set, init=False, repr=False)
    _forces: Dict[NodalDegreeOfFreedom, float] = field(default_factory=dict, init=False, repr=False)
    _settlements: Dict[NodalDegreeOfFreedom, float] = field(default_factory=dict, init=False, repr=False)

    @property
    def allowed_dofs(self) -> FrozenSet[DegreeOfFreedom]:
        return self.model_type.allowed_dofs

    @property
    def forces(self) -> Dict[NodalDegreeOfFreedom, float]:
        return dict(self._forces)

    @property
    def settlements(self) -> Dict[NodalDegreeOfFreedom, float]:
        return dict(self._settlements)

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------
    def add_node(self, x: float, y: float = 0.0, z: float = 0.0) -> Node:
        node = Node(len(self.nodes), float(x), float(y), float(z))
        self.nodes.append(node)
        return node

    def add_element(self, element):
        unknown = [n.id for n in element.nodes if n not in self.nodes]
        if unknown:
            raise ValueError(f"Element {element.id} references nodes not in this model: {unknown}")
        self.elements.append(element)
        return element

    def add_spring(self, start: Node, end: Node, stiffness: float) -> Spring:
        return self.add_element(Spring(len(self.elements), (start, end), stiffness))

    def add_truss(self, start: Node, end: Node, material: Material, section: CrossSection) -> LinearTruss:
        return self.add_element(LinearTruss(len(self.elements), (start, end), material, section))

    def add_beam(self, start: Node, end: Node, material: Material, section: CrossSection) -> Linear3DBeam:
        return self.add_element(Linear3DBeam(len(self.elements), (start, end), material, section))

    def add_triangle(
        self, n0: Node, n1: Node, n2: Node, material: Material, section: CrossSection
    ) -> LinearConstantStrainTriangle:
        return self.add_element(LinearConstantStrainTriangle(len(self.elements), (n0, n1, n2), material, section))

    # ------------------------------------------------------------------
    # Boundary conditions and loads
    # ------------------------------------------------------------------
    def _key(self, node: Node, dof: DegreeOfFreedom) -> NodalDegreeOfFreedom:
        if dof not in self.allowed_dofs:
            raise UnsupportedFreedomError(
                f"{dof.name} is not a freedom of a {self.model_type.name} model"
            )
        if node not in self.nodes:
            raise ValueError(f"Node {node.id} is not in this model")
        return NodalDegreeOfFreedom(node, dof)

    def constrain_node(self, node: Node, *dofs: DegreeOfFreedom) -> None:
        """Mark the given freedoms of node as constrained (prescribed displacement, default 0)."""
        for dof in dofs:
            self._constrained.add(self._key(node, dof))

    def fix_node(self, node: Node) -> None:
        """Constrain every freedom the model type allows."""
        self.constrain_node(node, *[d for d in ALL_DOFS if d in self.allowed_dofs])

    def is_constrained(self, key: NodalDegreeOfFreedom) -> bool:
        return key in self._constrained

    def apply_force(self, node: Node, dof: DegreeOfFreedom, value: float) -> None:
        """Add an applied force (or moment, for rotations) at a free freedom."""
        key = self._key(node, dof)
        self._forces[key] = self._forces.get(key, 0.0) + value

    def settle_node(self, node: Node, dof: DegreeOfFreedom, displacement: float) -> None:
        """Prescribe a non-zero displacement at a constrained freedom."""
        key = self._key(node, dof)
        if key not in self._constrained:
            raise ValueError(
                f"Node {node.id} {dof.name} must be constrained before a displacement can be prescribed"
            )
        self._settlements[key] = displacement
