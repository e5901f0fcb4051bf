# Mesh, TriangleElement, Constraint, NodalLoad, Model

from dataclasses import dataclass, field
from enum import IntFlag
from typing import List, Optional, Tuple

import numpy as np


class ModelError(ValueError):
    """Raised when a model is internally inconsistent (bad indices, bad material)."""
    pass


class Axis(IntFlag):
    """Constrained displacement components. Values match the input file codes."""
    X = 1
    Y = 2
    XY = 3


@dataclass(frozen=True, eq=False)
class Mesh:
    """
    Node coordinates. Node i sits at (nodes_x[i], nodes_y[i]).
    The coordinate arrays are read-only once the mesh is built.
    """
    nodes_x: np.ndarray
    nodes_y: np.ndarray

    def __post_init__(self):
        x = np.array(self.nodes_x, dtype=float).ravel()
        y = np.array(self.nodes_y, dtype=float).ravel()
        if x.shape != y.shape:
            raise ModelError(f"nodes_x has {x.size} entries but nodes_y has {y.size}")
        x.flags.writeable = False
        y.flags.writeable = False
        object.__setattr__(self, 'nodes_x', x)
        object.__setattr__(self, 'nodes_y', y)

    @property
    def n_nodes(self) -> int:
        return int(self.nodes_x.size)

    def coords(self, node_ids) -> Tuple[np.ndarray, np.ndarray]:
        """x and y coordinates of the given nodes, in the given order."""
        idx = np.asarray(node_ids, dtype=np.int64)
        return self.nodes_x[idx], self.nodes_y[idx]


@dataclass
class TriangleElement:
    """
    Constant-strain triangle: 3 nodes, 2 DOF per node (ux, uy).
    B (3×6 strain-displacement matrix) is cached by the stiffness computation
    and reused for stress recovery.
    """
    id: int
    node_ids: Tuple[int, int, int]
    B: Optional[np.ndarray] = field(default=None, repr=False, compare=False)

    def __post_init__(self):
        self.node_ids = tuple(int(n) for n in self.node_ids)
        if len(self.node_ids) != 3:
            raise ModelError(f"Element {self.id} needs 3 nodes, got {len(self.node_ids)}")


@dataclass(frozen=True)
class Constraint:
    node: int
    axis: Axis


@dataclass(frozen=True)
class NodalLoad:
    node: int
    fx: float
    fy: float


@dataclass
class Model:
    """Everything one analysis needs, passed explicitly down the pipeline."""
    poisson_ratio: float
    young_modulus: float
    mesh: Mesh
    elements: List[TriangleElement]
    constraints: List[Constraint] = field(default_factory=list)
    loads: List[NodalLoad] = field(default_factory=list)

    @property
    def n_nodes(self) -> int:
        return self.mesh.n_nodes

    def validate(self) -> None:
        """Raise ModelError describing the first inconsistency found."""
        nu, E = self.poisson_ratio, self.young_modulus
        if not (np.isfinite(nu) and -1.0 < nu < 1.0):
            raise ModelError(f"Poisson ratio must satisfy -1 < nu < 1, got {nu}")
        if not (np.isfinite(E) and E > 0.0):
            raise ModelError(f"Young's modulus must be positive, got {E}")

        n = self.n_nodes
        if n == 0:
            raise ModelError("Mesh has no nodes")
        if not (np.all(np.isfinite(self.mesh.nodes_x)) and np.all(np.isfinite(self.mesh.nodes_y))):
            raise ModelError("Node coordinates must be finite")
        if not self.elements:
            raise ModelError("Model has no elements")

        for e in self.elements:
            for node in e.node_ids:
                if not 0 <= node < n:
                    raise ModelError(f"Element {e.id} references node {node}, mesh has {n} nodes")
            if len(set(e.node_ids)) != 3:
                raise ModelError(f"Element {e.id} repeats a node: {e.node_ids}")

        for c in self.constraints:
            if not 0 <= c.node < n:
                raise ModelError(f"Constraint on node {c.node}, mesh has {n} nodes")
        for load in self.loads:
            if not 0 <= load.node < n:
                raise ModelError(f"Load on node {load.node}, mesh has {n} nodes")
