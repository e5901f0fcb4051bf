# cst_fem/kernel/dof.py
"""
DOF MANAGER: Degree of Freedom Indexing
=======================================

PURPOSE:
--------
This module handles the mapping from (node_id, local_dof) to global DOF indices.
For plane elasticity every node carries exactly two unknowns:

    local_dof 0 = ux  (x-displacement)
    local_dof 1 = uy  (y-displacement)

so node k's axis a lives at global index 2k + a. The same convention is used
by assembly, constraints, loads and displacement read-back, which is why it
lives in ONE place.

USAGE:
------
    dof = DOFManager(dof_per_node=2)

    # Global index for node 2, y-displacement
    global_idx = dof.idx(node_id=2, local_dof=1)  # → 5

    # DOF map of a triangle with nodes (0, 3, 4)
    dof.element_dof_map([0, 3, 4])  # → [0, 1, 6, 7, 8, 9]
"""

from dataclasses import dataclass
from typing import List, Sequence


@dataclass(frozen=True)
class DOFManager:
    """
    Manages degree-of-freedom indexing for the global system.

    This is the bridge between "node 5, y-displacement" and "global DOF index 11".

    Attributes:
    -----------
    dof_per_node : int
        Number of DOFs per node (2 for plane stress: ux, uy)

    Examples:
    ---------
    >>> dof = DOFManager(dof_per_node=2)
    >>> dof.idx(0, 1)  # Node 0, uy
    1
    >>> dof.idx(3, 0)  # Node 3, ux
    6
    >>> dof.ndof(4)    # Total DOFs for 4 nodes
    8
    """
    dof_per_node: int

    def idx(self, node_id: int, local_dof: int) -> int:
        """
        Get the global DOF index for a node's local DOF.

        Parameters:
        -----------
        node_id : int
            The node index (0-based)
        local_dof : int
            The local DOF index within the node (0 = ux, 1 = uy)

        Returns:
        --------
        int
            Global DOF index in the system matrices
        """
        return self.dof_per_node * node_id + local_dof

    def ndof(self, n_nodes: int) -> int:
        """Total number of DOFs (size of K) for a system with n_nodes."""
        return self.dof_per_node * n_nodes

    def node_dofs(self, node_id: int) -> List[int]:
        """
        Get all global DOF indices for a single node.

        Examples:
        ---------
        >>> DOFManager(dof_per_node=2).node_dofs(2)
        [4, 5]
        """
        base = self.dof_per_node * node_id
        return list(range(base, base + self.dof_per_node))

    def element_dof_map(self, node_ids: Sequence[int]) -> List[int]:
        """
        Get the DOF map for an element connecting several nodes.

        Local DOF 2i + a of the element (local node i, axis a) maps to
        entry 2i + a of the returned list. This is the index list used to
        scatter element matrices into K and to gather element displacements
        back out of the solution vector.

        Examples:
        ---------
        >>> DOFManager(dof_per_node=2).element_dof_map([0, 3, 4])
        [0, 1, 6, 7, 8, 9]
        """
        result = []
        for node_id in node_ids:
            result.extend(self.node_dofs(node_id))
        return result


# Pre-configured manager for plane elasticity
DOF_2D_PLANE = DOFManager(dof_per_node=2)   # ux, uy
