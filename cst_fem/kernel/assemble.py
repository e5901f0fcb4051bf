# cst_fem/kernel/assemble.py
"""
ASSEMBLY: Sparse Global Matrix Assembly
=======================================

PURPOSE:
--------
This module handles the assembly of element contributions into the global
stiffness matrix K and the global load vector F.

Each element emits its stiffness as a list of global-index-tagged entries
(row, col, value) - a "triplet" list. Assembly concatenates all triplet lists
and builds ONE sparse matrix in which entries sharing a coordinate are SUMMED:

    K[r, c] = Σ (values emitted at (r, c) by every element)

This accumulation is what couples neighbouring elements: a node shared by
three triangles receives stiffness from all three.

USAGE:
------
    triplets = []
    for element in elements:
        dof_map = dof.element_dof_map(element.node_ids)
        ke = ...  # 6×6 element stiffness
        triplets.append(element_triplets(dof_map, ke))

    K = assemble_global_K(ndof, triplets)   # scipy.sparse CSR, duplicates summed
"""

import numpy as np
import scipy.sparse as sp
from typing import Iterable, Sequence, Tuple

Triplets = Tuple[np.ndarray, np.ndarray, np.ndarray]


def element_triplets(dof_map: Sequence[int], ke: np.ndarray) -> Triplets:
    """
    Expand an element matrix into global (rows, cols, values) arrays.

    Entry ke[p, q] is emitted at (dof_map[p], dof_map[q]). For a CST with
    node_ids (n0, n1, n2) this is exactly the entry at
    (2·n_i + a, 2·n_j + b) with value ke[2i + a, 2j + b].

    Parameters:
    -----------
    dof_map : Sequence[int]
        Global DOF indices of the element (see DOFManager.element_dof_map)
    ke : np.ndarray
        Element matrix, shape (len(dof_map), len(dof_map))

    Returns:
    --------
    Tuple[np.ndarray, np.ndarray, np.ndarray]
        rows, cols, values - each of length len(dof_map)**2
    """
    dof_map = np.asarray(dof_map, dtype=np.int64)
    n = dof_map.size
    assert ke.shape == (n, n), \
        f"Element ke shape {ke.shape} doesn't match dof_map length {n}"

    rows = np.repeat(dof_map, n)
    cols = np.tile(dof_map, n)
    return rows, cols, np.asarray(ke, dtype=float).ravel()


def assemble_global_K(ndof: int, triplets: Iterable[Triplets]) -> sp.csr_matrix:
    """
    Assemble the sparse global stiffness matrix from element triplets.

    ALGORITHM:
    ----------
    rows   = concat(rows_e for each element)
    cols   = concat(cols_e for each element)
    values = concat(vals_e for each element)
    K = COO(values, (rows, cols)) → CSR     # duplicates are summed

    No entry is dropped and duplicate coordinates sum rather than overwrite,
    so the result does not depend on the order in which elements are listed.

    Parameters:
    -----------
    ndof : int
        Total number of DOFs (2 × n_nodes)
    triplets : Iterable[Tuple[np.ndarray, np.ndarray, np.ndarray]]
        One (rows, cols, values) tuple per element

    Returns:
    --------
    scipy.sparse.csr_matrix
        Global stiffness matrix K, shape (ndof, ndof).
        Symmetric positive semi-definite (becomes PD after constraints).
    """
    triplets = list(triplets)
    if triplets:
        rows = np.concatenate([t[0] for t in triplets])
        cols = np.concatenate([t[1] for t in triplets])
        vals = np.concatenate([t[2] for t in triplets])
    else:
        rows = np.zeros(0, dtype=np.int64)
        cols = np.zeros(0, dtype=np.int64)
        vals = np.zeros(0, dtype=float)

    if rows.size and (rows.min() < 0 or max(rows.max(), cols.max()) >= ndof):
        raise IndexError(f"Element entry outside the {ndof}×{ndof} global system")

    K = sp.coo_matrix((vals, (rows, cols)), shape=(ndof, ndof)).tocsr()
    K.sum_duplicates()
    return K


def set_nodal_load(
    F: np.ndarray,
    node_id: int,
    load_vector: Sequence[float],
    dof_per_node: int
) -> None:
    """
    Write a nodal load into the global load vector (in-place).

    The entries are OVERWRITTEN, not added: if the same node is loaded twice,
    the last call wins.

    Example:
    --------
    >>> F = np.zeros(8)  # 4 nodes, 2 DOF each
    >>> set_nodal_load(F, node_id=1, load_vector=[0.0, -1000.0], dof_per_node=2)
    >>> # Now F[3] = -1000 (downward force at node 1)
    """
    base_dof = dof_per_node * node_id
    for i, val in enumerate(load_vector):
        F[base_dof + i] = val


def assemble_load_vector(
    ndof: int,
    loads: Iterable[Tuple[int, Sequence[float]]],
    dof_per_node: int
) -> np.ndarray:
    """
    Build the dense global load vector from (node_id, [fx, fy]) pairs.

    Unloaded DOFs are zero. Duplicate entries for a node follow
    last-write-wins (see set_nodal_load).
    """
    F = np.zeros(ndof, dtype=float)
    for node_id, load_vector in loads:
        set_nodal_load(F, node_id, load_vector, dof_per_node)
    return F
