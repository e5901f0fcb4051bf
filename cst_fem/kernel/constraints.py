# cst_fem/kernel/constraints.py
"""
CONSTRAINTS: Zero-Displacement Boundary Conditions
==================================================

PURPOSE:
--------
Enforce u[idx] = 0 at constrained DOFs WITHOUT deleting rows or columns.

Deleting rows/columns (partitioning) would renumber the unknowns; keeping the
full 2N × 2N system means the displacement vector can be read back with the
same node → DOF convention everywhere. Instead we use row/column replacement:

    for every stored entry (r, c, v) of K:
        if r ∈ fixed or c ∈ fixed:
            v = 1.0 if r == c else 0.0

After this, row idx reads "1·u[idx] = F[idx]", and column idx no longer
couples u[idx] into any other equation. Symmetry and matrix size are kept.

PROPERTIES:
-----------
- Order independent: each fixed index only touches its own row/column.
- Idempotent: applying the same constraints twice changes nothing.
- Load entries are NOT modified here. For a true zero displacement the
  caller must zero F[idx] (the analysis pipeline does this).
"""

import numpy as np
import scipy.sparse as sp
from typing import Iterable, Sequence

from .dof import DOFManager


def constrained_dofs(constraints: Iterable, dof: DOFManager) -> np.ndarray:
    """
    Map nodal constraints to a sorted array of unique global DOF indices.

    Each constraint must provide ``node`` and ``axis``, where ``axis`` is a
    bit mask: bit ``a`` set means local DOF ``a`` of the node is fixed
    (1 = x, 2 = y, 3 = both for plane problems). Several constraints on the
    same node combine as the union of their masks.

    Examples:
    ---------
    >>> from cst_fem.model import Constraint, Axis
    >>> constrained_dofs([Constraint(0, Axis.XY), Constraint(2, Axis.Y)], DOFManager(2))
    array([0, 1, 5])
    """
    fixed = set()
    for constraint in constraints:
        mask = int(constraint.axis)
        for local_dof in range(dof.dof_per_node):
            if mask & (1 << local_dof):
                fixed.add(dof.idx(constraint.node, local_dof))
    return np.array(sorted(fixed), dtype=np.int64)


def apply_constraints(K: sp.spmatrix, fixed_dofs: Sequence[int]) -> sp.csr_matrix:
    """
    Return a constrained copy of K using row/column replacement.

    The input matrix is not modified. The transformation works directly on
    the coordinate list: membership of each entry's row and column in the
    fixed set is looked up with ``np.isin``.

    A fixed DOF that has no stored diagonal entry (a node no element
    references) gets a diagonal 1.0 so that fixing it fully is enough to
    make its equations solvable.

    Parameters:
    -----------
    K : scipy.sparse matrix
        Assembled global stiffness matrix (ndof × ndof)
    fixed_dofs : Sequence[int]
        Global DOF indices with zero prescribed displacement

    Returns:
    --------
    scipy.sparse.csr_matrix
        Constrained stiffness, same shape and stored structure as K
        (plus any inserted diagonal entries)
    """
    ndof = K.shape[0]
    fixed = np.unique(np.asarray(fixed_dofs, dtype=np.int64))
    if fixed.size and (fixed[0] < 0 or fixed[-1] >= ndof):
        raise IndexError(f"Constrained DOF outside the {ndof}×{ndof} global system")

    coo = sp.coo_matrix(K)
    coo.sum_duplicates()
    rows, cols = coo.row, coo.col
    data = coo.data.astype(float, copy=True)

    touched = np.isin(rows, fixed) | np.isin(cols, fixed)
    on_diag = touched & (rows == cols)
    data[touched] = 0.0
    data[on_diag] = 1.0

    # Fixed DOFs with no stored diagonal (isolated nodes)
    stored_diag = rows[on_diag]
    missing = np.setdiff1d(fixed, stored_diag)
    if missing.size:
        rows = np.concatenate([rows, missing])
        cols = np.concatenate([cols, missing])
        data = np.concatenate([data, np.ones(missing.size)])

    return sp.coo_matrix((data, (rows, cols)), shape=K.shape).tocsr()
