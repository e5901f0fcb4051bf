# cst_fem/kernel/solve.py
"""Sparse symmetric linear solve with singularity detection."""

import logging

import numpy as np
import scipy.sparse as sp
import scipy.sparse.linalg as spla

logger = logging.getLogger(__name__)


class SingularSystemError(RuntimeError):
    """Raised when the constrained system cannot be solved (rigid-body modes or isolated DOFs)."""
    pass


def _unstiffened_dofs(K: sp.spmatrix) -> np.ndarray:
    """DOFs whose diagonal stiffness is zero (nodes no element touches)."""
    return np.flatnonzero(K.diagonal() == 0.0)


def _pivot_diagonal(K: sp.spmatrix, lu) -> np.ndarray:
    """
    Entries of K that land on the diagonal of the permuted matrix Pr·K·Pc,
    in the order SuperLU eliminates them (the order of lu.U.diagonal()).
    """
    rows = np.argsort(lu.perm_r)
    cols = np.argsort(lu.perm_c)
    return np.asarray(K[rows, cols], dtype=float).ravel()


def solve_linear(
    K: sp.spmatrix,
    F: np.ndarray,
    pivot_tol: float = 1e-12
) -> np.ndarray:
    """
    Solve K·u = F for a constrained, symmetric positive-definite sparse K.

    The factorization is SuperLU run in its symmetric mode: a symmetric
    fill-reducing ordering (MMD on Aᵀ+A) with pure diagonal pivoting. For an
    SPD matrix this is the LDLᵀ (Cholesky-family) factorization, and the
    diagonal of U holds the pivots D.

    Args:
        K: Constrained global stiffness matrix (ndof x ndof)
        F: Global load vector (ndof,)
        pivot_tol: A pivot at or below pivot_tol times the diagonal entry it was
            eliminated from marks the system singular

    Returns:
        u: Displacement vector (ndof,)

    Raises:
        SingularSystemError: If K is singular or not positive definite
            (insufficient constraints, or a node no element references)
        ValueError: If K is not square or F does not match K
    """
    K = sp.csc_matrix(K, dtype=float)
    F = np.asarray(F, dtype=float)
    ndof = K.shape[0]

    if K.shape != (ndof, ndof):
        raise ValueError(f"Stiffness matrix must be square, got shape {K.shape}")
    if F.shape != (ndof,):
        raise ValueError(f"Load vector shape {F.shape} doesn't match system size {ndof}")
    if ndof == 0:
        return np.zeros(0, dtype=float)

    isolated = _unstiffened_dofs(K)
    hint = f" DOFs with no stiffness: {isolated.tolist()}." if isolated.size else ""

    try:
        lu = spla.splu(K, permc_spec="MMD_AT_PLUS_A", diag_pivot_thresh=0.0)
    except RuntimeError as e:
        raise SingularSystemError(
            f"Singular stiffness matrix ({e}). Check constraints.{hint}"
        ) from e

    # Each pivot is judged against the diagonal entry it was eliminated from
    pivots = lu.U.diagonal()
    reference = np.abs(_pivot_diagonal(K, lu))
    ratio = pivots / np.where(reference > 0.0, reference, 1.0)
    bad = np.flatnonzero(~(ratio > pivot_tol))
    logger.debug("Factorized %d DOFs, min relative pivot %.3e (tolerance %.3e)",
                 ndof, float(np.min(ratio)), pivot_tol)
    if bad.size:
        raise SingularSystemError(
            f"Unstable system: {bad.size} pivot(s) <= {pivot_tol:.2e} x their diagonal "
            f"(min relative pivot {float(np.min(ratio)):.2e}). Check constraints remove "
            f"rigid-body motion.{hint}"
        )

    u = lu.solve(F)
    if not np.all(np.isfinite(u)):
        raise SingularSystemError(f"Solve produced non-finite displacements.{hint}")
    return u
