# File: tests/test_solve.py
"""
Tests for the sparse solver and singularity detection.
"""

import numpy as np
import pytest
import scipy.sparse as sp

from cst_fem.kernel.solve import SingularSystemError, solve_linear


def test_solves_spd_system():
    rng = np.random.default_rng(1)
    A = rng.normal(size=(10, 10))
    K = sp.csr_matrix(A @ A.T + 10.0 * np.eye(10))
    u_true = rng.normal(size=10)

    u = solve_linear(K, K @ u_true)
    np.testing.assert_allclose(u, u_true, rtol=1e-10, atol=1e-12)


def test_tridiagonal_system():
    n = 50
    K = sp.diags([-np.ones(n - 1), 2.0 * np.ones(n), -np.ones(n - 1)], [-1, 0, 1], format="csr")
    F = np.ones(n)
    u = solve_linear(K, F)
    np.testing.assert_allclose(K @ u, F, atol=1e-10)


def test_zero_load_gives_zero_displacement():
    K = sp.csr_matrix(np.array([[4.0, -1.0], [-1.0, 3.0]]))
    np.testing.assert_array_equal(solve_linear(K, np.zeros(2)), [0.0, 0.0])


def test_singular_matrix_rejected():
    """Free-free spring: rigid translation is a null mode."""
    K = sp.csr_matrix(np.array([[1.0, -1.0], [-1.0, 1.0]]))
    with pytest.raises(SingularSystemError):
        solve_linear(K, np.array([1.0, -1.0]))


def test_zero_stiffness_dofs_named_in_error():
    K = sp.csr_matrix(np.array([
        [2.0, -1.0, 0.0],
        [-1.0, 2.0, 0.0],
        [0.0, 0.0, 0.0],
    ]))
    with pytest.raises(SingularSystemError, match=r"\[2\]"):
        solve_linear(K, np.zeros(3))


def test_indefinite_matrix_rejected():
    K = sp.csr_matrix(np.diag([1.0, -1.0]))
    with pytest.raises(SingularSystemError):
        solve_linear(K, np.ones(2))


def test_shape_mismatch_rejected():
    K = sp.identity(3, format="csr")
    with pytest.raises(ValueError):
        solve_linear(K, np.ones(4))


def test_non_square_rejected():
    K = sp.csr_matrix(np.ones((2, 3)))
    with pytest.raises(ValueError):
        solve_linear(K, np.ones(2))


def test_empty_system():
    u = solve_linear(sp.csr_matrix((0, 0)), np.zeros(0))
    assert u.shape == (0,)


def test_unit_pivots_accepted_next_to_stiff_entries():
    """
    A constrained DOF (diagonal 1.0) beside DOFs with stiffness far above
    1/pivot_tol is still a well-posed system.
    """
    K = sp.csr_matrix(np.array([
        [1.0, 0.0, 0.0],
        [0.0, 4.0e15, -1.0e15],
        [0.0, -1.0e15, 2.0e15],
    ]))
    F = np.array([0.0, 1.0e15, 0.0])
    u = solve_linear(K, F)
    np.testing.assert_allclose(K @ u, F, rtol=1e-12, atol=1e-3)
    assert u[0] == 0.0
