# cst_fem/elements.py
"""
CST ELEMENT: Strain-Displacement and Stiffness Matrices
=======================================================

PURPOSE:
--------
This module computes, for one constant-strain triangle (CST):
- the 3×6 strain-displacement matrix B
- the 6×6 element stiffness matrix ke
- the global (row, col, value) entries the element contributes to K

ENGINEERING DERIVATION:
-----------------------
A CST interpolates displacement linearly over the triangle:

    u(x, y) = Σ Nᵢ(x, y) uᵢ,      Nᵢ(x, y) = aᵢ + bᵢ x + cᵢ y

The coefficients come from inverting the nodal coordinate matrix

    C = [ 1  x0  y0 ]         C⁻¹ = [ a0  a1  a2 ]
        [ 1  x1  y1 ]               [ b0  b1  b2 ]   (bᵢ = ∂Nᵢ/∂x)
        [ 1  x2  y2 ]               [ c0  c1  c2 ]   (cᵢ = ∂Nᵢ/∂y)

so the (constant) strain is ε = B · δ with, per local node i:

    B[:, 2i:2i+2] = [ bᵢ   0  ]
                    [ 0    cᵢ ]
                    [ cᵢ   bᵢ ]

Strain is constant over the element, so the stiffness integral reduces to

    ke = Bᵀ · D · B · area,      area = |det C| / 2

det C is twice the SIGNED area; taking its magnitude makes clockwise and
counter-clockwise node orderings give the same stiffness.

DEGENERATE ELEMENTS:
--------------------
Collinear (or coincident) nodes make det C ≈ 0 and C⁻¹ blow up. This is
checked BEFORE inverting, relative to the element size (det C scales with
length²), and reported as DegenerateElementError.
"""

import numpy as np
from typing import Tuple

from .model import Mesh, TriangleElement
from .kernel.dof import DOF_2D_PLANE, DOFManager
from .kernel.assemble import Triplets, element_triplets


class DegenerateElementError(ValueError):
    """Raised when a triangle has (near) zero area."""
    pass


def coordinate_matrix(mesh: Mesh, element: TriangleElement) -> np.ndarray:
    """
    Build C = [1 | x | y] for the element's nodes in local order 0, 1, 2.
    """
    x, y = mesh.coords(element.node_ids)
    return np.column_stack([np.ones(3), x, y])


def check_geometry(C: np.ndarray, element: TriangleElement, tol: float = 1e-12) -> float:
    """
    Return det C, raising DegenerateElementError for a (near) collinear triangle.

    Parameters:
    -----------
    C : np.ndarray
        Coordinate matrix from coordinate_matrix()
    element : TriangleElement
        Used for the error message only
    tol : float
        Relative tolerance: degenerate when |det C| <= tol × (longest edge)²

    Returns:
    --------
    float
        det C (twice the signed area)
    """
    pts = C[:, 1:]
    edges = pts - np.roll(pts, -1, axis=0)
    h2 = float(np.max(np.sum(edges ** 2, axis=1)))
    det = float(np.linalg.det(C))

    if not np.isfinite(det) or h2 == 0.0 or abs(det) <= tol * h2:
        raise DegenerateElementError(
            f"Element {element.id} (nodes {element.node_ids}) is degenerate: "
            f"area {abs(det) / 2.0:.3e} for longest edge {np.sqrt(h2):.3e}. "
            f"Nodes must not be collinear."
        )
    return det


def strain_displacement_matrix(inv_C: np.ndarray) -> np.ndarray:
    """
    Assemble the 3×6 B matrix from rows 1 (∂N/∂x) and 2 (∂N/∂y) of C⁻¹.

    DOF order of the columns: [u0x, u0y, u1x, u1y, u2x, u2y]
    """
    B = np.zeros((3, 6), dtype=float)
    for i in range(3):
        B[0, 2 * i + 0] = inv_C[1, i]
        B[1, 2 * i + 1] = inv_C[2, i]
        B[2, 2 * i + 0] = inv_C[2, i]
        B[2, 2 * i + 1] = inv_C[1, i]
    return B


def cst_stiffness(
    mesh: Mesh,
    element: TriangleElement,
    D: np.ndarray,
    tol: float = 1e-12
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Compute B and the 6×6 stiffness matrix of a CST element.

    Parameters:
    -----------
    mesh : Mesh
        Node coordinates
    element : TriangleElement
        The triangle (node_ids index into mesh)
    D : np.ndarray
        3×3 elasticity matrix (see material.plane_stress_matrix)
    tol : float
        Degeneracy tolerance passed to check_geometry()

    Returns:
    --------
    Tuple[np.ndarray, np.ndarray]
        (B, ke) with shapes (3, 6) and (6, 6); ke is symmetric

    Raises:
    -------
    DegenerateElementError
        If the nodes are collinear or coincident

    Example:
    --------
    >>> from cst_fem.material import plane_stress_matrix
    >>> mesh = Mesh([0.0, 1.0, 0.0], [0.0, 0.0, 1.0])
    >>> B, ke = cst_stiffness(mesh, TriangleElement(0, (0, 1, 2)), plane_stress_matrix(0.3, 2e5))
    >>> np.allclose(ke, ke.T)
    True
    """
    C = coordinate_matrix(mesh, element)
    det = check_geometry(C, element, tol)

    inv_C = np.linalg.inv(C)
    B = strain_displacement_matrix(inv_C)

    area = abs(det) / 2.0
    ke = B.T @ D @ B * area
    return B, ke


def compute_element(
    mesh: Mesh,
    element: TriangleElement,
    D: np.ndarray,
    dof: DOFManager = DOF_2D_PLANE,
    tol: float = 1e-12
) -> Triplets:
    """
    Compute an element's contribution to the global stiffness matrix.

    Caches B on the element (for stress recovery) and returns the element's
    global entries: ke[2i + a, 2j + b] at (2·node_ids[i] + a, 2·node_ids[j] + b)
    for every local node pair (i, j) and axis pair (a, b).

    Returns:
    --------
    Tuple[np.ndarray, np.ndarray, np.ndarray]
        rows, cols, values (36 entries each)
    """
    B, ke = cst_stiffness(mesh, element, D, tol)
    element.B = B
    return element_triplets(dof.element_dof_map(element.node_ids), ke)
