# element stresses, von Mises, nodal displacements, reactions, result tables

import numpy as np
import pandas as pd
import scipy.sparse as sp
from typing import Dict, Sequence

from .model import Mesh, TriangleElement
from .kernel.dof import DOF_2D_PLANE, DOFManager


def von_mises(sigma: np.ndarray) -> np.ndarray:
    """
    Von Mises equivalent stress for a plane stress state.

        σ_vm = sqrt(σx² - σx·σy + σy² + 3·τxy²)

    Parameters:
    -----------
    sigma : np.ndarray
        Either a single (σx, σy, τxy) vector, shape (3,), or one row per
        element, shape (n, 3)

    Returns:
    --------
    float or np.ndarray
        Scalar for a single state, shape (n,) array otherwise

    Examples:
    ---------
    >>> float(von_mises(np.array([-250.0, 0.0, 0.0])))  # uniaxial → |s|
    250.0
    """
    sigma = np.asarray(sigma, dtype=float)
    sx = sigma[..., 0]
    sy = sigma[..., 1]
    txy = sigma[..., 2]
    return np.sqrt(sx * sx - sx * sy + sy * sy + 3.0 * txy * txy)


def element_displacements(
    element: TriangleElement,
    d_global: np.ndarray,
    dof: DOFManager = DOF_2D_PLANE
) -> np.ndarray:
    """
    Gather the element's 6 displacement components from the global vector.

    Order: [u0x, u0y, u1x, u1y, u2x, u2y] in local node order.
    """
    return d_global[dof.element_dof_map(element.node_ids)]


def element_stress(
    element: TriangleElement,
    D: np.ndarray,
    d_global: np.ndarray,
    dof: DOFManager = DOF_2D_PLANE
) -> np.ndarray:
    """
    Stress (σx, σy, τxy) in one element: σ = D · B · δ.

    Uses the B matrix cached on the element by the stiffness computation.
    """
    if element.B is None:
        raise ValueError(
            f"Element {element.id} has no strain-displacement matrix; "
            f"compute its stiffness first"
        )
    delta = element_displacements(element, d_global, dof)
    return D @ element.B @ delta


def compute_element_stresses(
    elements: Sequence[TriangleElement],
    D: np.ndarray,
    d_global: np.ndarray,
    dof: DOFManager = DOF_2D_PLANE
) -> np.ndarray:
    """
    Stresses for all elements, shape (n_elements, 3).

    Row e belongs to elements[e]; the array is pre-sized and written by
    index, so output order always matches element input order.
    """
    stresses = np.zeros((len(elements), 3), dtype=float)
    for e, element in enumerate(elements):
        stresses[e] = element_stress(element, D, d_global, dof)
    return stresses


def compute_nodal_displacements(
    mesh: Mesh,
    d_global: np.ndarray,
    dof: DOFManager = DOF_2D_PLANE
) -> Dict[int, Dict[str, float]]:
    """
    Extract nodal displacements from the global displacement vector.

    Returns:
    --------
    Dict[int, Dict[str, float]]
        Mapping of node index to {'ux', 'uy', 'magnitude'}
    """
    result = {}
    for node_id in range(mesh.n_nodes):
        ux = d_global[dof.idx(node_id, 0)]
        uy = d_global[dof.idx(node_id, 1)]
        result[node_id] = {
            'ux': float(ux),
            'uy': float(uy),
            'magnitude': float(np.hypot(ux, uy)),
        }
    return result


def compute_reactions(
    K: sp.spmatrix,
    d_global: np.ndarray,
    F: np.ndarray,
    fixed_dofs: Sequence[int],
    dof: DOFManager = DOF_2D_PLANE
) -> Dict[int, Dict[str, float]]:
    """
    Support reactions R = K·d - F at constrained nodes.

    K must be the UNCONSTRAINED global stiffness matrix; F the applied loads.

    Returns:
    --------
    Dict[int, Dict[str, float]]
        Mapping of node index to {'Rx', 'Ry'}; a component that is not
        constrained at that node is reported as 0.0
    """
    R = K @ d_global - F
    fixed = set(int(i) for i in fixed_dofs)

    result = {}
    for node_id in sorted({i // dof.dof_per_node for i in fixed}):
        ix, iy = dof.idx(node_id, 0), dof.idx(node_id, 1)
        result[node_id] = {
            'Rx': float(R[ix]) if ix in fixed else 0.0,
            'Ry': float(R[iy]) if iy in fixed else 0.0,
        }
    return result


def nodes_table(
    mesh: Mesh,
    d_global: np.ndarray,
    dof: DOFManager = DOF_2D_PLANE
) -> pd.DataFrame:
    """One row per node: coordinates and displacements."""
    ux = d_global[0::dof.dof_per_node]
    uy = d_global[1::dof.dof_per_node]
    return pd.DataFrame({
        'node': np.arange(mesh.n_nodes),
        'x': mesh.nodes_x,
        'y': mesh.nodes_y,
        'ux': ux,
        'uy': uy,
        'magnitude': np.hypot(ux, uy),
    })


def elements_table(
    elements: Sequence[TriangleElement],
    stresses: np.ndarray,
) -> pd.DataFrame:
    """One row per element: node indices, stress components and von Mises."""
    conn = np.array([e.node_ids for e in elements], dtype=int).reshape(-1, 3)
    return pd.DataFrame({
        'element': [e.id for e in elements],
        'n0': conn[:, 0],
        'n1': conn[:, 1],
        'n2': conn[:, 2],
        'sx': stresses[:, 0],
        'sy': stresses[:, 1],
        'txy': stresses[:, 2],
        'von_mises': von_mises(stresses),
    })
