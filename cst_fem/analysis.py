# cst_fem/analysis.py
"""
ANALYSIS: The CST Pipeline End to End
=====================================

    Model ──► D (material) ──► element stiffness + B ──► assemble K, F
          ──► apply constraints ──► sparse solve ──► stresses, von Mises

Every stage receives what it needs explicitly; nothing is kept in module
state, so two models can be analysed side by side.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np
import scipy.sparse as sp
from tqdm import tqdm

from .config import DEFAULT_CONFIG, SolverConfig
from .elements import compute_element
from .material import plane_stress_matrix
from .model import Model
from .post import compute_element_stresses, compute_reactions, von_mises
from .kernel.dof import DOF_2D_PLANE
from .kernel.assemble import assemble_global_K, assemble_load_vector
from .kernel.constraints import apply_constraints, constrained_dofs
from .kernel.solve import solve_linear

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    """
    Output of run_analysis().

    displacements : np.ndarray
        (2N,) global displacement vector, node k → (u[2k], u[2k+1])
    stresses : np.ndarray
        (n_elements, 3) rows of (σx, σy, τxy), element input order
    von_mises : np.ndarray
        (n_elements,) equivalent stress, element input order
    loads : np.ndarray
        (2N,) load vector actually solved against
    fixed_dofs : np.ndarray
        Sorted constrained DOF indices
    reactions : Dict[int, Dict[str, float]]
        Support reactions per constrained node ({'Rx', 'Ry'}), balancing
        every applied load including any discarded at constrained DOFs
    stiffness : scipy.sparse.csr_matrix
        Assembled global stiffness BEFORE constraints
    D : np.ndarray
        3×3 elasticity matrix
    """
    displacements: np.ndarray
    stresses: np.ndarray
    von_mises: np.ndarray
    loads: np.ndarray
    fixed_dofs: np.ndarray
    reactions: Dict[int, Dict[str, float]]
    stiffness: sp.csr_matrix
    D: np.ndarray

    @property
    def max_displacement(self) -> float:
        """Largest nodal displacement magnitude."""
        if self.displacements.size == 0:
            return 0.0
        return float(np.max(np.hypot(self.displacements[0::2], self.displacements[1::2])))

    @property
    def max_von_mises(self) -> float:
        return float(np.max(self.von_mises)) if self.von_mises.size else 0.0


def run_analysis(model: Model, config: Optional[SolverConfig] = None) -> AnalysisResult:
    """
    Run the full static analysis of a CST model.

    Parameters:
    -----------
    model : Model
        Mesh, elements, material, constraints and loads
    config : SolverConfig, optional
        Tolerances and options (DEFAULT_CONFIG if omitted)

    Returns:
    --------
    AnalysisResult

    Raises:
    -------
    ModelError
        Inconsistent model (bad indices or material constants)
    DegenerateElementError
        A triangle with collinear nodes
    SingularSystemError
        Constraints do not remove rigid-body motion, or an unconstrained
        node is not attached to any element
    """
    config = config or DEFAULT_CONFIG
    model.validate()

    dof = DOF_2D_PLANE
    ndof = dof.ndof(model.n_nodes)
    logger.info("Analysing %d nodes, %d elements (%d DOFs)",
                model.n_nodes, len(model.elements), ndof)

    D = plane_stress_matrix(model.poisson_ratio, model.young_modulus)

    # Element stiffness (caches B on each element)
    elements = model.elements
    if config.show_progress:
        elements = tqdm(elements, desc="Element stiffness")
    triplets = [
        compute_element(model.mesh, element, D, dof, config.degenerate_tol)
        for element in elements
    ]

    K = assemble_global_K(ndof, triplets)
    logger.debug("Assembled K with %d stored entries", K.nnz)

    F = assemble_load_vector(
        ndof, ((load.node, (load.fx, load.fy)) for load in model.loads), dof.dof_per_node
    )

    applied = F.copy()
    fixed = constrained_dofs(model.constraints, dof)
    if config.zero_constrained_loads and fixed.size:
        discarded = fixed[F[fixed] != 0.0]
        if discarded.size:
            logger.warning("Discarding loads on constrained DOFs %s", discarded.tolist())
        F[fixed] = 0.0

    K_c = apply_constraints(K, fixed)
    logger.info("Applied %d constrained DOFs, solving", fixed.size)

    u = solve_linear(K_c, F, pivot_tol=config.pivot_tol)

    stresses = compute_element_stresses(model.elements, D, u, dof)
    vm = von_mises(stresses)
    reactions = compute_reactions(K, u, applied, fixed, dof)

    logger.info("Solved: max |u| = %.4g, max von Mises = %.4g",
                float(np.max(np.abs(u))) if u.size else 0.0,
                float(np.max(vm)) if vm.size else 0.0)

    return AnalysisResult(
        displacements=u,
        stresses=stresses,
        von_mises=vm,
        loads=F,
        fixed_dofs=fixed,
        reactions=reactions,
        stiffness=K,
        D=D,
    )
