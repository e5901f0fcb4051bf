# cst_fem/kernel - Element-agnostic FEM plumbing
"""
KERNEL: ASSEMBLY, CONSTRAINTS AND SOLVE
=======================================

This package contains the parts of the analysis that do not care what kind of
element produced the stiffness. They just need:
- A way to map (node_id, local_dof) → global_dof_index
- Element matrices tagged with their global DOFs
- A list of fixed DOFs
- A load vector

The CST element itself lives in cst_fem.elements; everything here works on
global indices and sparse matrices only.
"""

from .dof import DOFManager, DOF_2D_PLANE
from .assemble import element_triplets, assemble_global_K, assemble_load_vector
from .constraints import constrained_dofs, apply_constraints
from .solve import solve_linear, SingularSystemError

__all__ = [
    'DOFManager',
    'DOF_2D_PLANE',
    'element_triplets',
    'assemble_global_K',
    'assemble_load_vector',
    'constrained_dofs',
    'apply_constraints',
    'solve_linear',
    'SingularSystemError',
]
