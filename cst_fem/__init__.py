# cst_fem - 2D plane-stress FEM with constant-strain triangles
"""
CST-FEM: Plane Elasticity with Constant-Strain Triangles
========================================================

Given a triangulated mesh, material constants, zero-displacement constraints
and nodal loads, this package computes nodal displacements and the von Mises
stress of every element.

ARCHITECTURE:
-------------
    kernel/         Element-agnostic core (DOF indexing, sparse assembly,
                    constraints, sparse solve)
    material.py     Plane-stress elasticity matrix D
    model.py        Mesh, TriangleElement, Constraint, NodalLoad, Model
    elements.py     CST strain-displacement and stiffness matrices
    post.py         Stress recovery, von Mises, reactions, result tables
    analysis.py     The pipeline: run_analysis(model) -> AnalysisResult
    io.py           Text input format and result file
    viz.py          Von Mises plot
    cli.py          `cst-fem <input> <output>`

QUICK START:
------------
    from cst_fem import load_model, run_analysis

    model = load_model("plate.txt")
    result = run_analysis(model)
    result.displacements   # (2N,) node k -> (u[2k], u[2k+1])
    result.von_mises       # one value per element
"""

from .kernel import DOFManager, SingularSystemError
from .config import SolverConfig, DEFAULT_CONFIG
from .material import plane_stress_matrix
from .model import Axis, Constraint, Mesh, Model, ModelError, NodalLoad, TriangleElement
from .elements import DegenerateElementError, cst_stiffness
from .post import von_mises
from .analysis import AnalysisResult, run_analysis
from .io import ParseError, load_model, parse_model, read_model, write_results

__version__ = "0.1.0"
