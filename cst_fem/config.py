# cst_fem/config.py
"""
Solver configuration and defaults.
"""

from dataclasses import dataclass


@dataclass
class SolverConfig:
    """Numerical tolerances and run options for an analysis."""

    # Element rejected when |det C| <= degenerate_tol * (longest edge)²
    degenerate_tol: float = 1e-12

    # Pivot rejected when <= pivot_tol * |diagonal entry it came from|
    pivot_tol: float = 1e-12

    # Zero the load entries of constrained DOFs before solving
    zero_constrained_loads: bool = True

    # tqdm progress bar over elements
    show_progress: bool = False

    # printf-style format of each value in the result file
    float_format: str = "%.6g"

    def __post_init__(self):
        if self.degenerate_tol < 0:
            raise ValueError("degenerate_tol must be non-negative")
        if self.pivot_tol < 0:
            raise ValueError("pivot_tol must be non-negative")
        try:
            self.float_format % 1.0
        except (TypeError, ValueError) as e:
            raise ValueError(f"float_format {self.float_format!r} cannot format a number") from e


DEFAULT_CONFIG = SolverConfig()
