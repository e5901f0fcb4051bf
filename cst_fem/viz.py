# cst_fem/viz.py
"""
Visualization of CST results.

plot_von_mises draws one colour per element (CST stress is constant over
each triangle) on the deformed mesh, with the undeformed mesh outlined
underneath and constrained nodes marked.
"""

import os
from typing import Optional

import numpy as np
import matplotlib.pyplot as plt
import matplotlib.tri as mtri

from .analysis import AnalysisResult
from .model import Model


def auto_scale(model: Model, result: AnalysisResult, fraction: float = 0.1) -> float:
    """
    Deformation scale so the largest displacement is `fraction` of the mesh size.
    Returns 1.0 when nothing moves.
    """
    x, y = model.mesh.nodes_x, model.mesh.nodes_y
    size = max(np.ptp(x), np.ptp(y))
    max_disp = result.max_displacement
    if max_disp <= 0.0 or size <= 0.0:
        return 1.0
    return fraction * size / max_disp


def plot_von_mises(
    model: Model,
    result: AnalysisResult,
    outpath: str,
    scale: Optional[float] = None,
    title: str = "Von Mises stress",
    cmap: str = "viridis",
) -> None:
    """
    Save a von Mises contour plot of the (deformed) mesh to `outpath`.

    Parameters:
    -----------
    model : Model
        The analysed model
    result : AnalysisResult
        Result of run_analysis(model)
    outpath : str
        Image file to write (format from the extension)
    scale : float, optional
        Deformation magnification; auto_scale() when omitted, 0 for undeformed
    """
    if scale is None:
        scale = auto_scale(model, result)

    x, y = model.mesh.nodes_x, model.mesh.nodes_y
    u = result.displacements
    xd = x + scale * u[0::2]
    yd = y + scale * u[1::2]
    triangles = np.array([e.node_ids for e in model.elements], dtype=int)

    fig, ax = plt.subplots(figsize=(10, 7))

    undeformed = mtri.Triangulation(x, y, triangles)
    ax.triplot(undeformed, color='0.7', linewidth=0.6, linestyle='--', zorder=1)

    deformed = mtri.Triangulation(xd, yd, triangles)
    tpc = ax.tripcolor(deformed, facecolors=result.von_mises, edgecolors='k',
                       linewidth=0.3, cmap=cmap, zorder=2)
    fig.colorbar(tpc, ax=ax, label='Von Mises stress')

    # Constrained nodes
    support_nodes = np.unique(result.fixed_dofs // 2)
    if support_nodes.size:
        ax.plot(x[support_nodes], y[support_nodes], 'k^', markersize=8,
                label='Constrained node', zorder=3)
        ax.legend(loc='best', fontsize=9, framealpha=0.9)

    ax.set_xlabel('x')
    ax.set_ylabel('y')
    ax.set_title(f'{title} (deformation ×{scale:.3g})', fontsize=13, fontweight='bold')
    ax.set_aspect('equal')
    ax.grid(True, alpha=0.3, linestyle='--')

    try:
        os.makedirs(os.path.dirname(outpath) if os.path.dirname(outpath) else '.', exist_ok=True)
        fig.tight_layout()
        fig.savefig(outpath, dpi=150, bbox_inches='tight')
    finally:
        plt.close(fig)

    print(f"Von Mises plot saved to: {outpath}")
