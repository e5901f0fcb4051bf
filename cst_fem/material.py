# material.py - Plane-stress constitutive matrix

import numpy as np


def plane_stress_matrix(poisson_ratio: float, young_modulus: float) -> np.ndarray:
    """
    Elasticity matrix D for an isotropic material in plane stress.

    Relates engineering strain to stress:

        [σx, σy, τxy]ᵀ = D · [εx, εy, γxy]ᵀ

        D = E / (1 - ν²) × [ 1   ν   0       ]
                           [ ν   1   0       ]
                           [ 0   0  (1-ν)/2  ]

    Parameters:
    -----------
    poisson_ratio : float
        ν, must satisfy -1 < ν < 1 (checked by Model.validate, not here)
    young_modulus : float
        E, in stress units (e.g. MPa)

    Returns:
    --------
    np.ndarray
        Shape (3, 3), symmetric
    """
    nu = poisson_ratio
    D = np.array([
        [1.0,  nu,   0.0],
        [nu,   1.0,  0.0],
        [0.0,  0.0,  (1.0 - nu) / 2.0],
    ], dtype=float)
    return D * (young_modulus / (1.0 - nu ** 2))
