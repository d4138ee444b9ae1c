"""
Rotation angles that prepare a reference state exactly.

A real unit vector ``c`` over the reference and single-excitation basis
``(|ref⟩, |1⟩, ..., |N⟩)`` is written as a cascade of N angles:

    c[k] = cos θ_k · Π_{j<k} sin θ_j,        c[N] = ± Π_{j<N} sin θ_j

so ``θ_k = arccos(c[k] / ‖c[k:]‖)``. The arccos loses the sign of the
last coefficient, which is restored by negating the last angle.
"""

from __future__ import annotations

import numpy as np


def column_angles(coefficients: np.ndarray, n_sites: int) -> np.ndarray:
    """Angles for a single reference vector of length ``n_sites + 1``."""
    c = np.asarray(coefficients, dtype=float).ravel()
    if c.shape[0] != n_sites + 1:
        raise ValueError(
            f"Expected {n_sites + 1} coefficients for {n_sites} sites, got {c.shape[0]}"
        )
    angles = np.zeros(n_sites)
    for k in range(n_sites):
        partial_norm = np.linalg.norm(c[k:])
        if partial_norm > 0.0:
            angles[k] = np.arccos(np.clip(c[k] / partial_norm, -1.0, 1.0))
    if c[-1] < 0.0:
        angles[-1] *= -1.0
    return angles


def state_preparation_angles(coefficients: np.ndarray, n_sites: int) -> np.ndarray:
    """
    Angle matrix for every column of ``coefficients``.

    Parameters
    ----------
    coefficients : np.ndarray
        Matrix of shape ``(n_sites + 1, n_states)`` whose columns are
        reference states.
    n_sites : int
        Number of chromophores.

    Returns
    -------
    np.ndarray
        Matrix of shape ``(n_sites, n_states)``; column ``s`` holds the
        angles of reference state ``s``.
    """
    coefficients = np.asarray(coefficients, dtype=float)
    if coefficients.ndim != 2:
        raise ValueError(f"Expected a 2-D coefficient matrix, got {coefficients.ndim}-D")
    return np.column_stack(
        [column_angles(coefficients[:, s], n_sites) for s in range(coefficients.shape[1])]
    )


def reference_amplitudes(angles: np.ndarray) -> np.ndarray:
    """Inverse of :func:`column_angles`: coefficients prepared by ``angles``."""
    angles = np.asarray(angles, dtype=float).ravel()
    n_sites = angles.shape[0]
    c = np.zeros(n_sites + 1)
    running = 1.0
    for k in range(n_sites):
        c[k] = running * np.cos(angles[k])
        running *= np.sin(angles[k])
    c[n_sites] = running
    return c
