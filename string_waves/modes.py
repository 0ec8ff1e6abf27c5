"""
Normal-mode analysis of the discretised string.

Builds the stiffness and mass matrices of exactly the operator the
integrator steps, then solves the generalised eigenvalue problem

    K @ phi = omega^2 M @ phi

Fixed strings keep only the interior points as degrees of freedom.
Free strings keep all points; their zero-frequency rigid body mode is
filtered out.
"""

from dataclasses import dataclass
import logging

import numpy as np
from scipy.linalg import eigh

from .errors import ConfigurationError
from .integrator import BoundaryPolicy

logger = logging.getLogger(__name__)


@dataclass
class ModalAnalysisResult:
    """Normal modes of a discretised string."""
    frequencies: np.ndarray    # Natural frequencies in Hz (ascending)
    omegas: np.ndarray         # Angular frequencies in rad/s
    mode_shapes: np.ndarray    # Mode shapes over all N points (N x n_modes)
    x: np.ndarray              # Point positions along the string

    def get_mode(self, mode_number: int) -> np.ndarray:
        """Shape of a mode (1-indexed, rigid body modes excluded)."""
        idx = mode_number - 1
        if idx < 0 or idx >= len(self.frequencies):
            raise ValueError(
                f"Mode {mode_number} not available. Have {len(self.frequencies)} modes.")
        return self.mode_shapes[:, idx]


def assemble_string_matrices(
    n_points: int,
    length: float,
    tension: float,
    mass=1.0,
    policy=BoundaryPolicy.FIXED
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Assemble the stiffness and (lumped) mass matrices.

    Args:
        n_points: Number of points on the string
        length: String length
        tension: String tension
        mass: Point mass, scalar or one value per point
        policy: Boundary policy; dispersive drag does not enter K or M

    Returns:
        K: Stiffness matrix
        M: Diagonal mass matrix
        dofs: Indices of the points that are degrees of freedom
    """
    if n_points < 3:
        raise ConfigurationError(f"String needs at least 3 points, got {n_points}")
    if length <= 0:
        raise ConfigurationError(f"String length must be positive, got {length}")

    policy = BoundaryPolicy.from_name(policy)
    masses = np.broadcast_to(np.asarray(mass, dtype=float), (n_points,))
    dx = length / (n_points - 1)
    k = tension / dx**2

    # Each segment between neighbours a, b contributes k * [[1, -1], [-1, 1]]
    K_full = np.zeros((n_points, n_points))
    for a in range(n_points - 1):
        b = a + 1
        K_full[a, a] += k
        K_full[b, b] += k
        K_full[a, b] -= k
        K_full[b, a] -= k

    if policy is BoundaryPolicy.FIXED:
        dofs = np.arange(1, n_points - 1)
    else:
        dofs = np.arange(n_points)

    K = K_full[np.ix_(dofs, dofs)]
    M = np.diag(masses[dofs])
    return K, M, dofs


def modal_analysis(
    n_points: int,
    length: float,
    tension: float,
    mass=1.0,
    policy=BoundaryPolicy.FIXED,
    n_modes: int = 10
) -> ModalAnalysisResult:
    """
    Compute the lowest normal modes of the discretised string.

    Returns:
        ModalAnalysisResult with frequencies and mode shapes over all
        points (fixed endpoints appear as zeros)
    """
    K, M, dofs = assemble_string_matrices(n_points, length, tension, mass, policy)
    eigenvalues, eigenvectors = eigh(K, M)

    # Filter out rigid body modes (eigenvalues close to zero)
    threshold = 1e-8 * max(float(np.max(np.abs(eigenvalues))), 1.0)
    mask = eigenvalues > threshold

    omegas = np.sqrt(eigenvalues[mask])
    modes = eigenvectors[:, mask]

    n_available = min(n_modes, len(omegas))
    omegas = omegas[:n_available]
    modes = modes[:, :n_available]

    shapes = np.zeros((n_points, n_available))
    shapes[dofs, :] = modes

    # Normalize mode shapes (max displacement = 1)
    for i in range(n_available):
        max_disp = np.max(np.abs(shapes[:, i]))
        if max_disp > 0:
            shapes[:, i] /= max_disp

    logger.debug("Modal analysis: %d points, %d modes", n_points, n_available)

    return ModalAnalysisResult(
        frequencies=omegas / (2 * np.pi),
        omegas=omegas,
        mode_shapes=shapes,
        x=np.linspace(0, length, n_points)
    )


# =============================================================================
# Analytical solutions for validation
# =============================================================================

def ideal_string_frequencies(
    length: float,
    tension: float,
    linear_density: float,
    n_modes: int = 3
) -> np.ndarray:
    """
    Frequencies of a continuous string fixed at both ends.

        f_n = n / (2 L) * sqrt(T / mu)

    The discrete string approaches these for modes well below the
    point count.
    """
    n = np.arange(1, n_modes + 1)
    return n / (2 * length) * np.sqrt(tension / linear_density)


def discrete_fixed_frequencies(
    n_points: int,
    length: float,
    tension: float,
    mass: float = 1.0,
    n_modes: int = 3
) -> np.ndarray:
    """
    Exact frequencies of the discrete fixed-end operator with uniform mass.

        omega_n = 2 sqrt(T / m) / dx * sin(n pi / (2 (N - 1)))
    """
    dx = length / (n_points - 1)
    n = np.arange(1, min(n_modes, n_points - 2) + 1)
    omegas = 2 * np.sqrt(tension / mass) / dx * np.sin(n * np.pi / (2 * (n_points - 1)))
    return omegas / (2 * np.pi)
