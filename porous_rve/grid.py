"""Regular 2D lattice of material points."""

import math
from typing import Tuple

import numpy as np


def grid_shape(Lx: float, Ly: float, dx: float) -> Tuple[int, int]:
    """Number of lattice points (Nx, Ny) covering [0, Lx] x [0, Ly]."""
    Nx = int(math.floor(Lx / dx)) + 1
    Ny = int(math.floor(Ly / dx)) + 1
    return Nx, Ny


def ij_to_id(i: int, j: int, nx: int) -> int:
    return j * nx + i


def build_grid(Lx: float, Ly: float, dx: float) -> np.ndarray:
    """
    Build the lattice points in row-major order (j = y-direction, i = x-direction).

    Point ``j*Nx + i`` sits at ``(i*dx, j*dx)``. Inputs are assumed to be
    validated (all positive).

    Returns:
        (N, 2) float64 array of positions.
    """
    Nx, Ny = grid_shape(Lx, Ly, dx)

    xs = np.arange(Nx, dtype=np.float64) * dx
    ys = np.arange(Ny, dtype=np.float64) * dx
    X, Y = np.meshgrid(xs, ys, indexing="xy")
    return np.column_stack([X.ravel(), Y.ravel()])


def embed_3d(points: np.ndarray) -> np.ndarray:
    """Append z = 0 so 2D points can be written as 3D geometry."""
    points = np.asarray(points, dtype=np.float64)
    return np.column_stack([points, np.zeros(points.shape[0])])
