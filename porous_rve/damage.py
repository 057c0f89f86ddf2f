"""Local damage d(i) = Nb(i) / N(i) and its cell-wise average on the quad mesh."""

from typing import Dict

import numpy as np

from porous_rve.grid import ij_to_id


def compute_damage(n_total: np.ndarray, n_broken: np.ndarray) -> np.ndarray:
    """
    Damage per point. Isolated points (no neighbors) get 0.

    Raises:
        ValueError: If the two tallies are not the same length.
    """
    n_total = np.asarray(n_total)
    n_broken = np.asarray(n_broken)
    if n_total.shape != n_broken.shape:
        raise ValueError(f"Tally shapes differ: {n_total.shape} vs {n_broken.shape}")

    damage = np.zeros(n_total.shape[0], dtype=float)
    mask_total = n_total > 0
    damage[mask_total] = n_broken[mask_total] / n_total[mask_total]
    return damage


def damage_stats(damage: np.ndarray) -> Dict[str, float]:
    damage = np.asarray(damage, dtype=float)
    if damage.size == 0:
        return {"min": 0.0, "max": 0.0, "mean": 0.0}
    return {
        "min": float(damage.min()),
        "max": float(damage.max()),
        "mean": float(damage.mean()),
    }


def quad_cells(nx: int, ny: int) -> np.ndarray:
    """
    Quadrilateral cells of the lattice, counter-clockwise:
    (i,j), (i+1,j), (i+1,j+1), (i,j+1).

    Returns:
        ((nx-1)*(ny-1), 4) int64 array; empty when the lattice is a line or a point.
    """
    cells = []
    for j in range(ny - 1):
        for i in range(nx - 1):
            n0 = ij_to_id(i,     j,     nx)
            n1 = ij_to_id(i + 1, j,     nx)
            n2 = ij_to_id(i + 1, j + 1, nx)
            n3 = ij_to_id(i,     j + 1, nx)
            cells.append([n0, n1, n2, n3])
    return np.array(cells, dtype=np.int64).reshape(-1, 4)


def cell_damage(damage: np.ndarray, cells: np.ndarray) -> np.ndarray:
    """Mean of the four corner damages of each cell."""
    damage = np.asarray(damage, dtype=float)
    cells = np.asarray(cells, dtype=np.int64).reshape(-1, 4)
    if cells.shape[0] == 0:
        return np.empty(0, dtype=float)
    return 0.25 * damage[cells].sum(axis=1)
