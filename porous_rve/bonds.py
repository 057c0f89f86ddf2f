"""
Neighbor search and bond bookkeeping.

Two particles i < j share a bond when

    (xi - xj)**2 + (yi - yj)**2 <= delta**2

(inclusive boundary). Bonds are returned as an (n_bonds, 2) int64 array
sorted by i, then j. That canonical order is what the porosity sampler
consumes, so every search method and worker count yields the same bonds in
the same order.
"""

import logging
from concurrent.futures import ThreadPoolExecutor

import numpy as np
from scipy.spatial import cKDTree

logger = logging.getLogger(__name__)

METHODS = ("auto", "brute", "kdtree")

# Above this many points "auto" switches from the exhaustive scan to the kd-tree
AUTO_BRUTE_MAX_POINTS = 2000

# Max number of pair distances held in memory per block of the exhaustive scan
BLOCK_ELEMENTS = 1 << 20


def _empty_bonds() -> np.ndarray:
    return np.empty((0, 2), dtype=np.int64)


def _scan_block(points: np.ndarray, delta2: float, start: int, stop: int) -> np.ndarray:
    """Bonds (i, j) with start <= i < stop and j > i."""
    xi = points[start:stop, 0][:, None]
    yi = points[start:stop, 1][:, None]
    xj = points[start:, 0][None, :]
    yj = points[start:, 1][None, :]

    dx_ = xi - xj
    dy_ = yi - yj
    within = dx_ * dx_ + dy_ * dy_ <= delta2

    # column c is particle start + c, row r is particle start + r
    rows = np.arange(stop - start)[:, None]
    cols = np.arange(points.shape[0] - start)[None, :]
    within &= cols > rows

    r, c = np.nonzero(within)
    return np.column_stack([r + start, c + start]).astype(np.int64)


def _brute_force_bonds(points: np.ndarray, delta2: float, workers: int) -> np.ndarray:
    n = points.shape[0]
    if n < 2:
        return _empty_bonds()

    rows_per_block = max(1, BLOCK_ELEMENTS // n)
    blocks = [(s, min(s + rows_per_block, n)) for s in range(0, n, rows_per_block)]
    logger.debug(f"Exhaustive scan: {len(blocks)} blocks of <= {rows_per_block} rows, "
                 f"{workers} worker(s)")

    if workers > 1 and len(blocks) > 1:
        # numpy releases the GIL inside the block kernels; map keeps block order
        with ThreadPoolExecutor(max_workers=workers) as pool:
            parts = list(pool.map(lambda b: _scan_block(points, delta2, *b), blocks))
    else:
        parts = [_scan_block(points, delta2, s, e) for s, e in blocks]

    return np.concatenate(parts, axis=0)


def _kdtree_bonds(points: np.ndarray, delta: float, delta2: float) -> np.ndarray:
    if points.shape[0] < 2:
        return _empty_bonds()

    tree = cKDTree(points)
    # pad the radius, then apply the exact squared-distance test below
    pairs = tree.query_pairs(delta * (1.0 + 1e-9), output_type="ndarray")
    pairs = np.asarray(pairs, dtype=np.int64).reshape(-1, 2)
    if pairs.shape[0] == 0:
        return _empty_bonds()

    diff = points[pairs[:, 0]] - points[pairs[:, 1]]
    d2 = diff[:, 0] * diff[:, 0] + diff[:, 1] * diff[:, 1]
    pairs = pairs[d2 <= delta2]

    order = np.lexsort((pairs[:, 1], pairs[:, 0]))
    return pairs[order]


def find_bonds(points: np.ndarray, delta: float, method: str = "auto",
               workers: int = 1) -> np.ndarray:
    """
    Find every bond between the given points.

    Args:
        points: (N, 2) positions.
        delta: Horizon radius (> 0).
        method: "brute" (exhaustive pair scan), "kdtree" (scipy cKDTree)
            or "auto" (brute for small N, kd-tree otherwise).
        workers: Threads used by the exhaustive scan.

    Returns:
        (n_bonds, 2) int64 array of (i, j), i < j, sorted by i then j.
    """
    if method not in METHODS:
        raise ValueError(f"Unknown neighbor search method {method!r}; "
                         f"expected one of {', '.join(METHODS)}")
    if workers < 1:
        raise ValueError(f"workers must be >= 1 (got {workers})")

    points = np.asarray(points, dtype=np.float64)
    if points.ndim != 2 or points.shape[1] != 2:
        raise ValueError(f"points must have shape (N, 2), got {points.shape}")

    delta2 = delta * delta
    if method == "auto":
        method = "brute" if points.shape[0] <= AUTO_BRUTE_MAX_POINTS else "kdtree"

    if method == "brute":
        return _brute_force_bonds(points, delta2, workers)
    return _kdtree_bonds(points, delta, delta2)


def count_bonds(bonds: np.ndarray, n_points: int) -> np.ndarray:
    """N(i): number of bonds incident to each point (both endpoints count)."""
    bonds = np.asarray(bonds, dtype=np.int64).reshape(-1, 2)
    return np.bincount(bonds.ravel(), minlength=n_points).astype(np.int64)
