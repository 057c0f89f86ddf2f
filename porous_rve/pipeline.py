"""
End-to-end RVE generation:

    grid -> bonds within horizon -> random bond breaking -> damage -> files
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple, Union

import numpy as np

from porous_rve.bonds import count_bonds, find_bonds
from porous_rve.config import RVEParameters
from porous_rve.damage import cell_damage, compute_damage, damage_stats, quad_cells
from porous_rve.export import (
    point_cloud_filename,
    quad_mesh_basename,
    write_point_cloud_vtk,
    write_quad_mesh,
)
from porous_rve.grid import build_grid
from porous_rve.porosity import SeedLike, make_rng, sample_broken_bonds

logger = logging.getLogger(__name__)


@dataclass
class RVEResult:
    """One generated RVE, kept in memory so it can be written (again) anywhere."""
    params: RVEParameters
    points: np.ndarray      # (N, 2)
    bonds: np.ndarray       # (n_bonds, 2), i < j
    broken_mask: np.ndarray  # (n_bonds,)
    n_total: np.ndarray     # N(i)
    n_broken: np.ndarray    # Nb(i)
    damage: np.ndarray      # d(i)
    total_bonds: int
    broken_bonds: int

    @property
    def realized_porosity(self) -> float:
        return self.broken_bonds / self.total_bonds if self.total_bonds > 0 else 0.0

    @property
    def n_points(self) -> int:
        return self.points.shape[0]

    def write(self, out_dir: Union[str, Path], quad_mesh: bool = False) -> Dict[str, Path]:
        """
        Export the point cloud (and optionally the quad mesh) into out_dir.

        A failed write leaves the result intact, so this can be retried with
        another directory.

        Returns:
            Mapping "points" -> VTK path, plus "quad_vtk"/"quad_xdmf" when written.
        """
        out_dir = Path(out_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"Output directory: {out_dir.resolve()}")

        p = self.params
        written = {
            "points": write_point_cloud_vtk(
                out_dir / point_cloud_filename(p.Lx, p.phi), self.points, self.damage
            )
        }

        if quad_mesh:
            cells = quad_cells(p.nx, p.ny)
            files = write_quad_mesh(
                out_dir / quad_mesh_basename(p.Lx, p.phi),
                self.points, cells, cell_damage(self.damage, cells),
            )
            written.update({f"quad_{fmt}": path for fmt, path in files.items()})
        return written


def generate_rve(params: RVEParameters, seed: SeedLike = None, method: str = "auto",
                 workers: int = 1) -> RVEResult:
    """
    Validate the parameters and generate one pre-damaged RVE.

    Args:
        params: Domain parameters.
        seed: Random seed or Generator; None for a non-reproducible run.
        method: Neighbor search method, see ``porous_rve.bonds.find_bonds``.
        workers: Threads for the exhaustive neighbor scan.

    Raises:
        InvalidParameterError: Before any work is done, if params are invalid.
    """
    params.validate()
    rng = make_rng(seed)

    # -----------------------------
    # 1. Build regular grid of points
    # -----------------------------
    logger.info(f"Grid: Nx = {params.nx}, Ny = {params.ny}, total points N = {params.n_points}")
    points = build_grid(params.Lx, params.Ly, params.dx)

    # -----------------------------
    # 2. Compute neighbors and bonds within horizon
    # -----------------------------
    logger.info("Finding neighbors (this may take a bit for large grids)...")
    bonds = find_bonds(points, params.delta, method=method, workers=workers)
    n_total = count_bonds(bonds, points.shape[0])
    logger.info(f"Total bonds (before damage): {bonds.shape[0]}")

    # -----------------------------
    # 3. Randomly break bonds based on phi
    # -----------------------------
    sampled = sample_broken_bonds(bonds, params.phi, points.shape[0], rng)
    logger.info(f"Broken bonds: {sampled.broken_bonds}")
    logger.info(f"Realized global bond-porosity ~ {sampled.realized_porosity:.3f}")

    # -----------------------------
    # 4. Compute local damage per point
    # -----------------------------
    damage = compute_damage(n_total, sampled.n_broken)
    stats = damage_stats(damage)
    logger.info(f"Damage stats: min={stats['min']:.3f}, "
                f"max={stats['max']:.3f}, mean={stats['mean']:.3f}")

    return RVEResult(
        params=params,
        points=points,
        bonds=bonds,
        broken_mask=sampled.broken_mask,
        n_total=n_total,
        n_broken=sampled.n_broken,
        damage=damage,
        total_bonds=sampled.total_bonds,
        broken_bonds=sampled.broken_bonds,
    )


def run(params: RVEParameters, out_dir: Union[str, Path] = "rve_output",
        seed: SeedLike = None, method: str = "auto", workers: int = 1,
        quad_mesh: bool = False,
        post_process: Optional[Callable[[Path], object]] = None
        ) -> Tuple[RVEResult, Dict[str, Path]]:
    """Generate, write, then hand the point-cloud file to ``post_process`` (if given)."""
    result = generate_rve(params, seed=seed, method=method, workers=workers)
    written = result.write(out_dir, quad_mesh=quad_mesh)

    if post_process is not None:
        post_process(written["points"])
    return result, written
