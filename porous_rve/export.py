"""
Writers for the generated RVE.

* Point cloud: legacy ASCII VTK POLYDATA, one vertex cell per point and a
  point scalar "damage". Opens directly in ParaView.
* Quad mesh: lattice quads with cell-wise damage, written with meshio as
  VTK and XDMF (+HDF5) for dolfinx.
"""

import logging
import os
from pathlib import Path
from typing import Dict, Iterable, Union

import meshio
import numpy as np

from porous_rve.grid import embed_3d

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

VTK_TITLE = "Peridynamic porous pre-damage"


def point_cloud_filename(Lx: float, phi: float) -> str:
    """e.g. porosity_Lx1_phi30.vtk (both values truncated to int)."""
    return f"porosity_Lx{int(Lx)}_phi{int(phi * 100)}.vtk"


def quad_mesh_basename(Lx: float, phi: float) -> str:
    return f"rve_quad_mesh_Lx{Lx:.2f}_phi{int(phi * 100)}"


def write_point_cloud_vtk(path: PathLike, points: np.ndarray, damage: np.ndarray) -> Path:
    """
    Write the point cloud and its damage field as legacy ASCII VTK.

    Args:
        path: Output file.
        points: (N, 2) or (N, 3) positions; z is always written as 0.
        damage: (N,) damage values in point order.

    Returns:
        The written path.

    Raises:
        ValueError: If points and damage have different lengths.
        OSError: If the file cannot be written.
    """
    path = Path(path)
    points = np.asarray(points, dtype=np.float64)
    damage = np.asarray(damage, dtype=np.float64)
    if points.ndim != 2 or points.shape[1] not in (2, 3):
        raise ValueError(f"points must have shape (N, 2) or (N, 3), got {points.shape}")
    if damage.shape != (points.shape[0],):
        raise ValueError(f"damage must have shape ({points.shape[0]},), got {damage.shape}")

    N = points.shape[0]
    lines = [
        "# vtk DataFile Version 3.0",
        VTK_TITLE,
        "ASCII",
        "DATASET POLYDATA",
        f"POINTS {N} float",
    ]
    # z = 0 for 2D surface
    lines.extend(f"{x:.6f} {y:.6f} {0.0:.6f}" for x, y in points[:, :2])

    # Each point as a separate vertex cell
    lines.append(f"VERTICES {N} {2 * N}")
    lines.extend(f"1 {i}" for i in range(N))

    lines.append(f"POINT_DATA {N}")
    lines.append("SCALARS damage float 1")
    lines.append("LOOKUP_TABLE default")
    lines.extend(f"{d:.6f}" for d in damage)

    with path.open("w", encoding="ascii", newline="\n") as vtk:
        vtk.write("\n".join(lines))
        vtk.write("\n")

    logger.info(f"Wrote point-cloud VTK: {path}")
    return path


def write_quad_mesh(base: PathLike, points: np.ndarray, cells: np.ndarray,
                    cell_damage: np.ndarray,
                    formats: Iterable[str] = ("vtk", "xdmf")) -> Dict[str, Path]:
    """
    Write the quad mesh with cell_data["damage"] via meshio.

    Args:
        base: Output path without extension.
        points: (N, 2) or (N, 3) node positions.
        cells: (n_cells, 4) node ids per quad.
        cell_damage: (n_cells,) damage per quad.
        formats: File extensions to write ("vtk", "xdmf", or any meshio format).

    Returns:
        Mapping of format -> written path. Empty if there are no cells.
    """
    cells = np.asarray(cells, dtype=int).reshape(-1, 4)
    cell_damage = np.asarray(cell_damage, dtype=float)
    if cells.shape[0] == 0:
        logger.warning("Grid has fewer than 2 points along x or y; no quad mesh written.")
        return {}
    if cell_damage.shape != (cells.shape[0],):
        raise ValueError(f"cell_damage must have shape ({cells.shape[0]},), "
                         f"got {cell_damage.shape}")

    points = np.asarray(points, dtype=np.float64)
    if points.shape[1] == 2:
        points = embed_3d(points)

    quad_mesh = meshio.Mesh(
        points=points,
        cells=[("quad", cells)],
        cell_data={"damage": [cell_damage]},
    )

    written = {}
    for fmt in formats:
        filename = Path(f"{os.fspath(base)}.{fmt}")
        meshio.write(filename, quad_mesh)
        logger.info(f"Wrote quad mesh {fmt.upper()}: {filename}")
        written[fmt] = filename
    return written
