"""
2D nanoporous RVE generator (bond-based pre-damage).

Builds a regular lattice of material points, finds the peridynamic bonds
inside the horizon delta = m*dx, breaks each bond with probability phi and
reports the per-point damage d(i) = Nb(i) / N(i).
"""

from porous_rve.config import InvalidParameterError, RVEParameters, load_parameters
from porous_rve.pipeline import RVEResult, generate_rve, run

__all__ = [
    "InvalidParameterError",
    "RVEParameters",
    "RVEResult",
    "generate_rve",
    "load_parameters",
    "run",
]

__version__ = "0.2.0"
