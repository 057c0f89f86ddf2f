"""
Random bond breaking (uniform porosity).

Each bond gets one uniform draw r in [0, 1); r < phi breaks it. The expected
fraction of broken bonds is phi, the realized one fluctuates around it.
"""

from dataclasses import dataclass
from typing import Optional, Union

import numpy as np

SeedLike = Union[None, int, np.random.Generator]


@dataclass
class PorosityResult:
    broken_mask: np.ndarray  # (n_bonds,) bool, True => bond is broken
    n_broken: np.ndarray     # (N,) broken bonds per point, Nb(i)
    total_bonds: int
    broken_bonds: int

    @property
    def realized_porosity(self) -> float:
        if self.total_bonds == 0:
            return 0.0
        return self.broken_bonds / self.total_bonds


def make_rng(seed: SeedLike = None) -> np.random.Generator:
    """
    Random stream for the sampler.

    None gives a fresh, OS-seeded generator (a different RVE on every run);
    an int gives a reproducible stream; a Generator is used as is.
    """
    if isinstance(seed, np.random.Generator):
        return seed
    return np.random.default_rng(seed)


def sample_broken_bonds(bonds: np.ndarray, phi: float, n_points: int,
                        rng: Optional[np.random.Generator] = None) -> PorosityResult:
    """
    Break bonds with probability phi.

    One random number is drawn per bond, in the order the bonds are given,
    from the single stream ``rng``.
    """
    bonds = np.asarray(bonds, dtype=np.int64).reshape(-1, 2)
    rng = make_rng(rng)

    total_bonds = bonds.shape[0]
    r = rng.random(total_bonds)  # one random number per bond in [0,1)

    broken_mask = r < phi
    broken_pairs = bonds[broken_mask]
    n_broken = np.bincount(broken_pairs.ravel(), minlength=n_points).astype(np.int64)

    return PorosityResult(
        broken_mask=broken_mask,
        n_broken=n_broken,
        total_bonds=int(total_bonds),
        broken_bonds=int(broken_pairs.shape[0]),
    )
