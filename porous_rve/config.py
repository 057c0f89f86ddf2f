"""
RVE generator parameters.

The five user inputs of the generator:

    Lx, Ly : domain lengths in x and y
    dx     : grid spacing
    phi    : porosity parameter (0..1, probability of bond break)
    m      : horizon factor (delta = m * dx)
"""

import json
import math
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple, Union


class InvalidParameterError(ValueError):
    """Raised when a parameter set cannot describe a valid RVE."""


# Prompts used when parameters are read interactively
PARAMETER_PROMPTS = {
    "Lx": "Enter domain length in x (Lx): ",
    "Ly": "Enter domain length in y (Ly): ",
    "dx": "Enter grid spacing (dx): ",
    "phi": "Enter porosity parameter phi (0..1, probability of bond break): ",
    "m": "Enter horizon factor m (delta = m*dx): ",
}


@dataclass(frozen=True)
class RVEParameters:
    """Domain parameters of one RVE realization."""
    Lx: float
    Ly: float
    dx: float
    phi: float
    m: float

    @property
    def delta(self) -> float:
        """Horizon radius."""
        return self.m * self.dx

    @property
    def nx(self) -> int:
        return int(math.floor(self.Lx / self.dx)) + 1

    @property
    def ny(self) -> int:
        return int(math.floor(self.Ly / self.dx)) + 1

    @property
    def n_points(self) -> int:
        return self.nx * self.ny

    def validate(self) -> "RVEParameters":
        """
        Check every parameter and raise one error listing all problems.

        Returns:
            self, so the call can be chained.

        Raises:
            InvalidParameterError: If any value is non-finite, a length,
                the spacing or the horizon factor is not positive, or phi
                lies outside [0, 1].
        """
        problems = []
        for name in ("Lx", "Ly", "dx", "phi", "m"):
            value = getattr(self, name)
            if not math.isfinite(value):
                problems.append(f"{name} must be finite (got {value})")
            elif name == "phi":
                if value < 0.0 or value > 1.0:
                    problems.append(f"phi must lie in [0, 1] (got {value})")
            elif value <= 0.0:
                problems.append(f"{name} must be > 0 (got {value})")

        if problems:
            raise InvalidParameterError("Invalid input parameters: " + "; ".join(problems))
        return self

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "RVEParameters":
        """
        Build parameters from a mapping with exactly the keys Lx, Ly, dx, phi, m.

        Raises:
            InvalidParameterError: On missing or unknown keys, or values
                that are not numbers.
        """
        names = [f.name for f in fields(cls)]
        missing = [n for n in names if n not in values]
        unknown = sorted(k for k in values if k not in names)
        if missing:
            raise InvalidParameterError(f"Missing parameters: {', '.join(missing)}")
        if unknown:
            raise InvalidParameterError(f"Unknown parameters: {', '.join(unknown)}")

        converted = {}
        for name in names:
            try:
                converted[name] = float(values[name])
            except (TypeError, ValueError):
                raise InvalidParameterError(
                    f"{name} must be a number (got {values[name]!r})"
                ) from None
        return cls(**converted)


def load_parameters(path: Union[str, Path]) -> RVEParameters:
    """
    Read a JSON parameter file, e.g.

        {"Lx": 1.0, "Ly": 1.0, "dx": 0.05, "phi": 0.3, "m": 3.0}

    The result is not validated; call ``validate()`` before use.
    """
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise InvalidParameterError(f"Cannot parse parameter file {path}: {e}") from e

    if not isinstance(data, dict):
        raise InvalidParameterError(f"Parameter file {path} must contain a JSON object")
    return RVEParameters.from_mapping(data)


def parameter_names() -> Tuple[str, ...]:
    return tuple(f.name for f in fields(RVEParameters))
