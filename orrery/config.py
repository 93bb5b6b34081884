from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from orrery.constants import KEPLER_MAX_ITER, KEPLER_TOL
from orrery.exceptions import ConfigurationError


class ScaleMode(str, Enum):
    """Linear AU to scene-unit scales offered to the renderer."""
    COMPRESSED = "compressed"
    REALISTIC = "realistic"


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------
DEFAULT_SCALE_MODE = ScaleMode.COMPRESSED

SCALE_FACTORS = {
    ScaleMode.COMPRESSED: 8.0,  # 1 AU = 8 scene units
    ScaleMode.REALISTIC: 35.0,  # 1 AU = 35 scene units, Neptune ~1050 away
}

SCALE_DESCRIPTIONS = {
    ScaleMode.COMPRESSED: "Compressed for easy viewing (1 AU = 8 units)",
    ScaleMode.REALISTIC: "Realistic scale (1 AU = 35 units)",
}


@dataclass(frozen=True, slots=True)
class EngineConfig:
    scale_mode: ScaleMode = DEFAULT_SCALE_MODE
    kepler_tol: float = KEPLER_TOL
    kepler_max_iter: int = KEPLER_MAX_ITER

    @property
    def scale_factor(self) -> float:
        return SCALE_FACTORS[self.scale_mode]


@dataclass(frozen=True, slots=True)
class DistanceInfo:
    scale_mode: ScaleMode
    scale_factor: float
    description: str
    max_distance: float


def parse_scale_mode(value: Union[str, ScaleMode, None]) -> ScaleMode:
    if value is None:
        return DEFAULT_SCALE_MODE
    if isinstance(value, ScaleMode):
        return value
    try:
        return ScaleMode(str(value).strip().lower())
    except ValueError:
        choices = ", ".join(m.value for m in ScaleMode)
        raise ConfigurationError(f"Unknown scale mode {value!r}. Must be one of: {choices}") from None


def make_engine_config(
    scale_mode: Union[str, ScaleMode, None] = None,
    *,
    kepler_tol: Optional[float] = None,
    kepler_max_iter: Optional[int] = None,
) -> EngineConfig:
    """Normalize CLI-style inputs into an EngineConfig."""
    mode = parse_scale_mode(scale_mode)
    tol = KEPLER_TOL if kepler_tol is None else float(kepler_tol)
    max_iter = KEPLER_MAX_ITER if kepler_max_iter is None else kepler_max_iter

    if not (math.isfinite(tol) and tol > 0.0):
        raise ConfigurationError(f"kepler_tol must be a positive finite number, got {kepler_tol!r}")
    if isinstance(max_iter, bool) or not isinstance(max_iter, int) or max_iter < 1:
        raise ConfigurationError(f"kepler_max_iter must be an integer >= 1, got {kepler_max_iter!r}")

    return EngineConfig(scale_mode=mode, kepler_tol=tol, kepler_max_iter=max_iter)
