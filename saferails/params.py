"""
Simulation configuration
"""

import math
from dataclasses import dataclass

from saferails.errors import InvalidInput

DT_POLICIES = ("clamp", "reject")


@dataclass
class SimulationConfig:
    """Tunable parameters for a separation run"""

    safe_distance_m: float = 120.0  # m, braking threshold
    max_dt: float = 0.25  # s, largest time step integrated in one tick
    dt_policy: str = "clamp"  # "clamp" or "reject" for dt > max_dt
    # Demo defaults (two trains on a 1 km loop)
    track_length_m: float = 1000.0  # m
    default_speed: float = 0.02  # fraction of track per second
    # Host speed control bounds (fraction/s)
    speed_min: float = 0.005
    speed_max: float = 0.08
    speed_step: float = 0.005

    def __post_init__(self) -> None:
        """Validate parameters"""
        if not math.isfinite(self.safe_distance_m) or self.safe_distance_m < 0:
            raise InvalidInput(f"safe_distance_m must be >= 0, got {self.safe_distance_m}")
        if not math.isfinite(self.max_dt) or self.max_dt <= 0:
            raise InvalidInput(f"max_dt must be > 0, got {self.max_dt}")
        if self.dt_policy not in DT_POLICIES:
            raise InvalidInput(f"dt_policy must be one of {DT_POLICIES}, got {self.dt_policy!r}")
        if not math.isfinite(self.track_length_m) or self.track_length_m <= 0:
            raise InvalidInput(f"track_length_m must be > 0, got {self.track_length_m}")
        if not 0 <= self.speed_min <= self.speed_max:
            raise InvalidInput("speed bounds must satisfy 0 <= speed_min <= speed_max")
        if self.speed_step <= 0:
            raise InvalidInput(f"speed_step must be > 0, got {self.speed_step}")
        if not math.isfinite(self.default_speed) or self.default_speed < 0:
            raise InvalidInput(f"default_speed must be >= 0, got {self.default_speed}")
