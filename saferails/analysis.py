"""
Run analysis functions
"""

from typing import Any, Dict, Optional, Sequence

import numpy as np

from saferails.state import SimulatorState


class SeparationAnalyzer:
    """Summarizes a recorded run: closest approach, braking and margin"""

    def __init__(self, safe_distance_m: float) -> None:
        """
        Initialize separation analyzer

        Args:
            safe_distance_m: Braking threshold the run was made with (m)
        """
        self.safe_distance_m = safe_distance_m

    def analyze(
        self,
        t: np.ndarray,
        min_distance: np.ndarray,
        states: Sequence[SimulatorState],
    ) -> Dict[str, Any]:
        """
        Analyze a run

        Args:
            t: Elapsed time after each tick (s)
            min_distance: Closest pairwise separation after each tick (m)
            states: Simulator state after each tick

        Returns:
            Dictionary with analysis results
        """
        if len(t) == 0:
            return {
                "ticks": 0,
                "duration": 0.0,
                "closest_approach_m": float("nan"),
                "closest_approach_time": float("nan"),
                "margin_m": float("nan"),
                "braked": False,
                "brake_time": None,
                "brake_distance_m": None,
                "final_state": None,
            }

        k = int(np.argmin(min_distance))
        closest = float(min_distance[k])

        brake_index: Optional[int] = None
        for i, state in enumerate(states):
            if state is SimulatorState.BRAKED:
                brake_index = i
                break

        return {
            "ticks": int(len(t)),
            "duration": float(t[-1]),
            "closest_approach_m": closest,
            "closest_approach_time": float(t[k]),
            # Negative margin means the threshold was breached
            "margin_m": closest - self.safe_distance_m,
            "braked": brake_index is not None,
            "brake_time": None if brake_index is None else float(t[brake_index]),
            "brake_distance_m": None if brake_index is None else float(min_distance[brake_index]),
            "final_state": states[-1],
        }
