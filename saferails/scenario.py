"""
Scenario runners: fixed-step runs recorded into numpy histories
"""

import logging
import math
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from saferails.analysis import SeparationAnalyzer
from saferails.errors import InvalidInput
from saferails.geometry import Track, demo_track
from saferails.params import SimulationConfig
from saferails.simulator import AgentInput, SeparationSimulator
from saferails.state import AgentSpec
from saferails.tick import replay

log = logging.getLogger(__name__)


def default_agents(speed: float = 0.02) -> List[AgentSpec]:
    """Two trains starting on opposite sides of the loop, heading toward each other"""
    return [
        AgentSpec("A", initial_position=0.0, direction=1, speed=speed),
        AgentSpec("B", initial_position=0.5, direction=-1, speed=speed),
    ]


def run_scenario(
    duration: float = 30.0,
    dt: float = 1.0 / 60.0,
    safe_distance_m: Optional[float] = None,
    speed: Optional[float] = None,
    agents: Optional[Sequence[AgentInput]] = None,
    track: Optional[Track] = None,
    config: Optional[SimulationConfig] = None,
) -> Dict[str, Any]:
    """
    Run a fixed-step scenario until braking or the duration elapses

    Args:
        duration: Maximum simulated time (s)
        dt: Time step (s)
        safe_distance_m: Braking threshold (m); config value if omitted
        speed: Speed for the default two-train setup; ignored with agents
        agents: Custom agent list; defaults to the two-train demo
        track: Track to run on; defaults to the demo loop
        config: Simulation configuration

    Returns:
        Dictionary with time, positions [ticks x N], min_distance, states,
        analysis and the simulator

    Raises:
        InvalidInput: dt is not positive or exceeds config.max_dt, or
            duration is negative
    """
    config = config if config is not None else SimulationConfig()
    if not math.isfinite(dt) or dt <= 0:
        raise InvalidInput(f"dt must be a finite value > 0, got {dt!r}")
    if dt > config.max_dt:
        raise InvalidInput(f"dt {dt} exceeds max_dt {config.max_dt}")
    if not math.isfinite(duration) or duration < 0:
        raise InvalidInput(f"duration must be a finite value >= 0, got {duration!r}")
    if agents is None:
        agents = default_agents(config.default_speed if speed is None else speed)
    if track is None:
        track = demo_track(config.track_length_m)

    simulator = SeparationSimulator(track, agents, safe_distance_m, config)
    n_steps = int(np.ceil(duration / dt - 1e-9))
    results = replay(simulator, [dt] * n_steps)

    ids = list(simulator.positions())
    t = np.cumsum([r.dt for r in results]) if results else np.zeros(0)
    positions = np.array([[r.positions[i][0] for i in ids] for r in results]).reshape(len(results), len(ids))
    min_distance = np.array([r.event.min_distance_m for r in results])
    states = [r.state for r in results]

    analysis = SeparationAnalyzer(simulator.safe_distance_m).analyze(t, min_distance, states)
    log.info(
        "scenario finished after %d ticks: closest approach %.1f m, braked=%s",
        analysis["ticks"], analysis["closest_approach_m"], analysis["braked"],
    )
    return {
        "agent_ids": ids,
        "time": t,
        "positions": positions,
        "min_distance": min_distance,
        "states": states,
        "events": [r.event for r in results],
        "analysis": analysis,
        "simulator": simulator,
    }


def run_threshold_sweep(
    safe_distances_m: Sequence[float],
    duration: float = 30.0,
    dt: float = 1.0 / 60.0,
    speed: Optional[float] = None,
) -> Dict[float, Dict[str, Any]]:
    """
    Run the two-train scenario once per braking threshold

    Returns:
        Dictionary with results for each threshold
    """
    track = demo_track()
    return {
        d: run_scenario(duration=duration, dt=dt, safe_distance_m=d, speed=speed, track=track)
        for d in safe_distances_m
    }


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    sweep = run_threshold_sweep([60.0, 120.0, 240.0])
    print("Threshold Sweep Results:")
    print("-" * 60)
    for threshold, data in sweep.items():
        analysis = data["analysis"]
        print(f"\nSafe distance: {threshold:.0f} m")
        print(f"  Braked: {analysis['braked']}")
        if analysis["braked"]:
            print(f"  Brake time: {analysis['brake_time']:.2f} s")
            print(f"  Separation at brake: {analysis['brake_distance_m']:.1f} m")
        print(f"  Closest approach: {analysis['closest_approach_m']:.1f} m")
        print(f"  Final state: {analysis['final_state'].value}")
