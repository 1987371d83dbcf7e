"""
SafeRails Train Separation Simulation

This package simulates trains moving on a closed track loop and applies
automatic braking whenever two trains come closer than a safe distance.
"""

from saferails.errors import InvalidGeometry, InvalidInput, InvalidState, SafeRailsError
from saferails.params import SimulationConfig
from saferails.state import (
    AgentSpec,
    AgentState,
    SeparationEvent,
    SeparationOk,
    SeparationViolation,
    SimulatorState,
    SimulatorStatus,
    TickResult,
)
from saferails.geometry import Track, demo_track
from saferails.separation import shortest_arc_distance, wrap
from saferails.simulator import SeparationSimulator, new_simulator
from saferails.tick import TickClock, drive, replay
from saferails.scenario import run_scenario, run_threshold_sweep

__all__ = [
    "SafeRailsError",
    "InvalidGeometry",
    "InvalidInput",
    "InvalidState",
    "SimulationConfig",
    "AgentSpec",
    "AgentState",
    "SeparationEvent",
    "SeparationOk",
    "SeparationViolation",
    "SimulatorState",
    "SimulatorStatus",
    "TickResult",
    "Track",
    "demo_track",
    "shortest_arc_distance",
    "wrap",
    "SeparationSimulator",
    "new_simulator",
    "TickClock",
    "drive",
    "replay",
    "run_scenario",
    "run_threshold_sweep",
]
