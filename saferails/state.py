"""
Agent records, simulator states and separation events
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Hashable, Optional, Tuple

AgentId = Hashable


class SimulatorState(str, Enum):
    """Lifecycle of a SeparationSimulator"""

    IDLE = "idle"
    RUNNING = "running"
    BRAKED = "braked"


@dataclass(frozen=True)
class AgentSpec:
    """Initial configuration of one agent"""

    agent_id: AgentId
    initial_position: float  # fraction of track
    direction: int  # +1 or -1
    speed: float  # fraction of track per second


@dataclass
class AgentState:
    """Mutable per-agent record owned by the simulator"""

    agent_id: AgentId
    position: float  # fraction in [0, 1)
    direction: int
    speed: float


@dataclass(frozen=True)
class SeparationEvent:
    """Closest pair snapshot for one tick"""

    pair: Optional[Tuple[AgentId, AgentId]]
    min_fraction: float
    min_distance_m: float

    @property
    def is_violation(self) -> bool:
        return False


@dataclass(frozen=True)
class SeparationOk(SeparationEvent):
    """All pairs are at or beyond the safe distance"""


@dataclass(frozen=True)
class SeparationViolation(SeparationEvent):
    """A pair came closer than the safe distance; motion has stopped"""

    safe_distance_m: float = 0.0

    @property
    def is_violation(self) -> bool:
        return True


@dataclass(frozen=True)
class TickResult:
    """Output of one advance call"""

    state: SimulatorState
    positions: Dict[AgentId, Tuple[float, int]]
    event: SeparationEvent
    dt: float  # time step actually integrated (after clamping)


@dataclass(frozen=True)
class SimulatorStatus:
    """Read-only view of the simulator"""

    state: SimulatorState
    min_distance_m: float
    positions: Dict[AgentId, Tuple[float, int]] = field(default_factory=dict)
    closest_pair: Optional[Tuple[AgentId, AgentId]] = None
