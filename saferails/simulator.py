"""
Separation simulator: agents on a closed track with automatic braking
"""

import logging
import math
import numbers
from dataclasses import replace
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from saferails.errors import InvalidInput, InvalidState
from saferails.geometry import Track
from saferails.params import SimulationConfig
from saferails.separation import closest_pair, wrap
from saferails.state import (
    AgentId,
    AgentSpec,
    AgentState,
    SeparationEvent,
    SeparationOk,
    SeparationViolation,
    SimulatorState,
    SimulatorStatus,
    TickResult,
)

log = logging.getLogger(__name__)

AgentInput = Union[AgentSpec, Mapping[str, Any]]
Listener = Callable[[SeparationEvent], None]


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _coerce_spec(agent: AgentInput) -> AgentSpec:
    """Accept an AgentSpec or a mapping with id/initial_position/direction/speed"""
    if isinstance(agent, AgentSpec):
        spec = agent
    else:
        try:
            spec = AgentSpec(
                agent_id=agent["id"] if "id" in agent else agent["agent_id"],
                initial_position=agent["initial_position"],
                direction=agent["direction"],
                speed=agent["speed"],
            )
        except (KeyError, TypeError) as exc:
            raise InvalidInput(f"malformed agent description {agent!r}: {exc}") from exc

    direction = spec.direction
    if not isinstance(direction, numbers.Integral) or isinstance(direction, bool) or direction not in (-1, 1):
        raise InvalidInput(f"agent {spec.agent_id!r}: direction must be the integer +1 or -1, got {direction!r}")
    if not _is_number(spec.initial_position) or not math.isfinite(spec.initial_position):
        raise InvalidInput(f"agent {spec.agent_id!r}: initial_position must be a finite number, got {spec.initial_position!r}")
    _check_speed(spec.speed)
    return replace(
        spec,
        initial_position=wrap(float(spec.initial_position)),
        direction=int(direction),
        speed=float(spec.speed),
    )


def _check_speed(speed: float) -> None:
    if not _is_number(speed) or not math.isfinite(speed) or speed < 0:
        raise InvalidInput(f"speed must be a finite value >= 0, got {speed!r}")


class SeparationSimulator:
    """
    Moves agents along a closed track and brakes when any pair gets too close

    Time is injected through ``advance(dt)``; the simulator never reads a
    clock, so a recorded dt sequence replays bit-for-bit. Every command either
    succeeds or raises without touching state.
    """

    def __init__(
        self,
        track: Track,
        agents: Iterable[AgentInput],
        safe_distance_m: Optional[float] = None,
        config: Optional[SimulationConfig] = None,
    ) -> None:
        """
        Initialize simulator

        Args:
            track: Shared read-only track
            agents: Agent descriptions; at least two, with unique ids
            safe_distance_m: Braking threshold (m); overrides config
            config: Simulation configuration (defaults used if omitted)
        """
        self.config = config if config is not None else SimulationConfig()
        if safe_distance_m is None:
            safe_distance_m = self.config.safe_distance_m
        if not _is_number(safe_distance_m) or not math.isfinite(safe_distance_m) or safe_distance_m < 0:
            raise InvalidInput(f"safe_distance_m must be a finite value >= 0, got {safe_distance_m!r}")

        specs = [_coerce_spec(a) for a in agents]
        if len(specs) < 2:
            raise InvalidInput(f"at least two agents are required, got {len(specs)}")
        ids = [s.agent_id for s in specs]
        if len(set(ids)) != len(ids):
            raise InvalidInput(f"agent ids must be unique, got {ids}")

        self.track = track
        self.safe_distance_m = float(safe_distance_m)
        self._specs: Dict[AgentId, AgentSpec] = {s.agent_id: s for s in specs}
        self._agents: Dict[AgentId, AgentState] = {
            s.agent_id: AgentState(s.agent_id, s.initial_position, s.direction, s.speed) for s in specs
        }
        self._state = SimulatorState.IDLE
        self._last_event: Optional[SeparationEvent] = None
        self._listeners: List[Listener] = []
        self.elapsed_time = 0.0
        self.tick_count = 0

        log.info(
            "simulator created: %d agents, track %.1f m, safe distance %.1f m",
            len(specs), track.total_length, self.safe_distance_m,
        )

    @property
    def state(self) -> SimulatorState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is SimulatorState.RUNNING

    @property
    def last_event(self) -> Optional[SeparationEvent]:
        """Event emitted by the most recent advance, if any since reset"""
        return self._last_event

    @property
    def agents(self) -> Dict[AgentId, AgentState]:
        """Copies of the agent records"""
        return {k: replace(a) for k, a in self._agents.items()}

    def positions(self) -> Dict[AgentId, Tuple[float, int]]:
        """Agent id -> (position, direction)"""
        return {k: (a.position, a.direction) for k, a in self._agents.items()}

    # Commands

    def start(self) -> SimulatorStatus:
        """Idle or Braked -> Running; no-op when already running"""
        if self._state is SimulatorState.RUNNING:
            log.debug("start ignored: already running")
        else:
            log.info("start: %s -> running", self._state.value)
            self._state = SimulatorState.RUNNING
        return self.current_status()

    def pause(self) -> SimulatorStatus:
        """Running -> Idle, keeping positions"""
        if self._state is not SimulatorState.RUNNING:
            raise InvalidState(f"cannot pause while {self._state.value}")
        self._state = SimulatorState.IDLE
        log.info("paused")
        return self.current_status()

    def reset(self) -> SimulatorStatus:
        """Any state -> Idle; restore initial positions and directions, keep speeds"""
        for agent_id, spec in self._specs.items():
            agent = self._agents[agent_id]
            agent.position = spec.initial_position
            agent.direction = spec.direction
        self._state = SimulatorState.IDLE
        self._last_event = None
        self.elapsed_time = 0.0
        self.tick_count = 0
        log.info("reset")
        return self.current_status()

    def swap_directions(self) -> SimulatorStatus:
        """Reverse every agent; applies from the next advance"""
        for agent in self._agents.values():
            agent.direction = -agent.direction
        log.info("directions swapped")
        return self.current_status()

    def set_speed(self, agent_id: AgentId, speed: float) -> SimulatorStatus:
        """Set one agent's speed (fraction of track per second)"""
        if agent_id not in self._agents:
            raise InvalidInput(f"unknown agent {agent_id!r}")
        _check_speed(speed)
        self._agents[agent_id].speed = float(speed)
        log.info("agent %r speed set to %.4f/s", agent_id, speed)
        return self.current_status()

    def set_all_speeds(self, speed: float) -> SimulatorStatus:
        """Set a common speed for every agent, as the host speed control does"""
        _check_speed(speed)
        for agent in self._agents.values():
            agent.speed = float(speed)
        log.info("all speeds set to %.4f/s", speed)
        return self.current_status()

    # Observers

    def subscribe(self, callback: Listener) -> Listener:
        """Register a callable receiving every emitted separation event"""
        self._listeners.append(callback)
        return callback

    def unsubscribe(self, callback: Listener) -> None:
        try:
            self._listeners.remove(callback)
        except ValueError:
            raise InvalidInput(f"{callback!r} is not subscribed") from None

    # Tick

    def _effective_dt(self, dt: float) -> float:
        if not _is_number(dt) or not math.isfinite(dt):
            raise InvalidInput(f"dt must be a finite number, got {dt!r}")
        if dt < 0:
            raise InvalidInput(f"dt must be >= 0, got {dt}")
        if dt > self.config.max_dt:
            if self.config.dt_policy == "reject":
                raise InvalidInput(f"dt {dt} exceeds max_dt {self.config.max_dt}")
            log.warning("dt %.3f s exceeds max_dt; clamped to %.3f s", dt, self.config.max_dt)
            return self.config.max_dt
        return float(dt)

    def _measure(self) -> Tuple[Optional[Tuple[AgentId, AgentId]], float, float]:
        pair, fraction = closest_pair({k: a.position for k, a in self._agents.items()})
        return pair, fraction, self.track.metric_distance(fraction)

    def advance(self, dt: float) -> TickResult:
        """
        Integrate all agents over dt seconds and check separation

        Args:
            dt: Elapsed time since the previous tick (s)

        Returns:
            TickResult with the new state, positions and separation event

        Raises:
            InvalidState: simulator is not running
            InvalidInput: dt is negative, non-finite, or above max_dt under
                the "reject" policy
        """
        if self._state is not SimulatorState.RUNNING:
            raise InvalidState(f"advance requires running state, simulator is {self._state.value}")
        step = self._effective_dt(dt)

        for agent in self._agents.values():
            agent.position = wrap(agent.position + agent.direction * agent.speed * step)
        self.elapsed_time += step
        self.tick_count += 1

        pair, fraction, distance = self._measure()
        if distance < self.safe_distance_m:
            self._state = SimulatorState.BRAKED
            event: SeparationEvent = SeparationViolation(pair, fraction, distance, self.safe_distance_m)
            log.warning(
                "separation violation: %r at %.1f m (< %.1f m), braking after %.3f s",
                pair, distance, self.safe_distance_m, self.elapsed_time,
            )
        else:
            event = SeparationOk(pair, fraction, distance)
            log.debug("tick %d: min separation %.1f m between %r", self.tick_count, distance, pair)
        self._last_event = event

        result = TickResult(self._state, self.positions(), event, step)
        # State is committed; listener failures are logged and later listeners still run
        for callback in list(self._listeners):
            try:
                callback(event)
            except Exception:
                log.exception("separation listener %r failed on tick %d", callback, self.tick_count)
        return result

    def current_status(self) -> SimulatorStatus:
        """Snapshot of state, closest separation and positions"""
        pair, _, distance = self._measure()
        return SimulatorStatus(self._state, distance, self.positions(), pair)

    def __repr__(self) -> str:
        return (
            f"SeparationSimulator(state={self._state.value}, agents={list(self._agents)}, "
            f"safe_distance_m={self.safe_distance_m})"
        )


def new_simulator(
    track: Track,
    agents: Iterable[AgentInput],
    safe_distance_m: Optional[float] = None,
    config: Optional[SimulationConfig] = None,
) -> SeparationSimulator:
    """Construct a SeparationSimulator"""
    return SeparationSimulator(track, agents, safe_distance_m, config)
