"""
Acceptance scenarios for the two-train demo on a 1000 m loop.
"""

import pytest

from saferails import (
    AgentSpec,
    InvalidInput,
    SeparationSimulator,
    SeparationViolation,
    SimulatorState,
    Track,
)


class TestTwoTrainScenarios:
    """Trains A and B start half a loop apart, heading toward each other"""

    @pytest.fixture
    def simulator(self) -> SeparationSimulator:
        agents = [
            AgentSpec("A", initial_position=0.0, direction=1, speed=0.02),
            AgentSpec("B", initial_position=0.5, direction=-1, speed=0.02),
        ]
        return SeparationSimulator(Track(1000.0), agents, safe_distance_m=120.0)

    def test_closing_trains_brake(self, simulator: SeparationSimulator) -> None:
        """Test that closing trains brake once they are nearer than 120 m"""
        simulator.start()
        dt = 0.1
        result = None
        for _ in range(200):
            result = simulator.advance(dt)
            if result.state is SimulatorState.BRAKED:
                break

        assert result is not None
        assert result.state is SimulatorState.BRAKED
        assert isinstance(result.event, SeparationViolation)
        assert set(result.event.pair) == {"A", "B"}
        assert result.event.min_distance_m < 120.0
        # Closing speed is 40 m/s, so the brake triggers within one tick of crossing
        assert result.event.min_distance_m > 120.0 - 40.0 * dt - 1e-9
        assert simulator.elapsed_time == pytest.approx(9.5, abs=dt + 1e-9)

    def test_reset_restores_start(self, simulator: SeparationSimulator) -> None:
        """Test that reset puts A at 0 and B at 0.5 whatever happened before"""
        simulator.start()
        for _ in range(37):
            simulator.advance(0.2)
        simulator.swap_directions()
        simulator.reset()

        assert simulator.state is SimulatorState.IDLE
        positions = simulator.positions()
        assert positions["A"][0] == 0.0
        assert positions["B"][0] == 0.5

    def test_reset_from_braked(self, simulator: SeparationSimulator) -> None:
        """Test that reset also recovers a braked simulator"""
        simulator.start()
        while simulator.advance(0.25).state is SimulatorState.RUNNING:
            pass
        status = simulator.reset()

        assert status.state is SimulatorState.IDLE
        assert status.positions == {"A": (0.0, 1), "B": (0.5, -1)}
        assert status.min_distance_m == pytest.approx(500.0)

    def test_swap_reverses_motion(self, simulator: SeparationSimulator) -> None:
        """Test that after swapping, each train moves the other way"""
        simulator.start()
        simulator.advance(0.25)
        before = simulator.positions()
        simulator.swap_directions()
        after = simulator.advance(0.25).positions

        # A was moving forward from 0.005; B backward from 0.495
        assert after["A"][0] == pytest.approx(before["A"][0] - 0.005)
        assert after["B"][0] == pytest.approx(before["B"][0] + 0.005)
        assert after["A"][1] == -1
        assert after["B"][1] == 1

    def test_swap_at_origin_wraps(self, simulator: SeparationSimulator) -> None:
        """Test that reversing A at fraction 0 takes it round the seam"""
        simulator.swap_directions()
        simulator.start()
        after = simulator.advance(0.25).positions

        assert after["A"][0] == pytest.approx(0.995)
        assert after["B"][0] == pytest.approx(0.505)

    def test_negative_dt_changes_nothing(self, simulator: SeparationSimulator) -> None:
        """Test that advance(-1) fails and leaves positions and state alone"""
        simulator.start()
        simulator.advance(0.1)
        before = simulator.positions()

        with pytest.raises(InvalidInput):
            simulator.advance(-1)

        assert simulator.state is SimulatorState.RUNNING
        assert simulator.positions() == before
