"""
Tests for the Dash host: command routing, frame ticks and the track figure.
"""

import pytest

from app import (
    MSG_BRAKED,
    MSG_IDLE,
    MSG_PAUSED,
    MSG_RESET,
    MSG_RUNNING,
    MSG_STARTING,
    MSG_SWAPPED,
    SafeRailsHost,
    readouts,
    track_figure,
)
from saferails import SimulatorState, Track


class TestSafeRailsHost:
    """Test suite for the presentation-side host"""

    @pytest.fixture
    def host(self) -> SafeRailsHost:
        return SafeRailsHost(track=Track.from_points([(0, 0), (100, 0), (100, 100), (0, 100)], 1000.0))

    def test_initial_status(self, host: SafeRailsHost) -> None:
        """Test that a new host is idle with the demo speed"""
        assert host.message == MSG_IDLE
        assert host.speed == 0.02
        assert host.status().state is SimulatorState.IDLE

    def test_commands_update_message(self, host: SafeRailsHost) -> None:
        """Test that each button produces its status line"""
        assert host.command("start") == MSG_STARTING
        assert host.command("pause") == MSG_PAUSED
        assert host.command("swap") == MSG_SWAPPED
        assert host.command("reset") == MSG_RESET

    def test_pause_when_idle_is_ignored(self, host: SafeRailsHost) -> None:
        """Test that pausing an idle simulator leaves the message alone"""
        assert host.command("pause") == MSG_IDLE

    def test_unknown_command(self, host: SafeRailsHost) -> None:
        with pytest.raises(ValueError):
            host.command("launch")

    def test_frames_only_move_while_running(self, host: SafeRailsHost) -> None:
        """Test that frame ticks advance only a running simulator"""
        host.on_frame(0.0)
        host.on_frame(0.1)
        assert host.status().positions["A"][0] == 0.0

        host.command("start")
        assert host.on_frame(0.2) == MSG_RUNNING
        assert host.status().positions["A"][0] == pytest.approx(0.002)

    def test_frames_brake(self, host: SafeRailsHost) -> None:
        """Test that running frames end in the braking warning"""
        host.command("start")
        for i in range(200):
            host.on_frame(i * 0.1)

        assert host.message == MSG_BRAKED
        assert host.status().state is SimulatorState.BRAKED
        assert host.status().min_distance_m < 120.0

    def test_set_speed(self, host: SafeRailsHost) -> None:
        """Test that the speed slider applies to both trains"""
        host.set_speed(0.05)

        assert host.speed == 0.05
        assert {a.speed for a in host.simulator.agents.values()} == {0.05}

    def test_readouts(self, host: SafeRailsHost) -> None:
        """Test the status text and start/pause button states"""
        status, distance, speed, start_disabled, pause_disabled = readouts(host)

        assert status == f"Status: {MSG_IDLE}"
        assert distance == "Distance (approx): 500 m"
        assert speed == "Speed: 2.0% /s"
        assert not start_disabled
        assert pause_disabled

        host.command("start")
        assert readouts(host)[3:] == [True, False]


class TestTrackFigure:
    """Test suite for track_figure"""

    def test_figure_has_track_and_trains(self) -> None:
        """Test that the figure draws the loop, stations, signals and both trains"""
        host = SafeRailsHost()
        fig = track_figure(host.track, host.status())
        names = [trace.name for trace in fig.data]

        assert names == ["Track", "Stations", "Signal (GO)", "Train A", "Train B"]
        assert fig.data[3].x[0] == pytest.approx(100.0)
        assert fig.data[3].y[0] == pytest.approx(480.0)
