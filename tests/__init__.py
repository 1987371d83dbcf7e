"""
Test suite for SafeRails Train Separation Simulation.

This package contains unit tests organized by component:
- test_params.py: Tests for SimulationConfig
- test_separation.py: Tests for wrapping and shortest-arc distance
- test_track.py: Tests for Track geometry
- test_simulator.py: Tests for SeparationSimulator
- test_scenarios.py: Two-train acceptance scenarios
- test_tick.py: Tests for tick sources
- test_integration.py: Integration tests for scenario runs
- test_app.py: Tests for the Dash host
"""
