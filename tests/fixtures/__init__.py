"""Test fixtures for network optimizer testing."""

from .solver_mocks import create_mock_solver_config, create_mock_solver
from .networks import scenario_payload, ftl_payload, two_lane_payload, to_network

__all__ = [
    'create_mock_solver_config',
    'create_mock_solver',
    'scenario_payload',
    'ftl_payload',
    'two_lane_payload',
    'to_network',
]
