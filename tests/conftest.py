"""Pytest configuration and shared fixtures."""

import pytest

from network_optimizer.models import OptimizationSettings, ObjectiveType
from network_optimizer.optimization import NetworkOptimizer, OptimizerConfig
from tests.fixtures.networks import (
    scenario_payload,
    ftl_payload,
    two_lane_payload,
    to_network,
)
from tests.fixtures.solver_mocks import create_mock_solver_config


@pytest.fixture
def scenario_data():
    """Supplier -> factory -> DC -> two customers (optimal cost 4075)."""
    return to_network(scenario_payload())


@pytest.fixture
def ftl_data():
    """Single FTL lane carrying 250 units on 100-unit vehicles."""
    return to_network(ftl_payload())


@pytest.fixture
def two_lane_data():
    """Fast/expensive and slow/cheap parallel lanes."""
    return to_network(two_lane_payload())


@pytest.fixture
def config():
    """Default optimizer configuration."""
    return OptimizerConfig()


@pytest.fixture
def lenient_config():
    """Configuration that reports unresolved references instead of rejecting them."""
    return OptimizerConfig(strict_references=False)


@pytest.fixture
def optimizer(config):
    """Optimizer with the default configuration."""
    return NetworkOptimizer(config)


@pytest.fixture
def min_cost_settings():
    return OptimizationSettings(objective=ObjectiveType.MIN_COST)


@pytest.fixture
def mock_solver_config():
    """SolverConfig mock for Pyomo backend tests."""
    return create_mock_solver_config()
