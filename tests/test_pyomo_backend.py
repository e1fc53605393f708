"""Tests for solver selection and the Pyomo backend.

Solver binaries are replaced by mocks from tests/fixtures/solver_mocks.py; the
HiGHS test at the end only runs when highspy is installed.
"""

import pytest
from pyomo.environ import NonNegativeIntegers, NonNegativeReals
from pyomo.opt import SolverStatus, TerminationCondition

from network_optimizer.exceptions import SolverUnavailableError
from network_optimizer.models import OptimizationSettings
from network_optimizer.optimization import (
    ConstraintSense,
    LinearProgram,
    NetworkModelBuilder,
    NetworkOptimizer,
    PyomoBackend,
    SolverConfig,
    SolverType,
    SolveStatus,
    resolve_solver,
)
from network_optimizer.optimization.types import FlowKey, ProductionKey, SupplyKey
from tests.fixtures.solver_mocks import create_mock_solver_config


@pytest.fixture
def program():
    """min x + 2y  s.t.  x + y >= 3, y integer, x <= 10."""
    program = LinearProgram(
        objective=[1.0, 2.0],
        upper_bounds=[10.0, float("inf")],
        integer_variables={1},
    )
    program.add_constraint("demand", {0: 1.0, 1: 1.0}, ConstraintSense.GE, 3.0)
    return program


class TestSolverSelection:
    """Tests for resolve_solver and SolverConfig."""

    @pytest.mark.parametrize("name,expected", [
        (None, SolverType.TABLEAU),
        ("", SolverType.TABLEAU),
        ("simplex", SolverType.TABLEAU),
        ("tableau", SolverType.TABLEAU),
        ("pulp_cbc", SolverType.CBC),
        (" APPSI_HIGHS ", SolverType.APPSI_HIGHS),
        ("glpk", SolverType.GLPK),
    ])
    def test_known_names(self, name, expected):
        assert resolve_solver(name) == (expected, None)

    def test_unknown_name_falls_back(self):
        solver_type, warning = resolve_solver("quantum")

        assert solver_type == SolverType.TABLEAU
        assert "Unknown solver 'quantum'" in warning

    def test_tableau_always_available(self):
        assert SolverConfig().is_available(SolverType.TABLEAU)

    @pytest.mark.parametrize("solver_type,options", [
        (SolverType.CBC, {'seconds': 30}),
        (SolverType.GLPK, {'tmlim': 30}),
        (SolverType.GUROBI, {'TimeLimit': 30}),
        (SolverType.APPSI_HIGHS, {}),
    ])
    def test_time_limit_options(self, solver_type, options):
        assert SolverConfig.time_limit_options(solver_type, 30) == options

    def test_no_time_limit(self):
        assert SolverConfig.time_limit_options(SolverType.CBC, None) == {}

    def test_builtin_not_created_through_factory(self):
        with pytest.raises(ValueError):
            SolverConfig().create_solver(SolverType.TABLEAU)


class TestPyomoModel:
    """Translation of a LinearProgram into Pyomo."""

    def test_structure(self, program):
        model = PyomoBackend().build_pyomo_model(program)

        assert model.nvariables() == 2
        assert model.nconstraints() == 1
        assert model.x[0].domain == NonNegativeReals
        assert model.x[1].domain == NonNegativeIntegers
        assert model.x[0].ub == 10.0
        assert model.x[1].ub is None
        assert model.x[0].lb == 0.0

    def test_empty_rows_left_out(self, program):
        program.add_constraint("empty", {}, ConstraintSense.LE, 5.0)
        model = PyomoBackend().build_pyomo_model(program)
        assert model.nconstraints() == 1


class TestPyomoSolve:
    """Solve outcomes with a mocked solver."""

    def test_optimal(self, program):
        solver_config = create_mock_solver_config(values=[3.0, 0.0])
        outcome = PyomoBackend(solver_config, time_limit_seconds=30).solve(program, SolverType.CBC)

        assert outcome.status == SolveStatus.OPTIMAL
        assert outcome.feasible
        assert outcome.values == [3.0, 0.0]
        assert outcome.objective_value == 3.0
        assert outcome.solver_name == "cbc"
        assert outcome.iterations == 0
        solver_config.time_limit_options.assert_called_once_with(SolverType.CBC, 30)
        assert solver_config.created[0].solve_kwargs["load_solutions"] is False

    def test_infeasible(self, program):
        solver_config = create_mock_solver_config(termination=TerminationCondition.infeasible)
        outcome = PyomoBackend(solver_config).solve(program, SolverType.CBC)

        assert outcome.status == SolveStatus.INFEASIBLE
        assert not outcome.feasible
        assert outcome.values == []
        assert "infeasible" in outcome.message

    def test_unbounded(self, program):
        solver_config = create_mock_solver_config(termination=TerminationCondition.unbounded)
        outcome = PyomoBackend(solver_config).solve(program, SolverType.GLPK)
        assert outcome.status == SolveStatus.UNBOUNDED

    def test_time_limit_keeps_feasible_point(self, program):
        solver_config = create_mock_solver_config(
            values=[0.0, 3.0],
            termination=TerminationCondition.maxTimeLimit,
            status=SolverStatus.warning,
        )
        outcome = PyomoBackend(solver_config, time_limit_seconds=5).solve(program, SolverType.CBC)

        assert outcome.status == SolveStatus.TIME_LIMIT
        assert outcome.feasible
        assert outcome.values == [0.0, 3.0]
        assert "may not be optimal" in outcome.message

    def test_solver_error(self, program):
        solver_config = create_mock_solver_config(
            termination=TerminationCondition.error, status=SolverStatus.error
        )
        outcome = PyomoBackend(solver_config).solve(program, SolverType.CBC)
        assert outcome.status == SolveStatus.ERROR
        assert not outcome.feasible

    def test_unavailable_solver_raises(self, program):
        solver_config = create_mock_solver_config(available=False)
        with pytest.raises(SolverUnavailableError, match="tableau"):
            PyomoBackend(solver_config).solve(program, SolverType.GUROBI)

    def test_violated_empty_row_is_infeasible(self, program):
        program.add_constraint("unservable", {}, ConstraintSense.EQ, 5.0)
        solver_config = create_mock_solver_config()
        outcome = PyomoBackend(solver_config).solve(program, SolverType.CBC)

        assert outcome.status == SolveStatus.INFEASIBLE
        assert solver_config.created == []

    def test_values_clipped_to_bounds(self, program):
        solver_config = create_mock_solver_config(values=[10.0000001, 0.0])
        outcome = PyomoBackend(solver_config).solve(program, SolverType.CBC)
        assert outcome.values == [10.0, 0.0]


class TestOptimizerWithPyomo:
    """NetworkOptimizer dispatching to an external solver."""

    def test_mocked_solver_end_to_end(self, scenario_data):
        model = NetworkModelBuilder(scenario_data).build()
        values = [0.0] * len(model.arena)
        for key, quantity in {
            SupplyKey("S1", "RAW", "P1"): 250.0,
            FlowKey("S1-F1", "S1", "F1", "RAW", "P1"): 250.0,
            ProductionKey("F1", "FG", "P1"): 250.0,
            FlowKey("F1-DC1", "F1", "DC1", "FG", "P1"): 250.0,
            FlowKey("DC1-C1", "DC1", "C1", "FG", "P1"): 100.0,
            FlowKey("DC1-C2", "DC1", "C2", "FG", "P1"): 150.0,
        }.items():
            values[model.arena.index_of(key)] = quantity

        optimizer = NetworkOptimizer(solver_config=create_mock_solver_config(values=values))
        result = optimizer.optimize(scenario_data, OptimizationSettings(solver="cbc"))

        assert result.is_optimal()
        assert result.solver_name == "cbc"
        assert result.solution.solver == "cbc"
        assert result.solution.total_cost == pytest.approx(4075.0)


@pytest.mark.skipif(
    not SolverConfig().is_available(SolverType.APPSI_HIGHS),
    reason="HiGHS not installed",
)
class TestHighs:
    """Integer trips with a real MILP solver."""

    def test_integer_trips(self, ftl_data):
        result = NetworkOptimizer().optimize(ftl_data, OptimizationSettings(solver="appsi_highs"))

        assert result.is_optimal()
        assert result.objective_value == pytest.approx(1000.0)
        trip = result.solution.vehicle_flow[0]
        assert trip.trip_count == 3
        assert result.solution.total_cost == pytest.approx(1000.0)

    def test_matches_tableau_on_lp(self, scenario_data):
        highs = NetworkOptimizer().optimize(scenario_data, OptimizationSettings(solver="appsi_highs"))
        tableau = NetworkOptimizer().optimize(scenario_data)

        assert highs.objective_value == pytest.approx(tableau.objective_value)
