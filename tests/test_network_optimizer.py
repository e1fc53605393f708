"""End-to-end tests for NetworkOptimizer with the built-in tableau solver.

These tests check the properties every plan must satisfy (conservation,
FTL capacity, exclusion, determinism) on small networks with known optima.
"""

import pytest

from network_optimizer.models import ObjectiveType, OptimizationSettings
from network_optimizer.optimization import NetworkOptimizer, OptimizerConfig, SolveStatus
from network_optimizer.optimization.types import FlowKey, StockKey
from tests.fixtures.networks import ftl_payload, scenario_payload, to_network
from tests.fixtures.solver_mocks import create_mock_solver_config


def total_for(optimizer, c1, c2):
    result = optimizer.optimize(to_network(scenario_payload(demand_c1=c1, demand_c2=c2)))
    assert result.is_optimal()
    return result.solution.total_cost


class TestScenario:
    """Supplier -> factory -> DC -> two customers."""

    def test_optimal_cost_decomposition(self, optimizer, scenario_data, min_cost_settings):
        result = optimizer.optimize(scenario_data, min_cost_settings)

        assert result.success
        assert result.status == SolveStatus.OPTIMAL
        assert result.objective_value == pytest.approx(4075.0)
        solution = result.solution
        assert solution.total_cost == pytest.approx(4075.0)
        assert solution.cost_of("Transport Cost (Units)") == pytest.approx(1575.0)
        assert solution.cost_of("Transport Cost (Trips)") == 0.0
        assert solution.cost_of("Production Cost") == pytest.approx(2500.0)

    def test_plan_routes_through_factory(self, optimizer, scenario_data):
        solution = optimizer.optimize(scenario_data).solution
        flows = {(f.from_id, f.to_id, f.product): f.quantity for f in solution.product_flow}

        assert flows == {
            ("S1", "F1", "RAW"): pytest.approx(250.0),
            ("F1", "DC1", "FG"): pytest.approx(250.0),
            ("DC1", "C1", "FG"): pytest.approx(100.0),
            ("DC1", "C2", "FG"): pytest.approx(150.0),
        }
        assert [(p.site, p.product, p.bom) for p in solution.production] == [("F1", "FG", "B1")]
        assert solution.production[0].quantity == pytest.approx(250.0)
        assert solution.vehicle_flow == []

    def test_model_size(self, optimizer, scenario_data):
        result = optimizer.optimize(scenario_data)

        # 4 lanes x 2 products, one production and one supply variable;
        # 10 balance rows and the factory throughput bound
        assert result.num_variables == 10
        assert result.num_constraints == 11
        assert result.num_integer_vars == 0
        stats = optimizer.last_model.get_model_statistics()
        assert stats['variables_by_kind']['flow'] == 8
        assert stats['variables_by_kind']['production'] == 1
        assert stats['variables_by_kind']['supply'] == 1

    def test_flow_conservation(self, optimizer, scenario_data):
        result = optimizer.optimize(scenario_data)
        model = optimizer.last_model

        assert result.success
        assert model.model.program.max_violation(model.outcome.values) <= 1e-6

    def test_zero_demand_gives_empty_plan(self, optimizer):
        result = optimizer.optimize(to_network(scenario_payload(demand_c1=0, demand_c2=0)))

        assert result.is_optimal()
        assert result.solution.product_flow == []
        assert result.solution.production == []
        assert result.solution.total_cost == 0.0
        assert all(v == pytest.approx(0.0) for v in optimizer.last_model.outcome.values)

    def test_total_cost_non_decreasing_in_demand(self, optimizer):
        totals = [total_for(optimizer, c1, c2) for c1, c2 in [(10, 10), (100, 150), (200, 300)]]
        assert totals == sorted(totals)

    def test_deterministic(self, optimizer):
        first = optimizer.optimize(to_network(scenario_payload()))
        second = optimizer.optimize(to_network(scenario_payload()))

        assert first.solution.to_payload() == second.solution.to_payload()
        assert first.iterations == second.iterations

    def test_excluded_facility_carries_no_flow(self, optimizer):
        payload = scenario_payload()
        payload["facilities"].append({"facility_id": "DC2", "type": "DC", "status": "Exclude"})
        payload["paths"] += [
            {"path_id": "F1-DC2", "from_id": "F1", "to_id": "DC2", "product_cost_per_unit": 0.1},
            {"path_id": "DC2-C1", "from_id": "DC2", "to_id": "C1", "product_cost_per_unit": 0.1},
            {"path_id": "DC2-C2", "from_id": "DC2", "to_id": "C2", "product_cost_per_unit": 0.1},
        ]
        result = optimizer.optimize(to_network(payload))

        assert result.is_optimal()
        assert all("DC2" not in (f.from_id, f.to_id) for f in result.solution.product_flow)
        assert result.solution.total_cost == pytest.approx(4075.0)

    def test_excluded_path_not_used(self, optimizer):
        payload = scenario_payload()
        payload["paths"].append(
            {"path_id": "F1-C1", "from_id": "F1", "to_id": "C1", "product_cost_per_unit": 0.0,
             "include": False}
        )
        result = optimizer.optimize(to_network(payload))

        assert result.solution.total_cost == pytest.approx(4075.0)
        assert FlowKey("F1-C1", "F1", "C1", "FG", "P1") not in optimizer.last_model.values_by_key()


class TestNonOptimalResults:
    """Infeasible, truncated and rejected requests."""

    def test_insufficient_supply_is_infeasible(self, optimizer):
        payload = scenario_payload()
        payload["suppliers"][0]["capacity"] = 100
        result = optimizer.optimize(to_network(payload))

        assert not result.success
        assert result.status == SolveStatus.INFEASIBLE
        assert result.is_infeasible()
        assert result.solution is None
        assert "infeasible" in result.infeasibility_message

    def test_demand_above_throughput_is_infeasible(self, optimizer):
        result = optimizer.optimize(to_network(scenario_payload(demand_c1=1000, demand_c2=1500)))

        assert result.status == SolveStatus.INFEASIBLE
        assert not result.success
        assert result.solution is None
        assert result.objective_value is None

    def test_iteration_cap_reported(self, scenario_data):
        optimizer = NetworkOptimizer(OptimizerConfig(max_iterations=1))
        result = optimizer.optimize(scenario_data)

        assert result.status == SolveStatus.ITERATION_LIMIT
        assert not result.success
        assert not result.is_feasible()
        assert result.iterations == 1

    def test_unresolved_reference_rejected_in_strict_mode(self, optimizer):
        payload = ftl_payload()
        payload["paths"][0]["vehicle_type_id"] = "V9"
        result = optimizer.optimize(to_network(payload))

        assert result.status == SolveStatus.INVALID_DATA
        assert not result.success
        assert result.issues == [
            {"entity": "path", "record_id": "S1-C1", "field": "vehicle_type_id", "missing_id": "V9"}
        ]
        assert "unresolved reference" in result.infeasibility_message

    def test_unresolved_reference_substituted_in_lenient_mode(self, lenient_config):
        payload = ftl_payload()
        payload["paths"][0]["vehicle_type_id"] = "V9"
        result = NetworkOptimizer(lenient_config).optimize(to_network(payload))

        assert result.is_optimal()
        assert any("V9" in w for w in result.warnings)
        trip = result.solution.vehicle_flow[0]
        assert trip.trip_count == 1
        assert trip.cost == pytest.approx(550.0)

    def test_duplicate_path_ids_rejected(self, optimizer):
        payload = ftl_payload()
        payload["paths"].append(dict(payload["paths"][0]))
        result = optimizer.optimize(to_network(payload))

        assert result.status == SolveStatus.INVALID_DATA
        assert "Duplicate path id" in result.infeasibility_message
        assert result.issues == []

    def test_unavailable_solver_reported(self, scenario_data):
        optimizer = NetworkOptimizer(solver_config=create_mock_solver_config(available=False))
        result = optimizer.optimize(scenario_data, OptimizationSettings(solver="cbc"))

        assert result.status == SolveStatus.SOLVER_UNAVAILABLE
        assert not result.success
        assert result.solver_name == "cbc"
        assert result.num_variables == 10


class TestVehicleTrips:
    """FTL lanes solved through the continuous relaxation."""

    def test_trips_cover_flow(self, optimizer, ftl_data):
        result = optimizer.optimize(ftl_data)

        assert result.is_optimal()
        assert result.objective_value == pytest.approx(875.0)
        solution = result.solution
        trip = solution.vehicle_flow[0]
        carried = sum(f.quantity for f in solution.product_flow)
        assert trip.trip_count == 3
        assert trip.vehicle_type == "Truck"
        assert 100 * trip.trip_count >= carried
        assert solution.cost_of("Transport Cost (Trips)") == pytest.approx(750.0)
        assert solution.total_cost == pytest.approx(1000.0)

    def test_min_load_warning(self, optimizer):
        result = optimizer.optimize(to_network(ftl_payload(min_load_ratio=0.9)))

        assert result.success
        assert result.solution.vehicle_flow[0].trip_count == 3
        assert any("minimum load ratio" in w for w in result.warnings)


class TestObjectives:
    """Objective and solver selection."""

    def lane_flows(self, optimizer):
        values = optimizer.last_model.values_by_key()
        return {
            lane: values[FlowKey(lane, "S1", "C1", "FG", "P1")]
            for lane in ("FAST", "SLOW")
        }

    def test_min_cost_takes_cheap_lane(self, optimizer, two_lane_data):
        result = optimizer.optimize(two_lane_data, OptimizationSettings(objective="min_cost"))

        assert result.is_optimal()
        assert self.lane_flows(optimizer) == pytest.approx({"FAST": 0.0, "SLOW": 40.0})
        assert result.solution.total_cost == pytest.approx(40.0)

    def test_min_time_takes_fast_lane(self, optimizer, two_lane_data):
        result = optimizer.optimize(two_lane_data, OptimizationSettings(objective=ObjectiveType.MIN_TIME))

        assert result.is_optimal()
        assert self.lane_flows(optimizer) == pytest.approx({"FAST": 40.0, "SLOW": 0.0})
        # Reported costs stay monetary
        assert result.solution.total_cost == pytest.approx(200.0)

    def test_max_service_reports_unmet_demand(self, optimizer):
        payload = scenario_payload()
        payload["suppliers"][0]["capacity"] = 100
        result = optimizer.optimize(to_network(payload), OptimizationSettings(objective="max_service"))

        assert result.is_optimal()
        unmet = result.solution.unmet_demand
        assert sum(u.quantity for u in unmet) == pytest.approx(150.0)
        assert sum(f.quantity for f in result.solution.product_flow if f.to_id in ("C1", "C2")) == \
            pytest.approx(100.0)
        assert any("could not be served" in w for w in result.warnings)

    def test_min_cost_has_no_unmet_demand(self, optimizer, scenario_data):
        result = optimizer.optimize(scenario_data)
        assert result.solution.unmet_demand == []

    def test_unknown_solver_falls_back(self, optimizer, scenario_data):
        result = optimizer.optimize(scenario_data, OptimizationSettings(solver="quantum"))

        assert result.is_optimal()
        assert result.solver_name == "tableau"
        assert any("Unknown solver 'quantum'" in w for w in result.warnings)


class TestOpeningStock:
    """Inventory on hand above its minimum level supplies demand."""

    def stock_payload(self, initial_level, min_level):
        payload = scenario_payload()
        payload["inventory"] = [{
            "site_id": "DC1",
            "product_id": "FG",
            "period_id": "P1",
            "initial_level": initial_level,
            "min_level": min_level,
        }]
        return payload

    def test_stock_drawn_down_to_min_level(self, optimizer):
        result = optimizer.optimize(to_network(self.stock_payload(80, 30)))
        model = optimizer.last_model

        assert result.is_optimal()
        assert model.model.program.max_violation(model.outcome.values) <= 1e-6
        assert model.values_by_key()[StockKey("DC1", "FG", "P1")] == pytest.approx(50.0)
        assert result.solution.production[0].quantity == pytest.approx(200.0)
        # 50 fewer units produced and moved to DC1 at 10 + 2 + 1 each
        assert result.solution.total_cost == pytest.approx(4075.0 - 50 * 13)

    def test_stock_covering_demand_replaces_production(self, optimizer):
        result = optimizer.optimize(to_network(self.stock_payload(1000, 100)))
        model = optimizer.last_model

        assert result.is_optimal()
        assert model.values_by_key()[StockKey("DC1", "FG", "P1")] == pytest.approx(250.0)
        assert result.solution.production == []
        assert result.solution.total_cost == pytest.approx(100 * 3.0 + 150 * 3.5)

    def test_stock_at_min_level_unused(self, optimizer):
        result = optimizer.optimize(to_network(self.stock_payload(40, 40)))

        assert StockKey("DC1", "FG", "P1") not in optimizer.last_model.values_by_key()
        assert result.solution.total_cost == pytest.approx(4075.0)


class TestRepeatedDemand:
    """A repeated demand record replaces the earlier one."""

    def test_last_record_served_and_reported(self, optimizer):
        payload = scenario_payload()
        payload["demand"].append({"customer_id": "C1", "product_id": "FG", "period_id": "P1", "demand_qty": 40})
        result = optimizer.optimize(to_network(payload))

        assert result.is_optimal()
        delivered = [f.quantity for f in result.solution.product_flow if f.to_id == "C1"]
        assert delivered == [pytest.approx(40.0)]
        assert any("given 2 times" in w for w in result.warnings)
        assert result.metadata['validation']['by_category'] == {'Consistency': 1}


class TestValidationMetadata:
    """Pre-flight validation summary attached to results."""

    def test_summary_attached(self, optimizer, scenario_data):
        result = optimizer.optimize(scenario_data)
        validation = result.metadata['validation']

        assert validation['by_severity']['critical'] == 0
        assert validation['by_severity']['error'] == 0

    def test_issues_do_not_block_solve(self, lenient_config):
        payload = ftl_payload()
        payload["paths"][0]["vehicle_type_id"] = "V9"
        optimizer = NetworkOptimizer(lenient_config)
        result = optimizer.optimize(to_network(payload))

        assert result.success
        assert result.metadata['validation']['total_issues'] > 0
        assert any(issue.id == "REF_001" for issue in optimizer.last_issues)

    def test_validation_can_be_disabled(self, scenario_data):
        result = NetworkOptimizer(validate_data=False).optimize(scenario_data)

        assert result.success
        assert 'validation' not in result.metadata
