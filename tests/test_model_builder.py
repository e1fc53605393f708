"""Tests for NetworkModelBuilder.

Covers variable creation, cost derivation, constraint generation and
unresolved reference handling.
"""

import pytest

from network_optimizer.exceptions import NetworkDataError, UnresolvedReferenceError
from network_optimizer.models import ObjectiveType, Path, VehicleType
from network_optimizer.optimization import (
    ConstraintSense,
    MaxServiceObjective,
    NetworkModelBuilder,
    OptimizerConfig,
    VariableKind,
)
from network_optimizer.optimization.types import (
    FlowKey,
    ProductionKey,
    ShortageKey,
    StockKey,
    SupplyKey,
    TripKey,
)
from tests.fixtures.networks import ftl_payload, scenario_payload, to_network


def build(payload, objective=ObjectiveType.MIN_COST, **config):
    return NetworkModelBuilder(to_network(payload), objective, OptimizerConfig(**config)).build()


class TestVariables:
    """Variable registration."""

    def test_scenario_variable_counts(self, scenario_data):
        model = NetworkModelBuilder(scenario_data).build()
        counts = model.arena.count_by_kind()

        assert counts[VariableKind.FLOW.value] == 8  # 4 lanes x 2 products x 1 period
        assert counts[VariableKind.PRODUCTION.value] == 1  # F1 only produces what its record covers
        assert counts[VariableKind.SUPPLY.value] == 1
        assert counts[VariableKind.TRIP.value] == 0
        assert counts[VariableKind.SHORTAGE.value] == 0
        assert model.program.num_variables == len(model.arena) == 10

    def test_variables_created_in_kind_order(self, scenario_data):
        model = NetworkModelBuilder(scenario_data).build()
        kinds = [v.kind for v in model.arena]
        order = [VariableKind.FLOW, VariableKind.PRODUCTION, VariableKind.SUPPLY]
        assert kinds == sorted(kinds, key=order.index)

    def test_production_uses_record_cost_and_bom(self, scenario_data):
        model = NetworkModelBuilder(scenario_data).build()
        idx = model.arena.index_of(ProductionKey("F1", "FG", "P1"))

        assert idx is not None
        assert model.arena[idx].cost == 10.0
        assert model.boms[idx] == "B1"
        assert model.arena.index_of(ProductionKey("F1", "RAW", "P1")) is None

    def test_factory_without_records_produces_every_product(self):
        payload = scenario_payload()
        payload["production"] = []
        model = build(payload)

        for product in ("RAW", "FG"):
            idx = model.arena.index_of(ProductionKey("F1", product, "P1"))
            assert idx is not None
            assert model.arena[idx].cost == 50.0

    def test_dc_without_records_does_not_produce(self, scenario_data):
        model = NetworkModelBuilder(scenario_data).build()
        assert model.arena.index_of(ProductionKey("DC1", "FG", "P1")) is None

    def test_dc_with_record_produces(self):
        payload = scenario_payload()
        payload["production"].append({"site_id": "DC1", "product_id": "FG", "prod_cost_per_unit": 0})
        model = build(payload)

        idx = model.arena.index_of(ProductionKey("DC1", "FG", "P1"))
        assert idx is not None
        assert model.arena[idx].cost == 0.0

    def test_excluded_record_creates_no_variable(self):
        payload = scenario_payload()
        payload["production"].append({"site_id": "DC1", "product_id": "FG", "include": False})
        model = build(payload)
        assert model.arena.index_of(ProductionKey("DC1", "FG", "P1")) is None

    def test_supply_bounded_by_capacity(self, scenario_data):
        model = NetworkModelBuilder(scenario_data).build()
        idx = model.arena.index_of(SupplyKey("S1", "RAW", "P1"))
        assert model.arena[idx].upper_bound == 5000.0
        assert model.arena[idx].cost == 0.0

    def test_flow_variables_bounded_by_config(self, scenario_data):
        model = NetworkModelBuilder(scenario_data, config=OptimizerConfig(variable_upper_bound=500)).build()
        for variable in model.arena.of_kind(VariableKind.FLOW):
            assert variable.upper_bound == 500

    def test_trip_variables_are_integer(self, ftl_data):
        model = NetworkModelBuilder(ftl_data).build()
        trips = model.arena.of_kind(VariableKind.TRIP)

        assert len(trips) == 1
        assert trips[0].is_integer
        assert trips[0].index in model.program.integer_variables
        assert trips[0].cost == 250.0  # lane 50 + vehicle 200
        assert model.vehicle_names[trips[0].index] == "Truck"
        assert model.trip_loads[trips[0].index].capacity == 100

    def test_stock_variables_from_inventory(self):
        payload = scenario_payload()
        payload["inventory"] = [
            {"site_id": "DC1", "product_id": "FG", "period_id": "P1", "initial_level": 80, "min_level": 30},
            {"site_id": "DC1", "product_id": "RAW", "period_id": "P1", "initial_level": 10, "min_level": 10},
        ]
        model = build(payload)

        idx = model.arena.index_of(StockKey("DC1", "FG", "P1"))
        assert model.arena[idx].upper_bound == 50.0
        assert model.arena.index_of(StockKey("DC1", "RAW", "P1")) is None

    def test_shortage_variables_only_for_max_service(self, scenario_data):
        min_cost = NetworkModelBuilder(scenario_data, ObjectiveType.MIN_COST).build()
        max_service = NetworkModelBuilder(scenario_data, ObjectiveType.MAX_SERVICE).build()

        assert not min_cost.arena.of_kind(VariableKind.SHORTAGE)
        shortages = max_service.arena.of_kind(VariableKind.SHORTAGE)
        assert {v.key for v in shortages} == {ShortageKey("C1", "FG", "P1"), ShortageKey("C2", "FG", "P1")}

    def test_strategy_instance_accepted(self, scenario_data):
        model = NetworkModelBuilder(scenario_data, MaxServiceObjective()).build()
        assert model.objective.objective_type == ObjectiveType.MAX_SERVICE

    def test_unknown_objective_rejected(self, scenario_data):
        with pytest.raises(ValueError, match="Unknown objective"):
            NetworkModelBuilder(scenario_data, "max_profit")


class TestExclusions:
    """Excluded entities contribute nothing."""

    def test_excluded_path_has_no_variables(self):
        payload = scenario_payload()
        payload["paths"][3]["include"] = False
        model = build(payload)

        assert model.arena.index_of(FlowKey("DC1-C2", "DC1", "C2", "FG", "P1")) is None
        lanes = {v.key.path_id for v in model.arena.of_kind(VariableKind.FLOW)}
        assert lanes == {"S1-F1", "F1-DC1", "DC1-C1"}

    def test_path_to_excluded_facility_dropped(self):
        payload = scenario_payload()
        payload["facilities"][1]["status"] = "Exclude"
        model = build(payload)

        flows = model.arena.of_kind(VariableKind.FLOW)
        assert all("DC1" not in (v.key.from_id, v.key.to_id) for v in flows)

    def test_unservable_demand_row_kept(self):
        payload = scenario_payload()
        payload["paths"][3]["include"] = False
        model = build(payload)

        names = [c.name for c in model.program.constraints]
        row = model.program.constraints[names.index("balance[C2|FG|P1]")]
        assert row.is_empty()
        assert row.rhs == 150.0

    def test_empty_rows_skipped(self):
        payload = scenario_payload()
        payload["paths"][3]["include"] = False
        model = build(payload)

        # C2 has no lanes left: its RAW row is empty with zero demand
        names = [c.name for c in model.program.constraints]
        assert "balance[C2|RAW|P1]" not in names
        assert model.skipped_rows == 1


class TestRepeatedRecords:
    """A repeated demand or production record replaces the earlier one."""

    def test_last_demand_record_wins(self):
        payload = scenario_payload()
        payload["demand"].append({"customer_id": "C1", "product_id": "FG", "period_id": "P1", "demand_qty": 40})
        model = build(payload)

        row = next(c for c in model.program.constraints if c.name == "balance[C1|FG|P1]")
        assert row.rhs == 40.0
        assert any("given 2 times" in w and "C1" in w for w in model.warnings)

    def test_last_production_record_wins(self):
        payload = scenario_payload()
        payload["production"].append({
            "site_id": "F1",
            "product_id": "FG",
            "bom_id": "B1",
            "prod_cost_per_unit": 12,
            "max_throughput": 300,
        })
        model = build(payload)

        idx = model.arena.index_of(ProductionKey("F1", "FG", "P1"))
        assert model.arena[idx].cost == 12.0
        rows = [c for c in model.program.constraints if c.name.startswith("prod_max")]
        assert [r.rhs for r in rows] == [300.0]
        assert any("Production of FG at F1" in w for w in model.warnings)

    def test_period_specific_record_is_not_a_repeat(self):
        payload = scenario_payload()
        payload["production"].append(
            {"site_id": "F1", "product_id": "FG", "period_id": "P1", "prod_cost_per_unit": 8}
        )
        model = build(payload)

        idx = model.arena.index_of(ProductionKey("F1", "FG", "P1"))
        assert model.arena[idx].cost == 8.0
        assert model.warnings == []


class TestCosts:
    """Cost and lead-time derivation."""

    @pytest.fixture
    def builder(self, scenario_data):
        builder = NetworkModelBuilder(scenario_data)
        builder.build()
        return builder

    def test_product_based_cost(self, builder):
        assert builder.unit_transport_cost(Path(from_id="A", to_id="B", product_cost_per_unit=2.5)) == 2.5

    def test_product_based_without_cost_is_free(self, builder):
        assert builder.unit_transport_cost(Path(from_id="A", to_id="B")) == 0.0

    def test_fixed_pricing_uses_distance(self, builder):
        path = Path(from_id="A", to_id="B", transport_pricing="Fixed", distance=30, product_cost_per_unit=9)
        assert builder.unit_transport_cost(path) == pytest.approx(15.0)

    def test_fixed_pricing_default_distance(self, builder):
        path = Path(from_id="A", to_id="B", transport_pricing="Fixed")
        assert builder.unit_transport_cost(path) == pytest.approx(5.0)

    def test_transit_days_explicit(self, builder):
        assert builder.transit_days(Path(from_id="A", to_id="B", transit_time_days=3)) == 3

    def test_transit_days_from_speed(self, builder):
        builder.vehicles["V9"] = VehicleType(vehicle_type_id="V9", capacity=10, speed_kmph=40)
        path = Path(from_id="A", to_id="B", vehicle_type_id="V9", distance=480)
        assert builder.transit_days(path) == pytest.approx(0.5)

    def test_transit_days_default(self, builder):
        assert builder.transit_days(Path(from_id="A", to_id="B")) == 1.0


class TestConstraints:
    """Constraint generation."""

    def test_scenario_balance_rows(self, scenario_data):
        model = NetworkModelBuilder(scenario_data).build()
        balance = [c for c in model.program.constraints if c.name.startswith("balance")]

        assert len(balance) == 10  # 5 nodes x 2 products
        assert all(c.sense == ConstraintSense.EQ for c in balance)
        demand_rows = {c.name: c.rhs for c in balance if c.rhs}
        assert demand_rows == {"balance[C1|FG|P1]": 100.0, "balance[C2|FG|P1]": 150.0}

    def test_bom_consumption_in_raw_balance(self, scenario_data):
        model = NetworkModelBuilder(scenario_data).build()
        row = next(c for c in model.program.constraints if c.name == "balance[F1|RAW|P1]")
        production = model.arena.index_of(ProductionKey("F1", "FG", "P1"))
        inbound = model.arena.index_of(FlowKey("S1-F1", "S1", "F1", "RAW", "P1"))

        assert row.coefficients[production] == -1.0
        assert row.coefficients[inbound] == 1.0

    def test_ftl_capacity_and_min_load_rows(self):
        model = build(ftl_payload(min_load_ratio=0.5))
        trip = model.arena.index_of(TripKey("S1-C1", "S1", "C1", "V1", "P1"))
        flow = model.arena.index_of(FlowKey("S1-C1", "S1", "C1", "FG", "P1"))

        capacity = next(c for c in model.program.constraints if c.name.startswith("ftl_capacity"))
        assert capacity.sense == ConstraintSense.LE
        assert capacity.coefficients == {flow: 1.0, trip: -100.0}

        min_load = next(c for c in model.program.constraints if c.name.startswith("ftl_min_load"))
        assert min_load.sense == ConstraintSense.GE
        assert min_load.coefficients == {flow: 1.0, trip: -50.0}

    def test_no_min_load_row_without_ratio(self, ftl_data):
        model = NetworkModelBuilder(ftl_data).build()
        assert not any(c.name.startswith("ftl_min_load") for c in model.program.constraints)

    def test_production_bounds(self):
        payload = scenario_payload()
        payload["production"][0].update({"min_throughput": 20, "max_throughput": 300})
        model = build(payload)

        rows = {c.name.split(":")[0]: c for c in model.program.constraints if c.name.startswith("prod_")}
        assert rows["prod_max"].rhs == 300.0
        assert rows["prod_max"].sense == ConstraintSense.LE
        assert rows["prod_min"].rhs == 20.0
        assert rows["prod_min"].sense == ConstraintSense.GE

    def test_zero_max_throughput_applied(self):
        payload = scenario_payload()
        payload["production"][0]["max_throughput"] = 0
        model = build(payload)

        rows = [c for c in model.program.constraints if c.name.startswith("prod_")]
        assert len(rows) == 1
        assert rows[0].rhs == 0.0

    def test_flow_rule_rows(self):
        payload = scenario_payload()
        payload["flowRules"] = [
            {"rule_id": "R1", "from_id": "DC1", "to_id": "C1", "product_id": "FG", "max_throughput": 80},
        ]
        model = build(payload)
        rule = next(c for c in model.program.constraints if c.name.startswith("rule[R1"))
        flow = model.arena.index_of(FlowKey("DC1-C1", "DC1", "C1", "FG", "P1"))

        assert rule.sense == ConstraintSense.LE
        assert rule.rhs == 80
        assert rule.coefficients == {flow: 1.0}

    def test_periods_derived_when_none_declared(self):
        payload = scenario_payload()
        payload["periods"] = []
        payload["demand"].append({"customer_id": "C1", "product_id": "FG", "period_id": "P2", "demand_qty": 5})
        model = build(payload)
        assert model.period_ids == ["P1", "P2"]


class TestReferences:
    """Strict and lenient handling of unresolved references."""

    def test_strict_mode_raises(self):
        payload = ftl_payload()
        payload["vehicleTypes"] = []
        with pytest.raises(UnresolvedReferenceError) as exc_info:
            build(payload)

        refs = exc_info.value.references
        assert len(refs) == 1
        assert refs[0].entity == "path"
        assert refs[0].field == "vehicle_type_id"
        assert refs[0].missing_id == "V1"

    def test_lenient_mode_uses_default_vehicle(self):
        payload = ftl_payload()
        payload["vehicleTypes"] = []
        model = build(payload, strict_references=False)

        trip = model.arena.of_kind(VariableKind.TRIP)[0]
        assert model.trip_loads[trip.index].capacity == 10_000
        assert trip.cost == 50 + 500
        assert len(model.warnings) == 1
        assert "vehicle_type_id 'V1'" in model.warnings[0]
        assert len(model.unresolved) == 1

    def test_lenient_mode_skips_dangling_path(self):
        payload = scenario_payload()
        payload["paths"].append({"path_id": "GHOST", "from_id": "DC1", "to_id": "NOWHERE"})
        model = build(payload, strict_references=False)

        assert all(v.key.path_id != "GHOST" for v in model.arena.of_kind(VariableKind.FLOW))
        assert any("lane skipped" in w for w in model.warnings)

    def test_duplicate_path_ids_rejected(self):
        payload = scenario_payload()
        payload["paths"].append(dict(payload["paths"][0]))
        with pytest.raises(NetworkDataError, match="Duplicate path id"):
            build(payload)
