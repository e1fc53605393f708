"""Build a linear program from network data.

The builder registers decision variables in a VariableArena, records the
monetary cost and lead-time proxy of each variable, and generates the
constraints of the network flow model:

1. Flow balance per (node, product, period):
       inflow - outflow + production + supply + stock - BOM consumption
       (+ shortage) = demand
2. FTL capacity per lane/period: sum(flow) - capacity * trips <= 0
3. FTL minimum load per lane/period: sum(flow) - capacity * ratio * trips >= 0
4. Production bounds: production <= max_throughput, production >= min_throughput
5. Flow rules: lane product flow within [min_throughput, max_throughput]

Variables are created in a fixed order (flows, production, trips, supply,
stock, shortage) so the model and the report are deterministic.

Example:
    builder = NetworkModelBuilder(data, ObjectiveType.MIN_COST, config)
    model = builder.build()
    outcome = TableauSimplexSolver.from_config(config).solve(model.program)
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from ..exceptions import NetworkDataError, UnresolvedReference, UnresolvedReferenceError
from ..models import NetworkData, ObjectiveType, Path, Product, ProductionRecord
from ..validation.references import find_unresolved_references
from .config import OptimizerConfig
from .linear_program import ConstraintSense, LinearProgram
from .objectives import ObjectiveStrategy, get_objective_strategy
from .types import (
    FlowKey,
    NodeID,
    PathID,
    PeriodID,
    ProductID,
    ProductionKey,
    ShortageKey,
    StockKey,
    SupplyKey,
    TripKey,
    VariableArena,
    VehicleTypeID,
)

logger = logging.getLogger(__name__)

#: (node_id, product_id, period_id)
BalanceKey = Tuple[str, str, str]


@dataclass
class TripLoad:
    """Capacity data behind one trip variable.

    Attributes:
        capacity: Units per trip
        min_load_ratio: Minimum average fill per trip
        flow_indices: Flow variables carried by the trips
    """
    capacity: float
    min_load_ratio: float
    flow_indices: List[int]


@dataclass
class NetworkLinearModel:
    """Output of the model builder.

    Attributes:
        program: Linear program handed to a solver
        arena: Registered variables (keys, costs, bounds)
        objective: Strategy that produced the objective vector
        period_ids: Periods the model covers
        trip_loads: Capacity data per trip variable index
        units: Unit of measure per flow/production variable index
        boms: Bill of materials per production variable index
        vehicle_names: Vehicle type name per trip variable index
        warnings: Lenient-mode substitutions and other notes for the caller
        unresolved: Unresolved references found in the data
        skipped_rows: Balance rows skipped because they had no terms and zero demand
    """
    program: LinearProgram
    arena: VariableArena
    objective: ObjectiveStrategy
    period_ids: List[str]
    trip_loads: Dict[int, TripLoad] = field(default_factory=dict)
    units: Dict[int, str] = field(default_factory=dict)
    boms: Dict[int, str] = field(default_factory=dict)
    vehicle_names: Dict[int, str] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)
    unresolved: List[UnresolvedReference] = field(default_factory=list)
    skipped_rows: int = 0

    def statistics(self) -> Dict[str, Any]:
        """Variable and constraint counts."""
        return {
            'num_variables': self.program.num_variables,
            'num_constraints': self.program.num_constraints,
            'num_integer_vars': len(self.program.integer_variables),
            'variables_by_kind': self.arena.count_by_kind(),
            'skipped_rows': self.skipped_rows,
        }


class NetworkModelBuilder:
    """Translate NetworkData into a NetworkLinearModel.

    One builder serves one request; lookups built during build() are
    discarded with it.
    """

    def __init__(
        self,
        data: NetworkData,
        objective: Union[ObjectiveType, str, ObjectiveStrategy] = ObjectiveType.MIN_COST,
        config: Optional[OptimizerConfig] = None,
    ):
        """
        Args:
            data: Network description
            objective: Objective type or strategy instance
            config: Optimizer configuration (defaults if None)
        """
        self.data = data
        self.config = config or OptimizerConfig()
        if isinstance(objective, ObjectiveStrategy):
            self.strategy = objective
        else:
            self.strategy = get_objective_strategy(objective)

    def build(self) -> NetworkLinearModel:
        """Build the linear program.

        Raises:
            UnresolvedReferenceError: Strict mode and the data references
                missing entities
            NetworkDataError: Two included lanes share a path id
        """
        unresolved = find_unresolved_references(self.data)
        if unresolved and self.config.strict_references:
            raise UnresolvedReferenceError(unresolved)

        warnings = []
        for ref in unresolved:
            message = f"{ref.describe()}; {self._fallback_note(ref)}"
            logger.warning(message)
            warnings.append(message)

        self._index_data()
        warnings.extend(self.duplicate_warnings)
        self.arena = VariableArena()
        self._inflow: Dict[BalanceKey, List[int]] = defaultdict(list)
        self._outflow: Dict[BalanceKey, List[int]] = defaultdict(list)
        self._injections: Dict[BalanceKey, List[int]] = defaultdict(list)
        self._consumption: Dict[BalanceKey, List[Tuple[int, float]]] = defaultdict(list)
        self._flows_by_lane: Dict[Tuple[str, str], List[int]] = defaultdict(list)
        self._production_bounds: List[Tuple[int, ProductionRecord]] = []

        model_units: Dict[int, str] = {}
        model_boms: Dict[int, str] = {}
        vehicle_names: Dict[int, str] = {}
        trip_loads: Dict[int, TripLoad] = {}

        self._add_flow_variables(model_units)
        self._add_production_variables(model_units, model_boms)
        self._add_trip_variables(trip_loads, vehicle_names)
        self._add_supply_variables()
        self._add_stock_variables()
        if self.strategy.allows_shortage:
            self._add_shortage_variables()

        program = LinearProgram(
            objective=self.strategy.coefficients(self.arena, self.config),
            upper_bounds=self.arena.upper_bounds,
            integer_variables=set(self.arena.integer_indices),
            maximize=False,
            variable_names=[v.name for v in self.arena],
        )

        skipped = self._add_balance_constraints(program)
        self._add_trip_constraints(program, trip_loads)
        self._add_production_bound_constraints(program)
        self._add_flow_rule_constraints(program)

        model = NetworkLinearModel(
            program=program,
            arena=self.arena,
            objective=self.strategy,
            period_ids=list(self.period_ids),
            trip_loads=trip_loads,
            units=model_units,
            boms=model_boms,
            vehicle_names=vehicle_names,
            warnings=warnings,
            unresolved=unresolved,
            skipped_rows=skipped,
        )
        logger.info(
            f"Built network model ({self.strategy}): {program.num_variables} variables "
            f"{self.arena.count_by_kind()}, {program.num_constraints} constraints, "
            f"{skipped} empty balance rows skipped"
        )
        return model

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _index_data(self) -> None:
        data = self.data
        self.products: List[Product] = list(data.products)
        self.product_by_id: Dict[str, Product] = {p.product_id: p for p in self.products}
        self.period_ids: List[str] = self._resolve_period_ids()
        period_set = set(self.period_ids)

        self.included_nodes = data.included_node_ids()
        included = set(self.included_nodes)
        self.facilities = [f for f in data.facilities if f.is_included]
        facility_ids = {f.facility_id for f in self.facilities}
        self.suppliers = [s for s in data.suppliers if s.include]
        self.vehicles = {v.vehicle_type_id: v for v in data.vehicle_types}

        self.boms: Dict[str, List] = defaultdict(list)
        for line in data.boms:
            self.boms[line.bom_id].append(line)

        self.paths: List[Path] = []
        seen_ids = set()
        excluded = 0
        for path in data.paths:
            if not (path.include and path.from_id in included and path.to_id in included):
                excluded += 1
                continue
            if path.path_id in seen_ids:
                raise NetworkDataError(
                    f"Duplicate path id '{path.path_id}'. Give parallel lanes distinct path_id values."
                )
            seen_ids.add(path.path_id)
            self.paths.append(path)
        if excluded:
            logger.info(f"{excluded} path(s) excluded or attached to excluded nodes")

        self.demand: Dict[BalanceKey, float] = {}
        repeated_demand: Dict[BalanceKey, int] = defaultdict(int)
        dropped = 0
        for d in data.demand:
            if d.customer_id in included and d.product_id in self.product_by_id and d.period_id in period_set:
                key = (d.customer_id, d.product_id, d.period_id)
                if key in self.demand:
                    repeated_demand[key] += 1
                self.demand[key] = d.demand_qty
            elif d.demand_qty > 0:
                dropped += 1
        if dropped:
            logger.info(f"{dropped} demand record(s) ignored (excluded or unknown customer, product or period)")

        # A repeated (site, product, period) record replaces the earlier one, as demand does
        by_site: Dict[str, Dict[Tuple[str, Optional[str]], ProductionRecord]] = defaultdict(dict)
        repeated_production: Dict[Tuple[str, str, Optional[str]], int] = defaultdict(int)
        for record in data.production:
            if (
                record.include
                and record.site_id in facility_ids
                and record.product_id in self.product_by_id
                and (record.period_id is None or record.period_id in period_set)
            ):
                key = (record.product_id, record.period_id)
                if key in by_site[record.site_id]:
                    repeated_production[(record.site_id,) + key] += 1
                by_site[record.site_id][key] = record
        self.records_by_site: Dict[str, List[ProductionRecord]] = {
            site_id: list(records.values()) for site_id, records in by_site.items()
        }

        self.duplicate_warnings: List[str] = []
        for (customer_id, product_id, period), count in repeated_demand.items():
            self.duplicate_warnings.append(
                f"Demand for {product_id} at {customer_id} in period {period} is given "
                f"{count + 1} times; the last record ({self.demand[(customer_id, product_id, period)]:g}) is used"
            )
        for (site_id, product_id, period), count in repeated_production.items():
            self.duplicate_warnings.append(
                f"Production of {product_id} at {site_id} for period {period or 'all'} is given "
                f"{count + 1} times; the last record is used"
            )
        for message in self.duplicate_warnings:
            logger.warning(message)

    def _resolve_period_ids(self) -> List[str]:
        """Declared periods, or the periods referenced by records when none are declared."""
        source = [p.period_id for p in self.data.periods]
        if not source:
            source = [d.period_id for d in self.data.demand]
            source += [r.period_id for r in self.data.production if r.period_id]
            source += [i.period_id for i in self.data.inventory]
            if source:
                logger.info("No periods declared; using periods referenced by demand and production")
        return list(dict.fromkeys(source))

    def _fallback_note(self, ref: UnresolvedReference) -> str:
        if ref.entity == "path" and ref.field == "vehicle_type_id":
            return (
                f"default capacity {self.config.default_vehicle_capacity:g} and "
                f"trip cost {self.config.default_trip_cost:g} used"
            )
        if ref.entity == "path":
            return "lane skipped"
        if ref.field == "bom_id":
            return "bill of materials ignored"
        return "record skipped"

    # ------------------------------------------------------------------
    # Cost and lead-time derivation
    # ------------------------------------------------------------------

    def unit_transport_cost(self, path: Path) -> float:
        """Per-unit transport cost of a lane.

        Product-based pricing uses product_cost_per_unit; otherwise the
        distance-derived fallback applies.
        """
        if path.uses_product_pricing():
            return path.product_cost_per_unit or 0.0
        distance = path.distance or self.config.default_distance
        return distance * self.config.cost_per_distance_unit

    def transit_days(self, path: Path) -> float:
        """Lead-time proxy of a lane, in days."""
        if path.transit_time_days is not None:
            return path.transit_time_days
        vehicle = self.vehicles.get(path.vehicle_type_id) if path.vehicle_type_id else None
        if path.distance and vehicle is not None and vehicle.speed_kmph:
            return path.distance / vehicle.speed_kmph / 24.0
        return self.config.default_transit_days

    @staticmethod
    def _find_record(
        records: List[ProductionRecord], product_id: str, period_id: str
    ) -> Optional[ProductionRecord]:
        """Record for a product/period, preferring a period-specific one."""
        fallback = None
        for record in records:
            if record.product_id != product_id:
                continue
            if record.period_id == period_id:
                return record
            if record.period_id is None and fallback is None:
                fallback = record
        return fallback

    # ------------------------------------------------------------------
    # Variables
    # ------------------------------------------------------------------

    def _add_flow_variables(self, units: Dict[int, str]) -> None:
        ub = self.config.variable_upper_bound
        for path in self.paths:
            cost = self.unit_transport_cost(path)
            lead = self.transit_days(path)
            for product in self.products:
                for period in self.period_ids:
                    key = FlowKey(
                        PathID(path.path_id), NodeID(path.from_id), NodeID(path.to_id),
                        ProductID(product.product_id), PeriodID(period),
                    )
                    idx = self.arena.add(key, cost=cost, upper_bound=ub, lead_time=lead)
                    self._inflow[(path.to_id, product.product_id, period)].append(idx)
                    self._outflow[(path.from_id, product.product_id, period)].append(idx)
                    self._flows_by_lane[(path.path_id, period)].append(idx)
                    units[idx] = product.uom

    def _add_production_variables(self, units: Dict[int, str], boms: Dict[int, str]) -> None:
        """Production variables for factories and sites with production records.

        A site with records produces only what its records cover. A factory
        without records may produce every product at the default cost.
        """
        ub = self.config.variable_upper_bound
        for facility in self.facilities:
            site_id = facility.facility_id
            records = self.records_by_site.get(site_id, [])
            if not records and not facility.is_factory():
                continue
            for product in self.products:
                for period in self.period_ids:
                    record = None
                    if records:
                        record = self._find_record(records, product.product_id, period)
                        if record is None:
                            continue

                    if record is not None and record.prod_cost_per_unit is not None:
                        cost = record.prod_cost_per_unit
                    else:
                        cost = self.config.default_production_cost
                    lead = (record.prod_time_per_unit_hr or 0.0) / 24.0 if record else 0.0

                    key = ProductionKey(NodeID(site_id), ProductID(product.product_id), PeriodID(period))
                    idx = self.arena.add(key, cost=cost, upper_bound=ub, lead_time=lead)
                    self._injections[(site_id, product.product_id, period)].append(idx)
                    units[idx] = record.uom if record else product.uom
                    if record is not None:
                        self._production_bounds.append((idx, record))

                    bom_id = (record.bom_id if record and record.bom_id else None) or product.bom_id
                    lines = [
                        line for line in self.boms.get(bom_id, [])
                        if line.end_product_id == product.product_id
                        and line.raw_product_id in self.product_by_id
                    ] if bom_id else []
                    if lines:
                        boms[idx] = bom_id
                        for line in lines:
                            self._consumption[(site_id, line.raw_product_id, period)].append(
                                (idx, line.consumption_ratio)
                            )

    def _add_trip_variables(self, trip_loads: Dict[int, TripLoad], names: Dict[int, str]) -> None:
        ub = self.config.variable_upper_bound
        for path in self.paths:
            if not path.is_ftl():
                continue
            vehicle = self.vehicles.get(path.vehicle_type_id) if path.vehicle_type_id else None
            if vehicle is not None:
                capacity = vehicle.capacity
                trip_cost = path.fixed_cost + vehicle.fixed_cost_per_trip
                name = vehicle.display_name
            else:
                capacity = self.config.default_vehicle_capacity
                trip_cost = path.fixed_cost + self.config.default_trip_cost
                name = path.vehicle_type_id or "unassigned"

            for period in self.period_ids:
                key = TripKey(
                    PathID(path.path_id), NodeID(path.from_id), NodeID(path.to_id),
                    VehicleTypeID(path.vehicle_type_id or ""), PeriodID(period),
                )
                idx = self.arena.add(key, cost=trip_cost, upper_bound=ub, is_integer=True)
                trip_loads[idx] = TripLoad(
                    capacity=capacity,
                    min_load_ratio=path.min_load_ratio,
                    flow_indices=list(self._flows_by_lane[(path.path_id, period)]),
                )
                names[idx] = name

    def _add_supply_variables(self) -> None:
        ub = self.config.variable_upper_bound
        for supplier in self.suppliers:
            if supplier.product_id not in self.product_by_id:
                continue
            upper = ub if supplier.capacity is None else min(ub, supplier.capacity)
            for period in self.period_ids:
                key = SupplyKey(NodeID(supplier.supplier_id), ProductID(supplier.product_id), PeriodID(period))
                idx = self.arena.add(key, cost=0.0, upper_bound=upper)
                self._injections[(supplier.supplier_id, supplier.product_id, period)].append(idx)

    def _add_stock_variables(self) -> None:
        facility_ids = {f.facility_id for f in self.facilities}
        period_set = set(self.period_ids)
        available: Dict[BalanceKey, float] = defaultdict(float)
        for item in self.data.inventory:
            if (
                item.site_id in facility_ids
                and item.product_id in self.product_by_id
                and item.period_id in period_set
            ):
                available[(item.site_id, item.product_id, item.period_id)] += item.available

        ub = self.config.variable_upper_bound
        for (site_id, product_id, period), quantity in available.items():
            if quantity <= 0:
                continue
            key = StockKey(NodeID(site_id), ProductID(product_id), PeriodID(period))
            idx = self.arena.add(key, cost=0.0, upper_bound=min(ub, quantity))
            self._injections[(site_id, product_id, period)].append(idx)

    def _add_shortage_variables(self) -> None:
        for (customer_id, product_id, period), quantity in self.demand.items():
            if quantity <= 0:
                continue
            key = ShortageKey(NodeID(customer_id), ProductID(product_id), PeriodID(period))
            idx = self.arena.add(key, cost=0.0, upper_bound=quantity)
            self._injections[(customer_id, product_id, period)].append(idx)

    # ------------------------------------------------------------------
    # Constraints
    # ------------------------------------------------------------------

    def _add_balance_constraints(self, program: LinearProgram) -> int:
        """Flow balance rows. Returns the number of empty rows skipped.

        Rows without terms but with demand are kept so unservable demand
        makes the program infeasible.
        """
        skipped = 0
        for node_id in self.included_nodes:
            for product in self.products:
                for period in self.period_ids:
                    key = (node_id, product.product_id, period)
                    coefficients: Dict[int, float] = defaultdict(float)
                    for idx in self._inflow.get(key, ()):
                        coefficients[idx] += 1.0
                    for idx in self._outflow.get(key, ()):
                        coefficients[idx] -= 1.0
                    for idx in self._injections.get(key, ()):
                        coefficients[idx] += 1.0
                    for idx, ratio in self._consumption.get(key, ()):
                        coefficients[idx] -= ratio
                    coefficients = {j: c for j, c in coefficients.items() if c != 0.0}

                    rhs = self.demand.get(key, 0.0)
                    if not coefficients and rhs == 0.0:
                        skipped += 1
                        continue
                    program.add_constraint(
                        f"balance[{node_id}|{product.product_id}|{period}]",
                        coefficients, ConstraintSense.EQ, rhs,
                    )
        logger.debug(f"Skipped {skipped} empty balance rows")
        return skipped

    def _add_trip_constraints(self, program: LinearProgram, trip_loads: Dict[int, TripLoad]) -> None:
        for idx, load in trip_loads.items():
            label = self.arena[idx].key.label()
            coefficients = {f: 1.0 for f in load.flow_indices}
            coefficients[idx] = -load.capacity
            program.add_constraint(f"ftl_capacity:{label}", coefficients, ConstraintSense.LE, 0.0)

            if load.min_load_ratio > 0:
                coefficients = {f: 1.0 for f in load.flow_indices}
                coefficients[idx] = -load.capacity * load.min_load_ratio
                program.add_constraint(f"ftl_min_load:{label}", coefficients, ConstraintSense.GE, 0.0)

    def _add_production_bound_constraints(self, program: LinearProgram) -> None:
        for idx, record in self._production_bounds:
            label = self.arena[idx].key.label()
            if record.max_throughput is not None:
                program.add_constraint(
                    f"prod_max:{label}", {idx: 1.0}, ConstraintSense.LE, record.max_throughput
                )
            if record.min_throughput:
                program.add_constraint(
                    f"prod_min:{label}", {idx: 1.0}, ConstraintSense.GE, record.min_throughput
                )

    def _add_flow_rule_constraints(self, program: LinearProgram) -> None:
        for rule in self.data.flow_rules:
            if rule.product_id not in self.product_by_id:
                continue
            lanes = [p for p in self.paths if p.from_id == rule.from_id and p.to_id == rule.to_id]
            for period in self.period_ids:
                if not rule.applies_to(period):
                    continue
                coefficients = {}
                for path in lanes:
                    idx = self.arena.index_of(FlowKey(
                        PathID(path.path_id), NodeID(path.from_id), NodeID(path.to_id),
                        ProductID(rule.product_id), PeriodID(period),
                    ))
                    if idx is not None:
                        coefficients[idx] = 1.0
                name = f"rule[{rule.record_id}|{period}]"
                if rule.min_throughput:
                    program.add_constraint(f"{name}:min", coefficients, ConstraintSense.GE, rule.min_throughput)
                if rule.max_throughput is not None:
                    program.add_constraint(f"{name}:max", coefficients, ConstraintSense.LE, rule.max_throughput)
