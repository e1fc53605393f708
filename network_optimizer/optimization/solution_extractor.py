"""Solution extraction for network flow models.

Maps solver values back onto flows, production, vehicle trips and unmet
demand using the variable keys in the arena, and aggregates the cost summary.
Costs are taken from the arena, the same values the objective was built from.

Trip counts from the tableau solver come from the continuous relaxation.
They are rounded up so capacity x trip_count always covers the reported
flow; a rounded count that leaves a lane below its minimum load ratio is
reported as a warning.
"""

import logging
import math
from typing import List, Optional, Sequence

from ..costs.cost_breakdown import TotalCostBreakdown
from . import constants as C
from .config import OptimizerConfig
from .linear_program import SolverOutcome
from .model_builder import NetworkLinearModel
from .result_schema import (
    CostSummaryEntry,
    OptimizationSolution,
    ProductFlowResult,
    ProductionResult,
    UnmetDemandResult,
    VehicleFlowResult,
)
from .types import VariableKind

logger = logging.getLogger(__name__)


class SolutionExtractor:
    """Build an OptimizationSolution from solver values."""

    def __init__(self, model: NetworkLinearModel, config: Optional[OptimizerConfig] = None):
        self.model = model
        self.config = config or OptimizerConfig()

    def round_trips(self, value: float) -> int:
        """Round a trip count up to a whole number of trips."""
        return max(0, math.ceil(value - self.config.epsilon))

    def cost_breakdown(self, values: Sequence[float]) -> TotalCostBreakdown:
        """Cost totals of a solution by category, with trips rounded up.

        extract() takes its cost summary from here.
        """
        breakdown = TotalCostBreakdown()
        threshold = self.config.display_threshold
        for variable in self.model.arena:
            value = values[variable.index]
            if value <= threshold:
                continue
            key = variable.key
            if variable.kind == VariableKind.FLOW:
                breakdown.transport.add(key.path_id, value, value * variable.cost)
            elif variable.kind == VariableKind.PRODUCTION:
                breakdown.production.add(key.site_id, value, value * variable.cost)
            elif variable.kind == VariableKind.TRIP:
                trips = self.round_trips(value)
                breakdown.trips.add(key.path_id, trips, trips * variable.cost)
        return breakdown

    def extract(
        self,
        outcome: SolverOutcome,
        extra_warnings: Optional[List[str]] = None,
    ) -> OptimizationSolution:
        """Translate a feasible solver outcome into domain records.

        Args:
            outcome: Feasible solver outcome
            extra_warnings: Additional warnings to report

        Returns:
            OptimizationSolution (validated)

        Raises:
            ValueError: If the outcome is not feasible
        """
        if not outcome.feasible:
            raise ValueError(f"Cannot extract a solution from a {outcome.status.value} outcome")

        values = outcome.values
        threshold = self.config.display_threshold
        decimals = C.REPORT_DECIMALS
        model = self.model

        warnings = list(model.warnings)
        if outcome.message:
            warnings.append(outcome.message)
        warnings.extend(extra_warnings or [])

        breakdown = self.cost_breakdown(values)
        product_flow: List[ProductFlowResult] = []
        production: List[ProductionResult] = []
        vehicle_flow: List[VehicleFlowResult] = []
        unmet_demand: List[UnmetDemandResult] = []

        for variable in model.arena:
            value = values[variable.index]
            if value <= threshold:
                continue
            key = variable.key
            idx = variable.index

            if variable.kind == VariableKind.FLOW:
                cost = value * variable.cost
                product_flow.append(ProductFlowResult(
                    from_id=key.from_id,
                    to_id=key.to_id,
                    product=key.product_id,
                    quantity=round(value, decimals),
                    unit=model.units.get(idx, "units"),
                    period=key.period_id,
                    cost=round(cost, decimals),
                ))

            elif variable.kind == VariableKind.PRODUCTION:
                cost = value * variable.cost
                production.append(ProductionResult(
                    site=key.site_id,
                    product=key.product_id,
                    bom=model.boms.get(idx, "-"),
                    quantity=round(value, decimals),
                    unit=model.units.get(idx, "units"),
                    cost=round(cost, decimals),
                    period=key.period_id,
                ))

            elif variable.kind == VariableKind.TRIP:
                trips = self.round_trips(value)
                cost = trips * variable.cost
                vehicle_flow.append(VehicleFlowResult(
                    from_id=key.from_id,
                    to_id=key.to_id,
                    vehicle_type=model.vehicle_names.get(idx, key.vehicle_type_id),
                    trip_count=trips,
                    period=key.period_id,
                    cost=round(cost, decimals),
                ))
                warning = self._check_min_load(idx, trips, values)
                if warning:
                    warnings.append(warning)

            elif variable.kind == VariableKind.SHORTAGE:
                unmet_demand.append(UnmetDemandResult(
                    customer=key.customer_id,
                    product=key.product_id,
                    period=key.period_id,
                    quantity=round(value, decimals),
                ))

        if unmet_demand:
            total_unmet = sum(u.quantity for u in unmet_demand)
            warnings.append(f"{total_unmet:,.2f} units of demand could not be served")

        logger.info(
            f"Extracted {len(product_flow)} flows, {len(production)} production records, "
            f"{len(vehicle_flow)} vehicle flows; {breakdown.transport}; {breakdown.trips}; "
            f"{breakdown.production}"
        )

        return OptimizationSolution(
            product_flow=product_flow,
            production=production,
            vehicle_flow=vehicle_flow,
            cost_summary=[CostSummaryEntry(**row) for row in breakdown.to_summary_rows(decimals)],
            unmet_demand=unmet_demand,
            status=outcome.status.value,
            objective_value=outcome.objective_value,
            iterations=outcome.iterations,
            solver=outcome.solver_name,
            warnings=warnings,
        )

    def _check_min_load(self, trip_index: int, trips: int, values: Sequence[float]) -> Optional[str]:
        load = self.model.trip_loads.get(trip_index)
        if load is None or load.min_load_ratio <= 0 or trips == 0:
            return None
        carried = sum(values[f] for f in load.flow_indices)
        required = load.capacity * load.min_load_ratio * trips
        if carried + self.config.epsilon >= required:
            return None
        key = self.model.arena[trip_index].key
        return (
            f"Lane {key.path_id} in period {key.period_id}: {carried:,.2f} units on "
            f"{trips} trip(s) is below the minimum load ratio {load.min_load_ratio:.0%}"
        )
