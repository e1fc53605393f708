"""Optimizer configuration.

Every bound, fallback and tolerance the model builder, solvers and extractor
use is an explicit field here. Defaults come from constants.py.
"""

from pydantic import BaseModel, ConfigDict, Field

from . import constants as C


class OptimizerConfig(BaseModel):
    """Configuration for building, solving and reporting a network model.

    Example:
        config = OptimizerConfig(max_iterations=500, strict_references=False)
        result = NetworkOptimizer(config).optimize(data, settings)
    """
    # Model bounds
    variable_upper_bound: float = Field(
        default=C.VARIABLE_UPPER_BOUND, gt=0,
        description="Upper bound on every decision variable"
    )

    # Fallbacks
    default_production_cost: float = Field(
        default=C.DEFAULT_PRODUCTION_COST, ge=0,
        description="Unit production cost for factories without a production record"
    )
    default_trip_cost: float = Field(
        default=C.DEFAULT_TRIP_COST, ge=0,
        description="Vehicle trip cost when the vehicle type is unresolved (lenient mode)"
    )
    default_vehicle_capacity: float = Field(
        default=C.DEFAULT_VEHICLE_CAPACITY, gt=0,
        description="Vehicle capacity when the vehicle type is unresolved (lenient mode)"
    )
    cost_per_distance_unit: float = Field(
        default=C.COST_PER_DISTANCE_UNIT, ge=0,
        description="Unit transport cost per distance unit for non product-based pricing"
    )
    default_distance: float = Field(
        default=C.DEFAULT_DISTANCE, ge=0,
        description="Distance assumed when a lane has none"
    )

    # Objective proxies
    default_transit_days: float = Field(
        default=C.DEFAULT_TRANSIT_DAYS, ge=0,
        description="Transit days when a lane has no transit time or speed/distance"
    )
    time_cost_tiebreak: float = Field(
        default=C.TIME_COST_TIEBREAK, ge=0,
        description="Cost weight in the min_time objective"
    )
    shortage_penalty_per_unit: float = Field(
        default=C.SHORTAGE_PENALTY_PER_UNIT, ge=0,
        description="Penalty per unit of unmet demand (max_service)"
    )

    # Solver
    max_iterations: int = Field(
        default=C.MAX_ITERATIONS, gt=0,
        description="Maximum simplex pivots across both phases"
    )
    epsilon: float = Field(
        default=C.PIVOT_TOLERANCE, gt=0,
        description="Numeric tolerance of the tableau solver"
    )
    degenerate_pivot_limit: int = Field(
        default=C.DEGENERATE_PIVOT_LIMIT, gt=0,
        description="Consecutive degenerate pivots before switching to Bland's rule"
    )
    time_limit_seconds: float = Field(
        default=C.DEFAULT_TIME_LIMIT_SECONDS, gt=0,
        description="Time limit for external solvers"
    )

    # Reporting and validation
    display_threshold: float = Field(
        default=C.DISPLAY_THRESHOLD, ge=0,
        description="Minimum value reported in flows, production and trips"
    )
    strict_references: bool = Field(
        default=True,
        description="Reject data with unresolved references instead of substituting defaults"
    )

    model_config = ConfigDict(extra="forbid")
